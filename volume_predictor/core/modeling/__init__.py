"""Modeling package exposing the day-by-day and volume profile predictors."""

from .day_by_day import PCADayByDayPredictor
from .profile import VolumeProfile
from .volume_profile import (
    PROFILE_SCALE,
    ZERO_SUM_POLICIES,
    PCAVolumeProfilePredictor,
    normalize_profile,
)

__all__ = [
    "PCADayByDayPredictor",
    "PCAVolumeProfilePredictor",
    "PROFILE_SCALE",
    "VolumeProfile",
    "ZERO_SUM_POLICIES",
    "normalize_profile",
]
