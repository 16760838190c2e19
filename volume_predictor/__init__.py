"""Intraday volume profile forecasting for the typical stock of a market."""

from volume_predictor.core import (
    CollectingDiagnostics,
    PCADayByDayPredictor,
    PCAVolumeProfilePredictor,
    SessionInstantGenerator,
    VolumeProfile,
    VolumeProfileConfig,
    build_config,
    configure_logging,
    normalize_profile,
)

__all__ = [
    "CollectingDiagnostics",
    "PCADayByDayPredictor",
    "PCAVolumeProfilePredictor",
    "SessionInstantGenerator",
    "VolumeProfile",
    "VolumeProfileConfig",
    "build_config",
    "configure_logging",
    "normalize_profile",
]
