"""Core analytical components for the volume profile predictor."""

from volume_predictor.core.config import (
    VolumeProfileConfig,
    build_config,
    configure_logging,
    load_config_from_file,
    load_config_from_mapping,
    load_environment,
)
from volume_predictor.core.diagnostics import (
    CollectingDiagnostics,
    DiagnosticEvent,
    DiagnosticsSink,
    LoggingDiagnostics,
)
from volume_predictor.core.evaluation import evaluate_walk_forward, realized_profile
from volume_predictor.core.exceptions import BinAlignmentError, ConfigurationError
from volume_predictor.core.fields import Field
from volume_predictor.core.modeling import (
    PROFILE_SCALE,
    PCADayByDayPredictor,
    PCAVolumeProfilePredictor,
    VolumeProfile,
    normalize_profile,
)
from volume_predictor.core.observations import daily_vectors, normalize_symbols
from volume_predictor.core.sanitizers import (
    NoOpSanitizer,
    TrainingSanitizer,
    VolumeSanitizer,
    clean_outliers,
    cut_head_and_tail,
)
from volume_predictor.core.sessions import (
    InstantGenerator,
    SessionInstantGenerator,
)

__all__ = [
    "BinAlignmentError",
    "CollectingDiagnostics",
    "ConfigurationError",
    "DiagnosticEvent",
    "DiagnosticsSink",
    "Field",
    "InstantGenerator",
    "LoggingDiagnostics",
    "NoOpSanitizer",
    "PCADayByDayPredictor",
    "PCAVolumeProfilePredictor",
    "PROFILE_SCALE",
    "SessionInstantGenerator",
    "TrainingSanitizer",
    "VolumeProfile",
    "VolumeProfileConfig",
    "VolumeSanitizer",
    "build_config",
    "clean_outliers",
    "configure_logging",
    "cut_head_and_tail",
    "daily_vectors",
    "evaluate_walk_forward",
    "load_config_from_file",
    "load_config_from_mapping",
    "load_environment",
    "normalize_profile",
    "normalize_symbols",
    "realized_profile",
]
