"""Configuration utilities for the volume profile predictor package."""

from __future__ import annotations

import json
import logging
import os

from dataclasses import dataclass, field, fields
from pathlib import Path

from typing import Any, Iterable, Mapping, Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .modeling.volume_profile import ZERO_SUM_POLICIES
from .observations import normalize_symbols
from .sessions import SessionInstantGenerator

ENV_PREFIX = "VOLUME_PREDICTOR_"

DEFAULT_MINIMUM_VARIANCE = 0.95
DEFAULT_SESSION_OPEN = "09:00"
DEFAULT_SESSION_CLOSE = "17:30"
DEFAULT_BIN_MINUTES = 5
DEFAULT_ZERO_SUM_POLICY = "nan"
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
    )


@dataclass
class VolumeProfileConfig:
    """Runtime configuration for :class:`PCAVolumeProfilePredictor`."""

    symbols: tuple[str, ...]
    minimum_variance: float = DEFAULT_MINIMUM_VARIANCE
    ignore_head: int = 0
    ignore_tail: int = 0
    session_open: str = DEFAULT_SESSION_OPEN
    session_close: str = DEFAULT_SESSION_CLOSE
    bin_minutes: int = DEFAULT_BIN_MINUTES
    timezone: Optional[str] = None
    window_days: Optional[int] = None
    zero_sum_policy: str = DEFAULT_ZERO_SUM_POLICY
    log_level: str = DEFAULT_LOG_LEVEL
    extras: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.symbols = normalize_symbols(self.symbols)
        self.minimum_variance = float(self.minimum_variance)
        if not 0.0 < self.minimum_variance <= 1.0:
            raise ConfigurationError("minimum_variance must be in (0, 1].")
        self.ignore_head = int(self.ignore_head)
        self.ignore_tail = int(self.ignore_tail)
        if self.ignore_head < 0 or self.ignore_tail < 0:
            raise ConfigurationError("ignore_head and ignore_tail must be non-negative.")
        self.bin_minutes = int(self.bin_minutes)
        if self.window_days is not None:
            self.window_days = int(self.window_days)
            if self.window_days < 1:
                raise ConfigurationError("window_days must be at least 1 when provided.")
        self.zero_sum_policy = str(self.zero_sum_policy).strip().lower()
        if self.zero_sum_policy not in ZERO_SUM_POLICIES:
            raise ConfigurationError(
                f"Unknown zero_sum_policy '{self.zero_sum_policy}'."
            )
        self.timezone = (str(self.timezone).strip() or None) if self.timezone else None
        self.log_level = str(self.log_level).strip().upper() or DEFAULT_LOG_LEVEL
        # Fail on an invalid session now rather than at first prediction.
        self.instant_generator()

    def instant_generator(self) -> SessionInstantGenerator:
        return SessionInstantGenerator(
            self.session_open,
            self.session_close,
            self.bin_minutes,
            timezone=self.timezone,
        )

    def to_dict(self) -> dict[str, Any]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


def load_environment() -> None:
    """Load configuration from an optional ``.env`` file."""

    load_dotenv()


def _env(name: str) -> Optional[str]:
    value = os.getenv(f"{ENV_PREFIX}{name}")
    if value is None or not value.strip():
        return None
    return value.strip()


def _coerce_optional_int(value: Optional[object], name: str) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be an integer.") from exc


def _coerce_float(value: object, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a number.") from exc


def build_config(
    symbols: Optional[Iterable[str] | str] = None,
    minimum_variance: Optional[float] = None,
    ignore_head: Optional[int] = None,
    ignore_tail: Optional[int] = None,
    session_open: Optional[str] = None,
    session_close: Optional[str] = None,
    bin_minutes: Optional[int] = None,
    timezone: Optional[str] = None,
    window_days: Optional[int] = None,
    zero_sum_policy: Optional[str] = None,
    log_level: Optional[str] = None,
) -> VolumeProfileConfig:
    """Build a :class:`VolumeProfileConfig` from arguments and the environment.

    Explicit arguments win over ``VOLUME_PREDICTOR_*`` environment variables,
    which win over the defaults.
    """

    load_environment()

    symbols_value = symbols if symbols is not None else _env("SYMBOLS")
    variance_value = (
        minimum_variance
        if minimum_variance is not None
        else _env("MINIMUM_VARIANCE") or DEFAULT_MINIMUM_VARIANCE
    )
    head_value = ignore_head if ignore_head is not None else _env("IGNORE_HEAD") or 0
    tail_value = ignore_tail if ignore_tail is not None else _env("IGNORE_TAIL") or 0
    bin_value = bin_minutes if bin_minutes is not None else _env("BIN_MINUTES")
    window_value = window_days if window_days is not None else _env("WINDOW_DAYS")

    return VolumeProfileConfig(
        symbols=normalize_symbols(symbols_value),
        minimum_variance=_coerce_float(variance_value, "minimum_variance"),
        ignore_head=_coerce_optional_int(head_value, "ignore_head") or 0,
        ignore_tail=_coerce_optional_int(tail_value, "ignore_tail") or 0,
        session_open=session_open or _env("SESSION_OPEN") or DEFAULT_SESSION_OPEN,
        session_close=session_close or _env("SESSION_CLOSE") or DEFAULT_SESSION_CLOSE,
        bin_minutes=_coerce_optional_int(bin_value, "bin_minutes") or DEFAULT_BIN_MINUTES,
        timezone=timezone or _env("TIMEZONE"),
        window_days=_coerce_optional_int(window_value, "window_days"),
        zero_sum_policy=zero_sum_policy or _env("ZERO_SUM_POLICY") or DEFAULT_ZERO_SUM_POLICY,
        log_level=log_level or _env("LOG_LEVEL") or DEFAULT_LOG_LEVEL,
    )


def load_config_from_mapping(payload: Mapping[str, Any]) -> VolumeProfileConfig:
    """Create a :class:`VolumeProfileConfig` from a mapping (JSON/YAML)."""

    if "symbols" not in payload:
        raise KeyError("Configuration mapping must include a 'symbols' value.")

    load_environment()

    known_fields = {item.name for item in fields(VolumeProfileConfig)} - {"extras"}
    data: dict[str, Any] = {
        key: value for key, value in payload.items() if key in known_fields
    }
    data["extras"] = {
        key: value for key, value in payload.items() if key not in known_fields
    }
    return VolumeProfileConfig(**data)


def load_config_from_file(path: str | Path) -> VolumeProfileConfig:
    """Load configuration from a JSON or YAML file."""

    resolved = Path(path).expanduser().resolve()
    with resolved.open("r", encoding="utf-8") as handle:
        if resolved.suffix.lower() in {".yaml", ".yml"}:
            try:
                import yaml  # type: ignore[import-not-found]
            except ImportError as exc:  # pragma: no cover - optional dependency
                raise RuntimeError(
                    "PyYAML is required to load YAML configuration files."
                ) from exc
            payload = yaml.safe_load(handle) or {}
        else:
            payload = json.load(handle)

    if not isinstance(payload, Mapping):
        raise TypeError("Configuration file must define a mapping of values.")

    return load_config_from_mapping(payload)


__all__ = [
    "ENV_PREFIX",
    "VolumeProfileConfig",
    "build_config",
    "configure_logging",
    "load_config_from_file",
    "load_config_from_mapping",
    "load_environment",
]
