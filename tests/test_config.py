"""Tests for configuration helpers."""

from __future__ import annotations

import json
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from volume_predictor.core import config as config_module
from volume_predictor.core.config import (
    VolumeProfileConfig,
    build_config,
    load_config_from_file,
    load_config_from_mapping,
)
from volume_predictor.core.exceptions import ConfigurationError
from volume_predictor.core.modeling import ZERO_SUM_POLICIES, PCAVolumeProfilePredictor

ENV_NAMES = (
    "SYMBOLS",
    "MINIMUM_VARIANCE",
    "IGNORE_HEAD",
    "IGNORE_TAIL",
    "SESSION_OPEN",
    "SESSION_CLOSE",
    "BIN_MINUTES",
    "TIMEZONE",
    "WINDOW_DAYS",
    "ZERO_SUM_POLICY",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch):
    monkeypatch.setattr(config_module, "load_dotenv", lambda *args, **kwargs: False)
    for name in ENV_NAMES:
        monkeypatch.delenv(f"VOLUME_PREDICTOR_{name}", raising=False)


def make_config(**overrides):
    params = {"symbols": ("AAPL", "MSFT")}
    params.update(overrides)
    return VolumeProfileConfig(**params)


def test_defaults_are_applied():
    config = make_config()

    assert config.minimum_variance == pytest.approx(0.95)
    assert (config.ignore_head, config.ignore_tail) == (0, 0)
    assert config.zero_sum_policy == "nan"
    assert config.instant_generator().bin_count() == 102


def test_symbols_are_normalized():
    config = make_config(symbols=["msft", "aapl", "MSFT"])

    assert config.symbols == ("AAPL", "MSFT")


@pytest.mark.parametrize(
    "overrides",
    [
        {"symbols": ()},
        {"minimum_variance": 0.0},
        {"ignore_head": -1},
        {"ignore_tail": -3},
        {"window_days": 0},
        {"zero_sum_policy": "mean"},
        {"session_open": "18:00"},
        {"bin_minutes": 7},
    ],
)
def test_invalid_settings_fail_fast(overrides):
    with pytest.raises(ConfigurationError):
        make_config(**overrides)


@pytest.mark.parametrize("policy", ZERO_SUM_POLICIES)
def test_every_predictor_zero_sum_policy_is_accepted(policy):
    config = make_config(zero_sum_policy=f" {policy.upper()} ")

    assert config.zero_sum_policy == policy
    assert PCAVolumeProfilePredictor.from_config(config).zero_sum_policy == policy


def test_build_config_reads_environment(monkeypatch):
    monkeypatch.setenv("VOLUME_PREDICTOR_SYMBOLS", "sap, bmw")
    monkeypatch.setenv("VOLUME_PREDICTOR_MINIMUM_VARIANCE", "0.8")
    monkeypatch.setenv("VOLUME_PREDICTOR_IGNORE_HEAD", "1")
    monkeypatch.setenv("VOLUME_PREDICTOR_IGNORE_TAIL", "2")
    monkeypatch.setenv("VOLUME_PREDICTOR_BIN_MINUTES", "15")
    monkeypatch.setenv("VOLUME_PREDICTOR_ZERO_SUM_POLICY", "uniform")

    config = build_config()

    assert config.symbols == ("BMW", "SAP")
    assert config.minimum_variance == pytest.approx(0.8)
    assert (config.ignore_head, config.ignore_tail) == (1, 2)
    assert config.bin_minutes == 15
    assert config.zero_sum_policy == "uniform"


def test_build_config_arguments_override_environment(monkeypatch):
    monkeypatch.setenv("VOLUME_PREDICTOR_SYMBOLS", "sap")
    monkeypatch.setenv("VOLUME_PREDICTOR_IGNORE_HEAD", "4")

    config = build_config(symbols=["ibm"], ignore_head=0, window_days=10)

    assert config.symbols == ("IBM",)
    assert config.ignore_head == 0
    assert config.window_days == 10


def test_build_config_requires_symbols():
    with pytest.raises(ConfigurationError):
        build_config()


def test_build_config_rejects_non_numeric_environment(monkeypatch):
    monkeypatch.setenv("VOLUME_PREDICTOR_SYMBOLS", "sap")
    monkeypatch.setenv("VOLUME_PREDICTOR_IGNORE_TAIL", "many")

    with pytest.raises(ConfigurationError):
        build_config()


def test_load_config_from_mapping_keeps_unknown_keys_as_extras():
    config = load_config_from_mapping(
        {"symbols": ["aapl"], "ignore_tail": 2, "comment": "closing auction"}
    )

    assert config.ignore_tail == 2
    assert config.extras == {"comment": "closing auction"}


def test_load_config_from_mapping_requires_symbols():
    with pytest.raises(KeyError):
        load_config_from_mapping({"ignore_head": 1})


def test_load_config_from_json_file(tmp_path):
    path = tmp_path / "predictor.json"
    path.write_text(
        json.dumps(
            {
                "symbols": ["AAPL", "MSFT"],
                "minimum_variance": 0.9,
                "session_open": "09:30",
                "session_close": "16:00",
                "bin_minutes": 15,
            }
        ),
        encoding="utf-8",
    )

    config = load_config_from_file(path)

    assert config.minimum_variance == pytest.approx(0.9)
    assert config.instant_generator().bin_count() == 26


def test_load_config_from_file_rejects_non_mapping(tmp_path):
    path = tmp_path / "predictor.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    with pytest.raises(TypeError):
        load_config_from_file(path)
