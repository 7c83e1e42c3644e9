"""Tests for adaptive_fee/integration/config.py: YAML engine config."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from adaptive_fee.core.engine import FeeEngine
from adaptive_fee.core.errors import InvalidParameter
from adaptive_fee.core.math import WAD
from adaptive_fee.core.params import validate_pool_type_params
from adaptive_fee.integration.config import (
    CONFIG_SCHEMA,
    DEFAULT_CONFIG_PATH,
    ConfigError,
    engine_config_from_mapping,
    load_engine_config,
    parse_wad,
)
from adaptive_fee.state.pools import PoolType


def _doc(**overrides) -> dict:
    doc = yaml.safe_load(DEFAULT_CONFIG_PATH.read_text(encoding="utf-8"))
    doc.update(overrides)
    return doc


def test_default_config_loads_and_validates() -> None:
    cfg = load_engine_config()
    assert cfg.global_max_adj_rate == WAD // 2
    assert set(cfg.pool_types) == set(PoolType)
    std = cfg.pool_types[PoolType.STANDARD]
    assert std.ratio_tolerance == WAD // 100
    assert std.linear_slope == WAD // 10
    assert std.lower_side_factor == 2 * WAD
    for params in cfg.pool_types.values():
        assert validate_pool_type_params(params) is None


def test_engine_from_default_config() -> None:
    engine = FeeEngine.from_config(load_engine_config(), clock=lambda: 0)
    assert engine.get_pool_type_params(PoolType.VOLATILE).max_fee == 50_000
    assert engine.get_global_max_adj_rate() == WAD // 2


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("0.01", 10**16),
        ("1", WAD),
        (" 1.5 ", 3 * WAD // 2),
        (0.5, WAD // 2),
        (7 * WAD, 7 * WAD),
        ("0.000000000000000001", 1),
    ],
)
def test_parse_wad(raw, expected) -> None:
    assert parse_wad(raw, name="x") == expected


@pytest.mark.parametrize("raw", ["0.0000000000000000001", "abc", "", None, True, "nan", [1]])
def test_parse_wad_rejects(raw) -> None:
    with pytest.raises(ConfigError):
        parse_wad(raw, name="x")


def test_bad_schema_rejected() -> None:
    with pytest.raises(ConfigError, match="schema"):
        engine_config_from_mapping(_doc(schema="adaptive-fee/engine-config/v0"))


def test_unknown_pool_type_rejected() -> None:
    doc = _doc()
    doc["pool_types"]["EXOTIC"] = doc["pool_types"]["STABLE"]
    with pytest.raises(ConfigError, match="unknown pool type"):
        engine_config_from_mapping(doc)


def test_lowercase_pool_type_key_accepted() -> None:
    doc = _doc()
    doc["pool_types"] = {"standard": doc["pool_types"]["STANDARD"]}
    assert list(engine_config_from_mapping(doc).pool_types) == [PoolType.STANDARD]


def test_unknown_field_rejected() -> None:
    doc = _doc()
    doc["pool_types"]["STABLE"]["volatility_window"] = 3
    with pytest.raises(ConfigError, match="unknown fields"):
        engine_config_from_mapping(doc)


def test_missing_field_rejected() -> None:
    doc = _doc()
    del doc["pool_types"]["STABLE"]["min_period"]
    with pytest.raises(ConfigError, match="missing fields"):
        engine_config_from_mapping(doc)


def test_float_in_int_field_rejected() -> None:
    doc = _doc()
    doc["pool_types"]["STABLE"]["min_fee"] = 10.0
    with pytest.raises(ConfigError):
        engine_config_from_mapping(doc)


def test_pool_types_optional() -> None:
    cfg = engine_config_from_mapping({"schema": CONFIG_SCHEMA, "global_max_adj_rate": "1"})
    assert cfg.pool_types == {}
    assert cfg.global_max_adj_rate == WAD


def test_out_of_range_values_fail_at_the_gate() -> None:
    doc = _doc()
    doc["pool_types"]["STABLE"]["lookback_period"] = 2
    cfg = engine_config_from_mapping(doc)
    with pytest.raises(InvalidParameter) as ei:
        FeeEngine.from_config(cfg)
    assert ei.value.field == "lookback_period"


def test_invalid_yaml(tmp_path: Path) -> None:
    p = tmp_path / "bad.yaml"
    p.write_text("schema: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid YAML"):
        load_engine_config(p)


def test_load_from_path(tmp_path: Path) -> None:
    p = tmp_path / "engine.yaml"
    p.write_text(yaml.safe_dump(_doc(global_max_adj_rate="0.25")), encoding="utf-8")
    assert load_engine_config(p).global_max_adj_rate == WAD // 4
