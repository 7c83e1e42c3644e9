"""
Engine configuration loaded from YAML.

Document shape (``schema: adaptive-fee/engine-config/v1``)::

    schema: adaptive-fee/engine-config/v1
    global_max_adj_rate: "0.5"
    pool_types:
      STANDARD:
        min_fee: 100
        max_fee: 10000
        ...

Fee and period fields are plain ints. Fixed-point fields (ratio tolerance,
slope, side factors, global rate) take either a raw WAD int or a decimal
written as a string/float, which is scaled by 1e18 and must land on an exact
integer. Loading is fail-closed: any schema problem raises ``ConfigError``.
Range validation is left to the ``ParameterStore`` gate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from ..core.math import WAD, is_int
from ..core.params import PoolTypeParams
from ..state.pools import PoolType

CONFIG_SCHEMA = "adaptive-fee/engine-config/v1"
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "default_pool_types.yaml"

INT_FIELDS: tuple[str, ...] = ("min_fee", "max_fee", "base_max_fee_delta", "min_period", "lookback_period")
WAD_FIELDS: tuple[str, ...] = ("ratio_tolerance", "linear_slope", "lower_side_factor", "upper_side_factor")


class ConfigError(ValueError):
    """Engine config document failed schema checks."""


@dataclass(frozen=True)
class EngineConfig:
    global_max_adj_rate: int
    pool_types: Dict[PoolType, PoolTypeParams] = field(default_factory=dict)


def _require_mapping(obj: Any, *, name: str) -> Mapping[str, Any]:
    if not isinstance(obj, Mapping):
        raise ConfigError(f"{name} must be a mapping")
    return obj


def _require_int(obj: Any, *, name: str) -> int:
    if not is_int(obj):
        raise ConfigError(f"{name} must be an int")
    return int(obj)


def parse_wad(obj: Any, *, name: str) -> int:
    """Raw ints pass through; decimal strings/floats are scaled by WAD."""
    if is_int(obj):
        return int(obj)
    if isinstance(obj, float):
        obj = repr(obj)
    if not isinstance(obj, str) or not obj.strip():
        raise ConfigError(f"{name} must be an int or a decimal string")
    try:
        scaled = Decimal(obj.strip()) * WAD
    except InvalidOperation as exc:
        raise ConfigError(f"{name} is not a decimal: {obj!r}") from exc
    if not scaled.is_finite() or scaled != scaled.to_integral_value():
        raise ConfigError(f"{name} has more than 18 decimal places: {obj!r}")
    return int(scaled)


def pool_type_params_from_mapping(obj: Any, *, name: str) -> PoolTypeParams:
    m = _require_mapping(obj, name=name)
    known = set(INT_FIELDS) | set(WAD_FIELDS)
    unknown = sorted(set(m) - known)
    if unknown:
        raise ConfigError(f"{name} has unknown fields: {unknown}")
    missing = sorted(known - set(m))
    if missing:
        raise ConfigError(f"{name} is missing fields: {missing}")

    kwargs: dict[str, int] = {}
    for f in INT_FIELDS:
        kwargs[f] = _require_int(m[f], name=f"{name}.{f}")
    for f in WAD_FIELDS:
        kwargs[f] = parse_wad(m[f], name=f"{name}.{f}")
    return PoolTypeParams(**kwargs)


def engine_config_from_mapping(obj: Any) -> EngineConfig:
    root = _require_mapping(obj, name="config")
    schema = root.get("schema")
    if schema != CONFIG_SCHEMA:
        raise ConfigError(f"unsupported config schema: {schema!r}")

    rate = parse_wad(root.get("global_max_adj_rate"), name="global_max_adj_rate")

    pool_types: Dict[PoolType, PoolTypeParams] = {}
    for key, raw in _require_mapping(root.get("pool_types", {}), name="pool_types").items():
        try:
            pool_type = PoolType(str(key).strip().upper())
        except ValueError as exc:
            raise ConfigError(f"unknown pool type: {key!r}") from exc
        if pool_type in pool_types:
            raise ConfigError(f"duplicate pool type: {pool_type.value}")
        pool_types[pool_type] = pool_type_params_from_mapping(raw, name=f"pool_types.{pool_type.value}")

    return EngineConfig(global_max_adj_rate=rate, pool_types=pool_types)


def load_engine_config(path: Path | str = DEFAULT_CONFIG_PATH) -> EngineConfig:
    raw = Path(path).read_text(encoding="utf-8")
    try:
        doc = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    return engine_config_from_mapping(doc)
