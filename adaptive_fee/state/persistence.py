"""Serialization of per-pool records.

The persisted layout is fixed per ``STATE_LAYOUT_VERSION``: a configuration
record and a runtime record with the field names below. Readers reject other
layout versions instead of reinterpreting them, so upgraded computing logic
always reads pre-existing records the same way.

Round-trip property (tested): ``pool_state_from_dict(pool_state_to_dict(s)) == s``.
"""

from __future__ import annotations

from typing import Any, Mapping

from .pools import OOBSide, OOBState, PoolConfig, PoolRuntimeState, PoolState, PoolType

STATE_LAYOUT_VERSION = 1

CONFIG_FIELDS: tuple[str, ...] = ("initial_fee", "initial_target_ratio", "pool_type", "is_configured")
RUNTIME_FIELDS: tuple[str, ...] = ("is_active", "target_ratio", "oob_streak", "oob_side", "last_fee_update")


def pool_state_to_dict(state: PoolState) -> dict[str, Any]:
    """Serialize a PoolState to a plain dict (layout v1)."""
    cfg = state.config
    rt = state.runtime
    return {
        "layout": STATE_LAYOUT_VERSION,
        "pool_id": state.pool_id,
        "config": {
            "initial_fee": cfg.initial_fee,
            "initial_target_ratio": cfg.initial_target_ratio,
            "pool_type": None if cfg.pool_type is None else cfg.pool_type.value,
            "is_configured": cfg.is_configured,
        },
        "runtime": {
            "is_active": rt.is_active,
            "target_ratio": rt.target_ratio,
            "oob_streak": rt.oob.streak,
            "oob_side": rt.oob.side.value,
            "last_fee_update": rt.last_fee_update,
        },
    }


def _require_section(d: Mapping[str, Any], name: str, fields: tuple[str, ...]) -> Mapping[str, Any]:
    section = d[name]
    if not isinstance(section, Mapping):
        raise TypeError(f"{name} must be a mapping")
    extra = sorted(set(section) - set(fields))
    if extra:
        raise ValueError(f"unknown {name} fields: {extra}")
    for f in fields:
        if f not in section:
            raise KeyError(f"{name}.{f}")
    return section


def pool_state_from_dict(d: Mapping[str, Any]) -> PoolState:
    """Deserialize a layout-v1 dict. Raises on missing, unknown or mistyped fields."""
    layout = d.get("layout")
    if layout != STATE_LAYOUT_VERSION:
        raise ValueError(f"unsupported pool state layout: {layout!r}")
    cfg = _require_section(d, "config", CONFIG_FIELDS)
    rt = _require_section(d, "runtime", RUNTIME_FIELDS)

    pool_type_raw = cfg["pool_type"]
    pool_type = None if pool_type_raw is None else PoolType(pool_type_raw)

    return PoolState(
        pool_id=d["pool_id"],
        config=PoolConfig(
            initial_fee=cfg["initial_fee"],
            initial_target_ratio=cfg["initial_target_ratio"],
            pool_type=pool_type,
            is_configured=cfg["is_configured"],
        ),
        runtime=PoolRuntimeState(
            is_active=rt["is_active"],
            target_ratio=rt["target_ratio"],
            oob=OOBState(streak=rt["oob_streak"], side=OOBSide(rt["oob_side"])),
            last_fee_update=rt["last_fee_update"],
        ),
    )
