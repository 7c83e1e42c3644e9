"""
Whole-engine snapshots as canonical JSON.

A snapshot holds the global rate, every set pool-type params record and every
pool record (layout v1, see ``state.persistence``). ``restore_engine`` pushes
params through the normal validation gate and pool records through the
invariant check, so a corrupted snapshot fails to load instead of producing
an inconsistent engine.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any, Mapping, Optional

from ..core.engine import Clock, FeeEngine
from ..core.params import PoolTypeParams
from ..state.canonical import canonical_json_bytes, state_digest
from ..state.persistence import STATE_LAYOUT_VERSION, pool_state_from_dict, pool_state_to_dict
from ..state.pools import PoolType

SNAPSHOT_SCHEMA = "adaptive-fee/engine-snapshot/v1"


def engine_to_dict(engine: FeeEngine) -> dict[str, Any]:
    pool_types = {}
    for pt in PoolType:
        params = engine.get_pool_type_params(pt)
        if params.is_set:
            pool_types[pt.value] = asdict(params)
    return {
        "schema": SNAPSHOT_SCHEMA,
        "layout": STATE_LAYOUT_VERSION,
        "global_max_adj_rate": engine.get_global_max_adj_rate(),
        "pool_types": pool_types,
        "pools": [pool_state_to_dict(p) for p in engine.iter_pools()],
    }


def snapshot_engine(engine: FeeEngine) -> bytes:
    return canonical_json_bytes(engine_to_dict(engine))


def engine_digest(engine: FeeEngine) -> str:
    return state_digest(engine_to_dict(engine), label="engine-snapshot")


def engine_from_dict(d: Mapping[str, Any], *, clock: Optional[Clock] = None) -> FeeEngine:
    if d.get("schema") != SNAPSHOT_SCHEMA:
        raise ValueError(f"unsupported snapshot schema: {d.get('schema')!r}")
    if d.get("layout") != STATE_LAYOUT_VERSION:
        raise ValueError(f"unsupported snapshot layout: {d.get('layout')!r}")

    engine = FeeEngine(d["global_max_adj_rate"], clock=clock)
    for key, raw in d["pool_types"].items():
        engine.set_pool_type_params(key, PoolTypeParams(**raw))
    for raw in d["pools"]:
        engine.load_pool(pool_state_from_dict(raw))
    return engine


def restore_engine(data: bytes, *, clock: Optional[Clock] = None) -> FeeEngine:
    return engine_from_dict(json.loads(data.decode("utf-8")), clock=clock)
