"""Commit step of the two-phase fee adjustment.

Call only after the proposed fee reached the settlement engine. Nothing here
can verify that; the ordering is the dispatcher's contract.
"""

from __future__ import annotations

from dataclasses import replace

from ..state.pools import OOBState, PoolState
from .errors import InvalidParameter, NullArgument
from .fee_computer import require_adjustable, require_clock
from .math import MAX_RATIO, is_int


def finalize_adjustment(pool: PoolState, new_target: int, oob: OOBState, now: int) -> PoolState:
    """Return the post-state with ``target_ratio``, ``oob`` and ``last_fee_update`` overwritten."""
    require_adjustable(pool)
    if not is_int(new_target) or not (0 <= new_target <= MAX_RATIO):
        raise InvalidParameter("new_target", f"must be an int in [0, {MAX_RATIO}]", new_target)
    if new_target == 0:
        raise NullArgument("new_target")
    if not isinstance(oob, OOBState):
        raise InvalidParameter("oob", "must be an OOBState", oob)
    ts = require_clock(pool, now)

    runtime = replace(pool.runtime, target_ratio=new_target, oob=oob, last_fee_update=ts)
    return replace(pool, runtime=runtime)
