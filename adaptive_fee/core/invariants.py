"""Invariant checkers for per-pool post-states.

Each function returns True when the invariant holds; ``check_all()`` returns
the list of violated invariant IDs (empty = all pass). The engine runs these
on every post-state before committing it.
"""

from __future__ import annotations

from typing import Callable

from ..state.pools import PoolState


def inv_unconfigured_zeroed(s: PoolState) -> bool:
    if s.is_configured:
        return True
    rt = s.runtime
    return not rt.is_active and rt.target_ratio == 0 and rt.oob.streak == 0 and rt.last_fee_update == 0


def inv_configured_has_type(s: PoolState) -> bool:
    if not s.is_configured:
        return True
    return s.pool_type is not None


def inv_target_positive(s: PoolState) -> bool:
    if not s.is_configured:
        return True
    return s.target_ratio > 0


def inv_initial_target_positive(s: PoolState) -> bool:
    if not s.is_configured:
        return True
    return s.config.initial_target_ratio > 0


INVARIANT_REGISTRY: dict[str, Callable[[PoolState], bool]] = {
    "inv_unconfigured_zeroed": inv_unconfigured_zeroed,
    "inv_configured_has_type": inv_configured_has_type,
    "inv_target_positive": inv_target_positive,
    "inv_initial_target_positive": inv_initial_target_positive,
}


def check_all(state: PoolState) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(state)
    ]
