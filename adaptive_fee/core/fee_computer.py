"""Compute step of the two-phase fee adjustment.

``compute_fee`` maps (pool state, observed ratio, live fee, pool-type params,
global cap, now) to a ``FeeProposal``. It performs no state mutation, so a
dispatcher can retry the external fee write and recompute freely; only
``finalizer.finalize_adjustment`` commits the proposal.

Feedback law, per call:

1. ``d = observed - target``.
2. ``|d| <= ratio_tolerance``: in band. The fee stays at the live fee and the
   OOB streak resets.
3. Out of band: the streak grows (a side flip restarts it at 1) and the fee
   moves by ``ref_fee * slope * |d| * side_factor * escalation`` (all WAD),
   rounded up, clamped to ``base_max_fee_delta`` and to the global rate cap.
   ``d > 0`` raises the fee, ``d < 0`` lowers it.
4. The fee is clamped to ``[min_fee, max_fee]``.
5. The target takes one EMA step toward the observation with
   ``alpha = 2 / (lookback_period + 1)``.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..state.pools import OOBSide, OOBState, PoolState
from .errors import CooldownNotElapsed, InvalidParameter, NotConfigured, PoolInactive
from .math import (
    MAX_LP_FEE,
    MAX_OOB_STREAK,
    MAX_RATIO,
    WAD,
    abs_val,
    clamp,
    ema_alpha,
    ema_step,
    is_int,
    mul_div_up,
    oob_escalation,
    rate_cap,
)
from .params import PoolTypeParams


@dataclass(frozen=True)
class FeeProposal:
    """Output of the compute step; ``new_target`` and ``oob`` feed ``finalize``."""

    pool_id: str
    current_fee: int
    proposed_fee: int
    old_target: int
    new_target: int
    oob: OOBState
    deviation: int
    in_band: bool
    computed_at: int

    @property
    def fee_delta(self) -> int:
        return self.proposed_fee - self.current_fee


def require_adjustable(pool: PoolState) -> None:
    """Shared compute/finalize guard: configured and active."""
    if not pool.is_configured:
        raise NotConfigured(pool.pool_id)
    if not pool.is_active:
        raise PoolInactive(pool.pool_id)


def require_clock(pool: PoolState, now: object) -> int:
    if not is_int(now) or now < 0:  # type: ignore[operator]
        raise InvalidParameter("now", "must be a non-negative int", now)
    if now < pool.last_fee_update:  # type: ignore[operator]
        raise InvalidParameter("now", f"clock moved backwards past {pool.last_fee_update}", now)
    return int(now)  # type: ignore[arg-type]


def next_allowed_update(pool: PoolState, params: PoolTypeParams) -> int:
    return pool.last_fee_update + params.min_period


def next_oob_state(prev: OOBState, deviation: int, tolerance: int) -> OOBState:
    """In band resets the streak; out of band extends it (a side flip restarts at 1)."""
    if abs_val(deviation) <= tolerance:
        return OOBState()
    side = OOBSide.ABOVE if deviation > 0 else OOBSide.BELOW
    if prev.side is side:
        return OOBState(streak=min(prev.streak + 1, MAX_OOB_STREAK), side=side)
    return OOBState(streak=1, side=side)


def reference_fee(current_fee: int, params: PoolTypeParams) -> int:
    """Fee that relative moves are measured against; never zero."""
    return max(current_fee, params.min_fee, 1)


def max_fee_step(current_fee: int, params: PoolTypeParams, global_max_adj_rate: int) -> int:
    """``min(base_max_fee_delta, rate cap)``: the largest move one adjustment may make."""
    return min(params.base_max_fee_delta, rate_cap(reference_fee(current_fee, params), global_max_adj_rate))


def raw_fee_delta(current_fee: int, deviation: int, oob: OOBState, params: PoolTypeParams) -> int:
    """Unclamped delta magnitude for an out-of-band deviation."""
    side_factor = params.upper_side_factor if deviation > 0 else params.lower_side_factor
    numerator = (
        reference_fee(current_fee, params)
        * params.linear_slope
        * abs_val(deviation)
        * side_factor
    )
    return mul_div_up(numerator, oob_escalation(oob.streak), WAD**4)


def compute_fee(
    pool: PoolState,
    observed_ratio: int,
    current_fee: int,
    params: PoolTypeParams,
    global_max_adj_rate: int,
    now: int,
) -> FeeProposal:
    """Propose a fee, target ratio and OOB state for *pool*. Never mutates anything.

    Raises:
        NotConfigured, PoolInactive: pool guards.
        InvalidParameter: unset params, out-of-range inputs, or a clock behind the pool.
        CooldownNotElapsed: ``now < last_fee_update + min_period``.
    """
    require_adjustable(pool)
    if not params.is_set:
        raise InvalidParameter("pool_type", "params unset", pool.pool_type.value if pool.pool_type else None)
    if not is_int(observed_ratio) or not (0 <= observed_ratio <= MAX_RATIO):
        raise InvalidParameter("observed_ratio", f"must be an int in [0, {MAX_RATIO}]", observed_ratio)
    if not is_int(current_fee) or not (0 <= current_fee <= MAX_LP_FEE):
        raise InvalidParameter("current_fee", f"must be an int in [0, {MAX_LP_FEE}]", current_fee)
    ts = require_clock(pool, now)

    next_allowed = next_allowed_update(pool, params)
    if ts < next_allowed:
        raise CooldownNotElapsed(pool.pool_id, next_allowed)

    old_target = pool.target_ratio
    deviation = observed_ratio - old_target
    oob = next_oob_state(pool.oob, deviation, params.ratio_tolerance)
    in_band = oob.streak == 0

    fee = current_fee
    if not in_band:
        step = min(
            raw_fee_delta(current_fee, deviation, oob, params),
            max_fee_step(current_fee, params, global_max_adj_rate),
        )
        fee = current_fee + step if deviation > 0 else current_fee - step
    proposed_fee = clamp(fee, params.min_fee, params.max_fee)

    new_target = ema_step(old_target, observed_ratio, ema_alpha(params.lookback_period))

    return FeeProposal(
        pool_id=pool.pool_id,
        current_fee=current_fee,
        proposed_fee=proposed_fee,
        old_target=old_target,
        new_target=new_target,
        oob=oob,
        deviation=deviation,
        in_band=in_band,
        computed_at=ts,
    )
