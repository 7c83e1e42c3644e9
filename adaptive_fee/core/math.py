"""Pure fixed-point arithmetic for the adaptive fee controller.

Every function is stateless and operates on plain Python ints.

Ratios, tolerances, slopes, side factors and adjustment rates are WAD-scaled
(1e18 == 1.0). Fees are integer pips where ``MAX_LP_FEE`` is 100%.

Rounding is explicit: ``//`` floors toward -inf, ``mul_div_up`` rounds up.
Callers only pass non-negative operands to the rounding helpers.
"""

from __future__ import annotations

from ..state.units import (
    MAX_LP_FEE,
    MAX_OOB_STREAK,
    MAX_RATIO,
    MAX_REPRESENTABLE_FEE,
    WAD,
    is_int,
)

# Largest global adjustment rate for which ``fee * rate // WAD`` stays
# representable for every fee in ``[0, MAX_LP_FEE]``.
MAX_ADJ_RATE: int = MAX_REPRESENTABLE_FEE * WAD // MAX_LP_FEE

# OOB escalation curve: 1x on the first out-of-band period, +0.5x per
# further consecutive period, capped at 4x.
OOB_ESCALATION_STEP: int = WAD // 2
MAX_OOB_ESCALATION: int = 4 * WAD

__all__ = [
    "WAD",
    "MAX_LP_FEE",
    "MAX_REPRESENTABLE_FEE",
    "MAX_RATIO",
    "MAX_ADJ_RATE",
    "MAX_OOB_STREAK",
    "OOB_ESCALATION_STEP",
    "MAX_OOB_ESCALATION",
    "is_int",
    "abs_val",
    "clamp",
    "mul_div_up",
    "wad_mul",
    "ema_alpha",
    "ema_step",
    "oob_escalation",
    "rate_cap",
]


def abs_val(x: int) -> int:
    """Absolute value of *x*."""
    return x if x >= 0 else -x


def clamp(x: int, lo: int, hi: int) -> int:
    """Clamp *x* into ``[lo, hi]``. Requires ``lo <= hi``."""
    if lo > hi:
        raise ValueError(f"empty clamp range: [{lo}, {hi}]")
    if x < lo:
        return lo
    if x > hi:
        return hi
    return x


def mul_div_up(a: int, b: int, denom: int) -> int:
    """``ceil(a * b / denom)`` for non-negative operands."""
    if denom <= 0:
        raise ZeroDivisionError("denom must be positive")
    return (a * b + denom - 1) // denom


def wad_mul(a: int, b: int) -> int:
    """``floor(a * b / WAD)``."""
    return (a * b) // WAD


def ema_alpha(lookback_period: int) -> int:
    """EMA smoothing weight ``2 / (N + 1)`` in WAD.

    Longer lookbacks give smaller weights (slower adaptation).
    """
    if lookback_period <= 0:
        raise ValueError(f"lookback_period must be positive: {lookback_period}")
    return (2 * WAD) // (lookback_period + 1)


def ema_step(old: int, observed: int, alpha: int) -> int:
    """One EMA step from *old* toward *observed*, floored at 1.

    ``old + (observed - old) * alpha / WAD``. With ``alpha <= WAD`` the result
    stays between ``old`` and ``observed``.
    """
    nxt = old + ((observed - old) * alpha) // WAD
    return nxt if nxt > 0 else 1


def oob_escalation(streak: int) -> int:
    """Escalation multiplier (WAD) for a given out-of-band streak."""
    if streak <= 0:
        return WAD
    return min(WAD + (streak - 1) * OOB_ESCALATION_STEP, MAX_OOB_ESCALATION)


def rate_cap(reference_fee: int, max_adj_rate: int) -> int:
    """Largest fee move allowed by the global adjustment rate."""
    return wad_mul(reference_fee, max_adj_rate)
