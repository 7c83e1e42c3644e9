"""
Per-pool-type tuning parameters and the global adjustment-rate cap.

Every write passes through one validation gate that returns the first bound
violation as a structured record before any field is stored, so an update is
either applied whole or not at all.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Callable, Dict, Optional

from ..state.pools import PoolType
from .errors import InvalidFeeBounds, InvalidParameter
from .events import Event, Notification
from .math import MAX_ADJ_RATE, MAX_LP_FEE, WAD, is_int

logger = logging.getLogger(__name__)

MIN_BASE_MAX_FEE_DELTA = 1
MIN_PERIOD_FLOOR = 3600
MAX_PERIOD = 365 * 86_400
MIN_LOOKBACK_PERIOD = 7
MAX_LOOKBACK_PERIOD = 365
MIN_RATIO_TOLERANCE = WAD // 1000
MAX_RATIO_TOLERANCE = 10 * WAD
MIN_LINEAR_SLOPE = WAD // 10
MAX_LINEAR_SLOPE = 10 * WAD
MIN_SIDE_FACTOR = WAD
MAX_SIDE_FACTOR = 10 * WAD


@dataclass(frozen=True)
class PoolTypeParams:
    """Tuning for one pool type. Fixed-point fields are WAD-scaled; fees are pips."""

    min_fee: int = 0
    max_fee: int = 0
    base_max_fee_delta: int = 0
    min_period: int = 0
    lookback_period: int = 0
    ratio_tolerance: int = 0
    linear_slope: int = 0
    lower_side_factor: int = 0
    upper_side_factor: int = 0

    def __post_init__(self) -> None:
        for f in fields(self):
            if not is_int(getattr(self, f.name)):
                raise TypeError(f"{f.name} must be an int")

    @classmethod
    def unset(cls) -> "PoolTypeParams":
        """All-zero record returned for pool types that were never set."""
        return cls()

    @property
    def is_set(self) -> bool:
        return self != PoolTypeParams.unset()


def coerce_pool_type(value: object) -> PoolType:
    """Accept a PoolType or its value string; anything else is an InvalidParameter."""
    if isinstance(value, PoolType):
        return value
    try:
        return PoolType(value)
    except ValueError:
        raise InvalidParameter("pool_type", "unknown pool type", value) from None


# (field, lo, hi) checked in declaration order.
PARAM_BOUNDS: tuple[tuple[str, int, int], ...] = (
    ("min_fee", 0, MAX_LP_FEE),
    ("max_fee", 0, MAX_LP_FEE),
    ("base_max_fee_delta", MIN_BASE_MAX_FEE_DELTA, MAX_LP_FEE),
    ("min_period", MIN_PERIOD_FLOOR, MAX_PERIOD),
    ("lookback_period", MIN_LOOKBACK_PERIOD, MAX_LOOKBACK_PERIOD),
    ("ratio_tolerance", MIN_RATIO_TOLERANCE, MAX_RATIO_TOLERANCE),
    ("linear_slope", MIN_LINEAR_SLOPE, MAX_LINEAR_SLOPE),
    ("lower_side_factor", MIN_SIDE_FACTOR, MAX_SIDE_FACTOR),
    ("upper_side_factor", MIN_SIDE_FACTOR, MAX_SIDE_FACTOR),
)

_FEE_BOUND_FIELDS = frozenset({"min_fee", "max_fee"})


@dataclass(frozen=True)
class BoundViolation:
    field: str
    reason: str
    value: int
    lo: Optional[int] = None
    hi: Optional[int] = None

    def to_error(self, params: PoolTypeParams) -> InvalidParameter:
        if self.field in _FEE_BOUND_FIELDS:
            return InvalidFeeBounds(
                self.field, self.reason, min_fee=params.min_fee, max_fee=params.max_fee, value=self.value
            )
        return InvalidParameter(self.field, self.reason, self.value)


def validate_pool_type_params(params: PoolTypeParams) -> Optional[BoundViolation]:
    """Return the first bound violation in *params*, or None if every field is in range."""
    for name, lo, hi in PARAM_BOUNDS:
        v = getattr(params, name)
        if v < lo or v > hi:
            return BoundViolation(field=name, reason=f"must be in [{lo}, {hi}]", value=v, lo=lo, hi=hi)
    if params.min_fee > params.max_fee:
        return BoundViolation(
            field="min_fee",
            reason=f"must not exceed max_fee {params.max_fee}",
            value=params.min_fee,
        )
    return None


def validate_global_max_adj_rate(rate: object) -> int:
    if not is_int(rate):
        raise InvalidParameter("global_max_adj_rate", "must be an int", rate)
    if not (0 < rate <= MAX_ADJ_RATE):  # type: ignore[operator]
        raise InvalidParameter("global_max_adj_rate", f"must be in (0, {MAX_ADJ_RATE}]", rate)
    return int(rate)  # type: ignore[arg-type]


class ParameterStore:
    """
    Validated pool-type params plus the global adjustment-rate cap.

    No temporal state. Reads are pure lookups; unset pool types read as
    ``PoolTypeParams.unset()``.
    """

    def __init__(
        self,
        global_max_adj_rate: int,
        *,
        emit: Optional[Callable[[Notification], None]] = None,
    ) -> None:
        self._rate = validate_global_max_adj_rate(global_max_adj_rate)
        self._params: Dict[PoolType, PoolTypeParams] = {}
        self._emit = emit

    def get_pool_type_params(self, pool_type: PoolType) -> PoolTypeParams:
        return self._params.get(coerce_pool_type(pool_type), PoolTypeParams.unset())

    def require_pool_type_params(self, pool_type: PoolType) -> PoolTypeParams:
        params = self.get_pool_type_params(pool_type)
        if not params.is_set:
            raise InvalidParameter("pool_type", "params unset", coerce_pool_type(pool_type).value)
        return params

    def get_global_max_adj_rate(self) -> int:
        return self._rate

    def set_pool_type_params(self, pool_type: PoolType, params: PoolTypeParams) -> Notification:
        pt = coerce_pool_type(pool_type)
        if not isinstance(params, PoolTypeParams):
            raise InvalidParameter("params", "must be a PoolTypeParams", params)
        violation = validate_pool_type_params(params)
        if violation is not None:
            raise violation.to_error(params)

        old = self.get_pool_type_params(pt)
        self._params[pt] = params
        return self._notify(Notification(Event.POOL_TYPE_PARAMS_SET, pt.value, old=old, new=params))

    def set_global_max_adj_rate(self, rate: int) -> Notification:
        new = validate_global_max_adj_rate(rate)
        old = self._rate
        self._rate = new
        return self._notify(Notification(Event.GLOBAL_MAX_ADJ_RATE_SET, "global", old=old, new=new))

    def configured_pool_types(self) -> list[PoolType]:
        return [pt for pt in PoolType if pt in self._params]

    def _notify(self, note: Notification) -> Notification:
        # The write is committed; listener failures are logged, not raised.
        if self._emit is not None:
            try:
                self._emit(note)
            except Exception:
                logger.exception("listener failed for %s", note.event.value)
        return note
