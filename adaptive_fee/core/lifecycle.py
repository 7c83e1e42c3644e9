"""Pool lifecycle transitions.

``Unconfigured -> Configured(Active) <-> Configured(Inactive)``. Each function
takes the pre-state and returns the post-state; the engine commits it.
"""

from __future__ import annotations

from dataclasses import replace

from ..state.pools import OOBState, PoolConfig, PoolRuntimeState, PoolState, PoolType
from .errors import AlreadyConfigured, InvalidFeeForPoolType, InvalidParameter, NotConfigured, NullArgument
from .math import MAX_LP_FEE, MAX_RATIO, is_int
from .params import PoolTypeParams


def configure(
    pool: PoolState,
    initial_fee: int,
    initial_target_ratio: int,
    pool_type: PoolType,
    params: PoolTypeParams,
    now: int,
) -> PoolState:
    if pool.is_configured:
        raise AlreadyConfigured(pool.pool_id)
    if not is_int(initial_target_ratio) or not (0 <= initial_target_ratio <= MAX_RATIO):
        raise InvalidParameter("initial_target_ratio", f"must be an int in [0, {MAX_RATIO}]", initial_target_ratio)
    if initial_target_ratio == 0:
        raise NullArgument("initial_target_ratio")
    if not is_int(initial_fee) or not (0 <= initial_fee <= MAX_LP_FEE):
        raise InvalidParameter("initial_fee", f"must be an int in [0, {MAX_LP_FEE}]", initial_fee)
    if not params.is_set:
        raise InvalidParameter("pool_type", "params unset", pool_type.value)
    if not (params.min_fee <= initial_fee <= params.max_fee):
        raise InvalidFeeForPoolType(initial_fee, params.min_fee, params.max_fee, pool_type.value)
    if not is_int(now) or now < 0:
        raise InvalidParameter("now", "must be a non-negative int", now)

    return PoolState(
        pool_id=pool.pool_id,
        config=PoolConfig(
            initial_fee=initial_fee,
            initial_target_ratio=initial_target_ratio,
            pool_type=pool_type,
            is_configured=True,
        ),
        runtime=PoolRuntimeState(
            is_active=True,
            target_ratio=initial_target_ratio,
            oob=OOBState(),
            last_fee_update=now,
        ),
    )


def set_active(pool: PoolState, active: bool) -> PoolState:
    """Flip the active flag. Re-setting the current value is accepted and changes nothing.

    Activation requires a configured pool; deactivating an unconfigured pool
    returns it unchanged (it is already inactive).
    """
    if not pool.is_configured:
        if active:
            raise NotConfigured(pool.pool_id)
        return pool
    return replace(pool, runtime=replace(pool.runtime, is_active=bool(active)))
