"""
Core fee-adjustment algorithms
"""

from .engine import FeeEngine, wall_clock
from .errors import (
    AlreadyConfigured,
    CooldownNotElapsed,
    FeeEngineError,
    InvalidFeeBounds,
    InvalidFeeForPoolType,
    InvalidParameter,
    NotConfigured,
    NullArgument,
    PoolInactive,
    PoolInvariantError,
)
from .events import Event, Notification
from .fee_computer import FeeProposal, compute_fee
from .finalizer import finalize_adjustment
from .params import ParameterStore, PoolTypeParams, validate_pool_type_params

__all__ = [
    "FeeEngine",
    "wall_clock",
    "AlreadyConfigured",
    "CooldownNotElapsed",
    "FeeEngineError",
    "InvalidFeeBounds",
    "InvalidFeeForPoolType",
    "InvalidParameter",
    "NotConfigured",
    "NullArgument",
    "PoolInactive",
    "PoolInvariantError",
    "Event",
    "Notification",
    "FeeProposal",
    "compute_fee",
    "finalize_adjustment",
    "ParameterStore",
    "PoolTypeParams",
    "validate_pool_type_params",
]
