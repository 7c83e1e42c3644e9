"""
State records for the adaptive fee controller
"""

from .pools import OOBSide, OOBState, PoolConfig, PoolId, PoolRuntimeState, PoolState, PoolTable, PoolType
from .persistence import STATE_LAYOUT_VERSION, pool_state_from_dict, pool_state_to_dict

__all__ = [
    "OOBSide",
    "OOBState",
    "PoolConfig",
    "PoolId",
    "PoolRuntimeState",
    "PoolState",
    "PoolTable",
    "PoolType",
    "STATE_LAYOUT_VERSION",
    "pool_state_from_dict",
    "pool_state_to_dict",
]
