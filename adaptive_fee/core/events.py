"""Change notifications emitted after committed writes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Any, Callable


@unique
class Event(Enum):
    POOL_TYPE_PARAMS_SET = "PoolTypeParamsSet"
    GLOBAL_MAX_ADJ_RATE_SET = "GlobalMaxAdjRateSet"
    POOL_CONFIGURED = "PoolConfigured"
    POOL_ACTIVATED = "PoolActivated"
    POOL_DEACTIVATED = "PoolDeactivated"
    FEE_ADJUSTMENT_FINALIZED = "FeeAdjustmentFinalized"


@dataclass(frozen=True)
class Notification:
    """``subject`` is a pool id, a pool type value, or ``"global"``."""

    event: Event
    subject: str
    old: Any = None
    new: Any = None


Listener = Callable[[Notification], None]
