"""
Per-pool state for the adaptive fee controller.

A pool moves through ``Unconfigured -> Configured(Active) <-> Configured(Inactive)``.
Records are immutable; the engine replaces a pool's record wholesale when a
configure, toggle or finalize step commits.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Dict, Iterator, Optional

from .units import MAX_LP_FEE, MAX_OOB_STREAK, MAX_RATIO, is_int

# Type alias
PoolId = str


@unique
class PoolType(Enum):
    """Pool categories; each selects one parameter record."""
    STABLE = "STABLE"
    STANDARD = "STANDARD"
    VOLATILE = "VOLATILE"


@unique
class OOBSide(Enum):
    """Which side of the tolerance band the last observations fell on."""
    NONE = "NONE"
    BELOW = "BELOW"
    ABOVE = "ABOVE"


def require_pool_id(pool_id: object) -> PoolId:
    if not isinstance(pool_id, str) or not pool_id.strip():
        raise ValueError("pool_id must be a non-empty string")
    return pool_id


@dataclass(frozen=True)
class OOBState:
    """Consecutive out-of-band periods and the side they fell on."""

    streak: int = 0
    side: OOBSide = OOBSide.NONE

    def __post_init__(self) -> None:
        if not is_int(self.streak):
            raise TypeError("streak must be an int")
        if not (0 <= self.streak <= MAX_OOB_STREAK):
            raise ValueError(f"streak must be in [0, {MAX_OOB_STREAK}]: {self.streak}")
        if not isinstance(self.side, OOBSide):
            raise TypeError("side must be an OOBSide")
        if (self.streak == 0) != (self.side is OOBSide.NONE):
            raise ValueError(f"streak {self.streak} inconsistent with side {self.side.value}")


@dataclass(frozen=True)
class PoolConfig:
    """Set exactly once by configuration."""

    initial_fee: int = 0
    initial_target_ratio: int = 0
    pool_type: Optional[PoolType] = None
    is_configured: bool = False

    def __post_init__(self) -> None:
        for name, v in (
            ("initial_fee", self.initial_fee),
            ("initial_target_ratio", self.initial_target_ratio),
        ):
            if not is_int(v):
                raise TypeError(f"{name} must be an int")
        if not (0 <= self.initial_fee <= MAX_LP_FEE):
            raise ValueError(f"initial_fee must be in [0, {MAX_LP_FEE}]: {self.initial_fee}")
        if not (0 <= self.initial_target_ratio <= MAX_RATIO):
            raise ValueError(f"initial_target_ratio must be in [0, {MAX_RATIO}]: {self.initial_target_ratio}")
        if not isinstance(self.is_configured, bool):
            raise TypeError("is_configured must be a bool")
        if self.is_configured and not isinstance(self.pool_type, PoolType):
            raise TypeError("configured pools must carry a PoolType")


@dataclass(frozen=True)
class PoolRuntimeState:
    """Fields written only by configuration and the finalize step (plus the active flag)."""

    is_active: bool = False
    target_ratio: int = 0
    oob: OOBState = OOBState()
    last_fee_update: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.is_active, bool):
            raise TypeError("is_active must be a bool")
        for name, v in (
            ("target_ratio", self.target_ratio),
            ("last_fee_update", self.last_fee_update),
        ):
            if not is_int(v):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")
        if self.target_ratio > MAX_RATIO:
            raise ValueError(f"target_ratio must be <= {MAX_RATIO}: {self.target_ratio}")
        if not isinstance(self.oob, OOBState):
            raise TypeError("oob must be an OOBState")


@dataclass(frozen=True)
class PoolState:
    pool_id: PoolId
    config: PoolConfig = PoolConfig()
    runtime: PoolRuntimeState = PoolRuntimeState()

    def __post_init__(self) -> None:
        require_pool_id(self.pool_id)

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    @property
    def is_active(self) -> bool:
        return self.runtime.is_active

    @property
    def pool_type(self) -> Optional[PoolType]:
        return self.config.pool_type

    @property
    def target_ratio(self) -> int:
        return self.runtime.target_ratio

    @property
    def oob(self) -> OOBState:
        return self.runtime.oob

    @property
    def last_fee_update(self) -> int:
        return self.runtime.last_fee_update


@dataclass
class PoolTable:
    """
    Mutable mapping: pool_id -> PoolState.

    Missing pools read as unconfigured records. Writes are whole-record
    replacements; there is no per-field mutation.
    """

    _pools: Dict[PoolId, PoolState] = field(default_factory=dict)

    def get(self, pool_id: PoolId) -> PoolState:
        pid = require_pool_id(pool_id)
        return self._pools.get(pid) or PoolState(pool_id=pid)

    def put(self, state: PoolState) -> None:
        if not isinstance(state, PoolState):
            raise TypeError("state must be a PoolState")
        self._pools[state.pool_id] = state

    def pool_ids(self) -> list[PoolId]:
        return sorted(self._pools)

    def __contains__(self, pool_id: object) -> bool:
        return pool_id in self._pools

    def __iter__(self) -> Iterator[PoolState]:
        for pid in self.pool_ids():
            yield self._pools[pid]

    def __len__(self) -> int:
        return len(self._pools)

    def __repr__(self) -> str:
        return f"PoolTable({len(self._pools)} pools)"
