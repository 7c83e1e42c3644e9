"""Exception types for the adaptive fee engine.

Every rejected call raises one of these and leaves stored state unchanged.
"""

from __future__ import annotations

from typing import Any


class FeeEngineError(Exception):
    """Base class for all fee engine rejections."""


class NotConfigured(FeeEngineError):
    """Operation requires a configured pool."""

    def __init__(self, pool_id: str) -> None:
        self.pool_id = pool_id
        super().__init__(f"pool not configured: {pool_id}")


class AlreadyConfigured(FeeEngineError):
    """Pool was already configured; configuration happens exactly once."""

    def __init__(self, pool_id: str) -> None:
        self.pool_id = pool_id
        super().__init__(f"pool already configured: {pool_id}")


class PoolInactive(FeeEngineError):
    """Operation requires an active pool."""

    def __init__(self, pool_id: str) -> None:
        self.pool_id = pool_id
        super().__init__(f"pool inactive: {pool_id}")


class CooldownNotElapsed(FeeEngineError):
    """Adjustment attempted before ``min_period`` elapsed. Retry at ``next_allowed``."""

    def __init__(self, pool_id: str, next_allowed: int) -> None:
        self.pool_id = pool_id
        self.next_allowed = next_allowed
        super().__init__(f"cooldown not elapsed for {pool_id}: next adjustment at {next_allowed}")


class InvalidParameter(FeeEngineError):
    """A value failed range validation."""

    def __init__(self, field: str, reason: str, value: Any = None) -> None:
        self.field = field
        self.reason = reason
        self.value = value
        super().__init__(f"invalid {field}: {reason} (got {value!r})")


class InvalidFeeBounds(InvalidParameter):
    """Fee bound fields of a params record are out of range or unordered."""

    def __init__(self, field: str, reason: str, min_fee: Any, max_fee: Any, value: Any = None) -> None:
        self.min_fee = min_fee
        self.max_fee = max_fee
        super().__init__(field, reason, value)


class InvalidFeeForPoolType(FeeEngineError):
    """A fee lies outside the bounds of its pool type."""

    def __init__(self, fee: int, min_fee: int, max_fee: int, pool_type: Any) -> None:
        self.fee = fee
        self.min_fee = min_fee
        self.max_fee = max_fee
        self.pool_type = pool_type
        super().__init__(f"fee {fee} outside [{min_fee}, {max_fee}] for pool type {pool_type}")


class NullArgument(FeeEngineError):
    """A required nonzero argument was zero."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name} must be nonzero")


class PoolInvariantError(FeeEngineError):
    """Raised when a pool post-state violates one or more invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
