"""
Reference dispatcher cycle for one pool adjustment.

Imperative shell around the engine's two-phase protocol:

1. read the live fee from the settlement side (``FeeSource``),
2. ``engine.compute`` a proposal,
3. push the proposed fee (``FeeSink``),
4. ``engine.finalize`` only if the push succeeded.

A failed push leaves the pool's target, OOB state and cooldown untouched, so
the next attempt recomputes from the same baseline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Protocol

from ..core.engine import FeeEngine
from ..core.fee_computer import FeeProposal
from ..state.pools import PoolId, PoolState

logger = logging.getLogger(__name__)


class FeeApplicationError(Exception):
    """The settlement side did not accept a fee write."""


class FeeSource(Protocol):
    def current_fee(self, pool_id: PoolId) -> int: ...


class FeeSink(Protocol):
    def apply_fee(self, pool_id: PoolId, fee: int) -> None: ...


@dataclass(frozen=True)
class AdjustmentOutcome:
    proposal: FeeProposal
    state: PoolState
    applied: bool


@dataclass
class InMemoryFeeLedger:
    """Settlement stand-in holding one live fee per pool. Implements both FeeSource and FeeSink."""

    fees: Dict[PoolId, int] = field(default_factory=dict)

    def current_fee(self, pool_id: PoolId) -> int:
        try:
            return self.fees[pool_id]
        except KeyError:
            raise FeeApplicationError(f"no live fee for pool {pool_id}") from None

    def apply_fee(self, pool_id: PoolId, fee: int) -> None:
        self.fees[pool_id] = fee


def run_adjustment(
    engine: FeeEngine,
    pool_id: PoolId,
    observed_ratio: int,
    source: FeeSource,
    sink: FeeSink,
) -> AdjustmentOutcome:
    """Run compute -> apply -> finalize for *pool_id*.

    Engine rejections (cooldown, inactive pool, ...) and sink failures
    propagate; in both cases nothing was committed.
    """
    current = source.current_fee(pool_id)
    proposal = engine.compute(pool_id, observed_ratio, current)

    applied = proposal.proposed_fee != current
    if applied:
        try:
            sink.apply_fee(pool_id, proposal.proposed_fee)
        except FeeApplicationError:
            logger.warning("fee push failed for %s; leaving pool state untouched", pool_id)
            raise

    state = engine.finalize_proposal(proposal)
    logger.info(
        "pool %s fee %d -> %d target %d -> %d oob=%d/%s",
        pool_id,
        proposal.current_fee,
        proposal.proposed_fee,
        proposal.old_target,
        proposal.new_target,
        proposal.oob.streak,
        proposal.oob.side.value,
    )
    return AdjustmentOutcome(proposal=proposal, state=state, applied=applied)
