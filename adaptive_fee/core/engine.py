"""Adaptive fee engine: the operation surface the dispatcher calls.

``FeeEngine`` owns a ``ParameterStore`` and a ``PoolTable`` and wires the pure
kernels together:

1. Read the pool pre-state and the host clock.
2. Run the kernel (lifecycle transition, ``compute_fee`` or ``finalize_adjustment``).
3. Check pool invariants on the post-state.
4. Commit and notify listeners.

A rejection at any step raises and commits nothing. ``compute`` stops after
step 2 and never writes.

There is no locking: the dispatcher serializes calls per pool id.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterator, Optional

from ..state.pools import OOBState, PoolConfig, PoolId, PoolState, PoolTable, PoolType
from .errors import FeeEngineError, InvalidFeeForPoolType, InvalidParameter, PoolInvariantError
from .events import Event, Listener, Notification
from .fee_computer import FeeProposal, compute_fee, next_allowed_update
from .finalizer import finalize_adjustment
from .invariants import check_all
from .lifecycle import configure, set_active
from .math import is_int
from .params import ParameterStore, PoolTypeParams, coerce_pool_type

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def wall_clock() -> int:
    return int(time.time())


class FeeEngine:
    def __init__(
        self,
        global_max_adj_rate: int,
        *,
        clock: Optional[Clock] = None,
        pools: Optional[PoolTable] = None,
    ) -> None:
        self._listeners: list[Listener] = []
        self._params = ParameterStore(global_max_adj_rate, emit=self._publish)
        self._pools = pools if pools is not None else PoolTable()
        self._clock = clock or wall_clock

    @classmethod
    def from_config(cls, config, *, clock: Optional[Clock] = None) -> "FeeEngine":
        """Build an engine from an ``integration.config.EngineConfig``."""
        engine = cls(config.global_max_adj_rate, clock=clock)
        for pool_type, params in config.pool_types.items():
            engine.set_pool_type_params(pool_type, params)
        return engine

    # -- notifications -------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _publish(self, note: Notification) -> None:
        logger.info("%s %s: %r -> %r", note.event.value, note.subject, note.old, note.new)
        for listener in list(self._listeners):
            try:
                listener(note)
            except Exception:
                logger.exception("listener %r failed on %s %s", listener, note.event.value, note.subject)

    # -- clock ---------------------------------------------------------------

    def now(self) -> int:
        ts = self._clock()
        if not is_int(ts) or ts < 0:
            raise InvalidParameter("now", "clock must return a non-negative int", ts)
        return ts

    # -- parameter store -----------------------------------------------------

    def set_pool_type_params(self, pool_type: PoolType, params: PoolTypeParams) -> None:
        try:
            self._params.set_pool_type_params(pool_type, params)
        except FeeEngineError as exc:
            logger.debug("rejected params for %s: %s", pool_type, exc)
            raise

    def set_global_max_adj_rate(self, rate: int) -> None:
        try:
            self._params.set_global_max_adj_rate(rate)
        except FeeEngineError as exc:
            logger.debug("rejected global max adj rate: %s", exc)
            raise

    def get_pool_type_params(self, pool_type: PoolType) -> PoolTypeParams:
        return self._params.get_pool_type_params(pool_type)

    def get_global_max_adj_rate(self) -> int:
        return self._params.get_global_max_adj_rate()

    # -- pool lifecycle ------------------------------------------------------

    def configure_pool(
        self,
        pool_id: PoolId,
        initial_fee: int,
        initial_target_ratio: int,
        pool_type: PoolType,
    ) -> PoolState:
        try:
            pre = self._read(pool_id)
            pt = coerce_pool_type(pool_type)
            post = configure(
                pre,
                initial_fee,
                initial_target_ratio,
                pt,
                self._params.get_pool_type_params(pt),
                self.now(),
            )
        except FeeEngineError as exc:
            logger.debug("rejected configure for %s: %s", pool_id, exc)
            raise
        self._commit(post)
        self._publish(Notification(Event.POOL_CONFIGURED, post.pool_id, old=None, new=post.config))
        return post

    def activate_pool(self, pool_id: PoolId) -> PoolState:
        return self._toggle(pool_id, True)

    def deactivate_pool(self, pool_id: PoolId) -> PoolState:
        return self._toggle(pool_id, False)

    def _toggle(self, pool_id: PoolId, active: bool) -> PoolState:
        try:
            pre = self._read(pool_id)
            post = set_active(pre, active)
        except FeeEngineError as exc:
            logger.debug("rejected %s for %s: %s", "activate" if active else "deactivate", pool_id, exc)
            raise
        if not post.is_configured:
            return post
        self._commit(post)
        event = Event.POOL_ACTIVATED if active else Event.POOL_DEACTIVATED
        self._publish(Notification(event, post.pool_id, old=pre.is_active, new=post.is_active))
        return post

    # -- two-phase adjustment ------------------------------------------------

    def compute(self, pool_id: PoolId, observed_ratio: int, current_fee: int) -> FeeProposal:
        """Propose the next fee for *pool_id*. Read-only; safe to repeat."""
        try:
            pool = self._read(pool_id)
            params = self._params.get_pool_type_params(pool.pool_type) if pool.pool_type else PoolTypeParams.unset()
            return compute_fee(
                pool,
                observed_ratio,
                current_fee,
                params,
                self._params.get_global_max_adj_rate(),
                self.now(),
            )
        except FeeEngineError as exc:
            logger.debug("rejected compute for %s: %s", pool_id, exc)
            raise

    def finalize(self, pool_id: PoolId, new_target: int, oob: OOBState) -> PoolState:
        """Commit a proposal's target and OOB state after the external fee write succeeded."""
        try:
            pre = self._read(pool_id)
            post = finalize_adjustment(pre, new_target, oob, self.now())
        except FeeEngineError as exc:
            logger.debug("rejected finalize for %s: %s", pool_id, exc)
            raise
        self._commit(post)
        self._publish(
            Notification(
                Event.FEE_ADJUSTMENT_FINALIZED,
                post.pool_id,
                old=(pre.target_ratio, pre.oob),
                new=(post.target_ratio, post.oob),
            )
        )
        return post

    def finalize_proposal(self, proposal: FeeProposal) -> PoolState:
        return self.finalize(proposal.pool_id, proposal.new_target, proposal.oob)

    # -- reads ---------------------------------------------------------------

    def _read(self, pool_id: PoolId) -> PoolState:
        if not isinstance(pool_id, str) or not pool_id.strip():
            raise InvalidParameter("pool_id", "must be a non-empty string", pool_id)
        return self._pools.get(pool_id)

    def get_pool(self, pool_id: PoolId) -> PoolState:
        return self._read(pool_id)

    def get_pool_config(self, pool_id: PoolId) -> PoolConfig:
        return self._read(pool_id).config

    def next_adjustment_time(self, pool_id: PoolId) -> Optional[int]:
        """Earliest timestamp ``compute`` accepts, or None for unconfigured pools."""
        pool = self._read(pool_id)
        if not pool.is_configured:
            return None
        return next_allowed_update(pool, self._params.require_pool_type_params(pool.pool_type))

    def pool_ids(self) -> list[PoolId]:
        return self._pools.pool_ids()

    def iter_pools(self) -> Iterator[PoolState]:
        return iter(self._pools)

    # -- commit --------------------------------------------------------------

    def load_pool(self, state: PoolState) -> None:
        """Install a persisted record (restore path). No notification.

        A configured record must reference a pool type whose params are set,
        and its initial fee must lie within that type's bounds.
        """
        if state.is_configured:
            params = self._params.require_pool_type_params(state.pool_type)
            fee = state.config.initial_fee
            if not (params.min_fee <= fee <= params.max_fee):
                raise InvalidFeeForPoolType(fee, params.min_fee, params.max_fee, state.pool_type.value)
        self._commit(state)

    def _commit(self, state: PoolState) -> None:
        violations = check_all(state)
        if violations:
            logger.warning("refusing post-state for %s: %s", state.pool_id, violations)
            raise PoolInvariantError(violations)
        self._pools.put(state)
