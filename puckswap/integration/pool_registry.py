"""
In-process pool registry.

This is an imperative-shell wrapper around the functional core:
- Holds the current `PoolState` of each pool in memory.
- Serializes writes per pool with one lock per pool id; different pools never
  share a lock.
- Validates every submitted transition against the *current* state and
  commits the claimed state only when it is accepted.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from ..core.config import PolicyConfig
from ..core.errors import EngineError
from ..core.validator import Decision, Transition, build_transition, validate
from ..state.operations import Capability, MintEvent, Operation
from ..state.pools import PoolState


logger = logging.getLogger(__name__)


def _operation_name(operation: object) -> str:
    kind = getattr(operation, "kind", None)
    return getattr(kind, "value", type(operation).__name__)


class UnknownPoolError(KeyError):
    """Raised when a pool id is not registered."""


class PoolRegistry:
    def __init__(self, config: Optional[PolicyConfig] = None):
        """
        Args:
            config: Policy applied to every pool in this registry (CORE preset by default)
        """
        self.config = config if config is not None else PolicyConfig()
        # {pool_id: PoolState}
        self._pools: Dict[str, PoolState] = {}
        # {pool_id: Lock}; guards reads-then-writes of that pool's state
        self._locks: Dict[str, threading.Lock] = {}
        # Guards the two maps themselves
        self._registry_lock = threading.Lock()

    def create(self, pool_id: str, state: Optional[PoolState] = None, *, lp_asset: Optional[str] = None) -> PoolState:
        """
        Register a pool. Without `state`, the pool starts empty with the
        configured default fees and `lp_asset`.
        """
        if not isinstance(pool_id, str) or not pool_id:
            raise ValueError("pool_id must be a non-empty string")
        if state is None:
            if lp_asset is None:
                raise ValueError("lp_asset is required when no initial state is given")
            state = PoolState.empty(
                lp_asset,
                fee_bps=self.config.default_fee_bps,
                protocol_fee_bps=self.config.default_protocol_fee_bps,
            )
        if not isinstance(state, PoolState):
            raise TypeError("state must be a PoolState")
        errors = state.consistency_errors()
        if errors:
            raise ValueError(f"inconsistent pool state: {errors[0]}")
        if state.fee_bps > self.config.max_fee_bps:
            raise ValueError(f"fee_bps {state.fee_bps} exceeds policy max {self.config.max_fee_bps}")
        if state.protocol_fee_bps > self.config.max_protocol_fee_bps:
            raise ValueError(
                f"protocol_fee_bps {state.protocol_fee_bps} exceeds policy max {self.config.max_protocol_fee_bps}"
            )

        with self._registry_lock:
            if pool_id in self._pools:
                raise ValueError(f"pool already registered: {pool_id}")
            self._pools[pool_id] = state
            self._locks[pool_id] = threading.Lock()
        logger.info("created pool %s (lp_asset=%s, fee_bps=%d)", pool_id, state.lp_asset, state.fee_bps)
        return state

    def _lock_for(self, pool_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(pool_id)
        if lock is None:
            raise UnknownPoolError(pool_id)
        return lock

    def get(self, pool_id: str) -> PoolState:
        with self._registry_lock:
            state = self._pools.get(pool_id)
        if state is None:
            raise UnknownPoolError(pool_id)
        return state

    def pool_ids(self) -> List[str]:
        with self._registry_lock:
            return sorted(self._pools)

    def _commit(self, pool_id: str, operation: Operation, new_state: PoolState) -> None:
        with self._registry_lock:
            self._pools[pool_id] = new_state
        logger.info(
            "committed %s on pool %s: reserves=(%d, %d) lp_supply=%d",
            operation.kind.value,
            pool_id,
            new_state.ada_reserve,
            new_state.token_reserve,
            new_state.total_lp_supply,
        )

    def submit(
        self,
        pool_id: str,
        operation: Operation,
        claimed_new_state: PoolState,
        mint_event: MintEvent,
        reference_time: int,
        capabilities: Iterable[Capability] = (),
    ) -> Decision:
        """
        Validate a claimed transition against the pool's current state and
        commit it on acceptance. Rejected claims leave the pool untouched.
        """
        lock = self._lock_for(pool_id)
        with lock:
            current = self.get(pool_id)
            decision = validate(
                current,
                operation,
                claimed_new_state,
                mint_event,
                reference_time,
                config=self.config,
                capabilities=capabilities,
            )
            if decision.accepted:
                self._commit(pool_id, operation, claimed_new_state)
            else:
                logger.debug(
                    "pool %s rejected %s: %s",
                    pool_id,
                    _operation_name(operation),
                    ", ".join(k.value for k in decision.kinds),
                )
        return decision

    def execute(
        self,
        pool_id: str,
        operation: Operation,
        reference_time: int,
        capabilities: Iterable[Capability] = (),
    ) -> Tuple[Decision, Optional[Transition]]:
        """
        Compute the canonical transition for `operation` from the current
        state, validate it, and commit it, all under the pool's lock.

        Returns the decision and the transition (None if the engine refused
        the operation outright).
        """
        lock = self._lock_for(pool_id)
        with lock:
            current = self.get(pool_id)
            try:
                transition = build_transition(current, operation, reference_time, config=self.config)
            except EngineError as exc:
                logger.debug("pool %s refused %s: %s", pool_id, _operation_name(operation), exc)
                return Decision(accepted=False, reasons=(exc.rejection,)), None
            decision = validate(
                current,
                operation,
                transition.new_state,
                transition.mint_event,
                reference_time,
                config=self.config,
                capabilities=capabilities,
            )
            if decision.accepted:
                self._commit(pool_id, operation, transition.new_state)
        return decision, transition
