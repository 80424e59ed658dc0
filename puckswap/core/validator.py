"""State transition validator.

``validate(old_state, operation, claimed_new_state, mint_event, reference_time, *, config)``
is the single entry point. It:

1. Validates parameter domains and the pre-state (short-circuits on failure).
2. Runs the policy prechecks that only need the request.
3. Dispatches to the swap / liquidity engine and builds the expected state.
4. Compares the claimed state field by field with the expected one.
5. Runs the policy postchecks and the LP supply ledger.
6. Returns a ``Decision`` holding every rejection in check order.

The validator is stateless: identical inputs always yield identical decisions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, Optional, Tuple, Union

from ..state.operations import (
    Capability,
    LiquidityAddRequest,
    MintEvent,
    Operation,
    OperationKind,
    SwapDirection,
    SwapRequest,
    WithdrawalRequest,
)
from ..state.pools import BPS_DENOM, MAX_AMOUNT, PoolState
from . import policy
from .config import PolicyConfig
from .cpmm import SwapResult, compute_swap
from .errors import EngineError, Rejection, RejectionKind, TransitionRejected
from .liquidity import LiquidityResult, WithdrawalResult, compute_add, compute_initial_add, compute_withdrawal
from .supply import check_supply


logger = logging.getLogger(__name__)

EngineResult = Union[SwapResult, LiquidityResult, WithdrawalResult]


@dataclass(frozen=True)
class Decision:
    """Outcome of one validation call."""

    accepted: bool
    reasons: Tuple[Rejection, ...] = ()
    expected_state: Optional[PoolState] = None

    @property
    def reason(self) -> Optional[Rejection]:
        return self.reasons[0] if self.reasons else None

    @property
    def kinds(self) -> Tuple[RejectionKind, ...]:
        return tuple(r.kind for r in self.reasons)


@dataclass(frozen=True)
class Transition:
    """The canonical claim for an operation: post-state, mint event, engine result."""

    new_state: PoolState
    mint_event: MintEvent
    result: EngineResult


# -- Engines ------------------------------------------------------------------


def _run_swap(state: PoolState, req: SwapRequest, config: PolicyConfig) -> SwapResult:
    return compute_swap(
        (state.ada_reserve, state.token_reserve),
        req.amount_in,
        req.direction,
        state.fee_bps,
        state.protocol_fee_bps,
    )


def _run_add(state: PoolState, req: LiquidityAddRequest, config: PolicyConfig) -> LiquidityResult:
    if req.is_initial:
        return compute_initial_add(req.ada_amount, req.token_amount)
    return compute_add(
        (state.ada_reserve, state.token_reserve),
        state.total_lp_supply,
        req.ada_amount,
        req.token_amount,
        tolerance_bps=min(config.ratio_tolerance_bps, req.max_ratio_deviation_bps),
    )


def _run_withdrawal(state: PoolState, req: WithdrawalRequest, config: PolicyConfig) -> WithdrawalResult:
    return compute_withdrawal(
        (state.ada_reserve, state.token_reserve),
        state.total_lp_supply,
        req.lp_tokens_to_burn,
    )


# -- Expected post-state ------------------------------------------------------
# Each returns (expected_state, lp_delta). Fees, pause flag and LP asset never
# change through a user operation.


def _apply_swap(state: PoolState, result: SwapResult, reference_time: int) -> Tuple[PoolState, int]:
    new_state = replace(
        state,
        ada_reserve=result.new_ada_reserve,
        token_reserve=result.new_token_reserve,
        last_interaction_time=reference_time,
        stats=state.stats.record_swap(
            result.direction, result.amount_in, result.amount_out, result.fee_amount
        ),
    )
    return new_state, 0


def _apply_add(state: PoolState, result: LiquidityResult, reference_time: int) -> Tuple[PoolState, int]:
    new_state = replace(
        state,
        ada_reserve=result.new_ada_reserve,
        token_reserve=result.new_token_reserve,
        total_lp_supply=result.new_total_supply,
        last_interaction_time=reference_time,
    )
    return new_state, result.lp_minted


def _apply_withdrawal(state: PoolState, result: WithdrawalResult, reference_time: int) -> Tuple[PoolState, int]:
    new_state = replace(
        state,
        ada_reserve=result.new_ada_reserve,
        token_reserve=result.new_token_reserve,
        total_lp_supply=result.new_total_supply,
        last_interaction_time=reference_time,
    )
    return new_state, -result.lp_burned


PrecheckFn = Callable[[PoolState, Any, int, PolicyConfig], list]
EngineFn = Callable[[PoolState, Any, PolicyConfig], Any]
ApplyFn = Callable[[PoolState, Any, int], Tuple[PoolState, int]]
PostcheckFn = Callable[[PoolState, Any, Any, PoolState, PolicyConfig], list]

_DISPATCH: dict[OperationKind, tuple[type, PrecheckFn, EngineFn, ApplyFn, PostcheckFn]] = {
    OperationKind.SWAP: (
        SwapRequest, policy.swap_prechecks, _run_swap, _apply_swap, policy.swap_postchecks,
    ),
    OperationKind.ADD_LIQUIDITY: (
        LiquidityAddRequest, policy.add_prechecks, _run_add, _apply_add, policy.add_postchecks,
    ),
    OperationKind.REMOVE_LIQUIDITY: (
        WithdrawalRequest, policy.withdrawal_prechecks, _run_withdrawal, _apply_withdrawal,
        policy.withdrawal_postchecks,
    ),
}

# -- Parameter domain bounds --------------------------------------------------

# Per-kind bounds: list of (field_name, min_val, max_val).
_PARAM_BOUNDS: dict[OperationKind, list[tuple[str, int, int]]] = {
    OperationKind.SWAP: [
        ("amount_in", 1, MAX_AMOUNT),
        ("deadline", 0, MAX_AMOUNT),
        ("min_out", 0, MAX_AMOUNT),
        ("max_slippage_bps", 0, BPS_DENOM),
    ],
    OperationKind.ADD_LIQUIDITY: [
        ("ada_amount", 1, MAX_AMOUNT),
        ("token_amount", 1, MAX_AMOUNT),
        ("deadline", 0, MAX_AMOUNT),
        ("min_lp_out", 0, MAX_AMOUNT),
        ("max_ratio_deviation_bps", 0, BPS_DENOM),
    ],
    OperationKind.REMOVE_LIQUIDITY: [
        ("lp_tokens_to_burn", 1, MAX_AMOUNT),
        ("deadline", 0, MAX_AMOUNT),
        ("min_ada_out", 0, MAX_AMOUNT),
        ("min_token_out", 0, MAX_AMOUNT),
    ],
}

_FLAG_FIELDS: dict[OperationKind, tuple[str, ...]] = {
    OperationKind.SWAP: (),
    OperationKind.ADD_LIQUIDITY: ("is_initial",),
    OperationKind.REMOVE_LIQUIDITY: ("emergency",),
}


def _invalid(detail: str) -> Rejection:
    return Rejection(RejectionKind.INVALID_INPUT, detail)


def _validate_params(operation: Operation) -> Optional[Rejection]:
    """Check parameter domain bounds. Returns the first rejection or None."""
    for field, lo, hi in _PARAM_BOUNDS[operation.kind]:
        val = getattr(operation, field)
        if not isinstance(val, int) or isinstance(val, bool):
            return _invalid(f"param_domain:{field} must be an int")
        if val < lo:
            return _invalid(f"param_domain:{field}={val} < {lo}")
        if val > hi:
            kind = RejectionKind.ARITHMETIC_OVERFLOW if hi == MAX_AMOUNT else RejectionKind.INVALID_INPUT
            return Rejection(kind, f"param_domain:{field}={val} > {hi}")
    for field in _FLAG_FIELDS[operation.kind]:
        if not isinstance(getattr(operation, field), bool):
            return _invalid(f"param_domain:{field} must be a bool")
    if isinstance(operation, SwapRequest) and not isinstance(operation.direction, SwapDirection):
        return _invalid(f"param_domain:direction={operation.direction!r}")
    return None


def _structural_rejection(
    old_state: PoolState,
    operation: Operation,
    reference_time: int,
) -> Optional[Rejection]:
    """Domain checks on the inputs themselves; any failure stops validation."""
    if not isinstance(old_state, PoolState):
        return _invalid("old_state must be a PoolState")
    kind = getattr(operation, "kind", None)
    entry = _DISPATCH.get(kind) if isinstance(kind, OperationKind) else None
    if entry is None or not isinstance(operation, entry[0]):
        return _invalid(f"unknown operation: {operation!r}")
    if not isinstance(reference_time, int) or isinstance(reference_time, bool) or reference_time < 0:
        return _invalid(f"reference_time must be a non-negative int: {reference_time!r}")

    param_err = _validate_params(operation)
    if param_err is not None:
        return param_err

    errors = old_state.consistency_errors()
    if errors:
        return _invalid(f"old_state: {errors[0]}")
    oversized = old_state.oversized_fields()
    if oversized:
        return Rejection(RejectionKind.ARITHMETIC_OVERFLOW, f"old_state fields exceed MAX_AMOUNT: {oversized}")

    if isinstance(operation, LiquidityAddRequest):
        if operation.is_initial and old_state.is_initialized:
            return _invalid("initial deposit into an initialised pool")
        if not operation.is_initial and not old_state.is_initialized:
            return _invalid("first deposit must be marked is_initial")
    elif not old_state.is_initialized:
        return _invalid(f"{operation.kind.value} on an uninitialised pool")
    return None


def _authorization_rejection(
    old_state: PoolState,
    operation: Operation,
    capabilities: frozenset,
) -> Optional[Rejection]:
    emergency = isinstance(operation, WithdrawalRequest) and operation.emergency
    if emergency and Capability.EMERGENCY_WITHDRAW not in capabilities:
        return Rejection(RejectionKind.UNAUTHORIZED, "emergency withdrawal requires EMERGENCY_WITHDRAW")
    if old_state.paused and not emergency:
        return Rejection(RejectionKind.POOL_PAUSED, f"pool is paused; {operation.kind.value} not admitted")
    return None


def _reject(reasons: list, operation: Any, expected_state: Optional[PoolState] = None) -> Decision:
    decision = Decision(accepted=False, reasons=tuple(reasons), expected_state=expected_state)
    logger.debug(
        "rejected %s: %s",
        getattr(getattr(operation, "kind", None), "value", type(operation).__name__),
        ", ".join(k.value for k in decision.kinds),
    )
    return decision


def validate(
    old_state: PoolState,
    operation: Operation,
    claimed_new_state: PoolState,
    mint_event: MintEvent,
    reference_time: int,
    *,
    config: PolicyConfig,
    capabilities: Iterable[Capability] = (),
) -> Decision:
    """Decide whether `claimed_new_state` and `mint_event` are an admissible
    result of applying `operation` to `old_state` at `reference_time`.

    Returns ``Decision`` with ``accepted=True`` on success, or
    ``accepted=False`` with every rejection found, in check order.
    """
    structural = _structural_rejection(old_state, operation, reference_time)
    if structural is None and not isinstance(claimed_new_state, PoolState):
        structural = _invalid("claimed_new_state must be a PoolState")
    if structural is None and not isinstance(mint_event, MintEvent):
        structural = _invalid("mint_event must be a MintEvent")
    if structural is None:
        structural = _authorization_rejection(old_state, operation, frozenset(capabilities))
    if structural is not None:
        return _reject([structural], operation)

    _, precheck_fn, engine_fn, apply_fn, postcheck_fn = _DISPATCH[operation.kind]
    reasons = list(precheck_fn(old_state, operation, reference_time, config))

    try:
        result = engine_fn(old_state, operation, config)
    except EngineError as exc:
        reasons.append(exc.rejection)
        return _reject(reasons, operation)

    expected_state, lp_delta = apply_fn(old_state, result, reference_time)

    changed = expected_state.changed_fields(claimed_new_state)
    if changed:
        reasons.append(Rejection(RejectionKind.STATE_MISMATCH, f"fields differ: {', '.join(changed)}"))

    reasons += postcheck_fn(old_state, operation, result, claimed_new_state, config)
    reasons += check_supply(old_state, claimed_new_state, lp_delta, mint_event)

    if reasons:
        return _reject(reasons, operation, expected_state)
    return Decision(accepted=True, expected_state=expected_state)


def validate_or_raise(
    old_state: PoolState,
    operation: Operation,
    claimed_new_state: PoolState,
    mint_event: MintEvent,
    reference_time: int,
    *,
    config: PolicyConfig,
    capabilities: Iterable[Capability] = (),
) -> Decision:
    """Like ``validate()`` but raises on rejection instead of returning a result.

    Raises:
        TransitionRejected: carrying every rejection reason.
    """
    decision = validate(
        old_state,
        operation,
        claimed_new_state,
        mint_event,
        reference_time,
        config=config,
        capabilities=capabilities,
    )
    if not decision.accepted:
        raise TransitionRejected(decision.reasons)
    return decision


def build_transition(
    old_state: PoolState,
    operation: Operation,
    reference_time: int,
    *,
    config: PolicyConfig,
) -> Transition:
    """Compute the canonical post-state and mint event for `operation`.

    This only runs the engine; the result still has to pass ``validate()``.

    Raises:
        EngineError: malformed input or an engine failure.
    """
    structural = _structural_rejection(old_state, operation, reference_time)
    if structural is not None:
        raise EngineError(structural.kind, structural.detail)

    _, _, engine_fn, apply_fn, _ = _DISPATCH[operation.kind]
    result = engine_fn(old_state, operation, config)
    new_state, lp_delta = apply_fn(old_state, result, reference_time)
    return Transition(
        new_state=new_state,
        mint_event=MintEvent.of({old_state.lp_asset: lp_delta}),
        result=result,
    )
