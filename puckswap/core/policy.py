"""Security policy predicates.

Each `check_*` function is a pure predicate returning `None` (accept) or a
`Rejection` with a specific kind. The per-operation composers run every
predicate and return the complete list.

Prechecks only need the request and the pre-state (deadline, dust, caps on
the old reserves, deposit ratio balance) and run before the engine.
Postchecks need the engine result and the claimed post-state.

Draining floors apply to the reserves a transition decreases: the output
side of a swap, both sides and the LP supply of a withdrawal, and the initial
deposit that creates a pool.
"""

from __future__ import annotations

from typing import List, Optional

from ..state.operations import LiquidityAddRequest, SwapDirection, SwapRequest, WithdrawalRequest
from ..state.pools import BPS_DENOM, PoolState
from .config import PolicyConfig
from .cpmm import SwapResult
from .errors import Rejection, RejectionKind
from .liquidity import LiquidityResult, WithdrawalResult, deposit_deviation


def check_deadline(reference_time: int, deadline: int) -> Optional[Rejection]:
    if reference_time > deadline:
        return Rejection(
            RejectionKind.DEADLINE_EXPIRED,
            f"reference_time {reference_time} > deadline {deadline}",
        )
    return None


def check_dust(name: str, amount: int, minimum: int) -> Optional[Rejection]:
    if amount < minimum:
        return Rejection(RejectionKind.DUST_AMOUNT, f"{name} {amount} < minimum {minimum}")
    return None


def check_min_output(name: str, actual: int, minimum: int) -> Optional[Rejection]:
    if actual < minimum:
        return Rejection(RejectionKind.SLIPPAGE_VIOLATION, f"{name} {actual} < minimum {minimum}")
    return None


def check_reserve_fraction(name: str, amount: int, reserve: int, max_bps: int) -> Optional[Rejection]:
    """`amount <= reserve * max_bps / 10_000`, compared without division."""
    if amount * BPS_DENOM > reserve * max_bps:
        return Rejection(
            RejectionKind.EXCESSIVE_SINGLE_OPERATION,
            f"{name} {amount} exceeds {max_bps} bps of reserve {reserve}",
        )
    return None


def check_withdrawal_share(share_bps: int, config: PolicyConfig, *, emergency: bool) -> Optional[Rejection]:
    cap = config.withdrawal_share_cap(emergency=emergency)
    if share_bps > cap:
        mode = "emergency" if emergency else "normal"
        return Rejection(
            RejectionKind.EXCESSIVE_SINGLE_OPERATION,
            f"withdrawal share {share_bps} bps exceeds {mode} cap {cap} bps",
        )
    return None


def _effective_floor(floor: int, config: PolicyConfig) -> int:
    return floor if config.allow_full_drain else max(floor, 1)


def check_reserve_floor(name: str, new_reserve: int, floor: int, config: PolicyConfig) -> Optional[Rejection]:
    minimum = _effective_floor(floor, config)
    if new_reserve < minimum:
        return Rejection(
            RejectionKind.POOL_DRAINING_VIOLATION,
            f"{name} {new_reserve} below floor {minimum}",
        )
    return None


def check_supply_floor(new_supply: int, config: PolicyConfig, *, emergency: bool) -> Optional[Rejection]:
    minimum = _effective_floor(config.supply_floor(emergency=emergency), config)
    if new_supply < minimum:
        return Rejection(
            RejectionKind.POOL_DRAINING_VIOLATION,
            f"total_lp_supply {new_supply} below floor {minimum}",
        )
    return None


def check_ratio_balance(deviation_bps: int, tolerance_bps: int) -> Optional[Rejection]:
    if deviation_bps > tolerance_bps:
        return Rejection(
            RejectionKind.RATIO_IMBALANCE,
            f"deposit ratio deviation {deviation_bps} bps > tolerance {tolerance_bps} bps",
        )
    return None


def check_price_impact(impact_bps: int, *, caller_max_bps: int, policy_max_bps: int) -> List[Rejection]:
    out: List[Rejection] = []
    if impact_bps > caller_max_bps:
        out.append(Rejection(
            RejectionKind.SLIPPAGE_VIOLATION,
            f"price impact {impact_bps} bps > requested max {caller_max_bps} bps",
        ))
    if impact_bps > policy_max_bps:
        out.append(Rejection(
            RejectionKind.SLIPPAGE_VIOLATION,
            f"price impact {impact_bps} bps > policy max {policy_max_bps} bps",
        ))
    return out


def check_k_non_decreasing(old_state: PoolState, claimed: PoolState) -> Optional[Rejection]:
    old_k = old_state.constant_product()
    new_k = claimed.constant_product()
    if new_k < old_k:
        return Rejection(RejectionKind.STATE_MISMATCH, f"claimed k {new_k} < old k {old_k}")
    return None


def check_exact_deltas(
    old_state: PoolState,
    claimed: PoolState,
    *,
    ada_delta: int,
    token_delta: int,
) -> List[Rejection]:
    """Claimed reserves must move by exactly the engine delta (sign included)."""
    out: List[Rejection] = []
    for name, old, new, expected in (
        ("ada_reserve", old_state.ada_reserve, claimed.ada_reserve, ada_delta),
        ("token_reserve", old_state.token_reserve, claimed.token_reserve, token_delta),
    ):
        actual = new - old
        if actual != expected:
            out.append(Rejection(
                RejectionKind.STATE_MISMATCH,
                f"{name} moved by {actual}, expected {expected}",
            ))
    return out


def _collect(*checks: Optional[Rejection]) -> List[Rejection]:
    return [r for r in checks if r is not None]


# ---------------------------------------------------------------------------
# Swap
# ---------------------------------------------------------------------------


def swap_prechecks(
    old_state: PoolState,
    request: SwapRequest,
    reference_time: int,
    config: PolicyConfig,
) -> List[Rejection]:
    reserve_in, _ = old_state.reserves_for(request.direction)
    return _collect(
        check_deadline(reference_time, request.deadline),
        check_dust("amount_in", request.amount_in, config.min_swap_amount),
        check_reserve_fraction("amount_in", request.amount_in, reserve_in, config.max_swap_reserve_bps),
    )


def swap_postchecks(
    old_state: PoolState,
    request: SwapRequest,
    result: SwapResult,
    claimed: PoolState,
    config: PolicyConfig,
) -> List[Rejection]:
    if request.direction is SwapDirection.ADA_TO_TOKEN:
        drained = check_reserve_floor("token_reserve", result.new_token_reserve, config.min_token_reserve, config)
    else:
        drained = check_reserve_floor("ada_reserve", result.new_ada_reserve, config.min_ada_reserve, config)
    out = _collect(check_min_output("amount_out", result.amount_out, request.min_out))
    out += check_price_impact(
        result.price_impact_bps,
        caller_max_bps=request.max_slippage_bps,
        policy_max_bps=config.max_price_impact_bps,
    )
    out += _collect(drained, check_k_non_decreasing(old_state, claimed))
    return out


# ---------------------------------------------------------------------------
# Add liquidity
# ---------------------------------------------------------------------------


def add_prechecks(
    old_state: PoolState,
    request: LiquidityAddRequest,
    reference_time: int,
    config: PolicyConfig,
) -> List[Rejection]:
    out = _collect(
        check_deadline(reference_time, request.deadline),
        check_dust("ada_amount", request.ada_amount, config.min_ada_amount),
        check_dust("token_amount", request.token_amount, config.min_token_amount),
    )
    if not request.is_initial and old_state.is_initialized:
        out += _collect(
            check_reserve_fraction("ada_amount", request.ada_amount, old_state.ada_reserve, config.max_add_reserve_bps),
            check_reserve_fraction(
                "token_amount", request.token_amount, old_state.token_reserve, config.max_add_reserve_bps
            ),
            check_ratio_balance(
                deposit_deviation(
                    (old_state.ada_reserve, old_state.token_reserve), request.ada_amount, request.token_amount
                ),
                min(config.ratio_tolerance_bps, request.max_ratio_deviation_bps),
            ),
        )
    return out


def add_postchecks(
    old_state: PoolState,
    request: LiquidityAddRequest,
    result: LiquidityResult,
    claimed: PoolState,
    config: PolicyConfig,
) -> List[Rejection]:
    out = _collect(check_min_output("lp_minted", result.lp_minted, request.min_lp_out))
    if result.is_initial:
        out += _collect(
            check_reserve_floor("ada_reserve", result.new_ada_reserve, config.min_ada_reserve, config),
            check_reserve_floor("token_reserve", result.new_token_reserve, config.min_token_reserve, config),
            check_supply_floor(result.new_total_supply, config, emergency=False),
        )
    out += check_exact_deltas(
        old_state,
        claimed,
        ada_delta=result.ada_amount,
        token_delta=result.token_amount,
    )
    return out


# ---------------------------------------------------------------------------
# Withdrawal
# ---------------------------------------------------------------------------


def withdrawal_prechecks(
    old_state: PoolState,
    request: WithdrawalRequest,
    reference_time: int,
    config: PolicyConfig,
) -> List[Rejection]:
    return _collect(
        check_deadline(reference_time, request.deadline),
        check_dust("lp_tokens_to_burn", request.lp_tokens_to_burn, config.min_lp_burn),
    )


def withdrawal_postchecks(
    old_state: PoolState,
    request: WithdrawalRequest,
    result: WithdrawalResult,
    claimed: PoolState,
    config: PolicyConfig,
) -> List[Rejection]:
    emergency = request.emergency
    min_ada, min_token = config.reserve_floor(emergency=emergency)
    out = _collect(
        check_min_output("ada_out", result.ada_out, request.min_ada_out),
        check_min_output("token_out", result.token_out, request.min_token_out),
        check_withdrawal_share(result.share_bps, config, emergency=emergency),
        check_reserve_floor("ada_reserve", result.new_ada_reserve, min_ada, config),
        check_reserve_floor("token_reserve", result.new_token_reserve, min_token, config),
        check_supply_floor(result.new_total_supply, config, emergency=emergency),
    )
    out += check_exact_deltas(
        old_state,
        claimed,
        ada_delta=-result.ada_out,
        token_delta=-result.token_out,
    )
    return out
