"""
Constant Product Market Maker (CPMM) swap engine.

This module wraps the integer swap kernel with pool-level semantics
(swap direction, ADA/token reserve mapping) and typed rejection kinds.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic / Deterministic Rounding
- Time Complexity: O(1) per swap operation
- Space Complexity: O(1) auxiliary
- Invariant: After each swap, x' * y' >= k (where k = x * y before swap)
"""

from dataclasses import dataclass
from typing import Tuple

from ..kernels.python.cpmm_swap_v1 import min_out_for_tolerance as _kernel_min_out_for_tolerance
from ..kernels.python.cpmm_swap_v1 import swap_exact_in as _kernel_swap_exact_in_v1
from ..state.operations import SwapDirection
from ..state.pools import Amount
from .errors import EngineError, RejectionKind, kernel_errors


@dataclass(frozen=True)
class SwapResult:
    direction: SwapDirection
    amount_in: Amount
    amount_out: Amount
    fee_amount: Amount
    protocol_fee: Amount
    price_impact_bps: int
    new_ada_reserve: Amount
    new_token_reserve: Amount
    k_before: int
    k_after: int


def compute_swap(
    reserves: Tuple[Amount, Amount],
    amount_in: Amount,
    direction: SwapDirection,
    fee_bps: int,
    protocol_fee_bps: int = 0,
) -> SwapResult:
    """
    Compute an exact-in swap against `(ada_reserve, token_reserve)`.

    Pricing (fee on input, basis-point scale):
        amount_in_scaled = amount_in * (10_000 - fee_bps)
        output = floor(amount_in_scaled * reserve_out / (reserve_in * 10_000 + amount_in_scaled))

    Post-swap reserves:
        new_reserve_in = reserve_in + amount_in  (fee stays in pool)
        new_reserve_out = reserve_out - output

    Args:
        reserves: Current (ada_reserve, token_reserve)
        amount_in: Exact input amount
        direction: Which side is paid in
        fee_bps: Fee in basis points (0-10000)
        protocol_fee_bps: Protocol share of the fee (reported, not removed)

    Returns:
        SwapResult with the derived post-state and price impact

    Raises:
        EngineError: InvalidInput / ArithmeticOverflow
    """
    if not isinstance(direction, SwapDirection):
        raise EngineError(RejectionKind.INVALID_INPUT, f"unknown swap direction: {direction!r}")
    ada_reserve, token_reserve = reserves

    if direction is SwapDirection.ADA_TO_TOKEN:
        reserve_in, reserve_out = ada_reserve, token_reserve
    else:
        reserve_in, reserve_out = token_reserve, ada_reserve

    with kernel_errors():
        res = _kernel_swap_exact_in_v1(
            reserve_in=reserve_in,
            reserve_out=reserve_out,
            amount_in=amount_in,
            fee_bps=fee_bps,
            protocol_fee_bps=protocol_fee_bps,
        )

    # Verify invariant: the whole input stays in the pool, so k must not decrease.
    if res.k_after < res.k_before:
        raise AssertionError(f"Invariant violation: new_k ({res.k_after}) < old_k ({res.k_before})")

    if direction is SwapDirection.ADA_TO_TOKEN:
        new_ada_reserve, new_token_reserve = res.new_reserve_in, res.new_reserve_out
    else:
        new_ada_reserve, new_token_reserve = res.new_reserve_out, res.new_reserve_in

    return SwapResult(
        direction=direction,
        amount_in=amount_in,
        amount_out=res.amount_out,
        fee_amount=res.fee_total,
        protocol_fee=res.protocol_fee,
        price_impact_bps=res.price_impact_bps,
        new_ada_reserve=new_ada_reserve,
        new_token_reserve=new_token_reserve,
        k_before=res.k_before,
        k_after=res.k_after,
    )


def quote_min_out(expected_out: Amount, slippage_tolerance_bps: int) -> Amount:
    """
    Derive a `min_out` for a swap request from a quoted output and a tolerance.

    E.g. a quote of 181 with 50 bps tolerance gives floor(181 * 9950 / 10000) = 180.
    """
    with kernel_errors():
        return _kernel_min_out_for_tolerance(
            amount_out=expected_out,
            slippage_tolerance_bps=slippage_tolerance_bps,
        )
