"""
CPMM swap kernel (v1 semantics).

Exact-in constant-product swap with the fee charged on the input, expressed
entirely in basis-point scaled integers:

    fee_multiplier   = 10_000 - fee_bps
    amount_in_scaled = amount_in * fee_multiplier
    denominator      = reserve_in * 10_000 + amount_in_scaled
    amount_out       = floor(amount_in_scaled * reserve_out / denominator)

The whole gross input stays in the pool (LP fee and protocol share alike);
the protocol share is reported for accounting only.

Amounts live in the on-chain domain [0, MAX_AMOUNT]. Intermediates are Python
ints and therefore never wrap; any input or post-state outside the domain
raises OverflowError instead of being truncated.
"""

from __future__ import annotations

from dataclasses import dataclass


BPS_DENOM = 10_000
MAX_AMOUNT = 2**64 - 1


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _require_in_domain(name: str, value: int) -> None:
    if value > MAX_AMOUNT:
        raise OverflowError(f"{name} exceeds MAX_AMOUNT: {value}")


@dataclass(frozen=True)
class SwapExactInResult:
    amount_out: int
    fee_total: int
    protocol_fee: int
    amount_in_scaled: int
    new_reserve_in: int
    new_reserve_out: int
    k_before: int
    k_after: int
    price_impact_bps: int


def compute_fee_total(*, amount_in: int, fee_bps: int) -> int:
    """
    Fee withheld from pricing: `amount_in - floor(amount_in * (10_000 - fee_bps) / 10_000)`.

    Equivalent to `ceil(amount_in * fee_bps / 10_000)`, so the pool never under-charges.
    """
    _require_int("amount_in", amount_in)
    _require_int("fee_bps", fee_bps)
    if amount_in < 0:
        raise ValueError("amount_in must be non-negative")
    if not (0 <= fee_bps <= BPS_DENOM):
        raise ValueError(f"fee_bps must be in [0, {BPS_DENOM}]")
    return amount_in - (amount_in * (BPS_DENOM - fee_bps)) // BPS_DENOM


def compute_protocol_fee(*, fee_total: int, protocol_fee_bps: int) -> int:
    """
    Compute `protocol_fee = floor(fee_total * protocol_fee_bps / 10_000)`.
    """
    _require_int("fee_total", fee_total)
    _require_int("protocol_fee_bps", protocol_fee_bps)
    if fee_total < 0:
        raise ValueError("fee_total must be non-negative")
    if not (0 <= protocol_fee_bps <= BPS_DENOM):
        raise ValueError(f"protocol_fee_bps must be in [0, {BPS_DENOM}]")
    return (fee_total * protocol_fee_bps) // BPS_DENOM


def price_impact_bps(
    *,
    reserve_in: int,
    reserve_out: int,
    new_reserve_in: int,
    new_reserve_out: int,
) -> int:
    """
    Relative move of the output-per-input mid price, in basis points (floor).

        before = reserve_out / reserve_in
        after  = new_reserve_out / new_reserve_in
        impact = (before - after) / before
               = (reserve_out * new_reserve_in - new_reserve_out * reserve_in)
                 / (reserve_out * new_reserve_in)
    """
    for name, v in (
        ("reserve_in", reserve_in),
        ("reserve_out", reserve_out),
        ("new_reserve_in", new_reserve_in),
        ("new_reserve_out", new_reserve_out),
    ):
        _require_int(name, v)
    if reserve_in <= 0 or reserve_out <= 0 or new_reserve_in <= 0:
        raise ValueError("price impact needs positive reserves")
    if new_reserve_out < 0:
        raise ValueError("new_reserve_out must be non-negative")

    before = reserve_out * new_reserve_in
    after = new_reserve_out * reserve_in
    if after >= before:
        return 0
    return ((before - after) * BPS_DENOM) // before


def swap_exact_in(
    *,
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    fee_bps: int,
    protocol_fee_bps: int = 0,
) -> SwapExactInResult:
    """
    Exact-in swap quote + post-state.

    Raises ValueError on invalid inputs or if the swap would produce a zero output,
    OverflowError if an input or post-state leaves the amount domain.
    """
    for name, v in (
        ("reserve_in", reserve_in),
        ("reserve_out", reserve_out),
        ("amount_in", amount_in),
        ("fee_bps", fee_bps),
        ("protocol_fee_bps", protocol_fee_bps),
    ):
        _require_int(name, v)

    if reserve_in <= 0 or reserve_out <= 0:
        raise ValueError(f"reserves must be positive: ({reserve_in}, {reserve_out})")
    if amount_in <= 0:
        raise ValueError(f"amount_in must be positive: {amount_in}")
    if not (0 <= fee_bps <= BPS_DENOM):
        raise ValueError(f"fee_bps must be in [0, {BPS_DENOM}]: {fee_bps}")
    if not (0 <= protocol_fee_bps <= BPS_DENOM):
        raise ValueError(f"protocol_fee_bps must be in [0, {BPS_DENOM}]: {protocol_fee_bps}")
    for name, v in (("reserve_in", reserve_in), ("reserve_out", reserve_out), ("amount_in", amount_in)):
        _require_in_domain(name, v)

    k_before = reserve_in * reserve_out

    fee_multiplier = BPS_DENOM - fee_bps
    amount_in_scaled = amount_in * fee_multiplier
    denominator = reserve_in * BPS_DENOM + amount_in_scaled
    amount_out = (amount_in_scaled * reserve_out) // denominator

    if amount_out <= 0:
        raise ValueError("amount_out is zero (trade too small)")
    if amount_out >= reserve_out:
        raise AssertionError("amount_out must stay below reserve_out")

    fee_total = compute_fee_total(amount_in=amount_in, fee_bps=fee_bps)
    protocol_fee = compute_protocol_fee(fee_total=fee_total, protocol_fee_bps=protocol_fee_bps)

    new_reserve_in = reserve_in + amount_in
    new_reserve_out = reserve_out - amount_out
    _require_in_domain("new_reserve_in", new_reserve_in)

    k_after = new_reserve_in * new_reserve_out

    return SwapExactInResult(
        amount_out=amount_out,
        fee_total=fee_total,
        protocol_fee=protocol_fee,
        amount_in_scaled=amount_in_scaled,
        new_reserve_in=new_reserve_in,
        new_reserve_out=new_reserve_out,
        k_before=k_before,
        k_after=k_after,
        price_impact_bps=price_impact_bps(
            reserve_in=reserve_in,
            reserve_out=reserve_out,
            new_reserve_in=new_reserve_in,
            new_reserve_out=new_reserve_out,
        ),
    )


def min_out_for_tolerance(*, amount_out: int, slippage_tolerance_bps: int) -> int:
    """
    Smallest acceptable output for a quoted `amount_out` under a slippage tolerance:
    `floor(amount_out * (10_000 - slippage_tolerance_bps) / 10_000)`.
    """
    _require_int("amount_out", amount_out)
    _require_int("slippage_tolerance_bps", slippage_tolerance_bps)
    if amount_out < 0:
        raise ValueError("amount_out must be non-negative")
    if not (0 <= slippage_tolerance_bps <= BPS_DENOM):
        raise ValueError(f"slippage_tolerance_bps must be in [0, {BPS_DENOM}]")
    return (amount_out * (BPS_DENOM - slippage_tolerance_bps)) // BPS_DENOM
