"""
Liquidity math kernel (v1 semantics).

Pure functions with explicit rounding rules:
- initial mint: `floor(sqrt(ada_amount * token_amount))` (integer isqrt, never float sqrt)
- proportional mint: ratios scaled by SCALE, credited at the *smaller* ratio
- burn: pro-rata floor division, post-state derived by subtraction
"""

from __future__ import annotations

import math
from dataclasses import dataclass


SCALE = 1_000_000
BPS_DENOM = 10_000
DEFAULT_RATIO_TOLERANCE_BPS = 500
MAX_AMOUNT = 2**64 - 1


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _require_in_domain(name: str, value: int) -> None:
    if value > MAX_AMOUNT:
        raise OverflowError(f"{name} exceeds MAX_AMOUNT: {value}")


@dataclass(frozen=True)
class MintLiquidityResult:
    lp_minted: int
    new_ada_reserve: int
    new_token_reserve: int
    new_total_supply: int
    ada_ratio: int
    token_ratio: int
    effective_ratio: int
    deviation_bps: int
    is_balanced: bool


@dataclass(frozen=True)
class BurnLiquidityResult:
    ada_out: int
    token_out: int
    new_ada_reserve: int
    new_token_reserve: int
    new_total_supply: int
    share_bps: int


def mint_liquidity_initial(*, ada_amount: int, token_amount: int) -> MintLiquidityResult:
    """
    Initial liquidity mint (pool creation): `lp = isqrt(ada_amount * token_amount)`.
    """
    _require_int("ada_amount", ada_amount)
    _require_int("token_amount", token_amount)
    if ada_amount <= 0 or token_amount <= 0:
        raise ValueError("initial amounts must be positive")
    _require_in_domain("ada_amount", ada_amount)
    _require_in_domain("token_amount", token_amount)

    lp_minted = math.isqrt(ada_amount * token_amount)
    if lp_minted <= 0:
        raise ValueError("insufficient initial liquidity (isqrt(ada*token) == 0)")

    return MintLiquidityResult(
        lp_minted=lp_minted,
        new_ada_reserve=ada_amount,
        new_token_reserve=token_amount,
        new_total_supply=lp_minted,
        ada_ratio=SCALE,
        token_ratio=SCALE,
        effective_ratio=SCALE,
        deviation_bps=0,
        is_balanced=True,
    )


def ratio_deviation_bps(ada_ratio: int, token_ratio: int) -> int:
    """`|ada_ratio - token_ratio| * 10_000 / max(ada_ratio, token_ratio)`, floor."""
    _require_int("ada_ratio", ada_ratio)
    _require_int("token_ratio", token_ratio)
    if ada_ratio < 0 or token_ratio < 0:
        raise ValueError("ratios must be non-negative")
    hi = max(ada_ratio, token_ratio)
    if hi == 0:
        raise ValueError("both ratios are zero")
    return (abs(ada_ratio - token_ratio) * BPS_DENOM) // hi


def deposit_ratios(*, ada_reserve: int, token_reserve: int, ada_amount: int, token_amount: int) -> tuple[int, int]:
    """`(ada_amount * SCALE // ada_reserve, token_amount * SCALE // token_reserve)`."""
    for name, v in (
        ("ada_reserve", ada_reserve),
        ("token_reserve", token_reserve),
        ("ada_amount", ada_amount),
        ("token_amount", token_amount),
    ):
        _require_int(name, v)
    if ada_reserve <= 0 or token_reserve <= 0:
        raise ValueError("reserves must be positive")
    if ada_amount < 0 or token_amount < 0:
        raise ValueError("deposit amounts must be non-negative")
    return (ada_amount * SCALE) // ada_reserve, (token_amount * SCALE) // token_reserve


def deposit_deviation_bps(*, ada_reserve: int, token_reserve: int, ada_amount: int, token_amount: int) -> int:
    """
    Ratio deviation of a deposit against the current reserves.

    A deposit whose two scaled ratios both floor to zero has no skew to report
    and yields 0; `mint_liquidity` refuses it separately.
    """
    ada_ratio, token_ratio = deposit_ratios(
        ada_reserve=ada_reserve,
        token_reserve=token_reserve,
        ada_amount=ada_amount,
        token_amount=token_amount,
    )
    if ada_ratio == 0 and token_ratio == 0:
        return 0
    return ratio_deviation_bps(ada_ratio, token_ratio)


def mint_liquidity(
    *,
    ada_reserve: int,
    token_reserve: int,
    total_supply: int,
    ada_amount: int,
    token_amount: int,
    tolerance_bps: int = DEFAULT_RATIO_TOLERANCE_BPS,
) -> MintLiquidityResult:
    """
    Mint LP tokens for a deposit into an initialised pool.

    The full requested amounts enter the reserves; LP is credited at the minimum of the
    two scaled ratios so that skewing one side never over-credits the depositor.
    """
    for name, v in (
        ("ada_reserve", ada_reserve),
        ("token_reserve", token_reserve),
        ("total_supply", total_supply),
        ("ada_amount", ada_amount),
        ("token_amount", token_amount),
        ("tolerance_bps", tolerance_bps),
    ):
        _require_int(name, v)

    if ada_reserve <= 0 or token_reserve <= 0 or total_supply <= 0:
        raise ValueError("cannot add liquidity to an uninitialised pool")
    if ada_amount <= 0 or token_amount <= 0:
        raise ValueError("deposit amounts must be positive")
    if not (0 <= tolerance_bps <= BPS_DENOM):
        raise ValueError(f"tolerance_bps must be in [0, {BPS_DENOM}]")
    for name, v in (
        ("ada_reserve", ada_reserve),
        ("token_reserve", token_reserve),
        ("total_supply", total_supply),
        ("ada_amount", ada_amount),
        ("token_amount", token_amount),
    ):
        _require_in_domain(name, v)

    ada_ratio, token_ratio = deposit_ratios(
        ada_reserve=ada_reserve,
        token_reserve=token_reserve,
        ada_amount=ada_amount,
        token_amount=token_amount,
    )
    if ada_ratio == 0 and token_ratio == 0:
        raise ValueError("deposit too small relative to reserves")
    effective_ratio = min(ada_ratio, token_ratio)

    lp_minted = (total_supply * effective_ratio) // SCALE
    if lp_minted <= 0:
        raise ValueError(f"computed LP amount is non-positive: {lp_minted}")

    new_ada_reserve = ada_reserve + ada_amount
    new_token_reserve = token_reserve + token_amount
    new_total_supply = total_supply + lp_minted
    for name, v in (
        ("new_ada_reserve", new_ada_reserve),
        ("new_token_reserve", new_token_reserve),
        ("new_total_supply", new_total_supply),
    ):
        _require_in_domain(name, v)

    deviation = ratio_deviation_bps(ada_ratio, token_ratio)
    return MintLiquidityResult(
        lp_minted=lp_minted,
        new_ada_reserve=new_ada_reserve,
        new_token_reserve=new_token_reserve,
        new_total_supply=new_total_supply,
        ada_ratio=ada_ratio,
        token_ratio=token_ratio,
        effective_ratio=effective_ratio,
        deviation_bps=deviation,
        is_balanced=deviation <= tolerance_bps,
    )


def burn_liquidity(
    *,
    ada_reserve: int,
    token_reserve: int,
    total_supply: int,
    lp_burn: int,
) -> BurnLiquidityResult:
    """
    Pro-rata withdrawal:
        ada_out   = floor(ada_reserve * lp_burn / total_supply)
        token_out = floor(token_reserve * lp_burn / total_supply)
    """
    for name, v in (
        ("ada_reserve", ada_reserve),
        ("token_reserve", token_reserve),
        ("total_supply", total_supply),
        ("lp_burn", lp_burn),
    ):
        _require_int(name, v)

    if ada_reserve < 0 or token_reserve < 0:
        raise ValueError("reserves must be non-negative")
    if total_supply <= 0:
        raise ValueError(f"LP supply must be positive: {total_supply}")
    if lp_burn <= 0:
        raise ValueError(f"LP amount must be positive: {lp_burn}")
    if lp_burn > total_supply:
        raise ValueError(f"cannot burn more LP than supply: {lp_burn} > {total_supply}")
    for name, v in (("ada_reserve", ada_reserve), ("token_reserve", token_reserve), ("total_supply", total_supply)):
        _require_in_domain(name, v)

    ada_out = (ada_reserve * lp_burn) // total_supply
    token_out = (token_reserve * lp_burn) // total_supply

    return BurnLiquidityResult(
        ada_out=ada_out,
        token_out=token_out,
        new_ada_reserve=ada_reserve - ada_out,
        new_token_reserve=token_reserve - token_out,
        new_total_supply=total_supply - lp_burn,
        share_bps=(lp_burn * BPS_DENOM) // total_supply,
    )
