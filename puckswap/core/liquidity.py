"""
Liquidity operations: initial deposit, proportional add, pro-rata withdrawal.
"""

from dataclasses import dataclass
from typing import Tuple

from ..kernels.python.lp_math_v1 import DEFAULT_RATIO_TOLERANCE_BPS, SCALE
from ..kernels.python.lp_math_v1 import burn_liquidity, deposit_deviation_bps, mint_liquidity, mint_liquidity_initial
from ..state.pools import Amount
from .errors import kernel_errors


@dataclass(frozen=True)
class LiquidityResult:
    ada_amount: Amount
    token_amount: Amount
    lp_minted: Amount
    new_ada_reserve: Amount
    new_token_reserve: Amount
    new_total_supply: Amount
    ada_ratio: int
    token_ratio: int
    deviation_bps: int
    is_balanced: bool
    is_initial: bool


@dataclass(frozen=True)
class WithdrawalResult:
    lp_burned: Amount
    ada_out: Amount
    token_out: Amount
    new_ada_reserve: Amount
    new_token_reserve: Amount
    new_total_supply: Amount
    share_bps: int


def compute_initial_add(ada_amount: Amount, token_amount: Amount) -> LiquidityResult:
    """
    First deposit into an empty pool.

    LP minting:
        lp = floor(sqrt(ada_amount * token_amount))

    The caller is responsible for checking that the prior state is all-zero;
    the transition validator does so before calling this.

    Raises:
        EngineError: InvalidInput / ArithmeticOverflow
    """
    with kernel_errors():
        res = mint_liquidity_initial(ada_amount=ada_amount, token_amount=token_amount)
    return LiquidityResult(
        ada_amount=ada_amount,
        token_amount=token_amount,
        lp_minted=res.lp_minted,
        new_ada_reserve=res.new_ada_reserve,
        new_token_reserve=res.new_token_reserve,
        new_total_supply=res.new_total_supply,
        ada_ratio=SCALE,
        token_ratio=SCALE,
        deviation_bps=0,
        is_balanced=True,
        is_initial=True,
    )


def compute_add(
    reserves: Tuple[Amount, Amount],
    lp_supply: Amount,
    ada_amount: Amount,
    token_amount: Amount,
    tolerance_bps: int = DEFAULT_RATIO_TOLERANCE_BPS,
) -> LiquidityResult:
    """
    Add liquidity to an initialised pool.

        ada_ratio   = ada_amount * 1e6 / ada_reserve
        token_ratio = token_amount * 1e6 / token_reserve
        lp_minted   = lp_supply * min(ada_ratio, token_ratio) / 1e6

    Both requested amounts enter the reserves in full. `is_balanced` reports
    whether the ratio deviation is within `tolerance_bps`; rejecting an
    unbalanced deposit is the security policy's job.

    Raises:
        EngineError: InvalidInput / ArithmeticOverflow
    """
    ada_reserve, token_reserve = reserves
    with kernel_errors():
        res = mint_liquidity(
            ada_reserve=ada_reserve,
            token_reserve=token_reserve,
            total_supply=lp_supply,
            ada_amount=ada_amount,
            token_amount=token_amount,
            tolerance_bps=tolerance_bps,
        )
    return LiquidityResult(
        ada_amount=ada_amount,
        token_amount=token_amount,
        lp_minted=res.lp_minted,
        new_ada_reserve=res.new_ada_reserve,
        new_token_reserve=res.new_token_reserve,
        new_total_supply=res.new_total_supply,
        ada_ratio=res.ada_ratio,
        token_ratio=res.token_ratio,
        deviation_bps=res.deviation_bps,
        is_balanced=res.is_balanced,
        is_initial=False,
    )


def deposit_deviation(reserves: Tuple[Amount, Amount], ada_amount: Amount, token_amount: Amount) -> int:
    """Deviation in bps between the two scaled deposit ratios, 0 when both floor to zero."""
    ada_reserve, token_reserve = reserves
    with kernel_errors():
        return deposit_deviation_bps(
            ada_reserve=ada_reserve,
            token_reserve=token_reserve,
            ada_amount=ada_amount,
            token_amount=token_amount,
        )


def compute_withdrawal(
    reserves: Tuple[Amount, Amount],
    lp_supply: Amount,
    lp_burn: Amount,
) -> WithdrawalResult:
    """
    Remove liquidity by burning LP tokens.

    Outputs:
        ada_out   = floor(ada_reserve * lp_burn / lp_supply)
        token_out = floor(token_reserve * lp_burn / lp_supply)
        share_bps = floor(lp_burn * 10_000 / lp_supply)

    New reserves and supply are the old values minus exactly what is withdrawn.

    Raises:
        EngineError: InvalidInput / ArithmeticOverflow
    """
    ada_reserve, token_reserve = reserves
    with kernel_errors():
        res = burn_liquidity(
            ada_reserve=ada_reserve,
            token_reserve=token_reserve,
            total_supply=lp_supply,
            lp_burn=lp_burn,
        )
    return WithdrawalResult(
        lp_burned=lp_burn,
        ada_out=res.ada_out,
        token_out=res.token_out,
        new_ada_reserve=res.new_ada_reserve,
        new_token_reserve=res.new_token_reserve,
        new_total_supply=res.new_total_supply,
        share_bps=res.share_bps,
    )
