"""LP supply ledger.

The pool's `total_lp_supply` is authoritative and only moves by the exact
amount the liquidity engine mints or burns. A transition's mint event is
checked against that delta, never used to derive it.
"""

from __future__ import annotations

from typing import List

from ..state.operations import MintEvent
from ..state.pools import PoolState
from .errors import Rejection, RejectionKind


def check_supply(
    old_state: PoolState,
    claimed: PoolState,
    expected_delta: int,
    mint_event: MintEvent,
) -> List[Rejection]:
    """
    Check one transition's LP accounting.

    Args:
        old_state: Pool state before the transition
        claimed: Claimed pool state after the transition
        expected_delta: +lp_minted for adds, -lp_burned for withdrawals, 0 for swaps
        mint_event: Quantities minted/burned under the pool's minting authority

    Returns:
        Rejections, in check order (empty when the accounting is exact)
    """
    out: List[Rejection] = []
    lp_asset = old_state.lp_asset

    minted = mint_event.quantity(lp_asset)
    if minted != expected_delta:
        out.append(Rejection(
            RejectionKind.SUPPLY_MISMATCH,
            f"mint event moves {lp_asset} by {minted}, expected {expected_delta}",
        ))

    expected_supply = old_state.total_lp_supply + expected_delta
    if claimed.total_lp_supply != expected_supply:
        out.append(Rejection(
            RejectionKind.SUPPLY_MISMATCH,
            f"claimed total_lp_supply {claimed.total_lp_supply} != {expected_supply}",
        ))

    extra = sorted(asset for asset in mint_event.affected_assets() if asset != lp_asset)
    if extra:
        out.append(Rejection(
            RejectionKind.UNAUTHORIZED_EXTRA_MINT,
            f"mint event touches assets other than {lp_asset}: {extra}",
        ))
    return out
