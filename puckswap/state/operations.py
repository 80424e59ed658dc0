"""
Operation requests and the claimed mint/burn event of a pool transition.

Requests carry the caller's declared parameters only and are not validated
on construction: the transition validator checks their domains and reports
typed rejections instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import ClassVar, Dict, FrozenSet, Mapping, Tuple, Union


@unique
class OperationKind(Enum):
    """One member per pool redeemer."""
    SWAP = "swap"
    ADD_LIQUIDITY = "add_liquidity"
    REMOVE_LIQUIDITY = "remove_liquidity"


@unique
class SwapDirection(Enum):
    ADA_TO_TOKEN = "ada_to_token"
    TOKEN_TO_ADA = "token_to_ada"


@unique
class Capability(Enum):
    """Privileges a caller can hold for a single validation call."""
    EMERGENCY_WITHDRAW = "emergency_withdraw"


@dataclass(frozen=True)
class SwapRequest:
    amount_in: int
    direction: SwapDirection
    deadline: int
    min_out: int = 0
    max_slippage_bps: int = 10_000

    kind: ClassVar[OperationKind] = OperationKind.SWAP


@dataclass(frozen=True)
class LiquidityAddRequest:
    ada_amount: int
    token_amount: int
    deadline: int
    min_lp_out: int = 0
    is_initial: bool = False
    max_ratio_deviation_bps: int = 500

    kind: ClassVar[OperationKind] = OperationKind.ADD_LIQUIDITY


@dataclass(frozen=True)
class WithdrawalRequest:
    lp_tokens_to_burn: int
    deadline: int
    min_ada_out: int = 0
    min_token_out: int = 0
    emergency: bool = False

    kind: ClassVar[OperationKind] = OperationKind.REMOVE_LIQUIDITY


Operation = Union[SwapRequest, LiquidityAddRequest, WithdrawalRequest]


@dataclass(frozen=True)
class MintEvent:
    """
    Signed quantities minted (> 0) or burned (< 0) under the pool's minting
    authority in one transition, as `(asset, quantity)` pairs sorted by asset.
    """

    quantities: Tuple[Tuple[str, int], ...] = ()

    def __post_init__(self) -> None:
        seen = set()
        for entry in self.quantities:
            if not isinstance(entry, tuple) or len(entry) != 2:
                raise ValueError("mint entries must be (asset, quantity) pairs")
            asset, qty = entry
            if not isinstance(asset, str) or not asset:
                raise ValueError("mint asset must be a non-empty string")
            if not isinstance(qty, int) or isinstance(qty, bool):
                raise TypeError(f"mint quantity for {asset!r} must be an int")
            if asset in seen:
                raise ValueError(f"duplicate mint entry for {asset!r}")
            seen.add(asset)

    @classmethod
    def of(cls, quantities: Mapping[str, int]) -> "MintEvent":
        """Build from a mapping; zero quantities are dropped."""
        return cls(tuple(sorted((asset, qty) for asset, qty in quantities.items() if qty != 0)))

    @classmethod
    def none(cls) -> "MintEvent":
        return cls()

    def quantity(self, asset: str) -> int:
        for a, qty in self.quantities:
            if a == asset:
                return qty
        return 0

    def affected_assets(self) -> FrozenSet[str]:
        return frozenset(asset for asset, qty in self.quantities if qty != 0)

    def as_dict(self) -> Dict[str, int]:
        return dict(self.quantities)
