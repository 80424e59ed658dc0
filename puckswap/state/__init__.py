"""
State model for PuckSwap pools
"""

from .operations import (
    Capability,
    LiquidityAddRequest,
    MintEvent,
    Operation,
    OperationKind,
    SwapDirection,
    SwapRequest,
    WithdrawalRequest,
)
from .pools import ADA_ASSET, MAX_AMOUNT, PoolState, PoolStats

__all__ = [
    "ADA_ASSET",
    "MAX_AMOUNT",
    "PoolState",
    "PoolStats",
    "Capability",
    "LiquidityAddRequest",
    "MintEvent",
    "Operation",
    "OperationKind",
    "SwapDirection",
    "SwapRequest",
    "WithdrawalRequest",
]
