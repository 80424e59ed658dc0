"""
Pool state for PuckSwap constant-product (ADA / token) pools.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import List, Tuple

from .operations import SwapDirection


# Type aliases
AssetId = str  # "<policy_id>.<asset_name>" (or "lovelace" for ADA)
Amount = int  # Non-negative integer (arbitrary precision)

ADA_ASSET = "lovelace"

BPS_DENOM = 10_000
MAX_FEE_BPS = 10_000
MAX_PROTOCOL_FEE_BPS = 1_000
MAX_AMOUNT = 2**64 - 1


def _require_non_negative_int(name: str, value: object) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")


@dataclass(frozen=True)
class PoolStats:
    """Cumulative per-pool counters carried in the pool datum."""

    total_volume_ada: Amount = 0
    total_volume_token: Amount = 0
    total_fees_ada: Amount = 0
    total_fees_token: Amount = 0
    swap_count: int = 0

    def __post_init__(self) -> None:
        for f in fields(self):
            _require_non_negative_int(f.name, getattr(self, f.name))

    def record_swap(
        self,
        direction: SwapDirection,
        amount_in: Amount,
        amount_out: Amount,
        fee_amount: Amount,
    ) -> "PoolStats":
        """Return the counters after one swap (input side collects the fee)."""
        if direction is SwapDirection.ADA_TO_TOKEN:
            return replace(
                self,
                total_volume_ada=self.total_volume_ada + amount_in,
                total_volume_token=self.total_volume_token + amount_out,
                total_fees_ada=self.total_fees_ada + fee_amount,
                swap_count=self.swap_count + 1,
            )
        return replace(
            self,
            total_volume_ada=self.total_volume_ada + amount_out,
            total_volume_token=self.total_volume_token + amount_in,
            total_fees_token=self.total_fees_token + fee_amount,
            swap_count=self.swap_count + 1,
        )


@dataclass(frozen=True)
class PoolState:
    """
    State of a PuckSwap liquidity pool.

    Attributes:
        ada_reserve: ADA (lovelace) held by the pool
        token_reserve: Token held by the pool
        total_lp_supply: Outstanding LP tokens (authoritative; never re-derived from a mint)
        lp_asset: LP token denomination minted/burned by this pool
        fee_bps: Swap fee in basis points (0-10000)
        protocol_fee_bps: Protocol share of the swap fee in basis points (0-1000)
        paused: Emergency pause flag (only emergency withdrawals are admitted)
        last_interaction_time: Reference time of the last accepted transition
        stats: Cumulative volume / fee counters
    """

    ada_reserve: Amount
    token_reserve: Amount
    total_lp_supply: Amount
    lp_asset: AssetId
    fee_bps: int = 30
    protocol_fee_bps: int = 0
    paused: bool = False
    last_interaction_time: int = 0
    stats: PoolStats = PoolStats()

    def __post_init__(self) -> None:
        """Validate structural invariants (types, signs, fee bounds)."""
        for name in ("ada_reserve", "token_reserve", "total_lp_supply", "last_interaction_time"):
            _require_non_negative_int(name, getattr(self, name))
        _require_non_negative_int("fee_bps", self.fee_bps)
        _require_non_negative_int("protocol_fee_bps", self.protocol_fee_bps)

        if self.fee_bps > MAX_FEE_BPS:
            raise ValueError(f"fee_bps must be in [0, {MAX_FEE_BPS}]: {self.fee_bps}")
        if self.protocol_fee_bps > MAX_PROTOCOL_FEE_BPS:
            raise ValueError(
                f"protocol_fee_bps must be in [0, {MAX_PROTOCOL_FEE_BPS}]: {self.protocol_fee_bps}"
            )
        if not isinstance(self.paused, bool):
            raise TypeError("paused must be a bool")
        if not isinstance(self.lp_asset, str) or not self.lp_asset.strip():
            raise ValueError("lp_asset must be a non-empty string")
        if self.lp_asset == ADA_ASSET:
            raise ValueError("lp_asset cannot be the ADA asset")
        if not isinstance(self.stats, PoolStats):
            raise TypeError("stats must be a PoolStats")

    @classmethod
    def empty(
        cls,
        lp_asset: AssetId,
        *,
        fee_bps: int = 30,
        protocol_fee_bps: int = 0,
        created_at: int = 0,
    ) -> "PoolState":
        """The all-zero state a pool starts in before its initial deposit."""
        return cls(
            ada_reserve=0,
            token_reserve=0,
            total_lp_supply=0,
            lp_asset=lp_asset,
            fee_bps=fee_bps,
            protocol_fee_bps=protocol_fee_bps,
            last_interaction_time=created_at,
        )

    @property
    def is_initialized(self) -> bool:
        return self.ada_reserve > 0 or self.token_reserve > 0 or self.total_lp_supply > 0

    def constant_product(self) -> int:
        """k = ada_reserve * token_reserve."""
        return self.ada_reserve * self.token_reserve

    def reserves_for(self, direction: SwapDirection) -> Tuple[Amount, Amount]:
        """Return (reserve_in, reserve_out) for a swap direction."""
        if direction is SwapDirection.ADA_TO_TOKEN:
            return self.ada_reserve, self.token_reserve
        if direction is SwapDirection.TOKEN_TO_ADA:
            return self.token_reserve, self.ada_reserve
        raise ValueError(f"unknown swap direction: {direction!r}")

    def consistency_errors(self) -> List[str]:
        """
        Cross-field invariants that the constructor does not enforce.

        An uninitialised pool has zero reserves and zero supply; an initialised
        one has both reserves and the supply strictly positive.
        """
        errors: List[str] = []
        zero = (self.ada_reserve == 0, self.token_reserve == 0, self.total_lp_supply == 0)
        if any(zero) and not all(zero):
            errors.append(
                "reserves and LP supply must be all zero or all positive: "
                f"({self.ada_reserve}, {self.token_reserve}, {self.total_lp_supply})"
            )
        return errors

    def oversized_fields(self) -> List[str]:
        """Names of amount fields outside [0, MAX_AMOUNT]."""
        return [
            name
            for name in ("ada_reserve", "token_reserve", "total_lp_supply")
            if getattr(self, name) > MAX_AMOUNT
        ]

    def changed_fields(self, other: "PoolState") -> List[str]:
        """Field names whose values differ from `other` (stats expanded as `stats.<name>`)."""
        out: List[str] = []
        for f in fields(self):
            mine = getattr(self, f.name)
            theirs = getattr(other, f.name)
            if f.name == "stats" and isinstance(theirs, PoolStats):
                out.extend(
                    f"stats.{sf.name}"
                    for sf in fields(mine)
                    if getattr(mine, sf.name) != getattr(theirs, sf.name)
                )
            elif mine != theirs:
                out.append(f.name)
        return out
