"""Rejection kinds and exception types for the PuckSwap rule engine.

Every failing check reports its own `RejectionKind`; kinds are never folded
into a single boolean so callers and tests can assert exact causes.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum, unique
from typing import Iterator, Sequence, Tuple


@unique
class RejectionKind(Enum):
    INVALID_INPUT = "InvalidInput"
    DEADLINE_EXPIRED = "DeadlineExpired"
    SLIPPAGE_VIOLATION = "SlippageViolation"
    DUST_AMOUNT = "DustAmount"
    EXCESSIVE_SINGLE_OPERATION = "ExcessiveSingleOperation"
    POOL_DRAINING_VIOLATION = "PoolDrainingViolation"
    RATIO_IMBALANCE = "RatioImbalance"
    ARITHMETIC_OVERFLOW = "ArithmeticOverflow"
    STATE_MISMATCH = "StateMismatch"
    SUPPLY_MISMATCH = "SupplyMismatch"
    UNAUTHORIZED_EXTRA_MINT = "UnauthorizedExtraMint"
    POOL_PAUSED = "PoolPaused"
    UNAUTHORIZED = "Unauthorized"


@dataclass(frozen=True)
class Rejection:
    kind: RejectionKind
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.kind.value}: {self.detail}"
        return self.kind.value


class EngineError(ValueError):
    """Raised by the swap/liquidity engines; carries the rejection kind."""

    def __init__(self, kind: RejectionKind, detail: str) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}")

    @property
    def rejection(self) -> Rejection:
        return Rejection(self.kind, self.detail)


class TransitionRejected(Exception):
    """Raised by `validate_or_raise()` when a transition is not admissible."""

    def __init__(self, reasons: Sequence[Rejection]) -> None:
        self.reasons: Tuple[Rejection, ...] = tuple(reasons)
        super().__init__("transition rejected: " + "; ".join(str(r) for r in self.reasons))

    @property
    def kinds(self) -> Tuple[RejectionKind, ...]:
        return tuple(r.kind for r in self.reasons)


@contextmanager
def kernel_errors() -> Iterator[None]:
    """Translate kernel exceptions into `EngineError` with a rejection kind."""
    try:
        yield
    except OverflowError as exc:
        raise EngineError(RejectionKind.ARITHMETIC_OVERFLOW, str(exc)) from exc
    except (TypeError, ValueError) as exc:
        if isinstance(exc, EngineError):
            raise
        raise EngineError(RejectionKind.INVALID_INPUT, str(exc)) from exc
