"""
Core rule engine: swap and liquidity math, security policy, LP supply ledger
and the state transition validator.
"""

from .config import PolicyConfig, PolicyVersion, load_policy_config
from .cpmm import SwapResult, compute_swap, quote_min_out
from .errors import EngineError, Rejection, RejectionKind, TransitionRejected
from .liquidity import (
    LiquidityResult,
    WithdrawalResult,
    compute_add,
    compute_initial_add,
    compute_withdrawal,
    deposit_deviation,
)
from .supply import check_supply
from .validator import Decision, Transition, build_transition, validate, validate_or_raise

__all__ = [
    "PolicyConfig",
    "PolicyVersion",
    "load_policy_config",
    "SwapResult",
    "compute_swap",
    "quote_min_out",
    "EngineError",
    "Rejection",
    "RejectionKind",
    "TransitionRejected",
    "LiquidityResult",
    "WithdrawalResult",
    "compute_add",
    "compute_initial_add",
    "compute_withdrawal",
    "deposit_deviation",
    "check_supply",
    "Decision",
    "Transition",
    "build_transition",
    "validate",
    "validate_or_raise",
]
