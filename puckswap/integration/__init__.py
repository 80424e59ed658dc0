"""
Host integration layer
"""

from .pool_registry import PoolRegistry, UnknownPoolError

__all__ = ["PoolRegistry", "UnknownPoolError"]
