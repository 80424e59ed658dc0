"""
PuckSwap constant-product AMM rule engine.
"""

__version__ = "0.1.0"
