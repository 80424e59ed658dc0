"""
Kernel layer.

`puckswap/kernels/python/` holds the integer math kernels (swap pricing, LP
mint/burn). They raise plain `ValueError` / `TypeError` / `OverflowError`; the
`puckswap.core` engines translate those into rejection kinds.
"""
