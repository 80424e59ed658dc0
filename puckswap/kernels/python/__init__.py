"""
Integer math kernels for swaps and LP mint/burn.

- `cpmm_swap_v1`: exact-in constant-product quote, fee on input.
- `lp_math_v1`: initial isqrt mint, proportional mint, pro-rata burn.
"""
