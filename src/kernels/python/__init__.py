"""
Integer kernels for the pair engine.

`uq112x112` holds the fixed-point price format, `share_math` the mint/burn
share formulas, and `cpmm_check` the constant-product swap check. None of them
touch state or raise pool errors.
"""
