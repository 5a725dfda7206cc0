"""
Kernel layer.

Pure integer kernels used by the pair engine: fixed-width arithmetic and the
UQ112x112 format, share mint/burn math, and the constant-product swap check.
`src/core/` maps their results onto the pair's error taxonomy.
"""
