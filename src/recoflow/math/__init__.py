"""Numba JIT compiled numerical routines.

- `fit`: Algebraic circle fit, straight line fit, circle intersections
- `jet`: Sequential recombination jet clustering
"""

from . import fit, jet
