"""
nondilutive package

Generational token collection: tokens render one of several metadata
generations, owners move them between generations, and each generation reveals
its metadata progressively.
"""

__version__ = "0.1.0"
