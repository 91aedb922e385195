"""
Trading strategies.
"""

from .opensea_sudoswap_arb import OpenseaSudoswapArb

__all__ = ["OpenseaSudoswapArb"]
