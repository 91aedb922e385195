"""
Chain log fetchers.

Simple, focused fetchers that read pool creation and pool interaction logs.
"""

from .base import BaseFetcher, FetchError, FetchResult, block_ranges
from .sudoswap_fetcher import PoolActivity, SudoswapFetcher

__all__ = [
    'BaseFetcher',
    'FetchError',
    'FetchResult',
    'block_ranges',
    'PoolActivity',
    'SudoswapFetcher',
]
