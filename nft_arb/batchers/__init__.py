"""
Blockchain batch calling utilities.

This package provides chunked, concurrent and retried RPC reads used to
keep pool quotes in sync without overrunning provider rate limits.
"""

from .base import BaseBatcher, BatchResult, BatchConfig
from .errors import (
    BatchError,
    ContractError,
    ErrorHandler,
    NetworkError,
    RateLimitError,
    ValidationError,
    retry_operation,
)
from .sudoswap_quotes import SudoswapQuoteBatcher

__all__ = [
    'BaseBatcher',
    'BatchResult',
    'BatchConfig',
    'BatchError',
    'ContractError',
    'ErrorHandler',
    'NetworkError',
    'RateLimitError',
    'ValidationError',
    'retry_operation',
    'SudoswapQuoteBatcher',
]
