"""
Executors: side effects for strategy actions.
"""

from .log import LogExecutor
from .transaction import TransactionExecutor, classify_submission_error

__all__ = ["LogExecutor", "TransactionExecutor", "classify_submission_error"]
