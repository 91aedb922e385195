"""
RPC error classification and the retry loop shared by batchers and fetchers.

Errors fall into four categories. Network, rate limit and unknown errors are
retried with backoff; contract and validation errors are deterministic at a
fixed block and fail immediately.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import aiohttp
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

logger = logging.getLogger(__name__)

RATE_LIMIT = 'rate_limit'
NETWORK = 'network'
CONTRACT = 'contract'
VALIDATION = 'validation'
UNKNOWN = 'unknown'

RETRYABLE = (NETWORK, RATE_LIMIT, UNKNOWN)

# Fallback for errors only recognizable by message (JSON-RPC error payloads)
MESSAGE_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (RATE_LIMIT, ('rate limit', 'too many requests', '429', 'exceeded')),
    (NETWORK, ('connection', 'timeout', 'timed out', 'network', 'dns', '502', '503')),
    (CONTRACT, ('revert', 'out of gas', 'invalid opcode')),
    (VALIDATION, ('invalid', 'bad request', '400', 'block range')),
)

# Backoff multiplier applied on top of base_delay * 2**attempt
DELAY_FACTORS = {RATE_LIMIT: 2.0, NETWORK: 1.0}


class BatchError(Exception):
    """Base exception for batched RPC reads."""
    pass


class RateLimitError(BatchError):
    """The RPC provider throttled us."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class NetworkError(BatchError):
    pass


class ContractError(BatchError):
    """A pair call reverted or returned undecodable data."""
    pass


class ValidationError(BatchError):
    pass


class ErrorHandler:
    """
    Decides whether a failed RPC call is worth retrying, and when.

    Args:
        logger: Logger that receives the structured error records
        base_delay: Delay before the first retry, in seconds
        max_delay: Upper bound for any retry delay
    """

    def __init__(self, logger: Optional[logging.Logger] = None, base_delay: float = 1.0, max_delay: float = 60.0):
        self.logger = logger or logging.getLogger(__name__)
        self.base_delay = base_delay
        self.max_delay = max_delay

    def classify_error(self, error: Exception) -> str:
        if isinstance(error, RateLimitError):
            return RATE_LIMIT
        if isinstance(error, aiohttp.ClientResponseError):
            if error.status == 429:
                return RATE_LIMIT
            return NETWORK if error.status >= 500 else VALIDATION
        if isinstance(error, (NetworkError, asyncio.TimeoutError, ConnectionError, aiohttp.ClientError)):
            return NETWORK
        if isinstance(error, (ContractError, ContractLogicError, BadFunctionCallOutput)):
            return CONTRACT
        if isinstance(error, ValidationError):
            return VALIDATION

        message = str(error).lower()
        for category, keywords in MESSAGE_KEYWORDS:
            if any(keyword in message for keyword in keywords):
                return category
        return UNKNOWN

    def should_retry(self, error: Exception, attempt: int, max_retries: int) -> bool:
        """``attempt`` is 0-based; the last allowed attempt never retries."""
        if attempt >= max_retries - 1:
            return False
        return self.classify_error(error) in RETRYABLE

    def get_retry_delay(self, error: Exception, attempt: int) -> float:
        if isinstance(error, RateLimitError) and error.retry_after:
            return min(error.retry_after, self.max_delay)

        factor = DELAY_FACTORS.get(self.classify_error(error), 1.5)
        return min(self.base_delay * 2 ** attempt * factor, self.max_delay)

    def log_error(self, error: Exception, context: Dict[str, Any]):
        category = self.classify_error(error)
        record = {
            'error_type': type(error).__name__,
            'error_category': category,
            'error_message': str(error),
            **context
        }

        if category == CONTRACT:
            self.logger.error(f"Contract call failed: {error}", extra=record)
        elif category == RATE_LIMIT:
            self.logger.info("RPC rate limit hit", extra=record)
        else:
            self.logger.warning(f"RPC {category} error: {error}", extra=record)


async def retry_operation(
    operation: Callable[..., Awaitable[Any]],
    *args,
    max_retries: int,
    error_handler: ErrorHandler,
    **kwargs,
) -> Any:
    """
    Await ``operation`` until it succeeds, backing off between attempts.

    Raises:
        The last error once ``max_retries`` attempts are used up or the error
        is not retryable
    """
    name = getattr(operation, "__name__", repr(operation))

    for attempt in range(max_retries):
        try:
            return await operation(*args, **kwargs)
        except Exception as e:
            error_handler.log_error(e, {"attempt": attempt + 1, "max_retries": max_retries, "operation": name})
            if not error_handler.should_retry(e, attempt, max_retries):
                raise
            delay = error_handler.get_retry_delay(e, attempt)
            error_handler.logger.info(f"Retrying {name} in {delay:.2f}s ({attempt + 1}/{max_retries})")
            await asyncio.sleep(delay)

    raise BatchError(f"{name}: max_retries must be positive, got {max_retries}")
