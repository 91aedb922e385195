"""
Base classes for batched contract reads.

A batcher takes an arbitrary list of contract addresses, splits it into
chunks of ``batch_size``, issues the calls of one chunk concurrently and
retries a failed chunk as a whole. All calls of a batch are pinned to one
block so the results describe a single chain state.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from web3 import AsyncWeb3, Web3

from .errors import ErrorHandler, retry_operation

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of one chunk; ``data`` is keyed by lowercase address."""

    success: bool
    data: Dict[str, Any]
    block_number: Optional[int] = None
    timestamp: Optional[datetime] = None
    error: Optional[str] = None


@dataclass
class BatchConfig:
    """
    Chunking and retry settings.

    ``timeout`` bounds one attempt at one chunk, not the whole batch.
    """

    batch_size: int = 200
    max_retries: int = 3
    retry_delay: float = 1.0
    timeout: float = 30.0


class BaseBatcher(ABC):
    """Chunked, concurrent, retried reads against many contracts."""

    def __init__(self, web3: AsyncWeb3, config: Optional[BatchConfig] = None):
        self.web3 = web3
        self.config = config or BatchConfig()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.error_handler = ErrorHandler(self.logger, base_delay=self.config.retry_delay)

    @abstractmethod
    async def batch_call(
        self, addresses: List[str], block_identifier: Union[int, str] = "latest"
    ) -> BatchResult:
        """Read one chunk of contracts at ``block_identifier``."""
        pass

    def _chunk_addresses(self, addresses: List[str]) -> List[List[str]]:
        size = self.config.batch_size
        return [addresses[start:start + size] for start in range(0, len(addresses), size)]

    async def _retry_operation(self, operation, *args, **kwargs) -> Any:
        return await retry_operation(
            operation,
            *args,
            max_retries=self.config.max_retries,
            error_handler=self.error_handler,
            **kwargs,
        )

    async def _gather_chunk(
        self, addresses: List[str], call: Callable[[str], Awaitable[Any]]
    ) -> Dict[str, Any]:
        """
        Run ``call`` for every address of one chunk concurrently.

        Every call is awaited before an error is raised, so no request of a
        failed chunk is left running.

        Raises:
            The first error any call raised, or asyncio.TimeoutError
        """
        results = await asyncio.wait_for(
            asyncio.gather(*(call(address) for address in addresses), return_exceptions=True),
            timeout=self.config.timeout,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return dict(zip(addresses, results))

    def _validate_addresses(self, addresses: List[str]) -> List[str]:
        """Checksum every address; malformed ones are logged and skipped."""
        validated = []
        for address in addresses:
            try:
                validated.append(Web3.to_checksum_address(address))
            except ValueError as e:
                self.logger.warning(f"Skipping malformed address {address}: {e}")
        return validated
