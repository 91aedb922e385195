"""
Base classes for eth_getLogs based fetchers.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """A log or head read failed after retries."""
    pass


@dataclass
class FetchResult:
    """Logs for one inclusive block range, or the reason there are none."""
    success: bool
    logs: List[Dict[str, Any]] = field(default_factory=list)
    fetched_blocks: int = 0
    start_block: Optional[int] = None
    end_block: Optional[int] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return not self.success


def block_ranges(start_block: int, end_block: int, chunk_size: int) -> Iterator[Tuple[int, int]]:
    """
    Split ``[start_block, end_block]`` into inclusive chunks.

    Yields nothing when ``start_block > end_block``.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    for chunk_start in range(start_block, end_block + 1, chunk_size):
        yield chunk_start, min(chunk_start + chunk_size - 1, end_block)


class BaseFetcher(ABC):
    """
    Reads one protocol's logs on one chain.

    Args:
        chain: Chain name, e.g. 'ethereum'
    """

    def __init__(self, chain: str):
        self.chain = chain
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @abstractmethod
    async def fetch_logs(
        self,
        start_block: int,
        end_block: int,
        contracts: Optional[List[str]] = None,
        topics: Optional[List[Any]] = None,
    ) -> FetchResult:
        """
        Logs in an inclusive block range.

        ``contracts`` and ``topics`` are passed through as the eth_getLogs
        ``address`` and ``topics`` filters.
        """
        pass

    @abstractmethod
    async def get_latest_block(self) -> int:
        pass

    @abstractmethod
    def validate_config(self) -> bool:
        pass

    def get_identifier(self) -> str:
        return f"{self.chain}_fetcher"

    def log_result(self, result: FetchResult) -> None:
        if result.success:
            self.logger.debug(
                f"{len(result.logs)} logs over {result.fetched_blocks} blocks "
                f"({result.start_block}-{result.end_block})"
            )
        else:
            self.logger.error(f"Log fetch failed: {result.error}")
