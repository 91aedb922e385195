"""
New block collector.

Polls the chain head over HTTP and emits one BlockEvent per new block, with
the Sudoswap pools that block created or touched.
"""

import asyncio
from typing import Any, Optional

from ..core.channel import EventChannel
from ..core.collector import Collector
from ..core.errors import CollectorFailure
from ..core.types import BlockEvent
from ..fetchers.base import FetchError
from ..fetchers.sudoswap_fetcher import PoolActivity, SudoswapFetcher

# Beyond this many missed blocks only the newest is emitted; the strategy
# backfills the range from logs.
MAX_BACKFILL_BLOCKS = 32


class NewBlockCollector(Collector):
    """Collector for new blocks, annotated with Sudoswap pool activity."""

    def __init__(
        self,
        fetcher: SudoswapFetcher,
        poll_interval: float = 2.0,
        retry_delay: float = 1.0,
        max_retry_delay: float = 60.0,
        max_backfill: int = MAX_BACKFILL_BLOCKS,
    ):
        super().__init__("NewBlock", retry_delay, max_retry_delay)
        self.fetcher = fetcher
        self.poll_interval = poll_interval
        self.max_backfill = max_backfill
        self.last_block: Optional[int] = None

    async def subscribe(self, channel: EventChannel) -> None:
        while self.running:
            try:
                latest = await self.fetcher.get_latest_block()
            except Exception as e:
                raise CollectorFailure(self.name, f"head poll failed: {e}") from e

            if self.last_block is None:
                # Live events start after the head seen at subscribe time
                self.last_block = latest - 1

            if latest > self.last_block:
                start = max(self.last_block + 1, latest - self.max_backfill + 1)
                if start > self.last_block + 1:
                    self.logger.warning(
                        f"Skipping blocks {self.last_block + 1}-{start - 1}; "
                        f"strategies backfill them from logs"
                    )
                for block_number in range(start, latest + 1):
                    await self._emit_block(channel, block_number)

            await asyncio.sleep(self.poll_interval)

    async def _emit_block(self, channel: EventChannel, block_number: int) -> None:
        try:
            activity = await self.fetcher.scan_pool_activity(block_number, block_number)
        except FetchError as e:
            raise CollectorFailure(self.name, f"block {block_number} logs unavailable: {e}") from e

        await self.emit(channel, (block_number, activity))
        self.last_block = block_number

    def normalize(self, payload: Any) -> Optional[BlockEvent]:
        """Accept ``(block_number, PoolActivity)`` or a plain block dict."""
        if isinstance(payload, tuple):
            block_number, activity = payload
            if not isinstance(activity, PoolActivity):
                return None
            return BlockEvent(
                block_number=int(block_number),
                new_pool_addresses=frozenset(a.lower() for a in activity.new_pools),
                touched_pool_addresses=frozenset(a.lower() for a in activity.touched_pools),
            )

        if isinstance(payload, dict) and "number" in payload:
            return BlockEvent(
                block_number=int(payload["number"]),
                new_pool_addresses=frozenset(a.lower() for a in payload.get("new_pools", ())),
                touched_pool_addresses=frozenset(a.lower() for a in payload.get("touched_pools", ())),
            )

        return None
