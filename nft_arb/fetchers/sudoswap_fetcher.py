"""
Sudoswap log fetcher.

Walks block ranges with eth_getLogs and reports which pairs the factory
created and which pairs emitted pair events in each range.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from eth_abi import decode
from hexbytes import HexBytes
from web3 import AsyncWeb3, Web3

from ..batchers.errors import ErrorHandler, retry_operation
from ..config.protocols import ProtocolConfig
from .base import BaseFetcher, FetchError, FetchResult, block_ranges


@dataclass
class PoolActivity:
    """Pools created or touched in an inclusive block range."""

    start_block: int
    end_block: int
    new_pools: List[str] = field(default_factory=list)
    touched_pools: Set[str] = field(default_factory=set)

    def merge(self, other: "PoolActivity") -> "PoolActivity":
        seen = set(self.new_pools)
        return PoolActivity(
            start_block=min(self.start_block, other.start_block),
            end_block=max(self.end_block, other.end_block),
            new_pools=self.new_pools + [p for p in other.new_pools if p not in seen],
            touched_pools=self.touched_pools | other.touched_pools,
        )


def _topic_hex(topic: Any) -> str:
    if isinstance(topic, str):
        return topic.lower()
    return Web3.to_hex(topic).lower()


class SudoswapFetcher(BaseFetcher):
    """
    Log and head reads for Sudoswap pairs.

    Every RPC call is retried with backoff; a range that still fails is
    reported as a failed FetchResult or raised as FetchError.
    """

    def __init__(
        self,
        web3: AsyncWeb3,
        protocol_config: ProtocolConfig,
        chain: str = "ethereum",
    ):
        super().__init__(chain)
        self.web3 = web3
        self.protocol_config = protocol_config
        self.factory_address = protocol_config.SUDOSWAP_FACTORY_ADDRESS.lower()
        self.new_pair_topic = protocol_config.new_pair_topic.lower()
        self.pair_event_topics = {t.lower() for t in protocol_config.pair_event_topics}
        self.block_chunk_size = protocol_config.BLOCK_CHUNK_SIZE
        self.max_retries = protocol_config.MAX_RETRY_ATTEMPTS
        self.error_handler = ErrorHandler(self.logger, base_delay=protocol_config.RETRY_DELAY_SECONDS)

    def validate_config(self) -> bool:
        try:
            Web3.to_checksum_address(self.factory_address)
        except ValueError:
            return False
        return self.block_chunk_size > 0 and self.max_retries > 0

    async def _retry(self, operation, *args, **kwargs):
        return await retry_operation(
            operation,
            *args,
            max_retries=self.max_retries,
            error_handler=self.error_handler,
            **kwargs,
        )

    async def get_latest_block(self) -> int:
        async def _block_number() -> int:
            return await self.web3.eth.block_number

        return await self._retry(_block_number)

    async def get_gas_price(self) -> int:
        async def _gas_price() -> int:
            return await self.web3.eth.gas_price

        return await self._retry(_gas_price)

    async def fetch_logs(
        self,
        start_block: int,
        end_block: int,
        contracts: Optional[List[str]] = None,
        topics: Optional[List[Any]] = None,
    ) -> FetchResult:
        params: Dict[str, Any] = {"fromBlock": start_block, "toBlock": end_block}
        if contracts:
            params["address"] = [Web3.to_checksum_address(c) for c in contracts]
        if topics:
            params["topics"] = topics

        try:
            logs = await self._retry(self.web3.eth.get_logs, params)
        except Exception as e:
            result = FetchResult(
                success=False,
                start_block=start_block,
                end_block=end_block,
                error=f"get_logs {start_block}-{end_block} failed: {e}",
            )
            self.log_result(result)
            return result

        result = FetchResult(
            success=True,
            logs=list(logs),
            fetched_blocks=end_block - start_block + 1,
            start_block=start_block,
            end_block=end_block,
        )
        self.log_result(result)
        return result

    async def scan_pool_activity(
        self, start_block: int, end_block: int, include_touched: bool = True
    ) -> PoolActivity:
        """
        Collect created and touched pools over a block range, in chunks.

        With ``include_touched=False`` only factory NewPair logs are requested.

        Raises:
            FetchError: If any chunk fails after retries
        """
        activity = PoolActivity(start_block=start_block, end_block=end_block)
        contracts = None
        if include_touched:
            topics = [[self.new_pair_topic, *sorted(self.pair_event_topics)]]
        else:
            topics = [self.new_pair_topic]
            contracts = [self.factory_address]

        for chunk_start, chunk_end in block_ranges(start_block, end_block, self.block_chunk_size):
            result = await self.fetch_logs(chunk_start, chunk_end, contracts=contracts, topics=topics)
            if result.failed:
                raise FetchError(result.error)
            activity = activity.merge(self.parse_logs(result.logs, chunk_start, chunk_end))

        return activity

    def parse_logs(self, logs: List[Dict[str, Any]], start_block: int, end_block: int) -> PoolActivity:
        """Split raw logs into factory pair creations and pair interactions."""
        activity = PoolActivity(start_block=start_block, end_block=end_block)
        seen: Set[str] = set()

        for log in logs:
            topics = log.get("topics") or []
            if not topics:
                continue
            topic0 = _topic_hex(topics[0])
            emitter = str(log["address"]).lower()

            if topic0 == self.new_pair_topic and emitter == self.factory_address:
                (pool_address,) = decode(["address"], bytes(HexBytes(log["data"])))
                pool_address = pool_address.lower()
                if pool_address not in seen:
                    seen.add(pool_address)
                    activity.new_pools.append(pool_address)
            elif topic0 in self.pair_event_topics:
                activity.touched_pools.add(emitter)

        return activity

    async def get_new_pools(self, start_block: int, end_block: int) -> List[str]:
        """Pools created by the factory in a block range, in creation order."""
        return (await self.scan_pool_activity(start_block, end_block, include_touched=False)).new_pools
