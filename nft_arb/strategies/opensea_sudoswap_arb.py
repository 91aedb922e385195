"""
OpenSea -> Sudoswap arbitrage strategy.

Keeps a local snapshot of what every Sudoswap ETH pair would pay for one NFT
of its collection. When an OpenSea listing is cheaper than the best pool
bid by more than gas and margin, it builds a transaction that buys the
listing and sells into the pool in one call.
"""

import time
from typing import List, Optional, Set

from ..batchers.sudoswap_quotes import SudoswapQuoteBatcher
from ..config.chains import ChainConfig
from ..config.engine import EngineConfig
from ..config.marketplace import MarketplaceConfig
from ..config.protocols import ProtocolConfig
from ..core.market import MarketSnapshot, PoolState
from ..core.strategy import Strategy, SyncResult
from ..core.types import (
    Action,
    ActionKind,
    BlockEvent,
    Event,
    ListingEvent,
    SubmitTransactionAction,
)
from ..fetchers.base import block_ranges
from ..fetchers.sudoswap_fetcher import SudoswapFetcher
from ..marketplace.opensea import OpenseaClient
from ..marketplace.seaport import ZERO_ADDRESS, UnsupportedOrderError, encode_basic_order_call
from .arb_contract import encode_execute_arb


class OpenseaSudoswapArb(Strategy):
    """
    Buy OpenSea listings that a Sudoswap pair will immediately buy for more.

    Only this strategy mutates its snapshot. A live update is computed
    completely before anything is written, so a failed fetch leaves the
    snapshot exactly as it was.
    """

    action_kinds = (ActionKind.SUBMIT_TRANSACTION,)

    def __init__(
        self,
        fetcher: SudoswapFetcher,
        quoter: SudoswapQuoteBatcher,
        order_client: OpenseaClient,
        chain_config: ChainConfig,
        protocol_config: ProtocolConfig,
        marketplace_config: MarketplaceConfig,
        engine_config: EngineConfig,
        name: Optional[str] = None,
    ):
        super().__init__(name)
        self.fetcher = fetcher
        self.quoter = quoter
        self.order_client = order_client
        self.chain_config = chain_config
        self.protocol_config = protocol_config
        self.marketplace_config = marketplace_config
        self.engine_config = engine_config

        self.arb_contract = protocol_config.ARB_CONTRACT_ADDRESS
        self.snapshot = MarketSnapshot()

    async def _handle_event(self, event: Event) -> Optional[Action]:
        if isinstance(event, BlockEvent):
            await self.process_new_block_event(event)
            return None
        if isinstance(event, ListingEvent):
            return await self.process_order_event(event)
        self.logger.debug(f"Ignoring unsupported event {type(event).__name__}")
        return None

    async def _sync(self) -> SyncResult:
        """
        Rebuild the snapshot from the factory's full pair history.

        Pools are discovered in block batches; every batch's pools are quoted
        at the head read when sync started, so the fresh snapshot is a
        consistent view of that single block.
        """
        head = await self.fetcher.get_latest_block()
        start_block = self.protocol_config.SUDOSWAP_DEPLOYMENT_BLOCK
        result = SyncResult(success=False, head_block=head)
        snapshot = MarketSnapshot(head_block=head)

        self.logger.info(f"Replaying Sudoswap pair history {start_block}-{head}")

        for batch_start, batch_end in block_ranges(start_block, head, self.protocol_config.BLOCK_CHUNK_SIZE):
            activity = await self.fetcher.scan_pool_activity(batch_start, batch_end, include_touched=False)
            result.batches += 1
            if not activity.new_pools:
                continue

            quotes = await self.quoter.fetch_quotes(activity.new_pools, head)
            for address in activity.new_pools:
                snapshot.add_pool(address, head)
                update = quotes.get(address.lower())
                if update is not None:
                    snapshot.apply_quote(update, head)
                else:
                    snapshot.remove(address)

        self.snapshot = snapshot
        result.success = True
        result.pool_count = len(snapshot)
        result.metadata = snapshot.to_dict()
        return result

    async def process_new_block_event(self, event: BlockEvent) -> bool:
        """
        Refresh pools created or touched since the last ingested block.

        Returns:
            True if the block was applied, False if it was stale or a duplicate
        """
        head = self.snapshot.head_block
        block_number = event.block_number
        if block_number <= head:
            self.logger.info(f"Ignoring block {block_number}; snapshot already at {head}")
            return False

        new_pools: List[str] = [a.lower() for a in sorted(event.new_pool_addresses)]
        touched: Set[str] = {a.lower() for a in event.touched_pool_addresses}

        if block_number > head + 1:
            self.logger.info(f"Catching up on blocks {head + 1}-{block_number - 1}")
            gap = await self.fetcher.scan_pool_activity(head + 1, block_number - 1)
            new_pools = gap.new_pools + [a for a in new_pools if a not in set(gap.new_pools)]
            touched |= gap.touched_pools

        refresh = set(new_pools) | touched
        quotes = {}
        if refresh:
            quotes = await self.quoter.fetch_quotes(sorted(refresh), block_number)

        # Every fetch succeeded; commit the whole block at once
        self.snapshot.advance_head(block_number)
        for address in new_pools:
            self.snapshot.add_pool(address, block_number)
        for address in sorted(refresh):
            update = quotes.get(address)
            if update is not None:
                self.snapshot.apply_quote(update, block_number)
            elif address in self.snapshot:
                self.snapshot.remove(address)

        self.logger.debug(
            f"Block {block_number}: {len(new_pools)} new, {len(touched)} touched, "
            f"{len(self.snapshot)} pools tracked"
        )
        return True

    async def process_order_event(self, event: ListingEvent) -> Optional[SubmitTransactionAction]:
        """Match a listing against the best pool bid for its collection."""
        if event.chain != self.chain_config.CHAIN_NAME:
            return None
        if not self.marketplace_config.is_native_payment(event.payment_token):
            return None

        pool = self.snapshot.best_bid(event.nft_collection)
        if pool is None:
            return None

        gas_price = await self.fetcher.get_gas_price()
        gas_cost = self.engine_config.ARB_GAS_UNITS * gas_price
        profit = pool.current_bid.price - event.price - gas_cost - self.engine_config.MIN_PROFIT_WEI
        if profit <= 0:
            self.logger.debug(
                f"Listing {event.nft_collection}#{event.token_id} at {event.price} not profitable "
                f"against pool {pool.address} bid {pool.current_bid.price} (gas {gas_cost})"
            )
            return None

        self.logger.info(
            f"Arb found: {event.nft_collection}#{event.token_id} listed at {event.price}, "
            f"pool {pool.address} bids {pool.current_bid.price}, expected profit {profit}"
        )
        return await self.build_arb_transaction(event, pool)

    async def build_arb_transaction(
        self, order: ListingEvent, pool: PoolState
    ) -> Optional[SubmitTransactionAction]:
        """
        Resolve the listing through OpenSea and encode the arbitrage call.

        Returns None when the listing can no longer be filled as streamed.
        """
        reference = order.raw_order_reference
        order_hash = reference.get("order_hash")
        protocol_address = reference.get("protocol_address")
        if not order_hash or not protocol_address:
            self.logger.warning(f"Listing {order.nft_collection}#{order.token_id} has no order reference")
            return None

        now = int(time.time())
        expiration = reference.get("expiration_date")
        if expiration is not None and expiration <= now:
            self.logger.info(f"Order {order_hash} expired")
            return None

        fulfillment = await self.order_client.get_fulfillment_data(
            order_hash, protocol_address, fulfiller=self.arb_contract, chain=order.chain
        )
        if fulfillment is None:
            return None

        params = fulfillment.parameters
        reason = None
        if fulfillment.value != order.price:
            reason = f"price changed to {fulfillment.value}"
        elif str(params.get("considerationToken", "")).lower() != ZERO_ADDRESS:
            reason = "not payable in ETH"
        elif str(params.get("offerToken", "")).lower() != order.nft_collection.lower():
            reason = f"offers {params.get('offerToken')}"
        elif int(params.get("offerIdentifier", -1)) != order.token_id:
            reason = f"offers token {params.get('offerIdentifier')}"
        elif int(params.get("endTime", 0)) <= now:
            reason = "expired"
        if reason is not None:
            self.logger.info(f"Order {order_hash} no longer fillable as listed: {reason}")
            return None

        try:
            seaport_calldata = encode_basic_order_call(fulfillment.function, params)
        except UnsupportedOrderError as e:
            self.logger.info(f"Order {order_hash} skipped: {e}")
            return None

        deadline_block = self.snapshot.head_block + self.engine_config.DEADLINE_BLOCKS
        data = encode_execute_arb(
            seaport=fulfillment.to,
            seaport_calldata=seaport_calldata,
            pool=pool.address,
            nft_collection=order.nft_collection,
            token_id=order.token_id,
            min_output=pool.current_bid.price,
            deadline_block=deadline_block,
        )
        return SubmitTransactionAction(
            to=self.arb_contract,
            data=data,
            value=order.price,
            deadline_block=deadline_block,
        )
