"""Fakes for the arbitrage strategy: chain history, quotes and OpenSea."""
from typing import Dict, List, Optional, Set, Tuple

import pytest

from nft_arb.batchers.errors import BatchError
from nft_arb.config import ChainConfig, EngineConfig, MarketplaceConfig, ProtocolConfig
from nft_arb.core.market import PoolQuote, QuoteUpdate
from nft_arb.core.types import ListingEvent
from nft_arb.fetchers.base import FetchError
from nft_arb.fetchers.sudoswap_fetcher import PoolActivity
from nft_arb.marketplace.opensea import FulfillmentData
from nft_arb.marketplace.tests.payloads import fulfillment_response

from ..opensea_sudoswap_arb import OpenseaSudoswapArb

DEPLOYMENT_BLOCK = 1000
ARB_CONTRACT = "0x" + "77" * 20
NFT = "0x" + "aa" * 20
ETH = "0x0000000000000000000000000000000000000000"
GWEI = 10**9
ETHER = 10**18


def pool(n: int) -> str:
    return "0x" + f"{n:02x}" * 20


class FakeFetcher:
    """Pair creations and interactions per block, plus head and gas price."""

    def __init__(self, head: int):
        self.head = head
        self.gas_price = 10 * GWEI
        self.created: Dict[int, List[str]] = {}
        self.touched: Dict[int, Set[str]] = {}
        self.scans: List[Tuple[int, int, bool]] = []
        self.fail_scans = False

    async def get_latest_block(self) -> int:
        return self.head

    async def get_gas_price(self) -> int:
        return self.gas_price

    async def scan_pool_activity(self, start_block: int, end_block: int, include_touched: bool = True) -> PoolActivity:
        self.scans.append((start_block, end_block, include_touched))
        if self.fail_scans:
            raise FetchError("get_logs failed")
        activity = PoolActivity(start_block, end_block)
        for block in range(start_block, end_block + 1):
            activity.new_pools.extend(self.created.get(block, []))
            if include_touched:
                activity.touched_pools |= self.touched.get(block, set())
        return activity


class FakeQuoter:
    """Current pool bids; ``None`` marks an unusable pool."""

    def __init__(self):
        self.bids: Dict[str, Optional[int]] = {}
        self.calls: List[Tuple[List[str], int]] = []
        self.fail = False

    async def fetch_quotes(self, addresses, block_identifier):
        self.calls.append((list(addresses), block_identifier))
        if self.fail:
            raise BatchError("quote chunk failed")
        updates = {}
        for address in addresses:
            bid = self.bids.get(address.lower())
            if bid is None:
                updates[address.lower()] = QuoteUpdate(address=address.lower())
            else:
                updates[address.lower()] = QuoteUpdate(
                    address=address.lower(), nft_collection=NFT, quote=PoolQuote(price=bid)
                )
        return updates


class FakeOrderClient:
    """Answers fulfillment lookups from a canned response (or None)."""

    def __init__(self):
        self.response: Optional[dict] = None
        self.requests: List[dict] = []

    async def get_fulfillment_data(self, order_hash, protocol_address, fulfiller, chain="ethereum"):
        self.requests.append(
            {"order_hash": order_hash, "protocol_address": protocol_address, "fulfiller": fulfiller, "chain": chain}
        )
        if self.response is None:
            return None
        return FulfillmentData.from_response(self.response)


def listing(price: int = 1 * ETHER, token_id: int = 1234, chain: str = "ethereum", payment_token: str = ETH, **reference):
    order_reference = {
        "order_hash": "0x" + "cd" * 32,
        "protocol_address": "0x0000000000000068F116a894984e2DB1123eB395",
        "expiration_date": 1893456000,
    }
    order_reference.update(reference)
    return ListingEvent(
        nft_collection=NFT,
        token_id=token_id,
        payment_token=payment_token,
        price=price,
        chain=chain,
        raw_order_reference=order_reference,
    )


@pytest.fixture
def fetcher():
    return FakeFetcher(head=1500)


@pytest.fixture
def quoter():
    return FakeQuoter()


@pytest.fixture
def order_client():
    client = FakeOrderClient()
    client.response = fulfillment_response(price=1 * ETHER)
    return client


@pytest.fixture
def strategy(fetcher, quoter, order_client):
    protocol_config = ProtocolConfig()
    protocol_config.SUDOSWAP_DEPLOYMENT_BLOCK = DEPLOYMENT_BLOCK
    protocol_config.BLOCK_CHUNK_SIZE = 200
    protocol_config.ARB_CONTRACT_ADDRESS = ARB_CONTRACT

    chain_config = ChainConfig()
    chain_config.CHAIN_NAME = "ethereum"

    engine_config = EngineConfig()
    engine_config.DEADLINE_BLOCKS = 2
    engine_config.ARB_GAS_UNITS = 100_000
    engine_config.MIN_PROFIT_WEI = 0

    return OpenseaSudoswapArb(
        fetcher,
        quoter,
        order_client,
        chain_config=chain_config,
        protocol_config=protocol_config,
        marketplace_config=MarketplaceConfig(),
        engine_config=engine_config,
    )
