"""Test configuration for fetchers."""
from unittest.mock import AsyncMock, Mock

import pytest
from eth_abi import encode
from hexbytes import HexBytes

from nft_arb.config import ProtocolConfig


@pytest.fixture
def protocol_config():
    """Protocol config with fast retries."""
    config = ProtocolConfig()
    config.RETRY_DELAY_SECONDS = 0.001
    config.BLOCK_CHUNK_SIZE = 200
    return config


@pytest.fixture
def mock_web3():
    web3 = Mock()
    web3.eth.get_logs = AsyncMock(return_value=[])
    return web3


def new_pair_log(protocol_config, pool: str, emitter: str = None, block: int = 100):
    return {
        "address": emitter or protocol_config.SUDOSWAP_FACTORY_ADDRESS,
        "topics": [HexBytes(protocol_config.new_pair_topic)],
        "data": HexBytes(encode(["address"], [pool])),
        "blockNumber": block,
    }


def pair_event_log(protocol_config, emitter: str, signature: str = "SwapNFTInPair()", block: int = 100):
    return {
        "address": emitter,
        "topics": [HexBytes(protocol_config.event_topic(signature))],
        "data": HexBytes(b""),
        "blockNumber": block,
    }
