"""Test fixtures for the batchers: an in-memory stand-in for contract calls."""
from types import SimpleNamespace
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, Mock

import pytest

from ..sudoswap_quotes import PAIR_ABI

FACTORY = "0xb16c1342E617A5B6E4b631EB114483FDB289c0A4"
NFT = "0x" + "aa" * 20


class FakeCall:
    """Result of ``contract.functions.x(...)``; ``call`` returns or raises ``value``."""

    def __init__(self, value: Any, calls: list):
        self.value = value
        self.calls = calls

    async def call(self, block_identifier=None):
        self.calls.append(block_identifier)
        if isinstance(self.value, BaseException):
            raise self.value
        return self.value


def make_pair(
    calls: list,
    variant: int = 0,
    pool_type: int = 0,
    quote: tuple = (0, 110, 5, 100, 1),
    nft: str = NFT,
    fee: int = 0,
):
    return SimpleNamespace(
        functions=SimpleNamespace(
            pairVariant=lambda: FakeCall(variant, calls),
            nft=lambda: FakeCall(nft, calls),
            poolType=lambda: FakeCall(pool_type, calls),
            getSellNFTQuote=lambda n: FakeCall(quote, calls),
            fee=lambda: FakeCall(fee, calls),
        )
    )


class FakeChain:
    """Pairs, balances and factory membership keyed by lowercase address."""

    def __init__(self):
        self.pairs: Dict[str, SimpleNamespace] = {}
        self.balances: Dict[str, Any] = {}
        self.factory_pairs: Dict[str, bool] = {}
        self.calls: list = []

    def add_pair(self, address: str, balance: int = 10**18, is_pair: bool = True, **kwargs) -> None:
        self.pairs[address.lower()] = make_pair(self.calls, **kwargs)
        self.balances[address.lower()] = balance
        self.factory_pairs[address.lower()] = is_pair

    def web3(self) -> Mock:
        factory = SimpleNamespace(
            functions=SimpleNamespace(
                isPair=lambda address, variant: FakeCall(
                    self.factory_pairs.get(address.lower(), False), self.calls
                )
            )
        )

        def contract(address: str, abi: Optional[list] = None):
            if abi is PAIR_ABI:
                return self.pairs[address.lower()]
            return factory

        async def get_balance(address: str, block_identifier=None):
            self.calls.append(block_identifier)
            value = self.balances[address.lower()]
            if isinstance(value, BaseException):
                raise value
            return value

        web3 = Mock()
        web3.eth.contract = Mock(side_effect=contract)
        web3.eth.get_balance = AsyncMock(side_effect=get_balance)
        return web3


@pytest.fixture
def chain():
    return FakeChain()
