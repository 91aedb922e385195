"""
Sudoswap pair quote batch fetcher.

Fetches, for many LSSVM pairs at one block, what each pair would pay for a
single NFT of its collection. Calls for the pairs of one chunk run
concurrently; results are returned to the caller and never written anywhere.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Union

from web3 import AsyncWeb3, Web3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from ..core.market import PoolQuote, QuoteUpdate
from .base import BaseBatcher, BatchConfig, BatchResult
from .errors import BatchError

# LSSVMPair enums
POOL_TYPE_TOKEN = 0
POOL_TYPE_NFT = 1
POOL_TYPE_TRADE = 2
ETH_PAIR_VARIANTS = (0, 1)  # ENUMERABLE_ETH, MISSING_ENUMERABLE_ETH

PAIR_ABI = [
    {
        "name": "nft",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "name": "poolType",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
    {
        "name": "pairVariant",
        "type": "function",
        "stateMutability": "pure",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
    {
        "name": "fee",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint96"}],
    },
    {
        "name": "getSellNFTQuote",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "numNFTs", "type": "uint256"}],
        "outputs": [
            {"name": "error", "type": "uint8"},
            {"name": "newSpotPrice", "type": "uint256"},
            {"name": "newDelta", "type": "uint256"},
            {"name": "outputAmount", "type": "uint256"},
            {"name": "protocolFee", "type": "uint256"},
        ],
    },
]

FACTORY_ABI = [
    {
        "name": "isPair",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "potentialPair", "type": "address"},
            {"name": "variant", "type": "uint8"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]


class SudoswapQuoteBatcher(BaseBatcher):
    """
    Batch fetcher for Sudoswap pair bids.

    A quote is usable only when the address is a genuine ETH pair of the
    factory, the pair buys NFTs (TOKEN or TRADE pool), the bonding curve
    returns no error for selling one NFT, and the pair holds enough ETH to
    pay the output amount.
    """

    def __init__(
        self,
        web3: AsyncWeb3,
        factory_address: str,
        config: Optional[BatchConfig] = None
    ):
        """
        Initialize the quote batcher.

        Args:
            web3: AsyncWeb3 instance
            factory_address: LSSVM pair factory address
            config: Batch configuration
        """
        super().__init__(web3, config)
        self.factory = self.web3.eth.contract(
            address=Web3.to_checksum_address(factory_address), abi=FACTORY_ABI
        )

    async def batch_call(
        self,
        pool_addresses: List[str],
        block_identifier: Union[int, str] = 'latest'
    ) -> BatchResult:
        """
        Fetch quotes for one chunk of pools, with retries.

        Args:
            pool_addresses: Pair contract addresses (at most one chunk)
            block_identifier: Block to call at

        Returns:
            BatchResult whose data maps lowercase pool address to QuoteUpdate
        """
        validated_addresses = self._validate_addresses(pool_addresses)
        if not validated_addresses:
            return BatchResult(
                success=False,
                data={},
                error="No valid addresses provided"
            )

        try:
            quotes = await self._retry_operation(
                self._gather_chunk,
                validated_addresses,
                lambda address: self._quote_pool(address, block_identifier),
            )
        except Exception as e:
            self.logger.error(f"Quote batch failed: {e}")
            return BatchResult(success=False, data={}, error=str(e))

        return BatchResult(
            success=True,
            data={address.lower(): update for address, update in quotes.items()},
            block_number=block_identifier if isinstance(block_identifier, int) else None,
            timestamp=datetime.now(timezone.utc)
        )

    async def fetch_quotes(
        self,
        pool_addresses: List[str],
        block_identifier: Union[int, str] = 'latest'
    ) -> Dict[str, QuoteUpdate]:
        """
        Fetch quotes for any number of pools, one chunk at a time.

        Args:
            pool_addresses: Pair addresses (can be large)
            block_identifier: Block to call at

        Returns:
            Mapping of lowercase pool address to QuoteUpdate

        Raises:
            BatchError: If any chunk still fails after retries; partial
                results are not returned
        """
        all_quotes: Dict[str, QuoteUpdate] = {}
        chunks = self._chunk_addresses(sorted({a.lower() for a in pool_addresses}))

        self.logger.debug(
            f"Fetching quotes for {len(pool_addresses)} pools in {len(chunks)} chunks "
            f"at block {block_identifier}"
        )

        for i, chunk in enumerate(chunks):
            result = await self.batch_call(chunk, block_identifier)
            if not result.success:
                raise BatchError(f"Quote chunk {i + 1}/{len(chunks)} failed: {result.error}")
            all_quotes.update(result.data)

        return all_quotes

    async def _quote_pool(self, address: str, block_identifier: Union[int, str]) -> QuoteUpdate:
        """Quote one pair; contract reverts mean 'not a usable pair'."""
        pair = self.web3.eth.contract(address=address, abi=PAIR_ABI)
        unusable = QuoteUpdate(address=address.lower())

        try:
            variant = await pair.functions.pairVariant().call(block_identifier=block_identifier)
            if variant not in ETH_PAIR_VARIANTS:
                return unusable

            is_pair = await self.factory.functions.isPair(address, variant).call(
                block_identifier=block_identifier
            )
            if not is_pair:
                return unusable

            nft = await pair.functions.nft().call(block_identifier=block_identifier)
            pool_type = await pair.functions.poolType().call(block_identifier=block_identifier)
            if pool_type == POOL_TYPE_NFT:
                return QuoteUpdate(address=address.lower(), nft_collection=nft.lower())

            (
                curve_error,
                new_spot_price,
                new_delta,
                output_amount,
                protocol_fee,
            ) = await pair.functions.getSellNFTQuote(1).call(block_identifier=block_identifier)
            fee = await pair.functions.fee().call(block_identifier=block_identifier)
            balance = await self.web3.eth.get_balance(address, block_identifier=block_identifier)
        except (ContractLogicError, BadFunctionCallOutput) as e:
            self.logger.debug(f"{address} is not a quotable pair: {e}")
            return unusable

        if curve_error != 0 or output_amount <= 0 or balance < output_amount:
            return QuoteUpdate(address=address.lower(), nft_collection=nft.lower())

        return QuoteUpdate(
            address=address.lower(),
            nft_collection=nft.lower(),
            quote=PoolQuote(
                price=output_amount,
                protocol_fee=protocol_fee,
                spot_price=new_spot_price,
                delta=new_delta,
                fee=fee,
            ),
        )
