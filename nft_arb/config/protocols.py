"""
Protocol-specific configuration for nft_arb.

Sudoswap (LSSVM v1) pair factory and pair event definitions, plus the
arbitrage contract the engine routes fills through.
"""

from dataclasses import dataclass, field
from typing import List

from web3 import Web3

from .base import BaseConfig


@dataclass
class ProtocolConfig(BaseConfig):
    """Configuration for the Sudoswap pools and the arbitrage contract."""

    SUDOSWAP_FACTORY_ADDRESS: str = BaseConfig.get_env_address(
        "SUDOSWAP_FACTORY_ADDRESS", "0xb16c1342E617A5B6E4b631EB114483FDB289c0A4"
    )
    # Block in which the pair factory was deployed
    SUDOSWAP_DEPLOYMENT_BLOCK: int = BaseConfig.get_env_int(
        "SUDOSWAP_DEPLOYMENT_BLOCK", 14650730
    )

    ARB_CONTRACT_ADDRESS: str = BaseConfig.get_env_address(
        "ARB_CONTRACT_ADDRESS", "0x0000000000000000000000000000000000000000"
    )

    # Batch settings, shared by history replay and live refresh
    POOL_CHUNK_SIZE: int = BaseConfig.get_env_int("POOL_CHUNK_SIZE", 200)
    BLOCK_CHUNK_SIZE: int = BaseConfig.get_env_int("BLOCK_CHUNK_SIZE", 200)
    MAX_RETRY_ATTEMPTS: int = BaseConfig.get_env_int("MAX_RETRY_ATTEMPTS", 3)
    RETRY_DELAY_SECONDS: float = BaseConfig.get_env_float("RETRY_DELAY_SECONDS", 1.0)

    NEW_PAIR_EVENT: str = "NewPair(address)"
    PAIR_EVENTS: List[str] = field(
        default_factory=lambda: [
            "SwapNFTInPair()",
            "SwapNFTOutPair()",
            "SpotPriceUpdate(uint128)",
            "DeltaUpdate(uint128)",
            "FeeUpdate(uint96)",
            "TokenDeposit(uint256)",
            "TokenWithdrawal(uint256)",
            "NFTWithdrawal()",
            "AssetRecipientChange(address)",
        ]
    )

    @staticmethod
    def event_topic(signature: str) -> str:
        """Keccak topic0 for an event signature, 0x-prefixed."""
        return Web3.to_hex(Web3.keccak(text=signature))

    @property
    def new_pair_topic(self) -> str:
        return self.event_topic(self.NEW_PAIR_EVENT)

    @property
    def pair_event_topics(self) -> List[str]:
        return [self.event_topic(signature) for signature in self.PAIR_EVENTS]
