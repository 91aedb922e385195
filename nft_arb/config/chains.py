"""
Chain-specific configuration for nft_arb.
"""

from dataclasses import dataclass
from typing import Dict

from .base import BaseConfig, ConfigError


@dataclass
class ChainConfig(BaseConfig):
    """Chain the engine trades on and how it is reached."""

    # The chain name must match the chain name the marketplace stream reports
    CHAIN_NAME: str = BaseConfig.get_env("CHAIN_NAME", "ethereum")

    ETHEREUM_RPC_URL: str = BaseConfig.get_env(
        "ETHEREUM_RPC_URL", "http://localhost:8545"
    )
    ETHEREUM_CHAIN_ID: int = 1

    # Seconds between head polls of the block collector (~12s block time)
    BLOCK_POLL_INTERVAL: float = BaseConfig.get_env_float("BLOCK_POLL_INTERVAL", 2.0)
    RPC_TIMEOUT: float = BaseConfig.get_env_float("RPC_TIMEOUT", 30.0)

    @property
    def supported_chains(self) -> Dict[str, Dict]:
        """Chains the engine can trade on, by the name the marketplace stream uses."""
        return {
            "ethereum": {
                "chain_id": self.ETHEREUM_CHAIN_ID,
                "rpc_url": self.ETHEREUM_RPC_URL,
            },
        }

    def _validate_config(self):
        super()._validate_config()
        if self.CHAIN_NAME not in self.supported_chains:
            raise ConfigError(f"Unsupported chain: {self.CHAIN_NAME}")

    def get_chain_config(self, chain_name: str) -> Dict:
        if chain_name not in self.supported_chains:
            raise ValueError(f"Unsupported chain: {chain_name}")
        return self.supported_chains[chain_name]

    @property
    def rpc_url(self) -> str:
        return self.get_chain_config(self.CHAIN_NAME)["rpc_url"]

    @property
    def chain_id(self) -> int:
        return self.get_chain_config(self.CHAIN_NAME)["chain_id"]
