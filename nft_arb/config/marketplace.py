"""
Marketplace (OpenSea) configuration for nft_arb.
"""

from dataclasses import dataclass, field
from typing import List

from .base import BaseConfig


@dataclass
class MarketplaceConfig(BaseConfig):
    """OpenSea stream and API settings."""

    OPENSEA_API_KEY: str = BaseConfig.get_env("OPENSEA_API_KEY", "")
    OPENSEA_STREAM_URL: str = BaseConfig.get_env(
        "OPENSEA_STREAM_URL", "wss://stream.openseabeta.com/socket/websocket"
    )
    OPENSEA_API_URL: str = BaseConfig.get_env(
        "OPENSEA_API_URL", "https://api.opensea.io/api/v2"
    )
    # Collection slug to subscribe to; "*" streams every collection
    OPENSEA_COLLECTION: str = BaseConfig.get_env("OPENSEA_COLLECTION", "*")

    HEARTBEAT_INTERVAL: float = BaseConfig.get_env_float("OPENSEA_HEARTBEAT_INTERVAL", 30.0)
    RECONNECT_DELAY: float = BaseConfig.get_env_float("OPENSEA_RECONNECT_DELAY", 1.0)
    MAX_RECONNECT_DELAY: float = BaseConfig.get_env_float("OPENSEA_MAX_RECONNECT_DELAY", 60.0)
    API_TIMEOUT: float = BaseConfig.get_env_float("OPENSEA_API_TIMEOUT", 10.0)

    # Payment token addresses OpenSea reports for native ETH listings
    NATIVE_PAYMENT_TOKENS: List[str] = field(
        default_factory=lambda: BaseConfig.get_env_list(
            "NATIVE_PAYMENT_TOKENS", ["0x0000000000000000000000000000000000000000"]
        )
    )

    def is_native_payment(self, token_address: str) -> bool:
        """Check whether a listing is paid in the chain's native asset."""
        return token_address.lower() in {t.lower() for t in self.NATIVE_PAYMENT_TOKENS}
