"""
Configuration management for nft_arb.

Example:
    from nft_arb.config import get_config

    config = get_config()

    rpc_url = config.chains.rpc_url
    factory = config.protocols.SUDOSWAP_FACTORY_ADDRESS
    api_key = config.marketplace.OPENSEA_API_KEY
"""

from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .engine import EngineConfig
from .manager import ConfigManager, get_config, reload_config
from .marketplace import MarketplaceConfig
from .protocols import ProtocolConfig

__all__ = [
    "BaseConfig",
    "ConfigError",
    "ChainConfig",
    "EngineConfig",
    "MarketplaceConfig",
    "ProtocolConfig",
    "ConfigManager",
    "get_config",
    "reload_config",
]
