"""
Configuration manager for nft_arb.

Combines the config sections into one object. Only the runner reads the
global instance; every engine component receives the section it needs
through its constructor.
"""

import logging
from typing import Any, Dict, Optional

from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .engine import EngineConfig
from .marketplace import MarketplaceConfig
from .protocols import ProtocolConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    All config sections of one process.

    Args:
        environment: Override ENVIRONMENT (local, dev, staging, production)

    Raises:
        ConfigError: If any section fails to load or validate
    """

    def __init__(self, environment: Optional[str] = None):
        try:
            self.base = BaseConfig(ENVIRONMENT=environment) if environment else BaseConfig()
            self.chains = ChainConfig()
            self.protocols = ProtocolConfig()
            self.marketplace = MarketplaceConfig()
            self.engine = EngineConfig()
        except ConfigError:
            raise
        except Exception as e:
            logger.error(f"Failed to load configuration: {e}")
            raise ConfigError(f"Configuration initialization failed: {e}") from e

        logger.info(f"Configuration loaded for environment: {self.environment}")

    @property
    def environment(self) -> str:
        return self.base.ENVIRONMENT

    def validate_configuration(self, require_execution: bool = False) -> bool:
        """
        Checks that span sections or depend on the run mode.

        Args:
            require_execution: Also require what live submission needs, a
                signing key and a deployed arbitrage contract

        Raises:
            ConfigError: On the first failed check
        """
        if not self.chains.rpc_url:
            raise ConfigError("No RPC URL provided")
        if not self.marketplace.OPENSEA_API_KEY:
            raise ConfigError("No OpenSea API key provided")
        if self.protocols.POOL_CHUNK_SIZE <= 0 or self.protocols.BLOCK_CHUNK_SIZE <= 0:
            raise ConfigError("Chunk sizes must be positive")

        if require_execution:
            if not self.engine.PRIVATE_KEY:
                raise ConfigError("No private key provided")
            if int(self.protocols.ARB_CONTRACT_ADDRESS, 16) == 0:
                raise ConfigError("No arbitrage contract address provided")
        return True

    def to_dict(self) -> Dict[str, Any]:
        """All sections as dictionaries, secrets masked."""
        return {
            "environment": self.environment,
            "chains": self.chains.to_dict(),
            "protocols": self.protocols.to_dict(),
            "marketplace": self.marketplace.to_dict(),
            "engine": self.engine.to_dict(),
        }

    def __repr__(self) -> str:
        return f"ConfigManager(environment={self.environment})"


_config_manager: Optional[ConfigManager] = None


def get_config(environment: Optional[str] = None, force_reload: bool = False) -> ConfigManager:
    """Process-wide ConfigManager, created on first use."""
    global _config_manager

    if _config_manager is None or force_reload:
        _config_manager = ConfigManager(environment=environment)
    return _config_manager


def reload_config(environment: Optional[str] = None) -> ConfigManager:
    return get_config(environment=environment, force_reload=True)
