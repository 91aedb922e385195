"""
Engine and trading policy configuration for nft_arb.
"""

from dataclasses import dataclass

from .base import BaseConfig, ConfigError

OVERFLOW_POLICIES = ("block", "drop_oldest", "drop_newest")


@dataclass
class EngineConfig(BaseConfig):
    """Event channel, execution and profitability settings."""

    # Event channel
    CHANNEL_CAPACITY: int = BaseConfig.get_env_int("CHANNEL_CAPACITY", 512)
    OVERFLOW_POLICY: str = BaseConfig.get_env("OVERFLOW_POLICY", "drop_oldest")

    # Collector resubscription backoff
    COLLECTOR_RETRY_DELAY: float = BaseConfig.get_env_float("COLLECTOR_RETRY_DELAY", 1.0)
    COLLECTOR_MAX_RETRY_DELAY: float = BaseConfig.get_env_float("COLLECTOR_MAX_RETRY_DELAY", 60.0)

    # Trading policy
    DEADLINE_BLOCKS: int = BaseConfig.get_env_int("DEADLINE_BLOCKS", 2)
    ARB_GAS_UNITS: int = BaseConfig.get_env_int("ARB_GAS_UNITS", 350_000)
    MIN_PROFIT_WEI: int = BaseConfig.get_env_int("MIN_PROFIT_WEI", 0)

    # Execution
    PRIVATE_KEY: str = BaseConfig.get_env("PRIVATE_KEY", "")
    PRIORITY_FEE_GWEI: float = BaseConfig.get_env_float("PRIORITY_FEE_GWEI", 2.0)
    DRY_RUN: bool = BaseConfig.get_env_bool("DRY_RUN", True)

    def _validate_config(self):
        super()._validate_config()
        if self.OVERFLOW_POLICY not in OVERFLOW_POLICIES:
            raise ConfigError(f"Invalid overflow policy: {self.OVERFLOW_POLICY}")
        if self.CHANNEL_CAPACITY <= 0:
            raise ConfigError("CHANNEL_CAPACITY must be positive")
        if self.DEADLINE_BLOCKS <= 0:
            raise ConfigError("DEADLINE_BLOCKS must be positive")
