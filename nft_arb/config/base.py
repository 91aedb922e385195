"""
Environment-backed configuration primitives for nft_arb.

Every section is a dataclass whose defaults are read from the process
environment (and a ``.env`` file, loaded once on import). Sections validate
themselves in ``__post_init__`` and raise ConfigError on bad values.
"""

import os
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from eth_utils import is_address

load_dotenv()

logger = logging.getLogger(__name__)

ENVIRONMENTS = ("local", "dev", "staging", "production")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Field names whose values never leave the process in dumps or logs
SECRET_FIELDS = ("PRIVATE_KEY", "OPENSEA_API_KEY")


class ConfigError(Exception):
    """Raised when a setting is missing or malformed."""
    pass


def mask_secret(value: Optional[str]) -> str:
    """Keep just enough of a secret to tell two of them apart."""
    if not value:
        return ""
    return f"{value[:4]}...{value[-2:]}" if len(value) > 8 else "***"


@dataclass
class BaseConfig:
    """Shared environment and logging settings for every config section."""

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "local")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def __post_init__(self):
        logging.basicConfig(
            level=getattr(logging, self.LOG_LEVEL.upper(), logging.INFO),
            format=LOG_FORMAT,
        )
        self._validate_config()

    def _validate_config(self):
        """Section-level checks; subclasses extend and call super()."""
        if self.ENVIRONMENT not in ENVIRONMENTS:
            raise ConfigError(
                f"Invalid environment: {self.ENVIRONMENT} (expected one of {', '.join(ENVIRONMENTS)})"
            )

    @staticmethod
    def get_env(key: str, default: Optional[str] = None, required: bool = False) -> str:
        """
        Read a string setting.

        Raises:
            ConfigError: If ``required`` and the variable is unset
        """
        value = os.getenv(key, default)
        if required and value is None:
            raise ConfigError(f"Required environment variable '{key}' is not set")
        return value

    @staticmethod
    def _convert(key: str, value: Optional[str], kind: type):
        try:
            return kind(value)
        except (ValueError, TypeError):
            raise ConfigError(f"Environment variable '{key}' must be {kind.__name__}, got: {value}")

    @staticmethod
    def get_env_int(key: str, default: Optional[int] = None, required: bool = False) -> int:
        """Integer setting; underscores are allowed (``350_000``)."""
        value = BaseConfig.get_env(key, None if default is None else str(default), required)
        return BaseConfig._convert(key, value, int)

    @staticmethod
    def get_env_float(key: str, default: Optional[float] = None, required: bool = False) -> float:
        value = BaseConfig.get_env(key, None if default is None else str(default), required)
        return BaseConfig._convert(key, value, float)

    @staticmethod
    def get_env_bool(key: str, default: bool = False) -> bool:
        value = os.getenv(key)
        if value is None:
            return default
        return value.strip().lower() in ("true", "1", "yes", "on")

    @staticmethod
    def get_env_list(key: str, default: Optional[List[str]] = None, separator: str = ",") -> List[str]:
        """Comma separated setting; blank entries are dropped."""
        value = os.getenv(key)
        if value is None:
            return list(default or [])
        return [item.strip() for item in value.split(separator) if item.strip()]

    @staticmethod
    def get_env_address(key: str, default: str) -> str:
        """
        Hex address setting, returned as given.

        Raises:
            ConfigError: If the value is not a 20 byte hex address
        """
        value = BaseConfig.get_env(key, default)
        if not is_address(value):
            raise ConfigError(f"Environment variable '{key}' is not an address: {value}")
        return value

    def to_dict(self) -> Dict[str, Any]:
        """Public fields of this section, secrets masked."""
        return {
            name: mask_secret(getattr(self, name)) if name in SECRET_FIELDS else getattr(self, name)
            for name in self.__dataclass_fields__
            if not name.startswith("_")
        }
