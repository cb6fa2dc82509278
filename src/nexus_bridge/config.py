"""
Runtime configuration.

Values come from the process environment, optionally seeded from a ``.env``
file in the working directory:

    - NETWORK_MODE: ``testnet`` (default) or ``mainnet``
    - PRIVATE_KEY: 0x-prefixed signing key; only needed to execute transfers
    - RPC_BASE / RPC_OPTIMISM / RPC_ARBITRUM / RPC_POLYGON: mainnet RPC overrides
    - APPROVAL_HEADROOM_MULTIPLIER: allowance headroom factor (default 2)
    - APPROVAL_CONFIRMATIONS: confirmations awaited after an approval (default 2)
    - CONFIRMATION_TIMEOUT: seconds to wait for those confirmations (default 120)
    - RPC_REQUEST_TIMEOUT: per-request HTTP timeout in seconds (default 60)
    - LOG_LEVEL: root log level (default INFO)
"""

import os
from enum import Enum
from typing import Dict, Optional

import dotenv
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from .adapters.evm.constants import RPC_OVERRIDE_ENV_VARS
from .engine.exceptions import ConfigurationError

dotenv.load_dotenv()


class NetworkMode(str, Enum):
    TESTNET = "testnet"
    MAINNET = "mainnet"


def get_private_key_from_env() -> Optional[str]:
    """Load the signing key from ``PRIVATE_KEY``; None when unset or empty."""
    return os.getenv("PRIVATE_KEY") or None


def get_network_mode_from_env() -> str:
    return (os.getenv("NETWORK_MODE") or NetworkMode.TESTNET.value).strip().lower()


def get_rpc_overrides_from_env() -> Dict[int, str]:
    """
    Collect per-chain RPC overrides.

    Returns:
        Mapping of chain id to RPC URL for every override variable that is set.
    """
    overrides: Dict[int, str] = {}
    for env_var, chain_id in RPC_OVERRIDE_ENV_VARS.items():
        value = os.getenv(env_var)
        if value:
            overrides[chain_id] = value.strip()
    return overrides


class BridgeSettings(BaseModel):
    """
    Validated process configuration.

    Build with :meth:`from_env` in production; construct directly in tests.
    """

    network_mode: NetworkMode = NetworkMode.TESTNET
    private_key: Optional[str] = Field(default=None, repr=False)
    rpc_overrides: Dict[int, str] = Field(default_factory=dict)
    approval_headroom_multiplier: int = Field(default=2, ge=1)
    approval_confirmations: int = Field(default=2, ge=1)
    confirmation_timeout: float = Field(default=120.0, gt=0)
    rpc_request_timeout: int = Field(default=60, gt=0)
    log_level: str = "INFO"

    @field_validator("private_key")
    @classmethod
    def _check_private_key(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            return None
        if not value.startswith("0x"):
            raise ValueError("PRIVATE_KEY must be 0x-prefixed")
        return value

    @property
    def is_testnet(self) -> bool:
        return self.network_mode == NetworkMode.TESTNET

    @classmethod
    def from_env(cls) -> "BridgeSettings":
        """
        Read and validate settings from the environment.

        Raises:
            ConfigurationError: If any variable holds an invalid value.
        """
        raw = {
            "network_mode": get_network_mode_from_env(),
            "private_key": get_private_key_from_env(),
            "rpc_overrides": get_rpc_overrides_from_env(),
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
        }
        optional_ints = {
            "approval_headroom_multiplier": "APPROVAL_HEADROOM_MULTIPLIER",
            "approval_confirmations": "APPROVAL_CONFIRMATIONS",
            "confirmation_timeout": "CONFIRMATION_TIMEOUT",
            "rpc_request_timeout": "RPC_REQUEST_TIMEOUT",
        }
        for field_name, env_var in optional_ints.items():
            value = os.getenv(env_var)
            if value:
                raw[field_name] = value

        try:
            return cls(**raw)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
