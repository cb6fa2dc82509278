"""Headless wallet-provider adapter and orchestration core for cross-chain token bridging."""

from .adapters import ChainClients, ChainRegistry, SigningContext, WalletProvider
from .config import BridgeSettings, NetworkMode
from .engine import BridgeEngine, BridgeError, OperationLedger
from .engine.orchestrator import BridgeOrchestrator
from .logging_config import setup_logging

__version__ = "0.1.0"

__all__ = [
    "ChainClients",
    "ChainRegistry",
    "SigningContext",
    "WalletProvider",
    "BridgeSettings",
    "NetworkMode",
    "BridgeEngine",
    "BridgeError",
    "OperationLedger",
    "BridgeOrchestrator",
    "setup_logging",
]
