"""Bridge orchestration components."""

from typing import TYPE_CHECKING

from .bases import BridgeEngine
from .events import CHAIN_CHANGED, EventEmitter
from .exceptions import (
    BridgeError,
    ConfigurationError,
    MissingSigningKeyError,
    ValidationError,
    UnsupportedChainError,
    UnsupportedTokenError,
    TokenUnavailableError,
    InvalidAmountError,
    ProviderRpcError,
    UnrecognizedChainError,
    InvalidParamsError,
    BlockchainInteractionError,
    TransactionExecutionError,
    EngineError,
    EngineNotReadyError,
)
from .hooks import EngineSession, approve_intent, approve_max_allowance
from .ledger import OperationLedger

if TYPE_CHECKING:  # pragma: no cover
    from .allowance import AllowanceCheck, AllowanceGuard
    from .orchestrator import BridgeOrchestrator
    from .routes import BridgeRoute, build_quote, resolve_route

_LAZY = {
    "AllowanceCheck": ".allowance",
    "AllowanceGuard": ".allowance",
    "BridgeOrchestrator": ".orchestrator",
    "BridgeRoute": ".routes",
    "build_quote": ".routes",
    "resolve_route": ".routes",
}

__all__ = [
    "BridgeEngine",
    "CHAIN_CHANGED",
    "EventEmitter",
    "BridgeError",
    "ConfigurationError",
    "MissingSigningKeyError",
    "ValidationError",
    "UnsupportedChainError",
    "UnsupportedTokenError",
    "TokenUnavailableError",
    "InvalidAmountError",
    "ProviderRpcError",
    "UnrecognizedChainError",
    "InvalidParamsError",
    "BlockchainInteractionError",
    "TransactionExecutionError",
    "EngineError",
    "EngineNotReadyError",
    "EngineSession",
    "approve_intent",
    "approve_max_allowance",
    "OperationLedger",
    *_LAZY,
]


def __getattr__(name: str):  # pragma: no cover - simple thunk
    module = _LAZY.get(name)
    if module is not None:
        from importlib import import_module

        return getattr(import_module(module, __name__), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
