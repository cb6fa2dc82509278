from .bases import CanonicalModel, ChainDescriptor, TokenConfig, OperationStatus, BridgeOperation
from .bridge import (
    BridgeParams,
    BridgeResult,
    BridgeFees,
    BridgeRouteInfo,
    BridgeSimulation,
    BridgeBalance,
    BridgeStep,
    BridgeStepStatus,
    BridgeEvent,
    BridgeEventType,
    AllowanceInfo,
    AllowanceSource,
    AllowanceDecision,
    AllowanceHookRequest,
    IntentHookRequest,
    TokenBalance,
    BridgeQuote,
)

__all__ = [
    "CanonicalModel",
    "ChainDescriptor",
    "TokenConfig",
    "OperationStatus",
    "BridgeOperation",
    "BridgeParams",
    "BridgeResult",
    "BridgeFees",
    "BridgeRouteInfo",
    "BridgeSimulation",
    "BridgeBalance",
    "BridgeStep",
    "BridgeStepStatus",
    "BridgeEvent",
    "BridgeEventType",
    "AllowanceInfo",
    "AllowanceSource",
    "AllowanceDecision",
    "AllowanceHookRequest",
    "IntentHookRequest",
    "TokenBalance",
    "BridgeQuote",
]
