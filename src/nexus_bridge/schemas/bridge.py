"""
Bridging Engine Schema Models

Pydantic models for everything exchanged with the external bridging engine:
transfer parameters and results, simulations, balances, progress events and
the payloads handed to the allowance / intent confirmation hooks.

Only the fields the core actually reads are declared; the engine may carry
more, and those are ignored.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, Union

from pydantic import Field

from .bases import CanonicalModel


class BridgeParams(CanonicalModel):
    """
    Transfer request handed to the engine.

    Attributes:
        token: Token symbol (upper case)
        amount: Raw integer amount in the token's smallest unit
        to_chain_id: Destination chain id
        source_chains: Chains the engine may source liquidity from
    """
    token: str
    amount: int = Field(..., gt=0)
    to_chain_id: int = Field(..., alias="toChainId")
    source_chains: List[int] = Field(default_factory=list, alias="sourceChains")


class BridgeResult(CanonicalModel):
    """Engine transfer outcome."""
    success: bool
    tx_hash: Optional[str] = Field(default=None, alias="txHash")
    explorer_url: Optional[str] = Field(default=None, alias="explorerUrl")
    error: Optional[str] = None


class BridgeFees(CanonicalModel):
    protocol: str
    gas: str
    total: str


class BridgeRouteInfo(CanonicalModel):
    source_chain: int = Field(..., alias="sourceChain")
    target_chain: int = Field(..., alias="targetChain")
    token: str


class BridgeSimulation(CanonicalModel):
    """Fee and route estimate produced by the engine's simulation call."""
    fees: BridgeFees
    estimated_time: str = Field(..., alias="estimatedTime")
    route: BridgeRouteInfo


class BridgeBalance(CanonicalModel):
    """Unified balance entry as reported by the engine."""
    chain_id: int = Field(..., alias="chainId")
    symbol: str
    amount: int
    formatted: str


class BridgeStepStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"
    FAILED = "failed"


class BridgeStep(CanonicalModel):
    id: str
    description: str
    status: BridgeStepStatus


class BridgeEventType(str, Enum):
    STEPS_LIST = "STEPS_LIST"
    STEP_COMPLETE = "STEP_COMPLETE"
    STEP_FAILED = "STEP_FAILED"
    BRIDGE_COMPLETE = "BRIDGE_COMPLETE"


class BridgeEvent(CanonicalModel):
    """Progress event emitted by the engine while a transfer runs."""
    type: BridgeEventType
    steps: Optional[List[BridgeStep]] = None
    explorer_url: Optional[str] = Field(default=None, alias="explorerUrl")
    error: Optional[str] = None


class AllowanceInfo(CanonicalModel):
    current: str
    current_raw: int = Field(..., alias="currentRaw")
    minimum: str
    minimum_raw: int = Field(..., alias="minimumRaw")


class AllowanceSource(CanonicalModel):
    """One token/chain pair the engine needs an allowance decision for."""
    token_symbol: str = Field(..., alias="tokenSymbol")
    chain_id: int = Field(..., alias="chainId")
    chain_name: str = Field(..., alias="chainName")
    allowance: AllowanceInfo


#: Allowance decision per source: ``"max"``, ``"min"`` or an explicit amount.
AllowanceDecision = Union[str, int]


@dataclass
class AllowanceHookRequest:
    """
    Payload the engine passes to the allowance-confirmation hook.

    ``allow`` must be called with one decision per entry in ``sources``;
    ``deny`` aborts the transfer.
    """
    sources: Sequence[AllowanceSource]
    allow: Callable[[List[AllowanceDecision]], None]
    deny: Callable[[], None]


@dataclass
class IntentHookRequest:
    """Payload the engine passes to the intent-confirmation hook."""
    allow: Callable[[], None]
    deny: Callable[[], None]
    intent: Any = field(default=None)


class TokenBalance(CanonicalModel):
    """ERC-20 balance of one token on one chain."""
    chain_id: int = Field(..., alias="chainId")
    chain_name: str = Field(..., alias="chainName")
    token: str
    address: str
    balance: str
    formatted: str
    decimals: int


class BridgeQuote(CanonicalModel):
    """Offline fee and route estimate for a validated route."""
    from_chain: dict = Field(..., alias="fromChain")
    to_chain: dict = Field(..., alias="toChain")
    token: str
    amount: str
    raw_amount: str = Field(..., alias="rawAmount")
    fees: dict
    estimated_time: str = Field(..., alias="estimatedTime")
    route: BridgeRouteInfo
