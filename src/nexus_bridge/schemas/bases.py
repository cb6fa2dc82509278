"""
Base Schema Models for the Bridge System

This module defines the fundamental models shared by the provider adapter,
the orchestrator and the operation ledger.

Core Classes:
    - CanonicalModel: Pydantic base model that serializes by field alias
    - ChainDescriptor: Chain metadata held by the chain registry
    - TokenConfig: Static token metadata with per-chain contract addresses
    - OperationStatus: Lifecycle states of a bridge operation
    - BridgeOperation: Ledger record of one bridge execution attempt

Dependencies:
    - pydantic: For data validation and serialization
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class CanonicalModel(BaseModel):
    """
    Pydantic base model shared by every bridge schema.

    Fields accept either their Python name or their camelCase alias, and
    ``to_dict`` renders the alias form used in tool responses.

    Example:
        class MyModel(CanonicalModel):
            chain_id: int = Field(..., alias="chainId")

        MyModel(chain_id=1).to_dict()  # {"chainId": 1}
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert model to a JSON-compatible dictionary using field aliases.

        Returns:
            Dict[str, Any]: Dictionary with all model fields.
        """
        return self.model_dump(mode="json", by_alias=True)


class ChainDescriptor(CanonicalModel):
    """
    Chain metadata owned by the chain registry.

    Identity is ``chain_id``. Entries are seeded from the static chain tables
    and may be added at runtime through ``wallet_addEthereumChain``; they are
    never removed during a process lifetime.

    Attributes:
        chain_id: EIP-155 chain id
        display_name: Human-readable chain name
        native_currency_symbol: Native gas token symbol
        native_currency_decimals: Native gas token decimals
        rpc_url: JSON-RPC endpoint, if one is known
        explorer_url: Block explorer base URL, if one is known
    """

    chain_id: int = Field(..., alias="chainId", ge=1, description="EIP-155 chain id")
    display_name: str = Field(..., alias="displayName", description="Human-readable chain name")
    native_currency_symbol: str = Field(default="ETH", alias="nativeCurrencySymbol")
    native_currency_decimals: int = Field(default=18, alias="nativeCurrencyDecimals", ge=0)
    rpc_url: Optional[str] = Field(default=None, alias="rpcUrl", description="JSON-RPC endpoint URL")
    explorer_url: Optional[str] = Field(default=None, alias="explorerUrl", description="Block explorer URL")

    @property
    def caip2(self) -> str:
        """CAIP-2 identifier, e.g. ``eip155:8453``."""
        return f"eip155:{self.chain_id}"

    @property
    def hex_chain_id(self) -> str:
        """Chain id as the hex quantity string wallets exchange, e.g. ``0x2105``."""
        return hex(self.chain_id)


class TokenConfig(CanonicalModel):
    """Static token metadata: symbol, decimals and a chain id -> address map."""

    symbol: str
    name: str
    decimals: int = Field(..., ge=0)
    addresses: Dict[int, str] = Field(default_factory=dict)


class OperationStatus(str, Enum):
    """Lifecycle of a bridge operation record."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class BridgeOperation(CanonicalModel):
    """
    Ledger record of a single bridge execution attempt.

    Created right before the engine is invoked (or directly as ``failed`` when
    the attempt aborts earlier) and mutated in place to its final status.
    ``created_at`` never changes after the first write; ``updated_at`` never
    decreases across writes to the same id.

    Attributes:
        id: Opaque operation id generated by the orchestrator
        tx_hash: Bridge transaction hash, empty until known
        from_chain_id: Source chain id
        to_chain_id: Destination chain id
        token: Token symbol
        amount: Raw integer amount as a decimal string
        status: pending, completed or failed
        error: Human-readable failure reason
        explorer_url: Explorer link reported by the engine
        created_at: First write timestamp
        updated_at: Latest write timestamp
    """

    id: str
    tx_hash: str = Field(default="", alias="txHash")
    from_chain_id: int = Field(..., alias="fromChainId")
    to_chain_id: int = Field(..., alias="toChainId")
    token: str
    amount: str = Field(..., description="Raw integer units as a decimal string")
    status: OperationStatus
    error: Optional[str] = None
    explorer_url: Optional[str] = Field(default=None, alias="explorerUrl")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")
