"""
Exception and Error Definitions Module

Defines the exception hierarchy for wallet-provider dispatch, allowance
management and bridge orchestration. All exceptions inherit from BridgeError
for unified exception handling by the calling front-end.

Exception Hierarchy:
    BridgeError (root)
    ├── ConfigurationError
    │   └── MissingSigningKeyError
    ├── ValidationError
    │   ├── UnsupportedChainError
    │   ├── UnsupportedTokenError
    │   ├── TokenUnavailableError
    │   └── InvalidAmountError
    ├── ProviderRpcError
    │   ├── UnrecognizedChainError
    │   └── InvalidParamsError
    ├── BlockchainInteractionError
    │   └── TransactionExecutionError
    └── EngineError
        └── EngineNotReadyError
"""

from typing import Any, Optional


class BridgeError(Exception):
    """
    Root exception class for all project-specific exceptions.

    All custom exceptions inherit from this class so the front-end can
    catch one type and render a human-readable message.
    """
    pass


class ConfigurationError(BridgeError):
    """
    Raised when configuration is missing or invalid.

    This includes scenarios such as:
    - Invalid NETWORK_MODE value
    - Malformed private key
    - Chain without any resolvable RPC endpoint
    """
    pass


class MissingSigningKeyError(ConfigurationError):
    """
    Raised when an operation needs the signing key and none is configured.

    Fatal to any execute attempt and never retried.
    """

    def __init__(self, message: str = "PRIVATE_KEY is not set in environment. Cannot execute bridge without a wallet."):
        super().__init__(message)


class ValidationError(BridgeError):
    """
    Base exception for caller-correctable input problems.

    Raised before any network call; the caller may retry with corrected
    parameters.
    """
    pass


class UnsupportedChainError(ValidationError):
    """
    Raised when a chain id is not supported in the active network mode.

    Attributes:
        chain_id: The rejected chain id
        role: "Source" or "Destination"
    """

    def __init__(self, chain_id: int, network_mode: str, role: str = "Chain"):
        self.chain_id = chain_id
        self.network_mode = network_mode
        self.role = role
        super().__init__(f"{role} chain {chain_id} not supported in {network_mode} mode.")


class UnsupportedTokenError(ValidationError):
    """
    Raised when a token symbol has no entry in the token registry.

    Attributes:
        symbol: The rejected token symbol
    """

    def __init__(self, symbol: str, supported: Optional[list] = None):
        self.symbol = symbol
        message = f"Token {symbol} is not supported."
        if supported:
            message += f" Supported: {', '.join(supported)}"
        super().__init__(message)


class TokenUnavailableError(ValidationError):
    """
    Raised when a known token has no contract address on a given chain.

    Attributes:
        symbol: Token symbol
        chain_id: Chain lacking the token
    """

    def __init__(self, symbol: str, chain_id: int, chain_name: str):
        self.symbol = symbol
        self.chain_id = chain_id
        super().__init__(f"{symbol} is not available on {chain_name}.")


class InvalidAmountError(ValidationError):
    """Raised when a human-readable amount cannot be converted to raw units."""
    pass


class ProviderRpcError(BridgeError):
    """
    Error returned through the wallet-provider request interface.

    Mirrors the EIP-1193 ``ProviderRpcError`` shape: a numeric ``code`` the
    caller can branch on, a message, and optional ``data``.

    Attributes:
        code: Numeric JSON-RPC / EIP-1193 error code
        data: Optional extra payload from the node
    """

    def __init__(self, code: int, message: str, data: Any = None):
        self.code = code
        self.data = data
        super().__init__(message)


class UnrecognizedChainError(ProviderRpcError):
    """
    Raised on a chain switch to a chain the provider does not know.

    The 4902 code tells the caller to issue ``wallet_addEthereumChain`` and
    retry the switch; it is the one recoverable provider error.
    """

    CODE = 4902

    def __init__(self, chain_id: int):
        self.chain_id = chain_id
        super().__init__(self.CODE, f"Unrecognized chain {chain_id}")


class InvalidParamsError(ProviderRpcError):
    """Raised when a provider request carries missing or malformed params."""

    CODE = -32602

    def __init__(self, message: str):
        super().__init__(self.CODE, message)


class BlockchainInteractionError(BridgeError):
    """
    Raised when blockchain interaction (RPC call) fails.

    This includes scenarios such as:
    - No RPC endpoint resolvable for a chain
    - Contract call revert
    """
    pass


class TransactionExecutionError(BlockchainInteractionError):
    """
    Raised when a broadcast transaction reverts or never confirms.

    Attributes:
        tx_hash: Transaction hash if available
    """

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        super().__init__(message)


class EngineError(BridgeError):
    """Raised when the external bridging engine fails outside a transfer result."""
    pass


class EngineNotReadyError(EngineError):
    """
    Raised when a transfer is requested before the engine session was
    initialised and both confirmation hooks were registered.
    """

    def __init__(self, message: str = "Bridge engine not initialized. Call initialize() first."):
        super().__init__(message)
