from .evm import (
    ChainClients,
    ChainRegistry,
    SigningContext,
    WalletProvider,
)

__all__ = [
    "ChainClients",
    "ChainRegistry",
    "SigningContext",
    "WalletProvider",
]
