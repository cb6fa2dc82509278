from .clients import ChainClients
from .constants import (
    MAX_UINT256,
    MAINNET_CHAINS,
    TESTNET_CHAINS,
    SUPPORTED_TOKENS,
    get_supported_chains,
    get_chain_by_id,
    get_auth_anchor_chain,
    get_token_config,
    get_token_address,
    get_tokens_for_chain,
    get_vault_address,
    amount_to_value,
    value_to_amount,
)
from .provider import WalletProvider
from .registry import ChainRegistry
from .signatures import SigningContext, message_to_bytes, parse_typed_data
from .transactions import (
    approve_erc20,
    query_erc20_allowance,
    query_erc20_balance,
    send_transaction,
    wait_for_confirmations,
)

__all__ = [
    "ChainClients",
    "MAX_UINT256",
    "MAINNET_CHAINS",
    "TESTNET_CHAINS",
    "SUPPORTED_TOKENS",
    "get_supported_chains",
    "get_chain_by_id",
    "get_auth_anchor_chain",
    "get_token_config",
    "get_token_address",
    "get_tokens_for_chain",
    "get_vault_address",
    "amount_to_value",
    "value_to_amount",
    "WalletProvider",
    "ChainRegistry",
    "SigningContext",
    "message_to_bytes",
    "parse_typed_data",
    "approve_erc20",
    "query_erc20_allowance",
    "query_erc20_balance",
    "send_transaction",
    "wait_for_confirmations",
]
