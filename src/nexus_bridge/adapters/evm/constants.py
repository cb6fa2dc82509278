"""
EVM Chain and Token Registries

Static chain, token and vault tables for both network modes, plus the
lookups and unit conversions the orchestrator and the provider adapter rely
on. Also includes an ethereum-lists lookup used to find a public RPC for a
chain that was registered at runtime without one.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Union

import httpx

from ...engine.exceptions import InvalidAmountError
from ...schemas.bases import ChainDescriptor, TokenConfig

#: Maximum uint256, used as the "unlimited" ERC-20 approval amount.
MAX_UINT256: int = 2**256 - 1


# Raw chain data. Keys are chain ids; ``rpc_url`` is a keyless public endpoint.
_MAINNET_CHAINS_DATA: Dict[int, Dict[str, Any]] = {
    8453: {
        "name": "Base",
        "rpc_url": "https://mainnet.base.org",
        "explorer_url": "https://basescan.org",
    },
    10: {
        "name": "Optimism",
        "rpc_url": "https://mainnet.optimism.io",
        "explorer_url": "https://optimistic.etherscan.io",
    },
    42161: {
        "name": "Arbitrum",
        "rpc_url": "https://arb1.arbitrum.io/rpc",
        "explorer_url": "https://arbiscan.io",
    },
    137: {
        "name": "Polygon",
        "native_symbol": "POL",
        "rpc_url": "https://polygon-rpc.com",
        "explorer_url": "https://polygonscan.com",
    },
}

_TESTNET_CHAINS_DATA: Dict[int, Dict[str, Any]] = {
    84532: {
        "name": "Base Sepolia",
        "rpc_url": "https://sepolia.base.org",
        "explorer_url": "https://sepolia.basescan.org",
    },
    11155420: {
        "name": "OP Sepolia",
        "rpc_url": "https://sepolia.optimism.io",
        "explorer_url": "https://sepolia-optimism.etherscan.io",
    },
    421614: {
        "name": "Arbitrum Sepolia",
        "rpc_url": "https://sepolia-rollup.arbitrum.io/rpc",
        "explorer_url": "https://sepolia.arbiscan.io",
    },
}

# L1 chains the engine switches to for signature-based login.
_AUTH_ANCHOR_CHAINS_DATA: Dict[bool, Dict[str, Any]] = {
    False: {
        "chain_id": 1,
        "name": "Ethereum",
        "rpc_url": "https://eth.llamarpc.com",
        "explorer_url": "https://etherscan.io",
    },
    True: {
        "chain_id": 11155111,
        "name": "Sepolia",
        "rpc_url": "https://ethereum-sepolia-rpc.publicnode.com",
        "explorer_url": "https://sepolia.etherscan.io",
    },
}

#: Public RPC endpoints for well-known chains, used when a chain is registered
#: at runtime without any RPC URL.
DEFAULT_RPC_URLS: Dict[int, str] = {
    **{cid: data["rpc_url"] for cid, data in _MAINNET_CHAINS_DATA.items()},
    **{cid: data["rpc_url"] for cid, data in _TESTNET_CHAINS_DATA.items()},
    **{data["chain_id"]: data["rpc_url"] for data in _AUTH_ANCHOR_CHAINS_DATA.values()},
}

_TOKENS_DATA: Dict[str, Dict[str, Any]] = {
    "USDC": {
        "name": "USD Coin",
        "decimals": 6,
        "addresses": {
            # Mainnet
            8453: "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
            10: "0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85",
            42161: "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
            137: "0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359",
            # Testnet
            84532: "0x036CbD53842c5426634e7929541eC2318f3dCF7e",
            11155420: "0x5fd84259d66Cd46123540766Be93DFE6D43130D7",
            421614: "0x75faf114eafb1BDbe2F0316DF893fd58CE46AA4d",
        },
    },
    "USDT": {
        "name": "Tether USD",
        "decimals": 6,
        "addresses": {
            8453: "0xfde4C96c8593536E31F229EA8f37b2ADa2699bb2",
            10: "0x94b008aA00579c1307B0EF2c499aD98a8ce58e58",
            42161: "0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9",
            137: "0xc2132D05D31c914a87C6611C10748AEb04B58e8F",
        },
    },
}

# Engine vault contracts that must hold an allowance before a transfer.
VAULT_CONTRACTS: Dict[bool, Dict[int, str]] = {
    True: {
        84532: "0xa7458040272226378397c3036eda862d60c3b307",
        11155420: "0x10b69f0e3c21c1187526940a615959e9ee6012f9",
        421614: "0x10b69f0e3c21c1187526940a615959e9ee6012f9",
        11155111: "0xd579b76e3f51884c50eb8e8efdef5c593666b8fb",
    },
    False: {
        8453: "0xC0DED5d7F424276c821AF21F68E1e663bC671C3D",
        10: "0xC0DED5d7F424276c821AF21F68E1e663bC671C3D",
        42161: "0xC0DED5d7F424276c821AF21F68E1e663bC671C3D",
        137: "0xC0DED5d7F424276c821AF21F68E1e663bC671C3D",
    },
}

#: Mainnet chain id for each RPC override environment variable.
RPC_OVERRIDE_ENV_VARS: Dict[str, int] = {
    "RPC_BASE": 8453,
    "RPC_OPTIMISM": 10,
    "RPC_ARBITRUM": 42161,
    "RPC_POLYGON": 137,
}


def _build_descriptor(chain_id: int, data: Dict[str, Any]) -> ChainDescriptor:
    return ChainDescriptor(
        chain_id=chain_id,
        display_name=data["name"],
        native_currency_symbol=data.get("native_symbol", "ETH"),
        native_currency_decimals=data.get("native_decimals", 18),
        rpc_url=data.get("rpc_url"),
        explorer_url=data.get("explorer_url"),
    )


MAINNET_CHAINS: Dict[int, ChainDescriptor] = {
    cid: _build_descriptor(cid, data) for cid, data in _MAINNET_CHAINS_DATA.items()
}

TESTNET_CHAINS: Dict[int, ChainDescriptor] = {
    cid: _build_descriptor(cid, data) for cid, data in _TESTNET_CHAINS_DATA.items()
}

AUTH_ANCHOR_CHAINS: Dict[bool, ChainDescriptor] = {
    testnet: _build_descriptor(data["chain_id"], data)
    for testnet, data in _AUTH_ANCHOR_CHAINS_DATA.items()
}

SUPPORTED_TOKENS: Dict[str, TokenConfig] = {
    symbol: TokenConfig(symbol=symbol, **data) for symbol, data in _TOKENS_DATA.items()
}


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def get_supported_chains(testnet: bool) -> List[ChainDescriptor]:
    """Return the bridgeable chains of a network mode, in table order."""
    chains = TESTNET_CHAINS if testnet else MAINNET_CHAINS
    return list(chains.values())


def get_chain_by_id(chain_id: int, testnet: bool) -> Optional[ChainDescriptor]:
    """Return the bridgeable chain with ``chain_id`` in the given mode, or None."""
    chains = TESTNET_CHAINS if testnet else MAINNET_CHAINS
    return chains.get(chain_id)


def get_chain_by_caip(caip: str, testnet: bool) -> Optional[ChainDescriptor]:
    """Return the bridgeable chain whose CAIP-2 id is ``caip``, or None."""
    for chain in get_supported_chains(testnet):
        if chain.caip2 == caip:
            return chain
    return None


def get_auth_anchor_chain(testnet: bool) -> ChainDescriptor:
    """Return the L1 chain the engine uses for signature-based login."""
    return AUTH_ANCHOR_CHAINS[testnet]


def get_token_config(symbol: str) -> Optional[TokenConfig]:
    """Look up a token by symbol (case-insensitive)."""
    return SUPPORTED_TOKENS.get(symbol.strip().upper())


def get_token_address(symbol: str, chain_id: int) -> Optional[str]:
    """Return the token's contract address on ``chain_id``, or None."""
    token = get_token_config(symbol)
    if token is None:
        return None
    return token.addresses.get(chain_id)


def get_tokens_for_chain(chain_id: int) -> List[Dict[str, Any]]:
    """
    List every supported token deployed on ``chain_id``.

    Returns:
        List of ``{"symbol", "name", "decimals", "address"}`` dicts.
    """
    result = []
    for token in SUPPORTED_TOKENS.values():
        address = token.addresses.get(chain_id)
        if address:
            result.append({
                "symbol": token.symbol,
                "name": token.name,
                "decimals": token.decimals,
                "address": address,
            })
    return result


def get_vault_address(chain_id: int, testnet: bool) -> Optional[str]:
    """Return the engine vault (approval spender) for ``chain_id``, or None."""
    return VAULT_CONTRACTS[testnet].get(chain_id)


# ---------------------------------------------------------------------------
# Unit conversion
# ---------------------------------------------------------------------------

def amount_to_value(*, amount: Union[str, int, float, Decimal], decimals: int) -> int:
    """Convert a human-readable token ``amount`` into raw integer units.

    The scaled amount is rounded half-up to the nearest smallest unit, so
    ``"25"`` with 6 decimals becomes ``25000000`` and ``"0.0000005"`` becomes
    ``1``.

    Args:
        amount: Human-readable amount (e.g. ``"1.5"`` for 1.5 USDC).
        decimals: Token decimals (e.g. 6 for USDC).

    Returns:
        int: Smallest-unit integer value.

    Raises:
        InvalidAmountError: If the amount is not a finite positive number or
            rounds down to zero.
    """
    if not isinstance(decimals, int) or decimals < 0:
        raise ValueError("decimals must be a non-negative int")

    try:
        # str() avoids binary-float artifacts (0.1 -> 0.1000000000000000055...)
        dec_amount = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except (InvalidOperation, ValueError, TypeError) as e:
        raise InvalidAmountError(f"Invalid amount: {amount!r}") from e

    if not dec_amount.is_finite():
        raise InvalidAmountError(f"Invalid amount: {amount!r}")
    if dec_amount <= 0:
        raise InvalidAmountError(f"Amount must be positive, got {amount!r}")

    scaled = (dec_amount * (Decimal(10) ** decimals)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    if scaled == 0:
        raise InvalidAmountError(
            f"Amount {amount!r} is smaller than one unit at {decimals} decimals"
        )
    return int(scaled)


def value_to_amount(*, value: Union[int, str, Decimal], decimals: int) -> str:
    """Format a raw integer ``value`` as a human-readable decimal string.

    Example:
        value_to_amount(value=1230000, decimals=6)  # "1.23"
    """
    if not isinstance(decimals, int) or decimals < 0:
        raise ValueError("decimals must be a non-negative int")

    try:
        dec_value = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValueError(f"Invalid value: {value!r}") from e

    if dec_value != dec_value.to_integral_value():
        raise ValueError("value must be an integer in smallest units")

    scaled = dec_value / (Decimal(10) ** decimals)
    text = format(scaled, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


# ---------------------------------------------------------------------------
# Remote chain metadata
# ---------------------------------------------------------------------------

async def fetch_json(url: str, timeout: float = 10.0) -> Dict[str, Any]:
    """
    Fetch JSON from a URL, raising detailed exceptions on failure.

    Raises:
        httpx.HTTPStatusError: If the server returns a 4xx or 5xx status code.
        httpx.RequestError: If a network-level error occurs.
        RuntimeError: If the response is not valid JSON.
    """
    async with httpx.AsyncClient(timeout=timeout) as client:
        response = await client.get(url)
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as json_exc:
            raise RuntimeError(
                f"Failed to decode JSON from {url}. Content-Type: {response.headers.get('Content-Type')}"
            ) from json_exc


def parse_public_rpc_url(rpcs: List[Any], start_with: str = "https://") -> Optional[str]:
    """Pick a public (no-key) RPC URL from a chain's RPC list.

    Skips entries with placeholder markers (``$`` or ``{...}``), which
    indicate an API key is required.
    """
    for rpc in rpcs or []:
        if not isinstance(rpc, str):
            continue
        if not rpc.startswith(start_with):
            continue
        if "$" in rpc or "{" in rpc or "}" in rpc:
            continue
        return rpc
    return None


async def fetch_public_rpc_url(chain_id: int, timeout: float = 10.0) -> Optional[str]:
    """
    Resolve a keyless HTTPS RPC endpoint for ``chain_id`` from ethereum-lists.

    Returns:
        The first usable public endpoint, or None if the chain lists none.

    Raises:
        httpx.HTTPError: If the chain file is missing or unreachable.
    """
    url = (
        "https://raw.githubusercontent.com/ethereum-lists/chains/master/_data/chains/"
        f"eip155-{chain_id}.json"
    )
    payload = await fetch_json(url, timeout=timeout)
    return parse_public_rpc_url(payload.get("rpc", []))
