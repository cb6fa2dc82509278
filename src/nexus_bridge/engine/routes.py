"""
Route resolution and quotes.

``resolve_route`` performs every check that can fail before the network is
touched: both chains must be bridgeable in the active network mode, the token
must be known and deployed on both ends, and the amount must convert to a
positive number of raw units. ``build_quote`` turns a resolved route into an
offline fee and time estimate.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from ..adapters.evm.constants import (
    SUPPORTED_TOKENS,
    amount_to_value,
    get_chain_by_id,
    get_token_config,
)
from ..schemas.bases import ChainDescriptor, TokenConfig
from ..schemas.bridge import BridgeQuote, BridgeRouteInfo
from .exceptions import TokenUnavailableError, UnsupportedChainError, UnsupportedTokenError

PROTOCOL_FEE_RATE = Decimal("0.001")
PROTOCOL_FEE_LABEL = "0.1%"
ESTIMATED_GAS_LABEL = "~0.001 ETH"
ESTIMATED_TIME_LABEL = "2-5 minutes"


@dataclass(frozen=True)
class BridgeRoute:
    """A validated transfer: chains, token, and amount in both forms."""
    from_chain: ChainDescriptor
    to_chain: ChainDescriptor
    token: TokenConfig
    amount: str
    raw_amount: int
    source_token_address: str
    destination_token_address: str

    @property
    def symbol(self) -> str:
        return self.token.symbol


def resolve_route(
    from_chain_id: int,
    to_chain_id: int,
    token_symbol: str,
    amount: Union[str, int, float, Decimal],
    testnet: bool,
) -> BridgeRoute:
    """
    Validate a transfer request against the static registries.

    Raises:
        UnsupportedChainError: Either chain is not bridgeable in this mode.
        UnsupportedTokenError: The symbol is unknown.
        TokenUnavailableError: The token has no contract on one of the chains.
        InvalidAmountError: The amount is not a positive number of units.
    """
    mode = "testnet" if testnet else "mainnet"
    from_chain = get_chain_by_id(from_chain_id, testnet)
    if from_chain is None:
        raise UnsupportedChainError(from_chain_id, mode, role="Source")
    to_chain = get_chain_by_id(to_chain_id, testnet)
    if to_chain is None:
        raise UnsupportedChainError(to_chain_id, mode, role="Destination")

    token = get_token_config(token_symbol)
    if token is None:
        raise UnsupportedTokenError(token_symbol, supported=list(SUPPORTED_TOKENS))

    source_address = token.addresses.get(from_chain_id)
    if not source_address:
        raise TokenUnavailableError(token.symbol, from_chain_id, from_chain.display_name)
    destination_address = token.addresses.get(to_chain_id)
    if not destination_address:
        raise TokenUnavailableError(token.symbol, to_chain_id, to_chain.display_name)

    raw_amount = amount_to_value(amount=amount, decimals=token.decimals)
    return BridgeRoute(
        from_chain=from_chain,
        to_chain=to_chain,
        token=token,
        amount=str(amount).strip(),
        raw_amount=raw_amount,
        source_token_address=source_address,
        destination_token_address=destination_address,
    )


def build_quote(route: BridgeRoute) -> BridgeQuote:
    """Offline fee/time estimate for a resolved route."""
    decimals = route.token.decimals
    total = (Decimal(route.amount) * PROTOCOL_FEE_RATE).quantize(
        Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP
    )
    return BridgeQuote(
        from_chain={"id": route.from_chain.chain_id, "name": route.from_chain.display_name},
        to_chain={"id": route.to_chain.chain_id, "name": route.to_chain.display_name},
        token=route.symbol,
        amount=route.amount,
        raw_amount=str(route.raw_amount),
        fees={
            "protocol": PROTOCOL_FEE_LABEL,
            "estimatedGas": ESTIMATED_GAS_LABEL,
            "total": f"~{total} {route.symbol}",
        },
        estimated_time=ESTIMATED_TIME_LABEL,
        route=BridgeRouteInfo(
            source_chain=route.from_chain.chain_id,
            target_chain=route.to_chain.chain_id,
            token=route.symbol,
        ),
    )
