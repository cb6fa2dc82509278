"""Multi-chain ERC-20 balance lookup for the supported tokens."""

import asyncio
import logging
from typing import List

from ..adapters.evm.clients import ChainClients
from ..adapters.evm.constants import get_supported_chains, get_tokens_for_chain, value_to_amount
from ..schemas.bases import ChainDescriptor
from ..schemas.bridge import TokenBalance

logger = logging.getLogger(__name__)


async def _chain_balances(address: str, chain: ChainDescriptor, clients: ChainClients) -> List[TokenBalance]:
    results = []
    for token in get_tokens_for_chain(chain.chain_id):
        try:
            raw = await clients.balance_of(chain.chain_id, token["address"], address)
            balance, formatted = str(raw), value_to_amount(value=raw, decimals=token["decimals"])
        except Exception as e:
            # A dead RPC must not hide the other chains' balances
            logger.warning("Failed to fetch %s on %s: %s", token["symbol"], chain.display_name, e)
            balance, formatted = "0", "0"

        results.append(TokenBalance(
            chain_id=chain.chain_id,
            chain_name=chain.display_name,
            token=token["symbol"],
            address=token["address"],
            balance=balance,
            formatted=formatted,
            decimals=token["decimals"],
        ))
    return results


async def get_multi_chain_balances(address: str, clients: ChainClients, testnet: bool) -> List[TokenBalance]:
    """
    Read every supported token on every bridgeable chain of a network mode.

    Chains are queried concurrently. A failed read is reported as a zero
    balance rather than raised.

    Returns:
        Balances sorted by chain id, token table order within a chain.
    """
    per_chain = await asyncio.gather(*(
        _chain_balances(address, chain, clients) for chain in get_supported_chains(testnet)
    ))
    balances = [balance for chain_balances in per_chain for balance in chain_balances]
    return sorted(balances, key=lambda b: b.chain_id)
