"""
Chain RPC Clients

Yields read-capable and signing-capable access to any chain in the chain
registry. Web3 instances are created lazily per chain and cached; the RPC
endpoint is resolved in order of preference:

    1. Explicit override (e.g. ``RPC_BASE`` from the environment)
    2. The descriptor's ``rpc_url``
    3. A known public endpoint for well-known chains
    4. A keyless endpoint looked up from ethereum-lists

Dependencies:
    - web3.py: For blockchain RPC interaction
    - eth_account (via SigningContext): For transaction signing
"""

import logging
from typing import Any, Dict, List, Optional

from web3 import AsyncWeb3
from web3.types import TxReceipt

from ...engine.exceptions import (
    BlockchainInteractionError,
    MissingSigningKeyError,
    ProviderRpcError,
)
from .constants import DEFAULT_RPC_URLS, fetch_public_rpc_url
from .registry import ChainRegistry
from .signatures import SigningContext
from .transactions import (
    approve_erc20,
    query_erc20_allowance,
    query_erc20_balance,
    send_transaction,
    wait_for_confirmations,
)

logger = logging.getLogger(__name__)


class ChainClients:
    """
    Per-chain RPC access bound to one chain registry and one signer.

    Read operations work without a signer; anything that signs raises
    ``MissingSigningKeyError`` when the clients were built without one.

    Attributes:
        registry: The chain registry endpoints are resolved from
        signer: Optional signing context for writes

    Example:
        clients = ChainClients(registry, signer=SigningContext(pk))
        block = await clients.request(8453, "eth_blockNumber", [])
        tx_hash = await clients.send_transaction(8453, {"to": "0x...", "value": "0x0"})
    """

    def __init__(
        self,
        registry: ChainRegistry,
        signer: Optional[SigningContext] = None,
        rpc_overrides: Optional[Dict[int, str]] = None,
        request_timeout: int = 60,
    ) -> None:
        self.registry = registry
        self.signer = signer
        self._rpc_overrides = dict(rpc_overrides or {})
        self._request_timeout = request_timeout
        self._web3_cache: Dict[int, AsyncWeb3] = {}
        self._resolved_rpc: Dict[int, str] = {}

    async def resolve_rpc_url(self, chain_id: int) -> str:
        """
        Return the RPC endpoint used for ``chain_id``.

        Raises:
            BlockchainInteractionError: If the chain is unknown or no endpoint
                can be resolved.
        """
        if chain_id in self._resolved_rpc:
            return self._resolved_rpc[chain_id]

        descriptor = self.registry.get(chain_id)
        if descriptor is None:
            raise BlockchainInteractionError(f"Chain {chain_id} not configured in provider")

        rpc_url = (
            self._rpc_overrides.get(chain_id)
            or descriptor.rpc_url
            or DEFAULT_RPC_URLS.get(chain_id)
        )
        if not rpc_url:
            logger.info("No RPC configured for chain %d, looking up ethereum-lists", chain_id)
            rpc_url = await fetch_public_rpc_url(chain_id)
        if not rpc_url:
            raise BlockchainInteractionError(f"No RPC endpoint available for chain {chain_id}")

        self._resolved_rpc[chain_id] = rpc_url
        return rpc_url

    async def get_web3(self, chain_id: int) -> AsyncWeb3:
        """Return the cached ``AsyncWeb3`` for ``chain_id``, creating it on first use."""
        web3 = self._web3_cache.get(chain_id)
        if web3 is None:
            rpc_url = await self.resolve_rpc_url(chain_id)
            web3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(
                rpc_url,
                request_kwargs={"timeout": self._request_timeout},
            ))
            self._web3_cache[chain_id] = web3
        return web3

    def _require_signer(self) -> SigningContext:
        if self.signer is None:
            raise MissingSigningKeyError()
        return self.signer

    async def request(self, chain_id: int, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Forward a raw JSON-RPC request to ``chain_id``.

        Returns:
            The ``result`` field of the node's response.

        Raises:
            ProviderRpcError: If the node answered with a JSON-RPC error; the
                node's code and data are preserved.
        """
        web3 = await self.get_web3(chain_id)
        response = await web3.provider.make_request(method, list(params or []))
        error = response.get("error")
        if error:
            if isinstance(error, dict):
                raise ProviderRpcError(
                    int(error.get("code", -32603)),
                    str(error.get("message", "RPC error")),
                    error.get("data"),
                )
            raise ProviderRpcError(-32603, str(error))
        return response.get("result")

    async def send_transaction(self, chain_id: int, request: Dict[str, Any]) -> str:
        """Sign and broadcast a wallet-style transaction on ``chain_id``."""
        signer = self._require_signer()
        web3 = await self.get_web3(chain_id)
        return await send_transaction(web3, signer, chain_id, request)

    async def get_allowance(self, chain_id: int, token_address: str, owner: str, spender: str) -> int:
        """Read the ERC-20 allowance of ``owner`` towards ``spender``."""
        web3 = await self.get_web3(chain_id)
        return await query_erc20_allowance(web3, token_address, owner, spender)

    async def balance_of(self, chain_id: int, token_address: str, owner: str) -> int:
        """Read the ERC-20 balance of ``owner``."""
        web3 = await self.get_web3(chain_id)
        return await query_erc20_balance(web3, token_address, owner)

    async def approve(self, chain_id: int, token_address: str, spender: str, amount: int) -> str:
        """Broadcast ``approve(spender, amount)``; returns the tx hash."""
        signer = self._require_signer()
        web3 = await self.get_web3(chain_id)
        return await approve_erc20(web3, signer, chain_id, token_address, spender, amount)

    async def wait_for_confirmations(
        self,
        chain_id: int,
        tx_hash: str,
        confirmations: int,
        timeout: float = 120.0,
    ) -> TxReceipt:
        """Block until ``tx_hash`` has ``confirmations`` confirmations."""
        web3 = await self.get_web3(chain_id)
        return await wait_for_confirmations(web3, tx_hash, confirmations=confirmations, timeout=timeout)
