"""
EVM Wallet-Provider Adapter

Impersonates a browser-style (EIP-1193) wallet provider so that a bridging
engine built for interactive wallets can run headlessly. The engine calls
``dispatch(method, params)`` exactly as it would call ``provider.request``
in a browser; this adapter answers from the chain registry, the signing
context and per-chain RPC clients.

Key Features:
    - Account and chain queries answered locally
    - Chain switching with 4902 "unrecognized chain" signalling
    - Runtime chain registration (``wallet_addEthereumChain``)
    - Transaction sending, personal-message and typed-data signing
    - Passthrough of every other JSON-RPC method to the active chain

The active chain pointer lives on the instance, so concurrent bridge
operations each get their own provider and never race on chain switches.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from ...engine.events import CHAIN_CHANGED, EventEmitter, EventHandlerFunc
from ...engine.exceptions import InvalidParamsError, UnrecognizedChainError
from ...schemas.bases import ChainDescriptor
from .clients import ChainClients
from .registry import ChainRegistry
from .signatures import SigningContext, message_to_bytes
from .transactions import parse_quantity

logger = logging.getLogger(__name__)

Params = Union[List[Any], Dict[str, Any], None]


def _preview(value: Any, length: int = 20) -> str:
    """Truncate payloads for log lines."""
    if isinstance(value, str):
        return value[:length] + "..." if len(value) > length else value
    return type(value).__name__


class WalletProvider:
    """
    Headless EIP-1193 provider backed by a local signing key.

    Attributes:
        signer: Signing context answering account and signature requests
        registry: Shared chain registry (extended by ``wallet_addEthereumChain``)
        clients: RPC clients used for sends and passthrough reads

    Example:
        provider = WalletProvider(signer, registry, clients, initial_chain_id=84532)
        await provider.dispatch("eth_chainId")                 # "0x14a34"
        await provider.dispatch("wallet_switchEthereumChain", [{"chainId": "0x1"}])
    """

    def __init__(
        self,
        signer: SigningContext,
        registry: ChainRegistry,
        clients: ChainClients,
        initial_chain_id: Optional[int] = None,
    ) -> None:
        chain_ids = registry.chain_ids()
        if initial_chain_id is None:
            if not chain_ids:
                raise InvalidParamsError("WalletProvider requires at least one registered chain")
            initial_chain_id = chain_ids[0]
        if initial_chain_id not in registry:
            raise InvalidParamsError(f"Initial chain {initial_chain_id} is not registered")

        self.signer = signer
        self.registry = registry
        self.clients = clients
        self._active_chain_id: int = initial_chain_id
        self._events = EventEmitter()
        self._handlers = {
            "eth_accounts": self._accounts,
            "eth_requestAccounts": self._accounts,
            "eth_chainId": self._chain_id,
            "wallet_switchEthereumChain": self._switch_chain,
            "wallet_addEthereumChain": self._add_chain,
            "eth_sendTransaction": self._send_transaction,
            "personal_sign": self._personal_sign,
            "eth_sign": self._personal_sign,
            "eth_signTypedData_v4": self._sign_typed_data,
        }

    @property
    def active_chain_id(self) -> int:
        """The chain every signing and read request is currently addressed at."""
        return self._active_chain_id

    # =========================================================================
    # Request dispatch
    # =========================================================================

    async def dispatch(self, method: str, params: Params = None) -> Any:
        """
        Answer one wallet-provider request.

        Args:
            method: JSON-RPC method name.
            params: Positional list, a single params object, or None.

        Returns:
            The method result, shaped as a browser wallet would return it.

        Raises:
            UnrecognizedChainError: Switch to a chain not in the registry
                (code 4902; register the chain and retry).
            InvalidParamsError: Missing or malformed params.
            ProviderRpcError: JSON-RPC error returned by the node.
        """
        param_list = self._normalize_params(params)
        handler = self._handlers.get(method)
        if handler is not None:
            return await handler(method, param_list)

        logger.debug("RPC passthrough: %s on chain %d", method, self._active_chain_id)
        return await self.clients.request(self._active_chain_id, method, param_list)

    async def request(self, args: Dict[str, Any]) -> Any:
        """Browser-style entry point: ``request({"method": ..., "params": ...})``."""
        if not isinstance(args, dict) or "method" not in args:
            raise InvalidParamsError("request() expects {'method': ..., 'params': ...}")
        return await self.dispatch(args["method"], args.get("params"))

    def subscribe(self, event_name: str, handler: EventHandlerFunc) -> "WalletProvider":
        """Register ``handler`` for ``event_name`` (e.g. ``"chainChanged"``)."""
        self._events.subscribe(event_name, handler)
        return self

    def unsubscribe(self, event_name: str, handler: EventHandlerFunc) -> "WalletProvider":
        """Remove a handler previously passed to :meth:`subscribe`."""
        self._events.unsubscribe(event_name, handler)
        return self

    # Browser-provider aliases
    on = subscribe
    remove_listener = unsubscribe

    @staticmethod
    def _normalize_params(params: Params) -> List[Any]:
        if params is None:
            return []
        if isinstance(params, (list, tuple)):
            return list(params)
        return [params]

    @staticmethod
    def _first_object(method: str, params: List[Any]) -> Dict[str, Any]:
        if not params or not isinstance(params[0], dict):
            raise InvalidParamsError(f"{method} expects an object as its first param")
        return params[0]

    # =========================================================================
    # Method handlers
    # =========================================================================

    async def _accounts(self, method: str, params: List[Any]) -> List[str]:
        return [self.signer.address]

    async def _chain_id(self, method: str, params: List[Any]) -> str:
        return hex(self._active_chain_id)

    async def _switch_chain(self, method: str, params: List[Any]) -> None:
        arg = self._first_object(method, params)
        chain_id = parse_quantity(arg.get("chainId"), "chainId")
        if chain_id is None:
            raise InvalidParamsError("wallet_switchEthereumChain requires chainId")
        if chain_id not in self.registry:
            # 4902 tells the caller to send wallet_addEthereumChain first.
            raise UnrecognizedChainError(chain_id)

        self._active_chain_id = chain_id
        logger.info("Switched active chain to %d", chain_id)
        await self._events.emit(CHAIN_CHANGED, hex(chain_id))
        return None

    async def _add_chain(self, method: str, params: List[Any]) -> None:
        arg = self._first_object(method, params)
        chain_id = parse_quantity(arg.get("chainId"), "chainId")
        if chain_id is None:
            raise InvalidParamsError("wallet_addEthereumChain requires chainId")
        if chain_id in self.registry:
            return None

        rpc_urls = arg.get("rpcUrls") or []
        native = arg.get("nativeCurrency") or {}
        explorers = arg.get("blockExplorerUrls") or []
        if not isinstance(native, dict):
            raise InvalidParamsError("nativeCurrency must be an object")
        try:
            descriptor = ChainDescriptor(
                chain_id=chain_id,
                display_name=arg.get("chainName") or f"Chain {chain_id}",
                native_currency_symbol=native.get("symbol", "ETH"),
                native_currency_decimals=int(native.get("decimals", 18)),
                rpc_url=rpc_urls[0] if rpc_urls else None,
                explorer_url=explorers[0] if explorers else None,
            )
        except (TypeError, ValueError) as e:
            # pydantic's ValidationError is a ValueError
            raise InvalidParamsError(f"Invalid {method} params: {e}") from e
        self.registry.register(descriptor)
        return None

    async def _send_transaction(self, method: str, params: List[Any]) -> str:
        tx = self._first_object(method, params)
        logger.info(
            "eth_sendTransaction on chain %d: to=%s value=%s data=%s",
            self._active_chain_id,
            tx.get("to"),
            tx.get("value", "0"),
            _preview(tx.get("data")),
        )
        tx_hash = await self.clients.send_transaction(self._active_chain_id, tx)
        logger.info("Transaction broadcast: %s", tx_hash)
        return tx_hash

    async def _personal_sign(self, method: str, params: List[Any]) -> str:
        if not params:
            raise InvalidParamsError(f"{method} requires a message param")
        # personal_sign sends [message, address]; eth_sign sends [address, message].
        message = params[0]
        if (
            len(params) > 1
            and isinstance(params[0], str)
            and params[0].lower() == self.signer.address.lower()
        ):
            message = params[1]

        logger.info("%s: message=%s", method, _preview(message, 40))
        signature = self.signer.sign_message(message_to_bytes(message))
        logger.debug("%s: signature=%s", method, _preview(signature))
        return signature

    async def _sign_typed_data(self, method: str, params: List[Any]) -> str:
        # [address, typedData]; tolerate the payload alone.
        document = params[1] if len(params) > 1 else (params[0] if params else None)
        if document is None:
            raise InvalidParamsError(f"{method} requires a typed data param")
        length = len(document) if isinstance(document, str) else 0
        logger.info("%s: data length=%d", method, length)
        signature = self.signer.sign_typed_data(document)
        logger.debug("%s: signature=%s", method, _preview(signature))
        return signature
