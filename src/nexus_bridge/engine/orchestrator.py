"""
Bridge Orchestrator

Runs one cross-chain transfer end to end:

    1. Validate chains, token and amount (fails fast, nothing recorded)
    2. Generate the operation id
    3. Build a wallet provider scoped to this operation
    4. Pre-approve the source-chain vault (Allowance Guard)
    5. Hand the transfer to the bridging engine
    6. Record the outcome in the operation ledger

From step 2 on, every failure ends as a ``failed`` ledger record that is
returned to the caller instead of raised.
"""

import logging
import secrets
import string
import time
from typing import Any, Callable, Dict, List, Optional, Union

from ..adapters.evm.clients import ChainClients
from ..adapters.evm.constants import (
    SUPPORTED_TOKENS,
    get_auth_anchor_chain,
    get_supported_chains,
    get_vault_address,
)
from ..adapters.evm.provider import WalletProvider
from ..adapters.evm.registry import ChainRegistry
from ..adapters.evm.signatures import SigningContext
from ..config import BridgeSettings
from ..schemas.bases import BridgeOperation, ChainDescriptor, OperationStatus, TokenConfig
from ..schemas.bridge import BridgeEvent, BridgeParams, BridgeQuote
from .allowance import AllowanceGuard
from .bases import AllowanceHook, BridgeEngine, IntentHook
from .exceptions import EngineError, MissingSigningKeyError
from .hooks import EngineSession, approve_intent, approve_max_allowance
from .ledger import OperationLedger
from .routes import BridgeRoute, build_quote, resolve_route

logger = logging.getLogger(__name__)

EngineFactory = Callable[[BridgeSettings], BridgeEngine]
ClientsFactory = Callable[[ChainRegistry, SigningContext], ChainClients]

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_operation_id() -> str:
    """``bridge-<unix ms>-<6 random base36 chars>``"""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(6))
    return f"bridge-{int(time.time() * 1000)}-{suffix}"


def log_bridge_event(event: BridgeEvent) -> None:
    """Engine progress callback; events are logged and otherwise ignored."""
    if event.steps:
        steps = ", ".join(f"{step.id}:{step.status.value}" for step in event.steps)
        logger.info("Bridge event %s [%s]", event.type.value, steps)
    else:
        logger.info("Bridge event %s", event.type.value)
    if event.error:
        logger.warning("Bridge event %s reported error: %s", event.type.value, event.error)


class BridgeOrchestrator:
    """
    Entry point the front-end uses to move tokens between chains.

    Attributes:
        settings: Validated runtime configuration
        ledger: Operation ledger shared by every ``execute`` call
        registry: Chain registry shared by every provider this orchestrator
            builds; chains the engine registers at runtime persist here

    Example:
        orchestrator = BridgeOrchestrator(BridgeSettings.from_env(), engine_factory=SDKBridgeEngine)
        operation = await orchestrator.execute(10, 8453, "USDC", "25")
        operation.status  # OperationStatus.COMPLETED
    """

    def __init__(
        self,
        settings: BridgeSettings,
        engine_factory: Optional[EngineFactory] = None,
        ledger: Optional[OperationLedger] = None,
        registry: Optional[ChainRegistry] = None,
        clients_factory: Optional[ClientsFactory] = None,
        allowance_hook: AllowanceHook = approve_max_allowance,
        intent_hook: IntentHook = approve_intent,
    ) -> None:
        self.settings = settings
        self.engine_factory = engine_factory
        self.ledger = ledger if ledger is not None else OperationLedger()
        self.registry = registry if registry is not None else ChainRegistry.for_network(settings.is_testnet)
        self.clients_factory = clients_factory or self._default_clients
        self.allowance_hook = allowance_hook
        self.intent_hook = intent_hook

    @property
    def network_mode(self) -> str:
        return self.settings.network_mode.value

    def _default_clients(self, registry: ChainRegistry, signer: SigningContext) -> ChainClients:
        return ChainClients(
            registry,
            signer=signer,
            rpc_overrides=self.settings.rpc_overrides,
            request_timeout=self.settings.rpc_request_timeout,
        )

    def _create_engine(self) -> BridgeEngine:
        if self.engine_factory is None:
            raise EngineError("No bridging engine configured")
        return self.engine_factory(self.settings)

    # =========================================================================
    # Transfers
    # =========================================================================

    async def execute(
        self,
        from_chain_id: int,
        to_chain_id: int,
        token: str,
        amount: Union[str, int, float],
        engine: Optional[BridgeEngine] = None,
    ) -> BridgeOperation:
        """
        Bridge ``amount`` of ``token`` from one chain to another.

        Args:
            from_chain_id: Source chain.
            to_chain_id: Destination chain.
            token: Token symbol (case-insensitive).
            amount: Human-readable amount, e.g. ``"25"`` for 25 USDC.
            engine: Engine for this call; defaults to a fresh one from
                ``engine_factory``.

        Returns:
            BridgeOperation: Final ledger record, ``completed`` or ``failed``.

        Raises:
            MissingSigningKeyError: No signing key is configured.
            ValidationError: Unsupported chain or token, token missing on a
                chain, or an invalid amount. Raised before anything is
                recorded or sent.
        """
        if not self.settings.private_key:
            raise MissingSigningKeyError()
        route = resolve_route(from_chain_id, to_chain_id, token, amount, self.settings.is_testnet)

        operation_id = new_operation_id()
        record = {
            "from_chain_id": from_chain_id,
            "to_chain_id": to_chain_id,
            "token": route.symbol,
            "amount": str(route.raw_amount),
        }
        logger.info(
            "Starting %s: %s %s from %s to %s",
            operation_id, route.amount, route.symbol,
            route.from_chain.display_name, route.to_chain.display_name,
        )

        try:
            result = await self._run(operation_id, route, record, engine)
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error("%s failed: %s", operation_id, message)
            return self.ledger.record(
                operation_id,
                **record,
                status=OperationStatus.FAILED,
                error=message,
            )

        status = OperationStatus.COMPLETED if result.success else OperationStatus.FAILED
        error = None if result.success else (result.error or "Bridge failed")
        operation = self.ledger.record(
            operation_id,
            **record,
            tx_hash=result.tx_hash or "",
            explorer_url=result.explorer_url,
            status=status,
            error=error,
        )
        logger.info("%s %s (tx=%s)", operation_id, status.value, operation.tx_hash or "-")
        return operation

    async def _run(
        self,
        operation_id: str,
        route: BridgeRoute,
        record: Dict[str, Any],
        engine: Optional[BridgeEngine],
    ):
        signer = SigningContext(self.settings.private_key)
        self.registry.register(get_auth_anchor_chain(self.settings.is_testnet))
        clients = self.clients_factory(self.registry, signer)
        provider = WalletProvider(signer, self.registry, clients, initial_chain_id=route.from_chain.chain_id)

        guard = AllowanceGuard(
            clients,
            headroom_multiplier=self.settings.approval_headroom_multiplier,
            confirmations=self.settings.approval_confirmations,
            confirmation_timeout=self.settings.confirmation_timeout,
        )
        await guard.ensure_allowance(
            route.from_chain.chain_id,
            route.source_token_address,
            signer.address,
            get_vault_address(route.from_chain.chain_id, self.settings.is_testnet),
            route.raw_amount,
        )

        self.ledger.record(operation_id, **record, status=OperationStatus.PENDING)

        session = EngineSession(
            engine if engine is not None else self._create_engine(),
            allowance_hook=self.allowance_hook,
            intent_hook=self.intent_hook,
        )
        await session.initialize(provider)
        params = BridgeParams(
            token=route.symbol,
            amount=route.raw_amount,
            to_chain_id=route.to_chain.chain_id,
            source_chains=[route.from_chain.chain_id],
        )
        return await session.bridge(params, on_event=log_bridge_event)

    def quote(
        self,
        from_chain_id: int,
        to_chain_id: int,
        token: str,
        amount: Union[str, int, float],
    ) -> BridgeQuote:
        """Validate a route and return an offline fee/time estimate."""
        route = resolve_route(from_chain_id, to_chain_id, token, amount, self.settings.is_testnet)
        return build_quote(route)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_status(self, operation_id: str) -> Optional[BridgeOperation]:
        return self.ledger.get(operation_id)

    def list_operations(self) -> List[BridgeOperation]:
        return self.ledger.list()

    def supported_chains(self) -> List[ChainDescriptor]:
        """Bridgeable chains of the active network mode."""
        return get_supported_chains(self.settings.is_testnet)

    def supported_tokens(self, chain_id: Optional[int] = None) -> List[TokenConfig]:
        """
        Supported tokens, optionally narrowed to those deployed on ``chain_id``.

        With ``chain_id`` each token's ``addresses`` holds only that chain.
        """
        if chain_id is None:
            return list(SUPPORTED_TOKENS.values())
        return [
            token.model_copy(update={"addresses": {chain_id: token.addresses[chain_id]}})
            for token in SUPPORTED_TOKENS.values()
            if token.addresses.get(chain_id)
        ]
