"""
Engine confirmation hooks and session wrapper.

The bridging engine pauses twice during a transfer: once to ask which token
allowances it may set, once to confirm the transfer intent. There is no user
in a headless run, so both questions are answered by a fixed policy:
unlimited allowance for every source, intent always accepted.

``EngineSession`` guarantees both hooks are registered before the engine can
be asked to move funds.
"""

import logging
from typing import List, Optional

from ..schemas.bridge import (
    AllowanceHookRequest,
    BridgeBalance,
    BridgeParams,
    BridgeResult,
    BridgeSimulation,
    IntentHookRequest,
)
from .bases import AllowanceHook, BridgeEngine, BridgeEventCallback, IntentHook
from .exceptions import EngineNotReadyError

logger = logging.getLogger(__name__)


def approve_max_allowance(request: AllowanceHookRequest) -> None:
    """Allow ``"max"`` for every source the engine lists."""
    for source in request.sources:
        logger.info(
            "Allowance requested: %s on %s (%d), current=%s, needed=%s",
            source.token_symbol,
            source.chain_name,
            source.chain_id,
            source.allowance.current,
            source.allowance.minimum,
        )
    request.allow(["max" for _ in request.sources])


def approve_intent(request: IntentHookRequest) -> None:
    """Accept the transfer intent unconditionally."""
    logger.info("Intent confirmation requested, approving")
    request.allow()


class EngineSession:
    """
    A bridging engine bound to one provider with both hooks registered.

    Usage:
        session = EngineSession(engine, approve_max_allowance, approve_intent)
        await session.initialize(provider)
        result = await session.bridge(params, on_event=log_event)
    """

    def __init__(
        self,
        engine: BridgeEngine,
        allowance_hook: AllowanceHook = approve_max_allowance,
        intent_hook: IntentHook = approve_intent,
    ) -> None:
        self.engine = engine
        self.allowance_hook = allowance_hook
        self.intent_hook = intent_hook
        self._ready = False

    @property
    def is_ready(self) -> bool:
        return self._ready

    async def initialize(self, provider) -> None:
        """Initialise the engine, then register both hooks before returning."""
        await self.engine.initialize(provider)
        self.engine.set_on_allowance_hook(self.allowance_hook)
        self.engine.set_on_intent_hook(self.intent_hook)
        self._ready = True
        logger.info("Bridging engine initialised, confirmation hooks registered")

    def _ensure_ready(self) -> None:
        if not self._ready:
            raise EngineNotReadyError(
                "Engine session not initialized. Call initialize() before bridging."
            )

    async def get_balances(self) -> List[BridgeBalance]:
        self._ensure_ready()
        return await self.engine.get_balances()

    async def simulate(self, params: BridgeParams) -> BridgeSimulation:
        self._ensure_ready()
        return await self.engine.simulate(params)

    async def bridge(
        self,
        params: BridgeParams,
        on_event: Optional[BridgeEventCallback] = None,
    ) -> BridgeResult:
        self._ensure_ready()
        return await self.engine.bridge(params, on_event)
