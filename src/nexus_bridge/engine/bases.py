"""
Abstract Base Class for the Bridging Engine

The engine that discovers routes, sources liquidity and settles cross-chain
transfers is an external component. It talks to the chain exclusively
through a wallet-provider object handed to :meth:`BridgeEngine.initialize`
and asks for two confirmations (token allowances, transfer intent) through
hooks the host registers.

Any concrete engine (an SDK binding, a remote service client, a test fake)
must implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, List, Optional, Union

from ..schemas.bridge import (
    AllowanceHookRequest,
    BridgeBalance,
    BridgeEvent,
    BridgeParams,
    BridgeResult,
    BridgeSimulation,
    IntentHookRequest,
)

BridgeEventCallback = Callable[[BridgeEvent], Union[None, Awaitable[None]]]
AllowanceHook = Callable[[AllowanceHookRequest], Any]
IntentHook = Callable[[IntentHookRequest], Any]


class BridgeEngine(ABC):
    """
    Interface of an external bridging engine.

    Lifecycle:
        1. ``initialize(provider)``: bind to a wallet provider
        2. ``set_on_allowance_hook`` / ``set_on_intent_hook``: register
           confirmation handlers; must happen before any transfer
        3. ``bridge(params, on_event)``: run one transfer

    Example Implementation:
        class SDKBridgeEngine(BridgeEngine):
            async def initialize(self, provider):
                self._sdk = NexusSDK(network="testnet")
                await self._sdk.initialize(provider)
            ...
    """

    @abstractmethod
    async def initialize(self, provider: Any) -> None:
        """
        Bind the engine to a wallet provider.

        The engine may immediately issue provider requests (account lookup,
        a chain switch to the auth anchor chain, a login signature).

        Args:
            provider: Object exposing ``dispatch(method, params)`` /
                ``request({"method", "params"})`` and ``subscribe``.
        """
        pass

    @abstractmethod
    async def get_balances(self) -> List[BridgeBalance]:
        """Return the unified per-chain balances the engine can bridge from."""
        pass

    @abstractmethod
    async def simulate(self, params: BridgeParams) -> BridgeSimulation:
        """Estimate fees and route for ``params`` without moving funds."""
        pass

    @abstractmethod
    async def bridge(
        self,
        params: BridgeParams,
        on_event: Optional[BridgeEventCallback] = None,
    ) -> BridgeResult:
        """
        Run one transfer.

        Args:
            params: Token, raw amount, destination and allowed source chains.
            on_event: Optional progress callback receiving ``BridgeEvent``s.

        Returns:
            BridgeResult: ``success`` plus hash / explorer link, or ``error``.

        Implementation Notes:
            - Must invoke the registered allowance hook before spending any
              source-chain tokens and the intent hook before submitting.
            - Failures of the transfer itself should be reported through
              ``BridgeResult.error``; raising is reserved for engine faults.
        """
        pass

    @abstractmethod
    def set_on_allowance_hook(self, hook: AllowanceHook) -> None:
        pass

    @abstractmethod
    def set_on_intent_hook(self, hook: IntentHook) -> None:
        pass
