"""Engine hook policies, engine session and event emitter tests."""

import pytest

from nexus_bridge.engine.events import EventEmitter
from nexus_bridge.engine.exceptions import EngineNotReadyError
from nexus_bridge.engine.hooks import EngineSession, approve_intent, approve_max_allowance
from nexus_bridge.schemas.bridge import AllowanceHookRequest, BridgeParams, IntentHookRequest

from mocks import FakeBridgeEngine, create_allowance_source


class TestHookPolicies:

    def test_allowance_hook_allows_max_for_every_source(self):
        decisions = []
        request = AllowanceHookRequest(
            sources=[create_allowance_source(10, "Optimism"), create_allowance_source(42161, "Arbitrum")],
            allow=decisions.extend,
            deny=lambda: pytest.fail("deny must not be called"),
        )
        approve_max_allowance(request)
        assert decisions == ["max", "max"]

    def test_allowance_hook_with_no_sources(self):
        decisions = []
        approve_max_allowance(AllowanceHookRequest(sources=[], allow=decisions.append, deny=lambda: None))
        assert decisions == [[]]

    def test_intent_hook_allows(self):
        calls = []
        approve_intent(IntentHookRequest(allow=lambda: calls.append("allow"), deny=lambda: calls.append("deny")))
        assert calls == ["allow"]


class TestEngineSession:

    @pytest.mark.asyncio
    async def test_hooks_registered_during_initialize(self):
        engine = FakeBridgeEngine()
        session = EngineSession(engine)
        provider = object()

        await session.initialize(provider)

        assert session.is_ready
        assert engine.provider is provider
        assert engine.allowance_hook is approve_max_allowance
        assert engine.intent_hook is approve_intent

    @pytest.mark.asyncio
    async def test_bridge_before_initialize_is_rejected(self):
        engine = FakeBridgeEngine()
        session = EngineSession(engine)
        params = BridgeParams(token="USDC", amount=1, to_chain_id=8453)

        with pytest.raises(EngineNotReadyError):
            await session.bridge(params)
        with pytest.raises(EngineNotReadyError):
            await session.simulate(params)
        with pytest.raises(EngineNotReadyError):
            await session.get_balances()
        assert engine.bridge_calls == []

    @pytest.mark.asyncio
    async def test_delegates_after_initialize(self):
        session = EngineSession(FakeBridgeEngine())
        await session.initialize(object())
        params = BridgeParams(token="USDC", amount=1_000_000, to_chain_id=8453, source_chains=[10])

        simulation = await session.simulate(params)
        balances = await session.get_balances()
        events = []
        result = await session.bridge(params, on_event=events.append)

        assert simulation.route.source_chain == 10
        assert balances[0].symbol == "USDC"
        assert result.success is True
        assert [e.type.value for e in events] == ["STEPS_LIST", "BRIDGE_COMPLETE"]


class TestEventEmitter:

    @pytest.mark.asyncio
    async def test_each_handler_called_once_in_order(self):
        emitter = EventEmitter()
        calls = []
        emitter.subscribe("chainChanged", lambda cid: calls.append(("a", cid)))

        async def second(cid):
            calls.append(("b", cid))

        emitter.subscribe("chainChanged", second)
        await emitter.emit("chainChanged", "0x1")

        assert calls == [("a", "0x1"), ("b", "0x1")]
        assert emitter.listener_count("chainChanged") == 2

    def test_rejects_non_callable(self):
        with pytest.raises(TypeError):
            EventEmitter().subscribe("chainChanged", "not callable")

    def test_unsubscribe_unknown_handler_is_noop(self):
        emitter = EventEmitter()
        emitter.unsubscribe("chainChanged", print)
        assert emitter.listener_count("chainChanged") == 0

    @pytest.mark.asyncio
    async def test_emit_without_subscribers(self):
        await EventEmitter().emit("accountsChanged", [])
