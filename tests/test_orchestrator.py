"""
Bridge orchestrator tests.

The bridging engine is the in-memory ``FakeBridgeEngine`` and chain clients
are mocks, so every flow runs without a network.
"""

import asyncio
import re
from unittest.mock import MagicMock

import pytest

from nexus_bridge.adapters.evm.constants import MAX_UINT256, get_token_address, get_vault_address
from nexus_bridge.adapters.evm.registry import ChainRegistry
from nexus_bridge.config import NetworkMode
from nexus_bridge.engine.exceptions import (
    EngineError,
    MissingSigningKeyError,
    TransactionExecutionError,
    UnsupportedChainError,
    UnsupportedTokenError,
)
from nexus_bridge.engine.ledger import OperationLedger
from nexus_bridge.engine.orchestrator import BridgeOrchestrator, new_operation_id
from nexus_bridge.schemas.bases import OperationStatus, TokenConfig
from nexus_bridge.schemas.bridge import BridgeResult

from mocks import MOCK_ADDRESS, FakeBridgeEngine, create_mock_clients, create_settings

OPTIMISM_USDC = "0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85"


# ========================================================================
# Test Fixtures
# ========================================================================

@pytest.fixture
def clients():
    return create_mock_clients(allowance=0)


@pytest.fixture
def clients_factory(clients):
    return MagicMock(return_value=clients)


@pytest.fixture
def engine():
    return FakeBridgeEngine()


@pytest.fixture
def orchestrator(clients_factory, engine):
    return BridgeOrchestrator(
        create_settings(),
        engine_factory=lambda settings: engine,
        clients_factory=clients_factory,
    )


# ========================================================================
# Test Classes
# ========================================================================

class TestOperationId:

    def test_format(self):
        assert re.fullmatch(r"bridge-\d{13}-[a-z0-9]{6}", new_operation_id())

    def test_unique(self):
        assert len({new_operation_id() for _ in range(100)}) == 100


class TestExecuteSuccess:

    @pytest.mark.asyncio
    async def test_completed_operation_scenario(self, orchestrator, engine):
        engine.result = BridgeResult(success=True, tx_hash="0xabc")
        operation = await orchestrator.execute(10, 8453, "USDC", "25")

        assert operation.status == OperationStatus.COMPLETED
        assert operation.tx_hash == "0xabc"
        assert operation.amount == "25000000"
        assert operation.token == "USDC"
        assert operation.error is None
        assert orchestrator.get_status(operation.id) == operation

    @pytest.mark.asyncio
    async def test_engine_receives_raw_amount_and_source_hint(self, orchestrator, engine):
        await orchestrator.execute(10, 8453, "usdc", "25")

        params = engine.bridge_calls[0]
        assert params.token == "USDC"
        assert params.amount == 25_000_000
        assert params.to_chain_id == 8453
        assert params.source_chains == [10]

    @pytest.mark.asyncio
    async def test_hooks_registered_and_auto_approve(self, orchestrator, engine):
        await orchestrator.execute(10, 8453, "USDC", "25")

        assert engine.allowance_decisions == ["max"]
        assert engine.intent_approved is True

    @pytest.mark.asyncio
    async def test_allowance_guard_runs_before_engine(self, orchestrator, clients):
        await orchestrator.execute(10, 8453, "USDC", "25")

        vault = get_vault_address(10, testnet=False)
        clients.get_allowance.assert_awaited_once_with(10, OPTIMISM_USDC, MOCK_ADDRESS, vault)
        clients.approve.assert_awaited_once_with(10, OPTIMISM_USDC, vault, MAX_UINT256)
        clients.wait_for_confirmations.assert_awaited_once()
        assert clients.wait_for_confirmations.await_args.kwargs["confirmations"] == 2

    @pytest.mark.asyncio
    async def test_concurrent_operations_keep_their_own_active_chain(self, orchestrator):
        seen = {}

        def switch_then_read(name, chain_hex):
            async def script(provider):
                await provider.dispatch("wallet_switchEthereumChain", [{"chainId": chain_hex}])
                await asyncio.sleep(0.01)
                seen[name] = await provider.dispatch("eth_chainId")
            return script

        first, second = await asyncio.gather(
            orchestrator.execute(10, 8453, "USDC", "1", engine=FakeBridgeEngine(on_initialize=switch_then_read("a", "0x1"))),
            orchestrator.execute(42161, 8453, "USDC", "1", engine=FakeBridgeEngine(on_initialize=switch_then_read("b", "0x89"))),
        )

        assert seen == {"a": "0x1", "b": "0x89"}
        assert first.status == OperationStatus.COMPLETED
        assert second.status == OperationStatus.COMPLETED
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_pending_record_visible_while_engine_runs(self, orchestrator, engine):
        seen = []

        async def inspect_ledger(provider):
            seen.extend(op.status for op in orchestrator.list_operations())

        engine.on_initialize = inspect_ledger
        await orchestrator.execute(10, 8453, "USDC", "25")

        assert seen == [OperationStatus.PENDING]

    @pytest.mark.asyncio
    async def test_provider_starts_on_source_chain_and_reaches_auth_anchor(self, orchestrator, engine):
        chain_ids = []

        async def login(provider):
            chain_ids.append(await provider.dispatch("eth_chainId"))
            await provider.dispatch("wallet_switchEthereumChain", [{"chainId": "0x1"}])
            chain_ids.append(await provider.dispatch("eth_chainId"))
            await provider.dispatch("personal_sign", ["0x6c6f67696e", MOCK_ADDRESS])

        engine.on_initialize = login
        operation = await orchestrator.execute(10, 8453, "USDC", "25")

        assert operation.status == OperationStatus.COMPLETED
        assert chain_ids == ["0xa", "0x1"]

    @pytest.mark.asyncio
    async def test_chains_added_by_engine_persist_in_shared_registry(self, orchestrator, engine):
        async def add_chain(provider):
            await provider.dispatch("wallet_addEthereumChain", [{"chainId": "0xa4b1", "chainName": "Arbitrum"}])
            await provider.dispatch("wallet_addEthereumChain", [{"chainId": "0x82750", "chainName": "Scroll"}])

        engine.on_initialize = add_chain
        await orchestrator.execute(10, 8453, "USDC", "25")

        assert 534352 in orchestrator.registry

    @pytest.mark.asyncio
    async def test_explicit_engine_overrides_factory(self, clients_factory):
        orchestrator = BridgeOrchestrator(create_settings(), clients_factory=clients_factory)
        engine = FakeBridgeEngine(result=BridgeResult(success=True, tx_hash="0xdef"))

        operation = await orchestrator.execute(10, 8453, "USDC", "1", engine=engine)
        assert operation.tx_hash == "0xdef"

    @pytest.mark.asyncio
    async def test_explorer_url_is_recorded(self, orchestrator, engine):
        engine.result = BridgeResult(success=True, tx_hash="0xabc", explorer_url="https://explorer.example/tx/0xabc")
        operation = await orchestrator.execute(10, 8453, "USDC", "25")
        assert operation.explorer_url == "https://explorer.example/tx/0xabc"

    @pytest.mark.asyncio
    async def test_skips_approval_with_existing_allowance(self, orchestrator, clients):
        clients.get_allowance.return_value = MAX_UINT256
        await orchestrator.execute(10, 8453, "USDC", "25")
        clients.approve.assert_not_awaited()


class TestExecuteValidation:

    @pytest.mark.asyncio
    async def test_unsupported_chain_fails_before_any_record(self, orchestrator, clients_factory, engine):
        with pytest.raises(UnsupportedChainError):
            await orchestrator.execute(42161, 999999, "USDC", "10")

        assert len(orchestrator.ledger) == 0
        clients_factory.assert_not_called()
        assert engine.bridge_calls == []

    @pytest.mark.asyncio
    async def test_unknown_token(self, orchestrator):
        with pytest.raises(UnsupportedTokenError):
            await orchestrator.execute(10, 8453, "DOGE", "10")
        assert orchestrator.list_operations() == []

    @pytest.mark.asyncio
    async def test_missing_signing_key(self, clients_factory, engine):
        orchestrator = BridgeOrchestrator(
            create_settings(private_key=None),
            engine_factory=lambda settings: engine,
            clients_factory=clients_factory,
        )
        with pytest.raises(MissingSigningKeyError):
            await orchestrator.execute(10, 8453, "USDC", "25")
        assert len(orchestrator.ledger) == 0


class TestExecuteFailures:

    @pytest.mark.asyncio
    async def test_engine_reported_failure(self, orchestrator, engine):
        engine.result = BridgeResult(success=False, error="Insufficient liquidity")
        operation = await orchestrator.execute(10, 8453, "USDC", "25")

        assert operation.status == OperationStatus.FAILED
        assert operation.error == "Insufficient liquidity"
        assert operation.tx_hash == ""

    @pytest.mark.asyncio
    async def test_engine_exception_becomes_failed_record(self, orchestrator, engine):
        engine.raise_on_bridge = RuntimeError("engine exploded")
        operation = await orchestrator.execute(10, 8453, "USDC", "25")

        assert operation.status == OperationStatus.FAILED
        assert operation.error == "engine exploded"
        assert operation.amount == "25000000"
        assert orchestrator.get_status(operation.id).status == OperationStatus.FAILED

    @pytest.mark.asyncio
    async def test_approval_failure_never_reaches_engine(self, orchestrator, clients, engine):
        clients.wait_for_confirmations.side_effect = TransactionExecutionError("Transaction reverted: 0xaa")
        operation = await orchestrator.execute(10, 8453, "USDC", "25")

        assert operation.status == OperationStatus.FAILED
        assert operation.error == "Transaction reverted: 0xaa"
        assert engine.bridge_calls == []

    @pytest.mark.asyncio
    async def test_no_engine_configured(self, clients_factory):
        orchestrator = BridgeOrchestrator(create_settings(), clients_factory=clients_factory)
        operation = await orchestrator.execute(10, 8453, "USDC", "25")

        assert operation.status == OperationStatus.FAILED
        assert operation.error == str(EngineError("No bridging engine configured"))

    @pytest.mark.asyncio
    async def test_denied_intent_fails_operation(self, orchestrator, engine):
        orchestrator.intent_hook = lambda request: request.deny()
        operation = await orchestrator.execute(10, 8453, "USDC", "25")

        assert operation.status == OperationStatus.FAILED
        assert operation.error == "User denied intent"


class TestQueries:

    def test_quote(self, orchestrator):
        quote = orchestrator.quote(10, 8453, "USDC", "25")
        assert quote.raw_amount == "25000000"

    def test_quote_validates(self, orchestrator):
        with pytest.raises(UnsupportedChainError):
            orchestrator.quote(10, 84532, "USDC", "25")

    def test_supported_chains_follow_network_mode(self):
        orchestrator = BridgeOrchestrator(create_settings(network_mode=NetworkMode.TESTNET))
        assert [c.chain_id for c in orchestrator.supported_chains()] == [84532, 11155420, 421614]

    def test_supported_tokens(self, orchestrator):
        assert [t.symbol for t in orchestrator.supported_tokens()] == ["USDC", "USDT"]
        assert [t.symbol for t in orchestrator.supported_tokens(84532)] == ["USDC"]

    def test_supported_tokens_on_chain_share_the_unfiltered_type(self, orchestrator):
        on_chain = orchestrator.supported_tokens(8453)

        assert all(isinstance(t, TokenConfig) for t in on_chain)
        assert [list(t.addresses) for t in on_chain] == [[8453], [8453]]
        assert on_chain[0].addresses[8453] == get_token_address("USDC", 8453)
        # Shared table is not narrowed by the copy
        assert len(orchestrator.supported_tokens()[0].addresses) > 1

    def test_default_registry_includes_auth_anchor(self, orchestrator):
        assert 1 in orchestrator.registry
        assert isinstance(orchestrator.ledger, OperationLedger)

    def test_shared_ledger_and_registry(self):
        ledger = OperationLedger()
        registry = ChainRegistry()
        orchestrator = BridgeOrchestrator(create_settings(), ledger=ledger, registry=registry)
        assert orchestrator.ledger is ledger
        assert orchestrator.registry is registry

    @pytest.mark.asyncio
    async def test_list_operations_most_recent_first(self, orchestrator):
        first = await orchestrator.execute(10, 8453, "USDC", "1")
        second = await orchestrator.execute(10, 8453, "USDC", "2")

        ids = [op.id for op in orchestrator.list_operations()]
        assert set(ids) == {first.id, second.id}
        assert ids[0] == second.id or first.updated_at == second.updated_at
