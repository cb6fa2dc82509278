"""Multi-chain balance lookup tests."""

import pytest

from nexus_bridge.services.balances import get_multi_chain_balances

from mocks import MOCK_ADDRESS, create_mock_clients

BASE_USDT = "0xfde4C96c8593536E31F229EA8f37b2ADa2699bb2"


class TestMultiChainBalances:

    @pytest.mark.asyncio
    async def test_reads_every_token_on_every_chain(self):
        clients = create_mock_clients(balance=1_500_000)
        balances = await get_multi_chain_balances(MOCK_ADDRESS, clients, testnet=False)

        assert [(b.chain_id, b.token) for b in balances] == [
            (10, "USDC"), (10, "USDT"),
            (137, "USDC"), (137, "USDT"),
            (8453, "USDC"), (8453, "USDT"),
            (42161, "USDC"), (42161, "USDT"),
        ]
        assert balances[0].balance == "1500000"
        assert balances[0].formatted == "1.5"
        assert balances[0].decimals == 6
        assert clients.balance_of.await_count == 8

    @pytest.mark.asyncio
    async def test_failed_read_reports_zero(self):
        clients = create_mock_clients(balance=7)

        async def balance_of(chain_id, token_address, owner):
            if token_address == BASE_USDT:
                raise ConnectionError("rpc down")
            return 7

        clients.balance_of.side_effect = balance_of
        balances = await get_multi_chain_balances(MOCK_ADDRESS, clients, testnet=False)

        failed = [b for b in balances if b.address == BASE_USDT]
        assert len(failed) == 1
        assert failed[0].balance == "0"
        assert failed[0].formatted == "0"
        assert len(balances) == 8

    @pytest.mark.asyncio
    async def test_testnet_has_usdc_only(self):
        clients = create_mock_clients(balance=0)
        balances = await get_multi_chain_balances(MOCK_ADDRESS, clients, testnet=True)

        assert [b.chain_id for b in balances] == [84532, 421614, 11155420]
        assert {b.token for b in balances} == {"USDC"}
