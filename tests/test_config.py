"""Settings and logging configuration tests."""

import logging

import pytest
from pydantic import ValidationError

from nexus_bridge.config import BridgeSettings, NetworkMode, get_rpc_overrides_from_env
from nexus_bridge.engine.exceptions import ConfigurationError
from nexus_bridge.logging_config import setup_logging

from mocks import MOCK_PRIVATE_KEY

ENV_VARS = (
    "NETWORK_MODE", "PRIVATE_KEY", "RPC_BASE", "RPC_OPTIMISM", "RPC_ARBITRUM", "RPC_POLYGON",
    "APPROVAL_HEADROOM_MULTIPLIER", "APPROVAL_CONFIRMATIONS", "CONFIRMATION_TIMEOUT",
    "RPC_REQUEST_TIMEOUT", "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestBridgeSettings:

    def test_defaults(self, clean_env):
        settings = BridgeSettings.from_env()

        assert settings.network_mode == NetworkMode.TESTNET
        assert settings.is_testnet
        assert settings.private_key is None
        assert settings.approval_headroom_multiplier == 2
        assert settings.approval_confirmations == 2
        assert settings.rpc_overrides == {}

    def test_reads_environment(self, clean_env):
        clean_env.setenv("NETWORK_MODE", "Mainnet")
        clean_env.setenv("PRIVATE_KEY", MOCK_PRIVATE_KEY)
        clean_env.setenv("RPC_BASE", "https://base.example")
        clean_env.setenv("APPROVAL_CONFIRMATIONS", "5")
        settings = BridgeSettings.from_env()

        assert settings.network_mode == NetworkMode.MAINNET
        assert not settings.is_testnet
        assert settings.private_key == MOCK_PRIVATE_KEY
        assert settings.rpc_overrides == {8453: "https://base.example"}
        assert settings.approval_confirmations == 5

    def test_rejects_unprefixed_key(self, clean_env):
        clean_env.setenv("PRIVATE_KEY", MOCK_PRIVATE_KEY[2:])
        with pytest.raises(ConfigurationError):
            BridgeSettings.from_env()

    def test_rejects_unknown_network_mode(self, clean_env):
        clean_env.setenv("NETWORK_MODE", "devnet")
        with pytest.raises(ConfigurationError):
            BridgeSettings.from_env()

    def test_rejects_zero_confirmations(self):
        with pytest.raises(ValidationError):
            BridgeSettings(approval_confirmations=0)

    def test_blank_key_means_no_key(self):
        assert BridgeSettings(private_key="  ").private_key is None

    def test_key_hidden_from_repr(self):
        assert MOCK_PRIVATE_KEY not in repr(BridgeSettings(private_key=MOCK_PRIVATE_KEY))

    def test_rpc_overrides_only_for_set_variables(self, clean_env):
        clean_env.setenv("RPC_POLYGON", " https://polygon.example ")
        assert get_rpc_overrides_from_env() == {137: "https://polygon.example"}


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.usefixtures("restore_root_logger")
class TestSetupLogging:

    def test_routes_root_logger_to_single_handler(self):
        setup_logging("debug")
        root = logging.getLogger()

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        setup_logging("chatty")
        assert logging.getLogger().level == logging.INFO

    def test_level_read_from_environment(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "debug")
        setup_logging()
        assert logging.getLogger().level == logging.DEBUG

    def test_explicit_level_beats_environment(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "DEBUG")
        setup_logging(BridgeSettings(log_level="WARNING").log_level)
        assert logging.getLogger().level == logging.WARNING
