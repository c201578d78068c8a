"""Tests for the strategy registry."""

from typing import Any
from unittest.mock import MagicMock

import pytest

from conftest import make_request
from connections_cloud_oauth.config import StrategyConfig
from connections_cloud_oauth.errors import ConfigurationError
from connections_cloud_oauth.oauth.manager import AuthManager, get_auth_manager
from connections_cloud_oauth.oauth.outcome import Fail, Redirect
from connections_cloud_oauth.oauth.request import AuthRequest
from connections_cloud_oauth.oauth.strategy import ConnectionsCloudStrategy


class RecordingStrategy:
    """Minimal strategy that records the options it was called with."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.calls: list[dict[str, Any]] = []

    async def authenticate(self, request: AuthRequest, **options: Any) -> Fail:
        self.calls.append(options)
        return Fail({"message": self.name})


def verify(access_token, refresh_token, profile, done):  # type: ignore[no-untyped-def]
    done(None, profile.user_id)


class TestAuthManager:
    """Tests for AuthManager."""

    def test_use_registers_by_name(self) -> None:
        """Test that strategies are registered under their own name."""
        manager = AuthManager()
        strategy = RecordingStrategy("first")

        assert manager.use(strategy) is manager
        assert manager.get_strategy("first") is strategy

    def test_use_explicit_name(self) -> None:
        """Test registration under an explicit name."""
        manager = AuthManager().use(RecordingStrategy("first"), name="alias")

        assert manager.list_strategies() == ["alias"]

    def test_use_replaces_existing(self) -> None:
        """Test that re-registering a name replaces the strategy."""
        replacement = RecordingStrategy("first")
        manager = AuthManager().use(RecordingStrategy("first")).use(replacement)

        assert manager.get_strategy("first") is replacement

    def test_use_without_name(self) -> None:
        """Test that a nameless strategy is rejected."""
        with pytest.raises(ConfigurationError):
            AuthManager().use(RecordingStrategy(""))

    def test_unknown_strategy(self) -> None:
        """Test that unknown names list the available strategies."""
        manager = AuthManager().use(RecordingStrategy("b")).use(RecordingStrategy("a"))

        with pytest.raises(ConfigurationError, match="Available strategies: a, b"):
            manager.get_strategy("missing")

    def test_unuse(self) -> None:
        """Test removing a strategy."""
        manager = AuthManager().use(RecordingStrategy("first"))
        manager.unuse("first")
        manager.unuse("never-registered")

        assert manager.list_strategies() == []

    @pytest.mark.asyncio
    async def test_authenticate_dispatches_with_options(self) -> None:
        """Test that authenticate forwards the request options."""
        strategy = RecordingStrategy("first")
        manager = AuthManager().use(strategy).use(RecordingStrategy("second"))

        outcome = await manager.authenticate("first", make_request(), scope="profile")

        assert outcome == Fail({"message": "first"})
        assert strategy.calls == [{"scope": "profile"}]

    @pytest.mark.asyncio
    async def test_authenticate_unknown(self) -> None:
        """Test dispatching to an unregistered strategy."""
        with pytest.raises(ConfigurationError):
            await AuthManager().authenticate("missing", make_request())

    @pytest.mark.asyncio
    async def test_connections_cloud_strategy(
        self, strategy_config: StrategyConfig, mock_adapter: MagicMock
    ) -> None:
        """Test dispatching to the Connections Cloud strategy by its name."""
        manager = AuthManager().use(
            ConnectionsCloudStrategy(strategy_config, verify, client=mock_adapter)
        )

        outcome = await manager.authenticate(
            "ibm-connections-cloud", make_request(session={}, path="/auth/login")
        )

        assert isinstance(outcome, Redirect)


class TestGetAuthManager:
    """Tests for the global manager."""

    def test_singleton(self) -> None:
        """Test that the same manager is returned every time."""
        assert get_auth_manager() is get_auth_manager()
