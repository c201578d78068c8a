"""Shared fixtures and utilities for Connections Cloud OAuth tests."""

import json
import os
from collections.abc import Generator
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from urllib.parse import urlencode

import pytest

from connections_cloud_oauth.config import StrategyConfig
from connections_cloud_oauth.oauth.request import AuthRequest
from connections_cloud_oauth.oauth.tokens import TokenResult


HOSTNAME = "apps.na.collabserv.com"
PERSON_ID = "urn:lsid:lconn.ibm.com:profiles.person:abc-123"


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def profile_document() -> dict[str, Any]:
    """A profile document as returned by the OpenSocial endpoint."""
    return {
        "entry": {
            "id": PERSON_ID,
            "displayName": "Jane Doe",
            "emails": [{"value": "jane@example.com", "type": "work"}],
        }
    }


@pytest.fixture
def profile_body(profile_document: dict[str, Any]) -> str:
    """The profile document as a response body."""
    return json.dumps(profile_document)


@pytest.fixture
def token_result() -> TokenResult:
    """Tokens returned by a successful code exchange."""
    return TokenResult(
        access_token="test_access_token",
        refresh_token="test_refresh_token",
        params={"access_token": "test_access_token", "expires_in": "7200"},
    )


@pytest.fixture
def strategy_config() -> StrategyConfig:
    """Configuration with state handling enabled."""
    return StrategyConfig(
        hostname=HOSTNAME,
        client_id="test_client",
        client_secret="test_secret",
        callback_url="https://app.example.com/auth/callback",
    )


@pytest.fixture
def stateless_config() -> StrategyConfig:
    """Configuration with state handling disabled."""
    return StrategyConfig(
        hostname=HOSTNAME,
        client_id="test_client",
        client_secret="test_secret",
        callback_url="https://app.example.com/auth/callback",
        use_state=False,
    )


# ============================================================================
# Request Fixtures
# ============================================================================


@pytest.fixture
def session() -> dict[str, Any]:
    """An empty session mapping."""
    return {}


def make_request(
    query: dict[str, str] | None = None,
    session: dict[str, Any] | None = None,
    path: str = "/auth/callback",
    headers: dict[str, str] | None = None,
) -> AuthRequest:
    """Build an AuthRequest for path with query parameters."""
    url = f"{path}?{urlencode(query)}" if query else path
    return AuthRequest(
        url=url,
        headers=headers or {"Host": "app.example.com"},
        session=session,
    )


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_adapter(token_result: TokenResult, profile_body: str) -> MagicMock:
    """An OAuth adapter double with successful exchange and profile fetch."""
    adapter = MagicMock()
    adapter.authorize_url = MagicMock(
        side_effect=lambda params: f"https://{HOSTNAME}/manage/oauth2/authorize?{urlencode(params)}"
    )
    adapter.exchange_code = AsyncMock(return_value=token_result)
    adapter.get = AsyncMock(return_value=profile_body)
    return adapter


@pytest.fixture
def mock_http() -> AsyncMock:
    """An httpx.AsyncClient double."""
    http = AsyncMock()
    http.aclose = AsyncMock()
    return http


def make_response(
    status_code: int = 200,
    json_data: Any = None,
    text: str = "",
) -> MagicMock:
    """Build an httpx.Response double."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if json_data is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = json_data
    return response


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Temporarily clear CONNECTIONS_CLOUD_* environment variables."""
    old_env = os.environ.copy()
    for key in list(os.environ.keys()):
        if key.startswith("CONNECTIONS_CLOUD_"):
            del os.environ[key]
    yield
    # Restore
    os.environ.clear()
    os.environ.update(old_env)
