"""OAuth 2.0 authorization code flow for IBM Connections Cloud.

Main Components:
    ConnectionsCloudStrategy: Authentication state machine
    AuthManager: Registry dispatching requests to strategies by name
    OAuth2Client: Default httpx-based OAuth client adapter
    Verifier: Verify callback dispatch

Quick Start:
    from connections_cloud_oauth import StrategyConfig
    from connections_cloud_oauth.oauth import AuthRequest, ConnectionsCloudStrategy, Redirect

    strategy = ConnectionsCloudStrategy(StrategyConfig(...), verify)

    outcome = await strategy.authenticate(
        AuthRequest(url=path_with_query, headers=headers, session=session)
    )
    if isinstance(outcome, Redirect):
        return redirect_response(outcome.url)
"""

from .client import OAuth2Adapter, OAuth2Client
from .manager import AuthManager, AuthStrategy, get_auth_manager
from .outcome import Error, Fail, Outcome, Redirect, Success
from .profile import PROVIDER_NAME, Profile, parse_profile
from .request import AuthRequest, original_url, resolve_callback_url
from .state import SessionStateStore, generate_state
from .strategy import ConnectionsCloudStrategy
from .tokens import ClientCredentials, TokenResult
from .verify import Verifier, VerifySignature

__all__ = [
    # Strategy (main entry point)
    "ConnectionsCloudStrategy",
    # Manager
    "AuthManager",
    "AuthStrategy",
    "get_auth_manager",
    # Outcomes
    "Outcome",
    "Success",
    "Fail",
    "Redirect",
    "Error",
    # Request
    "AuthRequest",
    "original_url",
    "resolve_callback_url",
    # Client adapter
    "OAuth2Adapter",
    "OAuth2Client",
    # Tokens
    "TokenResult",
    "ClientCredentials",
    # Profile
    "Profile",
    "parse_profile",
    "PROVIDER_NAME",
    # State
    "SessionStateStore",
    "generate_state",
    # Verify
    "Verifier",
    "VerifySignature",
]
