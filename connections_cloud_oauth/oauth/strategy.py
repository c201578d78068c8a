"""IBM Connections Cloud authentication strategy.

The strategy inspects an inbound request and decides which phase of the
authorization code flow it belongs to:

1. The provider redirected back with oauth_error: the user declined
   (Fail) or the provider failed (Error)
2. The provider redirected back with a code: validate the CSRF state,
   exchange the code for tokens, fetch and normalize the profile, then
   let the application's verify callback decide
3. Anything else: start the flow by redirecting to the provider

Every path ends in exactly one Outcome. Request-level problems are never
raised; they are returned as Fail or Error.
"""

import json
import logging
from typing import Any, Callable

import httpx

from ..config import StrategyConfig
from ..errors import (
    AuthorizationError,
    ConnectionsCloudOAuthError,
    MissingHostError,
    ProfileFetchError,
    ProfileParseError,
    SessionRequiredError,
    TokenExchangeError,
    describe_error_code,
)
from .client import OAuth2Adapter, OAuth2Client
from .outcome import Error, Fail, Outcome, Redirect
from .profile import PROVIDER_NAME, Profile, parse_profile
from .request import AuthRequest, resolve_callback_url
from .state import SessionStateStore, generate_state, states_match
from .tokens import ClientCredentials
from .verify import Verifier, VerifySignature

logger = logging.getLogger(__name__)

# Connections Cloud names the redirect URI parameter callback_uri
CALLBACK_URI_PARAM = "callback_uri"

DECLINED_ERROR_CODE = "oauth_denied"

STATE_MISSING_MESSAGE = "Unable to verify authorization request state."
STATE_MISMATCH_MESSAGE = "Invalid authorization request state."


class ConnectionsCloudStrategy:
    """Authenticate requests by delegating to IBM Connections Cloud via OAuth 2.0.

    Usage:
        config = StrategyConfig(
            hostname="apps.na.collabserv.com",
            client_id="my-app",
            client_secret="shhh",
            callback_url="/auth/connections/callback",
        )

        def verify(access_token, refresh_token, profile, done):
            done(None, users.find_or_create(profile.user_id))

        strategy = ConnectionsCloudStrategy(config, verify)
        outcome = await strategy.authenticate(auth_request)
    """

    name = PROVIDER_NAME

    def __init__(
        self,
        config: StrategyConfig,
        verify: Callable[..., Any],
        *,
        client: OAuth2Adapter | None = None,
        verify_signature: VerifySignature | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the strategy.

        Args:
            config: Validated strategy configuration
            verify: Application verify function (see verify.py)
            client: OAuth client adapter; an OAuth2Client for the configured
                endpoints is created when omitted
            verify_signature: Explicit verify calling convention; inferred
                from the verify function's arity when omitted
            http_client: Shared HTTP client for the default adapter

        Raises:
            ConfigurationError: If the verify callback is unusable
        """
        self.config = config
        self._verifier = Verifier(
            verify,
            pass_request=config.pass_request_to_callback,
            signature=verify_signature,
        )
        self._state_store = (
            SessionStateStore(config.session_key)  # type: ignore[arg-type]
            if config.use_state
            else None
        )
        self._client: OAuth2Adapter = client or OAuth2Client(
            ClientCredentials(config.client_id, config.client_secret),
            config.endpoints.authorization_url,
            config.endpoints.token_url,
            http_client=http_client,
        )

    async def authenticate(
        self,
        request: AuthRequest,
        *,
        callback_url: str | None = None,
        state: str | None = None,
        scope: str | list[str] | None = None,
        authorization_params: dict[str, str] | None = None,
        token_params: dict[str, str] | None = None,
    ) -> Outcome:
        """Authenticate a request.

        Args:
            request: The inbound request
            callback_url: Overrides the configured callback URL for this call
            state: Explicit state value for the authorization request
            scope: Passed through to the authorization request if given;
                Connections Cloud ignores it
            authorization_params: Extra authorization request parameters
            token_params: Extra token request parameters

        Returns:
            Success, Fail, Redirect or Error
        """
        # Provider errors take precedence over everything else
        error_code = request.get_param("oauth_error")
        if error_code:
            return self._provider_error(request, error_code)

        try:
            resolved_callback = resolve_callback_url(
                callback_url or self.config.callback_url,
                request,
                self.config.trust_proxy,
            )
        except MissingHostError as e:
            return self._error(e)

        code = request.get_param("code")
        if code:
            return await self._complete_flow(request, code, resolved_callback, token_params)

        return self._begin_flow(
            request, resolved_callback, state, scope, authorization_params
        )

    async def user_profile(self, access_token: str) -> Profile:
        """Fetch and normalize the signed-in user's profile.

        Raises:
            ProfileFetchError: If the profile request fails
            ProfileParseError: If the body is not a valid profile document
        """
        try:
            body = await self._client.get(self.config.endpoints.profile_url, access_token)
        except Exception as e:
            raise ProfileFetchError(
                "Failed to fetch user profile",
                cause=e,
                status_code=getattr(e, "status_code", None),
            ) from e

        try:
            data = json.loads(body)
        except ValueError as e:
            raise ProfileParseError("Failed to parse user profile") from e

        profile = parse_profile(data, provider=self.name)
        profile.raw = body
        return profile

    def _provider_error(self, request: AuthRequest, error_code: str) -> Outcome:
        """Translate an oauth_error callback into an outcome."""
        description = request.get_param("oauth_error_description")

        if error_code == DECLINED_ERROR_CODE:
            logger.info("User declined the authorization request")
            return Fail({"message": description})

        hint = describe_error_code(error_code)
        if hint:
            logger.debug(f"Provider error {error_code}: {hint}")

        return self._error(
            AuthorizationError(
                description,
                error_code,
                request.get_param("oauth_error_uri"),
            )
        )

    def _begin_flow(
        self,
        request: AuthRequest,
        callback_url: str | None,
        state: str | None,
        scope: str | list[str] | None,
        extra_params: dict[str, str] | None,
    ) -> Outcome:
        """Redirect the user agent to the authorization endpoint."""
        params: dict[str, str] = dict(extra_params or {})
        params["response_type"] = "code"
        if callback_url:
            params[CALLBACK_URI_PARAM] = callback_url

        if scope:
            params["scope"] = scope if isinstance(scope, str) else " ".join(scope)

        # A caller-supplied state is the caller's to validate; only generated ones are stored
        if not state and self._state_store is not None:
            if request.session is None:
                return self._error(SessionRequiredError())
            state = generate_state()
            self._state_store.store(request.session, state)

        if state:
            params["state"] = state

        try:
            location = self._client.authorize_url(params)
        except Exception as e:
            return self._error(e)

        logger.debug(f"Redirecting to authorization endpoint {self.config.endpoints.authorization_url}")
        return Redirect(location)

    def _check_state(self, request: AuthRequest) -> Outcome | None:
        """Consume the pending state and compare it with the callback's.

        Returns:
            None if the state is valid, otherwise the Fail or Error outcome
        """
        if self._state_store is None:
            return None

        if request.session is None:
            return self._error(SessionRequiredError())

        # Consumed whether or not it matches so it can never be replayed
        expected = self._state_store.take(request.session)

        if expected is None:
            logger.info("Authorization callback without a pending state")
            return Fail({"message": STATE_MISSING_MESSAGE}, 403)

        if not states_match(expected, request.get_param("state")):
            logger.warning("Authorization callback state does not match the pending state")
            return Fail({"message": STATE_MISMATCH_MESSAGE}, 403)

        return None

    async def _complete_flow(
        self,
        request: AuthRequest,
        code: str,
        callback_url: str | None,
        extra_params: dict[str, str] | None,
    ) -> Outcome:
        """Finish the flow: state check, token exchange, profile, verify."""
        rejected = self._check_state(request)
        if rejected is not None:
            return rejected

        params: dict[str, str] = dict(extra_params or {})
        params["grant_type"] = "authorization_code"
        if callback_url:
            params[CALLBACK_URI_PARAM] = callback_url

        try:
            token = await self._client.exchange_code(code, params)
        except Exception as e:
            error = TokenExchangeError(
                "Failed to obtain access token",
                cause=e,
                status_code=getattr(e, "status_code", None),
            )
            error.__cause__ = e
            return self._error(error)

        try:
            profile = await self.user_profile(token.access_token)
        except ConnectionsCloudOAuthError as e:
            return self._error(e)

        outcome = await self._verifier(request, token, profile)
        logger.debug(f"Verify callback for {profile.user_id} returned {type(outcome).__name__}")
        return outcome

    def _error(self, error: BaseException) -> Error:
        """Log and wrap an exceptional condition."""
        logger.warning(f"Authentication error: {type(error).__name__}: {error}")
        return Error(error)
