"""OAuth 2.0 client adapter: the provider-neutral half of the flow.

The strategy depends only on the OAuth2Adapter protocol:
1. Build the authorization URL the user agent is redirected to
2. Exchange an authorization code for tokens
3. Perform a GET authenticated with an access token

OAuth2Client is the default implementation, built on httpx. Anything that
satisfies the protocol can be injected into the strategy instead.
"""

import logging
from typing import Any, Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit

import httpx

from ..errors import InternalOAuthError
from .tokens import ClientCredentials, TokenResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class OAuth2Adapter(Protocol):
    """Capability the strategy needs from a generic OAuth 2.0 client."""

    def authorize_url(self, params: dict[str, str]) -> str:
        """Build the authorization endpoint URL carrying params."""
        ...

    async def exchange_code(self, code: str, params: dict[str, str]) -> TokenResult:
        """Exchange an authorization code for tokens."""
        ...

    async def get(self, url: str, access_token: str) -> str:
        """GET url with the access token and return the response body."""
        ...


def _error_detail(response: httpx.Response) -> str:
    """Extract the safe error fields from an error response."""
    try:
        error_data = response.json()
        # Only extract safe error fields, not arbitrary response data
        return f": {error_data.get('error', '')} - {error_data.get('error_description', '')}"
    except Exception:
        # Don't include raw response body - it might contain tokens or secrets
        return ""


def _parse_token_body(response: httpx.Response) -> dict[str, Any]:
    """Parse a token endpoint body as JSON, falling back to form encoding."""
    try:
        data = response.json()
    except ValueError:
        return dict(parse_qsl(response.text))
    if not isinstance(data, dict):
        raise InternalOAuthError("Token endpoint returned an unexpected body")
    return data


class OAuth2Client:
    """Default OAuth 2.0 client adapter.

    Usage:
        client = OAuth2Client(credentials, authorization_url, token_url)
        location = client.authorize_url({"response_type": "code"})
        token = await client.exchange_code(code, {"grant_type": "authorization_code"})
        body = await client.get(profile_url, token.access_token)
    """

    def __init__(
        self,
        credentials: ClientCredentials,
        authorization_url: str,
        token_url: str,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the adapter.

        Args:
            credentials: Client id and secret
            authorization_url: Authorization endpoint
            token_url: Token endpoint
            http_client: Optional shared HTTP client; a short-lived client is
                created per request when omitted
        """
        self.credentials = credentials
        self.authorization_url = authorization_url
        self.token_url = token_url
        self.http_client = http_client

    def authorize_url(self, params: dict[str, str]) -> str:
        """Build the authorization URL.

        The client_id is always included. Parameters already present in the
        configured endpoint URL are kept.
        """
        query = {"client_id": self.credentials.client_id, **params}
        separator = "&" if urlsplit(self.authorization_url).query else "?"
        return f"{self.authorization_url}{separator}{urlencode(query)}"

    async def exchange_code(self, code: str, params: dict[str, str]) -> TokenResult:
        """Exchange an authorization code for tokens.

        Args:
            code: Authorization code from the callback
            params: Token request parameters (grant_type, callback_uri, ...)

        Returns:
            TokenResult parsed from the token endpoint response

        Raises:
            InternalOAuthError: On network errors, non-2xx responses, or a
                response without an access token
        """
        http = self.http_client or httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)
        should_close = self.http_client is None

        token_request: dict[str, str] = {
            **params,
            "client_id": self.credentials.client_id,
            "code": code,
        }

        # Add client_secret for confidential clients
        if self.credentials.is_confidential():
            token_request["client_secret"] = self.credentials.client_secret  # type: ignore

        try:
            response = await http.post(
                self.token_url,
                data=token_request,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )

            if not 200 <= response.status_code < 300:
                raise InternalOAuthError(
                    f"Token exchange failed (HTTP {response.status_code}){_error_detail(response)}",
                    status_code=response.status_code,
                )

            data = _parse_token_body(response)
            if "access_token" not in data:
                raise InternalOAuthError("Token response missing access_token")

            return TokenResult.from_token_response(data)

        except httpx.RequestError as e:
            raise InternalOAuthError(f"Network error during token exchange: {e}", cause=e) from e
        finally:
            if should_close:
                await http.aclose()

    async def get(self, url: str, access_token: str) -> str:
        """GET a protected resource, sending the token as a Bearer header.

        Raises:
            InternalOAuthError: On network errors or non-2xx responses
        """
        http = self.http_client or httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)
        should_close = self.http_client is None

        try:
            response = await http.get(
                url,
                headers={"Authorization": f"Bearer {access_token}"},
            )

            if not 200 <= response.status_code < 300:
                raise InternalOAuthError(
                    f"GET {url} failed (HTTP {response.status_code})",
                    status_code=response.status_code,
                )

            body: str = response.text
            logger.debug(f"GET {url} returned {len(body)} bytes")
            return body

        except httpx.RequestError as e:
            raise InternalOAuthError(f"Network error during GET {url}: {e}", cause=e) from e
        finally:
            if should_close:
                await http.aclose()
