"""Error taxonomy for the Connections Cloud OAuth strategy.

Two kinds of failure are modelled here:
- Faults raised at construction time (ConfigurationError), which prevent
  a strategy from being created at all.
- Faults detected while handling a request, which the strategy never
  raises but returns to the pipeline inside an ``Error`` outcome.

User-declined consent and CSRF state mismatches are not exceptions; they
become ``Fail`` outcomes (see oauth/strategy.py).
"""

from typing import Any


# HTTP status derived from the provider's error code when none is given
ERROR_CODE_STATUS: dict[str, int] = {
    "oauth_denied": 403,
    "server_error": 502,
    "temporarily_unavailable": 503,
}

DEFAULT_ERROR_CODE = "server_error"
DEFAULT_ERROR_STATUS = 500

# Documented Connections Cloud error codes for the authorize and token endpoints
PROVIDER_ERROR_DESCRIPTIONS: dict[str, str] = {
    "oauth_denied": "The user declined to authorize the application.",
    "oauth_absent_parameters": "Required parameters were not included in the request.",
    "oauth_duplicated_parameters": "Duplicate parameters were passed with the request.",
    "oauth_unsupported_parameters": "Unsupported parameters were passed with the request.",
    "oauth_invalid_parameters": "Invalid parameters were passed with the request.",
    "oauth_invalid_responsetype": "The response_type parameter is not set to code.",
    "oauth_invalid_clientid": "The client_id is not valid or the credential was deleted.",
    "oauth_consumer_missing_subscription": "The user is not subscribed to this application.",
    "oauth_unsupported_grant_type": "The grant_type is not supported by Connections Cloud.",
    "oauth_missing_clientsecret": "The client_secret is missing or empty.",
    "oauth_missing_callbackurl": "The callback_uri is missing or empty.",
    "oauth_missing_authorizationcode": "The authorization code is missing from the request.",
    "oauth_invalid_authorizationcode": "The authorization code is not valid.",
    "oauth_authorization_code_expired": "The authorization code has expired.",
    "oauth_access_token_expired": "The access token has expired.",
    "oauth_request_failed": "The OAuth flow failed. Try again or contact the administrator.",
    "server_error": "The authorization server encountered an unexpected condition.",
    "temporarily_unavailable": "The authorization server is temporarily unavailable.",
}


def status_for_error_code(code: str | None) -> int:
    """Map a provider error code to the HTTP status reported for it.

    Unknown or missing codes always map to 500.
    """
    if code is None:
        return DEFAULT_ERROR_STATUS
    return ERROR_CODE_STATUS.get(code, DEFAULT_ERROR_STATUS)


def describe_error_code(code: str) -> str:
    """Get the provider's description of an error code, or an empty string."""
    return PROVIDER_ERROR_DESCRIPTIONS.get(code, "")


class ConnectionsCloudOAuthError(Exception):
    """Base class for all errors raised by this package."""

    pass


class ConfigurationError(ConnectionsCloudOAuthError):
    """Invalid strategy configuration, detected at construction time."""

    pass


class AuthorizationError(ConnectionsCloudOAuthError):
    """Error returned by the provider in response to an authorization request.

    Attributes:
        message: Human-readable description from the provider
        code: Provider error code (defaults to "server_error")
        uri: Optional URI with more information about the error
        status: HTTP status, derived from code when not supplied
    """

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        uri: str | None = None,
        status: int | None = None,
    ):
        super().__init__(message or "")
        self.message = message
        self.code = code or DEFAULT_ERROR_CODE
        self.uri = uri
        # Derived from the code as given, so a missing code maps to 500, not 502
        self.status = status or status_for_error_code(code)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        data: dict[str, Any] = {
            "message": self.message,
            "code": self.code,
            "status": self.status,
        }
        if self.uri:
            data["uri"] = self.uri
        return data


class SessionRequiredError(ConnectionsCloudOAuthError):
    """State handling is enabled but the request has no session attached."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "OAuth 2.0 authentication requires session support when using state. "
            "Attach a session mapping to the request or disable use_state."
        )


class InternalOAuthError(ConnectionsCloudOAuthError):
    """Failure talking to the provider's token or profile endpoint.

    Attributes:
        cause: The underlying exception, if any
        status_code: HTTP status returned by the provider, if any
    """

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.cause = cause
        self.status_code = status_code


class TokenExchangeError(InternalOAuthError):
    """Error exchanging an authorization code for tokens."""

    pass


class ProfileFetchError(InternalOAuthError):
    """Error fetching the user profile."""

    pass


class MissingHostError(ConnectionsCloudOAuthError):
    """The originating URL cannot be reconstructed because the request has no host.

    Raised while resolving a relative callback URL for a request that has
    neither an absolute target nor a Host header.
    """

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "Cannot resolve a relative callback URL: the request has no Host header. "
            "Pass the Host header in AuthRequest.headers or configure an absolute callback_url."
        )


class ProfileParseError(ConnectionsCloudOAuthError):
    """The profile payload is not valid JSON or lacks required fields."""

    pass


class VerificationError(ConnectionsCloudOAuthError):
    """The application's verify callback did not report a result."""

    pass
