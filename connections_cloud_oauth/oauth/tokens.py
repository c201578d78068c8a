"""OAuth token and client credential data structures.

TokenResult is produced by the token exchange and consumed immediately by
the profile fetch and the verify callback. Nothing here is persisted.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenResult:
    """Result of exchanging an authorization code for tokens.

    Attributes:
        access_token: The access token string
        refresh_token: Optional refresh token
        params: Every parameter the token endpoint returned except the
            refresh token (access_token, expires_in, issued_on, ...)
    """

    access_token: str
    refresh_token: str | None = None
    params: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_token_response(cls, response: dict[str, Any]) -> "TokenResult":
        """Create TokenResult from a token endpoint response.

        Args:
            response: Parsed body of the token endpoint response

        Returns:
            TokenResult instance

        Raises:
            KeyError: If the response has no access_token
        """
        params = dict(response)
        # The refresh token is handed to the verify callback separately
        refresh_token = params.pop("refresh_token", None)

        if "expires_in" in params:
            logger.debug(f"Access token expires in {params['expires_in']} seconds")

        return cls(
            access_token=params["access_token"],
            refresh_token=refresh_token,
            params=params,
        )


@dataclass(frozen=True)
class ClientCredentials:
    """OAuth client credentials registered with Connections Cloud.

    Connections Cloud apps are confidential clients, so a client_secret is
    normally present; it is sent in the token request body.
    """

    client_id: str
    client_secret: str | None = None

    def is_confidential(self) -> bool:
        """Check if this is a confidential client (has a secret)."""
        return self.client_secret is not None and len(self.client_secret) > 0

    def __repr__(self) -> str:
        secret = "***" if self.is_confidential() else None
        return f"ClientCredentials(client_id={self.client_id!r}, client_secret={secret!r})"
