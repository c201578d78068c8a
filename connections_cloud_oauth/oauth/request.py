"""Framework-neutral view of an inbound HTTP request.

Web frameworks adapt their request objects into AuthRequest before calling
the strategy. Only the pieces the OAuth flow reads are modelled: the
request target, headers, transport security and the session mapping.
"""

from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs, urljoin, urlsplit

from ..errors import MissingHostError


def _first_header_value(value: str | None) -> str | None:
    """Take the first entry of a comma-separated forwarded header."""
    if not value:
        return None
    first = value.split(",")[0].strip()
    return first or None


@dataclass
class AuthRequest:
    """Inbound request as seen by the authentication strategy.

    Attributes:
        url: Request target as received, either a path with query string
            ("/auth/callback?code=...") or an absolute URL
        headers: Request headers (looked up case-insensitively)
        session: Session mapping, or None if no session is attached
        secure: Whether the request arrived over TLS
        query: Query parameters (first value of each); parsed from url
            when not supplied
    """

    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    session: MutableMapping[str, Any] | None = None
    secure: bool = False
    query: dict[str, str] | None = None

    def __post_init__(self) -> None:
        self.headers = {key.lower(): value for key, value in self.headers.items()}
        if self.query is None:
            params = parse_qs(urlsplit(self.url).query)
            # Get first value of each parameter
            self.query = {name: values[0] for name, values in params.items() if values}

    def get_header(self, name: str) -> str | None:
        """Get a header value by case-insensitive name."""
        return self.headers.get(name.lower())

    def get_param(self, name: str) -> str | None:
        """Get a query parameter, or None if absent."""
        return (self.query or {}).get(name)


def original_url(request: AuthRequest, trust_proxy: bool = False) -> str:
    """Reconstruct the absolute URL the user agent requested.

    With trust_proxy set, X-Forwarded-Proto and X-Forwarded-Host override
    the transport scheme and Host header.

    Args:
        request: The inbound request
        trust_proxy: Whether forwarded headers from a proxy are trusted

    Returns:
        Absolute URL including path and query string

    Raises:
        MissingHostError: If neither the request target nor the headers name a host
    """
    target = urlsplit(request.url)

    scheme = target.scheme or ("https" if request.secure else "http")
    host = request.get_header("host") or target.netloc

    if trust_proxy:
        scheme = _first_header_value(request.get_header("x-forwarded-proto")) or scheme
        host = _first_header_value(request.get_header("x-forwarded-host")) or host

    if not host:
        raise MissingHostError()

    path = target.path or "/"
    if target.query:
        path = f"{path}?{target.query}"

    return f"{scheme}://{host}{path}"


def is_absolute_url(url: str) -> bool:
    """Check if a URL carries a scheme."""
    return bool(urlsplit(url).scheme)


def resolve_callback_url(
    callback_url: str | None,
    request: AuthRequest,
    trust_proxy: bool = False,
) -> str | None:
    """Resolve a possibly relative callback URL against the originating request.

    Returns:
        Absolute callback URL, or None when no callback URL is configured

    Raises:
        MissingHostError: If a relative URL must be resolved and the request has no host
    """
    if not callback_url:
        return None
    if is_absolute_url(callback_url):
        return callback_url
    return urljoin(original_url(request, trust_proxy), callback_url)
