"""Registry of authentication strategies.

Web applications register strategies once at startup and dispatch each
login or callback route to a strategy by name.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Protocol

from ..errors import ConfigurationError
from .outcome import Outcome
from .request import AuthRequest

logger = logging.getLogger(__name__)


class AuthStrategy(Protocol):
    """Anything that can authenticate a request."""

    name: str

    async def authenticate(self, request: AuthRequest, **options: Any) -> Outcome:
        ...


@dataclass
class AuthManager:
    """Dispatches authentication requests to registered strategies.

    Usage:
        manager = AuthManager()
        manager.use(ConnectionsCloudStrategy(config, verify))

        outcome = await manager.authenticate("ibm-connections-cloud", request)
    """

    _strategies: dict[str, AuthStrategy] = field(default_factory=dict)

    def use(self, strategy: AuthStrategy, name: str | None = None) -> "AuthManager":
        """Register a strategy under its own name or an explicit one.

        A strategy already registered under the same name is replaced.
        """
        key = name or strategy.name
        if not key:
            raise ConfigurationError("Authentication strategies must have a name")
        if key in self._strategies:
            logger.debug(f"Replacing authentication strategy {key!r}")
        self._strategies[key] = strategy
        return self

    def unuse(self, name: str) -> None:
        """Remove a registered strategy, if present."""
        self._strategies.pop(name, None)

    def get_strategy(self, name: str) -> AuthStrategy:
        """Look up a registered strategy.

        Raises:
            ConfigurationError: If no strategy is registered under name
        """
        strategy = self._strategies.get(name)
        if strategy is None:
            available = ", ".join(sorted(self._strategies)) or "(none)"
            raise ConfigurationError(
                f"Unknown authentication strategy {name!r}. Available strategies: {available}"
            )
        return strategy

    def list_strategies(self) -> list[str]:
        """Return the names of all registered strategies."""
        return sorted(self._strategies)

    async def authenticate(self, name: str, request: AuthRequest, **options: Any) -> Outcome:
        """Authenticate a request with the named strategy.

        Raises:
            ConfigurationError: If no strategy is registered under name
        """
        strategy = self.get_strategy(name)
        outcome = await strategy.authenticate(request, **options)
        logger.debug(f"Strategy {name!r} returned {type(outcome).__name__}")
        return outcome


# Global singleton for convenient access (thread-safe)
_manager: AuthManager | None = None
_manager_lock = threading.Lock()


def get_auth_manager() -> AuthManager:
    """Get the global AuthManager instance (thread-safe).

    Returns:
        The singleton AuthManager instance
    """
    global _manager
    if _manager is None:
        with _manager_lock:
            # Double-check after acquiring lock
            if _manager is None:
                _manager = AuthManager()
    return _manager
