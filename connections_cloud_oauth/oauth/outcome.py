"""Terminal outcomes of one authentication attempt.

The strategy never raises for request-level problems; it returns exactly
one of these and the surrounding pipeline acts on it.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Success:
    """The verify callback accepted the user."""

    user: Any
    info: Any = None


@dataclass(frozen=True)
class Fail:
    """Authentication failed for a recoverable reason (declined, bad state, no user)."""

    info: Any = None
    status: int | None = None


@dataclass(frozen=True)
class Redirect:
    """Send the user agent to the provider's authorization endpoint."""

    url: str
    status: int = 302


@dataclass(frozen=True)
class Error:
    """An exceptional condition the pipeline should log or present."""

    error: BaseException


Outcome = Union[Success, Fail, Redirect, Error]
