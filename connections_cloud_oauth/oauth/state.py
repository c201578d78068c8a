"""CSRF state handling across the authorization redirect round-trip.

When a flow begins, a random state value is stored in the caller's session
under the strategy's session key and sent to the provider. When the
provider redirects back, the stored value is taken (read and deleted in one
step) and compared with the state query parameter.

The session is any MutableMapping attached to the request. take() does its
read and delete without yielding to the event loop, so two completions
racing on the same session cannot both observe the pending state.
"""

import hmac
import logging
import secrets
from collections.abc import MutableMapping
from typing import Any

logger = logging.getLogger(__name__)

STATE_FIELD = "state"
DEFAULT_STATE_BYTES = 24


def generate_state(nbytes: int = DEFAULT_STATE_BYTES) -> str:
    """Generate a cryptographically random state parameter.

    Returns:
        URL-safe random string
    """
    return secrets.token_urlsafe(nbytes)


def states_match(expected: str, received: str | None) -> bool:
    """Compare two state values in constant time."""
    if received is None:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8"))


class SessionStateStore:
    """Keyed store for the pending authorization state of a session.

    At most one pending state exists per session key; storing a new one
    invalidates any redirect still in flight.
    """

    def __init__(self, session_key: str):
        self.session_key = session_key

    def store(self, session: MutableMapping[str, Any], state: str) -> None:
        """Record state as the pending state for this session."""
        slot = session.get(self.session_key)
        if not isinstance(slot, dict):
            slot = {}
        slot[STATE_FIELD] = state
        # Reassign so session backends that track writes see the change
        session[self.session_key] = slot
        logger.debug(f"Stored pending authorization state under {self.session_key!r}")

    def take(self, session: MutableMapping[str, Any]) -> str | None:
        """Remove and return the pending state, or None if there is none.

        The slot is removed from the session once it holds nothing else. A
        pending value that is not a string is consumed and treated as absent.
        """
        slot = session.get(self.session_key)
        if not isinstance(slot, dict):
            if self.session_key in session:
                del session[self.session_key]
            return None

        state = slot.pop(STATE_FIELD, None)
        if slot:
            session[self.session_key] = slot
        else:
            del session[self.session_key]

        if not isinstance(state, str):
            if state is not None:
                logger.warning(f"Discarding non-string pending state under {self.session_key!r}")
            return None
        return state
