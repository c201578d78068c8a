"""Normalization of the Connections Cloud OpenSocial profile.

The profile endpoint returns a document shaped like:

    {"entry": {"id": "urn:lsid:lconn.ibm.com:profiles.person:<user id>",
               "displayName": "Jane Doe",
               "emails": [{"value": "jane@example.com", "type": "work"}]}}

parse_profile() maps it onto the provider-neutral Profile shape.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from ..errors import ProfileParseError

logger = logging.getLogger(__name__)

PROVIDER_NAME = "ibm-connections-cloud"

# Fixed prefix of the OpenSocial person id; the remainder is the user id
PERSON_ID_PREFIX = "urn:lsid:lconn.ibm.com:profiles.person:"


@dataclass
class Profile:
    """Normalized user profile.

    Attributes:
        provider: Always "ibm-connections-cloud"
        id: The user's OpenSocial id (with the urn prefix)
        user_id: The id with the urn prefix removed
        display_name: The user's full name
        emails: Email entries exactly as the provider sent them, or None
            when the provider sent none
        raw: The response body the profile was parsed from
        json: The parsed response body
    """

    provider: str
    id: str
    user_id: str
    display_name: str | None = None
    emails: list[Any] | None = None
    raw: str | None = None
    json: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary, omitting emails when absent."""
        data: dict[str, Any] = {
            "provider": self.provider,
            "id": self.id,
            "userId": self.user_id,
            "displayName": self.display_name,
        }
        if self.emails is not None:
            data["emails"] = self.emails
        return data


def user_id_from_person_id(person_id: str) -> str:
    """Strip the OpenSocial urn prefix from a person id.

    Raises:
        ProfileParseError: If the id does not carry the expected prefix
    """
    if not person_id.startswith(PERSON_ID_PREFIX):
        logger.warning(f"Profile id does not start with {PERSON_ID_PREFIX!r}: {person_id!r}")
        raise ProfileParseError(f"Unexpected profile id format: {person_id!r}")
    return person_id[len(PERSON_ID_PREFIX):]


def parse_profile(data: str | dict[str, Any], provider: str = PROVIDER_NAME) -> Profile:
    """Parse a Connections Cloud profile document.

    Args:
        data: JSON string or already-parsed document
        provider: Provider name to record on the profile

    Returns:
        Profile with raw set to the input string (if one was given)

    Raises:
        ProfileParseError: If the string is not valid JSON, or the document
            has no entry or no entry.id
    """
    raw: str | None = None
    if isinstance(data, str):
        raw = data
        try:
            data = json.loads(data)
        except ValueError as e:
            raise ProfileParseError("Failed to parse user profile") from e

    entry = data.get("entry") if isinstance(data, dict) else None
    if not isinstance(entry, dict):
        raise ProfileParseError("Profile document has no entry")

    person_id = entry.get("id")
    if not isinstance(person_id, str) or not person_id:
        raise ProfileParseError("Profile entry has no id")

    profile = Profile(
        provider=provider,
        id=person_id,
        user_id=user_id_from_person_id(person_id),
        display_name=entry.get("displayName"),
        raw=raw,
        json=data,
    )

    emails = entry.get("emails")
    if emails is not None:
        profile.emails = emails

    return profile
