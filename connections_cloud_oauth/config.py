"""Strategy configuration and endpoint resolution."""

import logging
import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

AUTHORIZATION_PATH = "/manage/oauth2/authorize"
TOKEN_PATH = "/manage/oauth2/token"
PROFILE_PATH = "/connections/opensocial/oauth/rest/people/@me/@self"

# Env file search paths in priority order
ENV_SEARCH_PATHS = [
    Path(".env"),
    Path.home() / ".config" / "connections-cloud-oauth" / ".env",
]

ENV_PREFIX = "CONNECTIONS_CLOUD_"

# Option names accepted by from_mapping, including the camelCase spellings
OPTION_ALIASES = {
    "clientId": "client_id",
    "clientID": "client_id",
    "clientSecret": "client_secret",
    "callbackURL": "callback_url",
    "useState": "use_state",
    "state": "use_state",
    "sessionKey": "session_key",
    "passReqToCallback": "pass_request_to_callback",
    "proxy": "trust_proxy",
}

TRUE_VALUES = {"1", "true", "yes", "on"}


def _resolve_env_vars(value: str) -> str:
    """Resolve ${VAR} patterns in a string from environment variables.

    Missing vars resolve to empty string.
    """
    if "${" not in value:
        return value

    result = value
    for match in re.finditer(r'\$\{([^}]+)\}', value):
        env_var = match.group(1)
        env_value = os.environ.get(env_var, "")
        result = result.replace(match.group(0), env_value)
    return result


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUE_VALUES
    return bool(value)


@dataclass(frozen=True)
class ProviderEndpoints:
    """Connections Cloud endpoint URLs for one hostname."""

    authorization_url: str
    token_url: str
    profile_url: str

    @classmethod
    def for_hostname(cls, hostname: str) -> "ProviderEndpoints":
        """Derive the endpoint URLs from a hostname such as apps.na.collabserv.com."""
        base = f"https://{hostname}"
        return cls(
            authorization_url=f"{base}{AUTHORIZATION_PATH}",
            token_url=f"{base}{TOKEN_PATH}",
            profile_url=f"{base}{PROFILE_PATH}",
        )


@dataclass(frozen=True)
class StrategyConfig:
    """Configuration for a Connections Cloud strategy.

    The provider does not support scopes, so there is no scope option.

    Raises:
        ConfigurationError: If hostname or client_id is missing
    """

    hostname: str
    client_id: str
    client_secret: str | None = None
    callback_url: str | None = None
    use_state: bool = True
    session_key: str | None = None
    pass_request_to_callback: bool = False
    trust_proxy: bool = False
    endpoints: ProviderEndpoints = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.hostname:
            raise ConfigurationError("IBM Connections Cloud OAuth requires a hostname")
        if not self.client_id:
            raise ConfigurationError("IBM Connections Cloud OAuth requires a client_id")

        # Frozen dataclass: derived fields are set once, here
        object.__setattr__(self, "endpoints", ProviderEndpoints.for_hostname(self.hostname))
        if not self.session_key:
            object.__setattr__(self, "session_key", f"oauth2:{self.hostname}")

    def __repr__(self) -> str:
        return (
            f"StrategyConfig(hostname={self.hostname!r}, client_id={self.client_id!r}, "
            f"callback_url={self.callback_url!r}, use_state={self.use_state!r})"
        )

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "StrategyConfig":
        """Build a config from a dict of options.

        Accepts snake_case names and their camelCase spellings. String values
        have ${VAR} references expanded. Unknown options are ignored.
        """
        known = {f.name for f in fields(cls) if f.init}
        options: dict[str, Any] = {}

        for key, value in data.items():
            name = OPTION_ALIASES.get(key, key)
            if name not in known:
                logger.warning(f"Ignoring unsupported strategy option {key!r}")
                continue
            if isinstance(value, str):
                value = _resolve_env_vars(value)
            options[name] = value

        for name in ("use_state", "pass_request_to_callback", "trust_proxy"):
            if name in options:
                options[name] = _parse_bool(options[name])

        return cls(
            hostname=options.pop("hostname", ""),
            client_id=options.pop("client_id", ""),
            **options,
        )


def find_env_file(explicit_path: Path | None = None) -> Path | None:
    """Find the .env file, checking the working directory then the user config dir."""
    if explicit_path:
        if explicit_path.exists():
            return explicit_path
        return None

    for path in ENV_SEARCH_PATHS:
        if path.exists():
            return path
    return None


def load_strategy_config(
    env_path: Path | None = None,
    **overrides: Any,
) -> StrategyConfig:
    """Load strategy configuration from the environment.

    Loads the .env file first (without overriding variables already set),
    then reads CONNECTIONS_CLOUD_HOSTNAME, CONNECTIONS_CLOUD_CLIENT_ID,
    CONNECTIONS_CLOUD_CLIENT_SECRET, CONNECTIONS_CLOUD_CALLBACK_URL,
    CONNECTIONS_CLOUD_USE_STATE, CONNECTIONS_CLOUD_SESSION_KEY and
    CONNECTIONS_CLOUD_TRUST_PROXY. Keyword overrides that are not None win.

    Args:
        env_path: Explicit path to a .env file (optional)
        **overrides: Option values taking precedence over the environment

    Returns:
        StrategyConfig

    Raises:
        ConfigurationError: If hostname or client_id ends up missing
    """
    env_file = find_env_file(env_path)
    if env_file:
        logger.debug(f"Loading environment from {env_file}")
        load_dotenv(env_file)

    data: dict[str, Any] = {}
    for name in (
        "hostname",
        "client_id",
        "client_secret",
        "callback_url",
        "use_state",
        "session_key",
        "trust_proxy",
    ):
        value = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value:
            data[name] = value

    data.update({key: value for key, value in overrides.items() if value is not None})
    return StrategyConfig.from_mapping(data)
