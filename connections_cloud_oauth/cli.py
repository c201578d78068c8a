"""CLI entry point for Connections Cloud OAuth."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from . import __version__
from .config import ProviderEndpoints, load_strategy_config
from .errors import ConfigurationError, describe_error_code, status_for_error_code
from .oauth.client import OAuth2Client
from .oauth.request import is_absolute_url
from .oauth.state import generate_state
from .oauth.tokens import ClientCredentials
from .output import OutputHandler

# Logger for CLI
logger = logging.getLogger("ccauth")

CONFIG_HELP = (
    "Set CONNECTIONS_CLOUD_HOSTNAME and CONNECTIONS_CLOUD_CLIENT_ID in the "
    "environment or a .env file, or pass --hostname and --client-id."
)


@click.group()
@click.option("--json", "json_mode", is_flag=True, help="Output in JSON format")
@click.option("--env-file", "env_path", type=click.Path(exists=True), help="Path to .env file")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context, json_mode: bool, env_path: str | None, verbose: bool) -> None:
    """Connections Cloud OAuth - inspect and exercise the OAuth 2.0 login flow."""
    ctx.ensure_object(dict)
    ctx.obj["json_mode"] = json_mode
    ctx.obj["env_path"] = Path(env_path) if env_path else None
    ctx.obj["output"] = OutputHandler(json_mode)

    # Configure logging based on verbosity
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.argument("hostname")
@click.pass_context
def endpoints(ctx: click.Context, hostname: str) -> None:
    """Show the OAuth endpoints derived from HOSTNAME."""
    output: OutputHandler = ctx.obj["output"]
    derived = ProviderEndpoints.for_hostname(hostname)

    output.fields({
        "authorization_url": derived.authorization_url,
        "token_url": derived.token_url,
        "profile_url": derived.profile_url,
    })


@main.command("authorize-url")
@click.option("--hostname", help="Connections Cloud hostname")
@click.option("--client-id", help="OAuth client id")
@click.option("--callback-url", help="Absolute callback URL registered for the app")
@click.option("--state", help="State value to send (random if omitted)")
@click.pass_context
def authorize_url(
    ctx: click.Context,
    hostname: str | None,
    client_id: str | None,
    callback_url: str | None,
    state: str | None,
) -> None:
    """Build the URL that starts an authorization request."""
    output: OutputHandler = ctx.obj["output"]

    try:
        config = load_strategy_config(
            ctx.obj["env_path"],
            hostname=hostname,
            client_id=client_id,
            callback_url=callback_url,
        )
    except ConfigurationError as e:
        output.error(e, help_text=CONFIG_HELP)
        return

    if config.callback_url and not is_absolute_url(config.callback_url):
        output.error(
            ConfigurationError(f"Callback URL {config.callback_url!r} is relative"),
            help_text="Outside of a request the callback URL must be absolute.",
        )
        return

    client = OAuth2Client(
        ClientCredentials(config.client_id),
        config.endpoints.authorization_url,
        config.endpoints.token_url,
    )

    params = {"response_type": "code"}
    if config.callback_url:
        params["callback_uri"] = config.callback_url
    params["state"] = state or generate_state()

    url = client.authorize_url(params)
    logger.debug(f"Built authorization URL for {config.hostname}")

    if ctx.obj["json_mode"]:
        output.success({"url": url, "state": params["state"]})
    else:
        output.success({}, human_message=url)


@main.command("explain-error")
@click.argument("code")
@click.pass_context
def explain_error(ctx: click.Context, code: str) -> None:
    """Show the HTTP status and description for a provider error CODE."""
    output: OutputHandler = ctx.obj["output"]

    output.fields({
        "code": code,
        "status": status_for_error_code(code),
        "description": describe_error_code(code) or "Unknown error code",
    })


if __name__ == "__main__":
    main()
