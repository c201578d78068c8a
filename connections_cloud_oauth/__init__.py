"""Connections Cloud OAuth - OAuth 2.0 login with IBM Connections Cloud."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("connections-cloud-oauth")
except PackageNotFoundError:
    __version__ = "0.1.0"  # Fallback for development

__all__ = [
    "__version__",
    # Configuration
    "StrategyConfig",
    "ProviderEndpoints",
    "load_strategy_config",
    # Strategy
    "ConnectionsCloudStrategy",
    "AuthManager",
    "AuthRequest",
    # Errors
    "ConfigurationError",
    "AuthorizationError",
]


# Lazy imports to avoid circular dependencies
def __getattr__(name: str) -> object:
    """Lazy import module components."""
    if name in ("StrategyConfig", "ProviderEndpoints", "load_strategy_config"):
        from .config import ProviderEndpoints, StrategyConfig, load_strategy_config
        return {
            "StrategyConfig": StrategyConfig,
            "ProviderEndpoints": ProviderEndpoints,
            "load_strategy_config": load_strategy_config,
        }[name]
    elif name in ("ConnectionsCloudStrategy", "AuthManager", "AuthRequest"):
        from .oauth import AuthManager, AuthRequest, ConnectionsCloudStrategy
        return {
            "ConnectionsCloudStrategy": ConnectionsCloudStrategy,
            "AuthManager": AuthManager,
            "AuthRequest": AuthRequest,
        }[name]
    elif name in ("ConfigurationError", "AuthorizationError"):
        from .errors import AuthorizationError, ConfigurationError
        return {"ConfigurationError": ConfigurationError, "AuthorizationError": AuthorizationError}[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
