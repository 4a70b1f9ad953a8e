"""Configuration utilities."""

from .config_loader import (
    ConfigLoader,
    RoutingSettings,
    get_api_key,
    get_settings,
    is_api_key_configured,
    settings_from_profile,
)

__all__ = [
    "ConfigLoader",
    "RoutingSettings",
    "get_api_key",
    "get_settings",
    "is_api_key_configured",
    "settings_from_profile",
]
