"""
Configuration loader for routing profiles and environment variables.
"""

import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

PLACEHOLDER_API_KEYS = ("your_api_key_here", "your_google_maps_api_key_here")
DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"


class RoutingSettings(BaseModel):
    """Validated routing configuration."""

    travel_mode: Literal["driving", "walking", "bicycling", "transit"] = "driving"
    optimize_waypoints: bool = True
    max_waypoints: int = Field(default=25, ge=0)
    cache_ttl_seconds: float = Field(default=300.0, gt=0)
    cache_max_entries: int = Field(default=50, ge=1)
    directions_url: str = DIRECTIONS_URL
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    max_attempts: int = Field(default=4, ge=1)
    language: str = "en"


class ConfigLoader:
    """Load and manage configuration from YAML files and environment."""

    CONFIG_DIR = Path(__file__).parent.parent / "configs"
    DEFAULT_PROFILE = "default"

    @classmethod
    def load_profile(cls, profile_name: str = DEFAULT_PROFILE) -> Dict[str, Any]:
        """
        Load a routing profile.

        Args:
            profile_name: Name of the profile (default, walking)

        Returns:
            Dictionary with configuration values

        Raises:
            FileNotFoundError: If profile doesn't exist
        """
        profile_path = cls.CONFIG_DIR / f"{profile_name}.yaml"

        if not profile_path.exists():
            available = sorted(f.stem for f in cls.CONFIG_DIR.glob("*.yaml"))
            raise FileNotFoundError(
                f"Profile '{profile_name}' not found. Available profiles: {', '.join(available)}"
            )

        with open(profile_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    @classmethod
    def get_profile_from_env(cls) -> Optional[str]:
        """Get profile name from ROUTING_PROFILE environment variable."""
        return os.getenv("ROUTING_PROFILE")

    @classmethod
    def load_default_or_env_profile(cls) -> Dict[str, Any]:
        profile = cls.get_profile_from_env() or cls.DEFAULT_PROFILE
        return cls.load_profile(profile)


def settings_from_profile(profile: Dict[str, Any]) -> RoutingSettings:
    """Flatten a profile's ``routing``/``provider``/``cache`` sections into settings."""
    routing_cfg = profile.get("routing", {}) or {}
    provider_cfg = profile.get("provider", {}) or {}
    cache_cfg = profile.get("cache", {}) or {}

    values = {
        "travel_mode": routing_cfg.get("travel_mode"),
        "optimize_waypoints": routing_cfg.get("optimize_waypoints"),
        "max_waypoints": provider_cfg.get("max_waypoints"),
        "directions_url": provider_cfg.get("directions_url"),
        "request_timeout_seconds": provider_cfg.get("timeout_seconds"),
        "max_attempts": provider_cfg.get("max_attempts"),
        "language": provider_cfg.get("language"),
        "cache_ttl_seconds": cache_cfg.get("ttl_seconds"),
        "cache_max_entries": cache_cfg.get("max_entries"),
    }
    return RoutingSettings(**{k: v for k, v in values.items() if v is not None})


def get_settings(profile_name: Optional[str] = None) -> RoutingSettings:
    """Settings for ``profile_name``, or for ROUTING_PROFILE / the default profile."""
    if profile_name:
        return settings_from_profile(ConfigLoader.load_profile(profile_name))
    return settings_from_profile(ConfigLoader.load_default_or_env_profile())


def get_api_key() -> str:
    """Google Maps API key from the environment (after loading .env), or ''."""
    load_dotenv()
    key = os.getenv("GOOGLE_MAPS_API_KEY", "").strip()
    return "" if key in PLACEHOLDER_API_KEYS else key


def is_api_key_configured() -> bool:
    return bool(get_api_key())
