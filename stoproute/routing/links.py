"""Shareable Google Maps links and display summaries for planned routes."""

from __future__ import annotations

from typing import Any, Dict, Sequence
from urllib.parse import quote

from .models import RouteResult, Stop

MAPS_DIR_URL = "https://www.google.com/maps/dir/"
MAPS_DIRECTIONS_API_URL = "https://www.google.com/maps/dir/?api=1&destination="
METERS_TO_MILES = 0.000621371


def _place_text(stop: Stop) -> str:
    return stop.address or f"{stop.lat},{stop.lng}"


def directions_url(stop: Stop) -> str:
    """Google Maps directions from the user's location to one stop."""
    return MAPS_DIRECTIONS_API_URL + quote(_place_text(stop), safe="")


def google_maps_route_url(stops: Sequence[Stop]) -> str:
    """Multi-stop Google Maps URL visiting ``stops`` in order; '' for no stops."""
    if not stops:
        return ""
    return MAPS_DIR_URL + "/".join(quote(_place_text(s), safe="") for s in stops)


def format_miles(meters: float) -> str:
    """
    Example:
        >>> format_miles(16093.4)
        '10.0 mi'
    """
    return f"{meters * METERS_TO_MILES:.1f} mi"


def format_duration(seconds: float) -> str:
    """
    Example:
        >>> format_duration(3900)
        '1h 5m'
        >>> format_duration(300)
        '5m'
    """
    seconds = int(seconds)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"


def route_summary(result: RouteResult) -> Dict[str, Any]:
    """Flat summary of a planned route for display or export."""
    return {
        "stop_ids": result.stop_ids,
        "stops": len(result.ordered_stops),
        "segments": result.segment_count,
        "total_distance": format_miles(result.total_distance_meters),
        "total_time": format_duration(result.total_duration_seconds),
        "maps_url": google_maps_route_url(result.ordered_stops),
    }
