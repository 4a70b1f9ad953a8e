"""
Data models shared by the sequencing, caching, batching and orchestration code.

Stops are owned by the caller and never mutated here; the routing code only
reorders references to them. Everything below is created fresh per request
except the cached ``RouteResult``, which lives until its cache entry expires.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


# -----------------------------
# Constants
# -----------------------------

class TravelMode(Enum):
    """Travel modes accepted by the Directions API."""
    DRIVING = "driving"
    WALKING = "walking"
    BICYCLING = "bicycling"
    TRANSIT = "transit"


LAT_RANGE = (-90.0, 90.0)
LNG_RANGE = (-180.0, 180.0)


# -----------------------------
# Geographic primitives
# -----------------------------

@dataclass(frozen=True)
class Location:
    """Geographic location."""
    lat: float
    lng: float

    def as_param(self) -> str:
        """Render as the ``lat,lng`` string the Directions API expects."""
        return f"{self.lat},{self.lng}"


def is_valid_coordinate(lat: Optional[float], lng: Optional[float]) -> bool:
    """True when both values are real numbers, finite and inside their ranges."""
    for value in (lat, lng):
        # bool is an int subclass
        if not isinstance(value, numbers.Real) or isinstance(value, bool):
            return False
        if not math.isfinite(value):
            return False
    return LAT_RANGE[0] <= lat <= LAT_RANGE[1] and LNG_RANGE[0] <= lng <= LNG_RANGE[1]


@dataclass(frozen=True)
class Stop:
    """A single location the user wants to visit."""

    stop_id: str
    lat: Optional[float]
    lng: Optional[float]
    label: str = ""
    address: Optional[str] = None

    def is_valid(self) -> bool:
        return is_valid_coordinate(self.lat, self.lng)

    @property
    def location(self) -> Location:
        return Location(lat=float(self.lat), lng=float(self.lng))


# -----------------------------
# Route results
# -----------------------------

@dataclass(frozen=True)
class Leg:
    """Travel between two consecutive stops of a realized route."""

    from_stop_id: str
    to_stop_id: str
    distance_meters: float
    duration_seconds: float
    start_address: Optional[str] = None
    end_address: Optional[str] = None


@dataclass(frozen=True)
class RouteResult:
    """
    A realized route over a stop set.

    Attributes:
        ordered_stops: Final global visiting order
        legs: One leg per consecutive pair in ``ordered_stops``
        total_distance_meters: Sum of leg distances
        total_duration_seconds: Sum of leg durations
        provider_payload: Raw provider responses, one per segment. Shared by
            every cache hit for this stop set, so treat them as read-only
        polylines: Encoded overview polylines, one per segment that returned one
    """

    ordered_stops: Tuple[Stop, ...]
    legs: Tuple[Leg, ...]
    total_distance_meters: float
    total_duration_seconds: float
    provider_payload: Tuple[Mapping[str, Any], ...] = ()
    polylines: Tuple[str, ...] = ()

    @property
    def stop_ids(self) -> List[str]:
        return [stop.stop_id for stop in self.ordered_stops]

    @property
    def segment_count(self) -> int:
        return len(self.provider_payload)


# -----------------------------
# Provider wire models
# -----------------------------

@dataclass
class ProviderRequest:
    """One call to the routing provider."""
    origin: Location
    destination: Location
    waypoints: List[Location] = field(default_factory=list)
    optimize_waypoints: bool = True
    travel_mode: TravelMode = TravelMode.DRIVING


@dataclass
class ProviderLeg:
    """A leg as reported by the provider."""
    distance_meters: float
    duration_seconds: float
    start_address: Optional[str] = None
    end_address: Optional[str] = None


@dataclass
class ProviderResponse:
    """Successful provider response."""
    legs: List[ProviderLeg]
    waypoint_order: Optional[List[int]] = None
    polyline: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)
