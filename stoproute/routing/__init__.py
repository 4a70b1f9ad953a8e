"""Route sequencing, caching, batching and provider orchestration."""

from .models import (
    # Data models
    Location,
    Stop,
    Leg,
    RouteResult,
    TravelMode,
    ProviderRequest,
    ProviderResponse,
    ProviderLeg,
    is_valid_coordinate,
)

from .distance import haversine_km, EARTH_RADIUS_KM

from .sequencer import nearest_neighbor_sequence, sequence_length_km

from .batching import (
    plan_batches,
    join_segments,
    expected_segment_count,
    MAX_WAYPOINTS_PER_REQUEST,
)

from .cache import (
    RouteCache,
    CachedRoute,
    cache_key,
    DEFAULT_TTL_SECONDS,
    DEFAULT_MAX_ENTRIES,
)

from .errors import (
    RoutePlanningError,
    InsufficientStopsError,
    InvalidRequestError,
    DuplicateStopsError,
    TooManyWaypointsError,
    NoRouteFoundError,
    QuotaExceededError,
    ProviderAccessDeniedError,
    ProviderUnavailableError,
    PlanCancelledError,
)

from .provider import (
    RoutingProvider,
    GoogleDirectionsProvider,
    ProviderError,
    ProviderStatus,
    ProviderTransportError,
    parse_directions_response,
)

from .orchestrator import RouteOrchestrator, create_orchestrator, remap_waypoint_order, validate_stops

from .links import (
    directions_url,
    google_maps_route_url,
    format_miles,
    format_duration,
    route_summary,
)

__all__ = [
    # Data models
    "Location",
    "Stop",
    "Leg",
    "RouteResult",
    "TravelMode",
    "ProviderRequest",
    "ProviderResponse",
    "ProviderLeg",
    "is_valid_coordinate",

    # Local ordering
    "haversine_km",
    "EARTH_RADIUS_KM",
    "nearest_neighbor_sequence",
    "sequence_length_km",

    # Batching
    "plan_batches",
    "join_segments",
    "expected_segment_count",
    "MAX_WAYPOINTS_PER_REQUEST",

    # Cache
    "RouteCache",
    "CachedRoute",
    "cache_key",
    "DEFAULT_TTL_SECONDS",
    "DEFAULT_MAX_ENTRIES",

    # Errors
    "RoutePlanningError",
    "InsufficientStopsError",
    "InvalidRequestError",
    "DuplicateStopsError",
    "TooManyWaypointsError",
    "NoRouteFoundError",
    "QuotaExceededError",
    "ProviderAccessDeniedError",
    "ProviderUnavailableError",
    "PlanCancelledError",

    # Provider
    "RoutingProvider",
    "GoogleDirectionsProvider",
    "ProviderError",
    "ProviderStatus",
    "ProviderTransportError",
    "parse_directions_response",

    # Orchestration
    "RouteOrchestrator",
    "create_orchestrator",
    "remap_waypoint_order",
    "validate_stops",

    # Presentation
    "directions_url",
    "google_maps_route_url",
    "format_miles",
    "format_duration",
    "route_summary",
]
