"""
stoproute: plan visiting orders over a set of stops with the Google Directions API.

Usage:
    import asyncio
    from stoproute import Stop, create_orchestrator

    planner = create_orchestrator()
    route = asyncio.run(planner.plan_route([
        Stop("a", 39.4143, -77.4105, "Downtown"),
        Stop("b", 39.4554, -77.3969, "North"),
        Stop("c", 39.3876, -77.4297, "South"),
    ]))
    print(route.stop_ids, route.total_distance_meters)
"""

from .routing import (
    Location,
    Stop,
    Leg,
    RouteResult,
    TravelMode,
    RouteCache,
    RouteOrchestrator,
    create_orchestrator,
    GoogleDirectionsProvider,
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
from .tools import RoutingSettings, get_settings, is_api_key_configured

__version__ = "0.1.0"

__all__ = [
    "Location",
    "Stop",
    "Leg",
    "RouteResult",
    "TravelMode",
    "RouteCache",
    "RouteOrchestrator",
    "create_orchestrator",
    "GoogleDirectionsProvider",
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
    "RoutingSettings",
    "get_settings",
    "is_api_key_configured",
]
