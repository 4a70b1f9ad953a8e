"""
Pytest configuration and shared fixtures for stoproute tests.

This file provides:
- Sample stop sets around Frederick County, MD
- A fake routing provider that records calls and can be scripted to fail
- A controllable clock for cache expiry tests
- Canned Directions API payloads
"""

import os
from typing import Any, Callable, Dict, List, Optional, Sequence

import pytest

from stoproute.routing import (
    Location,
    ProviderLeg,
    ProviderRequest,
    ProviderResponse,
    Stop,
    haversine_km,
)


# ==============================================================================
# Sample Stops
# ==============================================================================

FREDERICK_CENTER = (39.4143, -77.4105)


def make_grid_stops(n: int, prefix: str = "s") -> List[Stop]:
    """``n`` stops on a regular grid, all with distinct valid coordinates."""
    return [
        Stop(
            stop_id=f"{prefix}{i:03d}",
            lat=39.30 + (i % 8) * 0.012,
            lng=-77.55 + (i // 8) * 0.015,
            label=f"Stop {i}",
        )
        for i in range(n)
    ]


@pytest.fixture
def sample_stops() -> List[Stop]:
    """Five stores around Frederick, MD."""
    return [
        Stop("store_1", 39.4143, -77.4105, "Downtown Spirits", "100 N Market St, Frederick, MD"),
        Stop("store_2", 39.4554, -77.3969, "Walkersville Wine & Liquor"),
        Stop("store_3", 39.3876, -77.4297, "Ballenger Creek Liquors"),
        Stop("store_4", 39.4310, -77.4480, "Golden Mile Beverage"),
        Stop("store_5", 39.3660, -77.3850, "Urbana Bottle Shop"),
    ]


@pytest.fixture
def grid_stops() -> Callable[[int], List[Stop]]:
    return make_grid_stops


# ==============================================================================
# Fake Provider
# ==============================================================================

class FakeDirectionsProvider:
    """
    In-memory routing provider.

    Legs are derived from haversine distance (meters, rounded) and a constant
    15 m/s speed. ``waypoint_order`` controls the reordering reported back:
    "reverse", "identity", None (no order reported), or a callable taking the
    number of waypoints. ``failures`` maps a 0-based call index to the
    exception that call should raise.
    """

    def __init__(self, waypoint_order: Any = "reverse", failures: Optional[Dict[int, Exception]] = None):
        self.waypoint_order = waypoint_order
        self.failures = failures or {}
        self.requests: List[ProviderRequest] = []

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def _order(self, k: int) -> Optional[List[int]]:
        if self.waypoint_order is None:
            return None
        if self.waypoint_order == "reverse":
            return list(reversed(range(k)))
        if self.waypoint_order == "identity":
            return list(range(k))
        return list(self.waypoint_order(k))

    async def route(self, request: ProviderRequest) -> ProviderResponse:
        call_index = len(self.requests)
        self.requests.append(request)
        if call_index in self.failures:
            raise self.failures[call_index]

        order = self._order(len(request.waypoints))
        applied = order if order is not None and sorted(order) == list(range(len(request.waypoints))) else None
        visited: Sequence[Location] = [
            request.origin,
            *([request.waypoints[i] for i in applied] if applied is not None else request.waypoints),
            request.destination,
        ]
        legs = []
        for a, b in zip(visited, visited[1:]):
            meters = round(haversine_km(a, b) * 1000)
            legs.append(ProviderLeg(distance_meters=meters, duration_seconds=round(meters / 15.0)))
        return ProviderResponse(
            legs=legs,
            waypoint_order=order,
            polyline=f"poly{call_index}",
            raw={"status": "OK", "call": call_index},
        )


@pytest.fixture
def fake_provider() -> FakeDirectionsProvider:
    return FakeDirectionsProvider()


class FakeClock:
    """Monotonic clock under test control."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ==============================================================================
# Directions API payloads
# ==============================================================================

def directions_payload(
    n_legs: int,
    waypoint_order: Optional[List[int]] = None,
    meters: int = 1000,
    seconds: int = 120,
) -> Dict[str, Any]:
    """A successful Directions API body with ``n_legs`` identical legs."""
    return {
        "status": "OK",
        "geocoded_waypoints": [],
        "routes": [{
            "summary": "MD-355",
            "waypoint_order": waypoint_order if waypoint_order is not None else list(range(max(n_legs - 1, 0))),
            "overview_polyline": {"points": "_p~iF~ps|U_ulLnnqC"},
            "legs": [
                {
                    "distance": {"text": "1 km", "value": meters},
                    "duration": {"text": "2 mins", "value": seconds},
                    "start_address": f"Start {i}",
                    "end_address": f"End {i}",
                    "steps": [],
                }
                for i in range(n_legs)
            ],
        }],
    }


# ==============================================================================
# Environment Setup
# ==============================================================================

@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Setup test environment variables."""
    # Dummy key for tests (not a real key)
    os.environ["GOOGLE_MAPS_API_KEY"] = "TEST_API_KEY_NOT_REAL"
    os.environ.pop("ROUTING_PROFILE", None)
    yield
