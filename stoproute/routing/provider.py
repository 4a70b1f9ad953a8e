"""
Routing provider contract and the Google Directions API client.

The orchestrator talks to any object with an async ``route(request)`` method.
Providers report their own failures as ``ProviderError`` with a normalized
``ProviderStatus`` and transport failures as ``ProviderTransportError``; the
orchestrator maps both into the planning error taxonomy.

Transport-level retries (5xx, connection errors, timeouts) live here, with
exponential backoff and jitter. Provider statuses such as quota or denial are
returned to the caller immediately and never retried.
"""

from __future__ import annotations

import asyncio
import logging
import random
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

import httpx

from ..tools.config_loader import DIRECTIONS_URL, RoutingSettings, get_api_key
from .models import ProviderLeg, ProviderRequest, ProviderResponse

logger = logging.getLogger(__name__)


# -----------------------------
# Constants
# -----------------------------

# Retry configuration
MAX_ATTEMPTS = 4
BACKOFF_BASE = 2
BACKOFF_MAX = 8


class ProviderStatus(Enum):
    """Normalized provider failure statuses."""
    INVALID_REQUEST = "invalid-request"
    TOO_MANY_WAYPOINTS = "too-many-waypoints"
    NOT_FOUND = "not-found"
    ZERO_RESULTS = "zero-results"
    OVER_QUOTA = "over-quota"
    ACCESS_DENIED = "access-denied"
    UNKNOWN = "unknown"


# Directions API status codes
# https://developers.google.com/maps/documentation/directions/get-directions#DirectionsStatus
GOOGLE_STATUS_MAP = {
    "INVALID_REQUEST": ProviderStatus.INVALID_REQUEST,
    "MAX_ROUTE_LENGTH_EXCEEDED": ProviderStatus.INVALID_REQUEST,
    "MAX_WAYPOINTS_EXCEEDED": ProviderStatus.TOO_MANY_WAYPOINTS,
    "NOT_FOUND": ProviderStatus.NOT_FOUND,
    "ZERO_RESULTS": ProviderStatus.ZERO_RESULTS,
    "OVER_QUERY_LIMIT": ProviderStatus.OVER_QUOTA,
    "OVER_DAILY_LIMIT": ProviderStatus.OVER_QUOTA,
    "REQUEST_DENIED": ProviderStatus.ACCESS_DENIED,
}


class ProviderError(Exception):
    """The provider answered, but with a failure status."""

    def __init__(self, status: ProviderStatus, message: str = ""):
        super().__init__(f"{status.value}: {message}" if message else status.value)
        self.status = status
        self.message = message


class ProviderTransportError(Exception):
    """The provider could not be reached or kept failing at the transport level."""


class RoutingProvider(Protocol):
    async def route(self, request: ProviderRequest) -> ProviderResponse:
        ...


# -----------------------------
# Retry Logic
# -----------------------------

def exponential_backoff_with_jitter(attempt: int) -> float:
    """
    Calculate backoff time with exponential growth and jitter.

    Formula: min(BACKOFF_BASE^attempt + random(0,1), BACKOFF_MAX)

    Args:
        attempt: Retry attempt number (0-indexed)

    Returns:
        Sleep time in seconds
    """
    base_delay = BACKOFF_BASE ** attempt
    jitter = random.random()
    return min(base_delay + jitter, BACKOFF_MAX)


# -----------------------------
# Response parsing
# -----------------------------

def status_from_http(status_code: int) -> ProviderStatus:
    """Map a non-5xx HTTP error code to a provider status."""
    if status_code == 429:
        return ProviderStatus.OVER_QUOTA
    if status_code in (401, 403):
        return ProviderStatus.ACCESS_DENIED
    return ProviderStatus.INVALID_REQUEST


def parse_directions_response(data: Dict[str, Any]) -> ProviderResponse:
    """
    Convert a Directions API JSON body into a ``ProviderResponse``.

    Raises:
        ProviderError: On any non-OK status or a body that cannot be read
    """
    status = data.get("status", "UNKNOWN_ERROR")
    if status != "OK":
        mapped = GOOGLE_STATUS_MAP.get(status, ProviderStatus.UNKNOWN)
        raise ProviderError(mapped, data.get("error_message") or status)

    try:
        route = data["routes"][0]
        legs = [
            ProviderLeg(
                distance_meters=leg["distance"]["value"],
                duration_seconds=leg["duration"]["value"],
                start_address=leg.get("start_address"),
                end_address=leg.get("end_address"),
            )
            for leg in route["legs"]
        ]
    except (KeyError, IndexError, TypeError) as e:
        raise ProviderError(ProviderStatus.UNKNOWN, f"Malformed Directions response: {e!r}") from e

    waypoint_order = route.get("waypoint_order")
    polyline = (route.get("overview_polyline") or {}).get("points")

    return ProviderResponse(
        legs=legs,
        waypoint_order=list(waypoint_order) if waypoint_order is not None else None,
        polyline=polyline,
        raw=data,
    )


# -----------------------------
# API Client
# -----------------------------

class GoogleDirectionsProvider:
    """Google Directions API client implementing ``RoutingProvider``."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: str = DIRECTIONS_URL,
        timeout: float = 30.0,
        max_attempts: int = MAX_ATTEMPTS,
        language: str = "en",
        client: Optional[httpx.AsyncClient] = None,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self._api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.language = language
        self._client = client
        self.request_count = 0

    @classmethod
    def from_settings(
        cls,
        settings: RoutingSettings,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "GoogleDirectionsProvider":
        return cls(
            api_key,
            base_url=settings.directions_url,
            timeout=settings.request_timeout_seconds,
            max_attempts=settings.max_attempts,
            language=settings.language,
            client=client,
        )

    def _require_api_key(self) -> str:
        """Resolve the key at call time so importing never needs one."""
        key = self._api_key if self._api_key is not None else get_api_key()
        if not key:
            raise ProviderError(
                ProviderStatus.ACCESS_DENIED,
                "Missing GOOGLE_MAPS_API_KEY. Copy .env.sample to .env and set your key.",
            )
        return key

    def build_params(self, request: ProviderRequest, api_key: str) -> Dict[str, str]:
        """Query parameters for one Directions call."""
        params = {
            "origin": request.origin.as_param(),
            "destination": request.destination.as_param(),
            "mode": request.travel_mode.value,
            "language": self.language,
            "key": api_key,
        }
        if request.waypoints:
            parts: List[str] = ["optimize:true"] if request.optimize_waypoints else []
            parts.extend(w.as_param() for w in request.waypoints)
            params["waypoints"] = "|".join(parts)
        return params

    async def route(self, request: ProviderRequest) -> ProviderResponse:
        """
        Request directions for one segment.

        Raises:
            ProviderError: The API answered with a failure status
            ProviderTransportError: Unreachable, timed out, or 5xx after all attempts
        """
        params = self.build_params(request, self._require_api_key())
        data = await self._get_json(params)
        response = parse_directions_response(data)
        logger.debug(
            f"Directions call returned {len(response.legs)} legs "
            f"(waypoint_order={response.waypoint_order})"
        )
        return response

    async def _get_json(self, params: Dict[str, str]) -> Dict[str, Any]:
        last_error: Optional[Exception] = None
        for attempt in range(self.max_attempts):
            self.request_count += 1
            try:
                response = await self._send(params)
            except httpx.TransportError as e:
                last_error = e
                logger.warning(f"Directions transport error (attempt {attempt + 1}/{self.max_attempts}): {e!r}")
            else:
                if response.status_code >= 500:
                    last_error = httpx.HTTPStatusError(
                        f"Server error: {response.status_code}",
                        request=response.request,
                        response=response,
                    )
                    logger.warning(
                        f"Directions server error {response.status_code} "
                        f"(attempt {attempt + 1}/{self.max_attempts})"
                    )
                elif response.status_code >= 400:
                    raise ProviderError(
                        status_from_http(response.status_code),
                        f"HTTP {response.status_code}",
                    )
                else:
                    try:
                        return response.json()
                    except ValueError as e:
                        raise ProviderError(ProviderStatus.UNKNOWN, "Directions response is not JSON") from e

            if attempt < self.max_attempts - 1:
                await asyncio.sleep(exponential_backoff_with_jitter(attempt))

        raise ProviderTransportError(
            f"Directions API unavailable after {self.max_attempts} attempts: {last_error!r}"
        ) from last_error

    async def _send(self, params: Dict[str, str]) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(self.base_url, params=params, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(self.base_url, params=params)
