"""
Route orchestration: validation, caching, seed ordering, batching, provider
calls, reorder remapping and aggregation.

One ``plan_route`` call runs:

    Validating -> CacheCheck -> CacheHit -> Done
                             -> CacheMiss -> Sequencing -> Batching
                                -> Requesting (one call per segment, in order)
                                -> Aggregating -> Caching -> Done

Any segment failure moves to Failed: nothing is cached and no partial route is
returned. Totals are always summed from legs here, because a route split over
several calls has no single provider-reported total.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..tools.config_loader import RoutingSettings, get_settings
from .batching import join_segments, plan_batches
from .cache import RouteCache
from .errors import (
    DuplicateStopsError,
    InsufficientStopsError,
    InvalidRequestError,
    NoRouteFoundError,
    PlanCancelledError,
    ProviderAccessDeniedError,
    ProviderUnavailableError,
    QuotaExceededError,
    RoutePlanningError,
    TooManyWaypointsError,
)
from .models import Leg, ProviderRequest, ProviderResponse, RouteResult, Stop, TravelMode
from .provider import (
    GoogleDirectionsProvider,
    ProviderError,
    ProviderStatus,
    ProviderTransportError,
    RoutingProvider,
)
from .sequencer import nearest_neighbor_sequence

logger = logging.getLogger(__name__)


_STATUS_ERRORS = {
    ProviderStatus.INVALID_REQUEST: InvalidRequestError,
    ProviderStatus.TOO_MANY_WAYPOINTS: TooManyWaypointsError,
    ProviderStatus.NOT_FOUND: NoRouteFoundError,
    ProviderStatus.ZERO_RESULTS: NoRouteFoundError,
    ProviderStatus.OVER_QUOTA: QuotaExceededError,
    ProviderStatus.ACCESS_DENIED: ProviderAccessDeniedError,
    ProviderStatus.UNKNOWN: ProviderUnavailableError,
}


@dataclass
class SegmentOutcome:
    """Realized order and legs for one provider call."""
    stops: List[Stop]
    legs: List[Leg]
    response: ProviderResponse


def validate_stops(stops: Sequence[Stop]) -> Tuple[List[Stop], List[str]]:
    """
    Filter out stops without usable coordinates.

    Returns:
        (valid stops in input order, identities of dropped stops)

    Raises:
        DuplicateStopsError: The same identity appears twice
        InsufficientStopsError: Fewer than two valid stops remain
    """
    duplicates = [stop_id for stop_id, n in Counter(s.stop_id for s in stops).items() if n > 1]
    if duplicates:
        raise DuplicateStopsError(duplicates)

    valid = [s for s in stops if s.is_valid()]
    dropped = [s.stop_id for s in stops if not s.is_valid()]
    if dropped:
        logger.warning(f"Dropping {len(dropped)} stop(s) without valid coordinates: {dropped}")
    if len(valid) < 2:
        raise InsufficientStopsError(len(valid), dropped)
    return valid, dropped


def remap_waypoint_order(
    segment: Sequence[Stop],
    waypoint_order: Optional[Sequence[int]],
) -> List[Stop]:
    """
    Translate a provider's waypoint permutation back to stops.

    ``waypoint_order`` indexes the intermediate waypoints of this one call
    (``segment[1:-1]``), not the global order. Origin and destination are fixed
    and are added back around the reordered intermediates. An absent order, or
    one that is not a permutation of ``0..k-1``, keeps the submitted order.
    """
    intermediates = list(segment[1:-1])
    if waypoint_order is None:
        return list(segment)

    order = list(waypoint_order)
    if sorted(order) != list(range(len(intermediates))):
        logger.warning(
            f"Ignoring waypoint_order {order}: not a permutation of {len(intermediates)} waypoints"
        )
        return list(segment)

    return [segment[0], *(intermediates[i] for i in order), segment[-1]]


class RouteOrchestrator:
    """Plans routes over stop sets by delegating to a routing provider."""

    def __init__(
        self,
        provider: RoutingProvider,
        cache: Optional[RouteCache] = None,
        settings: Optional[RoutingSettings] = None,
    ):
        self.provider = provider
        self.settings = settings or RoutingSettings()
        self.cache = cache if cache is not None else RouteCache(
            ttl_seconds=self.settings.cache_ttl_seconds,
            max_entries=self.settings.cache_max_entries,
        )
        self.travel_mode = TravelMode(self.settings.travel_mode)
        self._access_denied: Optional[ProviderAccessDeniedError] = None

    # -----------------------------
    # Public operations
    # -----------------------------

    def preview_order(self, stops: Sequence[Stop]) -> List[Stop]:
        """Validated seed order for immediate display; no network call."""
        valid, _ = validate_stops(stops)
        return nearest_neighbor_sequence(valid)

    async def plan_route(
        self,
        stops: Sequence[Stop],
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> RouteResult:
        """
        Plan a route visiting every valid stop.

        Args:
            stops: The stop set; the first valid stop is the origin
            cancel_event: When set, the plan stops at the next segment boundary

        Returns:
            RouteResult whose ``ordered_stops`` is a permutation of the valid stops

        Raises:
            RoutePlanningError: One of the taxonomy subclasses
        """
        valid, _ = validate_stops(stops)
        stop_ids = [s.stop_id for s in valid]

        cached = self.cache.get(stop_ids)
        if cached is not None:
            logger.debug(f"Route cache hit for {len(stop_ids)} stops")
            return cached

        if self._access_denied is not None:
            raise ProviderAccessDeniedError(
                f"Provider access was denied earlier in this session: {self._access_denied.message}"
            )

        seed = nearest_neighbor_sequence(valid)
        segments = plan_batches(seed, self.settings.max_waypoints)
        logger.info(
            f"Planning route over {len(seed)} stops in {len(segments)} segment(s) "
            f"(max_waypoints={self.settings.max_waypoints}, mode={self.travel_mode.value})"
        )

        outcomes: List[SegmentOutcome] = []
        arrival: Optional[Stop] = None
        for index, segment in enumerate(segments):
            self._check_cancelled(cancel_event, index)
            if arrival is not None:
                segment = [arrival, *segment[1:]]
            outcome = await self._request_segment(index, segment)
            outcomes.append(outcome)
            arrival = outcome.stops[-1]

        result = self._aggregate(outcomes)

        self._check_cancelled(cancel_event, len(segments))
        self.cache.put(stop_ids, result)
        logger.info(
            f"Planned route: {len(result.ordered_stops)} stops, "
            f"{result.total_distance_meters / 1000:.2f}km, {result.total_duration_seconds / 60:.1f}min"
        )
        return result

    def clear_cache(self) -> None:
        """Drop every cached route."""
        self.cache.clear()

    def cache_stats(self) -> Dict[str, Any]:
        return self.cache.stats()

    # -----------------------------
    # Internals
    # -----------------------------

    @staticmethod
    def _check_cancelled(cancel_event: Optional[asyncio.Event], index: int) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"Route plan cancelled before segment {index}")
            raise PlanCancelledError("Route plan cancelled by caller", segment_index=index)

    def _build_request(self, segment: Sequence[Stop]) -> ProviderRequest:
        return ProviderRequest(
            origin=segment[0].location,
            destination=segment[-1].location,
            waypoints=[s.location for s in segment[1:-1]],
            optimize_waypoints=self.settings.optimize_waypoints,
            travel_mode=self.travel_mode,
        )

    async def _request_segment(self, index: int, segment: List[Stop]) -> SegmentOutcome:
        request = self._build_request(segment)
        try:
            # Shielded: cancelling the caller never interrupts an issued request.
            response = await asyncio.shield(self.provider.route(request))
        except ProviderError as e:
            raise self._map_provider_error(e, index) from e
        except (ProviderTransportError, asyncio.TimeoutError) as e:
            logger.error(f"Routing provider unavailable on segment {index}: {e}")
            raise ProviderUnavailableError(f"Routing provider unavailable: {e}", segment_index=index) from e

        realized = remap_waypoint_order(segment, response.waypoint_order)
        if len(response.legs) != len(realized) - 1:
            logger.error(
                f"Segment {index}: expected {len(realized) - 1} legs, provider returned {len(response.legs)}"
            )
            raise ProviderUnavailableError(
                f"Provider returned {len(response.legs)} legs for {len(realized)} stops",
                segment_index=index,
            )

        legs = [
            Leg(
                from_stop_id=a.stop_id,
                to_stop_id=b.stop_id,
                distance_meters=pl.distance_meters,
                duration_seconds=pl.duration_seconds,
                start_address=pl.start_address,
                end_address=pl.end_address,
            )
            for a, b, pl in zip(realized, realized[1:], response.legs)
        ]
        return SegmentOutcome(stops=realized, legs=legs, response=response)

    def _map_provider_error(self, error: ProviderError, index: int) -> RoutePlanningError:
        error_cls = _STATUS_ERRORS.get(error.status, ProviderUnavailableError)
        message = error.message or error.status.value
        if error_cls is QuotaExceededError:
            message = f"{message}. {QuotaExceededError.hint}"
        mapped = error_cls(message, segment_index=index)
        if isinstance(mapped, ProviderAccessDeniedError):
            self._access_denied = mapped
        logger.error(f"Routing provider failed on segment {index}: {mapped.kind} ({error.status.value})")
        return mapped

    @staticmethod
    def _aggregate(outcomes: Sequence[SegmentOutcome]) -> RouteResult:
        ordered = join_segments([o.stops for o in outcomes])
        legs = [leg for o in outcomes for leg in o.legs]
        return RouteResult(
            ordered_stops=tuple(ordered),
            legs=tuple(legs),
            total_distance_meters=sum(leg.distance_meters for leg in legs),
            total_duration_seconds=sum(leg.duration_seconds for leg in legs),
            provider_payload=tuple(MappingProxyType(o.response.raw) for o in outcomes),
            polylines=tuple(o.response.polyline for o in outcomes if o.response.polyline),
        )


def create_orchestrator(
    profile_name: Optional[str] = None,
    *,
    api_key: Optional[str] = None,
    cache: Optional[RouteCache] = None,
) -> RouteOrchestrator:
    """Orchestrator backed by the Google Directions API, configured from a YAML profile."""
    settings = get_settings(profile_name)
    provider = GoogleDirectionsProvider.from_settings(settings, api_key=api_key)
    return RouteOrchestrator(provider, cache=cache, settings=settings)
