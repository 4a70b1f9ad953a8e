"""
Failure taxonomy for route planning.

Every failure aborts the in-progress plan and leaves the route cache untouched.
None of these are retried by the orchestrator; retry policy belongs to the
caller or the transport.
"""

from __future__ import annotations

from typing import Iterable, List, Optional


class RoutePlanningError(Exception):
    """Base class for all route planning failures."""

    kind = "RoutePlanningError"
    retryable = False

    def __init__(self, message: str, *, segment_index: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.segment_index = segment_index

    def __str__(self) -> str:
        if self.segment_index is None:
            return self.message
        return f"{self.message} (segment {self.segment_index})"


class InsufficientStopsError(RoutePlanningError):
    """Fewer than two valid stops remained after filtering."""

    kind = "InsufficientStops"

    def __init__(self, valid_count: int, dropped_stop_ids: Iterable[str] = ()):
        self.valid_count = valid_count
        self.dropped_stop_ids: List[str] = list(dropped_stop_ids)
        message = f"At least 2 stops with valid coordinates are required, got {valid_count}"
        if self.dropped_stop_ids:
            message += f"; dropped invalid stops: {', '.join(self.dropped_stop_ids)}"
        super().__init__(message)


class InvalidRequestError(RoutePlanningError):
    """The provider rejected the coordinates or parameters."""

    kind = "InvalidRequest"


class DuplicateStopsError(InvalidRequestError):
    """The same stop identity appeared more than once in one stop set."""

    def __init__(self, duplicate_ids: Iterable[str]):
        self.duplicate_ids = sorted(set(duplicate_ids))
        super().__init__(f"Duplicate stop identities: {', '.join(self.duplicate_ids)}")


class TooManyWaypointsError(RoutePlanningError):
    """The provider's waypoint limit is lower than the configured one."""

    kind = "TooManyWaypoints"


class NoRouteFoundError(RoutePlanningError):
    """No path exists between the stops of a segment."""

    kind = "NoRouteFound"


class QuotaExceededError(RoutePlanningError):
    """The provider is rate limiting or the quota is exhausted."""

    kind = "QuotaExceeded"
    hint = "Routing quota exceeded; try again later."


class ProviderAccessDeniedError(RoutePlanningError):
    """Credential or configuration problem. Fatal for the whole session."""

    kind = "ProviderAccessDenied"


class ProviderUnavailableError(RoutePlanningError):
    """Transport failure, timeout, or an unusable provider response."""

    kind = "ProviderUnavailable"


class PlanCancelledError(RoutePlanningError):
    """The caller abandoned the plan at a segment boundary."""

    kind = "Cancelled"
