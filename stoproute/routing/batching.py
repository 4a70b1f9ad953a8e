"""
Split long stop sequences into provider-sized segments.

The Directions API accepts a fixed origin, a fixed destination and at most
``max_waypoints`` intermediate stops per call. Longer routes are covered by
several calls whose segments overlap by exactly one stop: the last stop of
segment *i* is the first stop of segment *i+1*, so the legs connect.
"""

from __future__ import annotations

import math
from typing import List, Sequence, TypeVar

T = TypeVar("T")

# Directions API limit for intermediate waypoints (excluding origin/destination)
# https://developers.google.com/maps/documentation/directions/get-directions#waypoints
MAX_WAYPOINTS_PER_REQUEST = 25


def segment_capacity(max_waypoints: int) -> int:
    """Stops per segment, counting the fixed origin and destination."""
    if max_waypoints < 0:
        raise ValueError(f"max_waypoints must be >= 0, got {max_waypoints}")
    return max_waypoints + 2


def expected_segment_count(n_stops: int, max_waypoints: int) -> int:
    """Number of segments ``plan_batches`` produces for ``n_stops`` stops."""
    capacity = segment_capacity(max_waypoints)
    if n_stops <= capacity:
        return 1
    return math.ceil((n_stops - 1) / (capacity - 1))


def plan_batches(ordered: Sequence[T], max_waypoints: int = MAX_WAYPOINTS_PER_REQUEST) -> List[List[T]]:
    """
    Split an ordered sequence into overlapping call-sized segments.

    Args:
        ordered: Globally ordered stops (at least 2)
        max_waypoints: Provider limit on intermediate waypoints per call

    Returns:
        Segments of at most ``max_waypoints + 2`` items. Adjacent segments share
        one boundary item. A single segment equal to the input when it fits.

    Example:
        >>> [len(s) for s in plan_batches(list(range(60)), 25)]
        [27, 27, 8]
    """
    capacity = segment_capacity(max_waypoints)
    items = list(ordered)
    if len(items) <= capacity:
        return [items]

    step = capacity - 1
    segments: List[List[T]] = []
    start = 0
    while start < len(items) - 1:
        segments.append(items[start:start + capacity])
        start += step
    return segments


def join_segments(segments: Sequence[Sequence[T]]) -> List[T]:
    """Concatenate segments, dropping the boundary item each one shares with the previous."""
    joined: List[T] = []
    for index, segment in enumerate(segments):
        joined.extend(segment if index == 0 else segment[1:])
    return joined
