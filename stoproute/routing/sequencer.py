"""
Greedy nearest-neighbour seed ordering.

The seed order gives the provider a sane initial waypoint list and gives the
caller something to show before the network call resolves. It is expected to
be noticeably worse than an optimal tour and is always superseded by the
provider's own reordering when one comes back.

The greedy approach is fast (O(n^2) haversine evaluations) and never touches
the network.
"""

from __future__ import annotations

from typing import List, Sequence

from .distance import haversine_km
from .models import Stop


def nearest_neighbor_sequence(stops: Sequence[Stop]) -> List[Stop]:
    """
    Greedy sequencing: start at the first stop, always go to the nearest unvisited one.

    Ties are broken by input order (first encountered wins), so the same input
    always yields the same permutation. The input sequence is not modified.

    Args:
        stops: Stops with valid coordinates; the first one is the origin

    Returns:
        New list holding the same stops in visiting order
    """
    if len(stops) <= 1:
        return list(stops)

    order: List[Stop] = [stops[0]]
    remaining: List[Stop] = list(stops[1:])

    while remaining:
        current = order[-1]
        best_pos = 0
        best_dist = haversine_km(current, remaining[0])
        for pos in range(1, len(remaining)):
            dist = haversine_km(current, remaining[pos])
            if dist < best_dist:
                best_pos, best_dist = pos, dist
        order.append(remaining.pop(best_pos))

    return order


def sequence_length_km(stops: Sequence[Stop]) -> float:
    """Total haversine length of an open path through ``stops`` in order."""
    return sum(haversine_km(a, b) for a, b in zip(stops, stops[1:]))
