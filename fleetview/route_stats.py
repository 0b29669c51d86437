# Route progress figures for the debug panel: nodes done, current node, planned finish and path length.

from __future__ import annotations                     # Allow forward references in type hints
from typing import Sequence                            # Type hint for route sequences
import math

from .models import RouteStats, Waypoint


def route_stats(route: Sequence[Waypoint], t: float) -> RouteStats:
    if not route:                                      # No schedule → all-zero stats, no current node
        return RouteStats()

    completed = 0
    current = -1
    for i, wp in enumerate(route):
        if t >= wp.window_end:                         # Window already closed → node done
            completed += 1
        elif t >= wp.window_start and current == -1:   # First open window the clock is inside
            current = i

    dist = 0.0
    for a, b in zip(route, route[1:]):                 # Straight-line leg lengths
        dist += math.hypot(b.x - a.x, b.y - a.y)

    return RouteStats(
        total_nodes=len(route),
        completed_nodes=completed,
        current_node_index=current,
        estimated_completion=float(route[-1].window_end),  # Planned end of the last stop
        total_distance=round(dist, 2),
    )
