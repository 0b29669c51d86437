""" RoutePositionResolver maps (route, query time) to a ResolvedPosition. Rules are applied in priority order:

1. empty route      -> last known location (clamped) or the minimum corner of the bounds, stationary
2. containment      -> first waypoint whose window holds the query time, stationary
3. in transit       -> first consecutive pair with current.window_end < t < next.window_start, linear interpolation
4. no bracket found -> waypoint whose nearest window edge is closest in time, stationary

Nothing is cached between calls: every tick recomputes from the route snapshot, so the animation, the debug
panel and the overlays always agree on where a vehicle is. """

from __future__ import annotations
from typing import Optional, Sequence, Tuple
import logging

from ..models import Position, ResolvedPosition, Waypoint
from .bounds_agent import BoundsValidator

logger = logging.getLogger(__name__)


def _lerp(a: float, b: float, t: float) -> float:
    v = a + (b - a) * t
    return min(max(v, min(a, b)), max(a, b))            # stay on the segment despite rounding


class RoutePositionResolver:
    def __init__(self, validator: BoundsValidator):
        self.validator = validator
        self.bounds = validator.bounds

    def resolve(self, route: Optional[Sequence[Waypoint]], query_time: float,
                current_location: Optional[Position] = None) -> ResolvedPosition:
        """Sanitize the route through the validator, then resolve it. Safe to call every tick."""
        if route is None:
            raise TypeError("route must be a sequence of waypoints (use [] for no route), got None")
        return self.resolve_validated(self.validator.validate_route(route), query_time, current_location)

    def resolve_validated(self, route: Sequence[Waypoint], query_time: float,
                          current_location: Optional[Position] = None) -> ResolvedPosition:
        """Resolve a route that already went through BoundsValidator.validate_route."""
        if route is None:
            raise TypeError("route must be a sequence of waypoints (use [] for no route), got None")

        if len(route) == 0:
            return self._resolve_empty(current_location)

        wp = self._containing(route, query_time)
        if wp is not None:
            return ResolvedPosition(position=wp.position, is_moving=False, progress=0.0, waypoint_id=wp.id)

        bracket = self._bracketing(route, query_time)
        if bracket is not None:
            cur, nxt, progress = bracket
            pos = Position(x=_lerp(cur.x, nxt.x, progress), y=_lerp(cur.y, nxt.y, progress))
            return ResolvedPosition(position=pos, is_moving=True, progress=progress, waypoint_id=nxt.id)

        wp = self._nearest(route, query_time)
        return ResolvedPosition(position=wp.position, is_moving=False, progress=0.0, waypoint_id=wp.id)

    def _resolve_empty(self, current_location: Optional[Position]) -> ResolvedPosition:
        if current_location is not None:
            logger.info("Empty route, using last known location (%s, %s)", current_location.x, current_location.y)
            return ResolvedPosition(position=self.validator.clamp_position(current_location))
        logger.info("Empty route and no known location, using default position")
        return ResolvedPosition(position=self.bounds.origin)

    # ---------- scans ----------
    @staticmethod
    def _containing(route: Sequence[Waypoint], t: float) -> Optional[Waypoint]:
        for wp in route:                                   # first match wins when windows overlap
            if wp.window_start <= t <= wp.window_end:
                return wp
        return None

    @staticmethod
    def _bracketing(route: Sequence[Waypoint], t: float) -> Optional[Tuple[Waypoint, Waypoint, float]]:
        for cur, nxt in zip(route, route[1:]):
            if cur.window_end < t < nxt.window_start:
                gap = nxt.window_start - cur.window_end
                progress = 1.0 if gap <= 0 else min(max((t - cur.window_end) / gap, 0.0), 1.0)
                return cur, nxt, progress
        return None

    @staticmethod
    def _nearest(route: Sequence[Waypoint], t: float) -> Waypoint:
        best = route[0]
        best_diff = min(abs(best.window_start - t), abs(best.window_end - t))
        for wp in route[1:]:
            diff = min(abs(wp.window_start - t), abs(wp.window_end - t))
            if diff < best_diff:                          # strict: ties keep the earlier waypoint
                best, best_diff = wp, diff
        return best

    # ---------- debug panel helpers ----------
    def current_waypoint(self, route: Sequence[Waypoint], query_time: float) -> Optional[Waypoint]:
        """Waypoint the vehicle is at, or the one nearest in time. None for an empty route."""
        if not route:
            return None
        wp = self._containing(route, query_time)
        return wp if wp is not None else self._nearest(route, query_time)

    def describe_status(self, route: Sequence[Waypoint], query_time: float, fault_state: bool = False) -> str:
        if fault_state:
            return "broken"
        route = self.validator.validate_route(route)
        if not route:
            return "no_route"
        if self.resolve_validated(route, query_time).is_moving:
            return "in_transit"
        wp = self.current_waypoint(route, query_time)
        if wp.is_depot:
            return "at_depot"
        if wp.is_delivery_stop:
            return "delivering"
        return "in_transit"
