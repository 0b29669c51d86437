""" BoundsValidator is the single source of truth for "is this point legal" and the only place that repairs
illegal data. It clamps coordinates into the configured Bounds, collapses malformed time windows into
zero-duration stops, and reports every repair (log line + optional correction sink) instead of raising.

Out-of-bounds data is expected from the simulation (floating point drift, off-by-one grid edges), so the only
hard failure here is a vehicle record without an identifier, which cannot be tracked at all. """

from __future__ import annotations
from typing import Callable, List, Optional, Sequence, Tuple
import logging
import math

from ..models import Bounds, Correction, Position, VehicleRecord, Waypoint

logger = logging.getLogger(__name__)

CorrectionSink = Callable[[Correction], None]


class StrictModeRejection(ValueError):
    """Raised by require_valid_route when strict mode forbids repairing a route."""

    def __init__(self, message: str, corrections: List[Correction]):
        super().__init__(message)
        self.corrections = corrections


def _clamp_axis(v: float, lo: float, hi: float) -> float:
    if math.isnan(v):                                    # NaN has no nearest edge; use the minimum one
        return lo
    return max(lo, min(hi, v))


class BoundsValidator:
    def __init__(self, bounds: Bounds, on_correction: Optional[CorrectionSink] = None,
                 log_corrections: bool = True):
        self.bounds = bounds
        self.on_correction = on_correction
        self.log_corrections = log_corrections

    # ---------- points ----------
    def is_valid(self, x: float, y: float) -> bool:
        b = self.bounds
        return b.min_x <= x <= b.max_x and b.min_y <= y <= b.max_y   # NaN compares False, so it is invalid

    def is_valid_position(self, p: Position) -> bool:
        return self.is_valid(p.x, p.y)

    def clamp(self, x: float, y: float) -> Position:
        b = self.bounds
        return Position(x=_clamp_axis(x, b.min_x, b.max_x), y=_clamp_axis(y, b.min_y, b.max_y))

    def clamp_position(self, p: Position) -> Position:
        return self.clamp(p.x, p.y)

    def validate_location(self, p: Position) -> Tuple[Position, Optional[Correction]]:
        """Clamp a single location; the Correction is None when nothing had to change."""
        if self.is_valid_position(p):
            return p, None
        fixed = self.clamp_position(p)
        return fixed, Correction(waypoint_id=None, original=p, corrected=fixed)

    def area_within_bounds(self, top_left: Position, bottom_right: Position) -> bool:
        # y grows upward, so the top-left corner has the larger y
        return (self.is_valid_position(top_left) and self.is_valid_position(bottom_right)
                and top_left.x <= bottom_right.x and top_left.y >= bottom_right.y)

    # ---------- routes ----------
    def _repair_window(self, wp: Waypoint, prev_end: Optional[float]) -> Tuple[float, float]:
        start, end = wp.window
        if math.isfinite(start) and math.isfinite(end) and start <= end:
            return start, end
        if math.isfinite(start):
            anchor = start
        elif math.isfinite(end):
            anchor = end
        else:
            anchor = prev_end if prev_end is not None else 0.0
        logger.warning("Waypoint %s has malformed window [%s, %s]; treating it as a stop at t=%s",
                       wp.id, start, end, anchor)
        return anchor, anchor

    def _emit(self, c: Correction) -> None:
        if self.log_corrections:
            logger.warning("Waypoint %s corrected: (%s, %s) -> (%s, %s)", c.waypoint_id,
                           c.original.x, c.original.y, c.corrected.x, c.corrected.y)
        if self.on_correction is not None:
            self.on_correction(c)

    def check_route(self, route: Optional[Sequence[Waypoint]]) -> List[Correction]:
        """Report the corrections validate_route would make, without emitting anything."""
        out: List[Correction] = []
        for wp in route or []:
            if not self.is_valid(wp.x, wp.y):
                out.append(Correction(waypoint_id=wp.id, original=wp.position, corrected=self.clamp(wp.x, wp.y)))
        return out

    def validate_route(self, route: Optional[Sequence[Waypoint]],
                       sink: Optional[CorrectionSink] = None) -> List[Waypoint]:
        """
        Return a new route with every waypoint clamped into bounds and every malformed window collapsed.
        Emits one Correction per waypoint whose original position was invalid. Idempotent: a validated
        route passes through unchanged and emits nothing.
        """
        out: List[Waypoint] = []
        prev_end: Optional[float] = None
        for wp in route or []:
            updates = {}
            start, end = self._repair_window(wp, prev_end)
            if (start, end) != wp.window:
                updates["window_start"], updates["window_end"] = start, end

            if not self.is_valid(wp.x, wp.y):
                fixed = self.clamp(wp.x, wp.y)
                updates["x"], updates["y"] = fixed.x, fixed.y
                c = Correction(waypoint_id=wp.id, original=wp.position, corrected=fixed)
                self._emit(c)
                if sink is not None:
                    sink(c)

            out.append(wp.model_copy(update=updates) if updates else wp)
            prev_end = end
        return out

    def require_valid_route(self, route: Optional[Sequence[Waypoint]]) -> List[Waypoint]:
        """Strict-mode counterpart of validate_route: refuse to repair out-of-bounds waypoints."""
        corrections = self.check_route(route)
        if corrections:
            ids = [c.waypoint_id for c in corrections]
            raise StrictModeRejection(f"{len(corrections)} waypoint(s) out of bounds: {ids}", corrections)
        return self.validate_route(route)             # windows are still normalised

    # ---------- vehicle records ----------
    def validate_truck_record(self, vehicle: Optional[VehicleRecord]) -> bool:
        """
        Best-effort sanity check. False only when the record is unusable (absent, or without an identifier).
        Out-of-bounds locations and route nodes are reported, never rejected: they get repaired downstream.
        """
        if vehicle is None:
            logger.error("Vehicle record is missing")
            return False
        if not vehicle.has_identifier:
            logger.error("Vehicle record without identifier, skipping: %r", vehicle)
            return False

        loc = vehicle.current_location
        if loc is not None and not self.is_valid_position(loc):
            logger.warning("%s: current location (%s, %s) out of bounds", vehicle.identifier, loc.x, loc.y)

        invalid = sum(1 for wp in vehicle.route if not self.is_valid(wp.x, wp.y))
        if invalid:
            logger.warning("%s: %d route node(s) out of bounds", vehicle.identifier, invalid)
        return True
