# Resolver output: where a vehicle is at one query time and whether it is moving.

from typing import Literal, Optional
from pydantic import BaseModel, Field

from .position import Position

MotionState = Literal["at_waypoint", "in_transit"]


class ResolvedPosition(BaseModel):
    position: Position                                   # Always inside the configured Bounds
    is_moving: bool = False                              # True only while interpolating between two waypoints
    progress: float = Field(0.0, ge=0.0, le=1.0)         # Fraction of the current gap covered (0 when stationary)
    waypoint_id: Optional[int] = None                    # Waypoint the vehicle is at (or heading to while moving)

    @property
    def state(self) -> MotionState:                      # Derived on every call, never stored
        return "in_transit" if self.is_moving else "at_waypoint"
