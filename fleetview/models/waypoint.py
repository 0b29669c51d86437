""" This file defines the Waypoint Pydantic model, one scheduled stop of a vehicle.

It ensures:

Waypoints always have coordinates (x/y, location=[x, y] or position={x, y} may be provided).
The simulation's own field names (tiempoInicio, tiempoFin, esAlmacen, esPedido, pedido) are accepted as aliases.
Provides .position and .window accessors for unified access.
A null coordinate or window bound (how JSON carries NaN) is read as NaN rather than refused.

It deliberately does NOT reject out-of-bounds coordinates or inverted time windows: those are repaired
by the BoundsValidator so that one bad waypoint never drops a whole vehicle from the map. """

from typing import Any, List, Optional, Tuple                                   # Type hints
from pydantic import (                                   # Pydantic base class and validators
    AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator,
)

from .position import Position, null_to_nan


class Waypoint(BaseModel):                                  # One node of a vehicle's schedule
    model_config = ConfigDict(frozen=True)

    id: int                                                 # Sequence-unique id, diagnostics only (never used for ordering)
    x: float                                                # X-coordinate on the grid
    y: float                                                # Y-coordinate on the grid
    window_start: float = Field(validation_alias=AliasChoices("window_start", "windowStart", "tiempoInicio"))
    window_end: float = Field(validation_alias=AliasChoices("window_end", "windowEnd", "tiempoFin"))
    is_depot: bool = Field(False, validation_alias=AliasChoices("is_depot", "isDepot", "esAlmacen"))
    is_delivery_stop: bool = Field(False, validation_alias=AliasChoices("is_delivery_stop", "isDeliveryStop", "esPedido"))
    payload: Optional[Any] = Field(None, validation_alias=AliasChoices("payload", "pedido"))  # Opaque, carried through unchanged

    @model_validator(mode="before")                         # Normalize the coordinate formats before field parsing
    @classmethod
    def _coerce_location(cls, data):
        if not isinstance(data, dict):
            return data
        if "x" in data and "y" in data:                     # Plain x/y wins when present
            return data
        loc = data.get("location", data.get("position"))
        if loc is None:
            raise ValueError("Provide either (x,y), location=[x,y] or position={x,y} for waypoint")
        pos = loc if isinstance(loc, Position) else Position.model_validate(loc)
        out = {k: v for k, v in data.items() if k not in ("location", "position")}
        out["x"], out["y"] = pos.x, pos.y
        return out

    @field_validator("x", "y", "window_start", "window_end", mode="before")
    @classmethod
    def _null_number(cls, v):                               # null → NaN, repaired by the BoundsValidator
        return null_to_nan(v)

    @property
    def position(self) -> Position:                         # Coordinates as a Position value
        return Position(x=self.x, y=self.y)

    @property
    def window(self) -> Tuple[float, float]:                # (window_start, window_end)
        return float(self.window_start), float(self.window_end)

    def contains(self, t: float) -> bool:                   # Inclusive on both ends
        return self.window_start <= t <= self.window_end


Route = List[Waypoint]                                      # Ordered by non-decreasing window_start
