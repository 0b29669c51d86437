""" Position and Bounds are the two geometric value types of the dashboard.

Position is a point on the abstract planar grid (grid units, not pixels).
Bounds is the rectangular operating area every rendered position must fall inside.

Both are frozen: they are shared by reference between the validator, the resolver
and the fleet agent, and nothing is allowed to change them after construction. """

from typing import Tuple                                   # Type hint for (x, y) tuples
from pydantic import (                                     # Pydantic base class, config and validators
    AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator,
)


def null_to_nan(v):
    """JSON has no NaN: a producer's NaN arrives as null. Map it back so the validator can repair it."""
    return float("nan") if v is None else v


class Position(BaseModel):                                 # Immutable point on the grid
    model_config = ConfigDict(frozen=True)

    x: float                                               # Horizontal grid coordinate
    y: float                                               # Vertical grid coordinate (y grows upward)

    @model_validator(mode="before")                        # Accept [x, y] / (x, y) as well as {"x":..,"y":..}
    @classmethod
    def _coerce_pair(cls, v):
        if isinstance(v, (list, tuple)):
            if len(v) < 2:
                raise ValueError("position must be [x, y]")
            return {"x": v[0], "y": v[1]}
        return v

    @field_validator("x", "y", mode="before")             # null coordinate → NaN, clamped downstream
    @classmethod
    def _null_coordinate(cls, v):
        return null_to_nan(v)

    @property
    def coords(self) -> Tuple[float, float]:               # Unified coordinate accessor
        return float(self.x), float(self.y)


class Bounds(BaseModel):                                   # Rectangular operating area [min_x, max_x] x [min_y, max_y]
    model_config = ConfigDict(frozen=True, extra="forbid")  # Unknown keys are a config mistake, not noise

    min_x: float = Field(0.0, validation_alias=AliasChoices("min_x", "minX"))   # Left edge (inclusive)
    max_x: float = Field(70.0, validation_alias=AliasChoices("max_x", "maxX"))  # Right edge (inclusive)
    min_y: float = Field(0.0, validation_alias=AliasChoices("min_y", "minY"))   # Bottom edge (inclusive)
    max_y: float = Field(50.0, validation_alias=AliasChoices("max_y", "maxY"))  # Top edge (inclusive)

    @model_validator(mode="after")
    def _check_extent(self):
        if not self.min_x < self.max_x:                    # An empty or inverted area is a configuration error
            raise ValueError(f"bounds min_x ({self.min_x}) must be below max_x ({self.max_x})")
        if not self.min_y < self.max_y:
            raise ValueError(f"bounds min_y ({self.min_y}) must be below max_y ({self.max_y})")
        return self

    @property
    def origin(self) -> Position:                          # Minimum corner, the last-resort default position
        return Position(x=self.min_x, y=self.min_y)

    @property
    def center(self) -> Position:
        return Position(x=(self.min_x + self.max_x) / 2, y=(self.min_y + self.max_y) / 2)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y
