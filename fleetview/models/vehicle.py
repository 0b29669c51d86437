# Defines the VehicleRecord model: one vehicle as supplied by the simulation on each polling interval.

from typing import Any, List, Optional                                  # Type hints for lists and optional values
from pydantic import AliasChoices, BaseModel, Field, field_validator    # Pydantic BaseModel and field-level validator

from .position import Position
from .waypoint import Waypoint


class VehicleRecord(BaseModel):                                          # Raw vehicle record, every field but the route optional
    identifier: Optional[str] = Field(None, validation_alias=AliasChoices("identifier", "codigo", "code", "id"))
    route: List[Waypoint] = Field(default_factory=list)                  # Waypoint schedule (may be empty)
    current_location: Optional[Position] = Field(                        # Last known location, used when the route is empty
        None, validation_alias=AliasChoices("current_location", "currentKnownLocation", "ubicacionActual"))
    load_state: Optional[Any] = Field(None, validation_alias=AliasChoices("load_state", "loadState", "carga"))
    fault_state: bool = Field(False, validation_alias=AliasChoices("fault_state", "faultState", "enAveria"))

    @field_validator("identifier", mode="before")                        # Normalize identifier before assignment
    @classmethod
    def _coerce_identifier(cls, v):
        if v is None:                                                    # Missing → record cannot be tracked
            return None
        if isinstance(v, bool):                                          # bool is an int subclass, never a valid id
            return None
        if isinstance(v, (int, float)):                                  # Numeric ids → canonical string form
            return str(int(v)) if float(v).is_integer() else str(v)
        v = str(v).strip()
        return v or None                                                 # Blank string counts as missing

    @field_validator("route", mode="before")
    @classmethod
    def _coerce_route(cls, v):
        return [] if v is None else v                                    # null route from the wire → empty schedule

    @field_validator("fault_state", mode="before")
    @classmethod
    def _coerce_fault(cls, v):
        return bool(v) if v is not None else False

    @property
    def has_identifier(self) -> bool:
        return self.identifier is not None
