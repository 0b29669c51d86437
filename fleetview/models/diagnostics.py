""" Diagnostic records produced while validating vehicles.

Correction is the per-waypoint record emitted by the validator whenever it clamps a coordinate.
VehicleDiagnostics and FleetSummary make up the bundle shown in the debug overlay, and
VehicleIssue is one row of the "problem vehicles" list. RouteStats backs the route progress panel. """

from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from .position import Position


class Correction(BaseModel):                              # One clamped coordinate
    waypoint_id: Optional[int] = None                     # None for a vehicle's current location
    original: Position
    corrected: Position


class CorrectionRecord(BaseModel):                        # History entry kept by CorrectionHistory
    timestamp: datetime
    identifier: str
    kind: Literal["position", "route"]
    original: Position
    corrected: Position
    message: str


class VehicleDiagnostics(BaseModel):
    identifier: str
    location_valid: bool = True
    route_valid: bool = True
    corrected_location: Optional[Position] = None
    invalid_route_nodes: int = 0
    total_route_nodes: int = 0
    rejected: bool = False                                # Dropped: strict mode, malformed record or no identifier
    messages: List[str] = Field(default_factory=list)

    @property
    def corrections(self) -> int:                         # Coordinates repaired for this vehicle
        return self.invalid_route_nodes + (1 if self.corrected_location is not None else 0)


class FleetSummary(BaseModel):
    total: int = 0
    valid: int = 0
    invalid: int = 0
    corrected: int = 0
    total_validation_errors: int = 0
    last_validation_time: Optional[datetime] = None


class FleetDiagnostics(BaseModel):
    vehicles: List[VehicleDiagnostics] = Field(default_factory=list)
    summary: FleetSummary = Field(default_factory=FleetSummary)


class VehicleIssue(BaseModel):
    identifier: str
    issues: List[str]
    severity: Literal["low", "medium", "high"]


class RouteStats(BaseModel):
    total_nodes: int = 0
    completed_nodes: int = 0
    current_node_index: int = -1
    estimated_completion: float = 0.0
    total_distance: float = 0.0


class IngestReport(BaseModel):
    accepted: List[str] = Field(default_factory=list)
    rejected: List[str] = Field(default_factory=list)    # "unidentified" stands in for records without an id
