from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field
from .position import Position
from .waypoint import Waypoint
from .resolved import ResolvedPosition, MotionState
from .diagnostics import (
    Correction, CorrectionRecord, FleetSummary, RouteStats, VehicleDiagnostics, VehicleIssue,
)
from .config import EasingName

class ValidateRequest(BaseModel):
    route: List[Waypoint] = Field(..., description="Waypoints in schedule order")

class ValidateResponse(BaseModel):
    status: str
    route: List[Waypoint]
    corrections: List[Correction]
    is_valid: bool

class ResolveRequest(BaseModel):
    route: List[Waypoint] = []
    query_time: float = Field(..., description="Simulation minutes since epoch")
    current_location: Optional[Position] = None

class ResolveResponse(BaseModel):
    status: str
    position: Position
    is_moving: bool
    progress: float
    waypoint_id: Optional[int] = None
    state: MotionState

class FleetResolveRequest(BaseModel):
    vehicles: List[Dict[str, Any]] = Field(..., description="Raw vehicle records, parsed one at a time")
    query_time: float

class FleetResolveResponse(BaseModel):
    status: str
    positions: Dict[str, ResolvedPosition]
    rejected: List[str]
    summary: FleetSummary

class FleetDiagnosticsRequest(BaseModel):
    vehicles: List[Dict[str, Any]] = Field(..., description="Raw vehicle records, parsed one at a time")

class FleetDiagnosticsResponse(BaseModel):
    status: str
    vehicles: List[VehicleDiagnostics]
    summary: FleetSummary
    problems: List[VehicleIssue]
    recent_corrections: List[CorrectionRecord]

class RouteStatsRequest(BaseModel):
    route: List[Waypoint] = []
    query_time: float

class RouteStatsResponse(BaseModel):
    status: str
    stats: RouteStats
    current_status: Literal["broken", "no_route", "at_depot", "delivering", "in_transit"]

class SmoothRequest(BaseModel):
    target: Position
    previous: Position
    dt: float = Field(..., ge=0.0, description="Wall-clock seconds since the previous frame")
    speed: Optional[float] = Field(None, gt=0.0, le=10.0)
    easing: Optional[EasingName] = None

class SmoothResponse(BaseModel):
    status: str
    position: Position
