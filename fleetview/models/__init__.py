from .position import Position, Bounds
from .waypoint import Waypoint, Route
from .vehicle import VehicleRecord
from .resolved import ResolvedPosition, MotionState
from .config import DisplayConfig, ConfigError, load_config
from .diagnostics import (
    Correction, CorrectionRecord,
    VehicleDiagnostics, FleetSummary, FleetDiagnostics,
    VehicleIssue, RouteStats, IngestReport,
)

from .api_schemas import (
    ValidateRequest, ValidateResponse,
    ResolveRequest, ResolveResponse,
    FleetResolveRequest, FleetResolveResponse,
    FleetDiagnosticsRequest, FleetDiagnosticsResponse,
    RouteStatsRequest, RouteStatsResponse,
    SmoothRequest, SmoothResponse,
)
