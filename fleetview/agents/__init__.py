# BoundsValidator: the only place that decides whether a coordinate is legal,
# and the only place that repairs coordinates and time windows.
from .bounds_agent import BoundsValidator, StrictModeRejection

# RoutePositionResolver: turns a waypoint schedule plus a query time
# into a position, a motion state and a progress fraction.
from .route_agent import RoutePositionResolver

# FleetAgent: holds the validated snapshot of all vehicles,
# resolves them once per tick and builds the debug diagnostics.
from .fleet_agent import FleetAgent
