from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from typing import Dict, Any, List, Optional
import logging

from .models import (
    DisplayConfig, Position, Waypoint,
    ValidateRequest, ValidateResponse,
    ResolveRequest, ResolveResponse,
    FleetResolveRequest, FleetResolveResponse,
    FleetDiagnosticsRequest, FleetDiagnosticsResponse,
    RouteStatsRequest, RouteStatsResponse,
    SmoothRequest, SmoothResponse,
)
from .agents import BoundsValidator, RoutePositionResolver, FleetAgent
from .correction_history import CorrectionHistory
from .route_stats import route_stats
from .smoothing import SmoothingConfig, smooth_with

logger = logging.getLogger(__name__)


def create_app(config: Optional[DisplayConfig] = None) -> FastAPI:
    cfg = config or DisplayConfig()

    api = FastAPI(title="Fleetview Route Resolver", version="0.4")
    api.add_middleware(
        CORSMiddleware,
        allow_origins=["*"], allow_methods=["*"], allow_headers=["*"],
    )

    # Shared, read-only after startup; every request builds its own agents on top.
    api.state.config = cfg
    api.state.history = CorrectionHistory(cfg.history_size)

    def _validator(request: Request) -> BoundsValidator:
        c: DisplayConfig = request.app.state.config
        return BoundsValidator(c.bounds, log_corrections=c.log_corrections)

    def _fleet(request: Request) -> FleetAgent:
        return FleetAgent(request.app.state.config, history=request.app.state.history)

    def _enforce_strict(request: Request, validator: BoundsValidator, route: List[Waypoint],
                        current_location: Optional[Position] = None) -> None:
        # Same rule as FleetAgent in strict mode: out-of-bounds input is refused, never clamped
        if not request.app.state.config.strict_mode:
            return
        problems = [f"waypoint {c.waypoint_id}" for c in validator.check_route(route)]
        if current_location is not None and validator.validate_location(current_location)[1] is not None:
            problems.append("current location")
        if problems:
            raise HTTPException(status_code=400,
                                detail=f"Out of bounds (strict mode): {', '.join(problems)}.")

    @api.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "healthy"}

    @api.post("/validate", response_model=ValidateResponse)
    def endpoint_validate(req: ValidateRequest, request: Request) -> Dict[str, Any]:
        validator = _validator(request)
        _enforce_strict(request, validator, req.route)
        corrections = []
        route = validator.validate_route(req.route, sink=corrections.append)
        return {"status": "ok", "route": route, "corrections": corrections, "is_valid": not corrections}

    @api.post("/resolve", response_model=ResolveResponse)
    def endpoint_resolve(req: ResolveRequest, request: Request) -> Dict[str, Any]:
        validator = _validator(request)
        _enforce_strict(request, validator, req.route, req.current_location)
        resolved = RoutePositionResolver(validator).resolve(req.route, req.query_time, req.current_location)
        return {"status": "ok", **resolved.model_dump(), "state": resolved.state}

    @api.post("/fleet/resolve", response_model=FleetResolveResponse)
    def endpoint_fleet_resolve(req: FleetResolveRequest, request: Request) -> Dict[str, Any]:
        fleet = _fleet(request)
        report = fleet.ingest(req.vehicles)
        positions = fleet.tick(req.query_time)
        return {
            "status": "ok",
            "positions": positions,
            "rejected": report.rejected,
            "summary": fleet.diagnostics().summary,
        }

    @api.post("/fleet/diagnostics", response_model=FleetDiagnosticsResponse)
    def endpoint_fleet_diagnostics(req: FleetDiagnosticsRequest, request: Request) -> Dict[str, Any]:
        fleet = _fleet(request)
        fleet.ingest(req.vehicles)
        diag = fleet.diagnostics()
        return {
            "status": "ok",
            "vehicles": diag.vehicles,
            "summary": diag.summary,
            "problems": fleet.problem_vehicles(),
            "recent_corrections": fleet.history.recent(10),
        }

    @api.post("/route/stats", response_model=RouteStatsResponse)
    def endpoint_route_stats(req: RouteStatsRequest, request: Request) -> Dict[str, Any]:
        validator = _validator(request)
        route = validator.validate_route(req.route)
        status = RoutePositionResolver(validator).describe_status(route, req.query_time)
        return {"status": "ok", "stats": route_stats(route, req.query_time), "current_status": status}

    @api.post("/smooth", response_model=SmoothResponse)
    def endpoint_smooth(req: SmoothRequest, request: Request) -> Dict[str, Any]:
        scfg = SmoothingConfig.from_display(request.app.state.config)
        if req.speed is not None:
            scfg.speed = req.speed
        if req.easing is not None:
            scfg.easing = req.easing
        validator = _validator(request)
        # both ends are clamped so the eased point stays in bounds
        target = validator.clamp_position(req.target)
        previous = validator.clamp_position(req.previous)
        return {"status": "ok", "position": smooth_with(scfg, target, previous, req.dt)}

    return api


app = create_app()
