""" FleetAgent holds the current snapshot of vehicle records for the dashboard. ingest(...) validates every record
once (dropping malformed records and records without an identifier, repairing or, in strict mode, rejecting
out-of-bounds data) and swaps the whole snapshot in one assignment; tick(...) then resolves every accepted vehicle
against the same query time.
It also builds the diagnostics bundle of the debug overlay: per-vehicle validity, correction counts, a fleet summary,
the rolling correction history and a severity-ranked list of problem vehicles. """

from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union
import logging

from pydantic import ValidationError

from ..models import (
    Correction, DisplayConfig, FleetDiagnostics, FleetSummary, IngestReport,
    Position, ResolvedPosition, VehicleDiagnostics, VehicleIssue, VehicleRecord,
)
from ..correction_history import CorrectionHistory
from .bounds_agent import BoundsValidator, StrictModeRejection
from .route_agent import RoutePositionResolver

logger = logging.getLogger(__name__)

UNIDENTIFIED = "unidentified"
_ID_KEYS = ("identifier", "codigo", "code", "id")


def _raw_identifier(raw: Any) -> str:
    # best-effort label for a record that failed parsing
    if isinstance(raw, dict):
        for key in _ID_KEYS:
            v = raw.get(key)
            if isinstance(v, (str, int)) and not isinstance(v, bool) and str(v).strip():
                return str(v).strip()
    return UNIDENTIFIED


class FleetAgent:
    def __init__(self, config: DisplayConfig, history: Optional[CorrectionHistory] = None):
        self.config = config
        self.validator = BoundsValidator(config.bounds, log_corrections=config.log_corrections)
        self.resolver = RoutePositionResolver(self.validator)
        self.history = history if history is not None else CorrectionHistory(config.history_size)

        self._vehicles: Dict[str, VehicleRecord] = {}      # identifier -> validated record
        self._diagnostics: List[VehicleDiagnostics] = []
        self._summary = FleetSummary()

    @property
    def vehicles(self) -> Dict[str, VehicleRecord]:
        return dict(self._vehicles)

    # ---------- ingest ----------
    def _inspect(self, rec: VehicleRecord) -> Tuple[VehicleDiagnostics, Optional[VehicleRecord]]:
        if not self.validator.validate_truck_record(rec):
            diag = VehicleDiagnostics(identifier=UNIDENTIFIED, location_valid=False, route_valid=False,
                                      total_route_nodes=len(rec.route), rejected=True,
                                      messages=["Missing identifier"])
            return diag, None

        vid = rec.identifier
        diag = VehicleDiagnostics(identifier=vid, total_route_nodes=len(rec.route))

        location = rec.current_location
        loc_fix: Optional[Correction] = None
        if location is not None:
            location, loc_fix = self.validator.validate_location(location)
            if loc_fix is not None:
                diag.location_valid = False
                diag.corrected_location = location
                diag.messages.append(
                    f"Location ({loc_fix.original.x:.2f}, {loc_fix.original.y:.2f}) out of bounds, "
                    f"corrected to ({location.x:.2f}, {location.y:.2f})")
        else:
            diag.messages.append("No current location")

        route_fixes: List[Correction] = []
        if self.config.strict_mode:
            try:
                if loc_fix is not None:
                    raise StrictModeRejection("current location out of bounds", [loc_fix])
                route = self.validator.require_valid_route(rec.route)
            except StrictModeRejection as exc:
                pending = self.validator.check_route(rec.route)
                diag.invalid_route_nodes = len(pending)
                diag.route_valid = not pending
                diag.rejected = True
                diag.messages.append(f"Rejected in strict mode: {exc}")
                logger.error("%s rejected in strict mode: %s", vid, exc)
                return diag, None
        else:
            route = self.validator.validate_route(rec.route, sink=route_fixes.append)

        if route_fixes:
            diag.route_valid = False
            diag.invalid_route_nodes = len(route_fixes)
            diag.messages.append(f"{len(route_fixes)} route node(s) corrected")

        if loc_fix is not None:
            self.history.record(vid, loc_fix, kind="position")
        for c in route_fixes:
            self.history.record(vid, c, kind="route")

        clean = rec.model_copy(update={"route": route, "current_location": location})
        return diag, clean

    def _parse(self, raw: Any) -> Tuple[Optional[VehicleDiagnostics], Optional[VehicleRecord]]:
        if isinstance(raw, VehicleRecord):
            return None, raw
        try:
            return None, VehicleRecord.model_validate(raw)
        except ValidationError as exc:
            vid = _raw_identifier(raw)
            logger.error("Malformed vehicle record %s skipped: %d error(s)", vid, exc.error_count())
            diag = VehicleDiagnostics(identifier=vid, rejected=True,
                                      messages=[f"Malformed record: {err['msg']} at {err['loc']}"
                                                for err in exc.errors()])
            return diag, None

    def ingest(self, records: Iterable[Union[VehicleRecord, Dict[str, Any]]]) -> IngestReport:
        """
        Validate a fresh batch from the simulation and replace the snapshot wholesale.
        Raw dicts are parsed one at a time, so a record pydantic refuses is rejected on its own.
        """
        snapshot: Dict[str, VehicleRecord] = {}
        diagnostics: List[VehicleDiagnostics] = []
        report = IngestReport()

        for raw in records:
            diag, rec = self._parse(raw)
            if rec is None:
                diagnostics.append(diag)
                report.rejected.append(diag.identifier)
                continue
            diag, clean = self._inspect(rec)
            diagnostics.append(diag)
            if clean is None:
                report.rejected.append(diag.identifier)
                continue
            if clean.identifier in snapshot:
                logger.warning("Duplicate vehicle identifier %s, keeping the last record", clean.identifier)
            else:
                report.accepted.append(clean.identifier)
            snapshot[clean.identifier] = clean

        valid = sum(1 for d in diagnostics if d.location_valid and d.route_valid and not d.rejected)
        accepted = [d for d in diagnostics if not d.rejected]
        self._summary = FleetSummary(
            total=len(diagnostics),
            valid=valid,
            invalid=len(diagnostics) - valid,
            corrected=sum(1 for d in accepted if d.corrections > 0),
            total_validation_errors=sum(d.corrections for d in accepted),
            last_validation_time=datetime.now(timezone.utc),
        )
        self._diagnostics = diagnostics
        self._vehicles = snapshot
        return report

    # ---------- per tick ----------
    def tick(self, query_time: float) -> Dict[str, ResolvedPosition]:
        """Resolve every accepted vehicle against one shared query time."""
        vehicles = self._vehicles                           # one snapshot for the whole tick
        return {
            vid: self.resolver.resolve_validated(rec.route, query_time, rec.current_location)
            for vid, rec in vehicles.items()
        }

    def safe_position(self, identifier: str, query_time: float) -> Position:
        rec = self._vehicles.get(identifier)
        if rec is None:
            raise KeyError(f"Unknown vehicle '{identifier}'")
        return self.resolver.resolve_validated(rec.route, query_time, rec.current_location).position

    def status(self, identifier: str, query_time: float) -> str:
        rec = self._vehicles.get(identifier)
        if rec is None:
            raise KeyError(f"Unknown vehicle '{identifier}'")
        return self.resolver.describe_status(rec.route, query_time, rec.fault_state)

    # ---------- diagnostics ----------
    def diagnostics(self) -> FleetDiagnostics:
        return FleetDiagnostics(vehicles=list(self._diagnostics), summary=self._summary)

    def problem_vehicles(self) -> List[VehicleIssue]:
        out: List[VehicleIssue] = []
        for d in self._diagnostics:
            issues: List[str] = []
            severity = "low"

            if d.identifier == UNIDENTIFIED and "Missing identifier" in d.messages:
                out.append(VehicleIssue(identifier=d.identifier, issues=["Missing identifier"], severity="high"))
                continue

            if not d.location_valid:
                issues.append("Location out of bounds")
                severity = "high"

            if d.invalid_route_nodes > 0:
                issues.append(f"{d.invalid_route_nodes} invalid route node(s)")
                if d.invalid_route_nodes > d.total_route_nodes * 0.5:
                    severity = "high"
                elif severity != "high":
                    severity = "medium"

            if d.rejected:
                issues.extend(m for m in d.messages if m.startswith(("Rejected", "Malformed")))
                severity = "high"

            if issues:
                out.append(VehicleIssue(identifier=d.identifier, issues=issues, severity=severity))
        return out
