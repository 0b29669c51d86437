# fleetview/tests/test_fleet_agent.py
import threading
import pytest

from fleetview.models import Correction, DisplayConfig, Position, VehicleRecord
from fleetview.agents import FleetAgent
from fleetview.correction_history import CorrectionHistory


@pytest.fixture
def records(scenarios):
    return [VehicleRecord.model_validate(v) for v in scenarios["vehicles"]]


@pytest.fixture
def fleet(scenarios):
    return FleetAgent(DisplayConfig(**scenarios["defaults"]["config"]))


def test_ingest_skips_records_without_identifier(fleet, records):
    report = fleet.ingest(records)
    assert report.accepted == ["TA01", "TB02", "TC03"]
    assert report.rejected == ["unidentified"]
    assert set(fleet.vehicles) == {"TA01", "TB02", "TC03"}


def test_ingest_repairs_out_of_bounds_data(fleet, records):
    fleet.ingest(records)
    tc = fleet.vehicles["TC03"]
    assert tc.route[0].position == Position(x=70, y=10)
    assert tc.current_location == Position(x=70, y=0)
    # the caller's record is left alone
    assert records[2].route[0].x == 80


def test_tick_resolves_every_vehicle_at_one_time(fleet, records):
    fleet.ingest(records)
    out = fleet.tick(30)

    assert set(out) == {"TA01", "TB02", "TC03"}
    assert out["TA01"].position == Position(x=15, y=10) and out["TA01"].is_moving
    assert out["TB02"].position == Position(x=30, y=20) and not out["TB02"].is_moving
    assert out["TC03"].position == Position(x=20, y=10) and not out["TC03"].is_moving
    assert fleet.safe_position("TA01", 60) == Position(x=20, y=10)
    assert fleet.status("TA01", 30) == "in_transit"


def test_unknown_vehicle_raises_key_error(fleet, records):
    fleet.ingest(records)
    with pytest.raises(KeyError):
        fleet.safe_position("ZZ99", 0)


def test_diagnostics_bundle(fleet, records):
    fleet.ingest(records)
    diag = fleet.diagnostics()

    by_id = {d.identifier: d for d in diag.vehicles}
    assert by_id["TA01"].location_valid and by_id["TA01"].route_valid
    assert by_id["TB02"].location_valid and by_id["TB02"].messages == []
    tc = by_id["TC03"]
    assert not tc.location_valid and not tc.route_valid
    assert tc.invalid_route_nodes == 1 and tc.total_route_nodes == 2
    assert tc.corrected_location == Position(x=70, y=0)
    assert tc.corrections == 2
    assert by_id["unidentified"].rejected

    s = diag.summary
    assert (s.total, s.valid, s.invalid, s.corrected, s.total_validation_errors) == (4, 2, 2, 1, 2)
    assert s.last_validation_time is not None


def test_corrections_land_in_history(fleet, records):
    fleet.ingest(records)
    kinds = [e.kind for e in fleet.history.recent()]
    assert kinds == ["position", "route"]
    assert all(e.identifier == "TC03" for e in fleet.history.recent())
    assert fleet.history.stats() == {"total": 2, "kept": 2, "position": 1, "route": 1}


def test_problem_vehicles_severity(fleet, records):
    fleet.ingest(records)
    problems = {p.identifier: p for p in fleet.problem_vehicles()}
    assert set(problems) == {"TC03", "unidentified"}
    assert problems["TC03"].severity == "high"
    assert problems["unidentified"].issues == ["Missing identifier"]


def test_route_only_problem_is_medium(fleet):
    rec = VehicleRecord.model_validate({"codigo": "TD04", "route": [
        {"id": 1, "x": 5, "y": 5, "window_start": 0, "window_end": 1},
        {"id": 2, "x": 6, "y": 5, "window_start": 2, "window_end": 3},
        {"id": 3, "x": 99, "y": 5, "window_start": 4, "window_end": 5},
    ]})
    fleet.ingest([rec])
    [issue] = fleet.problem_vehicles()
    assert issue.severity == "medium"


def test_strict_mode_rejects_instead_of_repairing(records):
    fleet = FleetAgent(DisplayConfig(strict_mode=True))
    report = fleet.ingest(records)
    assert report.accepted == ["TA01", "TB02"]
    assert report.rejected == ["TC03", "unidentified"]
    assert set(fleet.tick(0)) == {"TA01", "TB02"}
    assert len(fleet.history) == 0

    tc = {d.identifier: d for d in fleet.diagnostics().vehicles}["TC03"]
    assert tc.rejected and tc.invalid_route_nodes == 1


def test_ingest_replaces_snapshot_wholesale(fleet, records):
    fleet.ingest(records)
    fleet.ingest([records[1]])
    assert set(fleet.tick(0)) == {"TB02"}
    assert fleet.diagnostics().summary.total == 1


def test_duplicate_identifier_keeps_last(fleet):
    a = VehicleRecord.model_validate({"codigo": "TA01", "ubicacionActual": {"x": 1, "y": 1}})
    b = VehicleRecord.model_validate({"codigo": "TA01", "ubicacionActual": {"x": 2, "y": 2}})
    report = fleet.ingest([a, b])
    assert report.accepted == ["TA01"]
    assert fleet.tick(0)["TA01"].position == Position(x=2, y=2)


def test_shared_history_is_bounded(records):
    history = CorrectionHistory(size=3)
    fleet = FleetAgent(DisplayConfig(), history=history)
    for _ in range(3):
        fleet.ingest(records)
    assert len(history) == 3
    assert history.total == 6


def test_malformed_record_is_rejected_alone(fleet, scenarios):
    raw = [
        scenarios["vehicles"][0],
        {"codigo": "TX09", "route": [{"id": 1, "x": "far", "y": 1, "window_start": 0, "window_end": 1}]},
        {"codigo": "TB02", "route": [{"id": 1, "x": None, "y": 20, "window_start": None, "window_end": None}]},
    ]
    report = fleet.ingest(raw)
    assert report.accepted == ["TA01", "TB02"]
    assert report.rejected == ["TX09"]

    # null coordinate and window were repaired, not refused
    tb = fleet.vehicles["TB02"]
    assert tb.route[0].position == Position(x=0, y=20)
    assert tb.route[0].window == (0.0, 0.0)
    assert fleet.safe_position("TB02", 5) == Position(x=0, y=20)

    problems = {p.identifier: p for p in fleet.problem_vehicles()}
    assert problems["TX09"].severity == "high"
    assert problems["TX09"].issues[0].startswith("Malformed record")
    assert fleet.diagnostics().summary.total == 3


def test_malformed_record_without_identifier(fleet):
    report = fleet.ingest([{"route": "not a route"}])
    assert report.rejected == ["unidentified"]
    [issue] = fleet.problem_vehicles()
    assert issue.issues[0].startswith("Malformed record")


def test_history_counts_concurrent_records():
    history = CorrectionHistory(size=5)
    c = Correction(waypoint_id=1, original=Position(x=99, y=1), corrected=Position(x=70, y=1))

    def worker():
        for _ in range(250):
            history.record("TA01", c)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert history.total == 2000
    assert len(history) == 5
