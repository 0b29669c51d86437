# fleetview/tests/test_client_like_flow.py
import json

from fastapi.testclient import TestClient

from fleetview.app import create_app
from fleetview.models import Bounds, DisplayConfig


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"


def test_flow_validate_resolve_fleet(client, payloads):
    # /validate
    r = client.post("/validate", json=payloads["validate"])
    assert r.status_code == 200, f"/validate failed: {r.status_code} {r.text}"
    out = r.json()
    assert out["status"] == "ok"
    assert out["is_valid"] is False
    assert len(out["corrections"]) == 1
    assert out["route"][0]["x"] == 70 and out["route"][0]["y"] == 50

    # /validate again on its own output → nothing left to fix
    r = client.post("/validate", json={"route": out["route"]})
    assert r.status_code == 200
    assert r.json()["is_valid"] is True
    assert r.json()["route"] == out["route"]

    # /resolve
    r = client.post("/resolve", json=payloads["resolve"])
    assert r.status_code == 200, f"/resolve failed: {r.status_code} {r.text}"
    res = r.json()
    assert res["position"] == {"x": 5.0, "y": 0.0}
    assert res["is_moving"] is True
    assert abs(res["progress"] - 0.5) < 1e-12
    assert res["state"] == "in_transit"

    # /fleet/resolve
    r = client.post("/fleet/resolve", json=payloads["fleet"])
    assert r.status_code == 200, f"/fleet/resolve failed: {r.status_code} {r.text}"
    fleet = r.json()
    assert fleet["positions"]["TA01"]["position"] == {"x": 15.0, "y": 10.0}
    assert fleet["positions"]["TB02"]["position"] == {"x": 30.0, "y": 20.0}
    assert fleet["rejected"] == []
    assert fleet["summary"]["total"] == 2


def test_resolve_empty_route_without_location(client):
    r = client.post("/resolve", json={"route": [], "query_time": 12})
    assert r.status_code == 200
    assert r.json()["position"] == {"x": 0.0, "y": 0.0}
    assert r.json()["is_moving"] is False


def test_resolve_missing_query_time_is_422(client, payloads):
    body = dict(payloads["resolve"])
    body.pop("query_time")
    r = client.post("/resolve", json=body)
    assert r.status_code == 422


def test_fleet_diagnostics(client, scenarios):
    r = client.post("/fleet/diagnostics", json={"vehicles": scenarios["vehicles"]})
    assert r.status_code == 200, r.text
    out = r.json()
    assert out["summary"]["total"] == 4
    assert out["summary"]["corrected"] == 1
    severities = {p["identifier"]: p["severity"] for p in out["problems"]}
    assert severities == {"TC03": "high", "unidentified": "high"}
    assert any(c["identifier"] == "TC03" for c in out["recent_corrections"])


def test_route_stats_endpoint(client, scenarios):
    r = client.post("/route/stats", json={"route": scenarios["routes"]["depot_run"], "query_time": 35})
    assert r.status_code == 200
    out = r.json()
    assert out["stats"]["completed_nodes"] == 1
    assert out["stats"]["current_node_index"] == 1
    assert out["current_status"] == "delivering"


def test_smooth_endpoint(client):
    r = client.post("/smooth", json={"target": {"x": 10, "y": 0}, "previous": {"x": 0, "y": 0},
                                     "dt": 0.05, "speed": 0.5, "easing": "linear"})
    assert r.status_code == 200
    assert r.json()["position"] == {"x": 5.0, "y": 0.0}

    r = client.post("/smooth", json={"target": {"x": 10, "y": 0}, "previous": {"x": 0, "y": 0},
                                     "dt": 0.05, "speed": 42})
    assert r.status_code == 422


def test_strict_mode_app_rejects_bad_route(payloads):
    strict = TestClient(create_app(DisplayConfig(strict_mode=True)), raise_server_exceptions=False)
    bad = {"route": payloads["validate"]["route"], "query_time": 5}
    r = strict.post("/resolve", json=bad)
    assert r.status_code == 400
    assert "strict mode" in r.json()["detail"]


def test_custom_bounds_app():
    small = TestClient(create_app(DisplayConfig(bounds=Bounds(min_x=0, max_x=10, min_y=0, max_y=10))))
    r = small.post("/resolve", json={"route": [{"id": 1, "x": 30, "y": 30, "window_start": 0, "window_end": 9}],
                                     "query_time": 3})
    assert r.status_code == 200
    assert r.json()["position"] == {"x": 10.0, "y": 10.0}


def test_fleet_resolve_survives_null_window_and_bad_record(client, payloads):
    body = json.loads(json.dumps(payloads["fleet"]))
    body["vehicles"][1]["route"] = [{"id": 1, "x": 30, "y": 20, "window_start": 0, "window_end": None}]
    body["vehicles"].append({"codigo": "TX09", "route": [{"id": 1, "x": "far", "y": 1,
                                                          "window_start": 0, "window_end": 1}]})
    r = client.post("/fleet/resolve", json=body)
    assert r.status_code == 200, r.text
    out = r.json()
    assert out["positions"]["TA01"]["position"] == {"x": 15.0, "y": 10.0}
    assert out["positions"]["TB02"]["position"] == {"x": 30.0, "y": 20.0}
    assert out["rejected"] == ["TX09"]
    assert out["summary"]["total"] == 3


def test_strict_mode_app_rejects_out_of_bounds_location():
    strict = TestClient(create_app(DisplayConfig(strict_mode=True)), raise_server_exceptions=False)
    r = strict.post("/resolve", json={"route": [], "query_time": 5, "current_location": {"x": 500, "y": -40}})
    assert r.status_code == 400
    assert "current location" in r.json()["detail"]

    r = strict.post("/resolve", json={"route": [], "query_time": 5, "current_location": {"x": 5, "y": 4}})
    assert r.status_code == 200
    assert r.json()["position"] == {"x": 5.0, "y": 4.0}


def test_strict_mode_validate_refuses_to_repair(payloads):
    strict = TestClient(create_app(DisplayConfig(strict_mode=True)), raise_server_exceptions=False)
    r = strict.post("/validate", json=payloads["validate"])
    assert r.status_code == 400
    assert "waypoint 1" in r.json()["detail"]
