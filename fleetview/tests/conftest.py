# fleetview/tests/conftest.py
import json
from pathlib import Path
import pytest
from fastapi.testclient import TestClient

from fleetview.app import app
from fleetview.models import Bounds, Waypoint
from fleetview.agents import BoundsValidator, RoutePositionResolver

# Base directories
ROOT = Path(__file__).resolve().parents[2]        # repository root
EXAMPLES_DIR = ROOT / "examples"


@pytest.fixture(scope="session")
def client():
    # IMPORTANT: this makes server exceptions come back as HTTP 500
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture(scope="session")
def scenarios():
    """Always load scenarios.json from examples/ folder."""
    path = EXAMPLES_DIR / "scenarios.json"
    if not path.exists():
        raise FileNotFoundError(f"{path} not found.")
    with path.open(encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture(scope="session")
def payloads():
    """Load payloads.json for end-to-end flow tests."""
    path = EXAMPLES_DIR / "payloads.json"
    if not path.exists():
        raise FileNotFoundError(f"{path} not found.")
    with path.open(encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def bounds():
    return Bounds(min_x=0, max_x=70, min_y=0, max_y=50)


@pytest.fixture
def validator(bounds):
    return BoundsValidator(bounds)


@pytest.fixture
def resolver(validator):
    return RoutePositionResolver(validator)


@pytest.fixture
def route_of(scenarios):
    """Build a named route from scenarios.json as Waypoint models."""
    def _build(name):
        return [Waypoint.model_validate(w) for w in scenarios["routes"][name]]
    return _build
