import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.services.resolution import get_coordinator
from catastro.errors import InternalFault
from catastro.models import ParcelDetail, ResolutionOutcome


class RecordingCoordinator:
    def __init__(self, outcome=None, error=None):
        self.outcome = outcome or ResolutionOutcome(diagnostic="nothing here")
        self.error = error
        self.points = []

    def resolve(self, point):
        self.points.append(point)
        if self.error:
            raise self.error
        return self.outcome


@pytest.fixture()
def coordinator():
    fake = RecordingCoordinator(
        ResolutionOutcome(
            reference="1234567AB1234",
            location_label="CALLE MAYOR 5",
            distance_meters=4.2,
            detail=ParcelDetail(full_address="CL MAYOR Nº 5", primary_use="Residential"),
            diagnostic="resolved via expanded search, radius 5m",
        )
    )
    app.dependency_overrides[get_coordinator] = lambda: fake
    yield fake
    app.dependency_overrides.clear()


@pytest.fixture()
def client():
    return TestClient(app)


def test_resolve_returns_outcome_json(client, coordinator):
    resp = client.post("/parcels/resolve", json={"x": 440000, "y": 4474000.5, "referenceSystemId": "EPSG:25830"})
    assert resp.status_code == 200, resp.text
    assert resp.json() == {
        "referenceOriginal": "1234567AB1234",
        "locationLabel": "CALLE MAYOR 5",
        "distanceMeters": 4.2,
        "detail": {
            "fullAddress": "CL MAYOR Nº 5",
            "primaryUse": "Residential",
            "areaDescription": None,
            "constructionAge": None,
            "assessedValue": None,
        },
        "message": "resolved via expanded search, radius 5m",
    }
    point = coordinator.points[0]
    assert (point.x, point.y, point.reference_system_id) == (440000, 4474000.5, "EPSG:25830")


def test_legacy_field_names_are_accepted(client, coordinator):
    resp = client.post("/parcels/resolve", json={"utmX": 1.5, "utmY": 2.5, "srs": "EPSG:25829"})
    assert resp.status_code == 200, resp.text
    assert coordinator.points[0].reference_system_id == "EPSG:25829"


@pytest.mark.parametrize(
    "body",
    [
        {"y": 1.0, "referenceSystemId": "EPSG:25830"},
        {"x": "440000", "y": 1.0, "referenceSystemId": "EPSG:25830"},
        {"x": 1.0, "y": 1.0, "referenceSystemId": ""},
        {"x": 1.0, "y": 1.0, "referenceSystemId": "   "},
        {"x": 1.0, "y": 1.0, "referenceSystemId": 25830},
    ],
)
def test_invalid_input_is_rejected_before_resolution(client, coordinator, body):
    resp = client.post("/parcels/resolve", json=body)
    assert resp.status_code == 422
    assert coordinator.points == []


def test_exhausted_outcome_is_still_200(client):
    fake = RecordingCoordinator()
    app.dependency_overrides[get_coordinator] = lambda: fake
    try:
        resp = client.post("/parcels/resolve", json={"x": 1, "y": 2, "referenceSystemId": "EPSG:25830"})
    finally:
        app.dependency_overrides.clear()
    assert resp.status_code == 200
    assert resp.json()["referenceOriginal"] is None
    assert resp.json()["message"] == "nothing here"


def test_internal_fault_is_500(client):
    app.dependency_overrides[get_coordinator] = lambda: RecordingCoordinator(error=InternalFault("bug"))
    try:
        resp = client.post("/parcels/resolve", json={"x": 1, "y": 2, "referenceSystemId": "EPSG:25830"})
    finally:
        app.dependency_overrides.clear()
    assert resp.status_code == 500


def test_get_is_not_allowed(client):
    assert client.get("/parcels/resolve").status_code == 405


def test_probe_plan(client):
    resp = client.get("/debug/probes", params={"x": 100.0, "y": 200.0, "srs": "EPSG:25830"})
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["probes"]) == 40
    assert data["probes"][0] == {"radiusMeters": 5.0, "angleDegrees": 0.0, "x": 105.0, "y": 200.0}
    assert data["probes"][1]["angleDegrees"] == 45.0
    assert data["probes"][-1]["radiusMeters"] == 100.0


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "ok"
    health = client.get("/health").json()
    assert health["status"] == "ok"
    assert health["upstream"]["base_url"].startswith("http")
