import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from wxcc_overrides import config
from wxcc_overrides import main as main_module
from wxcc_overrides.database import get_db
from wxcc_overrides.domain.overrides.router import get_override_service
from wxcc_overrides.main import app, http_exception_handler
from wxcc_overrides.rate_limiter import create_rate_limiter


@pytest.fixture
def client(override_service, test_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_override_service] = lambda: override_service
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "healthy"
    assert body["service"] == "wxcc-overrides-api"


def test_status(client):
    body = client.get("/status").json()

    assert body["service"] == "WxCC Overrides API"
    assert body["status"] == "running"


def test_list_containers(client):
    response = client.get("/api/overrides/containers")

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    container = body["data"][0]
    assert container["id"] == "c-1"
    assert container["activeCount"] == 1
    assert {a["agentId"]: a["status"] for a in container["agents"]} == {
        "agent-a": "engaged-now",
        "agent-b": "pending",
        "agent-c": "disengaged",
    }


def test_unknown_container_is_404(client):
    response = client.get("/api/overrides/containers/missing")

    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["error"] == "Container not found"


def test_active_agents(client):
    body = client.get("/api/overrides/active").json()

    assert [a["agentId"] for a in body["data"]] == ["agent-a"]
    assert body["data"][0]["isCurrentlyActive"] is True
    assert "timestamp" in body


def test_update_agent_schedule(client, wxcc):
    response = client.put(
        "/api/overrides/containers/c-1/agents/agent-c",
        json={"workingHours": True, "startDateTime": "2025-01-15T20:00:00.000Z", "endDateTime": "2025-01-15T21:00:00.000Z"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Agent schedule updated successfully"
    assert body["data"]["startDateTime"] == "2025-01-15T20:00"
    assert body["data"]["status"] == "pending"
    assert len(wxcc.replace_calls) == 1


def test_update_accepts_short_field_names(client):
    response = client.put(
        "/api/overrides/containers/c-1/agents/agent-c",
        json={"engaged": False, "start": "2025-01-16T08:00", "end": "2025-01-16T09:00"},
    )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "disengaged"


def test_invalid_window_is_400_with_all_errors(client, wxcc):
    response = client.put(
        "/api/overrides/containers/c-1/agents/agent-c",
        json={"workingHours": True, "startDateTime": "2025-01-15T16:00", "endDateTime": "2025-01-15T15:00"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation error"
    assert [e["field"] for e in body["errors"]] == ["startDateTime", "schedule"]
    assert body["errors"][1]["conflictingAgentId"] == "agent-a"
    assert wxcc.replace_calls == []


def test_out_of_range_date_is_400_not_500(client, wxcc):
    response = client.put(
        "/api/overrides/containers/c-1/agents/agent-c",
        json={"workingHours": True, "startDateTime": "9999-12-31T20:00", "endDateTime": "9999-12-31T23:59-05:00"},
    )

    assert response.status_code == 400
    assert [e["field"] for e in response.json()["errors"]] == ["dateTime"]
    assert wxcc.replace_calls == []


def test_update_unknown_agent_is_404(client, wxcc):
    response = client.put(
        "/api/overrides/containers/c-1/agents/nobody",
        json={"workingHours": True, "startDateTime": "2025-01-16T08:00", "endDateTime": "2025-01-16T09:00"},
    )

    assert response.status_code == 404
    assert response.json()["message"] == "Agent nobody not found in container c-1"
    assert wxcc.replace_calls == []


def test_update_with_missing_fields_is_400(client):
    response = client.put("/api/overrides/containers/c-1/agents/agent-c", json={"workingHours": True})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request data"


def test_mapping_flow(client):
    created = client.post("/api/overrides/map", json={"overrideName": "agent-b", "agentName": "Bob"})
    assert created.status_code == 200
    assert created.json()["data"]["agentName"] == "Bob"

    toggled = client.patch(
        "/api/overrides/working-hours", json={"overrideName": "agent-b", "workingHoursActive": True}
    )
    assert toggled.status_code == 200
    assert toggled.json()["message"] == "Working hours activated successfully"

    active = client.get("/api/overrides/mappings/active").json()
    assert [m["overrideName"] for m in active["data"]] == ["agent-b"]

    listing = client.get("/api/overrides/mappings").json()
    assert listing["count"] == 3
    assert [m["isMapped"] for m in listing["data"]] == [False, True, False]


def test_mapping_unknown_override_is_404(client):
    response = client.post("/api/overrides/map", json={"overrideName": "ghost", "agentName": "Nobody"})

    assert response.status_code == 404
    assert response.json()["message"] == "Override name 'ghost' not found in WxCC"


def test_mapping_blank_name_is_400(client):
    response = client.post("/api/overrides/map", json={"overrideName": "agent-a", "agentName": "   "})

    assert response.status_code == 400


def test_working_hours_conflict_is_409(client):
    client.post("/api/overrides/map", json={"overrideName": "agent-c", "agentName": "Carol"})

    response = client.patch(
        "/api/overrides/working-hours", json={"overrideName": "agent-c", "workingHoursActive": True}
    )

    assert response.status_code == 409
    assert response.json()["errors"][0]["conflictingAgentId"] == "agent-a"


def test_working_hours_without_mapping_is_404(client):
    response = client.patch(
        "/api/overrides/working-hours", json={"overrideName": "agent-a", "workingHoursActive": False}
    )

    assert response.status_code == 404


def test_unknown_route_is_json_404(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.json()["error"] == "Route not found"


def test_security_headers_present(client):
    response = client.get("/api/health")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Cache-Control"] == "no-store"


def test_rate_limit_returns_429_with_retry_after():
    limited = FastAPI()
    limited.add_exception_handler(StarletteHTTPException, http_exception_handler)

    @limited.get("/ping", dependencies=[Depends(create_rate_limiter(2, 60000, key_prefix="test"))])
    def ping():
        return {"ok": True}

    client = TestClient(limited)
    assert client.get("/ping").status_code == 200
    assert client.get("/ping").status_code == 200

    response = client.get("/ping")

    assert response.status_code == 429
    assert response.json()["error"] == "Too many requests"
    assert 0 < int(response.headers["Retry-After"]) <= 60


def test_mock_mode_lifespan_serves_demo_containers(monkeypatch, test_engine):
    monkeypatch.setattr(config, "WXCC_MOCK_MODE", True)
    monkeypatch.setattr(main_module, "engine", test_engine)

    with TestClient(app) as client:
        body = client.get("/api/overrides/containers").json()

    assert body["count"] == 2
    assert sorted(c["name"] for c in body["data"]) == ["Sales Team Override", "Support Team Override"]
