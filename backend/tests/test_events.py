"""
Tests for event CRUD endpoints.
"""
from fastapi.testclient import TestClient


def test_create_event_defaults(client: TestClient):
    response = client.post("/api/events", json={"title": "  Office Chess  "})
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Office Chess"
    assert data["status"] == "draft"
    assert data["min_participants"] == 2
    assert data["max_participants"] is None
    assert data["winner_id"] is None


def test_create_event_validation(client: TestClient):
    assert client.post("/api/events", json={"title": ""}).status_code == 422
    assert client.post("/api/events", json={"title": "X", "min_participants": 1}).status_code == 422
    assert (
        client.post("/api/events", json={"title": "X", "min_participants": 4, "max_participants": 3}).status_code
        == 422
    )
    assert client.post("/api/events", json={"title": "X", "status": "bogus"}).status_code == 422


def test_list_events_with_status_filter(client: TestClient):
    client.post("/api/events", json={"title": "Draft"})
    client.post("/api/events", json={"title": "Open", "status": "registration_open"})

    assert [e["title"] for e in client.get("/api/events").json()] == ["Draft", "Open"]
    filtered = client.get("/api/events", params={"status": "registration_open"}).json()
    assert [e["title"] for e in filtered] == ["Open"]


def test_get_event_not_found(client: TestClient):
    response = client.get("/api/events/999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Event not found"


def test_update_event(client: TestClient):
    event_id = client.post("/api/events", json={"title": "Table Tennis"}).json()["id"]

    response = client.patch(
        f"/api/events/{event_id}",
        json={"status": "registration_open", "max_participants": 16},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "registration_open"
    assert data["max_participants"] == 16
    assert data["title"] == "Table Tennis"


def test_update_event_capacity_check(client: TestClient):
    event_id = client.post("/api/events", json={"title": "Darts", "max_participants": 8}).json()["id"]
    response = client.patch(f"/api/events/{event_id}", json={"min_participants": 10})
    assert response.status_code == 422
    assert client.patch("/api/events/999", json={"title": "Nope"}).status_code == 404


def test_health(client: TestClient):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
