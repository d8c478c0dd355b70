"""
Tests for event registration endpoints (the bracket's participant source).
"""
from fastapi.testclient import TestClient


def _event(client: TestClient, **extra) -> int:
    payload = {"title": "Foosball Cup", "status": "registration_open", **extra}
    return client.post("/api/events", json=payload).json()["id"]


def test_register_and_list(client: TestClient):
    event_id = _event(client)
    first = client.post(f"/api/events/{event_id}/registrations", json={"user_id": "u-1"})
    assert first.status_code == 201
    assert first.json()["status"] == "registered"
    assert first.json()["bracket_seed"] is None
    client.post(f"/api/events/{event_id}/registrations", json={"user_id": "u-2", "bracket_seed": 1})

    listed = client.get(f"/api/events/{event_id}/registrations").json()
    assert [(r["user_id"], r["bracket_seed"]) for r in listed] == [("u-1", None), ("u-2", 1)]


def test_duplicate_registration(client: TestClient):
    event_id = _event(client)
    client.post(f"/api/events/{event_id}/registrations", json={"user_id": "u-1"})
    response = client.post(f"/api/events/{event_id}/registrations", json={"user_id": "u-1"})
    assert response.status_code == 409
    assert response.json()["detail"] == "Already registered for this event"


def test_registration_closed(client: TestClient):
    event_id = client.post("/api/events", json={"title": "Draft"}).json()["id"]
    response = client.post(f"/api/events/{event_id}/registrations", json={"user_id": "u-1"})
    assert response.status_code == 409


def test_event_full(client: TestClient):
    event_id = _event(client, max_participants=2)
    client.post(f"/api/events/{event_id}/registrations", json={"user_id": "u-1"})
    client.post(f"/api/events/{event_id}/registrations", json={"user_id": "u-2"})
    response = client.post(f"/api/events/{event_id}/registrations", json={"user_id": "u-3"})
    assert response.status_code == 409
    assert response.json()["detail"] == "Event is full"


def test_cancel_and_reactivate(client: TestClient):
    event_id = _event(client, max_participants=2)
    client.post(f"/api/events/{event_id}/registrations", json={"user_id": "u-1"})
    client.post(f"/api/events/{event_id}/registrations", json={"user_id": "u-2"})

    cancelled = client.delete(f"/api/events/{event_id}/registrations/u-1")
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"
    assert [r["user_id"] for r in client.get(f"/api/events/{event_id}/registrations").json()] == ["u-2"]
    all_rows = client.get(f"/api/events/{event_id}/registrations", params={"include_cancelled": True}).json()
    assert len(all_rows) == 2

    # Cancelled seat frees capacity; the same user comes back at the end of the order
    again = client.post(f"/api/events/{event_id}/registrations", json={"user_id": "u-1"})
    assert again.status_code == 201
    assert again.json()["id"] == cancelled.json()["id"]
    assert again.json()["status"] == "registered"
    assert [r["user_id"] for r in client.get(f"/api/events/{event_id}/registrations").json()] == ["u-2", "u-1"]


def test_update_seed(client: TestClient):
    event_id = _event(client)
    client.post(f"/api/events/{event_id}/registrations", json={"user_id": "u-1"})

    response = client.patch(f"/api/events/{event_id}/registrations/u-1", json={"bracket_seed": 3})
    assert response.status_code == 200
    assert response.json()["bracket_seed"] == 3

    assert client.patch(f"/api/events/{event_id}/registrations/u-1", json={"bracket_seed": 0}).status_code == 422
    assert client.patch(f"/api/events/{event_id}/registrations/ghost", json={"bracket_seed": 1}).status_code == 404


def test_seeds_drive_bracket(client: TestClient):
    event_id = _event(client)
    for user_id, seed in (("u-1", None), ("u-2", 2), ("u-3", 1), ("u-4", None)):
        client.post(f"/api/events/{event_id}/registrations", json={"user_id": user_id, "bracket_seed": seed})

    bracket = client.post(f"/api/events/{event_id}/bracket", json={"seed_randomly": False}).json()

    first_round = bracket["rounds"][0]["matches"]
    assert [(m["player1_id"], m["player2_id"]) for m in first_round] == [("u-3", "u-2"), ("u-1", "u-4")]
