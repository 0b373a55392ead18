import pytest
from flask import Flask

from genesys_dashboard.api import create_api_blueprint, frame_to_records
from genesys_dashboard.store import InteractionStore


@pytest.fixture
def store():
    return InteractionStore()


@pytest.fixture
def client(store):
    app = Flask(__name__)
    app.register_blueprint(create_api_blueprint(store))
    return app.test_client()


def test_list_starts_empty(client):
    resp = client.get("/api/interactions")
    assert resp.status_code == 200
    assert resp.get_json() == []


def test_create_returns_record_with_id(client, make_interaction):
    resp = client.post("/api/interactions", json=make_interaction())
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["id"] == 1
    assert body["agent"] == "Jane Doe"
    assert body["start_time"].startswith("2025-06-23T07:00:00")
    assert body["wrap_up"] == "RESOLVED"
    assert body["ani"] is None


def test_create_rejects_invalid_payload(client, make_interaction):
    resp = client.post("/api/interactions", json=make_interaction(agent=""))
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["message"] == "Invalid interaction data"
    assert body["errors"] == ["row 1: agent is required"]


def test_create_rejects_non_object(client):
    resp = client.post("/api/interactions", json=[1, 2])
    assert resp.status_code == 400


def test_bulk_import(client, store, make_interaction):
    payload = [make_interaction(conversation_id=f"c{i}") for i in range(3)]
    resp = client.post("/api/interactions/bulk", json=payload)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["message"] == "Successfully imported 3 interactions"
    assert [r["id"] for r in body["interactions"]] == [1, 2, 3]
    assert len(store) == 3


def test_bulk_rejects_non_array(client):
    resp = client.post("/api/interactions/bulk", json={"agent": "x"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid interactions data"


def test_bulk_is_all_or_nothing(client, store, make_interaction):
    resp = client.post("/api/interactions/bulk", json=[make_interaction(), make_interaction(duration=-5)])
    assert resp.status_code == 400
    assert len(store) == 0


def test_delete_clears_everything(client, store, make_interaction):
    client.post("/api/interactions/bulk", json=[make_interaction(), make_interaction()])
    resp = client.delete("/api/interactions")
    assert resp.get_json() == {"message": "All interactions cleared successfully"}
    assert len(store) == 0


def test_date_range(client, make_interaction):
    client.post(
        "/api/interactions/bulk",
        json=[
            make_interaction(conversation_id="in", start_time="2025-06-23T10:00:00"),
            make_interaction(conversation_id="out", start_time="2025-07-01T10:00:00"),
        ],
    )
    resp = client.get("/api/interactions/date-range?startDate=2025-06-23T00:00:00Z&endDate=2025-06-24T00:00:00Z")
    assert resp.status_code == 200
    assert [r["conversation_id"] for r in resp.get_json()] == ["in"]


@pytest.mark.parametrize(
    "query, message",
    [
        ("", "Start date and end date are required"),
        ("?startDate=2025-06-23", "Start date and end date are required"),
        ("?startDate=yesterday&endDate=2025-06-24", "Start date and end date must be valid dates"),
    ],
)
def test_date_range_requires_valid_bounds(client, query, message):
    resp = client.get("/api/interactions/date-range" + query)
    assert resp.status_code == 400
    assert resp.get_json()["message"] == message


def test_frame_to_records_of_empty_frame(empty_frame):
    assert frame_to_records(empty_frame) == []


class BrokenStore(InteractionStore):
    def clear(self):
        raise RuntimeError("disk on fire")


def test_clear_failure_returns_500():
    app = Flask(__name__)
    app.register_blueprint(create_api_blueprint(BrokenStore()))
    resp = app.test_client().delete("/api/interactions")
    assert resp.status_code == 500
    assert resp.get_json() == {"message": "Failed to clear interactions"}
