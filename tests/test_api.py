import pytest

import api
from errors import StorageUnavailableError


def register(client, user_id="mock-alex", email="alex@campus.edu", name="Alex Chen"):
    return client.post("/users", json={"user_id": user_id, "email": email, "display_name": name})


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_register_is_idempotent(client):
    first = register(client)
    assert first.status_code == 200
    assert first.json()["data"]["points"] == 0
    assert first.json()["data"]["level"] == 1

    client.post("/points", json={"user_id": "mock-alex", "category": "mood", "magnitude": 5})
    again = register(client, name="Someone Else")
    assert again.json()["data"]["points"] == 5
    assert again.json()["data"]["display_name"] == "Alex Chen"


def test_register_rejects_bad_email(client):
    resp = register(client, email="not-an-email")
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationError"


def test_post_points_returns_total_and_level(client):
    register(client)
    client.post("/points", json={"user_id": "mock-alex", "category": "social", "magnitude": 240})
    resp = client.post("/points", json={"user_id": "mock-alex", "category": "social", "magnitude": 15})

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": {"user_id": "mock-alex", "total_points": 255, "level": 2}}


def test_post_points_rejects_non_positive_magnitude(client):
    register(client)
    resp = client.post("/points", json={"user_id": "mock-alex", "category": "mood", "magnitude": 0})

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "InvalidAwardError"
    assert "positive integer" in body["message"]


def test_post_points_rejects_non_integer_magnitude(client):
    register(client)
    for bad in (2.5, "10", None):
        resp = client.post("/points", json={"user_id": "mock-alex", "category": "mood", "magnitude": bad})
        assert resp.status_code == 400
        assert set(resp.json()) == {"error", "message"}
    assert client.get("/points/mock-alex").json()["data"]["total_points"] == 0


def test_post_points_rejects_unknown_category(client):
    register(client)
    resp = client.post("/points", json={"user_id": "mock-alex", "category": "homework", "magnitude": 5})
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidAwardError"


def test_post_points_unknown_user_is_404(client):
    resp = client.post("/points", json={"user_id": "ghost", "category": "mood", "magnitude": 5})
    assert resp.status_code == 404
    assert resp.json()["error"] == "NotFoundError"


def test_storage_failure_is_500(client, repo, monkeypatch):
    register(client)

    def broken(award, update_fn):
        raise StorageUnavailableError("Document store unavailable.")

    monkeypatch.setattr(repo, "apply_award", broken)
    resp = client.post("/points", json={"user_id": "mock-alex", "category": "mood", "magnitude": 5})

    assert resp.status_code == 500
    assert resp.json() == {"error": "StorageUnavailableError", "message": "Document store unavailable."}


def test_leaderboard_ranks_users(client):
    register(client, "mock-a", "a@campus.edu")
    register(client, "mock-b", "b@campus.edu")
    register(client, "mock-c", "c@campus.edu")
    client.post("/points", json={"user_id": "mock-b", "category": "mood", "magnitude": 300})
    client.post("/points", json={"user_id": "mock-c", "category": "mood", "magnitude": 100})

    resp = client.get("/leaderboard")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [(row["rank"], row["user_id"], row["points"]) for row in data] == [
        (1, "mock-b", 300),
        (2, "mock-c", 100),
        (3, "mock-a", 0),
    ]
    assert data[0]["level"] == 2

    assert len(client.get("/leaderboard", params={"limit": 2}).json()["data"]) == 2


def test_leaderboard_empty(client):
    assert client.get("/leaderboard").json() == {"success": True, "data": []}


def test_leaderboard_bad_limit(client):
    assert client.get("/leaderboard", params={"limit": 0}).status_code == 400
    assert client.get("/leaderboard", params={"limit": "ten"}).status_code == 400


def test_profile_and_history(client):
    register(client)
    client.post("/points", json={"user_id": "mock-alex", "category": "safety", "magnitude": 20, "reason": "Drill"})

    profile = client.get("/points/mock-alex").json()["data"]
    assert profile["total_points"] == 20
    assert profile["points_to_next_level"] == 230
    assert profile["category_points"]["safety"] == 20

    history = client.get("/points/mock-alex/history").json()["data"]
    assert len(history) == 1
    assert history[0]["reason"] == "Drill"

    assert client.get("/points/ghost").status_code == 404
    assert client.get("/users/ghost").status_code == 404


def test_mood_endpoints(client):
    register(client)
    resp = client.post("/moods", json={"user_id": "mock-alex", "mood": "neutral", "score": 6})

    assert resp.status_code == 200
    body = resp.json()
    assert body["data"]["mood"] == "neutral"
    assert body["points"]["total_points"] == 5

    moods = client.get("/moods/mock-alex").json()["data"]
    assert [m["id"] for m in moods] == [body["data"]["id"]]

    assert client.post("/moods", json={"user_id": "mock-alex", "mood": "neutral", "score": 42}).status_code == 400


def test_waste_endpoints(client):
    register(client)
    resp = client.post("/waste/events", json={
        "user_id": "mock-alex", "type": "recycling", "location": "Library Block B", "weight": 0.4,
    })

    assert resp.status_code == 200
    assert resp.json()["points"]["total_points"] == 5
    events = client.get("/waste/events/mock-alex").json()["data"]
    assert events[0]["type"] == "recycling"

    user = client.get("/users/mock-alex").json()["data"]
    assert user["category_points"]["sustainability"] == 5


def test_unexpected_fields_are_rejected(client):
    register(client)
    resp = client.post("/points", json={"user_id": "mock-alex", "category": "mood", "magnitude": 5, "bonus": 1000})
    assert resp.status_code == 400


def test_dependency_resolves_configured_repository(repo):
    assert api.get_repo() is repo


@pytest.mark.parametrize("user_id", ["campus/alex", "alex chen"])
def test_register_rejects_user_id_that_is_not_a_document_name(client, repo, user_id):
    resp = register(client, user_id=user_id)
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationError"
    assert repo.list_users() == []


def test_achievements_endpoint(client):
    register(client)
    client.post("/points", json={"user_id": "mock-alex", "category": "mood", "magnitude": 35})

    rows = client.get("/points/mock-alex/achievements").json()["data"]
    by_id = {row["id"]: row for row in rows}
    assert by_id["mood-master"]["unlocked"] is True
    assert by_id["mood-master"]["unlocked_at"] is not None
    assert by_id["waste-warrior"] == {
        "id": "waste-warrior",
        "title": "Waste Warrior",
        "description": "Use smart bins 25 times.",
        "icon": "♻️",
        "category": "sustainability",
        "progress": 0,
        "target": 125,
        "unlocked": False,
        "unlocked_at": None,
    }

    profile = client.get("/points/mock-alex").json()["data"]
    assert profile["achievements"] == ["mood-master"]
    assert profile["current_streak"] == 1
    assert profile["total_points"] == 35

    assert client.get("/points/ghost/achievements").status_code == 404
