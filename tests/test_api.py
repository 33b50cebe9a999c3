import pytest
from fastapi.testclient import TestClient

from bitlings.api import create_app
from bitlings.config import Settings
from bitlings.services.container import build_services
from tests.conftest import IMAGE_URL, FakeConnector

BUNDLE = {
    "types": ["grass"],
    "stats": {"hp": 42, "attack": 39, "defense": 45, "speed": 33},
    "description": "Sprouts in spring.",
    "behavior": "Sunbathes all day.",
    "moves": [{"name": "Leaf Flick", "type": "grass", "power": 35, "category": "physical"}],
}


@pytest.fixture
def llm():
    return FakeConnector(BUNDLE)


@pytest.fixture
def client(db, llm):
    settings = Settings(llm_provider="none", approval_threshold=1)
    app = create_app(settings, build_services(settings, db=db, llm=llm))
    with TestClient(app) as test_client:
        yield test_client


def submit(client, **overrides):
    body = {"name": "LEAFLET", "prompt": "A small plant-based creature.", "imageUrl": IMAGE_URL}
    body.update(overrides)
    response = client.post("/api/bitlings", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "bitlings": 0}


def test_create_and_fetch_bitling(client):
    created = submit(client, creatorHandle="naturelover")
    assert created["status"] == "proposed"
    assert created["creatorHandle"] == "naturelover"
    assert created["imageUrl"] == IMAGE_URL
    assert created["votes"] == 0

    fetched = client.get(f"/api/bitlings/{created['id']}").json()
    assert fetched["id"] == created["id"]
    assert fetched["stats"] is None


def test_create_requires_fields(client):
    response = client.post("/api/bitlings", json={"name": "LEAFLET"})
    assert response.status_code == 400
    assert "message" in response.json()

    response = client.post("/api/bitlings", json={"name": " ", "prompt": "p", "imageUrl": IMAGE_URL})
    assert response.status_code == 400
    assert response.json() == {"message": "Name is required"}


def test_unknown_bitling_is_404(client):
    response = client.get("/api/bitlings/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"message": "Bitling not found"}


def test_list_bitlings_with_filters(client):
    first = submit(client, name="FIRST")
    submit(client, name="SECOND")
    client.post(f"/api/bitlings/{first['id']}/open-voting")

    names = [b["name"] for b in client.get("/api/bitlings", params={"status": "voting"}).json()]
    assert names == ["FIRST"]
    assert len(client.get("/api/bitlings", params={"limit": 1, "page": 2}).json()) == 1
    assert client.get("/api/bitlings", params={"page": 3, "limit": 1}).json() == []
    assert client.get("/api/bitlings", params={"status": "archived"}).status_code == 400
    assert client.get("/api/bitlings", params={"page": 0}).status_code == 400


def test_vote_flow_promotes_and_collects(client):
    bitling = submit(client, creatorHandle="naturelover")
    assert client.post(f"/api/bitlings/{bitling['id']}/open-voting").json()["status"] == "voting"

    response = client.post("/api/vote", json={"proposalId": bitling["id"], "value": 1})
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Vote recorded successfully"
    assert body["promoted"] is True
    assert body["bitling"]["status"] == "accepted"
    assert body["bitling"]["upvotes"] == 1

    again = client.post("/api/vote", json={"bitlingId": bitling["id"], "vote": 1})
    assert again.status_code == 409
    assert again.json() == {"message": "You've already voted this way"}

    flipped = client.post("/api/vote", json={"proposalId": bitling["id"], "value": -1})
    assert flipped.json()["message"] == "Vote updated successfully"
    assert flipped.json()["bitling"]["votes"] == -1
    assert flipped.json()["bitling"]["status"] == "accepted"

    collection = client.get("/api/collection", params={"userId": "naturelover"}).json()
    assert [entry["proposalId"] for entry in collection] == [bitling["id"]]
    assert "isRare" in collection[0]


def test_vote_validation(client):
    bitling = submit(client)
    assert client.post("/api/vote", json={"proposalId": bitling["id"], "value": 2}).status_code == 400
    assert client.post("/api/vote", json={"value": 1}).status_code == 400
    assert client.post("/api/vote", json={"proposalId": "missing", "value": 1}).status_code == 404


def test_open_voting_twice_conflicts(client):
    bitling = submit(client)
    client.post(f"/api/bitlings/{bitling['id']}/open-voting")
    assert client.post(f"/api/bitlings/{bitling['id']}/open-voting").status_code == 409


def test_status_override(client):
    bitling = submit(client)
    response = client.patch(f"/api/bitlings/{bitling['id']}/status", json={"status": "inGame"})
    assert response.status_code == 200
    assert response.json()["status"] == "inGame"
    bad = client.patch(f"/api/bitlings/{bitling['id']}/status", json={"status": "gone"})
    assert bad.status_code == 400


def test_generate_stats_for_bitling(client, llm):
    bitling = submit(client)
    response = client.post(f"/api/bitlings/{bitling['id']}/generate-stats")
    assert response.status_code == 200
    assert response.json()["stats"]["hp"] == 42
    assert response.json()["moves"][0]["levelLearned"] == 1

    fetched = client.get(f"/api/bitlings/{bitling['id']}").json()
    assert fetched["types"] == ["grass"]
    assert fetched["behavior"] == "Sunbathes all day."

    assert client.post(f"/api/bitlings/{bitling['id']}/generate-stats").status_code == 409
    assert len(llm.calls) == 1


def test_standalone_generation(client, llm):
    response = client.post(
        "/api/generate-stats",
        json={"imageUrl": IMAGE_URL, "name": "LEAFLET", "description": "A sprout."},
    )
    assert response.status_code == 200
    assert response.json()["types"] == ["grass"]

    image = client.post("/api/generate-image", json={"prompt": "a leafy fox"})
    assert image.json() == {"url": IMAGE_URL}


def test_generation_failure_is_502(db):
    settings = Settings(llm_provider="none")
    app = create_app(settings, build_services(settings, db=db, llm=FakeConnector(error=TimeoutError("slow"))))
    with TestClient(app) as client:
        response = client.post("/api/generate-image", json={"prompt": "a leafy fox"})
    assert response.status_code == 502
    assert "slow" in response.json()["message"]


def test_generation_without_backend_is_502(db):
    settings = Settings(llm_provider="none")
    with TestClient(create_app(settings, build_services(settings, db=db))) as client:
        response = client.post(
            "/api/generate-stats",
            json={"imageUrl": IMAGE_URL, "name": "LEAFLET", "description": "A sprout."},
        )
    assert response.status_code == 502


def test_leaderboard(client):
    low = submit(client, name="LOW")
    high = submit(client, name="HIGH")
    client.post("/api/vote", json={"proposalId": high["id"], "value": 1})
    client.post("/api/vote", json={"proposalId": low["id"], "value": -1})

    board = client.get("/api/bitlings/leaderboard", params={"timeframe": "allTime"}).json()
    assert [b["name"] for b in board] == ["HIGH", "LOW"]
    assert client.get("/api/bitlings/leaderboard", params={"timeframe": "daily"}).status_code == 400


def test_manual_collect_and_stats(client):
    bitling = submit(client, types=["fire"])
    response = client.post("/api/collection", json={"proposalId": bitling["id"], "userId": "ash"})
    assert response.status_code == 201
    assert response.json()["userId"] == "ash"

    duplicate = client.post("/api/collection", json={"proposalId": bitling["id"], "userId": "ash"})
    assert duplicate.status_code == 409

    stats = client.get("/api/collection/stats", params={"userId": "ash"}).json()
    assert stats["total"] == 1
    assert stats["distinctTypeCount"] == 1
    assert stats["completionPercentage"] == 2

    assert client.get("/api/collection").json() == []


def test_huge_page_returns_empty_list(client):
    submit(client)
    response = client.get("/api/bitlings", params={"page": 10**19})
    assert response.status_code == 200
    assert response.json() == []
