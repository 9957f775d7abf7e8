"""
Tests for the REST API.

Uses FastAPI's TestClient against an app built on the Mars catalog with
in-memory progress.
"""

import pytest
from fastapi.testclient import TestClient

from ..api import APIService, create_app
from ..catalog.schema import ResourceKind
from ..content.mars import create_mars_catalog
from ..session import InMemoryProgressStore, LevelProgress, SessionManager


@pytest.fixture
def service():
    catalog = create_mars_catalog()
    return APIService(SessionManager(catalog, LevelProgress(catalog, InMemoryProgressStore())))


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


@pytest.fixture
def session_id(client):
    response = client.post("/api/v1/sessions", json={"seed": 42})
    assert response.status_code == 200
    return response.json()["session_id"]


def force_victory(service, session_id):
    game = service.session_manager.require_session(session_id).game
    game.ledger.modify(ResourceKind.REPUTATION, game.level.reputation_goal)


class TestSystemEndpoints:
    """Tests for health, levels, rewards and progress."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["active_sessions"] == 0

    def test_list_levels(self, client):
        """The campaign is listed with only the first level unlocked."""
        data = client.get("/api/v1/levels").json()

        assert data["current_level_id"] == "level1"
        assert [level["level_id"] for level in data["levels"]] == [
            "level1", "level2", "level3", "level4", "level5"
        ]
        assert [level["unlocked"] for level in data["levels"]] == [True, False, False, False, False]

    def test_list_rewards(self, client):
        """Starting rewards are reported as unlocked."""
        rewards = client.get("/api/v1/rewards").json()["rewards"]

        unlocked = {r["reward_id"] for r in rewards if r["unlocked"]}
        assert unlocked == {"efficientSupplyChainReward", "droneSupportReward"}

    def test_progress_reset(self, client):
        """PUT with reset restores the defaults."""
        client.put("/api/v1/progress", json={
            "completed_levels": ["level1"],
            "unlocked_levels": ["level1", "level2"],
            "current_level_id": "level2",
        })
        assert client.get("/api/v1/progress").json()["current_level_id"] == "level2"

        data = client.put("/api/v1/progress", json={"reset": True}).json()

        assert data["current_level_id"] == "level1"
        assert data["completed_levels"] == []
        assert data["campaign_complete"] is False

    def test_progress_update_drops_unknown_ids(self, client):
        data = client.put("/api/v1/progress", json={
            "unlocked_levels": ["level1", "nowhere"],
            "current_level_id": "level1",
            "reward_ids": ["ghostReward"],
        }).json()

        assert data["unlocked_levels"] == ["level1"]
        assert data["reward_ids"] == []

    def test_progress_update_drops_invalid_bonuses(self, client):
        data = client.put("/api/v1/progress", json={
            "unlocked_levels": ["level1"],
            "current_level_id": "level1",
            "resource_bonuses": {"gold": 5, "steel": 4},
        }).json()

        assert data["resource_bonuses"] == {"steel": 4}
        assert client.post("/api/v1/sessions", json={"seed": 1}).status_code == 200


class TestSessionEndpoints:
    """Tests for the session lifecycle."""

    def test_create_and_get(self, client, session_id):
        data = client.get(f"/api/v1/sessions/{session_id}").json()

        assert data["level_id"] == "level1"
        assert data["phase"] == "playing"
        assert data["turn"] == 1
        assert client.get("/api/v1/sessions").json() == {"sessions": [session_id], "count": 1}

    def test_locked_level(self, client):
        response = client.post("/api/v1/sessions", json={"level_id": "level3"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "LEVEL_UNAVAILABLE"

    def test_unknown_session(self, client):
        response = client.get("/api/v1/sessions/missing/state")

        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"

    def test_end_session(self, client, session_id):
        assert client.delete(f"/api/v1/sessions/{session_id}").json()["success"] is True
        assert client.delete(f"/api/v1/sessions/{session_id}").json()["success"] is False
        assert client.get(f"/api/v1/sessions/{session_id}").status_code == 404


class TestGameEndpoints:
    """Tests for game commands."""

    def test_state(self, client, session_id):
        data = client.get(f"/api/v1/sessions/{session_id}/state").json()

        state = data["state"]
        assert state["turn"] == 1
        assert state["grid"]["size"] == 8
        assert len(state["hand"]) == 3
        assert len(state["offer"]) >= 3
        assert data["available_rewards"] == []

    def test_choose_card(self, client, session_id):
        data = client.post(f"/api/v1/sessions/{session_id}/choose", json={"choice_index": 0}).json()

        assert data["success"] is True
        assert len(data["state"]["hand"]) == 4

    def test_negative_index_is_a_validation_error(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/choose", json={"choice_index": -1})

        assert response.status_code == 422

    def test_rejected_placement(self, client, session_id):
        """Game rejections are 200 responses with success false."""
        response = client.post(
            f"/api/v1/sessions/{session_id}/place",
            json={"hand_index": 0, "x": 99, "y": 99},
        )

        assert response.status_code == 200
        assert response.json()["success"] is False
        assert response.json()["error_code"] == "INVALID_PLACEMENT"

    def test_end_turn_and_events(self, client, session_id):
        """Ending a turn advances it and the events can be polled once."""
        client.get(f"/api/v1/sessions/{session_id}/events")

        data = client.post(f"/api/v1/sessions/{session_id}/end-turn").json()

        assert data["success"] is True
        assert data["data"]["turn"] == 2
        kinds = [e["kind"] for e in client.get(f"/api/v1/sessions/{session_id}/events").json()["events"]]
        assert "turn_ended" in kinds
        assert client.get(f"/api/v1/sessions/{session_id}/events").json()["events"] == []

    def test_launch_without_pad(self, client, session_id):
        data = client.post(f"/api/v1/sessions/{session_id}/launch", json={"x": 0, "y": 0}).json()

        assert data["error_code"] == "UNKNOWN_ACTION"


class TestRewardEndpoints:
    """Tests for claiming rewards."""

    def test_claim_before_victory(self, client, session_id):
        data = client.post(
            f"/api/v1/sessions/{session_id}/claim-reward",
            json={"reward_id": "ironMinePrefabStartingReward"},
        ).json()

        assert data["success"] is False
        assert data["error_code"] == "REWARD_NOT_AVAILABLE"

    def test_claim_after_victory(self, client, service, session_id):
        """A won level offers its rewards; claiming one persists it."""
        force_victory(service, session_id)
        offered = client.get(f"/api/v1/sessions/{session_id}/state").json()["available_rewards"]
        assert offered

        reward_id = offered[0]["reward_id"]
        data = client.post(
            f"/api/v1/sessions/{session_id}/claim-reward", json={"reward_id": reward_id}
        ).json()

        assert data["success"] is True
        assert reward_id in client.get("/api/v1/progress").json()["reward_ids"]
        assert client.get(f"/api/v1/sessions/{session_id}/state").json()["available_rewards"] == []
        assert client.get("/api/v1/progress").json()["current_level_id"] == "level2"
