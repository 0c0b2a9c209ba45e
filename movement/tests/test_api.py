"""
Tests for API layer.

Tests:
- API service methods
- HTTP endpoints, status codes and error bodies
- Session lifecycle via API
"""

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..api.schemas import CreateSessionRequest, StartingBonusRequest
from ..api.service import APIService, IntentRejectedError, SessionNotFoundError
from ..config import EngineConfig
from ..engine_core.action import Intent
from ..engine_core.errors import RejectionCode, UnknownIdError

API = "/api/v1"


@pytest.fixture
def service():
    """Create a fresh API service."""
    return APIService()


@pytest.fixture
def client(service, tmp_path):
    app = create_app(service=service, config=EngineConfig(save_dir=tmp_path))
    return TestClient(app)


@pytest.fixture
def session_id(client):
    response = client.post(f"{API}/sessions", json={"seed": 11})
    return response.json()["session_id"]


class TestAPIService:
    """Tests for APIService."""

    def test_create_session(self, service):
        """Can create a session with a bonus and challenge."""
        response = service.create_session(CreateSessionRequest(
            seed=5,
            challenge_id="risky_business",
            starting_bonus=StartingBonusRequest(funds=20),
        ))
        assert response.session_id is not None
        assert response.active
        assert response.challenge_id == "risky_business"
        assert response.state.funds == 120
        assert response.state.risk == 30
        assert response.state.risk_zone == "safe"

    def test_get_nonexistent_session(self, service):
        """Unknown sessions raise SessionNotFoundError."""
        with pytest.raises(SessionNotFoundError):
            service.get_session("nonexistent-id")

    def test_unknown_challenge(self, service):
        """Bad ids surface as UnknownIdError."""
        with pytest.raises(UnknownIdError):
            service.create_session(CreateSessionRequest(challenge_id="nope"))

    def test_perform_and_reject(self, service):
        """Accepted intents return the new state, refused ones raise with the code."""
        session_id = service.create_session(CreateSessionRequest(seed=5)).session_id
        response = service.perform(session_id, Intent.action("fundraise"))
        assert response.state.turn == 1
        assert response.first_action_bonus or response.critical

        with pytest.raises(IntentRejectedError) as excinfo:
            service.perform(session_id, Intent.action("no_such_action"))
        assert excinfo.value.code in (RejectionCode.UNKNOWN_ACTION, RejectionCode.PENDING_EVENT)

    def test_catalogue_without_session(self, service):
        """Without a session the catalogue lists base costs."""
        catalogue = service.action_catalogue()
        actions = {a.action_id: a for a in catalogue.actions}
        assert catalogue.session_id is None
        assert len(actions) == 11
        assert actions["rally"].cost.funds == 35
        assert all(a.available for a in actions.values())

    def test_sessions_are_independent(self, service):
        """Two sessions never share state."""
        first = service.create_session(CreateSessionRequest(seed=1)).session_id
        second = service.create_session(CreateSessionRequest(seed=1)).session_id
        service.perform(first, Intent.action("fundraise"))
        assert service.get_session(second).state.turn == 0
        assert sorted(service.list_sessions()) == sorted([first, second])


class TestSystemEndpoints:
    """Tests for health and root."""

    def test_health(self, client):
        """Health check reports the service."""
        response = client.get(f"{API}/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["service"] == "movement-engine"

    def test_root(self, client):
        """Root lists the docs location."""
        assert client.get("/").json()["docs"] == "/api/docs"


class TestSessionEndpoints:
    """Tests for session endpoints."""

    def test_create(self, client):
        """Creating a session returns 201 and a fresh state."""
        response = client.post(f"{API}/sessions", json={"faction_mode": "political", "advisors": ["Lou Lawyer"]})
        assert response.status_code == 201
        body = response.json()
        assert body["advisors"] == ["Lou Lawyer"]
        assert body["state"]["faction_mode"] == "political"
        assert {f["faction_id"] for f in body["state"]["factions"]} == {"maga", "america_first", "liberal"}

    def test_unknown_advisor(self, client):
        """Unknown advisors are a 400 UNKNOWN_ID."""
        response = client.post(f"{API}/sessions", json={"advisors": ["Nobody"]})
        assert response.status_code == 400
        assert response.json()["error_code"] == "UNKNOWN_ID"
        assert response.json()["details"]["id"] == "Nobody"

    def test_same_game_same_session(self, client):
        """Opening a game twice returns its open session."""
        first = client.post(f"{API}/sessions", json={"game_id": "g1", "challenge_id": "danger_zone"})
        second = client.post(f"{API}/sessions", json={"game_id": "g1"})
        assert second.status_code == 201
        assert second.json()["session_id"] == first.json()["session_id"]
        assert second.json()["challenge_id"] == "danger_zone"

    def test_game_conflict(self, client):
        """A different challenge for an open game is a 409."""
        client.post(f"{API}/sessions", json={"game_id": "g2", "challenge_id": "danger_zone"})
        response = client.post(f"{API}/sessions", json={"game_id": "g2", "challenge_id": "risky_business"})
        assert response.status_code == 409
        assert response.json()["error_code"] == "SESSION_CONFLICT"
        assert response.json()["details"]["game_id"] == "g2"

    def test_get_and_list(self, client, session_id):
        """Sessions can be fetched and listed."""
        assert client.get(f"{API}/sessions/{session_id}").json()["session_id"] == session_id
        listing = client.get(f"{API}/sessions").json()
        assert listing["count"] == 1
        assert listing["sessions"] == [session_id]

    def test_not_found(self, client):
        """Unknown sessions are a 404."""
        response = client.get(f"{API}/sessions/missing")
        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"
        assert client.post(f"{API}/sessions/missing/actions", json={"action_id": "rally"}).status_code == 404

    def test_delete(self, client, session_id):
        """Ending twice is a 404 the second time."""
        assert client.delete(f"{API}/sessions/{session_id}").json()["success"]
        assert client.delete(f"{API}/sessions/{session_id}").status_code == 404


class TestIntentEndpoints:
    """Tests for the game loop endpoints."""

    def test_action_then_event(self, client, session_id):
        """The first action always raises an event, which blocks further actions."""
        response = client.post(f"{API}/sessions/{session_id}/actions", json={"action_id": "fundraise"})
        assert response.status_code == 200
        body = response.json()
        assert body["state"]["turn"] == 1
        assert body["event_triggered"] is not None

        if body["state"]["pending_event"] is not None:
            blocked = client.post(f"{API}/sessions/{session_id}/actions", json={"action_id": "podcast"})
            assert blocked.status_code == 409
            assert blocked.json()["details"]["rejection_code"] == "PENDING_EVENT"

            invalid = client.post(f"{API}/sessions/{session_id}/events/resolve", json={"option_index": 99})
            assert invalid.json()["details"]["rejection_code"] == "INVALID_OPTION"

            resolved = client.post(f"{API}/sessions/{session_id}/events/resolve", json={"option_index": 0})
            assert resolved.status_code == 200
            assert resolved.json()["state"]["pending_event"] is None

    def test_unknown_action(self, client, session_id):
        """Unknown actions are refused with their rejection code."""
        response = client.post(f"{API}/sessions/{session_id}/actions", json={"action_id": "teleport"})
        assert response.status_code == 409
        assert response.json()["error_code"] == "INTENT_REJECTED"
        assert response.json()["details"]["rejection_code"] == "UNKNOWN_ACTION"

    def test_request_validation(self, client, session_id):
        """Malformed bodies are rejected before reaching the engine."""
        assert client.post(f"{API}/sessions/{session_id}/actions", json={}).status_code == 422

    def test_spin(self, client, session_id):
        """The first spin is free and reports the next reroll cost."""
        response = client.post(f"{API}/sessions/{session_id}/spin")
        assert response.status_code == 200
        spin = response.json()["state"]["spin"]
        assert spin["rerolls"] == 0
        assert spin["next_reroll_cost"] == 5
        assert response.json()["state"]["clout"] == 50

        reroll = client.post(f"{API}/sessions/{session_id}/spin", json={"locked": ["action"]})
        assert reroll.status_code == 200
        assert reroll.json()["state"]["spin"]["action_id"] == spin["action_id"]
        assert reroll.json()["state"]["clout"] == 45

    def test_spin_lock_limit(self, client, session_id):
        """Locking all three reels is refused."""
        client.post(f"{API}/sessions/{session_id}/spin")
        response = client.post(
            f"{API}/sessions/{session_id}/spin",
            json={"locked": ["action", "modifier", "target"]},
        )
        assert response.status_code == 409
        assert response.json()["details"]["rejection_code"] == "INVALID_LOCK"

    def test_execute_without_spin(self, client, session_id):
        """Executing with no reels showing is refused."""
        response = client.post(f"{API}/sessions/{session_id}/spin/execute")
        assert response.status_code == 409
        assert response.json()["details"]["rejection_code"] == "NO_SPIN"

    def test_execute_spin(self, client, session_id):
        """Executing plays the reels as a turn, or is refused for cost."""
        client.post(f"{API}/sessions/{session_id}/spin")
        response = client.post(f"{API}/sessions/{session_id}/spin/execute")
        if response.status_code == 200:
            assert response.json()["state"]["turn"] == 1
            assert response.json()["state"]["spin"] is None
            assert response.json()["combo"] is not None
        else:
            assert response.status_code == 409
            assert response.json()["details"]["rejection_code"] in ("INSUFFICIENT_FUNDS", "INSUFFICIENT_CLOUT")

    def test_reset(self, client, session_id):
        """Reset returns the campaign to turn 0."""
        client.post(f"{API}/sessions/{session_id}/actions", json={"action_id": "fundraise"})
        response = client.post(f"{API}/sessions/{session_id}/reset")
        assert response.status_code == 200
        assert response.json()["state"]["turn"] == 0
        assert response.json()["state"]["funds"] == 100


class TestCatalogueEndpoint:
    """Tests for the action catalogue."""

    def test_base_catalogue(self, client):
        """Without a session every action is listed at base cost."""
        body = client.get(f"{API}/actions").json()
        assert body["session_id"] is None
        assert len(body["actions"]) == 11

    def test_session_catalogue(self, client, session_id):
        """With a session, availability reflects the campaign."""
        body = client.get(f"{API}/actions", params={"session_id": session_id}).json()
        actions = {a["action_id"]: a for a in body["actions"]}
        assert body["session_id"] == session_id
        assert actions["fundraise"]["available"]
        assert not actions["influencer"]["available"]
        assert actions["influencer"]["reason_code"] == "PREREQUISITE"

    def test_catalogue_unknown_session(self, client):
        """An unknown session id is a 404."""
        assert client.get(f"{API}/actions", params={"session_id": "missing"}).status_code == 404
