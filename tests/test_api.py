"""
Tests for the tagging HTTP endpoint.

The app is built around a TagAgent with scripted transports, so no request
reaches Gemini.
"""

import pytest
from fastapi.testclient import TestClient

from infocards.api import create_app

ENDPOINT = "/api/ai-tag"
NETFLIX = {"title": "Netflix 解約", "type": "subscription"}


@pytest.fixture
def client_for(make_agent):
    def _client(**agent_kwargs) -> TestClient:
        return TestClient(create_app(tag_agent=make_agent(**agent_kwargs)))
    return _client


class TestSuccessfulRequests:
    """200 responses."""

    def test_model_result(self, client_for, scripted, model_json):
        client = client_for(transports=[scripted("sdk", default=model_json)])
        response = client.post(ENDPOINT, json=NETFLIX)

        assert response.status_code == 200
        assert response.headers["cache-control"] == "no-store"
        body = response.json()
        assert body["tags"][:2] == ["映画", "Netflix"]
        assert body["fallback"] is False
        assert body["model"] == "gemini-1.5-flash"
        assert "raw" not in body
        assert "error" not in body

    def test_trace_includes_raw(self, client_for, scripted, model_json):
        client = client_for(transports=[scripted("sdk", default=model_json)])
        body = client.post(ENDPOINT, params={"trace": "1"}, json=NETFLIX).json()
        assert body["raw"] == model_json

    def test_force_uses_heuristic(self, client_for, scripted):
        sdk = scripted("sdk")
        client = client_for(transports=[sdk])
        response = client.post(ENDPOINT, params={"force": "1"}, json=NETFLIX)

        assert response.status_code == 200
        body = response.json()
        assert body["fallback"] is True
        assert body["model"] == "heuristic:force"
        assert sdk.calls == []

    def test_flags_must_be_exactly_one(self, client_for, scripted, model_json):
        client = client_for(transports=[scripted("sdk", default=model_json)])
        body = client.post(ENDPOINT, params={"force": "true"}, json=NETFLIX).json()
        assert body["model"] == "gemini-1.5-flash"

    def test_remote_failure_is_still_200(self, client_for, scripted):
        """Fallback results are returned; the caller's gate decides."""
        client = client_for(transports=[scripted("sdk"), scripted("rest")])
        response = client.post(ENDPOINT, json=NETFLIX)

        assert response.status_code == 200
        body = response.json()
        assert body["fallback"] is True
        assert body["model"] == "heuristic:fallback"
        assert body["error"]

    def test_missing_key_reports_error(self, client_for):
        body = client_for(api_key=None).post(ENDPOINT, json=NETFLIX).json()
        assert body["model"] == "heuristic:no-key"
        assert "GEMINI_API_KEY" in body["error"]

    def test_unknown_fields_ignored(self, client_for):
        payload = {**NETFLIX, "id": "abc", "tags": ["x"]}
        response = client_for(api_key=None).post(ENDPOINT, json=payload)
        assert response.status_code == 200


class TestRejectedRequests:
    """4xx responses."""

    def test_text_too_short(self, client_for, scripted):
        sdk = scripted("sdk")
        response = client_for(transports=[sdk]).post(
            ENDPOINT, json={"title": "ab", "type": "memo"}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "text too short"}
        assert response.headers["cache-control"] == "no-store"
        assert sdk.calls == []

    def test_input_too_large(self, client_for):
        response = client_for().post(
            ENDPOINT, json={"title": "abc", "type": "memo", "note": "n" * 8001}
        )
        assert response.status_code == 413
        assert response.json() == {"error": "input too large"}

    @pytest.mark.parametrize(
        "payload",
        [
            {"type": "memo"},
            {"title": 123, "type": "memo"},
            {"title": "Netflix 解約", "type": "memo", "note": 5},
            ["Netflix 解約"],
        ],
    )
    def test_invalid_body(self, client_for, payload):
        response = client_for().post(ENDPOINT, json=payload)
        assert response.status_code == 400
        assert response.json() == {"error": "invalid body"}

    def test_not_json(self, client_for):
        response = client_for().post(
            ENDPOINT,
            content="title=Netflix",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "invalid body"}


class TestHealth:
    """GET /api/health."""

    def test_health(self, client_for):
        response = client_for().get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert "settings" in body
