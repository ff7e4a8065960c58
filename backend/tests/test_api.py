"""
Test per gli endpoint HTTP (api/v1/routes/chat.py, /health).

L'orchestrator viene iniettato con app.dependency_overrides: il lifespan
(che costruirebbe i provider reali) non viene eseguito.
"""
import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_orchestrator
from app.main import app
from app.services.llm.orchestrator import FallbackOrchestrator

WEATHER = {"current": {"city": "Kyoto", "temp": 14.2, "description": "light rain"}, "forecast": []}


@pytest.fixture
def client_with():
    """client_with(orchestrator) → TestClient con l'orchestrator iniettato."""
    def _make(orchestrator: FallbackOrchestrator) -> TestClient:
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


class TestChatEndpoint:

    def test_success_shape(self, client_with, make_provider):
        raw = '{"explanation": "Go indoors", "places": [{"name": "Museum", "timeOfDay": "Morning", "day": 1}]}'
        client = client_with(FallbackOrchestrator([make_provider("p", raw)]))

        resp = client.post("/api/v1/chat", json={"message": "ideas?", "weatherData": WEATHER, "language": "en-US"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["provider"] == "Fake (p)"
        assert body["language"] == "en-US"
        assert body["weatherData"]["current"]["city"] == "Kyoto"
        place = body["suggestions"]["places"][0]
        assert place["name"] == "Museum"
        assert place["timeOfDay"] == "Morning"
        assert place["day"] == 1

    def test_all_providers_failing_is_still_200(self, client_with, make_provider, http_error):
        client = client_with(FallbackOrchestrator([make_provider("p", http_error(500))]))

        resp = client.post("/api/v1/chat", json={"message": "ideas?", "weatherData": WEATHER})

        assert resp.status_code == 200
        body = resp.json()
        assert body["provider"] == "None (all failed)"
        assert body["suggestions"]["places"] == []
        assert body["suggestions"]["closing"] == "Safe travels!"

    def test_message_or_weather_required(self, client_with):
        client = client_with(FallbackOrchestrator([]))
        resp = client.post("/api/v1/chat", json={"message": "   "})
        assert resp.status_code == 400

    def test_message_without_weather_gets_chat_reply(self, client_with, make_provider):
        client = client_with(FallbackOrchestrator([make_provider("p", "unused")]))

        resp = client.post("/api/v1/chat", json={"message": "hello", "language": "ja-JP"})

        assert resp.status_code == 200
        assert "目的地" in resp.json()["suggestions"]["explanation"]

    def test_invalid_duration_is_rejected(self, client_with):
        client = client_with(FallbackOrchestrator([]))
        resp = client.post("/api/v1/chat", json={"message": "hi", "weatherData": WEATHER, "duration": 99})
        assert resp.status_code == 422


class TestIntentEndpoint:

    def test_intents(self, client_with, make_provider):
        provider = make_provider("p", '[{"type": "location_change", "location": "Osaka"}]')
        client = client_with(FallbackOrchestrator([provider]))

        resp = client.post("/api/v1/chat/intent", json={"message": "Show me Osaka"})

        assert resp.status_code == 200
        assert resp.json()["intents"] == [{"type": "location_change", "location": "Osaka"}]

    def test_intents_without_providers(self, client_with):
        client = client_with(FallbackOrchestrator([]))
        resp = client.post("/api/v1/chat/intent", json={"message": "hi"})
        assert resp.json()["intents"] == [{"type": "general", "location": None}]


def test_health():
    resp = TestClient(app).get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
