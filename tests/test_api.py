"""Tests for API routes."""
import io
import zipfile
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from semantic_architect.config import settings
from semantic_architect.main import app
from semantic_architect.models.events import EventType, SSEEvent


@pytest.fixture
def client():
    return TestClient(app)


def _generate_body(**keys):
    return {
        "config": {
            "project": {"name": "Clinic", "central_entity": "root canal treatment"},
            "url_source": "manual",
            "manual": {"urls": ["https://a.com"]},
        },
        "api_keys": {"openrouter": "o", "jina": "j", "serpdata": "s", **keys},
    }


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "semantic-architect"


def test_list_models_requires_bearer_token(client):
    assert client.get("/api/models").status_code == 401
    assert client.get("/api/models", headers={"Authorization": "Token x"}).status_code == 401


def test_list_models_returns_openrouter_models(client):
    models = [{"id": "openai/gpt-4o-mini", "name": "GPT-4o mini", "context_length": 128000}]
    with patch(
        "semantic_architect.api.routes.models.llm_client.list_models",
        new=AsyncMock(return_value=models),
    ) as mock_list:
        response = client.get("/api/models", headers={"Authorization": "Bearer sk-or-key"})

    assert response.status_code == 200
    assert response.json()["models"][0]["id"] == "openai/gpt-4o-mini"
    mock_list.assert_awaited_once_with("sk-or-key")


def test_list_models_maps_provider_failure(client):
    with patch(
        "semantic_architect.api.routes.models.llm_client.list_models",
        new=AsyncMock(side_effect=httpx.ConnectError("offline")),
    ):
        response = client.get("/api/models", headers={"Authorization": "Bearer k"})

    assert response.status_code == 502


def test_generate_streams_orchestrator_events(client):
    class FakeOrchestrator:
        instances = []

        def __init__(self, api_keys):
            self.api_keys = api_keys
            self.run_id = "run-1"
            FakeOrchestrator.instances.append(self)

        async def stream(self, config):
            yield SSEEvent(event=EventType.LOG, data={"level": "INFO", "message": "Starting"})
            yield SSEEvent(event=EventType.RESULT, data={"status": "completed"})

    with patch("semantic_architect.api.routes.generate.PipelineOrchestrator", FakeOrchestrator):
        response = client.post("/api/generate", json=_generate_body())

    assert response.status_code == 200
    body = response.text
    assert "event: log" in body
    assert "event: result" in body
    assert body.index("event: log") < body.index("event: result")
    assert FakeOrchestrator.instances[0].api_keys.jina == "j"


def test_generate_rejects_malformed_request(client):
    response = client.post("/api/generate", json={"config": {"url_source": "sometimes"}})
    assert response.status_code == 422


def test_generate_requires_api_keys(client):
    body = _generate_body()
    del body["api_keys"]
    response = client.post("/api/generate", json=body)
    assert response.status_code == 422


def test_generate_does_not_fill_omitted_keys_from_server_env(client, monkeypatch):
    monkeypatch.setattr(settings, "jina_api_key", "server-jina-key")
    body = _generate_body()
    del body["api_keys"]["jina"]

    response = client.post("/api/generate", json=body)

    assert response.status_code == 200
    assert "event: error" in response.text
    assert "Jina API key" in response.text
    assert "event: result" not in response.text


def test_export_returns_zip(client):
    body = {
        "topical_map": "# Map",
        "knowledge_graph": {"nodes": [], "edges": []},
        "documents": [],
        "metadata": {
            "total_urls": 1,
            "processed_urls": 1,
            "execution_time_ms": 1000,
            "config": {"project": {"name": "My Clinic"}},
        },
    }
    response = client.post("/api/export", json=body)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/zip"
    assert 'filename="My_Clinic_project.zip"' in response.headers["content-disposition"]
    with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
        assert "topical_map.md" in archive.namelist()
