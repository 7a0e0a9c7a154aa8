from __future__ import annotations

import httpx
import pytest
from loguru import logger

from semantic_architect.agents.orchestrator import PipelineOrchestrator
from semantic_architect.errors import ConfigurationError
from semantic_architect.models.schemas import ApiKeys, ProjectConfig, RunConfig
from semantic_architect.services.logger import log_event, log_provider_call
from semantic_architect.tools import jina_reader


@pytest.fixture
def records():
    captured = []
    sink_id = logger.add(lambda message: captured.append(message.record), level="DEBUG")
    yield captured
    logger.remove(sink_id)


def test_records_outside_a_run_carry_a_placeholder_run_id(records):
    logger.info("startup")
    log_event("generation_started", "Topical map generation started", central_entity="x")

    assert [r["extra"]["run_id"] for r in records] == ["-", "-"]
    assert records[1]["message"] == (
        "EVENT generation_started: Topical map generation started (central_entity=x)"
    )


def test_provider_failures_are_warnings_bound_to_the_run(records):
    log_provider_call("jina", "read", 12, status="error", error="HTTP 429", run_id="abc123")
    log_provider_call("serpdata", "search", 40, run_id="abc123")

    failed, ok = records
    assert failed["level"].name == "WARNING"
    assert failed["extra"]["run_id"] == "abc123"
    assert "provider=jina" in failed["message"]
    assert "error=HTTP 429" in failed["message"]
    assert ok["level"].name == "DEBUG"
    assert "error=" not in ok["message"]


@pytest.mark.asyncio
async def test_jina_reader_logs_each_request(records, monkeypatch):
    async def fake_get(self, url, **kwargs):
        return httpx.Response(
            200, json={"data": {"content": "# Page"}}, request=httpx.Request("GET", url)
        )

    monkeypatch.setattr(httpx.AsyncClient, "get", fake_get)

    await jina_reader.fetch_content("https://a.com", api_key="k", run_id="run-7")

    calls = [r for r in records if r["message"].startswith("PROVIDER_CALL")]
    assert len(calls) == 1
    assert calls[0]["extra"]["run_id"] == "run-7"


@pytest.mark.asyncio
async def test_failed_run_logs_its_own_run_id(records):
    orchestrator = PipelineOrchestrator(ApiKeys())
    config = RunConfig(project=ProjectConfig(name="Clinic", central_entity="root canal"))

    with pytest.raises(ConfigurationError):
        await orchestrator.run(config)

    failures = [r for r in records if "EVENT run_failed" in r["message"]]
    assert len(failures) == 1
    assert failures[0]["extra"]["run_id"] == orchestrator.run_id
    assert len(orchestrator.run_id) == 12
