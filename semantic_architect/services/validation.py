"""Preconditions checked before any network call of a run."""
from __future__ import annotations

from semantic_architect.errors import ConfigurationError
from semantic_architect.models.schemas import ApiKeys, RunConfig


def missing_fields(config: RunConfig, keys: ApiKeys) -> list[str]:
    missing: list[str] = []
    if not keys.openrouter.strip():
        missing.append("OpenRouter API key")
    if not keys.jina.strip():
        missing.append("Jina API key")
    if not keys.serpdata.strip():
        missing.append("SerpData API key")

    if not config.project.name.strip():
        missing.append("project name")
    if not config.project.central_entity.strip():
        missing.append("central entity")

    if config.url_source == "manual":
        if not any(url.strip() for url in config.manual.urls):
            missing.append("at least one manual URL")
    else:
        auto = config.auto
        if not auto.main_query.strip() and auto.query_expansion_count < 1:
            missing.append("main query or query expansion count")
        if auto.query_expansion_count < 0:
            missing.append("query expansion count (>= 0)")
        if auto.urls_per_query < 1:
            missing.append("URLs per query (>= 1)")
        if auto.serp_exploration_depth < 1:
            missing.append("SERP exploration depth (>= 1)")
    return missing


def validate_run(config: RunConfig, keys: ApiKeys) -> None:
    """Raise ConfigurationError naming every missing or invalid field."""
    missing = missing_fields(config, keys)
    if missing:
        raise ConfigurationError(missing)
