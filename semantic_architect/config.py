from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # OpenRouter
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    default_model: str = "openai/gpt-4o-mini"
    llm_timeout_seconds: float = 120.0

    # Jina reader (content fetch)
    jina_api_key: str = ""
    jina_reader_base_url: str = "https://r.jina.ai/"

    # SerpData (search)
    serpdata_api_key: str = ""
    serpdata_base_url: str = "https://api.serpdata.io/v1/search"
    http_timeout_seconds: float = 30.0

    # Exploration tuning
    relevance_threshold: float = 0.3
    search_delay_seconds: float = 0.5

    # Fetch / extraction pacing
    fetch_batch_size: int = 3
    fetch_batch_delay_seconds: float = 1.0
    extraction_delay_seconds: float = 0.5
    min_content_length: int = 100
    extraction_max_tokens: int = 32000

    # Consolidation
    edge_weight_increment: float = 0.1

    # App
    cors_origins: str = "http://localhost:3000"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]


settings = Settings()
