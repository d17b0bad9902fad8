from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Search providers
    search_provider_order: str = "duckduckgo_html,duckduckgo_lite,wikipedia"
    search_region: str = "us-en"
    search_user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    search_timeout_seconds: float = 15.0
    search_max_results_per_query: int = 8
    search_block_min_body_chars: int = 500

    # Wikipedia fallback
    wikipedia_language: str = "en"
    wikipedia_user_agent: str = "draftdesk/0.1 (topic research pipeline; python-httpx)"
    wikipedia_extract_sentences: int = 3

    # Page fetching
    fetch_timeout_seconds: float = 8.0
    fetch_max_chars: int = 5000

    # Research stage
    research_target_facts: int = 7
    research_max_pages_to_fetch: int = 5
    research_max_supplementary_sources: int = 3

    # Writer
    writer_target_word_count: int = 300

    # App
    cors_origins: str = "http://localhost:3000"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"
    log_dir: str = "logs"
    log_to_file: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]

    @property
    def provider_order_list(self) -> list[str]:
        return [p.strip().lower() for p in self.search_provider_order.split(",") if p.strip()]


settings = Settings()
