"""Application configuration using pydantic-settings."""

from dataclasses import dataclass
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from site_research.services.research import constants


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Anthropic (report synthesis)
    anthropic_api_key: Optional[str] = None
    claude_model: str = "claude-sonnet-4-20250514"
    report_max_tokens: int = constants.REPORT_MAX_TOKENS
    report_temperature: float = constants.REPORT_TEMPERATURE

    # Crawler
    crawl_max_depth: int = constants.CRAWL_MAX_DEPTH
    crawl_concurrency: int = constants.CONCURRENT_CRAWL_LIMIT
    crawl_max_pages: int = constants.MAX_CRAWL_PAGES
    crawl_timeout_seconds: float = constants.CRAWL_TIMEOUT_SECONDS
    page_timeout_seconds: float = constants.PAGE_TIMEOUT_SECONDS
    crawl_user_agent: str = constants.CRAWL_USER_AGENT

    # External search snippets
    search_url_template: str = constants.SEARCH_URL_TEMPLATE
    search_timeout_seconds: float = constants.SEARCH_TIMEOUT_SECONDS

    # Token budgets
    token_encoding: str = constants.TOKEN_ENCODING
    crawled_token_ceiling: int = constants.CRAWLED_TOKEN_CEILING
    external_token_ceiling: int = constants.EXTERNAL_TOKEN_CEILING
    combined_token_ceiling: int = constants.COMBINED_TOKEN_CEILING
    prompt_token_ceiling: int = constants.PROMPT_TOKEN_CEILING
    sentence_boundary_ratio: float = constants.SENTENCE_BOUNDARY_RATIO

    # CORS
    cors_origins: str = "http://localhost:3000"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@dataclass(frozen=True)
class ResearchConfig:
    """Tunables for one pipeline instance.

    Built from ``Settings`` in production; tests construct it directly to
    pin boundary values (page cap of 1, zero timeout, tiny ceilings).
    """

    max_depth: int = constants.CRAWL_MAX_DEPTH
    concurrency: int = constants.CONCURRENT_CRAWL_LIMIT
    max_pages: int = constants.MAX_CRAWL_PAGES
    crawl_timeout: float = constants.CRAWL_TIMEOUT_SECONDS
    page_timeout: float = constants.PAGE_TIMEOUT_SECONDS
    user_agent: str = constants.CRAWL_USER_AGENT
    search_url_template: str = constants.SEARCH_URL_TEMPLATE
    search_timeout: float = constants.SEARCH_TIMEOUT_SECONDS
    token_encoding: str = constants.TOKEN_ENCODING
    crawled_token_ceiling: int = constants.CRAWLED_TOKEN_CEILING
    external_token_ceiling: int = constants.EXTERNAL_TOKEN_CEILING
    combined_token_ceiling: int = constants.COMBINED_TOKEN_CEILING
    prompt_token_ceiling: int = constants.PROMPT_TOKEN_CEILING
    sentence_boundary_ratio: float = constants.SENTENCE_BOUNDARY_RATIO

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResearchConfig":
        return cls(
            max_depth=settings.crawl_max_depth,
            concurrency=settings.crawl_concurrency,
            max_pages=settings.crawl_max_pages,
            crawl_timeout=settings.crawl_timeout_seconds,
            page_timeout=settings.page_timeout_seconds,
            user_agent=settings.crawl_user_agent,
            search_url_template=settings.search_url_template,
            search_timeout=settings.search_timeout_seconds,
            token_encoding=settings.token_encoding,
            crawled_token_ceiling=settings.crawled_token_ceiling,
            external_token_ceiling=settings.external_token_ceiling,
            combined_token_ceiling=settings.combined_token_ceiling,
            prompt_token_ceiling=settings.prompt_token_ceiling,
            sentence_boundary_ratio=settings.sentence_boundary_ratio,
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings for testing."""
    global _settings
    _settings = None
