"""
Configuration management for the content pipeline.

Loads settings from environment variables with sensible defaults.
"""

from typing import List, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# (DEFAULT_MODEL, FACT_CHECK_MODEL) used when the model keys are not set
PROVIDER_DEFAULT_MODELS = {
    "anthropic": ("claude-sonnet-4-5", "claude-haiku-4-5"),
    "openai": ("gpt-4o", "gpt-4o-mini"),
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database configuration
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "content_pipeline"
    POSTGRES_USER: str = "content_pipeline"
    POSTGRES_PASSWORD: str = ""
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Service configuration
    SERVICE_HOST: str = "0.0.0.0"
    SERVICE_PORT: int = 8000
    CORS_ORIGINS: List[str] = ["*"]

    # LLM API Keys
    ANTHROPIC_API_KEY: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None

    # LLM routing
    LLM_PROVIDER: str = "anthropic"  # anthropic or openai
    DEFAULT_MODEL: Optional[str] = None  # Defaults per LLM_PROVIDER
    FACT_CHECK_MODEL: Optional[str] = None  # Pinned for the fact-checker only
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_TOKENS: int = 4096
    LLM_TIMEOUT: int = 300  # seconds per provider round-trip

    # Web search
    TAVILY_API_KEY: Optional[str] = None
    SEARCH_MAX_RESULTS: int = 5

    # Agent pipeline configuration
    MAX_FACT_CHECK_RETRIES: int = 2
    MAX_TOPICS: int = 3

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    @model_validator(mode="after")
    def fill_provider_models(self) -> "Settings":
        """Fill unset model keys with the defaults of the configured provider."""
        default_model, fact_check_model = PROVIDER_DEFAULT_MODELS.get(
            self.LLM_PROVIDER.lower(), (None, None)
        )
        if self.DEFAULT_MODEL is None:
            self.DEFAULT_MODEL = default_model
        if self.FACT_CHECK_MODEL is None:
            self.FACT_CHECK_MODEL = fact_check_model
        return self

    @property
    def database_url(self) -> str:
        """Construct PostgreSQL connection URL."""
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def async_database_url(self) -> str:
        """Construct async PostgreSQL connection URL."""
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


# Global settings instance
settings = Settings()
