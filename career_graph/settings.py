"""
Settings module for the career graph pipeline.

Environment-based configuration with sensible defaults.
All settings can be overridden via environment variables or a .env file.

Required:
    ANTHROPIC_API_KEY   credential for the generative provider
    DATABASE_URL        SQLAlchemy URL of the document store
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from career_graph.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The provider credential and the store connection string have no
    defaults; call require() before doing any work.
    """

    # Generative provider
    anthropic_api_key: Optional[str] = Field(
        default=None,
        description="Anthropic API key (required)"
    )
    llm_model: str = Field(
        default="claude-haiku-4-5-20251001",
        description="Model used for entity generation"
    )
    llm_temperature: float = Field(
        default=0.3,
        description="Sampling temperature for generation requests"
    )
    llm_max_tokens: int = Field(
        default=16384,
        description="Max tokens per generation request"
    )
    llm_timeout_seconds: float = Field(
        default=120.0,
        description="Timeout for a single provider call"
    )

    # Document store
    database_url: Optional[str] = Field(
        default=None,
        description="SQLAlchemy database URL (required), e.g. postgresql://user:pw@host/db"
    )
    database_echo: bool = Field(
        default=False,
        description="Echo SQL statements"
    )

    # Pipeline
    cache_dir: str = Field(
        default="cache",
        description="Directory holding raw generator output per entity type"
    )
    random_seed: Optional[int] = Field(
        default=None,
        description="Seed for relationship and artifact sampling (unseeded if unset)"
    )
    strict_references: bool = Field(
        default=False,
        description="Fail on references to missing entities instead of skipping them"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def require(self, provider: bool = True) -> "Settings":
        """Raise ConfigurationError if a required value is missing.

        Read-only tools pass provider=False to skip the credential check.
        """
        missing = []
        if provider and not self.anthropic_api_key:
            missing.append("ANTHROPIC_API_KEY")
        if not self.database_url:
            missing.append("DATABASE_URL")
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}"
            )
        return self


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    To reload, use:
        get_settings.cache_clear()
    """
    return Settings()
