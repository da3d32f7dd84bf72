"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from backend.app.llm.client import GEMINI_OPENAI_BASE_URL
from backend.app.llm.credentials import CredentialPool
from backend.app.llm.errors import ConfigurationError


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Generation provider (comma-separated, tried in order)
    generation_api_keys: str = ""
    generation_model: str = "gemini-2.5-pro"
    generation_base_url: str = GEMINI_OPENAI_BASE_URL

    # HTTP
    cors_origins: str = "http://localhost:3000"

    def credential_pool(self) -> CredentialPool:
        """Build the credential pool from GENERATION_API_KEYS.

        Raises:
            ConfigurationError: If no credentials are configured
        """
        keys = _split_csv(self.generation_api_keys)
        if not keys:
            raise ConfigurationError(
                "GENERATION_API_KEYS must contain at least one API key"
            )
        return CredentialPool.from_values(keys)

    @property
    def cors_origin_list(self) -> list[str]:
        return _split_csv(self.cors_origins)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
