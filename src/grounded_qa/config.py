"""Configuration models for the QA pipeline."""

from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChunkingConfig(BaseModel):
    """Configures fixed-size sliding-window chunking (in characters)."""

    size: int = Field(default=1200, ge=1)
    overlap: int = Field(default=200, ge=0)


class RetrievalConfig(BaseModel):
    """Configures per-namespace hybrid retrieval and context budgeting."""

    vector_k: int = Field(default=8, ge=1)
    keyword_k: int = Field(default=8, ge=1)
    fusion_limit: int = Field(default=8, ge=1)
    max_context_chars: int = Field(default=8000, ge=0)


class PipelineConfig(BaseModel):
    """Configures orchestration, prompts and generation temperatures."""

    memory_limit: int = Field(default=10, ge=0)
    namespaces: dict[str, str] = Field(
        default_factory=lambda: {"pdf": "policy", "law": "law"}
    )
    router_temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    answer_temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    verify_temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    citation_label: str = "Sources:"
    response_language: str = "Korean"


class Settings(BaseSettings):
    """Process-level settings loaded from the environment or a `.env` file."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    embedding_model: str = "text-embedding-3-large"
    system_name: str = "grounded-qa"
    port: int = 3000
    max_upload_mb: int = Field(default=60, ge=1)
    platform_max_message_chars: int = Field(default=2999, ge=1)

    @property
    def llm_configured(self) -> bool:
        return bool(self.openai_api_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()
