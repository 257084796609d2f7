"""Configuration management using pydantic-settings."""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Retrieval engine and server settings, overridable via VOICERAG_* env vars."""

    model_config = SettingsConfigDict(
        env_prefix="VOICERAG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Chunking
    chunk_size: int = Field(default=500, gt=0, description="Target chunk length in characters")
    chunk_overlap: int = Field(default=100, ge=0, description="Overlap in characters (carried as words)")

    # Search
    default_top_k: int = Field(default=5, ge=1, description="Results returned when top_k is omitted")

    # Indexing
    replace_on_reingest: bool = Field(
        default=True,
        description="Replace a document's record and chunks when its file name is ingested again",
    )
    use_placeholder_embeddings: bool = Field(
        default=True,
        description="Attach the deterministic placeholder vector to index entries",
    )
    embedding_dimension: int = Field(default=1536, gt=0)

    # Document sources
    manifest_url: str = Field(default="http://localhost:8082/assets-manifest")
    assets_base_url: str = Field(default="http://localhost:8082/assets")
    assets_directory: str = Field(default="public/assets")
    request_timeout: float = Field(default=10.0, gt=0, description="HTTP timeout in seconds")
    fetch_concurrency: int = Field(default=4, ge=1)

    # API server
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8082)
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173", "http://127.0.0.1:3000"],
    )

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @model_validator(mode="after")
    def validate_overlap(self) -> "Settings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    return Settings()
