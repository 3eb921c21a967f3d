"""Configuration management for the legal time-savings pipeline."""

from pathlib import Path

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Pipeline settings, loaded from env vars and optionally overridden by a YAML config file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Text-generation collaborator
    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_model: str = "gpt-4.1-mini"
    openai_temperature: float = 0.0
    client_max_retries: int = 4
    client_backoff_seconds: float = 1.0
    collaborator_timeout_seconds: float = 120.0

    # Batch analysis
    analysis_max_concurrency: int = 4

    # Tracing
    langsmith_tracing: bool = False
    langsmith_api_key: str = ""
    langsmith_project: str = ""

    # Paths
    storage_path: Path = Field(default=Path("data/legal_chats.json"))
    archive_path: Path = Field(default=Path("data/archived_legal_chats.json"))
    output_dir: Path = Field(default=Path("reports"))

    @classmethod
    def from_yaml(cls, config_path: str | Path, **overrides) -> "Settings":
        """Load settings from a YAML config file, with env vars and overrides applied on top."""
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                yaml_config = yaml.safe_load(f) or {}
        else:
            yaml_config = {}
        merged = {**yaml_config, **overrides}
        return cls(**merged)

    def resolved_openai_base_url(self) -> str:
        """Return the configured base URL with a trailing slash, or empty for the SDK default."""

        candidate = self.openai_base_url.strip()
        if not candidate:
            return ""
        return f"{candidate.rstrip('/')}/"

    def resolved_openai_key_source(self) -> str:
        """Return non-secret key source label for diagnostics."""

        if self.openai_api_key.strip():
            return "OPENAI_API_KEY"
        return "none"
