"""Configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load .env from project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(_env_path)


class Settings(BaseSettings):
    # Storage layout
    storage_root: Path = Field(default_factory=lambda: Path.home() / ".claude")
    contexts_dirname: str = Field(default="contexts")
    projects_dirname: str = Field(default="projects")
    index_filename: str = Field(default="context-index.json")

    # Index
    index_enabled: bool = Field(default=True)

    # General
    log_level: str = Field(default="INFO")

    model_config = {"env_prefix": "CTX_MEMORY_", "case_sensitive": False}

    @property
    def resolved_root(self) -> Path:
        """Return the storage root with ``~`` expanded."""
        return Path(self.storage_root).expanduser()


def get_settings(**overrides) -> Settings:
    """Return a Settings instance, optionally overriding individual fields."""
    return Settings(**overrides)
