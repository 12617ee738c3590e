"""Configuration loading from environment and YAML files."""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONTENT_DIR = Path(__file__).parent.parent / "content"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Upstream OpenAI API
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_beta_header: str = "assistants=v2"

    # Backend behaviour
    request_timeout: int = 30
    max_retries: int = 3

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # Server info
    server_name: str = "openai-assistants-mcp"
    server_version: str = "1.0.0"
    protocol_version: str = "2024-11-05"

    # Host and port
    host: str = "0.0.0.0"
    port: int = 8000

    # Resource and prompt catalog
    content_dir: Path = DEFAULT_CONTENT_DIR

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def has_api_key(self) -> bool:
        """Check if a default OpenAI key is configured."""
        return bool(self.openai_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def load_yaml(path: str | Path) -> dict[str, Any]:
    """
    Load a YAML mapping from disk.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed mapping, or an empty dict for an empty file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the document is not a mapping.
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping at the top level")
    return data
