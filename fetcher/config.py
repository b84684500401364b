"""Settings for repository acquisition and GitHub lookups."""
from __future__ import annotations

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class FetchSettings(BaseSettings):
    """Acquisition settings, overridable through ``TEMPLATE_FETCH_*`` variables."""

    model_config = SettingsConfigDict(env_prefix="TEMPLATE_FETCH_")

    github_api_url: str = "https://api.github.com"
    user_agent: str = "template-fetch/0.1.0"
    shallow_depth: int = 1
    ssh_dir: Path = Path.home() / ".ssh"
    ssh_key_names: List[str] = ["id_ed25519", "id_ecdsa", "id_rsa"]


# Global settings instance
settings = FetchSettings()
