"""Environment-driven configuration using Pydantic Settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All env vars are prefixed with ``HOOKRELAY_`` and can be set via a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="HOOKRELAY_",
        case_sensitive=False,
    )

    # --- GitHub ---
    github_webhook_secret: SecretStr
    github_api_base: str = "https://api.github.com"
    github_timeout_seconds: float = 10.0

    # --- Credential storage ---
    encryption_key: SecretStr
    token_file_path: Path = Path(".github_token")

    # --- Discord ---
    discord_bot_token: SecretStr
    discord_api_base: str = "https://discord.com/api/v10"

    # --- Routing ---
    routing_config_path: Path = Path("config.json")

    # --- Manual replay ---
    replay_default_branch: str = "main"
    replay_max_branches: int = 5
    replay_history_depth: int = 10

    # --- Server ---
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    debug: bool = False


def get_settings() -> Settings:
    """Factory that creates a Settings instance from the environment."""
    return Settings()  # type: ignore[call-arg]
