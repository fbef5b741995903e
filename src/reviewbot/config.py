"""Review bot configuration using pydantic-settings.

This module defines the ReviewBotSettings class that reads configuration
from environment variables with the REVIEWBOT_ prefix. The webhook secret
and GitHub token must be set for the service to start.

The settings instance is built once at startup and handed to the
components that need it; nothing else reads the environment.
"""

from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ReviewBotSettings(BaseSettings):
    """Review bot configuration from environment variables.

    All environment variables are prefixed with REVIEWBOT_ (e.g., REVIEWBOT_GITHUB_TOKEN).

    Required fields (must be set via environment variables):
    - github_webhook_secret: Shared secret for validating webhook signatures
    - github_token: GitHub API token for reading files and creating check runs
    """

    model_config = SettingsConfigDict(
        env_prefix="REVIEWBOT_",
        case_sensitive=False,
    )

    # -------------------------------------------------------------------------
    # GitHub Configuration
    # -------------------------------------------------------------------------
    # Shared secret for validating X-Hub-Signature-256
    github_webhook_secret: str

    # GitHub API token for listing commit files, fetching content, creating checks
    github_token: str

    # Base URL for GitHub API (supports GitHub Enterprise)
    github_base_url: str = "https://api.github.com"

    # Per-request timeout for GitHub API calls
    github_timeout_seconds: float = 30.0

    # -------------------------------------------------------------------------
    # Analysis Configuration
    # -------------------------------------------------------------------------
    # File extensions submitted to the rule engine (JSON list in the env var)
    analyzable_extensions: List[str] = [".js", ".ts"]

    # Name shown for the published check run
    check_name: str = "Code Analysis"

    # -------------------------------------------------------------------------
    # Server Configuration
    # -------------------------------------------------------------------------
    # Host address to bind the server to
    host: str = "0.0.0.0"

    # Port number for the server
    port: int = 3000

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("github_webhook_secret")
    @classmethod
    def validate_webhook_secret(cls, v: str) -> str:
        """Validate that webhook secret is not empty."""
        if not v or not v.strip():
            raise ValueError("github_webhook_secret cannot be empty")
        return v

    @field_validator("github_token")
    @classmethod
    def validate_github_token(cls, v: str) -> str:
        """Validate that GitHub token is not empty."""
        if not v or not v.strip():
            raise ValueError("github_token cannot be empty")
        return v

    @field_validator("github_base_url")
    @classmethod
    def validate_github_base_url(cls, v: str) -> str:
        """Validate that the GitHub API URL is an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("github_base_url must start with http:// or https://")
        return v

    @field_validator("github_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate that the request timeout is positive."""
        if v <= 0:
            raise ValueError("github_timeout_seconds must be positive")
        return v

    @field_validator("analyzable_extensions")
    @classmethod
    def validate_extensions(cls, v: List[str]) -> List[str]:
        """Normalize extensions to lowercase with a leading dot."""
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            if not ext.startswith("."):
                ext = "." + ext
            normalized.append(ext)
        if not normalized:
            raise ValueError("analyzable_extensions must name at least one extension")
        return normalized

    @field_validator("check_name")
    @classmethod
    def validate_check_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("check_name cannot be empty")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate that port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return v


def get_settings() -> ReviewBotSettings:
    """Create and return a ReviewBotSettings instance.

    Returns:
        ReviewBotSettings: Configured settings instance.

    Raises:
        pydantic.ValidationError: If required fields are missing or invalid.
    """
    return ReviewBotSettings()
