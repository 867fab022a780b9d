"""Application configuration."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from .env and environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FRIENDLY_MERMAID_",
        extra="ignore",
    )

    output_dir: str = "outputs"
    # "docker" runs mermaid-cli, "preview" uses the offline SVG renderer
    mermaid_renderer: str = "docker"
    mermaid_renderer_image: str = "minlag/mermaid-cli"
    render_timeout: int = 60
    allow_preview_fallback: bool = True
    theme: str = "default"
    layout: str = "dagre"
    # Extra characters reserved on attribute identifiers so Mermaid sizes the
    # column for the display name that replaces them.
    attribute_padding: int = Field(default=2, ge=0)
    strict_mode: bool = False
    debounce_seconds: float = Field(default=0.4, ge=0)
    nowrap_labels: bool = True
    log_level: str = "INFO"


settings = Settings()
