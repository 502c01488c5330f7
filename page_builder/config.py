"""
Engine Configuration

Uses pydantic-settings for environment variable loading with validation.
All tunables for the editing engine are centralized here.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    Environment variables can be set directly or via .env file
    (e.g. PAGE_BUILDER_HISTORY_LIMIT=120).
    """

    model_config = SettingsConfigDict(
        env_prefix="PAGE_BUILDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: Literal["development", "testing", "production"] = Field(
        default="development",
        description="Runtime environment"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level used by configure_logging()"
    )

    # ==========================================================================
    # History
    # ==========================================================================
    history_limit: int = Field(
        default=80,
        ge=1,
        description="Maximum undo entries kept (oldest evicted first)"
    )

    batch_window_ms: int = Field(
        default=800,
        ge=0,
        description="Window in milliseconds for coalescing rapid edits on one node"
    )

    # ==========================================================================
    # Grid Layout
    # ==========================================================================
    default_grid_columns: int = Field(
        default=3,
        ge=1,
        le=12,
        description="Column count used when converting a page to grid mode"
    )

    grid_row_height: str = Field(
        default="100px",
        description="Row height written into new grid layouts"
    )

    grid_gap: str = Field(
        default="16px",
        description="Gap written into new grid layouts"
    )

    # ==========================================================================
    # Template Formatting
    # ==========================================================================
    locale: str = Field(
        default="pt-BR",
        description="Locale for number and date formatters"
    )

    default_currency: str = Field(
        default="BRL",
        description="Currency code used by the currency formatter when none is given"
    )

    @property
    def batch_window_seconds(self) -> float:
        """Batching window expressed in seconds."""
        return self.batch_window_ms / 1000.0


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
