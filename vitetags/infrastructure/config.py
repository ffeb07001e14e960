"""
Centralized configuration management for vitetags.

Provides environment-driven configuration with validation and type safety
using Pydantic settings. Values are read once when a section is first
accessed; the engine copies them at construction time and may be
reconfigured between renders.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings


class ViteConfig(BaseSettings):
    """
    Vite integration settings.

    Example:
        >>> config = ViteConfig(build_directory="dist", entry_points=["main.js"])
        >>> config.manifest_filename
        'manifest.json'
    """

    build_directory: str = Field("build", description="Directory holding the Vite build output")
    manifest_filename: str = Field("manifest.json", description="Manifest file name")
    hot_file: str = Field("hot", description="File written by the dev server while it runs")
    entry_points: list[str] = Field(default_factory=list, description="Entry chunk keys")

    # Security
    nonce: str | None = Field(
        None, description="CSP nonce; an empty string requests a generated nonce"
    )
    integrity_key: str = Field(
        "integrity", description="Manifest key holding SRI hashes; empty disables integrity"
    )

    # Prefetching
    prefetch_strategy: Literal["none", "waterfall", "aggressive"] = Field(
        "none", description="How dynamic imports are prefetched"
    )
    prefetch_concurrency: int = Field(3, ge=1, description="Waterfall prefetch window size")
    prefetch_event: str = Field("load", description="Window event that starts prefetching")

    # Asset URLs
    asset_url: str | None = Field(
        None, description="Optional URL prefix (e.g. a CDN) for built asset paths"
    )

    model_config = {"env_prefix": "VITE_", "case_sensitive": False}

    @field_validator("entry_points")
    def dedupe_entry_points(cls, v):
        """Drop repeated entry points while keeping their first position."""
        return list(dict.fromkeys(v))

    @field_validator("asset_url")
    def normalize_asset_url(cls, v):
        """Strip trailing slashes so paths can be appended."""
        if v:
            return v.rstrip("/")
        return v or None


class LoggingConfig(BaseSettings):
    """
    Logging configuration settings.

    Example:
        >>> log_config = LoggingConfig(level="DEBUG", file_path=None)
        >>> log_config.structured
        True
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Minimum logging level"
    )
    file_path: str | None = Field(None, description="Log file path")
    structured: bool = Field(True, description="Use structured JSON logging")
    console_enabled: bool = Field(True, description="Enable console output")

    model_config = {"env_prefix": "LOG_", "case_sensitive": False}


class ApplicationConfig(BaseSettings):
    """
    Settings for the bundled FastAPI application.

    Example:
        >>> config = ApplicationConfig(environment="testing")
        >>> config.title
        'vitetags'
    """

    environment: Literal["development", "testing", "production"] = Field(
        "development", description="Application environment"
    )
    debug: bool = Field(False, description="Enable debug mode")
    title: str = Field("vitetags", description="Application title")
    version: str = Field("0.1.0", description="Application version")
    template_directory: str | None = Field(
        None, description="Jinja2 template directory; defaults to the bundled templates"
    )

    model_config = {"env_prefix": "APP_", "case_sensitive": False}

    @model_validator(mode="after")
    def debug_implies_development(self):
        """Ensure debug mode is only enabled outside production."""
        if self.debug and self.environment == "production":
            raise ValueError("Debug mode cannot be enabled in production")
        return self


class Settings:
    """
    Complete settings container.

    Provides structured access to all configuration sections
    with lazy loading and caching.

    Example:
        >>> settings = get_settings()
        >>> settings.vite.build_directory
        'build'
    """

    def __init__(self):
        self._app: ApplicationConfig | None = None
        self._vite: ViteConfig | None = None
        self._logging: LoggingConfig | None = None

    @property
    def app(self) -> ApplicationConfig:
        """Get application configuration."""
        if self._app is None:
            self._app = ApplicationConfig()
        return self._app

    @property
    def vite(self) -> ViteConfig:
        """Get Vite configuration."""
        if self._vite is None:
            self._vite = ViteConfig()
        return self._vite

    @property
    def logging(self) -> LoggingConfig:
        """Get logging configuration."""
        if self._logging is None:
            # Set logging level based on environment
            level = "DEBUG" if self.app.debug else "INFO"
            if self.app.environment == "production":
                level = "WARNING"
            self._logging = LoggingConfig(level=level)
        return self._logging

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app.environment == "production"

    def get_environment_info(self) -> dict[str, Any]:
        """Get summary of current environment configuration."""
        return {
            "environment": self.app.environment,
            "version": self.app.version,
            "debug": self.app.debug,
            "logging_level": self.logging.level,
            "vite": {
                "build_directory": self.vite.build_directory,
                "entry_points": list(self.vite.entry_points),
                "prefetch_strategy": self.vite.prefetch_strategy,
            },
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the settings instance (cached).

    Returns:
        Settings instance with all configuration loaded
    """
    return Settings()


def reset_settings() -> None:
    """Reset settings cache to reload from environment."""
    get_settings.cache_clear()
