"""
Application settings and configuration management.

Supports loading from:
1. SOPS-encrypted YAML files (config.enc.yaml)
2. Environment variables (fallback)
"""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from .constants import (
    DEFAULT_API_URL,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_RETRY_DELAY_SECONDS,
    DEFAULT_RETRY_MAX_ATTEMPTS,
)

logger = logging.getLogger(__name__)


def _safe_int(key: str, default: int) -> int:
    """Safely parse int from env var, using default on error."""
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default


def _safe_float(key: str, default: float) -> float:
    """Safely parse float from env var, using default on error."""
    try:
        return float(os.environ.get(key, str(default)))
    except ValueError:
        return default


# =============================================================================
# Retry Settings
# =============================================================================


@dataclass
class RetrySettings:
    """
    Configuration for polling the API until a condition holds.

    Used by delete verification: after a resource is destroyed the API can
    keep returning it for a short while, so lookups are repeated with a
    delay before the check gives up.
    """

    max_attempts: int = DEFAULT_RETRY_MAX_ATTEMPTS
    delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS
    backoff: str = "fixed"

    def validate(self) -> list[str]:
        """Validate settings values. Returns list of errors."""
        errors = []

        if self.max_attempts < 1:
            errors.append(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.delay_seconds < 0:
            errors.append(f"delay_seconds must be >= 0, got {self.delay_seconds}")
        if self.backoff not in ("fixed", "exponential"):
            errors.append(
                f"backoff must be 'fixed' or 'exponential', got {self.backoff!r}"
            )

        return errors

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "max_attempts": self.max_attempts,
            "delay_seconds": self.delay_seconds,
            "backoff": self.backoff,
        }

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "RetrySettings":
        """Create from configuration dictionary."""
        return cls(
            max_attempts=config.get("max_attempts", DEFAULT_RETRY_MAX_ATTEMPTS),
            delay_seconds=config.get("delay_seconds", DEFAULT_RETRY_DELAY_SECONDS),
            backoff=config.get("backoff", "fixed"),
        )

    @classmethod
    def from_env(cls) -> "RetrySettings":
        """Create from environment variables."""
        return cls(
            max_attempts=_safe_int("DD_RETRY_MAX_ATTEMPTS", DEFAULT_RETRY_MAX_ATTEMPTS),
            delay_seconds=_safe_float(
                "DD_RETRY_DELAY_SECONDS", DEFAULT_RETRY_DELAY_SECONDS
            ),
            backoff=os.environ.get("DD_RETRY_BACKOFF", "fixed"),
        )


# =============================================================================
# Main Settings
# =============================================================================


@dataclass
class Settings:
    """Application settings for Datadog API access."""

    # Datadog Settings
    api_key: str = ""
    app_key: str = ""
    api_url: str = DEFAULT_API_URL
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS

    # Delete verification polling
    retry: RetrySettings = field(default_factory=RetrySettings)

    def validate(self) -> list[str]:
        """Validate required settings are present. Returns list of errors."""
        errors = []

        if not self.api_key:
            errors.append("datadog.api_key is required")

        if not self.app_key:
            errors.append("datadog.app_key is required")

        if not self.api_url.startswith(("http://", "https://")):
            errors.append(f"datadog.api_url must be an http(s) URL, got {self.api_url!r}")

        if self.http_timeout_seconds <= 0:
            errors.append(
                f"datadog.http_timeout_seconds must be > 0, "
                f"got {self.http_timeout_seconds}"
            )

        errors.extend(self.retry.validate())

        return errors

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "Settings":
        """Create Settings from configuration dictionary (e.g., from SOPS)."""
        dd = config.get("datadog") or {}
        retry = config.get("retry") or {}

        return cls(
            api_key=dd.get("api_key", ""),
            app_key=dd.get("app_key", ""),
            api_url=dd.get("api_url") or DEFAULT_API_URL,
            http_timeout_seconds=dd.get(
                "http_timeout_seconds", DEFAULT_HTTP_TIMEOUT_SECONDS
            ),
            retry=RetrySettings.from_dict(retry),
        )

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables."""
        return cls(
            api_key=os.environ.get("DD_API_KEY", ""),
            app_key=os.environ.get("DD_APP_KEY", ""),
            api_url=os.environ.get("DD_HOST") or DEFAULT_API_URL,
            http_timeout_seconds=_safe_float(
                "DD_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT_SECONDS
            ),
            retry=RetrySettings.from_env(),
        )


# Default config file path
DEFAULT_CONFIG_PATH = Path("config.enc.yaml")


@lru_cache
def get_settings(config_path: Optional[str] = None) -> Settings:
    """
    Get cached settings instance.

    Loads from SOPS-encrypted config file if available, otherwise from env vars.

    Args:
        config_path: Optional path to SOPS-encrypted config file

    Returns:
        Settings instance
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    if path.exists():
        from .sops_loader import check_sops_installed, decrypt_sops_file

        if not check_sops_installed():
            logger.warning(
                f"Found {path} but SOPS is not installed; "
                f"falling back to environment variables"
            )
            return Settings.from_env()

        try:
            return Settings.from_dict(decrypt_sops_file(path))
        except (RuntimeError, FileNotFoundError) as e:
            logger.warning(f"Failed to load SOPS config from {path}: {e}")
            logger.warning("Falling back to environment variables")

    return Settings.from_env()


def clear_settings_cache() -> None:
    """Clear the cached settings (useful for testing)."""
    get_settings.cache_clear()
