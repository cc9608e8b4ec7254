"""
Configuration management for the typeahead suggestion engine.

This module provides centralized configuration management supporting:
- Environment variables and .env files
- Suggestion source endpoint and timeouts
- History persistence backend selection (Redis, JSON file or memory)
"""

from functools import lru_cache
from typing import Any, Dict, Optional
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import structlog

from typeahead.domain.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)


class Settings(BaseSettings):
    """
    Typeahead settings with defaults matching the search box behavior
    (300ms debounce, 2 chars minimum, 5 suggestions per category).
    """

    # Environment Detection
    ENVIRONMENT: str = Field(
        default="local",
        description="Environment (local/development/production)"
    )
    DEBUG: bool = Field(
        default=False,
        description="Debug mode"
    )

    # Suggestion Source
    SUGGESTIONS_BASE_URL: str = Field(
        default="http://localhost:3000",
        description="Base URL of the suggestion endpoint"
    )
    SUGGESTIONS_PATH: str = Field(
        default="/search/suggestions",
        description="Path of the suggestion endpoint"
    )
    REQUEST_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        description="Upper bound for one suggestion fetch"
    )

    # Typing behavior
    DEBOUNCE_MS: int = Field(
        default=300,
        description="Quiet period before a fetch is issued"
    )
    MIN_CHARS: int = Field(
        default=2,
        description="Minimum query length that triggers a fetch"
    )
    SUGGESTION_LIMIT: int = Field(
        default=5,
        description="Per-category suggestion limit sent to the source"
    )
    SELECTION_WRAP: bool = Field(
        default=True,
        description="Wrap keyboard selection at list boundaries"
    )

    # Search History
    HISTORY_CAP: int = Field(
        default=5,
        description="Maximum number of remembered searches"
    )
    HISTORY_KEY_PREFIX: str = Field(
        default="typeahead:search_history",
        description="Key prefix for persisted history (suffixed by client id)"
    )
    HISTORY_STORAGE_PATH: Optional[str] = Field(
        default=None,
        description="JSON file used for history when Redis is not configured"
    )

    # Cache Configuration (Redis or Memory)
    REDIS_URL: Optional[str] = Field(
        default=None,
        description="Redis URL (optional, uses file or memory store if not set)"
    )
    SUGGESTION_CACHE_TTL_SECONDS: int = Field(
        default=180,
        description="Lifetime of cached suggestion lists"
    )
    SUGGESTION_CACHE_MAX_ENTRIES: int = Field(
        default=50,
        description="Maximum cached queries"
    )

    # Rate Limiting
    RATE_LIMIT_PER_MINUTE: int = Field(
        default=30,
        description="Maximum suggestion fetches per minute (0 disables)"
    )

    # Analytics
    ANALYTICS_ENABLED: bool = Field(
        default=False,
        description="Track searches and send batches to the analytics endpoint"
    )
    ANALYTICS_PATH: str = Field(
        default="/api/analytics/search",
        description="Path of the analytics batch endpoint"
    )
    ANALYTICS_BATCH_SIZE: int = Field(
        default=10,
        description="Pending events that trigger an immediate batch send"
    )
    ANALYTICS_MAX_LOCAL_EVENTS: int = Field(
        default=100,
        description="Maximum events kept in the local analytics log"
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )
    LOG_FORMAT: str = Field(
        default="console",
        description="Log format (json/console)"
    )

    model_config = SettingsConfigDict(
        env_prefix="TYPEAHEAD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator('ENVIRONMENT')
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate and normalize environment name."""
        v = v.lower()
        if v not in ('local', 'development', 'staging', 'production'):
            logger.warning(f"Unknown environment: {v}, defaulting to 'local'")
            return 'local'
        return v

    @field_validator('DEBOUNCE_MS', 'MIN_CHARS', 'RATE_LIMIT_PER_MINUTE')
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        """Reject negative delays and thresholds."""
        if v < 0:
            raise ValueError("value must not be negative")
        return v

    @field_validator('SUGGESTION_LIMIT', 'HISTORY_CAP', 'SUGGESTION_CACHE_MAX_ENTRIES', 'ANALYTICS_BATCH_SIZE')
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Limits and caps must allow at least one item."""
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @field_validator('REQUEST_TIMEOUT_SECONDS')
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Fetches must never be left pending indefinitely."""
        if v <= 0:
            raise ValueError("REQUEST_TIMEOUT_SECONDS must be positive")
        return v

    @field_validator('SUGGESTIONS_PATH', 'ANALYTICS_PATH')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Normalize endpoint paths to start with a slash."""
        return v if v.startswith("/") else f"/{v}"

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == 'production'

    def is_local(self) -> bool:
        """Check if running in local environment."""
        return self.ENVIRONMENT == 'local'

    def is_redis_configured(self) -> bool:
        """Check if history should be persisted in Redis."""
        return bool(self.REDIS_URL)

    def get_suggestions_url(self) -> str:
        """Full URL of the suggestion endpoint."""
        return f"{self.SUGGESTIONS_BASE_URL.rstrip('/')}{self.SUGGESTIONS_PATH}"

    def get_analytics_url(self) -> str:
        """Full URL of the analytics batch endpoint."""
        return f"{self.SUGGESTIONS_BASE_URL.rstrip('/')}{self.ANALYTICS_PATH}"

    def get_engine_config(self) -> Dict[str, Any]:
        """Keyword arguments shared by every engine instance."""
        return {
            "debounce_ms": self.DEBOUNCE_MS,
            "min_chars": self.MIN_CHARS,
            "limit": self.SUGGESTION_LIMIT,
            "wrap_selection": self.SELECTION_WRAP,
        }


@lru_cache()
def get_settings() -> Settings:
    """
    Get typeahead settings.

    Loads settings from environment variables (prefixed with ``TYPEAHEAD_``)
    and the .env file, and returns a validated Settings instance.

    Raises:
        ConfigurationError: If any setting fails validation
    """
    try:
        settings = Settings()
    except ValidationError as e:
        logger.error("Invalid configuration", errors=e.error_count())
        raise ConfigurationError(f"Invalid typeahead configuration: {e}") from e

    logger.info(
        "Configuration ready",
        environment=settings.ENVIRONMENT,
        suggestions_url=settings.get_suggestions_url(),
        redis_configured=settings.is_redis_configured(),
        history_storage_path=settings.HISTORY_STORAGE_PATH,
        analytics_enabled=settings.ANALYTICS_ENABLED
    )

    return settings
