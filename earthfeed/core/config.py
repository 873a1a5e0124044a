"""Engine configuration.

All values default to the constants in ``earthfeed.core.constants``.
``FeedConfig.from_env()`` lets a deployment override the API key and
the timing values without code changes.

Fail-fast validation:
    Constructing a ``FeedConfig`` raises ``ConfigValidationError`` if any
    numeric value is out of its valid range or the stream list is empty.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from earthfeed.core.constants import (
    ARCHIVE_BASE_URL,
    CACHE_TTL_S,
    DEFAULT_API_KEY,
    DEFAULT_STREAM_SOURCES,
    FALLBACK_ENDPOINT_TEMPLATE,
    HEALTH_CHECK_PERIOD_S,
    MAX_RETRIES,
    PRIMARY_ENDPOINT_TEMPLATE,
    REQUEST_TIMEOUT_S,
    RETRY_BASE_DELAY_S,
    STAGE_CONFIG,
)
from earthfeed.core.exceptions import ValidationError
from earthfeed.models.feed import ImageSource, StreamSource


class ConfigValidationError(ValidationError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
    """

    default_stage = STAGE_CONFIG
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


def _primary_source() -> ImageSource:
    return ImageSource(name="primary", url_template=PRIMARY_ENDPOINT_TEMPLATE, requires_key=True)


def _fallback_source() -> ImageSource:
    return ImageSource(name="fallback", url_template=FALLBACK_ENDPOINT_TEMPLATE)


def _default_stream_sources() -> tuple[StreamSource, ...]:
    return tuple(StreamSource(source_id=sid, label=label) for sid, label in DEFAULT_STREAM_SOURCES)


@dataclass(frozen=True, slots=True)
class FeedConfig:
    """Immutable engine configuration.

    Built once at startup and passed to the session controller.

    Attributes:
        api_key: Key substituted into the primary endpoint.
        primary_source: Endpoint for attempt 0.
        fallback_source: Keyless endpoint for every retry.
        archive_base_url: Root URL of the EPIC image archive.
        cache_ttl_s: Lifetime of a cached image payload in seconds.
        max_retries: Retries after the first attempt (total attempts = max_retries + 1).
        retry_base_delay_s: Linear backoff base; the wait before attempt n+1
            is ``retry_base_delay_s * (n + 1)``.
        request_timeout_s: Per-request timeout in seconds.
        stream_sources: Live streams in fallback order.
        health_check_period_s: Watchdog period and stall threshold in seconds.
    """

    api_key: str = DEFAULT_API_KEY
    primary_source: ImageSource = field(default_factory=_primary_source)
    fallback_source: ImageSource = field(default_factory=_fallback_source)
    archive_base_url: str = ARCHIVE_BASE_URL
    cache_ttl_s: float = CACHE_TTL_S
    max_retries: int = MAX_RETRIES
    retry_base_delay_s: float = RETRY_BASE_DELAY_S
    request_timeout_s: float = REQUEST_TIMEOUT_S
    stream_sources: tuple[StreamSource, ...] = field(default_factory=_default_stream_sources)
    health_check_period_s: float = HEALTH_CHECK_PERIOD_S

    def __post_init__(self) -> None:
        _validate(self)

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    @classmethod
    def from_env(cls) -> FeedConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``FEED_MAX_RETRIES=abc``).
        """
        return cls(
            api_key=os.getenv("EPIC_API_KEY", DEFAULT_API_KEY),
            cache_ttl_s=float(os.getenv("FEED_CACHE_TTL_S", str(CACHE_TTL_S))),
            max_retries=int(os.getenv("FEED_MAX_RETRIES", str(MAX_RETRIES))),
            retry_base_delay_s=float(os.getenv("FEED_RETRY_BASE_DELAY_S", str(RETRY_BASE_DELAY_S))),
            request_timeout_s=float(os.getenv("FEED_REQUEST_TIMEOUT_S", str(REQUEST_TIMEOUT_S))),
            health_check_period_s=float(
                os.getenv("FEED_HEALTH_CHECK_PERIOD_S", str(HEALTH_CHECK_PERIOD_S))
            ),
        )


def _validate(config: FeedConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if config.primary_source.requires_key and not config.api_key:
        raise ConfigValidationError(
            "EPIC_API_KEY",
            config.api_key,
            "must not be empty when the primary endpoint requires a key",
        )

    if config.cache_ttl_s <= 0:
        raise ConfigValidationError("FEED_CACHE_TTL_S", config.cache_ttl_s, "must be > 0 (seconds)")

    if config.max_retries < 0:
        raise ConfigValidationError("FEED_MAX_RETRIES", config.max_retries, "must be >= 0")

    if config.retry_base_delay_s < 0:
        raise ConfigValidationError(
            "FEED_RETRY_BASE_DELAY_S",
            config.retry_base_delay_s,
            "must be >= 0 (seconds)",
        )

    if config.request_timeout_s <= 0:
        raise ConfigValidationError(
            "FEED_REQUEST_TIMEOUT_S",
            config.request_timeout_s,
            "must be > 0 (seconds)",
        )

    if config.health_check_period_s <= 0:
        raise ConfigValidationError(
            "FEED_HEALTH_CHECK_PERIOD_S",
            config.health_check_period_s,
            "must be > 0 (seconds)",
        )

    if not config.stream_sources:
        raise ConfigValidationError("stream_sources", config.stream_sources, "must not be empty")
