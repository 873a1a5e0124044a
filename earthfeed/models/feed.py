"""Typed models for the acquisition engine.

Defines the data structures shared by the cache, the two acquirers,
and the session controller:

- ``ImageSource`` / ``StreamSource``: one upstream candidate
- ``CacheEntry``: a time-stamped payload held by ``CacheStore``
- ``AcquisitionAttempt``: one in-flight image request
- ``SessionState``: the controller-owned state of the displayed feed
- ``StreamSession``: the render result for stream mode

Design notes:
- Sources, cache entries, and attempts are frozen dataclasses.
- ``SessionState`` is the only mutable model; exactly one instance exists
  per controller.
- Time values are monotonic seconds from the injected ``Clock``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from earthfeed.core.exceptions import ValidationError

# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ModelValidationError(ValueError, ValidationError):
    """Raised when a model is constructed with invalid field values.

    Attributes:
        model: Name of the model class that failed validation.
        field_name: The field that violated the invariant.
        value: The invalid value.
    """

    default_stage = "model_validation"
    default_code = "MODEL_VALIDATION_FAILED"

    def __init__(self, model: str, field_name: str, value: object, message: str) -> None:
        self.model = model
        self.field_name = field_name
        self.value = value
        formatted = f"{model}.{field_name}={value!r}: {message}"
        ValidationError.__init__(self, formatted)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Mode(enum.Enum):
    """Acquisition strategy for the displayed feed."""

    IMAGE = "image"
    STREAM = "stream"


class StreamStatus(enum.Enum):
    """Status of the active live stream, as surfaced to the UI."""

    CONNECTING = "connecting"
    LIVE = "live"
    BUFFERING = "buffering"
    PAUSED = "paused"

    @property
    def text(self) -> str:
        """Short human-readable label."""
        return _STATUS_TEXT[self]


_STATUS_TEXT = {
    StreamStatus.CONNECTING: "Connecting to live feed",
    StreamStatus.LIVE: "Live",
    StreamStatus.BUFFERING: "Buffering",
    StreamStatus.PAUSED: "Paused",
}


class PlayerState(enum.Enum):
    """Lifecycle states reported by the external stream player."""

    UNSTARTED = "unstarted"
    PLAYING = "playing"
    BUFFERING = "buffering"
    PAUSED = "paused"
    ENDED = "ended"


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ImageSource:
    """One EPIC metadata endpoint.

    Attributes:
        name: Short identifier used in logs (e.g. ``"primary"``).
        url_template: Endpoint URL; may contain ``{api_key}``.
        requires_key: Whether the API key must be substituted.
    """

    name: str
    url_template: str
    requires_key: bool = False

    def __post_init__(self) -> None:
        _check_non_empty("ImageSource", "name", self.name)
        _check_non_empty("ImageSource", "url_template", self.url_template)
        if self.requires_key and "{api_key}" not in self.url_template:
            raise ModelValidationError(
                "ImageSource",
                "url_template",
                self.url_template,
                "must contain '{api_key}' when requires_key is set",
            )

    def resolve(self, api_key: str) -> str:
        """Return the concrete request URL."""
        if self.requires_key:
            return self.url_template.format(api_key=api_key)
        return self.url_template


@dataclass(frozen=True, slots=True)
class StreamSource:
    """One live video stream candidate.

    Attributes:
        source_id: Player-specific stream identifier.
        label: Human-readable name shown while switching.
    """

    source_id: str
    label: str = ""

    def __post_init__(self) -> None:
        _check_non_empty("StreamSource", "source_id", self.source_id)

    @property
    def display_name(self) -> str:
        return self.label or self.source_id


# ---------------------------------------------------------------------------
# Cache and attempts
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A payload and the monotonic time it was fetched."""

    payload: Any
    fetched_at: float

    def is_fresh(self, now: float, ttl_s: float) -> bool:
        return now - self.fetched_at < ttl_s


@dataclass(frozen=True, slots=True)
class AcquisitionAttempt:
    """One in-flight image request.

    Attributes:
        source_index: 0 for the primary endpoint, 1 for the fallback.
        attempt_number: Zero-based attempt counter within one acquisition.
        started_at: Monotonic start time.
    """

    source_index: int
    attempt_number: int
    started_at: float


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class SessionState:
    """State of the single displayed feed.

    ``is_loading`` is true from an acquire request until its terminal
    success or failure; no second acquisition starts while it is set.
    ``last_alive_at`` is only meaningful in stream mode.
    """

    mode: Mode = Mode.IMAGE
    is_loading: bool = False
    current_source_index: int = 0
    last_alive_at: float | None = None


@dataclass(frozen=True, slots=True)
class StreamSession:
    """Render result for stream mode: the source now playing and its status."""

    source: StreamSource
    source_index: int
    status: StreamStatus = StreamStatus.CONNECTING


# ---------------------------------------------------------------------------
# Validation helpers (module-private)
# ---------------------------------------------------------------------------


def _check_non_empty(model: str, field_name: str, value: str) -> None:
    """Raise `ModelValidationError` if *value* is empty or blank."""
    if not value or not value.strip():
        raise ModelValidationError(model, field_name, value, "must not be empty")
