"""Acquirer abstract base class and acquisition errors.

Both acquisition strategies, ``RetryingAcquirer`` (image mode) and
``FailoverSequencer`` (stream mode), implement this interface, so the
session controller drives either one without knowing which is behind it.

Lifecycle:
    1. ``start()``:    begin acquiring; outcomes are reported as events.
    2. ``reset()``:    drop progress and start again from source 0.
    3. ``teardown()``: cancel timers and in-flight work; back to idle.

Outcomes are never returned from these methods.  The acquirer posts
``AcquisitionSucceeded``, ``AcquisitionFailed`` and ``StatusChanged``
events through the ``emit`` callable it was constructed with.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from earthfeed.core.exceptions import (
    ImageAttemptError,
    ImageExhaustedError,
    StreamExhaustedError,
    StreamFailure,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from earthfeed.acquisition.cache import CacheStore
    from earthfeed.models.events import FeedEvent
    from earthfeed.models.feed import Mode, SessionState

    Emit = Callable[[FeedEvent], None]


@dataclass(slots=True)
class EngineContext:
    """State shared by the controller and both acquirers.

    Owned by the session controller and passed by reference to each
    acquirer at construction time.
    """

    cache: CacheStore
    session: SessionState


class Acquirer(abc.ABC):
    """Abstract base class for acquisition strategies."""

    mode: ClassVar[Mode]

    def __init__(self, context: EngineContext, emit: Emit) -> None:
        self._context = context
        self._emit = emit

    @property
    def context(self) -> EngineContext:
        return self._context

    def bind(self, emit: Emit) -> None:
        """Redirect outcome events (the controller binds its queue here)."""
        self._emit = emit

    @property
    @abc.abstractmethod
    def is_running(self) -> bool:
        """Whether an acquisition is in progress or a feed is being kept alive."""

    @abc.abstractmethod
    def start(self) -> None:
        """Begin acquisition from the first source."""

    @abc.abstractmethod
    def reset(self) -> None:
        """Abandon current progress and restart from the first source."""

    @abc.abstractmethod
    def teardown(self) -> None:
        """Cancel in-flight work and timers; return to idle."""


# ---------------------------------------------------------------------------
# Image-mode attempt failures (transient, recovered by retrying)
# ---------------------------------------------------------------------------


class RequestTimeout(ImageAttemptError):
    """The request did not complete within the per-request timeout."""

    default_code = "REQUEST_TIMEOUT"


class TransportError(ImageAttemptError):
    """Connection-level failure (DNS, refused, reset, TLS)."""

    default_code = "TRANSPORT_ERROR"


class UpstreamError(ImageAttemptError):
    """The endpoint answered with a non-2xx status.

    Attributes:
        status: HTTP status code.
    """

    default_code = "UPSTREAM_ERROR"

    def __init__(self, status: int, message: str = "") -> None:
        self.status = status
        super().__init__(message or f"Upstream returned HTTP {status}")

    def to_error_dict(self) -> dict[str, object]:
        payload = super().to_error_dict()
        payload["status"] = self.status
        return payload


class RateLimited(UpstreamError):
    """HTTP 429."""

    default_code = "RATE_LIMITED"

    def __init__(self, message: str = "") -> None:
        super().__init__(429, message or "Upstream rate limit reached (HTTP 429)")


class ServiceUnavailable(UpstreamError):
    """HTTP 503."""

    default_code = "SERVICE_UNAVAILABLE"

    def __init__(self, message: str = "") -> None:
        super().__init__(503, message or "Upstream service unavailable (HTTP 503)")


class EmptyResult(ImageAttemptError):
    """The body was not a list, was empty, or held no usable records."""

    default_code = "EMPTY_RESULT"


class AcquisitionExhausted(ImageExhaustedError):
    """Every image attempt failed.

    Attributes:
        last_error: The classified failure of the final attempt.
    """

    default_code = "ACQUISITION_EXHAUSTED"

    def __init__(self, last_error: ImageAttemptError | None, attempts: int) -> None:
        self.last_error = last_error
        reason = str(last_error) if last_error is not None else "no attempt was made"
        super().__init__(
            f"Unable to load Earth imagery after {attempts} attempt(s): {reason}", attempts
        )

    def to_error_dict(self) -> dict[str, object]:
        payload = super().to_error_dict()
        payload["last_error"] = self.last_error.to_error_dict() if self.last_error else None
        return payload


# ---------------------------------------------------------------------------
# Stream-mode failures
# ---------------------------------------------------------------------------


class PlayerError(StreamFailure):
    """The player reported an error for the current source.

    Attributes:
        error_code: Player-specific error code.
    """

    default_code = "PLAYER_ERROR"

    def __init__(self, error_code: Any, message: str = "") -> None:
        self.error_code = error_code
        super().__init__(message or f"Player error {error_code}")


class StreamEnded(StreamFailure):
    """The stream ended or dropped back to unstarted."""

    default_code = "STREAM_ENDED"


class StreamStalled(StreamFailure):
    """No playback within the health-check period, or no ``ready`` after a load."""

    default_code = "STREAM_STALLED"


class SourceExhausted(StreamExhaustedError):
    """Every stream source failed.

    Attributes:
        reason: Human-readable reason for the final failover.
    """

    default_code = "SOURCE_EXHAUSTED"

    def __init__(self, reason: str, sources_tried: int) -> None:
        self.reason = reason
        super().__init__(f"{reason}; all fallback streams were tried.", sources_tried)

    @property
    def sources_tried(self) -> int:
        return self.attempts
