"""Feed exception taxonomy.

Every domain exception inherits from ``FeedError``.  The class a failure
is raised as decides how far it travels:

- ``ValidationError``: bad configuration or model values.  Raised at
  construction time, never retried.
- ``AttemptError`` (a ``TransientError``): one request or one stream
  source failed.  Handled inside the acquirer by retrying or failing
  over; only ever logged.
- ``ExhaustedError`` (a ``PermanentError``): every attempt or source is
  used up.  The only failure the session controller hands to the
  presenter, always together with a retry action.

Each acquisition mode has one attempt base and one exhaustion base so
that stage and code defaults live in one place:

    ImageAttemptError   / ImageExhaustedError    stage "image_acquisition"
    StreamFailure       / StreamExhaustedError   stage "stream_failover"

``to_error_dict()`` returns the stable payload used for log lines and
for ``FeedPresenter.on_error``.
"""

from __future__ import annotations

from typing import ClassVar

from earthfeed.core.constants import STAGE_IMAGE, STAGE_STREAM


class FeedError(Exception):
    """Base exception for all feed-acquisition errors.

    Attributes:
        message: Human-readable error description.
        stage: Component where the error occurred.
        code: Machine-readable error code (e.g. ``"SERVICE_UNAVAILABLE"``).
        retryable: Whether the engine recovers from it on its own.
    """

    default_stage: ClassVar[str] = ""
    default_code: ClassVar[str] = ""
    default_retryable: ClassVar[bool] = False
    #: Fixed category for the taxonomy bases; empty means derive from ``retryable``.
    default_category: ClassVar[str] = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool | None = None,
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = self.default_retryable if retryable is None else retryable
        super().__init__(message)

    @property
    def category(self) -> str:
        if self.default_category:
            return self.default_category
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
        }


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class ValidationError(FeedError):
    """Configuration or model validation failure."""

    default_category = "validation"


class TransientError(FeedError):
    """Something failed that another attempt or source may get past."""

    default_category = "transient"
    default_retryable = True


class PermanentError(FeedError):
    """The engine has nothing left to try."""

    default_category = "permanent"


# ---------------------------------------------------------------------------
# Attempt / exhaustion bases
# ---------------------------------------------------------------------------


class AttemptError(TransientError):
    """One attempt against one source failed."""

    default_code = "ATTEMPT_FAILED"


class ExhaustedError(PermanentError):
    """Every source was tried.

    Attributes:
        attempts: How many attempts or sources were used up.
    """

    default_code = "EXHAUSTED"

    def __init__(self, message: str, attempts: int, **kwargs: object) -> None:
        self.attempts = attempts
        super().__init__(message, **kwargs)  # type: ignore[arg-type]

    def to_error_dict(self) -> dict[str, object]:
        payload = super().to_error_dict()
        payload["attempts"] = self.attempts
        return payload


class ImageAttemptError(AttemptError):
    """A single image request failed."""

    default_stage = STAGE_IMAGE
    default_code = "IMAGE_ATTEMPT_FAILED"


class ImageExhaustedError(ExhaustedError):
    default_stage = STAGE_IMAGE


class StreamFailure(AttemptError):
    """One live stream source failed."""

    default_stage = STAGE_STREAM
    default_code = "STREAM_FAILURE"


class StreamExhaustedError(ExhaustedError):
    default_stage = STAGE_STREAM
