"""Image-mode acquirer: cached, retried, with endpoint fallback.

One acquisition is at most ``max_retries + 1`` attempts.  Attempt 0 goes
to the keyed primary endpoint; every later attempt goes to the keyless
fallback endpoint.  Between attempts the acquirer waits
``retry_base_delay_s * (attempt_number + 1)`` (2 s, then 4 s with the
defaults).  A fresh cache entry short-circuits the whole sequence.

Every attempt failure is classified into one of the transient
``ImageAttemptError`` subclasses and logged; only running out of
attempts is surfaced, as ``AcquisitionExhausted``.

Cancellation:
    Each request runs under ``asyncio.wait_for``; when the timeout fires
    the request coroutine is cancelled, so its response can never reach
    a later attempt.  ``teardown()`` cancels the whole acquisition task.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from earthfeed.acquisition.base import (
    AcquisitionExhausted,
    Acquirer,
    EmptyResult,
    ImageAttemptError,
    RateLimited,
    RequestTimeout,
    ServiceUnavailable,
    TransportError,
    UpstreamError,
)
from earthfeed.models.epic import ImagePayload, parse_records
from earthfeed.models.events import AcquisitionFailed, AcquisitionSucceeded, StatusChanged
from earthfeed.models.feed import AcquisitionAttempt, Mode

if TYPE_CHECKING:
    from earthfeed.acquisition.base import Emit, EngineContext
    from earthfeed.acquisition.network import NetworkClient, NetworkResponse
    from earthfeed.core.clock import Clock
    from earthfeed.core.config import FeedConfig
    from earthfeed.models.feed import ImageSource

logger = logging.getLogger("earthfeed.acquisition.retrying")

PRIMARY_INDEX = 0
FALLBACK_INDEX = 1


def _discard(_event: object) -> None:
    """Default emit target until a controller binds its queue."""


class RetryingAcquirer(Acquirer):
    """Fetch the EPIC record list with timeout, retry, and fallback."""

    mode = Mode.IMAGE

    def __init__(
        self,
        config: FeedConfig,
        context: EngineContext,
        network: NetworkClient,
        clock: Clock,
        emit: Emit = _discard,
    ) -> None:
        super().__init__(context, emit)
        self._config = config
        self._network = network
        self._clock = clock
        self._sources: tuple[ImageSource, ImageSource] = (
            config.primary_source,
            config.fallback_source,
        )
        self._task: asyncio.Task[None] | None = None
        self._current: AcquisitionAttempt | None = None

    @property
    def sources(self) -> tuple[ImageSource, ImageSource]:
        return self._sources

    @property
    def current_attempt(self) -> AcquisitionAttempt | None:
        """The attempt in flight, or ``None`` between acquisitions."""
        return self._current

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ------------------------------------------------------------------
    # Acquirer lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Run ``acquire()`` as a task and emit its outcome.

        Must be called with a running event loop.
        """
        if self.is_running:
            logger.debug("Image acquisition already running; start ignored")
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def reset(self) -> None:
        self.teardown()
        self.start()

    def teardown(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.info("Image acquisition cancelled")
        self._task = None
        self._current = None

    async def _run(self) -> None:
        try:
            payload = await self.acquire()
        except AcquisitionExhausted as exc:
            self._emit(AcquisitionFailed(self.mode, exc))
            return
        self._emit(AcquisitionSucceeded(self.mode, payload))

    # ------------------------------------------------------------------
    # acquire
    # ------------------------------------------------------------------

    async def acquire(self) -> ImagePayload:
        """Return the latest EPIC records, from cache or the network.

        Returns:
            The validated record tuple, newest first.

        Raises:
            AcquisitionExhausted: If every attempt failed.  ``last_error``
                holds the classification of the final attempt.
        """
        cached = self._context.cache.get()
        if cached is not None:
            logger.info(
                "Image cache hit | age=%.1fs | records=%d",
                self._clock.now() - cached.fetched_at,
                len(cached.payload),
            )
            return cached.payload

        total = self._config.total_attempts
        last_error: ImageAttemptError | None = None

        try:
            for attempt_number in range(total):
                source_index = PRIMARY_INDEX if attempt_number == 0 else FALLBACK_INDEX
                attempt = AcquisitionAttempt(
                    source_index=source_index,
                    attempt_number=attempt_number,
                    started_at=self._clock.now(),
                )
                self._current = attempt
                self._context.session.current_source_index = source_index

                if attempt_number > 0:
                    self._emit(
                        StatusChanged(
                            self.mode,
                            f"Retrying with backup endpoint (attempt {attempt_number + 1}/{total})",
                        )
                    )

                try:
                    payload = await self._attempt(attempt)
                except ImageAttemptError as exc:
                    last_error = exc
                    logger.warning(
                        "Image attempt failed | attempt=%d/%d | source=%s | code=%s | error=%s",
                        attempt_number + 1,
                        total,
                        self._sources[source_index].name,
                        exc.code,
                        exc,
                    )
                    if attempt_number < total - 1:
                        await self._clock.sleep(self._config.retry_base_delay_s * (attempt_number + 1))
                    continue

                self._context.cache.put(payload)
                logger.info(
                    "Image acquired | attempt=%d/%d | source=%s | records=%d",
                    attempt_number + 1,
                    total,
                    self._sources[source_index].name,
                    len(payload),
                )
                return payload
        finally:
            self._current = None

        logger.error("Image acquisition exhausted | attempts=%d | last_error=%s", total, last_error)
        raise AcquisitionExhausted(last_error, total)

    async def _attempt(self, attempt: AcquisitionAttempt) -> ImagePayload:
        """Run one request and classify its outcome.

        Raises:
            ImageAttemptError: Any classified failure.
        """
        source = self._sources[attempt.source_index]
        url = source.resolve(self._config.api_key)
        timeout_s = self._config.request_timeout_s

        try:
            response = await asyncio.wait_for(
                self._network.request(url, timeout_s=timeout_s),
                timeout=timeout_s,
            )
        except TimeoutError as exc:
            msg = f"No response from {source.name} endpoint within {timeout_s:.1f}s"
            raise RequestTimeout(msg) from exc
        except ImageAttemptError:
            raise
        except Exception as exc:
            msg = f"Request to {source.name} endpoint failed: {exc}"
            raise TransportError(msg) from exc

        return classify_response(response)


def classify_response(response: NetworkResponse) -> ImagePayload:
    """Turn a response into validated records or a classified failure.

    Raises:
        ServiceUnavailable: HTTP 503.
        RateLimited: HTTP 429.
        UpstreamError: Any other non-2xx status.
        EmptyResult: Body is not a non-empty list, or no record validates.
    """
    if response.status == 503:
        raise ServiceUnavailable()
    if response.status == 429:
        raise RateLimited()
    if not response.ok:
        raise UpstreamError(response.status)

    body = response.body
    if not isinstance(body, list) or not body:
        msg = "Response body is empty or not a list"
        raise EmptyResult(msg)

    records = parse_records(body)
    if not records:
        msg = f"None of the {len(body)} records in the response could be parsed"
        raise EmptyResult(msg)
    return records
