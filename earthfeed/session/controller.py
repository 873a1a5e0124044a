"""Session controller: owns the single displayed feed.

The controller is the only entry point the presentation layer uses:

- ``acquire(mode)``  start showing an image or a live stream (fire-and-forget)
- ``retry()``        start over from the first source after a terminal error
- ``post(event)``    deliver a player signal into the engine
- ``close()``        tear everything down

Every asynchronous signal (player lifecycle events, watchdog ticks and
acquisition outcomes) goes through one FIFO queue drained by
``post``.  Events posted while an event is being processed are queued
behind it rather than handled recursively, so each transition runs to
completion before the next one starts.

Reentrancy:
    ``acquire`` is a no-op while ``SessionState.is_loading`` is set for
    the requested mode, and while a stream is already being displayed.
    Requesting the other mode tears the current acquirer down first.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING, Protocol

from earthfeed.acquisition.base import EngineContext
from earthfeed.acquisition.cache import CacheStore
from earthfeed.acquisition.failover import FailoverSequencer
from earthfeed.acquisition.retrying import RetryingAcquirer
from earthfeed.core.clock import LoopClock
from earthfeed.core.constants import ARCHIVE_BASE_URL
from earthfeed.models.epic import latest_image
from earthfeed.models.events import (
    AcquisitionFailed,
    AcquisitionSucceeded,
    PlayerErrored,
    PlayerReady,
    PlayerStateChanged,
    StatusChanged,
    WatchdogFired,
)
from earthfeed.models.feed import Mode, SessionState

if TYPE_CHECKING:
    from collections.abc import Callable

    from earthfeed.acquisition.base import Acquirer
    from earthfeed.acquisition.failover import StreamPlayer
    from earthfeed.acquisition.network import NetworkClient
    from earthfeed.core.clock import Clock
    from earthfeed.core.config import FeedConfig
    from earthfeed.core.exceptions import FeedError
    from earthfeed.models.epic import EarthImage
    from earthfeed.models.events import FeedEvent
    from earthfeed.models.feed import StreamSession

logger = logging.getLogger("earthfeed.session.controller")

_LOADING_TEXT = {
    Mode.IMAGE: "Loading latest Earth image",
    Mode.STREAM: "Connecting to live Earth feed",
}


class FeedPresenter(Protocol):
    """Presentation callbacks driven by the engine."""

    def on_success(self, result: EarthImage | StreamSession) -> None: ...

    def on_error(self, error: dict[str, object]) -> None: ...

    def on_status_update(self, text: str) -> None: ...


class SessionController:
    """Route acquire / retry requests and engine events for one feed."""

    def __init__(
        self,
        presenter: FeedPresenter,
        *,
        context: EngineContext,
        image: RetryingAcquirer,
        stream: FailoverSequencer | None = None,
        archive_base_url: str = ARCHIVE_BASE_URL,
    ) -> None:
        self._presenter = presenter
        self._context = context
        self._archive_base_url = archive_base_url
        self._acquirers: dict[Mode, Acquirer] = {Mode.IMAGE: image}
        if stream is not None:
            self._acquirers[Mode.STREAM] = stream
        for acquirer in self._acquirers.values():
            acquirer.bind(self.post)

        self._queue: deque[FeedEvent] = deque()
        self._draining = False
        self._last_error: FeedError | None = None

    @classmethod
    def build(
        cls,
        config: FeedConfig,
        presenter: FeedPresenter,
        *,
        network: NetworkClient,
        player_factory: Callable[[Callable[[FeedEvent], None]], StreamPlayer] | None = None,
        clock: Clock | None = None,
    ) -> SessionController:
        """Wire a controller with its cache and both acquirers.

        Stream mode is only available when *player_factory* is given.
        """
        clock = clock or LoopClock()
        context = EngineContext(
            cache=CacheStore(config.cache_ttl_s, clock),
            session=SessionState(),
        )
        image = RetryingAcquirer(config, context, network, clock)
        stream = None
        if player_factory is not None:
            stream = FailoverSequencer(config, context, player_factory, clock)
        return cls(
            presenter,
            context=context,
            image=image,
            stream=stream,
            archive_base_url=config.archive_base_url,
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._context.session

    @property
    def context(self) -> EngineContext:
        return self._context

    @property
    def last_error(self) -> FeedError | None:
        """The terminal error of the last acquisition, if it failed."""
        return self._last_error

    def acquirer(self, mode: Mode) -> Acquirer:
        try:
            return self._acquirers[mode]
        except KeyError:
            msg = f"No acquirer configured for {mode.value} mode"
            raise ValueError(msg) from None

    # ------------------------------------------------------------------
    # Requests from the presentation layer
    # ------------------------------------------------------------------

    def acquire(self, mode: Mode) -> None:
        """Start acquiring *mode*; results arrive through the presenter.

        Image mode needs a running event loop.
        """
        session = self.state
        acquirer = self.acquirer(mode)

        if session.mode is mode:
            if session.is_loading:
                logger.debug("acquire ignored | mode=%s | reason=loading", mode.value)
                return
            if acquirer.is_running:
                logger.debug("acquire ignored | mode=%s | reason=already displaying", mode.value)
                return
            if self._last_error is not None:
                self.retry()
                return
        else:
            current = self._acquirers.get(session.mode)
            if current is not None:
                current.teardown()
            session.mode = mode
            session.is_loading = False

        logger.info("acquire | mode=%s", mode.value)
        self._begin(acquirer, restart=False)

    def retry(self) -> None:
        """Start the current mode over from source / attempt 0."""
        session = self.state
        if session.is_loading:
            logger.debug("retry ignored | mode=%s | reason=loading", session.mode.value)
            return

        logger.info(
            "retry | mode=%s | previous_index=%d",
            session.mode.value,
            session.current_source_index,
        )
        session.current_source_index = 0
        self._begin(self.acquirer(session.mode), restart=True)

    def close(self) -> None:
        """Cancel in-flight work and timers for every mode."""
        for acquirer in self._acquirers.values():
            acquirer.teardown()
        self._queue.clear()
        self.state.is_loading = False
        logger.info("Session closed")

    def _begin(self, acquirer: Acquirer, *, restart: bool) -> None:
        self.state.is_loading = True
        self._last_error = None
        self._presenter.on_status_update(_LOADING_TEXT[acquirer.mode])
        if restart:
            acquirer.reset()
        else:
            acquirer.start()

    # ------------------------------------------------------------------
    # Inbound event queue
    # ------------------------------------------------------------------

    def post(self, event: FeedEvent) -> None:
        """Queue *event* and process the queue unless already doing so."""
        self._queue.append(event)
        if self._draining:
            return
        self._draining = True
        try:
            while self._queue:
                self._dispatch(self._queue.popleft())
        finally:
            self._draining = False

    def _dispatch(self, event: FeedEvent) -> None:
        if isinstance(event, AcquisitionSucceeded):
            self._on_succeeded(event)
        elif isinstance(event, AcquisitionFailed):
            self._on_failed(event)
        elif isinstance(event, StatusChanged):
            if event.mode is self.state.mode:
                self._presenter.on_status_update(event.text)
        elif isinstance(event, (PlayerReady, PlayerStateChanged, PlayerErrored, WatchdogFired)):
            stream = self._acquirers.get(Mode.STREAM)
            if self.state.mode is Mode.STREAM and isinstance(stream, FailoverSequencer):
                stream.handle(event)
            else:
                logger.debug("Stream event ignored outside stream mode | event=%s", event)
        else:
            logger.warning("Unknown event type ignored | event=%r", event)

    def _on_succeeded(self, event: AcquisitionSucceeded) -> None:
        if event.mode is not self.state.mode:
            logger.debug("Outcome for inactive mode discarded | mode=%s", event.mode.value)
            return

        self.state.is_loading = False
        result = event.result
        if event.mode is Mode.IMAGE:
            result = latest_image(result, self._archive_base_url)
        logger.info("Feed ready | mode=%s", event.mode.value)
        self._presenter.on_success(result)

    def _on_failed(self, event: AcquisitionFailed) -> None:
        if event.mode is not self.state.mode:
            logger.debug("Outcome for inactive mode discarded | mode=%s", event.mode.value)
            return

        self.state.is_loading = False
        self._last_error = event.error
        logger.error(
            "Feed failed | mode=%s | code=%s | error=%s",
            event.mode.value,
            event.error.code,
            event.error,
        )
        self._presenter.on_error(error_descriptor(event.mode, event.error))


def error_descriptor(mode: Mode, error: FeedError) -> dict[str, object]:
    """Build the payload handed to ``FeedPresenter.on_error``.

    Always carries a human-readable ``message`` and ``action="retry"``.
    """
    descriptor = error.to_error_dict()
    descriptor["mode"] = mode.value
    descriptor["action"] = "retry"
    return descriptor
