"""Stream-mode acquirer: ordered failover with a liveness watchdog.

State machine over the configured stream sources::

    IDLE ──start──▶ LOADING(i) ──ready──▶ ACTIVE(i)
                        │                    │
                        └──── failure ───────┴──▶ LOADING(i+1) | EXHAUSTED

Failures are a player error, the stream ending (or dropping back to
unstarted while active), no ``ready`` within the health-check period
after a load, or the watchdog finding no playback for longer than that
period.  All of them go through ``_advance``; only running past the
last source is reported to the controller.

One one-shot timer covers both phases.  ``_load`` arms it as a load
timeout; ``ready`` re-arms it as the liveness watchdog, which re-arms
itself on every healthy tick.  At most one timer is live.

Each load bumps a generation counter.  The player receives it with the
load and echoes it on every signal; ticks carry the generation that
armed them.  Anything tagged with an older generation is ignored, which
covers signals and ticks already queued when the sequencer moved on.
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Protocol

from earthfeed.acquisition.base import (
    Acquirer,
    PlayerError,
    SourceExhausted,
    StreamEnded,
    StreamFailure,
    StreamStalled,
)
from earthfeed.models.events import (
    AcquisitionFailed,
    AcquisitionSucceeded,
    PlayerErrored,
    PlayerReady,
    PlayerStateChanged,
    StatusChanged,
    WatchdogFired,
)
from earthfeed.models.feed import Mode, PlayerState, StreamSession, StreamStatus

if TYPE_CHECKING:
    from collections.abc import Callable

    from earthfeed.acquisition.base import Emit, EngineContext
    from earthfeed.core.clock import Clock, TimerHandle
    from earthfeed.core.config import FeedConfig
    from earthfeed.models.events import FeedEvent, StreamEvent
    from earthfeed.models.feed import StreamSource

logger = logging.getLogger("earthfeed.acquisition.failover")


class StreamPlayer(Protocol):
    """The external video player.

    Created once per sequencer by a ``PlayerFactory`` that receives the
    callable to post ``PlayerReady`` / ``PlayerStateChanged`` /
    ``PlayerErrored`` events to.  Every event about a load must carry
    the *generation* that load was started with.
    """

    def load(self, source_id: str, generation: int) -> None: ...


class SequencerState(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    ACTIVE = "active"
    EXHAUSTED = "exhausted"


_STATUS_FOR_STATE = {
    PlayerState.PLAYING: StreamStatus.LIVE,
    PlayerState.BUFFERING: StreamStatus.BUFFERING,
    PlayerState.PAUSED: StreamStatus.PAUSED,
}


class FailoverSequencer(Acquirer):
    """Keep one live stream playing, failing over through the source list.

    Without an explicit *emit*, events are routed back into ``handle``
    directly and outcome events are dropped; the session controller binds
    its own queue instead.
    """

    mode = Mode.STREAM

    def __init__(
        self,
        config: FeedConfig,
        context: EngineContext,
        player_factory: Callable[[Callable[[FeedEvent], None]], StreamPlayer],
        clock: Clock,
        emit: Emit | None = None,
    ) -> None:
        super().__init__(context, emit or self._handle_locally)
        self._sources: tuple[StreamSource, ...] = config.stream_sources
        self._period_s = config.health_check_period_s
        self._player_factory = player_factory
        self._clock = clock
        self._player: StreamPlayer | None = None
        self._watchdog: TimerHandle | None = None
        self._player_state: PlayerState | None = None
        self._state = SequencerState.IDLE
        self._index = 0
        self._generation = 0

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SequencerState:
        return self._state

    @property
    def source_index(self) -> int:
        return self._index

    @property
    def current_source(self) -> StreamSource:
        return self._sources[self._index]

    @property
    def sources(self) -> tuple[StreamSource, ...]:
        return self._sources

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def watchdog_armed(self) -> bool:
        return self._watchdog is not None

    @property
    def is_running(self) -> bool:
        return self._state in (SequencerState.LOADING, SequencerState.ACTIVE)

    # ------------------------------------------------------------------
    # Acquirer lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._state is not SequencerState.IDLE:
            logger.debug("Stream start ignored | state=%s", self._state.value)
            return
        logger.info("Stream acquisition started | sources=%d", len(self._sources))
        self._load(0)

    def reset(self) -> None:
        logger.info("Stream sequencer reset | previous_index=%d", self._index)
        self.teardown()
        self.start()

    def teardown(self) -> None:
        self._cancel_watchdog()
        self._generation += 1
        self._state = SequencerState.IDLE
        self._index = 0
        self._player_state = None
        self._context.session.last_alive_at = None

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    def handle(self, event: StreamEvent) -> None:
        """Apply one player signal or watchdog tick."""
        if isinstance(event, WatchdogFired):
            self._on_watchdog(event)
            return

        if not self.is_running:
            logger.debug("Player event ignored | state=%s | event=%s", self._state.value, event)
            return
        if event.generation != self._generation:
            logger.debug(
                "Stale player event discarded | event_generation=%d | generation=%d | event=%s",
                event.generation,
                self._generation,
                event,
            )
            return

        if isinstance(event, PlayerReady):
            self._on_ready()
        elif isinstance(event, PlayerStateChanged):
            self._on_state_changed(event.state)
        elif isinstance(event, PlayerErrored):
            label = self.current_source.display_name
            self._advance(PlayerError(event.code, f"{label}: player error {event.code}"))

    def _handle_locally(self, event: FeedEvent) -> None:
        if isinstance(event, (PlayerReady, PlayerStateChanged, PlayerErrored, WatchdogFired)):
            self.handle(event)

    def _on_ready(self) -> None:
        if self._state is not SequencerState.LOADING:
            logger.debug("Duplicate ready ignored | source=%s", self.current_source.source_id)
            return

        self._state = SequencerState.ACTIVE
        self._context.session.last_alive_at = self._clock.now()
        self._arm_watchdog()
        logger.info(
            "Stream active | index=%d | source=%s",
            self._index,
            self.current_source.source_id,
        )
        self._emit(
            AcquisitionSucceeded(
                self.mode,
                StreamSession(source=self.current_source, source_index=self._index),
            )
        )
        self._emit(StatusChanged(self.mode, StreamStatus.CONNECTING.text))

    def _on_state_changed(self, state: PlayerState) -> None:
        label = self.current_source.display_name
        if state is PlayerState.ENDED:
            self._advance(StreamEnded(f"{label}: stream ended"))
            return
        if state is PlayerState.UNSTARTED:
            # Players report unstarted right after a load; only a drop while active counts.
            if self._state is SequencerState.ACTIVE:
                self._advance(StreamEnded(f"{label}: stream stopped"))
            return

        if self._state is not SequencerState.ACTIVE:
            logger.debug("State change before ready ignored | state=%s", state.value)
            return

        self._player_state = state
        if state is PlayerState.PLAYING:
            self._context.session.last_alive_at = self._clock.now()
        self._emit(StatusChanged(self.mode, _STATUS_FOR_STATE[state].text))

    # ------------------------------------------------------------------
    # Watchdog
    # ------------------------------------------------------------------

    def _arm_watchdog(self) -> None:
        self._cancel_watchdog()
        generation = self._generation
        self._watchdog = self._clock.call_later(
            self._period_s,
            lambda: self._emit(WatchdogFired(generation)),
        )

    def _cancel_watchdog(self) -> None:
        if self._watchdog is not None:
            self._watchdog.cancel()
            self._watchdog = None

    def _on_watchdog(self, event: WatchdogFired) -> None:
        if event.generation != self._generation or not self.is_running:
            logger.debug(
                "Stale watchdog tick ignored | tick_generation=%d | generation=%d",
                event.generation,
                self._generation,
            )
            return

        self._watchdog = None
        label = self.current_source.display_name
        if self._state is SequencerState.LOADING:
            self._advance(StreamStalled(f"{label}: not ready within {self._period_s:.0f}s"))
            return

        # Players only signal on transitions; still playing means still alive.
        if self._player_state is PlayerState.PLAYING:
            self._context.session.last_alive_at = self._clock.now()
        last_alive = self._context.session.last_alive_at
        idle_s = self._clock.now() - (last_alive if last_alive is not None else 0.0)
        if idle_s > self._period_s:
            self._advance(StreamStalled(f"{label}: no playback for {idle_s:.0f}s"))
            return
        self._arm_watchdog()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _advance(self, failure: StreamFailure) -> None:
        self._cancel_watchdog()
        reason = str(failure)
        next_index = self._index + 1

        if next_index >= len(self._sources):
            self._generation += 1
            self._state = SequencerState.EXHAUSTED
            error = SourceExhausted(reason, len(self._sources))
            logger.error(
                "Stream sources exhausted | tried=%d | reason=%s",
                len(self._sources),
                reason,
            )
            self._emit(AcquisitionFailed(self.mode, error))
            return

        next_source = self._sources[next_index]
        logger.warning(
            "Stream failover | code=%s | from=%s | to=%s | reason=%s",
            failure.code,
            self.current_source.source_id,
            next_source.source_id,
            reason,
        )
        self._emit(StatusChanged(self.mode, f"Switching to {next_source.display_name}"))
        self._load(next_index)

    def _load(self, index: int) -> None:
        self._index = index
        self._generation += 1
        self._state = SequencerState.LOADING
        self._player_state = None
        self._context.session.current_source_index = index
        self._context.session.last_alive_at = None

        source = self._sources[index]
        if self._player is None:
            self._player = self._player_factory(self._post_player_event)
        logger.info(
            "Loading stream | index=%d | source=%s | generation=%d",
            index,
            source.source_id,
            self._generation,
        )
        self._arm_watchdog()
        self._player.load(source.source_id, self._generation)

    def _post_player_event(self, event: FeedEvent) -> None:
        self._emit(event)
