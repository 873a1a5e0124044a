"""Test doubles shared by the unit tests.

- ``FakeClock``: manual monotonic time with cancellable timers
- ``ScriptedNetwork``: ``NetworkClient`` replaying a list of outcomes
- ``FakePlayer`` / ``PlayerFactory``: recording stream player
- ``RecordingPresenter``: captures presenter callbacks
- ``EventRecorder``: standalone emit target for a ``FailoverSequencer``
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from earthfeed.acquisition.network import NetworkResponse
from earthfeed.models.events import (
    PlayerErrored,
    PlayerReady,
    PlayerStateChanged,
    WatchdogFired,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from earthfeed.acquisition.failover import FailoverSequencer
    from earthfeed.models.feed import PlayerState

# ---------------------------------------------------------------------------
# Sample EPIC data
# ---------------------------------------------------------------------------

EPIC_RECORDS: list[dict[str, Any]] = [
    {
        "identifier": "20240501001751",
        "caption": "This image was taken by NASA's EPIC camera onboard the NOAA DSCOVR spacecraft",
        "image": "epic_1b_20240501001751",
        "version": "03",
        "date": "2024-05-01 00:13:03",
    },
    {
        "identifier": "20240430224551",
        "caption": "This image was taken by NASA's EPIC camera onboard the NOAA DSCOVR spacecraft",
        "image": "epic_1b_20240430224551",
        "version": "03",
        "date": "2024-04-30 22:41:03",
    },
]

LATEST_IMAGE_URL = (
    "https://epic.gsfc.nasa.gov/archive/natural/2024/05/01/png/epic_1b_20240501001751.png"
)


def epic_response(records: list[dict[str, Any]] | None = None, status: int = 200) -> NetworkResponse:
    body = copy.deepcopy(EPIC_RECORDS if records is None else records)
    return NetworkResponse(status=status, body=body)


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeTimer:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def pending(self) -> bool:
        return not self.cancelled and not self.fired


class FakeClock:
    """Time only moves when ``advance`` or ``sleep`` is called."""

    def __init__(self, start: float = 1000.0) -> None:
        self._now = start
        self.timers: list[FakeTimer] = []
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(self._now + delay_s, callback)
        self.timers.append(timer)
        return timer

    async def sleep(self, delay_s: float) -> None:
        self.sleeps.append(delay_s)
        self._now += delay_s

    def advance(self, seconds: float) -> None:
        """Move time forward, firing due timers in order."""
        target = self._now + seconds
        while True:
            due = [t for t in self.timers if t.pending and t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self._now = timer.due
            timer.fired = True
            timer.callback()
        self._now = target

    @property
    def pending_timers(self) -> list[FakeTimer]:
        return [t for t in self.timers if t.pending]


# ---------------------------------------------------------------------------
# Network
# ---------------------------------------------------------------------------


class ScriptedNetwork:
    """Replays *outcomes* in order; the last one repeats forever.

    An outcome is a ``NetworkResponse`` (returned), an exception
    (raised), or a zero-argument coroutine function (awaited).
    """

    def __init__(self, *outcomes: Any, clock: FakeClock | None = None) -> None:
        self._outcomes = list(outcomes)
        self._clock = clock
        self.urls: list[str] = []
        self.call_times: list[float] = []

    async def request(self, url: str, *, timeout_s: float) -> NetworkResponse:
        self.urls.append(url)
        if self._clock is not None:
            self.call_times.append(self._clock.now())
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            return await outcome()
        return outcome


# ---------------------------------------------------------------------------
# Player
# ---------------------------------------------------------------------------


class FakePlayer:
    """Records loads; helper methods emit lifecycle signals.

    Signals are tagged with the generation of the latest load unless a
    *generation* is given, which replays a signal from an earlier load.
    With ``fail_on_load`` set, every load immediately reports an error
    from inside ``load`` itself.
    """

    def __init__(self, emit: Callable[[Any], None], *, fail_on_load: bool = False) -> None:
        self._emit = emit
        self.fail_on_load = fail_on_load
        self.loaded: list[str] = []
        self.generations: list[int] = []

    @property
    def generation(self) -> int:
        return self.generations[-1]

    def load(self, source_id: str, generation: int) -> None:
        self.loaded.append(source_id)
        self.generations.append(generation)
        if self.fail_on_load:
            self._emit(PlayerErrored(150, generation))

    def ready(self, generation: int | None = None) -> None:
        self._emit(PlayerReady(self._tag(generation)))

    def state(self, state: PlayerState, generation: int | None = None) -> None:
        self._emit(PlayerStateChanged(state, self._tag(generation)))

    def error(self, code: int | str = 150, generation: int | None = None) -> None:
        self._emit(PlayerErrored(code, self._tag(generation)))

    def _tag(self, generation: int | None) -> int:
        return self.generation if generation is None else generation


class PlayerFactory:
    def __init__(self, *, fail_on_load: bool = False) -> None:
        self.fail_on_load = fail_on_load
        self.players: list[FakePlayer] = []

    def __call__(self, emit: Callable[[Any], None]) -> FakePlayer:
        player = FakePlayer(emit, fail_on_load=self.fail_on_load)
        self.players.append(player)
        return player

    @property
    def player(self) -> FakePlayer:
        return self.players[-1]


# ---------------------------------------------------------------------------
# Presenter and event capture
# ---------------------------------------------------------------------------


class RecordingPresenter:
    def __init__(self) -> None:
        self.successes: list[Any] = []
        self.errors: list[dict[str, object]] = []
        self.statuses: list[str] = []

    def on_success(self, result: Any) -> None:
        self.successes.append(result)

    def on_error(self, error: dict[str, object]) -> None:
        self.errors.append(error)

    def on_status_update(self, text: str) -> None:
        self.statuses.append(text)


class EventRecorder:
    """Emit target that loops stream events back into a sequencer."""

    def __init__(self) -> None:
        self.events: list[Any] = []
        self.sequencer: FailoverSequencer | None = None

    def __call__(self, event: Any) -> None:
        if isinstance(event, (PlayerReady, PlayerStateChanged, PlayerErrored, WatchdogFired)):
            assert self.sequencer is not None
            self.sequencer.handle(event)
        else:
            self.events.append(event)

    def of_type(self, event_type: type) -> list[Any]:
        return [e for e in self.events if isinstance(e, event_type)]
