"""Typed events delivered to the session controller's inbound queue.

Every asynchronous source (the stream player, the watchdog timer and
the acquirers reporting their outcome) posts one of these events.
The controller processes them strictly one at a time, in arrival order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from earthfeed.core.exceptions import FeedError
    from earthfeed.models.feed import Mode, PlayerState

# ---------------------------------------------------------------------------
# Player lifecycle signals
# ---------------------------------------------------------------------------
#
# ``generation`` is the value handed to ``StreamPlayer.load`` for the load
# the signal belongs to.  The sequencer drops signals from earlier loads.


@dataclass(frozen=True, slots=True)
class PlayerReady:
    """The player has loaded a stream and can start playback."""

    generation: int


@dataclass(frozen=True, slots=True)
class PlayerStateChanged:
    state: PlayerState
    generation: int


@dataclass(frozen=True, slots=True)
class PlayerErrored:
    code: int | str
    generation: int


# ---------------------------------------------------------------------------
# Timer
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class WatchdogFired:
    """A load-timeout or liveness tick, tagged with the generation that armed it."""

    generation: int


# ---------------------------------------------------------------------------
# Acquisition outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AcquisitionSucceeded:
    mode: Mode
    result: Any


@dataclass(frozen=True, slots=True)
class AcquisitionFailed:
    mode: Mode
    error: FeedError


@dataclass(frozen=True, slots=True)
class StatusChanged:
    mode: Mode
    text: str


PlayerEvent = Union[PlayerReady, PlayerStateChanged, PlayerErrored]
StreamEvent = Union[PlayerReady, PlayerStateChanged, PlayerErrored, WatchdogFired]
OutcomeEvent = Union[AcquisitionSucceeded, AcquisitionFailed, StatusChanged]
FeedEvent = Union[StreamEvent, OutcomeEvent]
