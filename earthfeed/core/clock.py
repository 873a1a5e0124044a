"""Time source and timers for the acquisition engine.

The engine never reads the wall clock or schedules callbacks directly;
it goes through a ``Clock`` so that tests can drive time by hand.
``LoopClock`` is the production implementation on top of the running
asyncio event loop.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable


class TimerHandle(Protocol):
    """A scheduled callback that can be cancelled before it fires."""

    def cancel(self) -> None: ...


class Clock(Protocol):
    """Monotonic time, cancellable one-shot timers, and async sleep."""

    def now(self) -> float:
        """Return monotonic time in seconds."""
        ...

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        """Run *callback* once after *delay_s* seconds."""
        ...

    async def sleep(self, delay_s: float) -> None:
        """Suspend the caller for *delay_s* seconds."""
        ...


class LoopClock:
    """``Clock`` backed by the running asyncio loop.

    ``now()`` uses ``time.monotonic`` (the same source as the default
    loop clock), so it is usable outside a running loop as well.
    Timers require a running loop.
    """

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return asyncio.get_running_loop().call_later(delay_s, callback)

    async def sleep(self, delay_s: float) -> None:
        await asyncio.sleep(delay_s)
