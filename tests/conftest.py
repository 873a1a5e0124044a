"""Shared pytest fixtures for the earthfeed test suite."""

from __future__ import annotations

import pytest

from earthfeed.models.feed import StreamSource
from tests.fakes import FakeClock, PlayerFactory

# ---------------------------------------------------------------------------
# Engine collaborators
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> FakeClock:
    """A manual clock starting at t=1000s."""
    return FakeClock()


@pytest.fixture()
def player_factory() -> PlayerFactory:
    return PlayerFactory()


@pytest.fixture()
def stream_sources() -> tuple[StreamSource, ...]:
    """Three stream candidates A, B, C in fallback order."""
    return (
        StreamSource(source_id="A", label="Stream A"),
        StreamSource(source_id="B", label="Stream B"),
        StreamSource(source_id="C", label="Stream C"),
    )
