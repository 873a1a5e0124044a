"""Tests for the engine's typed models."""

from __future__ import annotations

import pytest

from earthfeed.models.feed import (
    AcquisitionAttempt,
    CacheEntry,
    ImageSource,
    Mode,
    ModelValidationError,
    SessionState,
    StreamSession,
    StreamSource,
    StreamStatus,
)


class TestImageSource:
    def test_resolve_substitutes_key(self) -> None:
        source = ImageSource("primary", "https://x.test/?api_key={api_key}", requires_key=True)
        assert source.resolve("K") == "https://x.test/?api_key=K"

    def test_keyless_source_ignores_key(self) -> None:
        source = ImageSource("fallback", "https://x.test/natural")
        assert source.resolve("K") == "https://x.test/natural"

    def test_key_placeholder_required(self) -> None:
        with pytest.raises(ModelValidationError, match="api_key"):
            ImageSource("primary", "https://x.test/", requires_key=True)

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name_rejected(self, name: str) -> None:
        with pytest.raises(ModelValidationError):
            ImageSource(name, "https://x.test/")


class TestStreamSource:
    def test_display_name_prefers_label(self) -> None:
        assert StreamSource("abc", "ISS").display_name == "ISS"

    def test_display_name_falls_back_to_id(self) -> None:
        assert StreamSource("abc").display_name == "abc"

    def test_blank_id_rejected(self) -> None:
        with pytest.raises(ModelValidationError) as exc_info:
            StreamSource(" ")
        assert exc_info.value.field_name == "source_id"


class TestCacheEntry:
    def test_fresh_inside_ttl(self) -> None:
        entry = CacheEntry(payload=("x",), fetched_at=100.0)
        assert entry.is_fresh(100.0 + 59.999, 60.0)

    def test_stale_at_exactly_ttl(self) -> None:
        entry = CacheEntry(payload=("x",), fetched_at=100.0)
        assert not entry.is_fresh(160.0, 60.0)

    def test_frozen(self) -> None:
        entry = CacheEntry(payload=None, fetched_at=0.0)
        with pytest.raises(AttributeError):
            entry.fetched_at = 1.0  # type: ignore[misc]


class TestSessionState:
    def test_defaults(self) -> None:
        state = SessionState()
        assert state.mode is Mode.IMAGE
        assert state.is_loading is False
        assert state.current_source_index == 0
        assert state.last_alive_at is None

    def test_mutable(self) -> None:
        state = SessionState()
        state.mode = Mode.STREAM
        state.is_loading = True
        assert state.mode is Mode.STREAM


class TestStreamModels:
    @pytest.mark.parametrize(
        ("status", "text"),
        [
            (StreamStatus.CONNECTING, "Connecting to live feed"),
            (StreamStatus.LIVE, "Live"),
            (StreamStatus.BUFFERING, "Buffering"),
            (StreamStatus.PAUSED, "Paused"),
        ],
    )
    def test_status_text(self, status: StreamStatus, text: str) -> None:
        assert status.text == text

    def test_stream_session_defaults_to_connecting(self) -> None:
        session = StreamSession(source=StreamSource("A"), source_index=0)
        assert session.status is StreamStatus.CONNECTING

    def test_attempt_fields(self) -> None:
        attempt = AcquisitionAttempt(source_index=1, attempt_number=2, started_at=5.0)
        assert (attempt.source_index, attempt.attempt_number, attempt.started_at) == (1, 2, 5.0)
