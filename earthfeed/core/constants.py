"""Shared engine constants.

Endpoint templates, timing defaults, and the default live-stream
fallback order. ``FeedConfig`` uses these as its defaults.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# EPIC image endpoints
# ---------------------------------------------------------------------------

DEFAULT_API_KEY: str = "DEMO_KEY"
"""Public rate-limited key accepted by api.nasa.gov."""

PRIMARY_ENDPOINT_TEMPLATE: str = "https://api.nasa.gov/EPIC/api/natural?api_key={api_key}"
"""Keyed EPIC metadata endpoint (attempt 0)."""

FALLBACK_ENDPOINT_TEMPLATE: str = "https://epic.gsfc.nasa.gov/api/natural"
"""Keyless EPIC mirror used for every retry."""

ARCHIVE_BASE_URL: str = "https://epic.gsfc.nasa.gov/archive/natural"
"""Root of the EPIC natural-colour image archive."""

IMAGE_FORMAT: str = "png"

# ---------------------------------------------------------------------------
# Timing (seconds)
# ---------------------------------------------------------------------------

CACHE_TTL_S: float = 3600.0
MAX_RETRIES: int = 2
RETRY_BASE_DELAY_S: float = 2.0
REQUEST_TIMEOUT_S: float = 10.0
HEALTH_CHECK_PERIOD_S: float = 15.0

# ---------------------------------------------------------------------------
# Live streams, in fallback order: (source_id, label)
# ---------------------------------------------------------------------------

DEFAULT_STREAM_SOURCES: tuple[tuple[str, str], ...] = (
    ("xRPjKQtRXR8", "ISS HD Earth Viewing"),
    ("86YLFOog4GM", "Earth from Space: ISS Live"),
    ("21X5lGlDOfg", "NASA Live"),
)

# ---------------------------------------------------------------------------
# Stages (used in FeedError.stage)
# ---------------------------------------------------------------------------

STAGE_IMAGE = "image_acquisition"
STAGE_STREAM = "stream_failover"
STAGE_CONFIG = "config"
