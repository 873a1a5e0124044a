"""Pydantic models for NASA EPIC metadata records.

The EPIC ``/api/natural`` endpoint returns a JSON list of records, newest
first.  Each record names a PNG in the public archive, which lives under
``{archive}/{YYYY}/{MM}/{DD}/png/{image}.png``.

Example record::

    {
        "identifier": "20240501001751",
        "caption": "This image was taken by NASA's EPIC camera ...",
        "image": "epic_1b_20240501001751",
        "date": "2024-05-01 00:13:03"
    }
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from earthfeed.core.constants import ARCHIVE_BASE_URL, IMAGE_FORMAT

logger = logging.getLogger("earthfeed.models.epic")


class EpicImageRecord(BaseModel):
    """One EPIC image record.

    Attributes:
        identifier: EPIC record identifier (timestamp-like string).
        image: Archive file stem, without extension.
        caption: Free-text caption supplied by the API.
        date: Capture time. EPIC uses ``"YYYY-MM-DD HH:MM:SS"``.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    identifier: str = ""
    image: str = Field(min_length=1)
    caption: str = ""
    date: datetime

    @field_validator("date", mode="before")
    @classmethod
    def _space_separated_date(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().replace(" ", "T", 1)
        return value


ImagePayload = tuple[EpicImageRecord, ...]
"""Validated records of one successful fetch, in API order (newest first)."""


@dataclass(frozen=True, slots=True)
class EarthImage:
    """Render result for image mode.

    Attributes:
        image_url: Full archive URL of the PNG.
        captured_at: Capture time of the image.
        caption: Caption from the API record.
        identifier: EPIC record identifier.
    """

    image_url: str
    captured_at: datetime
    caption: str = ""
    identifier: str = ""

    @property
    def display_date(self) -> str:
        """Capture date as ``YYYY-MM-DD``."""
        return self.captured_at.date().isoformat()


def parse_records(body: list[Any]) -> ImagePayload:
    """Validate raw API records, skipping any that cannot be parsed."""
    records: list[EpicImageRecord] = []
    for index, raw in enumerate(body):
        try:
            records.append(EpicImageRecord.model_validate(raw))
        except PydanticValidationError:
            logger.warning("Skipping unparseable EPIC record | index=%d", index, exc_info=True)
    return tuple(records)


def build_archive_url(
    record: EpicImageRecord,
    archive_base_url: str = ARCHIVE_BASE_URL,
    image_format: str = IMAGE_FORMAT,
) -> str:
    """Compose the archive URL of the image described by *record*."""
    captured = record.date
    return (
        f"{archive_base_url.rstrip('/')}/{captured.year:04d}/{captured.month:02d}/"
        f"{captured.day:02d}/{image_format}/{record.image}.{image_format}"
    )


def latest_image(payload: ImagePayload, archive_base_url: str = ARCHIVE_BASE_URL) -> EarthImage:
    """Build the render result for the newest record in *payload*.

    Raises:
        ValueError: If *payload* holds no records.
    """
    if not payload:
        msg = "latest_image: payload holds no records"
        raise ValueError(msg)

    record = payload[0]
    return EarthImage(
        image_url=build_archive_url(record, archive_base_url),
        captured_at=record.date,
        caption=record.caption,
        identifier=record.identifier,
    )
