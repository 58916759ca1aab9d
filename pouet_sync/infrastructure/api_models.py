"""
Pydantic models for validating the manifest published by pouet.net.

These models serve as a strict contract for the expected JSON data, ensuring
that any deviation from this structure is caught at the infrastructure layer
before being passed to the application core.
"""

import re

from pydantic import BaseModel, field_validator

_DATE_DIGITS = re.compile(r"^\d{8}$")


class DumpLink(BaseModel):
    """The location of a single compressed dump."""

    url: str


class LatestDumps(BaseModel):
    """Represents the 'latest' object listing the current dump of each entity."""

    prods: DumpLink
    groups: DumpLink
    parties: DumpLink
    boards: DumpLink


class ManifestResponse(BaseModel):
    """Represents the top-level structure of the manifest."""

    latest: LatestDumps
    date: str

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        """Accepts 20240101, "20240101" or "2024-01-01"; yields "20240101"."""
        text = str(value).replace("-", "")
        if not _DATE_DIGITS.match(text):
            raise ValueError(f"expected an 8-digit date, got {value!r}")
        return text
