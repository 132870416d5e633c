"""Location models for crag lookups."""

from __future__ import annotations

import re
from typing import Self

from pydantic import BaseModel, Field


# Regex for parsing lat/long coordinates: "latitude,longitude"
# Supports optional +/- prefix for both values
COORDINATE_PATTERN = re.compile(
    r"^(?P<lat>[-+]?\d*\.?\d+)\s*,\s*(?P<lon>[-+]?\d*\.?\d+)$"
)


class Coordinates(BaseModel):
    """Geographic coordinates of a crag or sector (latitude/longitude).

    Latitude:
        - Negative (-) = south of equator
        - Positive (+) = north of equator
        - Range: -90 to +90

    Longitude:
        - Negative (-) = west of prime meridian
        - Positive (+) = east of prime meridian
        - Range: -180 to +180
    """

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Parse coordinates from string format 'latitude,longitude'.

        Examples:
            '45.8326,6.8652' -> Chamonix
            '37.7459,-119.5332' -> Yosemite Valley
            '-33.7000,150.3000' -> Blue Mountains
        """
        match = COORDINATE_PATTERN.match(value.strip())
        if not match:
            raise ValueError(
                f"Invalid coordinate format: '{value}'. "
                "Expected format: 'latitude,longitude' (e.g., '45.8326,6.8652')"
            )
        return cls(
            latitude=float(match.group("lat")),
            longitude=float(match.group("lon")),
        )

    def __str__(self) -> str:
        return f"{self.latitude},{self.longitude}"

    def rounded(self, digits: int = 3) -> tuple[float, float]:
        """Return (latitude, longitude) rounded for use as a cache key.

        Rounding avoids cache fragmentation from tiny coordinate differences
        between requests for the same crag.
        """
        return (round(self.latitude, digits), round(self.longitude, digits))
