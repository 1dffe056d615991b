"""Coordinate conversion helpers."""

from __future__ import annotations

import math
from decimal import Decimal


def _format_number(value: float) -> str:
    """Shortest form, like ST_AsText (no trailing zeros, no exponent)."""
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def coords_to_wkt(coords: str) -> str:
    """
    Convert a Google Maps ``"lat, lon"`` string into a WGS84 WKT point.

    Example:
        >>> coords_to_wkt("-34.618000, -58.388972")
        'POINT(-58.388972 -34.618)'

    WKT puts longitude (x) first.

    Raises:
        ValueError: If the string is not two comma-separated numbers or a
            value is outside the latitude/longitude range.
    """
    parts = coords.split(",")
    if len(parts) != 2:
        raise ValueError(f"Expected 'lat, lon', got {coords!r}.")
    try:
        lat, lon = (float(p.strip()) for p in parts)
    except ValueError as exc:
        raise ValueError(f"Expected 'lat, lon', got {coords!r}.") from exc

    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ValueError(f"Coordinates must be finite numbers, got {coords!r}.")
    if not -90.0 <= lat <= 90.0:
        raise ValueError(f"Latitude {lat} is out of range [-90, 90].")
    if not -180.0 <= lon <= 180.0:
        raise ValueError(f"Longitude {lon} is out of range [-180, 180].")

    return f"POINT({_format_number(lon)} {_format_number(lat)})"
