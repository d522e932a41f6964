"""
Household location codec.

Household rows carry their anchor point in whatever shape the upstream store
handed back. This module normalizes all of them into a `GeoPoint`:

- WKT text:            `POINT(76.614 8.891)` (longitude first)
- hex (E)WKB:          `0101000020E6100000...` as returned by PostGIS geography columns
- GeoJSON-like object: `{"type": "Point", "coordinates": [lng, lat]}`
- x/y object:          `{"x": lng, "y": lat}`

Decoding never raises. Anything unrecognized (or non-finite) comes back as the
`SENTINEL` (0, 0) point, and callers must check `is_sentinel()` before using the
result for distance math.
"""

from __future__ import annotations

import math
import re
import struct
from collections.abc import Mapping
from typing import Any

from wardpickup.core.geo import SENTINEL, GeoPoint

_WKT_POINT = re.compile(r"POINT\s*\(\s*([\d.-]+)\s+([\d.-]+)\s*\)", re.IGNORECASE)

# Little-endian byte order marker; shorter strings cannot hold two doubles.
_WKB_PREFIX = "01"
_WKB_MIN_HEX_LEN = 50
# Hex offsets of the X (lng) and Y (lat) doubles in an EWKB point with SRID.
_WKB_LNG = slice(18, 34)
_WKB_LAT = slice(34, 50)

_EWKB_POINT_SRID_HEADER = "0101000020"


def _hex_to_double(chunk: str) -> float:
    return struct.unpack("<d", bytes.fromhex(chunk))[0]


def _point(lat: Any, lng: Any) -> GeoPoint:
    try:
        lat_f = float(lat)
        lng_f = float(lng)
    except (TypeError, ValueError):
        return SENTINEL
    if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
        return SENTINEL
    return GeoPoint(lat=lat_f, lng=lng_f)


def _decode_text(raw: str) -> GeoPoint:
    match = _WKT_POINT.search(raw)
    if match:
        return _point(match.group(2), match.group(1))

    if raw.startswith(_WKB_PREFIX) and len(raw) >= _WKB_MIN_HEX_LEN:
        try:
            lng = _hex_to_double(raw[_WKB_LNG])
            lat = _hex_to_double(raw[_WKB_LAT])
        except (ValueError, struct.error):
            return SENTINEL
        return _point(lat, lng)

    return SENTINEL


def _decode_mapping(raw: Mapping[str, Any]) -> GeoPoint:
    coords = raw.get("coordinates")
    if coords:
        if isinstance(coords, (list, tuple)) and len(coords) >= 2:
            return _point(coords[1], coords[0])
        return SENTINEL
    if "x" in raw:
        return _point(raw.get("y"), raw.get("x"))
    return SENTINEL


def decode_location(raw: Any) -> GeoPoint:
    """Decode a stored household location into a `GeoPoint` (or the sentinel)."""
    if isinstance(raw, str):
        return _decode_text(raw)
    if isinstance(raw, Mapping):
        return _decode_mapping(raw)
    return SENTINEL


def encode_geojson(point: GeoPoint) -> dict[str, Any]:
    """Canonical storage shape for new anchors."""
    return {"type": "Point", "coordinates": [point.lng, point.lat]}


def encode_wkt(point: GeoPoint) -> str:
    return f"POINT({point.lng!r} {point.lat!r})"


def encode_ewkb_hex(point: GeoPoint, srid: int = 4326) -> str:
    """Encode as PostGIS-style hex EWKB (little-endian point with SRID)."""
    body = struct.pack("<I", srid) + struct.pack("<d", point.lng) + struct.pack("<d", point.lat)
    return (_EWKB_POINT_SRID_HEADER + body.hex()).upper()
