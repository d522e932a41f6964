import struct

import pytest

from wardpickup.core.geo import SENTINEL, GeoPoint, is_sentinel
from wardpickup.core.location_codec import decode_location, encode_ewkb_hex, encode_geojson, encode_wkt


def test_decode_wkt_point():
    assert decode_location("POINT(76.614 8.891)") == GeoPoint(lat=8.891, lng=76.614)


def test_decode_wkt_is_case_insensitive_and_tolerates_srid_prefix():
    assert decode_location("SRID=4326;point( -0.12  51.5 )") == GeoPoint(lat=51.5, lng=-0.12)


def test_decode_postgis_ewkb_hex():
    # geography(Point, 4326) for lng=76.614 lat=8.891 as PostGIS returns it.
    raw = "0101000020E6100000" + struct.pack("<d", 76.614).hex() + struct.pack("<d", 8.891).hex()
    assert decode_location(raw) == GeoPoint(lat=8.891, lng=76.614)


def test_decode_geojson_and_xy_objects():
    assert decode_location({"type": "Point", "coordinates": [76.614, 8.891]}) == GeoPoint(lat=8.891, lng=76.614)
    assert decode_location({"x": 76.614, "y": 8.891}) == GeoPoint(lat=8.891, lng=76.614)


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "",
        "somewhere near the temple",
        "01" + "Z" * 60,
        "0101000020E6100000",
        {"coordinates": []},
        {"coordinates": ["a", "b"]},
        {"lat": 8.891, "lng": 76.614},
        {"x": "east", "y": 1},
        42,
    ],
)
def test_unrecognized_or_malformed_input_yields_sentinel(raw):
    point = decode_location(raw)
    assert point == SENTINEL
    assert is_sentinel(point)


def test_nan_coordinates_yield_sentinel():
    raw = "0101000020E6100000" + struct.pack("<d", float("nan")).hex() + struct.pack("<d", 8.0).hex()
    assert is_sentinel(decode_location(raw))


def test_encoders_produce_decodable_shapes():
    point = GeoPoint(lat=8.891, lng=76.614)
    assert encode_geojson(point) == {"type": "Point", "coordinates": [76.614, 8.891]}
    assert decode_location(encode_wkt(point)) == point
    assert decode_location(encode_ewkb_hex(point)) == point
    assert encode_ewkb_hex(point).startswith("0101000020E6100000")
