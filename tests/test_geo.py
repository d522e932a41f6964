import pytest

from wardpickup.core.geo import distance_label, haversine_m, round_half_away


@pytest.mark.parametrize(
    "a,b",
    [
        ((8.891, 76.614), (8.8915, 76.6142)),
        ((-33.86, 151.21), (51.5, -0.12)),
        ((0.0, 179.9), (0.0, -179.9)),
    ],
)
def test_haversine_is_symmetric(a, b):
    assert haversine_m(*a, *b) == pytest.approx(haversine_m(*b, *a))


def test_haversine_identical_points_is_zero():
    assert haversine_m(8.891, 76.614, 8.891, 76.614) == 0


def test_haversine_one_degree_of_latitude():
    # R * pi / 180 for a meridian arc.
    assert haversine_m(0, 0, 1, 0) == pytest.approx(111_194.93, abs=0.01)


def test_haversine_accepts_out_of_range_inputs():
    d = haversine_m(100, 400, -100, -400)
    assert d >= 0


def test_distance_label_switches_to_km():
    assert distance_label(42.4) == "42m"
    assert distance_label(999.4) == "999m"
    assert distance_label(1000) == "1.0km"
    assert distance_label(12_345) == "12.3km"


def test_round_half_away_from_zero():
    assert round_half_away(2.5) == 3
    assert round_half_away(-2.5) == -3
    assert round_half_away(0.49) == 0
    assert round_half_away(-9.6) == -10
