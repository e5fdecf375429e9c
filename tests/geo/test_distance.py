from __future__ import annotations

import math

import pytest

from src.geo_attendance.geo_attendance.core.exceptions import InvalidLocationError
from src.geo_attendance.geo_attendance.geo.distance import distance_meters, is_within, validate_coordinates


def test_same_point_is_zero():
    assert distance_meters(10.7721, 106.6578, 10.7721, 106.6578) == pytest.approx(0.0, abs=1e-6)


def test_distance_is_symmetric():
    a = distance_meters(21.0285, 105.8542, 10.8231, 106.6297)
    b = distance_meters(10.8231, 106.6297, 21.0285, 105.8542)
    assert a == pytest.approx(b)


def test_new_york_to_los_angeles_is_about_3940_km():
    d = distance_meters(40.7128, -74.0060, 34.0522, -118.2437)
    assert 3.9e6 < d < 4.0e6


def test_small_offset_is_a_few_meters():
    # 0.0001 deg of latitude is roughly 11 m
    d = distance_meters(10.0, 106.0, 10.0001, 106.0)
    assert 10 < d < 12


def test_antipodal_points_do_not_produce_nan():
    d = distance_meters(0.0, 0.0, 0.0, 180.0)
    assert not math.isnan(d)
    assert d == pytest.approx(math.pi * 6_371_000.0, rel=1e-9)


def test_boundary_is_inclusive():
    assert is_within(50.0, 50.0)
    assert not is_within(50.0001, 50.0)


@pytest.mark.parametrize(
    "lat,lng",
    [("10", 106.0), (10.0, None), (True, 106.0), (float("nan"), 106.0), (90.5, 0.0), (0.0, -180.1)],
)
def test_validate_coordinates_rejects_bad_input(lat, lng):
    with pytest.raises(InvalidLocationError):
        validate_coordinates(lat, lng)


def test_validate_coordinates_accepts_extremes():
    assert validate_coordinates(-90, 180) == (-90.0, 180.0)
