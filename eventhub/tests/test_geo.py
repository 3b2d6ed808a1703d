import math

import pytest

from eventhub.discovery.geo import (
    haversine_distance_km,
    meters_to_miles,
    miles_to_meters,
    to_geo_point,
)


def test_geo_point_is_longitude_first():
    point = to_geo_point(47.6, -122.3)
    assert point.type == "Point"
    assert point.coordinates == [-122.3, 47.6]
    assert point.lat_lng() == (47.6, -122.3)


def test_geo_point_parses_strings():
    point = to_geo_point("40.7128", " -74.006 ")
    assert point.coordinates == [-74.006, 40.7128]


@pytest.mark.parametrize(
    "lat,lng",
    [(math.nan, 1), (1, math.nan), ("abc", 1), (None, 1), (1, math.inf), ("", "")],
)
def test_geo_point_rejects_unparseable(lat, lng):
    assert to_geo_point(lat, lng) is None


def test_miles_to_meters_uses_legacy_factor():
    assert miles_to_meters(1) == 1609.34
    assert miles_to_meters(25) == 25 * 1609.34


def test_meters_to_miles_inverts_conversion():
    assert meters_to_miles(1609.34) == 1.0


def test_haversine_same_point_is_zero():
    assert haversine_distance_km([47.6, -122.3], [47.6, -122.3]) == 0


def test_haversine_quarter_great_circle():
    assert haversine_distance_km([0, 0], [0, 90]) == pytest.approx(10007.5, abs=0.1)


def test_haversine_takes_lat_lng_order():
    # One degree of latitude is ~111.2 km everywhere; one degree of longitude shrinks.
    north = haversine_distance_km([60, 10], [61, 10])
    east = haversine_distance_km([60, 10], [60, 11])
    assert north == pytest.approx(111.19, abs=0.01)
    assert east == pytest.approx(55.6, abs=0.1)
