from decimal import Decimal
from types import SimpleNamespace

import pytest

from conftest import PROPERTY_LAT, PROPERTY_LNG, north_of
from jobs import geofence
from jobs.exceptions import MissingCoordinates


def test_distance_to_same_point_is_zero():
    assert geofence.distance(PROPERTY_LAT, PROPERTY_LNG, PROPERTY_LAT, PROPERTY_LNG) == 0


def test_distance_is_symmetric():
    lat, lng = north_of(PROPERTY_LAT, PROPERTY_LNG, 500)
    there = geofence.distance(PROPERTY_LAT, PROPERTY_LNG, lat, lng)
    back = geofence.distance(lat, lng, PROPERTY_LAT, PROPERTY_LNG)
    assert there == pytest.approx(back)


@pytest.mark.parametrize('feet', [50, 150, 250, 1000])
def test_distance_matches_offset_in_feet(feet):
    lat, lng = north_of(PROPERTY_LAT, PROPERTY_LNG, feet)
    assert geofence.distance(PROPERTY_LAT, PROPERTY_LNG, lat, lng) == pytest.approx(feet, abs=0.01)


def test_one_degree_of_latitude_is_about_69_miles():
    feet = geofence.distance(0, 0, 1, 0)
    assert feet / 5280 == pytest.approx(69.1, abs=0.1)


def test_boundary_is_inclusive():
    assert geofence.verify(200.0, 200.0) is True


def test_just_past_the_radius_fails():
    assert geofence.verify(200.01, 200.0) is False


def test_default_radius_is_200_feet():
    assert geofence.DEFAULT_RADIUS_FEET == 200.0
    assert geofence.verify(199.99) is True
    assert geofence.verify(200.01) is False


def test_configured_radius_follows_settings(settings):
    settings.GEOFENCE_RADIUS_FEET = 500
    assert geofence.configured_radius() == 500.0


def test_job_without_coordinates_cannot_be_measured():
    job = SimpleNamespace(has_coordinates=False, property_latitude=None, property_longitude=None)
    with pytest.raises(MissingCoordinates):
        geofence.distance_to_property(job, PROPERTY_LAT, PROPERTY_LNG)


def test_quantize_coordinate_keeps_seven_places():
    assert geofence.quantize_coordinate(30.26720004999) == Decimal('30.2672000')
    assert geofence.quantize_coordinate(-97.74310005) == Decimal('-97.7431001')
