"""
Great-circle distance and radius checks for on-site verification.
"""
import math
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings

from .exceptions import MissingCoordinates

EARTH_RADIUS_FEET = 20902231
DEFAULT_RADIUS_FEET = 200.0
COORDINATE_PLACES = Decimal('0.0000001')


def distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance between two points, in feet."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_FEET * c


def verify(distance_feet: float, radius_feet: float = DEFAULT_RADIUS_FEET) -> bool:
    # Inclusive: a point exactly on the boundary passes.
    return distance_feet <= radius_feet


def configured_radius() -> float:
    return float(getattr(settings, 'GEOFENCE_RADIUS_FEET', DEFAULT_RADIUS_FEET))


def distance_to_property(job, latitude, longitude) -> float:
    if not job.has_coordinates:
        raise MissingCoordinates()
    return distance(
        float(job.property_latitude),
        float(job.property_longitude),
        float(latitude),
        float(longitude),
    )


def quantize_coordinate(value) -> Decimal:
    """Fit a coordinate into the 7-decimal storage precision (about 1 cm)."""
    return Decimal(str(value)).quantize(COORDINATE_PLACES, rounding=ROUND_HALF_UP)
