"""Great-circle distances between restaurants and driver service areas."""

from __future__ import annotations

import math
from typing import Iterable

from ..models.domain import ServiceArea

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres between two lat/lon points.

    NaN inputs propagate as NaN; callers guard against missing coordinates.
    """

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def nearest_area_distance_km(areas: Iterable[ServiceArea], latitude: float, longitude: float) -> float:
    """Distance from the point to the closest service-area centre; infinite when there are no areas."""

    return min(
        (haversine_km(area.latitude, area.longitude, latitude, longitude) for area in areas),
        default=math.inf,
    )
