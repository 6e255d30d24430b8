"""Geographic selection based on service-area match, coverage radius and distance."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ...models.domain import AlgorithmConfig, DriverCandidate, DriverSelection, RestaurantRequest
from ..geospatial import haversine_km, nearest_area_distance_km
from .base import AssignmentStrategy, least_loaded, pick_best

logger = logging.getLogger(__name__)

# Nominal daily assignment ceiling used by the workload bonus.
WORKLOAD_CEILING = 10
# Crude score reported when neither an area match nor coordinates are available.
NO_COORDINATES_FALLBACK_SCORE = 25.0


class GeographicAssignment(AssignmentStrategy):
    """Prefer local drivers with tight coverage areas who are close to the restaurant."""

    name = "geographic-assignment"

    def select_driver(
        self,
        candidates: Sequence[DriverCandidate],
        request: RestaurantRequest,
        assignment_date: date,
        *,
        config: AlgorithmConfig | None = None,
    ) -> Optional[DriverSelection]:
        if not candidates:
            return None

        local = [driver for driver in candidates if driver.serves(request.city, request.state)]
        if not local:
            logger.debug(f"No local drivers for {request.city}, {request.state}; selecting by proximity")
            return self.select_by_proximity(candidates, request)

        return pick_best([(driver, self.geographic_score(driver, request)) for driver in local])

    def geographic_score(self, driver: DriverCandidate, request: RestaurantRequest) -> float:
        matching = driver.matching_areas(request.city, request.state)
        if not matching:
            return 0.0

        score = 50.0
        min_radius = min(area.radius_km for area in matching)
        score += max(0.0, 50 - min_radius / 2)

        if request.has_coordinates:
            area = matching[0]
            distance = haversine_km(area.latitude, area.longitude, request.latitude, request.longitude)
            score += max(0.0, 20 - distance)

        score += (WORKLOAD_CEILING - driver.current_assignments) / WORKLOAD_CEILING * 10
        return round(score, 2)

    def select_by_proximity(
        self,
        candidates: Sequence[DriverCandidate],
        request: RestaurantRequest,
    ) -> Optional[DriverSelection]:
        if not request.has_coordinates:
            # TODO: derive this fallback from the workload bonus instead of a fixed constant
            return DriverSelection(driver=least_loaded(candidates), score=NO_COORDINATES_FALLBACK_SCORE)

        scored = []
        for driver in candidates:
            best_distance = nearest_area_distance_km(driver.service_areas, request.latitude, request.longitude)
            proximity = max(0.0, 100 - best_distance * 2)
            workload = (WORKLOAD_CEILING - driver.current_assignments) / WORKLOAD_CEILING * 20
            scored.append((driver, round(proximity + workload, 2)))
        return pick_best(scored)
