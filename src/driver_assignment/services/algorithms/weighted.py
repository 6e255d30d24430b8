"""Weighted multi-criteria scoring (perceptron-style weighted sum of four components).

Each candidate is scored on:

* location -- does the driver serve the restaurant's city/state, and how tight is the coverage radius
* proximity -- haversine distance from the nearest service-area centre to the restaurant
* performance -- completion rate blended with recent delivery experience
* workload -- how many assignments the driver already holds for the date

Component scores are on a 0-100 scale and combined with normalised weights.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ...data.repository import AssignmentRepository
from ...models.domain import (
    AlgorithmConfig,
    DriverCandidate,
    DriverScore,
    DriverSelection,
    RestaurantRequest,
    ScoreBreakdown,
    WeightConfig,
)
from ..geospatial import nearest_area_distance_km
from .base import AssignmentStrategy, clamp_score, pick_best, round_score
from .orchestrator import fetch_candidates

logger = logging.getLogger(__name__)

DAILY_ASSIGNMENT_LIMIT = 5
NO_COORDINATES_PROXIMITY = 50.0


def location_score(driver: DriverCandidate, request: RestaurantRequest) -> float:
    matching = driver.matching_areas(request.city, request.state)
    if not matching:
        return 0.0

    min_radius = min(area.radius_km for area in matching)
    if min_radius <= 10:
        bonus = 20
    elif min_radius <= 20:
        bonus = 15
    elif min_radius <= 35:
        bonus = 10
    else:
        bonus = 5
    return min(100.0, 80.0 + bonus)


def proximity_score(driver: DriverCandidate, request: RestaurantRequest) -> float:
    if not request.has_coordinates:
        return NO_COORDINATES_PROXIMITY

    distance = nearest_area_distance_km(driver.service_areas, request.latitude, request.longitude)
    if distance <= 5:
        return 100.0
    if distance <= 10:
        return 90.0
    if distance <= 20:
        return 75.0
    if distance <= 50:
        return 50.0
    return max(0.0, 30 - (distance - 50) / 10)


def experience_score(recent_deliveries: float) -> float:
    if 15 <= recent_deliveries <= 30:
        return 100.0
    if recent_deliveries < 15:
        return recent_deliveries / 15 * 80
    return max(0.0, 100 - (recent_deliveries - 30) * 2)


def performance_score(driver: DriverCandidate) -> float:
    score = driver.completion_rate * 0.6 + experience_score(driver.recent_deliveries) * 0.4
    return clamp_score(score)


def workload_score(driver: DriverCandidate) -> float:
    if driver.current_assignments >= DAILY_ASSIGNMENT_LIMIT:
        return 0.0
    return float(round((DAILY_ASSIGNMENT_LIMIT - driver.current_assignments) / DAILY_ASSIGNMENT_LIMIT * 100))


def score_driver(driver: DriverCandidate, request: RestaurantRequest, weights: WeightConfig) -> DriverScore:
    breakdown = ScoreBreakdown(
        location_score=location_score(driver, request),
        proximity_score=proximity_score(driver, request),
        performance_score=performance_score(driver),
        workload_score=workload_score(driver),
    )
    total = (
        breakdown.location_score * weights.location_weight
        + breakdown.proximity_score * weights.proximity_weight
        + breakdown.performance_score * weights.performance_weight
        + breakdown.workload_score * weights.workload_weight
    )
    return DriverScore(driver_id=driver.id, total_score=round_score(total), breakdown=breakdown)


class WeightedScoring(AssignmentStrategy):
    """Default strategy: highest weighted total wins, local drivers considered first."""

    name = "weighted-scoring"

    def __init__(
        self,
        repository: AssignmentRepository,
        config: AlgorithmConfig | None = None,
        weights: WeightConfig | None = None,
    ) -> None:
        super().__init__(config)
        self.repository = repository
        self.weights = weights or WeightConfig()

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
        pool = local or list(candidates)
        weights = self.weights

        scored = []
        for driver in pool:
            driver_score = score_driver(driver, request, weights)
            logger.debug(f"Driver {driver.id} weighted score {driver_score.total_score} ({driver_score.breakdown})")
            scored.append((driver, driver_score.total_score))
        return pick_best(scored)

    def get_detailed_scoring(
        self,
        request: RestaurantRequest,
        assignment_date: date,
        driver_ids: Optional[Sequence[int]] = None,
    ) -> list[DriverScore]:
        """Full breakdown for every candidate, highest total first."""

        candidates = fetch_candidates(self.repository, request, assignment_date, self.config)
        if driver_ids is not None:
            wanted = set(driver_ids)
            candidates = [driver for driver in candidates if driver.id in wanted]

        weights = self.weights
        scores = [score_driver(driver, request, weights) for driver in candidates]
        return sorted(scores, key=lambda score: score.total_score, reverse=True)

    def update_weights(self, **partial: float) -> WeightConfig:
        self.weights = self.weights.updated(**partial)
        logger.info(f"Updated weighted-scoring weights: {self.weights.as_dict()}")
        return self.get_weights()

    def get_weights(self) -> WeightConfig:
        return WeightConfig(**self.weights.as_dict())
