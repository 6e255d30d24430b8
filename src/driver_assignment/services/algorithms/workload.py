"""Workload balancing selection driven by each driver's recent assignment history."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ...data.repository import AssignmentRepository
from ...models.domain import (
    AlgorithmConfig,
    DriverCandidate,
    DriverSelection,
    DriverWorkload,
    RestaurantRequest,
    WorkloadDistributionEntry,
)
from .base import AssignmentStrategy, pick_best, round_score
from .orchestrator import fetch_workloads

logger = logging.getLogger(__name__)

MAX_RECENT_ASSIGNMENTS = 20
MAX_CURRENT_ASSIGNMENTS = 5
OPTIMAL_DELIVERIES = (15, 30)

# Placeholder used for the distribution report, which is not tied to a restaurant.
NEUTRAL_REQUEST = RestaurantRequest(
    restaurant_id="temp",
    city="General",
    state="NA",
    estimated_deliveries=25,
    pickup_time="11:00",
    payment_rate=150,
)


def experience_score(average_deliveries: float) -> float:
    low, high = OPTIMAL_DELIVERIES
    if low <= average_deliveries <= high:
        return 10.0
    if average_deliveries < low:
        return average_deliveries / low * 7
    return max(0.0, 10 - (average_deliveries - high) / 10)


def geographic_bonus(driver: DriverCandidate, request: RestaurantRequest) -> float:
    matching = driver.matching_areas(request.city, request.state)
    if not matching:
        return 0.0
    min_radius = min(area.radius_km for area in matching)
    return 5 + max(0.0, 5 - min_radius / 10)


def workload_score(driver: DriverCandidate, workload: DriverWorkload, request: RestaurantRequest) -> float:
    """Composite 0-100ish score; lower recent and current load score higher."""

    score = max(0.0, (MAX_RECENT_ASSIGNMENTS - workload.total_assignments) / MAX_RECENT_ASSIGNMENTS * 40)
    score += max(0.0, (MAX_CURRENT_ASSIGNMENTS - driver.current_assignments) / MAX_CURRENT_ASSIGNMENTS * 30)
    score += driver.completion_rate / 100 * 15
    score += experience_score(workload.average_deliveries)
    score += geographic_bonus(driver, request)
    return round(score, 2)


class WorkloadBalancing(AssignmentStrategy):
    """Spread work over time by favouring drivers with light recent history."""

    name = "workload-balancing"

    def __init__(self, repository: AssignmentRepository, config: AlgorithmConfig | None = None) -> None:
        super().__init__(config)
        self.repository = repository

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

        lookback_days = self.effective_config(config).lookback_days
        workloads = fetch_workloads(
            self.repository, [driver.id for driver in candidates], assignment_date, lookback_days
        )
        scored = [
            (driver, workload_score(driver, workload, request))
            for driver, workload in zip(candidates, workloads)
        ]
        for driver, score in scored:
            logger.debug(f"Driver {driver.id} workload score {score}")
        return pick_best(scored)

    def get_workload_distribution(
        self,
        assignment_date: date,
        driver_ids: Optional[Sequence[int]] = None,
    ) -> list[WorkloadDistributionEntry]:
        drivers = list(self.repository.fetch_eligible_drivers(assignment_date))
        if driver_ids is not None:
            wanted = set(driver_ids)
            drivers = [driver for driver in drivers if driver.id in wanted]

        workloads = fetch_workloads(
            self.repository, [driver.id for driver in drivers], assignment_date, self.config.lookback_days
        )
        entries = []
        for driver, workload in zip(drivers, workloads):
            enriched = replace(
                driver,
                recent_deliveries=workload.average_deliveries,
                completion_rate=workload.completion_rate,
            )
            entries.append(
                WorkloadDistributionEntry(
                    driver_id=driver.id,
                    name=driver.name,
                    current_assignments=driver.current_assignments,
                    recent_workload=workload.total_assignments,
                    completion_rate=workload.completion_rate,
                    average_deliveries=workload.average_deliveries,
                    workload_score=round_score(workload_score(enriched, workload, NEUTRAL_REQUEST)),
                )
            )
        entries.sort(key=lambda entry: entry.workload_score, reverse=True)
        return entries
