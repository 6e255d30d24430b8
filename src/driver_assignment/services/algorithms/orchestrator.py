"""Shared run loop: candidate lookup, strategy delegation, persistence and aggregation."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import date, timedelta
from typing import Optional, Sequence

from ...config import settings
from ...data.repository import AssignmentRepository
from ...models.domain import (
    AlgorithmConfig,
    AlgorithmResult,
    AssignmentResult,
    BulkAssignmentRequest,
    DriverCandidate,
    DriverWorkload,
    NewAssignment,
    RestaurantRequest,
)
from .base import AssignmentStrategy

logger = logging.getLogger(__name__)

NO_AVAILABLE_DRIVERS = "No available drivers found"
NO_SUITABLE_DRIVER = "No suitable driver found"


def lookback_window(assignment_date: date, lookback_days: int) -> tuple[date, date]:
    return assignment_date - timedelta(days=lookback_days), assignment_date


def fetch_workloads(
    repository: AssignmentRepository,
    driver_ids: Sequence[int],
    assignment_date: date,
    lookback_days: int,
    *,
    max_workers: int | None = None,
) -> list[DriverWorkload]:
    """Fetch the lookback workload for each driver in parallel, preserving input order."""

    if not driver_ids:
        return []
    start_date, end_date = lookback_window(assignment_date, lookback_days)
    workers = min(max_workers or settings.enrichment_max_workers, len(driver_ids))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(
            executor.map(
                lambda driver_id: repository.fetch_driver_workload(driver_id, start_date, end_date),
                driver_ids,
            )
        )


def fetch_candidates(
    repository: AssignmentRepository,
    request: RestaurantRequest,
    assignment_date: date,
    config: AlgorithmConfig,
) -> list[DriverCandidate]:
    """Eligible drivers for the date, enriched with recent deliveries and completion rate.

    With geographic priority enabled the set is narrowed to drivers serving the
    restaurant's city and state; an empty narrowed set falls back to everyone.
    """

    drivers = list(repository.fetch_eligible_drivers(assignment_date))
    workloads = fetch_workloads(repository, [driver.id for driver in drivers], assignment_date, config.lookback_days)
    enriched = [
        replace(
            driver,
            recent_deliveries=workload.average_deliveries,
            completion_rate=workload.completion_rate,
        )
        for driver, workload in zip(drivers, workloads)
    ]

    if config.geographic_priority_enabled:
        local = [driver for driver in enriched if driver.serves(request.city, request.state)]
        if local:
            return local
        logger.debug(
            f"No drivers serve {request.city}, {request.state}; keeping all {len(enriched)} candidates"
        )
    return enriched


def _failure(request: RestaurantRequest, error: str, reason: str) -> AssignmentResult:
    return AssignmentResult(restaurant_id=request.restaurant_id, success=False, error=error, reason=reason)


def assign_single(
    strategy: AssignmentStrategy,
    repository: AssignmentRepository,
    request: RestaurantRequest,
    assignment_date: date,
    config: AlgorithmConfig,
) -> AssignmentResult:
    candidates = fetch_candidates(repository, request, assignment_date, config)
    if not candidates:
        return _failure(request, NO_AVAILABLE_DRIVERS, "No drivers match availability criteria")

    selection = strategy.select_driver(candidates, request, assignment_date, config=config)
    if selection is None:
        return _failure(request, NO_SUITABLE_DRIVER, "Algorithm could not select a driver")

    creation = repository.create_assignment(
        NewAssignment(
            driver_id=selection.driver.id,
            restaurant_id=request.restaurant_id,
            assignment_date=assignment_date,
            pickup_time=request.pickup_time,
            estimated_deliveries=request.estimated_deliveries,
            payment_rate=request.payment_rate,
            payment_type=request.payment_type or "FIXED",
            algorithm_score=selection.score or 0.0,
        )
    )
    if not creation.success:
        return _failure(
            request,
            creation.error or "Failed to create assignment",
            "Database assignment creation failed",
        )

    return AssignmentResult(
        restaurant_id=request.restaurant_id,
        success=True,
        driver_id=selection.driver.id,
        score=selection.score,
        reason=f"Assigned by {strategy.get_name()} algorithm",
    )


def average_score(results: Sequence[AssignmentResult]) -> Optional[float]:
    scores = [result.score for result in results if result.score is not None]
    if not scores:
        return None
    return sum(scores) / len(scores)


def assign_drivers(
    strategy: AssignmentStrategy,
    repository: AssignmentRepository,
    request: BulkAssignmentRequest,
) -> AlgorithmResult:
    """Run ``strategy`` over every restaurant in the request.

    Restaurants are processed one after another so that each decision sees the
    assignments persisted for earlier restaurants in the same run. A failure
    for one restaurant is recorded in its result and never stops the run.
    """

    config = strategy.config.merged(request.config)
    start = time.perf_counter()
    results: list[AssignmentResult] = []

    logger.info(
        f"Running {strategy.get_name()} for {len(request.restaurants)} restaurants on {request.assignment_date.isoformat()}"
    )
    for restaurant in request.restaurants:
        try:
            result = assign_single(strategy, repository, restaurant, request.assignment_date, config)
        except Exception as exc:
            logger.warning(f"Assignment for restaurant {restaurant.restaurant_id} failed: {exc}")
            result = AssignmentResult(
                restaurant_id=restaurant.restaurant_id,
                success=False,
                error=str(exc) or type(exc).__name__,
            )
        else:
            if not result.success:
                logger.warning(f"Restaurant {restaurant.restaurant_id} not assigned: {result.error}")
        results.append(result)

    execution_time_ms = (time.perf_counter() - start) * 1000
    successful = sum(1 for result in results if result.success)
    total = len(request.restaurants)
    logger.info(
        f"{strategy.get_name()} assigned {successful}/{total} restaurants in {execution_time_ms:.1f} ms"
    )
    return AlgorithmResult(
        algorithm=strategy.get_name(),
        assignment_date=request.assignment_date,
        results=tuple(results),
        total_requests=total,
        successful_assignments=successful,
        failed_assignments=total - successful,
        execution_time_ms=execution_time_ms,
        average_score=average_score(results),
    )
