"""Process-local driver/assignment store, used for demos and as the default test collaborator."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import date
from typing import Iterable, Sequence

from ..models.domain import (
    OPEN_ASSIGNMENT_STATUSES,
    AssignmentCreation,
    AssignmentRecord,
    DriverCandidate,
    DriverProfile,
    DriverStatus,
    DriverWorkload,
    NewAssignment,
)
from .repository import eligibility_errors, summarize_workload

logger = logging.getLogger(__name__)


class InMemoryAssignmentRepository:
    """Keeps drivers and assignments in memory behind a single lock."""

    def __init__(
        self,
        drivers: Iterable[DriverProfile] = (),
        assignments: Iterable[AssignmentRecord] = (),
    ) -> None:
        self._lock = threading.RLock()
        self._drivers: dict[int, DriverProfile] = {driver.id: driver for driver in drivers}
        self._assignments: list[AssignmentRecord] = list(assignments)

    def add_driver(self, driver: DriverProfile) -> None:
        with self._lock:
            self._drivers[driver.id] = driver

    def add_assignment(self, record: AssignmentRecord) -> None:
        with self._lock:
            self._assignments.append(record)

    def assignments(self) -> list[AssignmentRecord]:
        with self._lock:
            return [replace(record) for record in self._assignments]

    def _is_scheduled(self, driver: DriverProfile, assignment_date: date) -> bool:
        return driver.schedule.get(assignment_date.weekday(), False)

    def _open_assignments(self, driver_id: int, assignment_date: date) -> list[AssignmentRecord]:
        return [
            record
            for record in self._assignments
            if record.driver_id == driver_id
            and record.assignment_date == assignment_date
            and record.status in OPEN_ASSIGNMENT_STATUSES
        ]

    def fetch_eligible_drivers(self, assignment_date: date) -> Sequence[DriverCandidate]:
        with self._lock:
            candidates: list[DriverCandidate] = []
            for driver in self._drivers.values():
                if driver.status != DriverStatus.ACTIVE:
                    continue
                if not self._is_scheduled(driver, assignment_date):
                    continue
                if assignment_date in driver.blocked_dates:
                    continue
                candidates.append(
                    DriverCandidate(
                        id=driver.id,
                        name=driver.name,
                        email=driver.email,
                        service_areas=[replace(area) for area in driver.service_areas],
                        current_assignments=len(self._open_assignments(driver.id, assignment_date)),
                        average_rating=driver.average_rating,
                    )
                )
            return candidates

    def fetch_driver_workload(self, driver_id: int, start_date: date, end_date: date) -> DriverWorkload:
        with self._lock:
            rows = [
                (record.assignment_date, record.status.value, record.deliveries)
                for record in self._assignments
                if record.driver_id == driver_id and start_date <= record.assignment_date <= end_date
            ]
        return summarize_workload(rows)

    def create_assignment(self, assignment: NewAssignment) -> AssignmentCreation:
        with self._lock:
            driver = self._drivers.get(assignment.driver_id)
            found = driver is not None and driver.status == DriverStatus.ACTIVE
            errors = eligibility_errors(
                found=found,
                scheduled=found and self._is_scheduled(driver, assignment.assignment_date),
                blocked=found and assignment.assignment_date in driver.blocked_dates,
                already_assigned=found
                and any(
                    record.restaurant_id == assignment.restaurant_id
                    for record in self._open_assignments(assignment.driver_id, assignment.assignment_date)
                ),
            )
            if errors:
                message = ", ".join(errors)
                logger.debug(f"Rejected assignment of driver {assignment.driver_id} to {assignment.restaurant_id}: {message}")
                return AssignmentCreation(success=False, error=message)

            self._assignments.append(
                AssignmentRecord(
                    driver_id=assignment.driver_id,
                    restaurant_id=assignment.restaurant_id,
                    assignment_date=assignment.assignment_date,
                    pickup_time=assignment.pickup_time,
                    estimated_deliveries=assignment.estimated_deliveries,
                    payment_rate=assignment.payment_rate,
                    payment_type=assignment.payment_type,
                    algorithm_score=assignment.algorithm_score,
                )
            )
            return AssignmentCreation(success=True)
