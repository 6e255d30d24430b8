"""Contract for the driver/assignment store the assignment engine reads from and writes to."""

from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from ..models.domain import (
    AssignmentCreation,
    AssignmentStatus,
    DriverCandidate,
    DriverWorkload,
    NewAssignment,
    WorkloadDay,
)


class AssignmentRepository(Protocol):
    def fetch_eligible_drivers(self, assignment_date: date) -> Sequence[DriverCandidate]:
        """Active drivers scheduled and not blocked on the date, with open assignment counts."""
        ...

    def fetch_driver_workload(self, driver_id: int, start_date: date, end_date: date) -> DriverWorkload:
        """Assignment history for ``driver_id`` within the inclusive date window."""
        ...

    def create_assignment(self, assignment: NewAssignment) -> AssignmentCreation:
        """Validate and store an assignment, rejecting duplicates for driver + restaurant + date."""
        ...


def eligibility_errors(
    *,
    found: bool,
    scheduled: bool,
    blocked: bool,
    already_assigned: bool,
) -> list[str]:
    """Validation messages for an assignment attempt, shared by repository backends."""

    if not found:
        return ["Driver not found or not active"]
    errors: list[str] = []
    if not scheduled:
        errors.append("Driver is not scheduled to work on this day")
    if blocked:
        errors.append("Driver is not available on this date")
    if already_assigned:
        errors.append("Driver is already assigned to this restaurant on this date")
    return errors


def summarize_workload(rows: Sequence[tuple[date, str, int]]) -> DriverWorkload:
    """Aggregate ``(assignment_date, status, deliveries)`` rows into a DriverWorkload."""

    total = len(rows)
    pending = sum(1 for _, status, _ in rows if status == AssignmentStatus.PENDING.value)
    completed = sum(1 for _, status, _ in rows if status == AssignmentStatus.COMPLETED.value)
    total_deliveries = sum(deliveries for _, _, deliveries in rows)

    per_day: dict[date, list[int]] = {}
    for day, _, deliveries in sorted(rows, key=lambda row: row[0]):
        bucket = per_day.setdefault(day, [0, 0])
        bucket[0] += 1
        bucket[1] += deliveries

    return DriverWorkload(
        total_assignments=total,
        completed_assignments=completed,
        pending_assignments=pending,
        average_deliveries=total_deliveries / total if total else 0.0,
        dates=tuple(
            WorkloadDay(date=day, assignment_count=count, total_deliveries=deliveries)
            for day, (count, deliveries) in per_day.items()
        ),
    )
