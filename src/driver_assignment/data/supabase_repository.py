"""Driver and assignment store backed by Supabase tables.

Tables read:

* ``drivers`` (id, name, email, driver_status, average_rating)
* ``driver_service_areas`` (driver_id, area_name, city, state, latitude, longitude, radius_km, is_active)
* ``driver_schedules`` (driver_id, day_of_week, is_available) -- ``day_of_week`` uses Monday == 0
* ``availability_blocks`` (driver_id, blocked_date)
* ``restaurant_assignments`` (driver_id, restaurant_id, assignment_date, pickup_time, estimated_deliveries,
  actual_deliveries, payment_type, payment_rate, algorithm_score, status)
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Sequence

from ..db.supabase import get_supabase_client
from ..models.domain import (
    OPEN_ASSIGNMENT_STATUSES,
    AssignmentCreation,
    AssignmentStatus,
    DriverCandidate,
    DriverStatus,
    DriverWorkload,
    NewAssignment,
    ServiceArea,
)
from .repository import eligibility_errors, summarize_workload

logger = logging.getLogger(__name__)

_OPEN_STATUSES = sorted(status.value for status in OPEN_ASSIGNMENT_STATUSES)


def _parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _service_area(row: dict) -> ServiceArea:
    return ServiceArea(
        area_name=str(row.get("area_name") or ""),
        city=str(row["city"]),
        state=str(row["state"]),
        latitude=float(row["latitude"]),
        longitude=float(row["longitude"]),
        radius_km=float(row["radius_km"]),
    )


class SupabaseAssignmentRepository:
    def __init__(self, client: Any | None = None) -> None:
        self.client = client or get_supabase_client()
        if self.client is None:
            raise RuntimeError(
                "Supabase not configured. Set DISPATCH_SUPABASE_URL and DISPATCH_SUPABASE_KEY environment variables."
            )

    def _rows(self, query: Any) -> list[dict]:
        response = query.execute()
        return list(response.data or [])

    def fetch_eligible_drivers(self, assignment_date: date) -> Sequence[DriverCandidate]:
        drivers = self._rows(
            self.client.table("drivers")
            .select("id, name, email, average_rating")
            .eq("driver_status", DriverStatus.ACTIVE.value)
        )
        if not drivers:
            return []
        driver_ids = [row["id"] for row in drivers]
        day = assignment_date.isoformat()

        scheduled = {
            row["driver_id"]
            for row in self._rows(
                self.client.table("driver_schedules")
                .select("driver_id")
                .in_("driver_id", driver_ids)
                .eq("day_of_week", assignment_date.weekday())
                .eq("is_available", True)
            )
        }
        blocked = {
            row["driver_id"]
            for row in self._rows(
                self.client.table("availability_blocks")
                .select("driver_id")
                .in_("driver_id", driver_ids)
                .eq("blocked_date", day)
            )
        }

        areas: dict[int, list[ServiceArea]] = {}
        for row in self._rows(
            self.client.table("driver_service_areas")
            .select("driver_id, area_name, city, state, latitude, longitude, radius_km")
            .in_("driver_id", driver_ids)
            .eq("is_active", True)
        ):
            try:
                areas.setdefault(row["driver_id"], []).append(_service_area(row))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping invalid service area row for driver {row.get('driver_id')}: {e}")

        open_counts: dict[int, int] = {}
        for row in self._rows(
            self.client.table("restaurant_assignments")
            .select("driver_id")
            .in_("driver_id", driver_ids)
            .eq("assignment_date", day)
            .in_("status", _OPEN_STATUSES)
        ):
            open_counts[row["driver_id"]] = open_counts.get(row["driver_id"], 0) + 1

        candidates = []
        for row in drivers:
            driver_id = row["id"]
            if driver_id not in scheduled or driver_id in blocked:
                continue
            candidates.append(
                DriverCandidate(
                    id=driver_id,
                    name=row.get("name"),
                    email=str(row.get("email") or ""),
                    service_areas=areas.get(driver_id, []),
                    current_assignments=open_counts.get(driver_id, 0),
                    average_rating=row.get("average_rating"),
                )
            )
        logger.debug(f"{len(candidates)} of {len(drivers)} active drivers eligible on {day}")
        return candidates

    def fetch_driver_workload(self, driver_id: int, start_date: date, end_date: date) -> DriverWorkload:
        rows = self._rows(
            self.client.table("restaurant_assignments")
            .select("assignment_date, status, estimated_deliveries, actual_deliveries")
            .eq("driver_id", driver_id)
            .gte("assignment_date", start_date.isoformat())
            .lte("assignment_date", end_date.isoformat())
            .order("assignment_date")
        )
        return summarize_workload(
            [
                (
                    _parse_date(row["assignment_date"]),
                    str(row.get("status") or AssignmentStatus.PENDING.value),
                    int(row.get("actual_deliveries") or row.get("estimated_deliveries") or 0),
                )
                for row in rows
            ]
        )

    def _exists(self, query: Any) -> bool:
        return bool(self._rows(query.limit(1)))

    def create_assignment(self, assignment: NewAssignment) -> AssignmentCreation:
        day = assignment.assignment_date.isoformat()
        found = self._exists(
            self.client.table("drivers").select("id").eq("id", assignment.driver_id).eq("driver_status", DriverStatus.ACTIVE.value)
        )
        errors = eligibility_errors(
            found=found,
            scheduled=found
            and self._exists(
                self.client.table("driver_schedules")
                .select("driver_id")
                .eq("driver_id", assignment.driver_id)
                .eq("day_of_week", assignment.assignment_date.weekday())
                .eq("is_available", True)
            ),
            blocked=found
            and self._exists(
                self.client.table("availability_blocks")
                .select("driver_id")
                .eq("driver_id", assignment.driver_id)
                .eq("blocked_date", day)
            ),
            already_assigned=found
            and self._exists(
                self.client.table("restaurant_assignments")
                .select("driver_id")
                .eq("driver_id", assignment.driver_id)
                .eq("restaurant_id", assignment.restaurant_id)
                .eq("assignment_date", day)
                .in_("status", _OPEN_STATUSES)
            ),
        )
        if errors:
            return AssignmentCreation(success=False, error=", ".join(errors))

        self.client.table("restaurant_assignments").insert(
            {
                "driver_id": assignment.driver_id,
                "restaurant_id": assignment.restaurant_id,
                "assignment_date": day,
                "pickup_time": assignment.pickup_time,
                "estimated_deliveries": assignment.estimated_deliveries,
                "payment_type": assignment.payment_type,
                "payment_rate": assignment.payment_rate,
                "algorithm_score": assignment.algorithm_score,
                "status": AssignmentStatus.PENDING.value,
            }
        ).execute()
        logger.info(f"Created assignment of driver {assignment.driver_id} to {assignment.restaurant_id} on {day}")
        return AssignmentCreation(success=True)
