"""Load-balancing selection: the driver with the fewest assignments wins."""

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ...models.domain import AlgorithmConfig, DriverCandidate, DriverSelection, RestaurantRequest
from .base import AssignmentStrategy, least_loaded, round_score


class SimpleAssignment(AssignmentStrategy):
    """Pick the least-loaded candidate, preferring drivers still under the per-driver cap."""

    name = "simple-assignment"

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

        cap = self.effective_config(config).max_assignments_per_driver
        pool = list(candidates)
        if cap:
            under_cap = [driver for driver in candidates if driver.current_assignments < cap]
            # everyone at the cap: fall back to the full list
            pool = under_cap or pool

        selected = least_loaded(pool)
        max_assignments = max(max(driver.current_assignments for driver in pool), 1)
        score = (max_assignments - selected.current_assignments) / max_assignments * 100
        return DriverSelection(driver=selected, score=round_score(score))
