"""Base classes for driver selection strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, Sequence

from ...models.domain import AlgorithmConfig, DriverCandidate, DriverSelection, RestaurantRequest

MIN_SCORE = 0.0
MAX_SCORE = 100.0


def clamp_score(value: float) -> float:
    return min(MAX_SCORE, max(MIN_SCORE, value))


def round_score(value: float) -> float:
    """Round to two decimals and clamp into the 0-100 scoring range."""

    return clamp_score(round(value, 2))


def pick_best(scored: Sequence[tuple[DriverCandidate, float]]) -> Optional[DriverSelection]:
    """Select the highest raw score and report it clamped to 0-100.

    Ranking uses the unclamped score so that bonuses above the scale still
    separate candidates. On a tie the earliest candidate is kept.
    """

    best: Optional[tuple[DriverCandidate, float]] = None
    for driver, score in scored:
        if best is None or score > best[1]:
            best = (driver, score)
    if best is None:
        return None
    return DriverSelection(driver=best[0], score=clamp_score(best[1]))


def least_loaded(candidates: Sequence[DriverCandidate]) -> DriverCandidate:
    """Candidate with the fewest current assignments; the first one found wins ties."""

    return min(candidates, key=lambda driver: driver.current_assignments)


class AssignmentStrategy(ABC):
    """Contract for driver selection strategies.

    ``select_driver`` is the only override point. The shared run loop lives in
    :func:`..orchestrator.assign_drivers`.
    """

    name: str = ""

    def __init__(self, config: AlgorithmConfig | None = None) -> None:
        self.config = config or AlgorithmConfig()

    def get_name(self) -> str:
        return self.name

    def effective_config(self, config: AlgorithmConfig | None) -> AlgorithmConfig:
        return config if config is not None else self.config

    @abstractmethod
    def select_driver(
        self,
        candidates: Sequence[DriverCandidate],
        request: RestaurantRequest,
        assignment_date: date,
        *,
        config: AlgorithmConfig | None = None,
    ) -> Optional[DriverSelection]:
        raise NotImplementedError
