"""Factory for assignment strategies based on user selection."""

from __future__ import annotations

from ...data.repository import AssignmentRepository
from ...models.domain import AlgorithmConfig, WeightConfig
from .base import AssignmentStrategy
from .geographic import GeographicAssignment
from .simple import SimpleAssignment
from .weighted import WeightedScoring
from .workload import WorkloadBalancing

ALGORITHM_NAMES: tuple[str, ...] = ("simple", "geographic", "workload-balancing", "weighted-scoring")

ALGORITHM_DESCRIPTIONS: dict[str, str] = {
    "simple": "Basic load balancing algorithm",
    "geographic": "Location-based assignment with proximity scoring",
    "workload-balancing": "Historical workload analysis for fair distribution",
    "weighted-scoring": "Perceptron-inspired multi-criteria scoring system",
}


class UnknownAlgorithmError(ValueError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Algorithm '{name}' not found")
        self.name = name


def get_strategy(
    name: str,
    repository: AssignmentRepository,
    *,
    config: AlgorithmConfig | None = None,
    weights: WeightConfig | None = None,
) -> AssignmentStrategy:
    match name:
        case "simple":
            return SimpleAssignment(config)
        case "geographic":
            return GeographicAssignment(config)
        case "workload-balancing":
            return WorkloadBalancing(repository, config)
        case "weighted-scoring":
            return WeightedScoring(repository, config, weights)
        case _:
            raise UnknownAlgorithmError(name)


def build_registry(
    repository: AssignmentRepository,
    *,
    config: AlgorithmConfig | None = None,
    weights: WeightConfig | None = None,
) -> dict[str, AssignmentStrategy]:
    return {
        name: get_strategy(name, repository, config=config, weights=weights)
        for name in ALGORITHM_NAMES
    }
