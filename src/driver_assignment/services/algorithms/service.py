"""High-level entry point: strategy registry, comparison, benchmarking and metrics."""

from __future__ import annotations

import copy
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional, Sequence

from ...config import settings
from ...data.repository import AssignmentRepository
from ...models.domain import (
    AlgorithmConfig,
    AlgorithmMetrics,
    AlgorithmResult,
    BulkAssignmentRequest,
    DriverScore,
    WeightConfig,
    WorkloadDistributionEntry,
)
from .base import AssignmentStrategy
from .dispatcher import ALGORITHM_NAMES, UnknownAlgorithmError, build_registry
from .metrics import MetricsStore
from .orchestrator import assign_drivers
from .weighted import WeightedScoring
from .workload import WorkloadBalancing

logger = logging.getLogger(__name__)


class AlgorithmUnavailableError(RuntimeError):
    """A read path needs a strategy that is not registered."""


@dataclass(frozen=True, slots=True)
class BenchmarkSummary:
    average_execution_time: int
    average_success_rate: float
    average_score: float
    total_runs: int


def default_config() -> AlgorithmConfig:
    return AlgorithmConfig(
        max_assignments_per_driver=settings.max_assignments_per_driver,
        workload_balancing_enabled=settings.workload_balancing_enabled,
        geographic_priority_enabled=settings.geographic_priority_enabled,
        lookback_days=settings.lookback_days,
    )


def default_weights() -> WeightConfig:
    return WeightConfig(
        location_weight=settings.location_weight,
        proximity_weight=settings.proximity_weight,
        performance_weight=settings.performance_weight,
        workload_weight=settings.workload_weight,
    )


class AlgorithmsService:
    """Holds one instance per strategy and tracks how each one performs over time."""

    def __init__(
        self,
        repository: AssignmentRepository,
        *,
        metrics: MetricsStore | None = None,
        default_algorithm: str | None = None,
        config: AlgorithmConfig | None = None,
        weights: WeightConfig | None = None,
        compare_max_workers: int | None = None,
    ) -> None:
        self.repository = repository
        self.metrics = metrics if metrics is not None else MetricsStore()
        self.default_algorithm = default_algorithm or settings.default_algorithm
        self.compare_max_workers = compare_max_workers or settings.compare_max_workers
        self.algorithms: dict[str, AssignmentStrategy] = build_registry(
            repository,
            config=config or default_config(),
            weights=weights or default_weights(),
        )
        if self.default_algorithm not in self.algorithms:
            raise UnknownAlgorithmError(self.default_algorithm)

    def _strategy(self, name: str) -> AssignmentStrategy:
        strategy = self.algorithms.get(name)
        if strategy is None:
            raise UnknownAlgorithmError(name)
        return strategy

    def _weighted(self) -> WeightedScoring:
        strategy = self.algorithms.get("weighted-scoring")
        if not isinstance(strategy, WeightedScoring):
            raise AlgorithmUnavailableError("Weighted scoring algorithm not available")
        return strategy

    def _workload(self) -> WorkloadBalancing:
        strategy = self.algorithms.get("workload-balancing")
        if not isinstance(strategy, WorkloadBalancing):
            raise AlgorithmUnavailableError("Workload balancing algorithm not available")
        return strategy

    def execute_assignment(self, request: BulkAssignmentRequest, algorithm: str | None = None) -> AlgorithmResult:
        name = algorithm or self.default_algorithm
        strategy = self._strategy(name)
        result = assign_drivers(strategy, self.repository, request)
        self.metrics.record(name, result)
        return result

    def compare_algorithms(
        self,
        request: BulkAssignmentRequest,
        algorithms: Optional[Sequence[str]] = None,
    ) -> dict[str, AlgorithmResult]:
        """Run several strategies concurrently, each on its own copy of the request."""

        names = list(algorithms or ALGORITHM_NAMES)
        if not names:
            return {}

        def run(name: str) -> AlgorithmResult:
            try:
                return self.execute_assignment(copy.deepcopy(request), name)
            except Exception as exc:
                logger.error(f"Algorithm '{name}' failed during comparison: {exc}")
                return AlgorithmResult(
                    algorithm=name,
                    assignment_date=request.assignment_date,
                    results=(),
                    total_requests=len(request.restaurants),
                    successful_assignments=0,
                    failed_assignments=len(request.restaurants),
                    execution_time_ms=0.0,
                )

        with ThreadPoolExecutor(max_workers=min(self.compare_max_workers, len(names))) as executor:
            results = list(executor.map(run, names))
        return dict(zip(names, results))

    def get_detailed_scoring(
        self,
        request: BulkAssignmentRequest,
        driver_ids: Optional[Sequence[int]] = None,
    ) -> dict[str, list[DriverScore]]:
        weighted = self._weighted()
        return {
            restaurant.restaurant_id: weighted.get_detailed_scoring(
                restaurant, request.assignment_date, driver_ids
            )
            for restaurant in request.restaurants
        }

    def get_workload_distribution(
        self,
        assignment_date: date,
        driver_ids: Optional[Sequence[int]] = None,
    ) -> list[WorkloadDistributionEntry]:
        return self._workload().get_workload_distribution(assignment_date, driver_ids)

    def update_weights(self, **partial: float) -> WeightConfig:
        return self._weighted().update_weights(**partial)

    def get_weights(self) -> Optional[WeightConfig]:
        strategy = self.algorithms.get("weighted-scoring")
        return strategy.get_weights() if isinstance(strategy, WeightedScoring) else None

    def get_algorithm_metrics(self, algorithm: str | None = None) -> AlgorithmMetrics | dict[str, AlgorithmMetrics]:
        if algorithm:
            return self.metrics.get(algorithm)
        return self.metrics.all()

    def reset_metrics(self, algorithm: str | None = None) -> None:
        self.metrics.reset(algorithm)

    def get_available_algorithms(self) -> list[str]:
        return list(self.algorithms)

    def benchmark_algorithms(
        self,
        sample_requests: Sequence[BulkAssignmentRequest],
        algorithms: Optional[Sequence[str]] = None,
    ) -> dict[str, BenchmarkSummary]:
        """Average each strategy's results over the samples; strategies with no successful run are omitted."""

        summaries: dict[str, BenchmarkSummary] = {}
        for name in algorithms or self.get_available_algorithms():
            runs: list[AlgorithmResult] = []
            for sample in sample_requests:
                try:
                    runs.append(self.execute_assignment(sample, name))
                except Exception as exc:
                    logger.error(f"Benchmark run of '{name}' skipped: {exc}")
                    continue

            if not runs:
                continue

            scored = [run.average_score for run in runs if run.average_score is not None]
            summaries[name] = BenchmarkSummary(
                average_execution_time=round(sum(run.execution_time_ms for run in runs) / len(runs)),
                average_success_rate=round(sum(run.success_rate for run in runs) / len(runs), 2),
                average_score=round(sum(scored) / len(scored), 2) if scored else 0.0,
                total_runs=len(runs),
            )
        return summaries

    def health(self) -> dict:
        algorithms = self.get_available_algorithms()
        return {
            "status": "healthy",
            "available_algorithms": len(algorithms),
            "algorithms": algorithms,
            "total_metrics_tracked": len(self.metrics),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
