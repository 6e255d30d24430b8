"""Running per-strategy performance metrics."""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Optional

from ...models.domain import AlgorithmMetrics, AlgorithmResult


class MetricsStore:
    """Cumulative statistics keyed by strategy name, guarded by one lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, AlgorithmMetrics] = {}

    def record(self, algorithm: str, result: AlgorithmResult) -> AlgorithmMetrics:
        """Fold one run into the running means for ``algorithm``."""

        with self._lock:
            entry = self._entries.get(algorithm) or AlgorithmMetrics(algorithm=algorithm)
            runs = entry.total_runs + 1
            entry.average_execution_time = (entry.average_execution_time * (runs - 1) + result.execution_time_ms) / runs
            entry.success_rate = (entry.success_rate * (runs - 1) + result.success_rate) / runs
            if result.average_score is not None:
                entry.average_score = (entry.average_score * (runs - 1) + result.average_score) / runs
            entry.total_runs = runs
            self._entries[algorithm] = entry
            return replace(entry)

    def get(self, algorithm: str) -> AlgorithmMetrics:
        with self._lock:
            entry = self._entries.get(algorithm)
            return replace(entry) if entry else AlgorithmMetrics(algorithm=algorithm)

    def all(self) -> dict[str, AlgorithmMetrics]:
        with self._lock:
            return {name: replace(entry) for name, entry in self._entries.items()}

    def reset(self, algorithm: Optional[str] = None) -> None:
        with self._lock:
            if algorithm is None:
                self._entries.clear()
            else:
                self._entries.pop(algorithm, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
