from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from src.driver_assignment.models.domain import AlgorithmResult
from src.driver_assignment.services.algorithms.metrics import MetricsStore


def _result(execution_time_ms: float, successful: int, total: int, average_score: float | None) -> AlgorithmResult:
    return AlgorithmResult(
        algorithm="simple-assignment",
        assignment_date=date(2024, 1, 15),
        results=(),
        total_requests=total,
        successful_assignments=successful,
        failed_assignments=total - successful,
        execution_time_ms=execution_time_ms,
        average_score=average_score,
    )


def test_record_keeps_running_means():
    store = MetricsStore()

    store.record("simple", _result(10, 4, 4, 80))
    entry = store.record("simple", _result(20, 1, 2, None))

    assert entry.total_runs == 2
    assert entry.average_execution_time == pytest.approx(15)
    assert entry.success_rate == pytest.approx(0.75)
    # runs without any scored assignment leave the score mean untouched
    assert entry.average_score == pytest.approx(80)


def test_get_unknown_algorithm_returns_zeroed_entry():
    entry = MetricsStore().get("geographic")

    assert entry.algorithm == "geographic"
    assert entry.total_runs == 0
    assert entry.average_execution_time == 0


def test_returned_entries_are_snapshots():
    store = MetricsStore()
    snapshot = store.record("simple", _result(10, 1, 1, 50))

    snapshot.total_runs = 99

    assert store.get("simple").total_runs == 1


def test_reset_single_and_all():
    store = MetricsStore()
    store.record("simple", _result(10, 1, 1, 50))
    store.record("geographic", _result(10, 1, 1, 50))

    store.reset("simple")
    assert set(store.all()) == {"geographic"}

    store.reset()
    assert len(store) == 0


def test_concurrent_records_are_not_lost():
    store = MetricsStore()

    with ThreadPoolExecutor(max_workers=8) as executor:
        list(executor.map(lambda _: store.record("simple", _result(5, 1, 1, 60)), range(200)))

    entry = store.get("simple")
    assert entry.total_runs == 200
    assert entry.average_execution_time == pytest.approx(5)
