from datetime import date, timedelta

import pytest

from src.driver_assignment.data.memory_repository import InMemoryAssignmentRepository
from src.driver_assignment.models.domain import (
    AlgorithmConfig,
    AssignmentRecord,
    AssignmentStatus,
    DriverCandidate,
    DriverProfile,
    DriverWorkload,
    RestaurantRequest,
    ServiceArea,
)
from src.driver_assignment.services.algorithms import workload
from src.driver_assignment.services.algorithms.workload import WorkloadBalancing

ASSIGNMENT_DATE = date(2024, 1, 15)
SEATTLE_AREA = ServiceArea(
    area_name="Downtown", city="Seattle", state="WA", latitude=47.6062, longitude=-122.3321, radius_km=10
)


def _candidate(driver_id: int, current: int = 0, completion: float = 100) -> DriverCandidate:
    return DriverCandidate(
        id=driver_id,
        name=f"Driver {driver_id}",
        email=f"driver{driver_id}@example.com",
        service_areas=[SEATTLE_AREA],
        current_assignments=current,
        completion_rate=completion,
    )


def _profile(driver_id: int) -> DriverProfile:
    return DriverProfile(
        id=driver_id,
        name=f"Driver {driver_id}",
        email=f"driver{driver_id}@example.com",
        service_areas=[SEATTLE_AREA],
        schedule={day: True for day in range(7)},
    )


def _history(driver_id: int, count: int, days_back: int = 1) -> list[AssignmentRecord]:
    return [
        AssignmentRecord(
            driver_id=driver_id,
            restaurant_id=f"H{driver_id}-{index}",
            assignment_date=ASSIGNMENT_DATE - timedelta(days=days_back + index % 5),
            pickup_time="11:00",
            estimated_deliveries=20,
            payment_rate=100,
            status=AssignmentStatus.COMPLETED,
        )
        for index in range(count)
    ]


def _restaurant() -> RestaurantRequest:
    return RestaurantRequest(
        restaurant_id="R1",
        city="Seattle",
        state="WA",
        estimated_deliveries=25,
        pickup_time="11:00",
        payment_rate=150,
    )


def test_experience_score_bands():
    assert workload.experience_score(20) == 10
    assert workload.experience_score(15) == 10
    assert workload.experience_score(7.5) == pytest.approx(3.5)
    assert workload.experience_score(40) == pytest.approx(9)
    assert workload.experience_score(130) == 0


def test_geographic_bonus_rewards_tight_local_coverage():
    assert workload.geographic_bonus(_candidate(1), _restaurant()) == pytest.approx(9)
    outsider = DriverCandidate(
        id=2, name=None, email="", service_areas=[], current_assignments=0
    )
    assert workload.geographic_bonus(outsider, _restaurant()) == 0


def test_workload_score_combines_history_and_current_load():
    history = DriverWorkload(total_assignments=10, completed_assignments=8, average_deliveries=20)
    driver = _candidate(1, current=1, completion=80)

    # 20 history + 24 current + 12 completion + 10 experience + 9 geography
    assert workload.workload_score(driver, history, _restaurant()) == 75.0


def test_select_driver_prefers_light_recent_history():
    repository = InMemoryAssignmentRepository(drivers=[_profile(1), _profile(2)], assignments=_history(1, 10))
    strategy = WorkloadBalancing(repository)

    selection = strategy.select_driver([_candidate(1), _candidate(2)], _restaurant(), ASSIGNMENT_DATE)

    assert selection.driver.id == 2
    assert 0 <= selection.score <= 100


def test_select_driver_only_counts_history_inside_lookback():
    repository = InMemoryAssignmentRepository(
        drivers=[_profile(1), _profile(2)], assignments=_history(1, 10, days_back=30)
    )
    strategy = WorkloadBalancing(repository)
    candidates = [_candidate(1), _candidate(2)]

    # history is a month old, so both drivers tie and the first is kept
    assert strategy.select_driver(candidates, _restaurant(), ASSIGNMENT_DATE).driver.id == 1

    wide = strategy.select_driver(candidates, _restaurant(), ASSIGNMENT_DATE, config=AlgorithmConfig(lookback_days=60))
    assert wide.driver.id == 2


def test_workload_distribution_is_sorted_and_filtered():
    repository = InMemoryAssignmentRepository(drivers=[_profile(1), _profile(2)], assignments=_history(1, 10))
    strategy = WorkloadBalancing(repository)

    entries = strategy.get_workload_distribution(ASSIGNMENT_DATE)

    assert [entry.driver_id for entry in entries] == [2, 1]
    busy = entries[1]
    assert busy.recent_workload == 10
    assert busy.completion_rate == 100
    assert busy.average_deliveries == 20
    assert entries[0].workload_score == 85
    assert busy.workload_score == 75

    only_busy = strategy.get_workload_distribution(ASSIGNMENT_DATE, driver_ids=[1])
    assert [entry.driver_id for entry in only_busy] == [1]
