from datetime import date

import pytest

from src.driver_assignment.data.memory_repository import InMemoryAssignmentRepository
from src.driver_assignment.models.domain import (
    AlgorithmConfig,
    BulkAssignmentRequest,
    DriverProfile,
    RestaurantRequest,
    ServiceArea,
    WeightConfig,
)
from src.driver_assignment.services.algorithms.dispatcher import (
    ALGORITHM_NAMES,
    UnknownAlgorithmError,
    get_strategy,
)
from src.driver_assignment.services.algorithms.service import AlgorithmsService, AlgorithmUnavailableError
from src.driver_assignment.services.algorithms.weighted import WeightedScoring

ASSIGNMENT_DATE = date(2024, 1, 15)


def _profile(driver_id: int, radius: float = 10) -> DriverProfile:
    return DriverProfile(
        id=driver_id,
        name=f"Driver {driver_id}",
        email=f"driver{driver_id}@example.com",
        service_areas=[
            ServiceArea(
                area_name="Downtown",
                city="Seattle",
                state="WA",
                latitude=47.6062,
                longitude=-122.3321,
                radius_km=radius,
            )
        ],
        schedule={day: True for day in range(7)},
    )


def _request(*restaurant_ids: str, assignment_date: date = ASSIGNMENT_DATE) -> BulkAssignmentRequest:
    return BulkAssignmentRequest(
        assignment_date=assignment_date,
        restaurants=[
            RestaurantRequest(
                restaurant_id=restaurant_id,
                city="Seattle",
                state="WA",
                latitude=47.61,
                longitude=-122.33,
                estimated_deliveries=25,
                pickup_time="11:00",
                payment_rate=150,
            )
            for restaurant_id in restaurant_ids
        ],
    )


@pytest.fixture
def service() -> AlgorithmsService:
    repository = InMemoryAssignmentRepository(drivers=[_profile(1), _profile(2, radius=30), _profile(3, radius=45)])
    return AlgorithmsService(
        repository,
        default_algorithm="weighted-scoring",
        config=AlgorithmConfig(),
        weights=WeightConfig(),
    )


def test_registry_exposes_every_strategy(service: AlgorithmsService):
    assert service.get_available_algorithms() == list(ALGORITHM_NAMES)
    assert service.algorithms["simple"].get_name() == "simple-assignment"
    assert service.algorithms["geographic"].get_name() == "geographic-assignment"


def test_get_strategy_rejects_unknown_name():
    with pytest.raises(UnknownAlgorithmError, match="Algorithm 'round-robin' not found"):
        get_strategy("round-robin", InMemoryAssignmentRepository())


def test_unknown_default_algorithm_is_rejected():
    with pytest.raises(UnknownAlgorithmError):
        AlgorithmsService(InMemoryAssignmentRepository(), default_algorithm="round-robin")


def test_execute_uses_default_strategy_and_records_metrics(service: AlgorithmsService):
    result = service.execute_assignment(_request("R1", "R2"))

    assert result.algorithm == "weighted-scoring"
    assert result.successful_assignments == 2
    assert 0 <= result.average_score <= 100
    metrics = service.get_algorithm_metrics("weighted-scoring")
    assert metrics.total_runs == 1
    assert metrics.success_rate == pytest.approx(1.0)


def test_execute_unknown_algorithm_raises_without_touching_metrics(service: AlgorithmsService):
    with pytest.raises(UnknownAlgorithmError):
        service.execute_assignment(_request("R1"), "round-robin")

    assert service.get_algorithm_metrics() == {}


def test_compare_runs_every_strategy_on_its_own_copy(service: AlgorithmsService):
    request = _request("R1", "R2")
    original_restaurants = list(request.restaurants)

    results = service.compare_algorithms(request)

    assert list(results) == list(ALGORITHM_NAMES)
    for result in results.values():
        assert result.total_requests == 2
        assert result.successful_assignments + result.failed_assignments == 2
    assert request.restaurants == original_restaurants
    assert set(service.get_algorithm_metrics()) == set(ALGORITHM_NAMES)


def test_compare_reports_failed_strategy_as_zero_success(service: AlgorithmsService):
    results = service.compare_algorithms(_request("R1"), ["simple", "round-robin"])

    failed = results["round-robin"]
    assert failed.successful_assignments == 0
    assert failed.failed_assignments == 1
    assert failed.results == ()
    assert results["simple"].total_requests == 1


def test_benchmark_averages_runs_per_strategy(service: AlgorithmsService):
    samples = [_request("R1"), _request("R2", "R3", assignment_date=date(2024, 1, 16))]

    summary = service.benchmark_algorithms(samples, ["simple", "weighted-scoring"])

    assert set(summary) == {"simple", "weighted-scoring"}
    for entry in summary.values():
        assert entry.total_runs == 2
        assert isinstance(entry.average_execution_time, int)
        assert 0 <= entry.average_success_rate <= 1
    assert service.get_algorithm_metrics("simple").total_runs == 2


def test_benchmark_omits_strategies_without_runs(service: AlgorithmsService):
    summary = service.benchmark_algorithms([_request("R1")], ["simple", "round-robin"])

    assert list(summary) == ["simple"]


def test_reset_metrics(service: AlgorithmsService):
    service.execute_assignment(_request("R1"), "simple")
    service.execute_assignment(_request("R2"), "geographic")

    service.reset_metrics("simple")
    assert set(service.get_algorithm_metrics()) == {"geographic"}

    service.reset_metrics()
    assert service.get_algorithm_metrics() == {}


def test_detailed_scoring_per_restaurant(service: AlgorithmsService):
    scores = service.get_detailed_scoring(_request("R1", "R2"), driver_ids=[1, 3])

    assert set(scores) == {"R1", "R2"}
    assert [score.driver_id for score in scores["R1"]] == [1, 3]


def test_weights_round_trip_through_service(service: AlgorithmsService):
    updated = service.update_weights(workload_weight=0.45)

    assert sum(updated.as_dict().values()) == pytest.approx(1.0)
    assert service.get_weights().as_dict() == updated.as_dict()
    with pytest.raises(ValueError):
        service.update_weights(speed_weight=0.2)


def test_read_paths_fail_when_strategy_is_missing(service: AlgorithmsService):
    del service.algorithms["weighted-scoring"]
    del service.algorithms["workload-balancing"]

    assert service.get_weights() is None
    with pytest.raises(AlgorithmUnavailableError):
        service.get_detailed_scoring(_request("R1"))
    with pytest.raises(AlgorithmUnavailableError):
        service.update_weights(location_weight=1)
    with pytest.raises(AlgorithmUnavailableError):
        service.get_workload_distribution(ASSIGNMENT_DATE)


def test_workload_distribution_covers_eligible_drivers(service: AlgorithmsService):
    entries = service.get_workload_distribution(ASSIGNMENT_DATE)

    assert {entry.driver_id for entry in entries} == {1, 2, 3}


def test_health_summarizes_registry_and_metrics(service: AlgorithmsService):
    service.execute_assignment(_request("R1"))

    health = service.health()

    assert health["status"] == "healthy"
    assert health["available_algorithms"] == 4
    assert health["total_metrics_tracked"] == 1
    assert isinstance(service.algorithms["weighted-scoring"], WeightedScoring)
