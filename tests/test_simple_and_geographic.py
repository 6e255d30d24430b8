from datetime import date

import pytest

from src.driver_assignment.models.domain import AlgorithmConfig, DriverCandidate, RestaurantRequest, ServiceArea
from src.driver_assignment.services.algorithms.geographic import NO_COORDINATES_FALLBACK_SCORE, GeographicAssignment
from src.driver_assignment.services.algorithms.simple import SimpleAssignment

ASSIGNMENT_DATE = date(2024, 1, 15)
SEATTLE = (47.6062, -122.3321)
BELLEVUE = (47.6101, -122.2015)
REDMOND = (47.6740, -122.1215)


def _area(city: str, coords: tuple[float, float], radius: float = 10) -> ServiceArea:
    return ServiceArea(area_name=f"{city} area", city=city, state="WA", latitude=coords[0], longitude=coords[1], radius_km=radius)


def _candidate(driver_id: int, current: int = 0, areas: list[ServiceArea] | None = None) -> DriverCandidate:
    return DriverCandidate(
        id=driver_id,
        name=f"Driver {driver_id}",
        email=f"driver{driver_id}@example.com",
        service_areas=areas if areas is not None else [_area("Seattle", SEATTLE)],
        current_assignments=current,
    )


def _restaurant(city: str = "Seattle", coords: tuple[float, float] | None = SEATTLE) -> RestaurantRequest:
    lat, lon = coords if coords else (None, None)
    return RestaurantRequest(
        restaurant_id="R1",
        city=city,
        state="WA",
        latitude=lat,
        longitude=lon,
        estimated_deliveries=20,
        pickup_time="11:30",
        payment_rate=120,
    )


def test_simple_picks_least_loaded_and_scores_relative_to_busiest():
    selection = SimpleAssignment().select_driver(
        [_candidate(1, current=2), _candidate(2, current=0)], _restaurant(), ASSIGNMENT_DATE
    )

    assert selection.driver.id == 2
    assert selection.score == 100


def test_simple_tie_keeps_first_candidate():
    selection = SimpleAssignment().select_driver([_candidate(5), _candidate(4)], _restaurant(), ASSIGNMENT_DATE)
    assert selection.driver.id == 5


def test_simple_falls_back_to_everyone_when_all_are_at_the_cap():
    selection = SimpleAssignment().select_driver(
        [_candidate(1, current=4), _candidate(2, current=3)], _restaurant(), ASSIGNMENT_DATE
    )

    assert selection.driver.id == 2
    assert selection.score == 25


def test_simple_cap_comes_from_effective_config():
    candidates = [_candidate(1, current=1), _candidate(2, current=2)]

    default_cap = SimpleAssignment().select_driver(candidates, _restaurant(), ASSIGNMENT_DATE)
    tight_cap = SimpleAssignment().select_driver(
        candidates, _restaurant(), ASSIGNMENT_DATE, config=AlgorithmConfig(max_assignments_per_driver=2)
    )

    assert default_cap.driver.id == tight_cap.driver.id == 1
    assert default_cap.score == 50
    assert tight_cap.score == 0


def test_simple_without_candidates_returns_none():
    assert SimpleAssignment().select_driver([], _restaurant(), ASSIGNMENT_DATE) is None


def test_geographic_prefers_local_driver_over_closer_outsider():
    seattle_driver = _candidate(1, current=1, areas=[_area("Seattle", SEATTLE, radius=8)])
    bellevue_driver = _candidate(2, current=0, areas=[_area("Bellevue", BELLEVUE)])

    selection = GeographicAssignment().select_driver(
        [bellevue_driver, seattle_driver], _restaurant(), ASSIGNMENT_DATE
    )

    assert selection.driver.id == 1
    assert 0 < selection.score <= 100


def test_geographic_score_components():
    strategy = GeographicAssignment()
    driver = _candidate(1, current=1, areas=[_area("Seattle", SEATTLE, radius=8)])

    # 50 base + (50 - 8/2) radius + (20 - 0) distance + 9 workload
    assert strategy.geographic_score(driver, _restaurant()) == 125
    # without coordinates the distance bonus is skipped
    assert strategy.geographic_score(driver, _restaurant(coords=None)) == 105
    assert strategy.geographic_score(_candidate(2, areas=[_area("Tacoma", SEATTLE)]), _restaurant()) == 0


def test_geographic_ranks_on_raw_score_before_clamping():
    tight = _candidate(1, areas=[_area("Seattle", SEATTLE, radius=20)])
    tighter = _candidate(2, areas=[_area("Seattle", SEATTLE, radius=2)])

    selection = GeographicAssignment().select_driver([tight, tighter], _restaurant(), ASSIGNMENT_DATE)

    assert selection.driver.id == 2
    assert selection.score == 100


def test_geographic_falls_back_to_proximity_without_local_drivers():
    seattle_driver = _candidate(1, areas=[_area("Seattle", SEATTLE)])
    bellevue_driver = _candidate(2, areas=[_area("Bellevue", BELLEVUE)])

    selection = GeographicAssignment().select_driver(
        [seattle_driver, bellevue_driver], _restaurant(city="Redmond", coords=REDMOND), ASSIGNMENT_DATE
    )

    assert selection.driver.id == 2
    assert 0 <= selection.score <= 100


def test_geographic_without_local_drivers_or_coordinates_uses_least_loaded():
    busy = _candidate(1, current=3, areas=[_area("Tacoma", SEATTLE)])
    idle = _candidate(2, current=0, areas=[_area("Tacoma", SEATTLE)])

    selection = GeographicAssignment().select_driver([busy, idle], _restaurant(coords=None), ASSIGNMENT_DATE)

    assert selection.driver.id == 2
    assert selection.score == pytest.approx(NO_COORDINATES_FALLBACK_SCORE)


def test_geographic_without_candidates_returns_none():
    assert GeographicAssignment().select_driver([], _restaurant(), ASSIGNMENT_DATE) is None
