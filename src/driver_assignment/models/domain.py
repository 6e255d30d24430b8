"""Domain models for drivers, restaurant requests and assignment runs."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import date
from enum import Enum
from typing import Literal, Optional

PaymentType = Literal["FIXED", "PER_DELIVERY", "HOURLY"]


class DriverStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class AssignmentStatus(str, Enum):
    PENDING = "PENDING"
    STARTED = "STARTED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Statuses that occupy a driver on the assignment date.
OPEN_ASSIGNMENT_STATUSES = frozenset({AssignmentStatus.PENDING, AssignmentStatus.STARTED})


@dataclass(slots=True)
class ServiceArea:
    """A named area a driver covers, centred on a coordinate with a coverage radius."""

    area_name: str
    city: str
    state: str
    latitude: float
    longitude: float
    radius_km: float

    def matches(self, city: str, state: str) -> bool:
        return self.city.lower() == city.lower() and self.state.lower() == state.lower()


@dataclass(slots=True)
class DriverCandidate:
    """A driver eligible for evaluation against one restaurant on one date."""

    id: int
    name: Optional[str]
    email: str
    service_areas: list[ServiceArea]
    current_assignments: int
    recent_deliveries: float = 0.0
    completion_rate: float = 100.0
    average_rating: Optional[float] = None

    def matching_areas(self, city: str, state: str) -> list[ServiceArea]:
        return [area for area in self.service_areas if area.matches(city, state)]

    def serves(self, city: str, state: str) -> bool:
        return any(area.matches(city, state) for area in self.service_areas)


@dataclass(frozen=True, slots=True)
class RestaurantRequest:
    """One pickup request: a restaurant needing a driver on the assignment date."""

    restaurant_id: str
    city: str
    state: str
    estimated_deliveries: int
    pickup_time: str
    payment_rate: float
    name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    payment_type: Optional[PaymentType] = None
    priority: Optional[int] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(slots=True)
class AlgorithmConfig:
    max_assignments_per_driver: Optional[int] = 3
    workload_balancing_enabled: bool = True
    geographic_priority_enabled: bool = True
    lookback_days: int = 7

    def merged(self, overrides: Optional["AlgorithmConfig"]) -> "AlgorithmConfig":
        """Return a copy with every field that ``overrides`` sets to a non-None value applied."""

        if overrides is None:
            return replace(self)
        changes = {
            item.name: getattr(overrides, item.name)
            for item in fields(overrides)
            if getattr(overrides, item.name) is not None
        }
        return replace(self, **changes)


WEIGHT_KEYS = ("location_weight", "proximity_weight", "performance_weight", "workload_weight")


@dataclass(slots=True)
class WeightConfig:
    """Relative importance of the four weighted-scoring components.

    Weights are normalised on construction so that they sum to 1.0. Negative
    weights and an all-zero configuration are rejected with ``ValueError``.
    """

    location_weight: float = 0.40
    proximity_weight: float = 0.30
    performance_weight: float = 0.15
    workload_weight: float = 0.15

    def __post_init__(self) -> None:
        values = [float(getattr(self, key)) for key in WEIGHT_KEYS]
        if any(value < 0 for value in values):
            raise ValueError("weights must be non-negative")
        total = sum(values)
        if total <= 0:
            raise ValueError("at least one weight must be greater than zero")
        if total != 1.0:
            values = [value / total for value in values]
        for key, value in zip(WEIGHT_KEYS, values):
            setattr(self, key, value)

    def updated(self, **partial: float) -> "WeightConfig":
        unknown = set(partial) - set(WEIGHT_KEYS)
        if unknown:
            raise ValueError(f"Invalid weight keys: {', '.join(sorted(unknown))}")
        current = self.as_dict()
        current.update({key: value for key, value in partial.items() if value is not None})
        return WeightConfig(**current)

    def as_dict(self) -> dict[str, float]:
        return {key: getattr(self, key) for key in WEIGHT_KEYS}


@dataclass(frozen=True, slots=True)
class ScoreBreakdown:
    location_score: float
    proximity_score: float
    performance_score: float
    workload_score: float


@dataclass(frozen=True, slots=True)
class DriverScore:
    driver_id: int
    total_score: float
    breakdown: ScoreBreakdown


@dataclass(frozen=True, slots=True)
class DriverSelection:
    """The strategy's pick for one restaurant."""

    driver: DriverCandidate
    score: Optional[float] = None


@dataclass(frozen=True, slots=True)
class AssignmentResult:
    restaurant_id: str
    success: bool
    driver_id: Optional[int] = None
    score: Optional[float] = None
    error: Optional[str] = None
    reason: Optional[str] = None


@dataclass(frozen=True, slots=True)
class AlgorithmResult:
    """Outcome of one run of a strategy over a full restaurant batch."""

    algorithm: str
    assignment_date: date
    results: tuple[AssignmentResult, ...]
    total_requests: int
    successful_assignments: int
    failed_assignments: int
    execution_time_ms: float
    average_score: Optional[float] = None

    @property
    def success_rate(self) -> float:
        if self.total_requests <= 0:
            return 0.0
        return self.successful_assignments / self.total_requests


@dataclass(slots=True)
class BulkAssignmentRequest:
    assignment_date: date
    restaurants: list[RestaurantRequest]
    config: Optional[AlgorithmConfig] = None


@dataclass(slots=True)
class AlgorithmMetrics:
    """Running statistics for one strategy name."""

    algorithm: str
    total_runs: int = 0
    average_execution_time: float = 0.0
    success_rate: float = 0.0
    average_score: float = 0.0


@dataclass(frozen=True, slots=True)
class WorkloadDay:
    date: date
    assignment_count: int
    total_deliveries: int


@dataclass(frozen=True, slots=True)
class DriverWorkload:
    """Historical assignment counts for one driver over a date window."""

    total_assignments: int = 0
    completed_assignments: int = 0
    pending_assignments: int = 0
    average_deliveries: float = 0.0
    dates: tuple[WorkloadDay, ...] = ()

    @property
    def completion_rate(self) -> float:
        if self.total_assignments <= 0:
            return 100.0
        return self.completed_assignments / self.total_assignments * 100


@dataclass(frozen=True, slots=True)
class NewAssignment:
    driver_id: int
    restaurant_id: str
    assignment_date: date
    pickup_time: str
    estimated_deliveries: int
    payment_rate: float
    payment_type: PaymentType = "FIXED"
    algorithm_score: float = 0.0


@dataclass(frozen=True, slots=True)
class AssignmentCreation:
    success: bool
    error: Optional[str] = None


@dataclass(frozen=True, slots=True)
class WorkloadDistributionEntry:
    driver_id: int
    name: Optional[str]
    current_assignments: int
    recent_workload: int
    completion_rate: float
    average_deliveries: float
    workload_score: float


@dataclass(slots=True)
class DriverProfile:
    """Stored driver record as kept by a repository backend."""

    id: int
    name: Optional[str]
    email: str
    status: DriverStatus = DriverStatus.ACTIVE
    service_areas: list[ServiceArea] = field(default_factory=list)
    # weekday (date.weekday(), Monday == 0) -> available
    schedule: dict[int, bool] = field(default_factory=dict)
    blocked_dates: set[date] = field(default_factory=set)
    average_rating: Optional[float] = None


@dataclass(slots=True)
class AssignmentRecord:
    driver_id: int
    restaurant_id: str
    assignment_date: date
    pickup_time: str
    estimated_deliveries: int
    payment_rate: float
    payment_type: PaymentType = "FIXED"
    algorithm_score: float = 0.0
    status: AssignmentStatus = AssignmentStatus.PENDING
    actual_deliveries: Optional[int] = None

    @property
    def deliveries(self) -> int:
        return self.actual_deliveries or self.estimated_deliveries
