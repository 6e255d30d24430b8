"""Pydantic request/response models for assignment algorithm endpoints."""

from __future__ import annotations

from datetime import date
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import AlgorithmConfig, BulkAssignmentRequest, RestaurantRequest


class RestaurantRequestModel(BaseModel):
    restaurant_id: str
    name: Optional[str] = None
    city: str
    state: str
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    estimated_deliveries: int = Field(..., ge=0)
    pickup_time: str = Field(..., description="Pickup time as HH:MM.")
    payment_rate: float = Field(..., ge=0)
    payment_type: Optional[Literal["FIXED", "PER_DELIVERY", "HOURLY"]] = None
    priority: Optional[int] = Field(default=None, description="Higher number = higher priority.")

    def to_domain(self) -> RestaurantRequest:
        return RestaurantRequest(**self.model_dump())


class AlgorithmConfigModel(BaseModel):
    max_assignments_per_driver: Optional[int] = Field(default=None, ge=1)
    workload_balancing_enabled: Optional[bool] = None
    geographic_priority_enabled: Optional[bool] = None
    lookback_days: Optional[int] = Field(default=None, ge=1)

    def to_domain(self) -> AlgorithmConfig:
        return AlgorithmConfig(**self.model_dump())


class BulkAssignmentRequestModel(BaseModel):
    assignment_date: date
    restaurants: List[RestaurantRequestModel]
    config: Optional[AlgorithmConfigModel] = None

    def to_domain(self) -> BulkAssignmentRequest:
        return BulkAssignmentRequest(
            assignment_date=self.assignment_date,
            restaurants=[restaurant.to_domain() for restaurant in self.restaurants],
            config=self.config.to_domain() if self.config else None,
        )


class AssignRequest(BaseModel):
    request: BulkAssignmentRequestModel
    algorithm: Optional[str] = Field(default=None, description="Strategy name; defaults to the configured default.")


class CompareRequest(BaseModel):
    request: BulkAssignmentRequestModel
    algorithms: Optional[List[str]] = None


class DetailedScoringRequest(BaseModel):
    request: BulkAssignmentRequestModel
    driver_ids: Optional[List[int]] = None


class BenchmarkRequest(BaseModel):
    sample_requests: List[BulkAssignmentRequestModel]
    algorithms: Optional[List[str]] = None


class ApiResponse(BaseModel):
    success: bool = True
    data: Any = None
