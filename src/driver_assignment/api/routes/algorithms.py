"""API routes for driver assignment algorithms."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status

from ...models.domain import WEIGHT_KEYS
from ...schemas.algorithms import (
    ApiResponse,
    AssignRequest,
    BenchmarkRequest,
    CompareRequest,
    DetailedScoringRequest,
)
from ...services.algorithms.dispatcher import ALGORITHM_DESCRIPTIONS, UnknownAlgorithmError
from ...services.algorithms.service import AlgorithmsService, AlgorithmUnavailableError

router = APIRouter(prefix="/algorithms", tags=["algorithms"])


def get_algorithms_service(request: Request) -> AlgorithmsService:
    return request.app.state.algorithms_service


@router.post("/assign", response_model=ApiResponse, status_code=status.HTTP_200_OK)
def execute_assignment(
    payload: AssignRequest,
    service: AlgorithmsService = Depends(get_algorithms_service),
) -> ApiResponse:
    """Assign drivers to every restaurant in the request with one strategy."""
    try:
        result = service.execute_assignment(payload.request.to_domain(), payload.algorithm)
    except UnknownAlgorithmError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ApiResponse(data=asdict(result))


@router.post("/compare", response_model=ApiResponse, status_code=status.HTTP_200_OK)
def compare_algorithms(
    payload: CompareRequest,
    service: AlgorithmsService = Depends(get_algorithms_service),
) -> ApiResponse:
    results = service.compare_algorithms(payload.request.to_domain(), payload.algorithms)
    return ApiResponse(data={name: asdict(result) for name, result in results.items()})


@router.post("/detailed-scoring", response_model=ApiResponse, status_code=status.HTTP_200_OK)
def get_detailed_scoring(
    payload: DetailedScoringRequest,
    service: AlgorithmsService = Depends(get_algorithms_service),
) -> ApiResponse:
    try:
        scores = service.get_detailed_scoring(payload.request.to_domain(), payload.driver_ids)
    except AlgorithmUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return ApiResponse(
        data={restaurant_id: [asdict(score) for score in entries] for restaurant_id, entries in scores.items()}
    )


@router.get("/weights", response_model=ApiResponse, status_code=status.HTTP_200_OK)
def get_weights(service: AlgorithmsService = Depends(get_algorithms_service)) -> ApiResponse:
    weights = service.get_weights()
    return ApiResponse(data=weights.as_dict() if weights else None)


@router.put("/weights", response_model=ApiResponse, status_code=status.HTTP_200_OK)
def update_weights(
    weights: dict[str, float] = Body(...),
    service: AlgorithmsService = Depends(get_algorithms_service),
) -> ApiResponse:
    """Update any subset of the weighted-scoring weights; the result is re-normalised."""
    invalid = sorted(set(weights) - set(WEIGHT_KEYS))
    if invalid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid weight keys: {', '.join(invalid)}",
        )
    try:
        updated = service.update_weights(**weights)
    except AlgorithmUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    logging.info(f"Weights updated via API: {updated.as_dict()}")
    return ApiResponse(data=updated.as_dict())


@router.get("/workload-distribution", response_model=ApiResponse, status_code=status.HTTP_200_OK)
def get_workload_distribution(
    assignment_date: date = Query(..., description="Date to analyse (YYYY-MM-DD)."),
    driver_ids: Optional[list[int]] = Query(default=None, description="Restrict the report to these drivers."),
    service: AlgorithmsService = Depends(get_algorithms_service),
) -> ApiResponse:
    try:
        entries = service.get_workload_distribution(assignment_date, driver_ids)
    except AlgorithmUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return ApiResponse(data=[asdict(entry) for entry in entries])


@router.get("/metrics", response_model=ApiResponse, status_code=status.HTTP_200_OK)
def get_metrics(
    algorithm: Optional[str] = Query(default=None),
    service: AlgorithmsService = Depends(get_algorithms_service),
) -> ApiResponse:
    metrics = service.get_algorithm_metrics(algorithm)
    if isinstance(metrics, dict):
        return ApiResponse(data={name: asdict(entry) for name, entry in metrics.items()})
    return ApiResponse(data=asdict(metrics))


@router.delete("/metrics", response_model=ApiResponse, status_code=status.HTTP_200_OK)
def reset_metrics(
    algorithm: Optional[str] = Query(default=None),
    service: AlgorithmsService = Depends(get_algorithms_service),
) -> ApiResponse:
    service.reset_metrics(algorithm)
    scope = f"'{algorithm}'" if algorithm else "all algorithms"
    return ApiResponse(data={"message": f"Metrics reset for {scope}"})


@router.get("/available", response_model=ApiResponse, status_code=status.HTTP_200_OK)
def get_available_algorithms(service: AlgorithmsService = Depends(get_algorithms_service)) -> ApiResponse:
    algorithms = service.get_available_algorithms()
    return ApiResponse(
        data={
            "algorithms": algorithms,
            "descriptions": {name: ALGORITHM_DESCRIPTIONS.get(name, "") for name in algorithms},
        }
    )


@router.post("/benchmark", response_model=ApiResponse, status_code=status.HTTP_200_OK)
def benchmark_algorithms(
    payload: BenchmarkRequest,
    service: AlgorithmsService = Depends(get_algorithms_service),
) -> ApiResponse:
    samples = [sample.to_domain() for sample in payload.sample_requests]
    results = service.benchmark_algorithms(samples, payload.algorithms)
    return ApiResponse(data={name: asdict(summary) for name, summary in results.items()})


@router.get("/health", response_model=ApiResponse, status_code=status.HTTP_200_OK)
def health(service: AlgorithmsService = Depends(get_algorithms_service)) -> ApiResponse:
    return ApiResponse(data=service.health())
