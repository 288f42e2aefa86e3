"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import (
    ScoredSensorResponse,
    SensorSnapshotRequest,
    SnapshotAccepted,
    SnapshotSummaryResponse,
    SubsidenceResponse,
)
from services.analyzer import RiskAnalysisService, build_default_service
from services.risk_scorer import RiskLevel

router = APIRouter()


def get_service() -> RiskAnalysisService:
    return build_default_service()


@router.put(
    "/sensors",
    response_model=SnapshotAccepted,
    summary="Replace the current sensor snapshot.",
)
async def replace_sensors(
    request: SensorSnapshotRequest,
    service: RiskAnalysisService = Depends(get_service),
) -> SnapshotAccepted:
    try:
        count = service.replace_snapshot(request.to_readings())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return SnapshotAccepted(sensor_count=count)


@router.get(
    "/sensors",
    response_model=List[ScoredSensorResponse],
    summary="Score every registered sensor, optionally filtered by risk level.",
)
async def list_sensor_risks(
    level: Optional[List[RiskLevel]] = Query(default=None),
    service: RiskAnalysisService = Depends(get_service),
) -> List[ScoredSensorResponse]:
    return [ScoredSensorResponse.from_scored(item) for item in service.assess_all(level)]


@router.get(
    "/sensors/summary",
    response_model=SnapshotSummaryResponse,
    summary="Sensor count, mean TDS and risk distribution.",
)
async def sensor_summary(
    level: Optional[List[RiskLevel]] = Query(default=None),
    service: RiskAnalysisService = Depends(get_service),
) -> SnapshotSummaryResponse:
    return SnapshotSummaryResponse.from_summary(service.summary(level))


@router.get(
    "/sensors/{sensor_id}/risk",
    response_model=ScoredSensorResponse,
    summary="Risk level, score and explanation for one sensor.",
)
async def sensor_risk(
    sensor_id: str,
    service: RiskAnalysisService = Depends(get_service),
) -> ScoredSensorResponse:
    try:
        scored = service.assess(sensor_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return ScoredSensorResponse.from_scored(scored)


@router.get(
    "/sensors/{sensor_id}/subsidence",
    response_model=SubsidenceResponse,
    summary="Subsidence (sinkhole) risk estimate for one sensor.",
)
async def sensor_subsidence(
    sensor_id: str,
    service: RiskAnalysisService = Depends(get_service),
) -> SubsidenceResponse:
    try:
        estimate = service.subsidence(sensor_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return SubsidenceResponse.from_estimate(sensor_id, estimate)


@router.post(
    "/assessments",
    response_model=List[ScoredSensorResponse],
    summary="Score a posted set of sensors against each other without storing them.",
)
async def score_snapshot(
    request: SensorSnapshotRequest,
    service: RiskAnalysisService = Depends(get_service),
) -> List[ScoredSensorResponse]:
    try:
        readings = request.to_readings()
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return [ScoredSensorResponse.from_scored(item) for item in service.scorer.analyze_all(readings)]


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
