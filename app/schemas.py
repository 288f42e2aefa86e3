"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING, Dict, List, Optional

from pydantic import BaseModel, Field

from models.records import SensorReading, SeriesPoint
from services.risk_scorer import RiskLevel

if TYPE_CHECKING:
    from services.analyzer import SnapshotSummary
    from services.risk_scorer import ScoredSensor, SubsidenceEstimate


class SeriesPointPayload(BaseModel):
    date: dt.date
    tds: float = Field(..., ge=0, allow_inf_nan=False)


class SensorPayload(BaseModel):
    """A sensor snapshot as supplied by the reading provider."""

    id: str = Field(..., min_length=1)
    name: Optional[str] = None
    tds: float = Field(..., ge=0, allow_inf_nan=False, description="Total dissolved solids, ppm.")
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lon: Optional[float] = Field(default=None, ge=-180, le=180)
    temperature: float = Field(default=0.0, allow_inf_nan=False, description="Water temperature, degrees Celsius.")
    timestamp: Optional[dt.datetime] = None
    series: List[SeriesPointPayload] = Field(
        default_factory=list, description="Daily samples in ascending date order."
    )

    def to_reading(self) -> SensorReading:
        position = (self.lat, self.lon) if self.lat is not None and self.lon is not None else None
        return SensorReading(
            id=self.id,
            name=self.name or "",
            tds=self.tds,
            position=position,
            temperature=self.temperature,
            timestamp=self.timestamp,
            series=tuple(SeriesPoint(date=point.date, tds=point.tds) for point in self.series),
        )

    @classmethod
    def from_reading(cls, reading: SensorReading) -> "SensorPayload":
        lat, lon = reading.position if reading.position else (None, None)
        return cls(
            id=reading.id,
            name=reading.name,
            tds=reading.tds,
            lat=lat,
            lon=lon,
            temperature=reading.temperature,
            timestamp=reading.timestamp,
            series=[SeriesPointPayload(date=point.date, tds=point.tds) for point in reading.series],
        )


class SensorSnapshotRequest(BaseModel):
    sensors: List[SensorPayload] = Field(default_factory=list)

    def to_readings(self) -> List[SensorReading]:
        return [sensor.to_reading() for sensor in self.sensors]


class SnapshotAccepted(BaseModel):
    sensor_count: int = Field(..., ge=0)


class RiskFactorsResponse(BaseModel):
    tds: float
    trend: Optional[float] = None
    anomaly: Optional[float] = None


class ScoredSensorResponse(BaseModel):
    """Risk assessment of one sensor, ready for color coding and display."""

    id: str
    name: str
    tds: float
    lat: Optional[float] = None
    lon: Optional[float] = None
    level: RiskLevel
    score: int = Field(..., ge=0, le=100)
    explanation: List[str]
    summary: str
    factors: RiskFactorsResponse

    @classmethod
    def from_scored(cls, scored: ScoredSensor) -> "ScoredSensorResponse":
        sensor, assessment = scored.sensor, scored.assessment
        lat, lon = sensor.position if sensor.position else (None, None)
        return cls(
            id=sensor.id,
            name=sensor.name,
            tds=sensor.tds,
            lat=lat,
            lon=lon,
            level=assessment.level,
            score=assessment.score,
            explanation=list(assessment.explanation),
            summary=assessment.summary,
            factors=RiskFactorsResponse(
                tds=assessment.factors.tds,
                trend=assessment.factors.trend,
                anomaly=assessment.factors.anomaly,
            ),
        )


class SubsidenceResponse(BaseModel):
    sensor_id: str
    percentage: float = Field(..., ge=0, le=100)
    level: RiskLevel
    description: str

    @classmethod
    def from_estimate(cls, sensor_id: str, estimate: SubsidenceEstimate) -> "SubsidenceResponse":
        return cls(
            sensor_id=sensor_id,
            percentage=round(estimate.percentage, 1),
            level=estimate.level,
            description=estimate.description,
        )


class SnapshotSummaryResponse(BaseModel):
    sensor_count: int = Field(..., ge=0)
    mean_tds: Optional[float] = None
    level_counts: Dict[RiskLevel, int] = Field(default_factory=dict)

    @classmethod
    def from_summary(cls, summary: SnapshotSummary) -> "SnapshotSummaryResponse":
        return cls(
            sensor_count=summary.sensor_count,
            mean_tds=summary.mean_tds,
            level_counts=dict(summary.level_counts),
        )
