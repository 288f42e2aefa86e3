"""Scoring passes over the registered sensor snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Collection, Dict, Iterable, List, Optional

from datastore.sensor_registry import SensorRegistry, build_default_registry
from models.records import SensorReading
from services.risk_scorer import RiskLevel, RiskScorer, ScoredSensor, SubsidenceEstimate
from settings import get_settings

logger = logging.getLogger(__name__)


@dataclass
class SnapshotSummary:
    """Dashboard statistics for a set of scored sensors."""

    sensor_count: int = 0
    mean_tds: float | None = None
    level_counts: Dict[RiskLevel, int] = field(
        default_factory=lambda: {level: 0 for level in RiskLevel}
    )


class RiskAnalysisService:
    """Coordinates the sensor registry and the risk scorer."""

    def __init__(self, registry: SensorRegistry, scorer: RiskScorer) -> None:
        self.registry = registry
        self.scorer = scorer

    def replace_snapshot(self, readings: Iterable[SensorReading]) -> int:
        return self.registry.replace(readings)

    def assess_all(self, levels: Optional[Collection[RiskLevel]] = None) -> List[ScoredSensor]:
        """Score the whole snapshot, then keep only the requested levels."""
        scored = self.scorer.analyze_all(self.registry.snapshot())
        for item in scored:
            logger.debug(
                "Scored sensor",
                extra={
                    "sensor_id": item.sensor.id,
                    "tds": item.sensor.tds,
                    "level": item.assessment.level,
                    "score": item.assessment.score,
                },
            )
        if not levels:
            return scored
        wanted = set(levels)
        return [item for item in scored if item.assessment.level in wanted]

    def assess(self, sensor_id: str) -> ScoredSensor:
        snapshot = self.registry.snapshot()
        sensor = self._find(snapshot, sensor_id)
        return ScoredSensor(sensor=sensor, assessment=self.scorer.score_sensor(sensor, snapshot))

    def subsidence(self, sensor_id: str) -> SubsidenceEstimate:
        sensor = self._find(self.registry.snapshot(), sensor_id)
        return self.scorer.estimate_subsidence(sensor)

    def summary(self, levels: Optional[Collection[RiskLevel]] = None) -> SnapshotSummary:
        scored = self.assess_all(levels)
        summary = SnapshotSummary(sensor_count=len(scored))
        if scored:
            summary.mean_tds = sum(item.sensor.tds for item in scored) / len(scored)
        for item in scored:
            summary.level_counts[item.assessment.level] += 1
        return summary

    @staticmethod
    def _find(snapshot: Iterable[SensorReading], sensor_id: str) -> SensorReading:
        for sensor in snapshot:
            if sensor.id == sensor_id:
                return sensor
        raise KeyError(f"Sensor {sensor_id!r} not found.")


@lru_cache
def build_default_service() -> RiskAnalysisService:
    """Factory that wires the service with the default registry and scorer."""
    settings = get_settings()
    return RiskAnalysisService(
        registry=build_default_registry(),
        scorer=RiskScorer(trend_window=settings.trend_window),
    )
