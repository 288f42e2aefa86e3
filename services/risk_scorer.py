"""Salinity risk scoring heuristic for groundwater sensors."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from models.records import SensorReading, SeriesPoint

LOW_MAX_TDS = 1500.0
MEDIUM_MAX_TDS = 3000.0
TDS_SATURATION_SPAN = 2000.0

TDS_WEIGHT = 0.5
TREND_WEIGHT = 0.3
ANOMALY_WEIGHT = 0.2

DEFAULT_TREND_WINDOW = 7
EXPLANATION_SEPARATOR = " • "

INSUFFICIENT_DATA = "Insufficient data"


class RiskLevel(str, Enum):
    """Coarse salinity tier derived from TDS alone."""

    low = "low"
    medium = "medium"
    high = "high"


@dataclass(frozen=True)
class RiskFactors:
    """Raw sub-factor values; ``None`` means the factor lacked data."""

    tds: float
    trend: Optional[float] = None
    anomaly: Optional[float] = None


@dataclass(frozen=True)
class RiskAssessment:
    level: RiskLevel
    score: int
    explanation: Tuple[str, ...]
    factors: RiskFactors

    @property
    def summary(self) -> str:
        return EXPLANATION_SEPARATOR.join(self.explanation)


@dataclass(frozen=True)
class SubsidenceEstimate:
    percentage: float
    level: RiskLevel
    description: str


@dataclass(frozen=True)
class ScoredSensor:
    sensor: SensorReading
    assessment: RiskAssessment


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class RiskScorer:
    """Stateless scorer combining TDS level, recent trend and peer anomaly.

    The composite weights (0.5/0.3/0.2) are applied to factors that top out at
    50/30/20, so real scores never exceed 38. The 100 clamp is kept as is.
    """

    def __init__(self, trend_window: int = DEFAULT_TREND_WINDOW) -> None:
        if trend_window < 2:
            raise ValueError("trend_window must be at least 2.")
        self.trend_window = trend_window

    def classify_level(self, tds: float) -> RiskLevel:
        if tds <= LOW_MAX_TDS:
            return RiskLevel.low
        if tds <= MEDIUM_MAX_TDS:
            return RiskLevel.medium
        return RiskLevel.high

    def tds_factor(self, tds: float) -> float:
        """Piecewise-linear contribution in [0, 50], saturating at 5000 ppm."""
        if tds <= LOW_MAX_TDS:
            return (tds / LOW_MAX_TDS) * 20
        if tds <= MEDIUM_MAX_TDS:
            return 20 + ((tds - LOW_MAX_TDS) / (MEDIUM_MAX_TDS - LOW_MAX_TDS)) * 20
        return 40 + min((tds - MEDIUM_MAX_TDS) / TDS_SATURATION_SPAN, 1.0) * 10

    def trend_factor(self, series: Sequence[SeriesPoint]) -> Optional[float]:
        """Contribution in [0, 30] from the average daily change of recent samples."""
        if len(series) < 2:
            return None

        recent = series[-self.trend_window:]
        change_per_day = (recent[-1].tds - recent[0].tds) / max(1, len(recent) - 1)

        if change_per_day > 50:
            return 30.0
        if change_per_day > 10:
            return 15.0
        if change_per_day < -10:
            return 5.0
        return abs(change_per_day) / 50 * 10

    def anomaly_factor(
        self, sensor: SensorReading, peers: Sequence[SensorReading]
    ) -> Optional[float]:
        """Contribution in [0, 20] from the sensor's z-score within its peers."""
        if len(peers) < 2:
            return None

        values = [peer.tds for peer in peers]
        mean = math.fsum(values) / len(values)
        std_dev = math.sqrt(math.fsum((value - mean) ** 2 for value in values) / len(values))
        z_score = abs(sensor.tds - mean) / std_dev if std_dev > 0 else 0.0

        if z_score > 2:
            return 20.0
        if z_score > 1:
            return 10.0
        return z_score * 5

    def explain(self, sensor: SensorReading, factors: RiskFactors) -> Tuple[str, ...]:
        """Phrases in evaluation order; a zero TDS factor contributes no salinity phrase."""
        phrases: List[str] = []

        if factors.tds:
            if sensor.tds > MEDIUM_MAX_TDS:
                phrases.append("High salinity (TDS > 3000 ppm)")
            elif sensor.tds > LOW_MAX_TDS:
                phrases.append("Moderate salinity (1500-3000 ppm)")
            else:
                phrases.append("Acceptable salinity")

        if factors.trend is not None:
            if factors.trend > 10:
                phrases.append("Rapidly increasing salinization trend")
            elif factors.trend < 5:
                phrases.append("Stable or decreasing salinity")

        if factors.anomaly is not None and factors.anomaly > 15:
            phrases.append("Anomalously high salinity relative to the region")

        if not phrases:
            return (INSUFFICIENT_DATA,)
        return tuple(phrases)

    def score_sensor(
        self, sensor: SensorReading, peers: Sequence[SensorReading] = ()
    ) -> RiskAssessment:
        """Score one sensor against a peer set that includes the sensor itself."""
        factors = RiskFactors(
            tds=self.tds_factor(sensor.tds),
            trend=self.trend_factor(sensor.series),
            anomaly=self.anomaly_factor(sensor, peers),
        )
        raw = (
            factors.tds * TDS_WEIGHT
            + (factors.trend or 0.0) * TREND_WEIGHT
            + (factors.anomaly or 0.0) * ANOMALY_WEIGHT
        )
        return RiskAssessment(
            level=self.classify_level(sensor.tds),
            score=_round_half_up(min(100.0, raw)),
            explanation=self.explain(sensor, factors),
            factors=factors,
        )

    def analyze_all(self, sensors: Sequence[SensorReading]) -> List[ScoredSensor]:
        """Score every sensor with the whole list as its peer set."""
        peers = tuple(sensors)
        return [
            ScoredSensor(sensor=sensor, assessment=self.score_sensor(sensor, peers))
            for sensor in peers
        ]

    def estimate_subsidence(self, sensor: SensorReading) -> SubsidenceEstimate:
        # Sinkhole likelihood is modelled as proportional to TDS only.
        percentage = min(sensor.tds / MEDIUM_MAX_TDS * 100, 100.0)
        if percentage > 70:
            return SubsidenceEstimate(
                percentage, RiskLevel.high, "High likelihood of sinkhole formation"
            )
        if percentage > 40:
            return SubsidenceEstimate(percentage, RiskLevel.medium, "Moderate sinkhole risk")
        return SubsidenceEstimate(percentage, RiskLevel.low, "Low sinkhole risk")
