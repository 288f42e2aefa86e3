"""Domain models shared across services."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class SeriesPoint:
    """One daily TDS sample in a sensor's history."""

    date: date
    tds: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.tds) or self.tds < 0:
            raise ValueError(f"Series sample on {self.date} has invalid TDS value {self.tds!r}.")


@dataclass(frozen=True, slots=True)
class SensorReading:
    """Snapshot of a single groundwater sensor."""

    id: str
    tds: float
    name: str = ""
    position: Optional[Tuple[float, float]] = None
    temperature: float = 0.0
    timestamp: Optional[datetime] = None
    series: Tuple[SeriesPoint, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise ValueError("Sensor id must be a non-empty string.")
        if not math.isfinite(self.tds) or self.tds < 0:
            raise ValueError(f"Sensor {self.id!r} has invalid TDS value {self.tds!r}.")
        if not self.name:
            object.__setattr__(self, "name", f"Sensor {self.id}")
        if not isinstance(self.series, tuple):
            object.__setattr__(self, "series", tuple(self.series))
