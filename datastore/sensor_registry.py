from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Iterable, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from app.schemas import SensorPayload
from models.records import SensorReading
from settings import get_settings

logger = logging.getLogger(__name__)

_SNAPSHOT_ADAPTER = TypeAdapter(List[SensorPayload])


class SensorRegistry:
    """Holds the current snapshot of sensor readings.

    Snapshots are replaced as a whole, so a reader always sees a consistent
    peer set for one scoring pass.
    """

    def __init__(self, persistence_path: Optional[Path] = None) -> None:
        self._snapshot: Tuple[SensorReading, ...] = ()
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def replace(self, readings: Iterable[SensorReading]) -> int:
        snapshot = tuple(readings)
        seen: set[str] = set()
        for reading in snapshot:
            if reading.id in seen:
                raise ValueError(f"Duplicate sensor id {reading.id!r} in snapshot.")
            seen.add(reading.id)

        with self._lock:
            self._persist(snapshot)
            self._snapshot = snapshot
        logger.info("Sensor snapshot replaced", extra={"sensor_count": len(snapshot)})
        return len(snapshot)

    def snapshot(self) -> Tuple[SensorReading, ...]:
        with self._lock:
            return self._snapshot

    def _persist(self, snapshot: Tuple[SensorReading, ...]) -> None:
        if not self.persistence_path:
            return
        payload = [SensorPayload.from_reading(reading).model_dump(mode="json") for reading in snapshot]
        staging = self.persistence_path.with_name(self.persistence_path.name + ".tmp")
        try:
            staging.write_text(json.dumps(payload, indent=2))
            staging.replace(self.persistence_path)
        except OSError:
            staging.unlink(missing_ok=True)
            raise

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "[]"
            payloads = _SNAPSHOT_ADAPTER.validate_python(json.loads(raw))
            self._snapshot = tuple(payload.to_reading() for payload in payloads)
        except (OSError, json.JSONDecodeError, ValidationError, ValueError) as exc:
            logger.warning(
                "Ignoring unreadable sensor snapshot",
                extra={"path": str(self.persistence_path), "reason": str(exc)},
            )
            self._snapshot = ()


@lru_cache
def build_default_registry(path: Optional[str] = None) -> SensorRegistry:
    registry_path = get_settings().registry_path if path is None else path
    persistence = Path(registry_path) if registry_path else None
    return SensorRegistry(persistence_path=persistence)
