"""Sinks receiving every metric sample recorded by the registry."""

from __future__ import annotations

import json
from pathlib import Path
from threading import RLock
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:  # pragma: no cover - imported only for typing
    from .metrics import MetricSample


class Exporter(Protocol):
    def export(self, sample: "MetricSample") -> None:  # pragma: no cover - interface definition
        ...


class MemoryExporter:
    """Keep the most recent samples in memory, bounded by ``capacity``."""

    def __init__(self, capacity: int = 1024) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._lock = RLock()
        self._samples: list["MetricSample"] = []

    def export(self, sample: "MetricSample") -> None:
        with self._lock:
            self._samples.append(sample)
            overflow = len(self._samples) - self._capacity
            if overflow > 0:
                del self._samples[:overflow]

    @property
    def samples(self) -> tuple["MetricSample", ...]:
        with self._lock:
            return tuple(self._samples)

    def clear(self) -> None:
        with self._lock:
            self._samples.clear()


class JsonlExporter:
    """Append metric samples to a JSONL file on disk."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = RLock()

    def export(self, sample: "MetricSample") -> None:
        record = sample.to_dict()
        with self._lock:
            with self._path.open("a", encoding="utf-8") as handle:
                json.dump(record, handle, ensure_ascii=False, sort_keys=True)
                handle.write("\n")


_EXPORTER: Exporter = MemoryExporter()


def configure(exporter: Exporter) -> Exporter:
    """Install ``exporter`` as the active sink and return the previous one."""

    global _EXPORTER
    previous = _EXPORTER
    _EXPORTER = exporter
    return previous


def export(sample: "MetricSample") -> None:
    """Forward ``sample`` to the active exporter."""

    _EXPORTER.export(sample)


__all__ = ["Exporter", "JsonlExporter", "MemoryExporter", "configure", "export"]
