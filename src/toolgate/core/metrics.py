"""
Toolgate Metrics — in-process counters and histograms.

Usage:
    from toolgate.core.metrics import metrics

    metrics.inc("credentials.resolved", labels={"tier": "env"})
    metrics.observe("tools.validate.duration_ms", 12.5)

    snapshot = metrics.snapshot()  # -> dict for a /metrics endpoint
"""

from __future__ import annotations

import time
from collections import defaultdict


class MetricsCollector:
    """Counters plus rolling-window histograms."""

    HISTOGRAM_MAX_SAMPLES = 1000

    _instance: "MetricsCollector | None" = None

    @classmethod
    def get(cls) -> "MetricsCollector":
        """Return the process-wide singleton."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def __init__(self) -> None:
        self._counters: dict[str, int] = defaultdict(int)
        self._histograms: dict[str, list[float]] = defaultdict(list)
        self._started_at: float = time.time()

    def inc(self, name: str, value: int = 1, labels: dict | None = None) -> None:
        self._counters[self._key(name, labels)] += value

    def observe(self, name: str, value: float, labels: dict | None = None) -> None:
        """Record one observation, dropping the oldest once the window is full."""
        samples = self._histograms[self._key(name, labels)]
        samples.append(value)
        if len(samples) > self.HISTOGRAM_MAX_SAMPLES:
            samples.pop(0)

    def counter(self, name: str, labels: dict | None = None) -> int:
        return self._counters.get(self._key(name, labels), 0)

    def reset(self) -> None:
        self._counters.clear()
        self._histograms.clear()

    def snapshot(self) -> dict:
        histograms: dict[str, dict] = {}
        for key, samples in self._histograms.items():
            if not samples:
                continue
            sorted_s = sorted(samples)
            n = len(sorted_s)
            histograms[key] = {
                "count": n,
                "min": sorted_s[0],
                "max": sorted_s[-1],
                "p50": sorted_s[n // 2],
                "p95": sorted_s[min(int(n * 0.95), n - 1)],
            }

        return {
            "uptime_seconds": round(time.time() - self._started_at, 1),
            "counters": dict(self._counters),
            "histograms": histograms,
        }

    def _key(self, name: str, labels: dict | None) -> str:
        """Example: ``credentials.resolved{tier=env}``"""
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"


# Process-wide singleton — import this directly
metrics = MetricsCollector.get()
