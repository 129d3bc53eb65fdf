"""
Performance monitoring for store operations.

Every repository call runs inside ``track(name)``; the monitor keeps count,
total, min and max duration per operation name and logs slow calls.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator

from guildkeeper.util.logger import get_logger

logger = get_logger("database_perf_mon")


@dataclass(slots=True)
class QueryStats:
    count: int = 0
    total_time: float = 0.0
    min_time: float = float("inf")
    max_time: float = 0.0

    def add(self, duration: float) -> None:
        self.count += 1
        self.total_time += duration
        self.min_time = min(self.min_time, duration)
        self.max_time = max(self.max_time, duration)

    def as_dict(self) -> Dict[str, float]:
        return {
            "count": self.count,
            "total_time": self.total_time,
            "avg_time": self.total_time / self.count if self.count else 0.0,
            "min_time": self.min_time if self.count else 0.0,
            "max_time": self.max_time,
        }


class DatabasePerformanceMonitor:
    """
    Records execution times per operation name.

    Timings are recorded even when the operation raises, so a slow failing
    query still shows up in the statistics.
    """

    def __init__(self, slow_query_threshold_ms: float = 100.0):
        self._query_stats: Dict[str, QueryStats] = {}
        self._slow_query_threshold = slow_query_threshold_ms / 1000.0

    def record(self, query_name: str, duration: float) -> None:
        """Add one execution of ``query_name`` that took ``duration`` seconds."""
        self._query_stats.setdefault(query_name, QueryStats()).add(duration)

        if duration > self._slow_query_threshold:
            logger.warning(
                "[PERFORMANCE] Slow query: %s took %.2fms",
                query_name, duration * 1000
            )

    @contextmanager
    def track(self, query_name: str) -> Iterator[None]:
        """Time the enclosed block and record it under ``query_name``."""
        start_time = time.perf_counter()
        try:
            yield
        finally:
            self.record(query_name, time.perf_counter() - start_time)

    def get_statistics(self) -> Dict[str, Dict[str, float]]:
        """Return per-operation statistics (count, total, avg, min, max in seconds)."""
        return {name: stats.as_dict() for name, stats in self._query_stats.items()}

    def reset(self) -> None:
        self._query_stats.clear()
        logger.info("[PERFORMANCE] Statistics reset")

    def get_summary(self) -> str:
        """Human-readable summary, one block per operation."""
        stats = self.get_statistics()
        if not stats:
            return "No queries tracked yet"

        lines = ["Database Performance Summary:", "=" * 50]
        for query_name, query_stats in sorted(stats.items()):
            lines.append(
                f"{query_name}:\n"
                f"  Count: {query_stats['count']}\n"
                f"  Avg: {query_stats['avg_time']*1000:.2f}ms\n"
                f"  Min: {query_stats['min_time']*1000:.2f}ms\n"
                f"  Max: {query_stats['max_time']*1000:.2f}ms"
            )
        return "\n".join(lines)
