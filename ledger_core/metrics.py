import statistics
import threading
import time
from collections import deque
from typing import Dict


class QueryMetrics:
    """Collects rolling execution statistics for a client."""

    def __init__(self, window: int = 200):
        self._lock = threading.Lock()
        self._durations = deque(maxlen=window)
        self._attempts = deque(maxlen=window)
        self._completed = 0
        self._failed = 0
        self._busy_retries = 0
        self._start = time.time()

    def record_completion(self, duration_ms: float, attempts: int) -> None:
        with self._lock:
            self._completed += 1
            self._durations.append(duration_ms)
            self._attempts.append(attempts)

    def record_failure(self) -> None:
        with self._lock:
            self._failed += 1

    def record_busy(self) -> None:
        with self._lock:
            self._busy_retries += 1

    def snapshot(self) -> Dict[str, float]:
        with self._lock:
            avg = statistics.fmean(self._durations) if self._durations else 0.0
            avg_attempts = statistics.fmean(self._attempts) if self._attempts else 0.0
            uptime = time.time() - self._start
            rate = (self._completed / uptime) if uptime else 0.0
            return {
                "avg_ms": avg,
                "avg_attempts": avg_attempts,
                "completed": self._completed,
                "failed": self._failed,
                "busy_retries": self._busy_retries,
                "uptime": uptime,
                "throughput": rate,
            }
