import json
import logging
import threading
import time
from typing import Dict, Optional


class WriterMetrics:
    """Counters for one RRD output, logged as a JSON line at most every ``log_interval_s``."""

    COUNTERS = (
        "cycles",
        "databases_created",
        "updates_sent",
        "update_failures",
        "values_written",
        "samples_dropped",
        "empty_cycles",
    )

    def __init__(
        self,
        target: str = "",
        log_interval_s: float = 300.0,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.target = target
        self.log_interval_s = max(0.0, float(log_interval_s))
        self._logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._started = time.monotonic()
        self._last_flush = self._started
        self._counters: Dict[str, int] = dict.fromkeys(self.COUNTERS, 0)
        self._flushed: Dict[str, int] = dict(self._counters)

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counters)

    def record_database_created(self) -> None:
        self._add(databases_created=1)

    def record_cycle(self, resolved: int, dropped: int) -> None:
        """Un ciclo terminó de resolver valores; ``resolved == 0`` no genera update."""

        self._add(cycles=1, samples_dropped=max(0, dropped), empty_cycles=0 if resolved else 1)

    def record_update(self, success: bool, written: int = 0) -> None:
        if success:
            self._add(updates_sent=1, values_written=max(0, written))
        else:
            self._add(update_failures=1)

    def _add(self, **counts: int) -> None:
        with self._lock:
            for key, value in counts.items():
                self._counters[key] += value
        self.maybe_log()

    def _due(self, now: float) -> bool:
        return self.log_interval_s == 0.0 or now - self._last_flush >= self.log_interval_s

    def maybe_log(self, force: bool = False) -> None:
        now = time.monotonic()
        with self._lock:
            if not (force or self._due(now)):
                return
            changed = {
                key: value - self._flushed[key]
                for key, value in self._counters.items()
                if value != self._flushed[key]
            }
            payload = {
                "type": "rrd_writer_metrics",
                "output": self.target,
                "uptime_s": round(now - self._started, 3),
                "interval_s": round(now - self._last_flush, 3),
                "counters": dict(self._counters),
                "changed": changed,
            }
            self._last_flush = now
            self._flushed = dict(self._counters)

        self._logger.info("rrd_writer_metrics %s", json.dumps(payload, sort_keys=True))
