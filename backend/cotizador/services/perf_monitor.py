"""Performance monitoring for quote calculations served by the API."""
import threading
from typing import Any, Dict


class PerformanceTracker:
    """
    Thread-safe in-memory tracker for quote calculation metrics.

    Tracks:
    - Quotes computed (complete) and pending (no package yet)
    - Cumulative and average calculation duration
    - Slowest calculation
    - Error count broken down by error kind
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._quotes_computed: int = 0
        self._quotes_pending: int = 0
        self._total_duration_ms: float = 0.0
        self._slowest_ms: float = 0.0
        self._error_counts: Dict[str, int] = {}   # error kind -> count

    # ------------------------------------------------------------------
    # Public write API
    # ------------------------------------------------------------------

    def record_quote(self, duration_ms: float, pending: bool = False) -> None:
        """Call once per successful calculation (including pending results)."""
        with self._lock:
            if pending:
                self._quotes_pending += 1
            else:
                self._quotes_computed += 1
            self._total_duration_ms += duration_ms
            if duration_ms > self._slowest_ms:
                self._slowest_ms = duration_ms

    def record_error(self, error_kind: str) -> None:
        """Increment the error counter for a given error kind."""
        with self._lock:
            self._error_counts[error_kind] = self._error_counts.get(error_kind, 0) + 1

    # ------------------------------------------------------------------
    # Public read API
    # ------------------------------------------------------------------

    def get_metrics(self) -> Dict[str, Any]:
        """
        Return a snapshot of all collected metrics.

        Returns
        -------
        dict with keys:
            quotes_computed      : int
            quotes_pending       : int
            avg_duration_ms      : float  (0 if none processed)
            slowest_ms           : float
            error_count          : int   (total across all kinds)
            error_count_by_kind  : dict  {error_kind: count}
        """
        with self._lock:
            calls = self._quotes_computed + self._quotes_pending
            avg = round(self._total_duration_ms / calls, 3) if calls > 0 else 0.0
            return {
                "quotes_computed": self._quotes_computed,
                "quotes_pending": self._quotes_pending,
                "avg_duration_ms": avg,
                "slowest_ms": round(self._slowest_ms, 3),
                "error_count": sum(self._error_counts.values()),
                "error_count_by_kind": dict(self._error_counts),
            }

    def reset(self) -> None:
        """Reset all counters (useful in tests)."""
        with self._lock:
            self._quotes_computed = 0
            self._quotes_pending = 0
            self._total_duration_ms = 0.0
            self._slowest_ms = 0.0
            self._error_counts.clear()


# Module-level singleton, import this instance everywhere else.
tracker = PerformanceTracker()
