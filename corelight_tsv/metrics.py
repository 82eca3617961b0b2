"""Thread-safe outcome counters for the transcoder."""

import threading
import time
from collections import defaultdict

TRANSFORMED = "transformed"
EMPTY = "empty"
NO_JSON = "no_json"
DECODE_ERROR = "decode_error"
EMPTY_OBJECT = "empty_object"
MISSING_FIELDS = "missing_fields"
BAD_TIMESTAMP = "bad_timestamp"
UNKNOWN_CATEGORY = "unknown_category"
EMIT_ERROR = "emit_error"


class Metrics:
    def __init__(self):
        self._lock = threading.Lock()
        self._total = 0
        self._outcomes: dict[str, int] = defaultdict(int)
        self._categories: dict[str, int] = defaultdict(int)
        self._start_time = time.monotonic()

    def increment(self, outcome: str, category: str | None = None):
        """Count one record's outcome, and its category when it was transformed."""
        with self._lock:
            self._total += 1
            self._outcomes[outcome] += 1
            if category is not None:
                self._categories[category] += 1

    def snapshot(self) -> dict:
        """Return a point-in-time snapshot of all counters."""
        with self._lock:
            elapsed = time.monotonic() - self._start_time
            total = self._total
            outcomes = dict(self._outcomes)
            categories = dict(self._categories)

        transformed = outcomes.get(TRANSFORMED, 0)
        return {
            "total_records": total,
            "transformed": transformed,
            "passed_through": total - transformed,
            "outcomes": outcomes,
            "category_distribution": categories,
            "elapsed_seconds": round(elapsed, 2),
            "records_per_second": round(total / elapsed, 2) if elapsed > 0 else 0.0,
        }
