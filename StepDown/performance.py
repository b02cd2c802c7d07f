from dataclasses import dataclass
import time
from typing import Dict, Any


# -------------------- Performance Monitoring --------------------
@dataclass
class SortMetrics:
    """Track counts and timing of a batch sorting run."""
    start_time: float = 0.0
    end_time: float = 0.0
    total_runtime: float = 0.0

    # Unit counts
    units_seen: int = 0
    units_changed: int = 0
    units_unchanged: int = 0
    units_skipped: int = 0  # left unchanged because a declaration could not be mapped
    units_failed: int = 0

    # Call graph totals
    methods: int = 0
    call_edges: int = 0

    def start_timing(self):
        """Start timing the operation."""
        self.start_time = time.time()

    def end_timing(self):
        """End timing and calculate durations."""
        self.end_time = time.time()
        self.total_runtime = self.end_time - self.start_time

    def record(self, result):
        """Add the outcome of one sorted unit."""
        self.units_seen += 1
        self.methods += result.method_count
        self.call_edges += result.edge_count
        if result.skipped:
            self.units_skipped += 1
        elif result.changed:
            self.units_changed += 1
        else:
            self.units_unchanged += 1

    def record_failure(self):
        self.units_seen += 1
        self.units_failed += 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary for JSON serialization."""
        return {
            "timing": {
                "total_runtime_seconds": round(self.total_runtime, 2),
                "start_time": self.start_time,
                "end_time": self.end_time
            },
            "units": {
                "seen": self.units_seen,
                "changed": self.units_changed,
                "unchanged": self.units_unchanged,
                "skipped": self.units_skipped,
                "failed": self.units_failed
            },
            "call_graph": {
                "methods": self.methods,
                "call_edges": self.call_edges
            }
        }
