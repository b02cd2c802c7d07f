import logging
from typing import Any, Dict, Iterable, List, Optional

from StepDown.errors import StepDownError
from StepDown.method_sorter import MethodSorter, RandomMethodSorter, SortResult
from StepDown.performance import SortMetrics
from StepDown.preferences import Preferences
from StepDown.progress import ProgressVisualizer
from StepDown.utils import iter_java_files, save_json

logger = logging.getLogger(__name__)


class StepDown:
    """
    Batch driver: sorts the methods of every Java compilation unit found
    under the given paths, one working copy per file.
    """

    def __init__(self, preferences: Optional[Preferences] = None, dry_run: bool = False,
                 random_order: bool = False, seed: Optional[int] = None, show_progress: bool = True):
        self.preferences = preferences or Preferences()
        self.dry_run = dry_run
        self.random_order = random_order
        self.show_progress = show_progress
        if random_order:
            self.sorter = RandomMethodSorter(self.preferences, seed)
        else:
            self.sorter = MethodSorter(self.preferences)
        self.metrics = SortMetrics()
        self.results: List[SortResult] = []
        self.failures: Dict[str, str] = {}
        self.interrupted = False

    def run(self, paths: Iterable[str], report_path: Optional[str] = None) -> SortMetrics:
        files = list(iter_java_files(paths))
        self.metrics.start_timing()
        logger.info(f"Sorting {len(files)} compilation units"
                    f"{' (dry run)' if self.dry_run else ''}"
                    f"{' in random order' if self.random_order else ''}")

        visualizer = ProgressVisualizer(files, self.dry_run) if self.show_progress else None
        if visualizer:
            visualizer.initialize()
        try:
            for path in files:
                if visualizer:
                    visualizer.update(path, "processing")
                status = "completed" if self.sort_one(path) else "failed"
                if visualizer:
                    visualizer.update(path, status)
        except KeyboardInterrupt:
            # the unit in flight was discarded by its working copy
            self.interrupted = True
            logger.warning(f"Interrupted after {self.metrics.units_seen}/{len(files)} units")
        finally:
            self.metrics.end_timing()
            if visualizer:
                visualizer.finalize()

        self._log_summary()
        if report_path:
            save_json(report_path, self.report())
            logger.info(f"Report saved to {report_path}")
        return self.metrics

    def sort_one(self, path: str) -> bool:
        """Sort one file; failures are logged and counted, never raised."""
        try:
            result = self.sorter.sort_file(path, self.dry_run)
        except (StepDownError, OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to sort {path}: {e}")
            self.failures[path] = str(e)
            self.metrics.record_failure()
            return False
        self.results.append(result)
        self.metrics.record(result)
        if result.changed:
            logger.info(f"{path}: methods reordered")
        else:
            logger.debug(f"{path}: already in order")
        return True

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    def report(self) -> Dict[str, Any]:
        return {
            "preferences": self.preferences.to_dict(),
            "dry_run": self.dry_run,
            "random_order": self.random_order,
            "interrupted": self.interrupted,
            "metrics": self.metrics.to_dict(),
            "units": [r.to_dict() for r in self.results],
            "failures": [{"path": p, "error": e} for p, e in self.failures.items()],
        }

    def _log_summary(self):
        metrics = self.metrics
        logger.info("=" * 60)
        logger.info("STEPDOWN SORTING SUMMARY")
        logger.info("=" * 60)
        logger.info(f"   Units: {metrics.units_seen} seen, {metrics.units_changed} changed, "
                    f"{metrics.units_unchanged} unchanged")
        logger.info(f"   Skipped: {metrics.units_skipped}, failed: {metrics.units_failed}")
        logger.info(f"   Methods: {metrics.methods}, call edges: {metrics.call_edges}")
        logger.info(f"   Total runtime: {metrics.total_runtime:.2f} seconds")
        for path in self.failures:
            logger.info(f"   Failed: {path}")
