import logging
import threading
from pathlib import Path
from typing import Dict, Hashable, Optional

from pydantic import BaseModel

from .report import DispatchReport
from .utils import RunningStats

logger = logging.getLogger(__name__)


class KindStats(BaseModel):
    """
    Aggregated dispatch counters for one event kind.
    """

    kind: str
    publishes: int = 0
    empty_publishes: int = 0
    invocations: int = 0
    failures: int = 0
    avr_duration: float = 0.0
    max_duration: float = 0.0

    @property
    def failure_rate(self) -> float:
        return self.failures / self.invocations if self.invocations else 0.0


class DispatchRecorder:
    """
    Collects statistics for every report a hub produces.

    Optionally appends each report summary as a JSON line to
    `<log_dir>/dispatch_<hub name>.jsonl`.
    """

    def __init__(self, log_dir: str | Path | None = None) -> None:
        self.log_dir = Path(log_dir) if log_dir is not None else None
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self._stats: Dict[Hashable, KindStats] = {}
        self._durations: Dict[Hashable, RunningStats] = {}
        self._lock = threading.Lock()

    def log_path(self, hub_name: str) -> Optional[Path]:
        if self.log_dir is None:
            return None
        return self.log_dir / f"dispatch_{hub_name}.jsonl"

    def _log_to_jsonl(self, file_path: Path, data: BaseModel) -> None:
        """
        Helper to write a Pydantic model as a JSON line to a file.
        """
        with open(file_path, "a", encoding="utf-8") as f:
            f.write(data.model_dump_json() + "\n")

    def record(self, report: DispatchReport, hub_name: str = "hub") -> None:
        """Fold one finished dispatch into the counters and the JSONL log."""
        with self._lock:
            stats = self._stats.get(report.kind)
            if stats is None:
                stats = KindStats(kind=str(report.kind))
                self._stats[report.kind] = stats
                self._durations[report.kind] = RunningStats()
            durations = self._durations[report.kind]

            stats.publishes += 1
            if not report.outcomes:
                stats.empty_publishes += 1
            for outcome in report:
                stats.invocations += 1
                if not outcome.ok:
                    stats.failures += 1
                durations.update(outcome.duration)
            stats.avr_duration = durations.mean
            stats.max_duration = durations.maximum

            path = self.log_path(hub_name)
            if path is not None:
                try:
                    self._log_to_jsonl(path, report.summary())
                except OSError:
                    # counters stay updated; the JSONL line for this report is lost
                    logger.exception("could not append dispatch summary to %s", path)

    def stats(self, kind: Hashable) -> Optional[KindStats]:
        """Copy of the counters for kind, or None if it was never published."""
        with self._lock:
            stats = self._stats.get(kind)
            return stats.model_copy() if stats is not None else None

    def all_stats(self) -> list[KindStats]:
        with self._lock:
            return [s.model_copy() for s in self._stats.values()]

    def reset(self) -> None:
        with self._lock:
            self._stats.clear()
            self._durations.clear()
