"""Typed result shapes and statistics helpers for batch experiments.

Defines ``TypedDict`` structures for experiment outputs, a generation history
recorder fed by solver events, and utilities to compute aggregate statistics
across per-run result records.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, TypedDict

import numpy as np

from evoqueens.events import SolverEvent, UpdateEvent


class StatsSummary(TypedDict, total=False):
    count: int
    mean: Optional[float]
    median: Optional[float]
    std: Optional[float]
    min: Optional[float]
    max: Optional[float]
    q25: Optional[float]
    q75: Optional[float]
    range: Optional[float]


class GARecord(TypedDict):
    success: bool
    gen: int
    time: float
    best_conflicts: int
    evals: int
    timeout: bool


class GAResultEntry(TypedDict, total=False):
    success_rate: float
    timeout_rate: float
    failure_rate: float
    total_runs: int
    successes: int
    failures: int
    timeouts: int
    success_gen: StatsSummary
    success_time: StatsSummary
    success_evals: StatsSummary
    failure_gen: StatsSummary
    failure_time: StatsSummary
    failure_best_conflicts: StatsSummary
    timeout_gen: StatsSummary
    timeout_time: StatsSummary
    timeout_best_conflicts: StatsSummary
    all_gen: StatsSummary
    all_time: StatsSummary
    all_evals: StatsSummary
    all_best_conflicts: StatsSummary
    pop_size: int
    max_gen: int
    pm: float
    raw_runs: List[GARecord]


class ExperimentResults(TypedDict):
    GA: Dict[int, GAResultEntry]


METRICS = ["time", "gen", "evals", "best_conflicts"]


class ProgressPrinter:
    """Minimal, stdout-only progress reporter for long-running loops.

    Parameters
    ----------
    total : int
        Total number of steps/items expected. Values <= 0 are coerced to 1 to
        avoid division by zero when reporting percentages.
    label : str
        Short label printed in front of the progress counters.
    """

    def __init__(self, total: int, label: str):
        self.total = max(1, total)
        self.label = label

    def update(self, index: int, detail: str = "") -> None:
        """Print a single-line progress update to stdout."""
        percent = (index / self.total) * 100
        suffix = f" - {detail}" if detail else ""
        print(f"[{self.label}] {index}/{self.total} ({percent:.0f}%)" + suffix)


class GenerationHistory:
    """Solver listener recording the trajectory of a run, one row per update.

    Subscribe an instance to a solver (``solver.subscribe(history)``) and read
    the recorded series as numpy arrays afterwards.
    """

    def __init__(self) -> None:
        self._rows: List[tuple] = []

    def __call__(self, event: SolverEvent) -> None:
        if isinstance(event, UpdateEvent):
            self._rows.append((event.generation, event.fitness, event.avg_fitness, event.conflicts))

    def __len__(self) -> int:
        return len(self._rows)

    def clear(self) -> None:
        self._rows.clear()

    def _column(self, index: int) -> np.ndarray:
        return np.array([row[index] for row in self._rows], dtype=float)

    @property
    def generations(self) -> np.ndarray:
        return self._column(0)

    @property
    def best_fitness(self) -> np.ndarray:
        return self._column(1)

    @property
    def avg_fitness(self) -> np.ndarray:
        return self._column(2)

    @property
    def conflicts(self) -> np.ndarray:
        return self._column(3)

    def rows(self) -> List[Dict[str, Any]]:
        """Return the history as dictionaries ready for CSV export."""
        return [
            {"generation": g, "best_fitness": f, "avg_fitness": a, "conflicts": c}
            for g, f, a, c in self._rows
        ]

    def is_monotonic(self) -> bool:
        """Return True if best fitness never decreased between consecutive updates."""
        best = self.best_fitness
        return bool(np.all(np.diff(best) >= 0)) if best.size > 1 else True


_EMPTY_SUMMARY: StatsSummary = {
    "count": 0,
    "mean": None,
    "median": None,
    "std": None,
    "min": None,
    "max": None,
    "q25": None,
    "q75": None,
    "range": None,
}


def compute_detailed_statistics(values: List[float], label: str = "") -> StatsSummary:
    """Summarize a numeric series (count, mean, median, population std, extremes, quartiles).

    Non-finite values, such as the infinite conflict count reported for an
    empty population, are dropped first. When nothing remains every numeric
    field is None and ``count`` is 0. ``label`` is informational only.
    """
    data = np.asarray(values, dtype=float)
    data = data[np.isfinite(data)]
    if data.size == 0:
        return dict(_EMPTY_SUMMARY)  # type: ignore[return-value]

    q25, median, q75 = np.percentile(data, [25, 50, 75])
    low, high = float(data.min()), float(data.max())
    return {
        "count": int(data.size),
        "mean": float(data.mean()),
        "median": float(median),
        "std": float(data.std()),
        "min": low,
        "max": high,
        "q25": float(q25),
        "q75": float(q75),
        "range": high - low,
    }


def compute_grouped_statistics(results_list: Sequence[Mapping[str, Any]], success_key: str = "success") -> Dict[str, Any]:
    """Aggregate metrics by outcome groups (success, failure, timeout).

    A run is a failure when it neither succeeded nor timed out, i.e. the
    generation budget ran out. Detailed statistics are produced for every
    metric in ``METRICS`` present in the records, across all runs
    (``all_<metric>``) and per group (``success_<metric>``, ...).
    """
    successes = [r for r in results_list if r.get(success_key, False)]
    timeouts = [r for r in results_list if r.get("timeout", False)]
    failures = [r for r in results_list if not r.get(success_key, False) and not r.get("timeout", False)]
    total = len(results_list)

    stats: Dict[str, Any] = {
        "total_runs": total,
        "successes": len(successes),
        "failures": len(failures),
        "timeouts": len(timeouts),
        "success_rate": len(successes) / total if total else 0,
        "timeout_rate": len(timeouts) / total if total else 0,
        "failure_rate": len(failures) / total if total else 0,
    }

    for group, records in (("all", results_list), ("success", successes), ("timeout", timeouts), ("failure", failures)):
        for metric in METRICS:
            if any(metric in r for r in records):
                values = [r[metric] for r in records if metric in r]
                stats[f"{group}_{metric}"] = compute_detailed_statistics(values, f"{group}_{metric}")

    return stats
