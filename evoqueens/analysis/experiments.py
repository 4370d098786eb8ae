"""Batch experiment runners for the evolutionary solver (sequential and parallel).

These routines execute repeatable batches of independent headless runs for a
set of board sizes, given GA parameters per N, and shape the outcomes into
structured dictionaries suitable for CSV export and plotting.

Parallelism is across runs only: each run owns a whole solver and its
population is never split between workers.
"""
from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor
from typing import Any, Dict, List, Optional, Tuple

from . import settings
from .stats import (
    ExperimentResults,
    GARecord,
    GAResultEntry,
    ProgressPrinter,
    compute_grouped_statistics,
)
from evoqueens.genetic import GAResult, ga_nqueens

GAParams = Tuple[int, int, int, float, Optional[int], Optional[float]]


# Reusable workers -----------------------------------------------------------

def run_single_ga_experiment(params: GAParams) -> GAResult:
    """Worker wrapper to invoke a single GA run (for parallel mapping)."""
    N, pop_size, max_gen, pm, seed, time_limit = params
    return ga_nqueens(N, pop_size=pop_size, max_gen=max_gen, pm=pm, seed=seed, time_limit=time_limit)


def params_for(N: int, params_for_N: Optional[Dict[int, Dict[str, Any]]]) -> Dict[str, Any]:
    """Return GA parameters for ``N``, filling gaps with the settings defaults."""
    params = dict((params_for_N or {}).get(N, {}))
    params.setdefault("pop_size", settings.DEFAULT_POP_SIZE)
    params.setdefault("max_gen", settings.DEFAULT_MAX_GEN)
    params.setdefault("pm", settings.DEFAULT_PM)
    return params


def _record(result: GAResult) -> GARecord:
    success, gen, elapsed, best_conflicts, evals, timeout = result
    return {
        "success": success,
        "gen": gen,
        "time": elapsed,
        "best_conflicts": best_conflicts,
        "evals": evals,
        "timeout": timeout,
    }


def _validate_runs(N: int, runs: List[GARecord], max_gen: int) -> None:
    for idx, run in enumerate(runs):
        if run["success"] and (run["best_conflicts"] != 0 or run["timeout"]):
            raise AssertionError(
                f"GA validation failed for N={N}, run {idx}: success but best_conflicts={run['best_conflicts']}, timeout={run['timeout']}"
            )
        if run["gen"] > max_gen:
            raise AssertionError(f"GA validation failed for N={N}, run {idx}: {run['gen']} generations > cap {max_gen}")


def _summarize(runs: List[GARecord], params: Dict[str, Any]) -> GAResultEntry:
    ga_stats = compute_grouped_statistics(runs, "success")
    entry: Dict[str, Any] = {key: value for key, value in ga_stats.items()}
    entry.update(
        {
            "pop_size": params["pop_size"],
            "max_gen": params["max_gen"],
            "pm": params["pm"],
            "raw_runs": list(runs),
        }
    )
    return entry  # type: ignore[return-value]


def run_experiments(
    N_values: List[int],
    runs: int,
    params_for_N: Optional[Dict[int, Dict[str, Any]]] = None,
    time_limit: Optional[float] = None,
    seed: Optional[int] = None,
    progress_label: Optional[str] = None,
    validate: bool = False,
) -> ExperimentResults:
    """Run ``runs`` independent GA runs per N sequentially.

    When ``seed`` is given, run ``i`` of every N uses seed ``seed + i`` so the
    whole batch is reproducible.
    """
    results: Any = {"GA": {}}
    progress = ProgressPrinter(len(N_values), progress_label) if progress_label else None

    for index, N in enumerate(N_values, start=1):
        if progress:
            progress.update(index, f"N={N}")
        params = params_for(N, params_for_N)
        print(f"=== N = {N}, pop={params['pop_size']}, max_gen={params['max_gen']}, pm={params['pm']} ===")

        ga_runs: List[GARecord] = []
        for run in range(runs):
            run_seed = None if seed is None else seed + run
            ga_runs.append(
                _record(
                    run_single_ga_experiment(
                        (N, params["pop_size"], params["max_gen"], params["pm"], run_seed, time_limit)
                    )
                )
            )

        if validate:
            _validate_runs(N, ga_runs, params["max_gen"])

        results["GA"][N] = _summarize(ga_runs, params)
        print(
            f"  success rate: {results['GA'][N]['success_rate']:.2f} "
            f"({results['GA'][N]['successes']}/{results['GA'][N]['total_runs']})"
        )

    return results


def run_experiments_parallel(
    N_values: List[int],
    runs: int,
    params_for_N: Optional[Dict[int, Dict[str, Any]]] = None,
    time_limit: Optional[float] = None,
    seed: Optional[int] = None,
    progress_label: Optional[str] = None,
    validate: bool = False,
    max_workers: Optional[int] = None,
) -> ExperimentResults:
    """Same as ``run_experiments`` but distributes runs over a process pool."""
    results: Any = {"GA": {}}
    progress = ProgressPrinter(len(N_values), progress_label) if progress_label else None
    workers = max_workers or settings.NUM_PROCESSES

    with ProcessPoolExecutor(max_workers=workers) as executor:
        for index, N in enumerate(N_values, start=1):
            if progress:
                progress.update(index, f"N={N}")
            params = params_for(N, params_for_N)
            print(f"=== N = {N}, pop={params['pop_size']}, max_gen={params['max_gen']}, pm={params['pm']} (parallel) ===")

            run_params = [
                (N, params["pop_size"], params["max_gen"], params["pm"], None if seed is None else seed + run, time_limit)
                for run in range(runs)
            ]
            ga_runs = [_record(result) for result in executor.map(run_single_ga_experiment, run_params)]

            if validate:
                _validate_runs(N, ga_runs, params["max_gen"])

            results["GA"][N] = _summarize(ga_runs, params)

    return results
