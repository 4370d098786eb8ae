"""CSV export utilities for experiment outputs (aggregates, raw runs, histories).

These helpers materialize concise CSV summaries, full per-run raw data and
per-generation trajectories for downstream analysis or spreadsheet
inspection. Column names are lowercase snake_case.
"""
from __future__ import annotations

import csv
import os
from typing import Any, Dict, List

from . import settings
from .stats import ExperimentResults, GenerationHistory


def _stat(entry: Dict[str, Any], key: str, field: str) -> Any:
    summary = entry.get(key) or {}
    value = summary.get(field)
    return "" if value is None else value


def save_results_to_csv(results: ExperimentResults, N_values: List[int], out_dir: str) -> str:
    """Write compact per-N aggregate GA metrics to CSV and return the file path."""
    os.makedirs(out_dir, exist_ok=True)
    filename = os.path.join(out_dir, f"results_GA{settings.date_suffix()}.csv")

    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([
            "n",
            "pop_size",
            "max_gen",
            "pm",
            "total_runs",
            "successes",
            "failures",
            "timeouts",
            "success_rate",
            "timeout_rate",
            "failure_rate",
            "success_gen_mean",
            "success_gen_median",
            "success_gen_std",
            "success_time_mean",
            "success_time_median",
            "success_evals_mean",
            "failure_best_conflicts_mean",
            "all_gen_mean",
            "all_time_mean",
        ])
        for N in N_values:
            ga = results["GA"].get(N)
            if ga is None:
                continue
            entry: Dict[str, Any] = dict(ga)
            writer.writerow([
                N,
                entry.get("pop_size", ""),
                entry.get("max_gen", ""),
                entry.get("pm", ""),
                entry.get("total_runs", 0),
                entry.get("successes", 0),
                entry.get("failures", 0),
                entry.get("timeouts", 0),
                entry.get("success_rate", 0.0),
                entry.get("timeout_rate", 0.0),
                entry.get("failure_rate", 0.0),
                _stat(entry, "success_gen", "mean"),
                _stat(entry, "success_gen", "median"),
                _stat(entry, "success_gen", "std"),
                _stat(entry, "success_time", "mean"),
                _stat(entry, "success_time", "median"),
                _stat(entry, "success_evals", "mean"),
                _stat(entry, "failure_best_conflicts", "mean"),
                _stat(entry, "all_gen", "mean"),
                _stat(entry, "all_time", "mean"),
            ])

    print(f"Results saved: {filename}")
    return filename


def save_raw_data_to_csv(results: ExperimentResults, N_values: List[int], out_dir: str) -> str:
    """Write every individual GA run to CSV and return the file path."""
    os.makedirs(out_dir, exist_ok=True)
    filename = os.path.join(out_dir, f"raw_data_GA{settings.date_suffix()}.csv")

    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([
            "n",
            "run_id",
            "success",
            "timeout",
            "gen",
            "time_seconds",
            "evals",
            "best_conflicts",
            "pop_size",
            "max_gen",
            "pm",
        ])
        for N in N_values:
            ga_data = results["GA"].get(N)
            if not ga_data or "raw_runs" not in ga_data:
                continue
            for i, run in enumerate(ga_data["raw_runs"]):
                writer.writerow([
                    N,
                    i + 1,
                    run["success"],
                    run["timeout"],
                    run["gen"],
                    run["time"],
                    run["evals"],
                    run["best_conflicts"],
                    ga_data.get("pop_size", 0),
                    ga_data.get("max_gen", 0),
                    ga_data.get("pm", 0.0),
                ])

    print(f"Raw data saved: {filename}")
    return filename


def save_history_to_csv(history: GenerationHistory, N: int, out_dir: str) -> str:
    """Write the per-generation trajectory of one run to CSV and return the path."""
    os.makedirs(out_dir, exist_ok=True)
    filename = os.path.join(out_dir, f"history_N{N}{settings.date_suffix()}.csv")

    with open(filename, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=["generation", "best_fitness", "avg_fitness", "conflicts"])
        writer.writeheader()
        for row in history.rows():
            writer.writerow(row)

    print(f"Generation history saved: {filename}")
    return filename
