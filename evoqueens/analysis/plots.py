"""Visualization utilities for solver runs and batch experiments.

Charts are written as PNG files into ``out_dir`` with an optional run tag and
date suffix (see ``evoqueens.analysis.settings``). The non-interactive Agg
backend is selected so plotting works on headless machines.

Chart map
---------
- fitness_history_N{N}.png: Best and mean fitness per generation of one run,
  with the theoretical maximum ``N(N-1)/2`` as a dashed line.
- success_rate_vs_N.png: Fraction of runs that found a zero-conflict board.
- generations_vs_N.png: Mean +/- std generations of successful runs.
"""
from __future__ import annotations

import os
from typing import Any, Dict, List, Optional, cast

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402

from . import settings  # noqa: E402
from .stats import ExperimentResults, GenerationHistory  # noqa: E402
from evoqueens.utils import max_fitness  # noqa: E402


def plot_fitness_history(history: GenerationHistory, N: int, out_dir: str) -> Optional[str]:
    """Plot best and mean fitness against generation for a single run.

    Returns the written filename, or None when the history is empty.
    """
    if len(history) == 0:
        print("Plotting skipped: empty generation history.")
        return None
    os.makedirs(out_dir, exist_ok=True)

    generations = history.generations
    plt.figure(figsize=(12, 7))
    plt.plot(generations, history.best_fitness, linewidth=2, label="Best fitness", color="#1f77b4")
    plt.plot(generations, history.avg_fitness, linewidth=1.5, label="Mean fitness", color="#ff7f0e", alpha=0.8)
    plt.axhline(max_fitness(N), color="green", linestyle="--", alpha=0.7, label=f"Maximum ({max_fitness(N)})")
    plt.xlabel("Generation", fontsize=12)
    plt.ylabel("Fitness (non-attacking pairs)", fontsize=12)
    plt.title(f"Fitness Evolution (N={N})\n(Elitism keeps the best curve non-decreasing)", fontsize=14)
    plt.grid(True, alpha=0.3)
    plt.legend()

    fname = os.path.join(out_dir, f"fitness_history_N{N}{settings.date_suffix()}.png")
    plt.savefig(fname, bbox_inches="tight", dpi=150)
    plt.close()
    print(f"Saved fitness history: {fname}")
    return fname


def plot_success_rate_vs_N(results: ExperimentResults, N_values: List[int], out_dir: str) -> str:
    """Plot the success rate of batch runs against board size."""
    os.makedirs(out_dir, exist_ok=True)
    rates = [cast(float, results["GA"][N].get("success_rate", 0.0) or 0.0) for N in N_values]

    plt.figure(figsize=(12, 7))
    plt.plot(N_values, rates, marker="o", linewidth=2, markersize=8, color="#2ca02c")
    plt.xlabel("N (board size)", fontsize=12)
    plt.ylabel("Success rate", fontsize=12)
    plt.title("Success Rate vs N\n(Reliability as the board grows)", fontsize=14)
    plt.ylim(-0.05, 1.05)
    plt.grid(True, alpha=0.3)
    plt.xticks(N_values)

    fname = os.path.join(out_dir, f"success_rate_vs_N{settings.date_suffix()}.png")
    plt.savefig(fname, bbox_inches="tight", dpi=150)
    plt.close()
    print(f"Saved success-rate chart: {fname}")
    return fname


def plot_generations_vs_N(results: ExperimentResults, N_values: List[int], out_dir: str) -> str:
    """Plot mean +/- std generations to a solution against board size."""
    os.makedirs(out_dir, exist_ok=True)
    means = []
    stds = []
    for N in N_values:
        gen_stats = cast(Dict[str, Any], results["GA"][N].get("success_gen", {}) or {})
        means.append(gen_stats.get("mean") or 0.0)
        stds.append(gen_stats.get("std") or 0.0)

    means_arr = np.array(means, dtype=float)
    stds_arr = np.array(stds, dtype=float)

    plt.figure(figsize=(12, 7))
    plt.errorbar(N_values, means_arr, yerr=stds_arr, marker="o", linewidth=2, capsize=5, color="#1f77b4")
    plt.fill_between(N_values, np.maximum(means_arr - stds_arr, 0), means_arr + stds_arr, alpha=0.15, color="#1f77b4")
    plt.xlabel("N (board size)", fontsize=12)
    plt.ylabel("Generations to solution (mean +/- std)", fontsize=12)
    plt.title("Convergence Speed vs N\n(Successful runs only)", fontsize=14)
    plt.grid(True, alpha=0.3)
    plt.xticks(N_values)

    fname = os.path.join(out_dir, f"generations_vs_N{settings.date_suffix()}.png")
    plt.savefig(fname, bbox_inches="tight", dpi=150)
    plt.close()
    print(f"Saved generations chart: {fname}")
    return fname


def plot_and_save(results: ExperimentResults, N_values: List[int], out_dir: str) -> List[str]:
    """Generate every batch chart and return the written filenames."""
    return [
        plot_success_rate_vs_N(results, N_values, out_dir),
        plot_generations_vs_N(results, N_values, out_dir),
    ]
