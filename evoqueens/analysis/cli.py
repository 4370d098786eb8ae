"""Command-line interface for the evolutionary N-Queens solver.

This module wires together configuration loading, the console presenter and
the batch experiment pipeline. It keeps I/O, argument parsing and progress
reporting out of the solver engine so that the core remains easy to test
programmatically.

Modes
-----
- solve: one continuous run rendered to the console (``--speed`` paces it).
- step: ``--steps`` single generations, rendered one by one.
- batch: repeated headless runs per N, exported to CSV and charts.
"""
from __future__ import annotations

import argparse
import asyncio
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import settings
from .console import ConsoleAdapter
from .experiments import run_experiments, run_experiments_parallel
from .plots import plot_and_save, plot_fitness_history
from .reporting import save_history_to_csv, save_raw_data_to_csv, save_results_to_csv
from .stats import GenerationHistory
from evoqueens.config import SolverConfig, normalize_config
from evoqueens.config_manager import ConfigManager
from evoqueens.events import EventRecorder
from evoqueens.genetic import ga_nqueens
from evoqueens.solver import NQueensSolver
from evoqueens.utils import is_permutation, is_valid_solution


# ------------- Utils --------------------------------------------------------

def parse_n_values(values: Optional[List[str]]) -> Optional[List[int]]:
    """Normalize ``-N`` inputs (repeated flags and/or comma lists) into sorted ints.

    Returns ``None`` when nothing was provided so that callers fall back to the
    configured sizes.
    """
    if not values:
        return None
    selected: List[int] = []
    for entry in values:
        for token in entry.split(","):
            token = token.strip()
            if not token:
                continue
            try:
                n = int(token)
            except ValueError as exc:
                raise ValueError(f"Invalid board size '{token}'") from exc
            if n < 1:
                raise ValueError(f"Board size must be >= 1, got {n}")
            selected.append(n)
    unique = sorted(set(selected))
    return unique or None


def apply_configuration(config_path: Optional[str]) -> Optional[ConfigManager]:
    """Load the configuration file and update ``settings`` in place.

    Returns None when no path is given; a missing file raises
    ``FileNotFoundError``.
    """
    if not config_path:
        return None
    config_mgr = ConfigManager(config_path)

    experiment_settings = config_mgr.get_experiment_settings()
    if experiment_settings:
        settings.N_VALUES = [int(n) for n in experiment_settings.get("N_values", settings.N_VALUES)]
        settings.RUNS_GA_FINAL = int(experiment_settings.get("runs", settings.RUNS_GA_FINAL))
        settings.OUT_DIR = experiment_settings.get("output_dir", settings.OUT_DIR)

    timeout_settings = config_mgr.get_timeout_settings()
    if timeout_settings:
        settings.set_timeouts(ga_timeout=timeout_settings.get("ga_time_limit", settings.GA_TIME_LIMIT))

    return config_mgr


def resolve_solver_config(args: argparse.Namespace, config_mgr: Optional[ConfigManager]) -> SolverConfig:
    """Combine file defaults, the selected preset and CLI overrides."""
    if config_mgr is not None:
        base = config_mgr.get_solver_config(args.preset)
    elif args.preset:
        raise ValueError("--preset requires --config")
    else:
        base = SolverConfig()

    overrides: Dict[str, Any] = {
        "n": args.board_size,
        "max_generations": args.max_generations,
        "population_size": args.population_size,
        "mutation_rate": args.mutation_rate,
        "animation_speed": args.speed,
    }
    return normalize_config({k: v for k, v in overrides.items() if v is not None}, base=base)


# ------------- Interactive modes ------------------------------------------

def run_solve(config: SolverConfig, seed: Optional[int], board_every: int, out_dir: Optional[str]) -> bool:
    """Run one continuous, console-rendered solve and return whether it succeeded."""
    solver = NQueensSolver(seed=seed)
    console = ConsoleAdapter(solver, board_every=board_every)
    history = GenerationHistory()
    solver.subscribe(history)

    console.add_log_entry("Application ready")
    console.add_log_entry("Algorithm: evolutionary (genetic) with tournament selection")
    solver.initialize(config)
    console.start_timer()
    console.add_log_entry("Starting evolutionary algorithm...")

    try:
        asyncio.run(solver.solve())
    except KeyboardInterrupt:
        solver.stop()
        print(console.stats_panel())
        raise

    if out_dir:
        save_history_to_csv(history, config.n, out_dir)
        plot_fitness_history(history, config.n, out_dir)

    return solver.get_conflicts() == 0


def run_steps(config: SolverConfig, seed: Optional[int], steps: int) -> bool:
    """Advance ``steps`` single generations, stopping early on a solution."""
    solver = NQueensSolver(seed=seed)
    console = ConsoleAdapter(solver)
    solver.initialize(config)
    console.start_timer()
    console.add_log_entry("Step mode enabled (evolutionary algorithm)")

    for _ in range(steps):
        if solver.step_blocking():
            return True
    print(console.stats_panel())
    return False


def run_batch(
    config: SolverConfig,
    n_values: List[int],
    runs: int,
    seed: Optional[int],
    parallel: bool,
    out_dir: str,
    plots: bool,
    validate: bool,
) -> None:
    """Run the batch pipeline: experiments, CSV exports and charts."""
    params_for_N = {
        N: {"pop_size": config.population_size, "max_gen": config.max_generations, "pm": config.mutation_rate}
        for N in n_values
    }
    runner = run_experiments_parallel if parallel else run_experiments
    results = runner(
        n_values,
        runs,
        params_for_N=params_for_N,
        time_limit=settings.GA_TIME_LIMIT,
        seed=seed,
        progress_label="Batch GA",
        validate=validate,
    )
    save_results_to_csv(results, n_values, out_dir)
    save_raw_data_to_csv(results, n_values, out_dir)
    if plots:
        plot_and_save(results, n_values, out_dir)
    print("\nBatch pipeline completed.")


# ------------- Quick regression -------------------------------------------

def run_quick_regression_tests() -> None:
    """Execute a fast, deterministic smoke test at N=8.

    Verifies that:
    - A seeded headless GA run terminates within its budget with a
      consistent outcome.
    - A continuous solver run emits one completion and a permutation board.
    - The batch pipeline produces a non-empty CSV in a temporary folder.
    """
    print("Running quick regression tests (N=8)...")

    success, generations, elapsed, best_conflicts, evals, timeout = ga_nqueens(
        8, pop_size=100, max_gen=500, pm=0.1, seed=42, time_limit=30.0
    )
    if generations > 500 or success != (best_conflicts == 0):
        raise AssertionError(
            f"Inconsistent GA result for N=8: success={success}, generations={generations}, conflicts={best_conflicts}."
        )
    outcome = "success" if success else f"no solution (best conflicts {best_conflicts})"
    print(f"  Genetic Algorithm: {outcome} after {generations} generations ({elapsed:.4f}s, {evals} evaluations)")

    solver = NQueensSolver(seed=7)
    recorder = solver.subscribe(EventRecorder())
    solver.initialize(SolverConfig(n=8, max_generations=500, population_size=100, mutation_rate=0.1))
    solver.solve_blocking()
    if len(recorder.completions) != 1:
        raise AssertionError(f"Expected one completion event, got {len(recorder.completions)}.")
    if not is_permutation(solver.get_board()):
        raise AssertionError(f"Best board is not a permutation: {solver.get_board()}.")
    if recorder.completions[0].success and not is_valid_solution(solver.get_board()):
        raise AssertionError(f"Reported solution is invalid: {solver.get_board()}.")
    print(f"  Solver engine: {recorder.completions[0]}")

    results = run_experiments(
        [8],
        3,
        params_for_N={8: {"pop_size": 60, "max_gen": 300, "pm": 0.1}},
        seed=1,
        progress_label="Quick regression experiments",
        validate=True,
    )

    with tempfile.TemporaryDirectory() as tmpdir:
        csv_path = Path(save_results_to_csv(results, [8], tmpdir))
        if not csv_path.exists() or csv_path.stat().st_size == 0:
            raise AssertionError("Results CSV was not generated successfully during quick tests.")

    print("Quick regression tests passed.")


# ------------- CLI wiring --------------------------------------------------

def build_arg_parser() -> argparse.ArgumentParser:
    """Construct the argument parser for the CLI entry point."""
    parser = argparse.ArgumentParser(description="Solve N-Queens with an evolutionary algorithm.")
    parser.add_argument(
        "--mode",
        choices=["solve", "step", "batch"],
        default="solve",
        help="solve: continuous run (default); step: single generations; batch: repeated headless runs.",
    )
    parser.add_argument("--config", default=None, help="Path to a JSON configuration file.")
    parser.add_argument("--preset", default=None, help="Named preset from the configuration file.")
    parser.add_argument("--board-size", "-n", default=None, help="Board size N.")
    parser.add_argument("--max-generations", "-g", default=None, help="Generation budget.")
    parser.add_argument("--population-size", "-p", default=None, help="Population size (clamped to 10-500).")
    parser.add_argument("--mutation-rate", "-m", default=None, help="Mutation probability (clamped to 0-1).")
    parser.add_argument("--speed", default=None, help="Delay between generations in milliseconds.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs.")
    parser.add_argument("--steps", type=int, default=1, help="Generations to advance in step mode (default: 1).")
    parser.add_argument("--board-every", type=int, default=10, help="Print the board every K generations in solve mode.")
    parser.add_argument(
        "-N",
        "--n-values",
        action="append",
        help="Board sizes for batch mode (comma-separated or multiple flags).",
    )
    parser.add_argument("--runs", type=int, default=None, help="Runs per board size in batch mode.")
    parser.add_argument("--parallel", action="store_true", help="Distribute batch runs over worker processes.")
    parser.add_argument("--out-dir", default=None, help="Output directory for CSV files and charts.")
    parser.add_argument("--no-plots", action="store_true", help="Skip chart generation.")
    parser.add_argument("--save-history", action="store_true", help="Save the generation history of a solve run.")
    parser.add_argument("--quick-test", action="store_true", help="Run quick regression tests (N=8) and exit.")
    parser.add_argument("--validate", action="store_true", help="Validate reported solutions in batch mode.")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point: parse arguments and dispatch to the chosen mode."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.quick_test:
        run_quick_regression_tests()
        return

    try:
        config_mgr = apply_configuration(args.config)
        config = resolve_solver_config(args, config_mgr)
        n_values = parse_n_values(args.n_values) or settings.N_VALUES
    except FileNotFoundError as exc:
        print(f"Configuration file not found: {exc}")
        raise SystemExit(1) from exc
    except KeyError as exc:
        print(f"Configuration error: {exc}")
        raise SystemExit(1) from exc
    except ValueError as exc:
        print(f"Configuration error: {exc}")
        raise SystemExit(1) from exc

    out_dir = args.out_dir or settings.OUT_DIR

    try:
        if args.mode == "solve":
            run_solve(config, args.seed, args.board_every, out_dir if args.save_history else None)
        elif args.mode == "step":
            run_steps(config, args.seed, max(1, args.steps))
        else:
            os.makedirs(out_dir, exist_ok=True)
            run_batch(
                config,
                n_values,
                args.runs or settings.RUNS_GA_FINAL,
                args.seed,
                args.parallel,
                out_dir,
                plots=not args.no_plots,
                validate=args.validate,
            )
    except KeyboardInterrupt:
        print("\nExecution interrupted by user.")
        raise SystemExit(130) from None
