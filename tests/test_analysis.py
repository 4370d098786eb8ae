"""Tests for the analysis layer: statistics, batch runs, exports and the CLI."""

import contextlib
import csv
import io
import math
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from evoqueens.analysis import settings
from evoqueens.analysis.cli import (
    build_arg_parser,
    main,
    parse_n_values,
    resolve_solver_config,
    run_solve,
)
from evoqueens.analysis.console import ConsoleAdapter, format_rate
from evoqueens.analysis.experiments import params_for, run_experiments
from evoqueens.analysis.plots import plot_and_save, plot_fitness_history
from evoqueens.analysis.reporting import save_history_to_csv, save_raw_data_to_csv, save_results_to_csv
from evoqueens.analysis.stats import (
    GARecord,
    GenerationHistory,
    compute_detailed_statistics,
    compute_grouped_statistics,
)
from evoqueens.config import SolverConfig
from evoqueens.solver import NQueensSolver


def quietly(func, *args, **kwargs):
    with contextlib.redirect_stdout(io.StringIO()):
        return func(*args, **kwargs)


class StatisticsTests(unittest.TestCase):

    def test_detailed_statistics(self):
        summary = compute_detailed_statistics([4, 1, 3, 2])
        self.assertEqual(summary["count"], 4)
        self.assertEqual(summary["mean"], 2.5)
        self.assertEqual(summary["median"], 2.5)
        self.assertAlmostEqual(summary["q25"], 1.75)
        self.assertAlmostEqual(summary["q75"], 3.25)
        self.assertEqual(summary["range"], 3)
        self.assertAlmostEqual(summary["std"], math.sqrt(1.25))

    def test_infinite_values_are_dropped(self):
        summary = compute_detailed_statistics([2.0, math.inf])
        self.assertEqual(summary["count"], 1)
        self.assertEqual(summary["std"], 0)
        self.assertEqual(compute_detailed_statistics([])["mean"], None)

    def test_grouped_statistics(self):
        runs = [
            {"success": True, "timeout": False, "gen": 3},
            {"success": False, "timeout": True, "gen": 10},
            {"success": False, "timeout": False, "gen": 20},
        ]
        stats = compute_grouped_statistics(runs)
        self.assertEqual((stats["successes"], stats["timeouts"], stats["failures"]), (1, 1, 1))
        self.assertAlmostEqual(stats["success_rate"], 1 / 3)
        self.assertEqual(stats["all_gen"]["mean"], 11)
        self.assertEqual(stats["success_gen"]["count"], 1)
        self.assertNotIn("all_time", stats)


class GenerationHistoryTests(unittest.TestCase):

    def test_records_one_row_per_update(self):
        solver = NQueensSolver(seed=6)
        history = solver.subscribe(GenerationHistory())
        solver.initialize(SolverConfig(n=6, max_generations=40, population_size=30))
        solver.solve_blocking()
        self.assertEqual(len(history), solver.get_iterations() + 2)
        self.assertTrue(history.is_monotonic())
        self.assertEqual(history.generations[-1], solver.get_iterations())
        self.assertEqual(set(history.rows()[0]), {"generation", "best_fitness", "avg_fitness", "conflicts"})
        history.clear()
        self.assertEqual(len(history), 0)
        self.assertTrue(history.is_monotonic())


class BatchPipelineTests(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.out_dir = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def test_params_fall_back_to_settings(self):
        params = params_for(9, {9: {"pm": 0.3}})
        self.assertEqual(params["pm"], 0.3)
        self.assertEqual(params["pop_size"], settings.DEFAULT_POP_SIZE)
        self.assertEqual(params["max_gen"], settings.DEFAULT_MAX_GEN)

    def test_experiments_csv_and_charts(self):
        n_values = [3, 5]
        results = quietly(
            run_experiments,
            n_values,
            2,
            params_for_N={N: {"pop_size": 20, "max_gen": 40, "pm": 0.2} for N in n_values},
            seed=3,
            progress_label="test",
            validate=True,
        )
        unsolvable = results["GA"][3]
        self.assertEqual(unsolvable["total_runs"], 2)
        self.assertEqual(unsolvable["successes"], 0)
        self.assertEqual(unsolvable["failures"], 2)
        self.assertEqual(len(unsolvable["raw_runs"]), 2)
        for run in unsolvable["raw_runs"]:
            self.assertEqual(set(run), set(GARecord.__annotations__))
            self.assertIsInstance(run["best_conflicts"], int)
        self.assertEqual(results["GA"][5]["pop_size"], 20)

        summary_csv = quietly(save_results_to_csv, results, n_values, self.out_dir)
        raw_csv = quietly(save_raw_data_to_csv, results, n_values, self.out_dir)
        with open(summary_csv, newline="") as f:
            rows = list(csv.DictReader(f))
        self.assertEqual([row["n"] for row in rows], ["3", "5"])
        self.assertEqual(rows[0]["success_gen_mean"], "")
        with open(raw_csv, newline="") as f:
            self.assertEqual(len(list(csv.DictReader(f))), 4)

        for chart in quietly(plot_and_save, results, n_values, self.out_dir):
            self.assertTrue(Path(chart).exists())

    def test_same_seed_reproduces_batch(self):
        kwargs = {"params_for_N": {6: {"pop_size": 20, "max_gen": 30, "pm": 0.1}}, "seed": 11}
        first = quietly(run_experiments, [6], 2, **kwargs)
        second = quietly(run_experiments, [6], 2, **kwargs)
        strip = lambda runs: [(r["success"], r["gen"], r["best_conflicts"]) for r in runs]
        self.assertEqual(strip(first["GA"][6]["raw_runs"]), strip(second["GA"][6]["raw_runs"]))

    def test_history_exports(self):
        solver = NQueensSolver(seed=1)
        history = solver.subscribe(GenerationHistory())
        solver.initialize(SolverConfig(n=5, max_generations=20, population_size=20))
        solver.solve_blocking()
        path = quietly(save_history_to_csv, history, 5, self.out_dir)
        with open(path, newline="") as f:
            self.assertEqual(len(list(csv.DictReader(f))), len(history))
        chart = quietly(plot_fitness_history, history, 5, self.out_dir)
        self.assertTrue(Path(chart).exists())
        self.assertIsNone(quietly(plot_fitness_history, GenerationHistory(), 5, self.out_dir))


class ConsoleAdapterTests(unittest.TestCase):

    def test_format_rate(self):
        self.assertEqual(format_rate(0.1), "10%")
        self.assertEqual(format_rate(0.125), "12.5%")
        self.assertEqual(format_rate(1.0), "100%")

    def test_renders_updates_logs_and_completion(self):
        stream = io.StringIO()
        solver = NQueensSolver(seed=0)
        console = ConsoleAdapter(solver, stream=stream)
        solver.initialize(SolverConfig(n=3, max_generations=2, population_size=10))
        solver.solve_blocking()
        output = stream.getvalue()
        self.assertIn("Generation 0 |", output)
        self.assertIn("Generation 2 |", output)
        self.assertIn("No solution found in 2 generations", output)
        self.assertIn("statistics", output)
        self.assertEqual(console.last_completion.generations, 2)
        self.assertEqual(console.status(), "Ready")

    def test_log_is_bounded_and_timestamped(self):
        solver = NQueensSolver(seed=0)
        console = ConsoleAdapter(solver, max_log=4, stream=io.StringIO())
        for index in range(10):
            console.add_log_entry(f"entry {index}")
        self.assertEqual(len(console.log_entries), 4)
        self.assertTrue(console.log_entries[-1].endswith("] entry 9"))
        self.assertTrue(console.log_entries[0].startswith("["))
        console.clear_log()
        self.assertEqual(len(console.log_entries), 0)

    def test_detach_stops_rendering(self):
        stream = io.StringIO()
        solver = NQueensSolver(seed=0)
        console = ConsoleAdapter(solver, stream=stream)
        console.detach()
        solver.initialize(SolverConfig(n=4, population_size=10))
        self.assertEqual(stream.getvalue(), "")


class CliTests(unittest.TestCase):

    def test_parse_n_values(self):
        self.assertIsNone(parse_n_values(None))
        self.assertEqual(parse_n_values(["8,4", "4", " 12 "]), [4, 8, 12])
        with self.assertRaises(ValueError):
            parse_n_values(["x"])
        with self.assertRaises(ValueError):
            parse_n_values(["0"])

    def test_cli_overrides_are_normalized(self):
        args = build_arg_parser().parse_args(["-n", "6", "-m", "0.3", "-p", "2"])
        self.assertEqual(resolve_solver_config(args, None), SolverConfig(6, 1000, 10, 0.3, 0))

    def test_preset_requires_config(self):
        args = build_arg_parser().parse_args(["--preset", "demo"])
        with self.assertRaises(ValueError):
            resolve_solver_config(args, None)

    def test_missing_config_exits_with_error(self):
        with self.assertRaises(SystemExit) as ctx:
            quietly(main, ["--config", str(ROOT / "does-not-exist.json")])
        self.assertEqual(ctx.exception.code, 1)

    def test_step_mode(self):
        output = io.StringIO()
        with contextlib.redirect_stdout(output):
            main(["--mode", "step", "-n", "3", "-p", "10", "--steps", "2", "--seed", "4"])
        self.assertIn("Step mode enabled", output.getvalue())
        self.assertIn("Generation 2 |", output.getvalue())

    def test_solve_mode_saves_history(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config = SolverConfig(n=3, max_generations=5, population_size=10)
            solved = quietly(run_solve, config, 0, 1, tmpdir)
            self.assertFalse(solved)
            names = sorted(p.name for p in Path(tmpdir).iterdir())
            self.assertTrue(any(name.startswith("history_N3") for name in names))
            self.assertTrue(any(name.startswith("fitness_history_N3") for name in names))


if __name__ == "__main__":
    unittest.main()
