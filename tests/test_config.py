"""Tests for configuration normalization and the JSON configuration manager."""

import json
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from evoqueens.config import SolverConfig, normalize_config
from evoqueens.config_manager import ConfigManager


class NormalizeConfigTests(unittest.TestCase):

    def test_defaults(self):
        config = normalize_config()
        self.assertEqual(config, SolverConfig(8, 1000, 100, 0.1, 0))
        self.assertEqual(config.pacing_seconds, 0.0)

    def test_population_is_clamped(self):
        self.assertEqual(normalize_config({"population_size": 5}).population_size, 10)
        self.assertEqual(normalize_config({"population_size": 10000}).population_size, 500)
        self.assertEqual(normalize_config({"population_size": 250}).population_size, 250)

    def test_zero_population_falls_back_to_default(self):
        self.assertEqual(normalize_config({"population_size": 0}).population_size, 100)
        self.assertEqual(normalize_config({"populationSize": "0"}).population_size, 100)

    def test_negative_population_is_clamped_to_minimum(self):
        self.assertEqual(normalize_config({"population_size": -4}).population_size, 10)
        self.assertEqual(normalize_config({"populationSize": "-250"}).population_size, 10)

    def test_mutation_rate_is_clamped(self):
        self.assertEqual(normalize_config({"mutation_rate": 1.5}).mutation_rate, 1.0)
        self.assertEqual(normalize_config({"mutation_rate": -0.3}).mutation_rate, 0.0)
        self.assertEqual(normalize_config({"mutation_rate": "0.25"}).mutation_rate, 0.25)

    def test_unparseable_values_use_base(self):
        base = SolverConfig(n=12, max_generations=50, population_size=40, mutation_rate=0.3, animation_speed=10)
        config = normalize_config(
            {"n": "abc", "max_generations": None, "population_size": [], "mutation_rate": float("nan"), "speed": "x"},
            base=base,
        )
        self.assertEqual(config, base)

    def test_lower_bounds(self):
        config = normalize_config({"n": 0, "max_generations": -5, "animation_speed": -100})
        self.assertEqual(config.n, 1)
        self.assertEqual(config.max_generations, 0)
        self.assertEqual(config.animation_speed, 0)

    def test_camel_case_and_legacy_aliases(self):
        config = normalize_config(
            {"N": 10, "MAX_ITER": 200, "populationSize": "60", "mutationRate": 0.05, "animationSpeed": 500}
        )
        self.assertEqual(config, SolverConfig(10, 200, 60, 0.05, 500))
        self.assertEqual(config.pacing_seconds, 0.5)

    def test_with_changes_normalizes(self):
        config = SolverConfig().with_changes(population_size=1, n=6)
        self.assertEqual(config.population_size, 10)
        self.assertEqual(config.n, 6)

    def test_config_is_immutable(self):
        config = SolverConfig()
        with self.assertRaises(AttributeError):
            config.n = 4


class ConfigManagerTests(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "config.json"
        self.path.write_text(json.dumps({
            "solver": {"N": 10, "maxGenerations": 300, "populationSize": 50, "mutationRate": 0.2},
            "presets": {"fast": {"maxGenerations": 50, "animationSpeed": 100}},
            "experiment_settings": {"N_values": [6, 8], "runs": 3, "output_dir": "out"},
            "timeout_settings": {"ga_time_limit": 5.0},
        }))

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_file_raises(self):
        with self.assertRaises(FileNotFoundError):
            ConfigManager(Path(self._tmp.name) / "missing.json")

    def test_solver_defaults_and_preset_layering(self):
        manager = ConfigManager(self.path)
        self.assertEqual(manager.get_solver_config(), SolverConfig(10, 300, 50, 0.2, 0))
        self.assertEqual(manager.get_solver_config("fast"), SolverConfig(10, 50, 50, 0.2, 100))

    def test_unknown_preset_raises(self):
        manager = ConfigManager(self.path)
        with self.assertRaises(KeyError):
            manager.get_solver_config("huge")

    def test_sections(self):
        manager = ConfigManager(self.path)
        self.assertEqual(manager.get_experiment_settings()["runs"], 3)
        self.assertEqual(manager.get_timeout_settings()["ga_time_limit"], 5.0)
        self.assertIn("fast", manager.get_presets())

    def test_save_preset_round_trips(self):
        manager = ConfigManager(self.path)
        manager.save_preset("custom", SolverConfig(12, 80, 30, 0.4, 20))
        reloaded = ConfigManager(self.path)
        self.assertEqual(reloaded.get_presets()["custom"]["populationSize"], 30)
        self.assertEqual(reloaded.get_solver_config("custom"), SolverConfig(12, 80, 30, 0.4, 20))

    def test_update_setting_persists(self):
        manager = ConfigManager(self.path)
        manager.update_setting("timeout_settings", "ga_time_limit", 9.5)
        self.assertEqual(ConfigManager(self.path).get_timeout_settings()["ga_time_limit"], 9.5)

    def test_bundled_configuration_loads(self):
        manager = ConfigManager(ROOT / "config.json")
        self.assertEqual(manager.get_solver_config().n, 8)
        self.assertEqual(manager.get_solver_config("demo").animation_speed, 200)


if __name__ == "__main__":
    unittest.main()
