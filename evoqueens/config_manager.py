"""Configuration file management for the evolutionary N-Queens solver.

This module provides a thin, explicit wrapper around a JSON configuration file
to centralize solver defaults, named parameter presets, batch experiment
settings and time limits.

File format (high-level)
------------------------
- solver: default solver parameters (``N``, ``maxGenerations``,
  ``populationSize``, ``mutationRate``, ``animationSpeed``).
- presets: mapping preset name -> partial solver parameters layered on top of
  ``solver``.
- experiment_settings: board sizes, number of runs and output directory for
  batch experiments.
- timeout_settings: per-run time limit for headless GA runs.

Solver values are normalized through ``normalize_config`` so that malformed
entries fall back to defaults instead of reaching the solver.
"""
import json
from pathlib import Path

from .config import SolverConfig, normalize_config


class ConfigManager:
    """Load, query, and persist configuration and parameter presets.

    Parameters
    ----------
    config_path : str | os.PathLike, default "config.json"
        Path to the configuration file.
    """

    def __init__(self, config_path="config.json"):
        self.config_path = Path(config_path)
        self.config = self.load_config()

    def load_config(self):
        """Load and parse the JSON configuration file.

        Returns
        -------
        dict
            Root configuration object.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}\n"
                f"Create it or use the default config.json template"
            )

        with open(self.config_path, "r") as f:
            return json.load(f)

    def save_config(self):
        """Persist the current in-memory configuration to disk."""
        with open(self.config_path, "w") as f:
            json.dump(self.config, f, indent=2)

    def get_solver_settings(self):
        """Return the raw default solver parameters."""
        return self.config.get("solver", {})

    def get_presets(self):
        """Return the mapping of preset name -> raw solver parameters."""
        return self.config.get("presets", {})

    def get_experiment_settings(self):
        """Return batch experiment settings (sizes, runs, output dir)."""
        return self.config.get("experiment_settings", {})

    def get_timeout_settings(self):
        """Return time limit settings for headless runs."""
        return self.config.get("timeout_settings", {})

    def get_solver_config(self, preset=None):
        """Return a normalized ``SolverConfig``.

        Parameters
        ----------
        preset : str | None
            Name of a preset whose values override the ``solver`` defaults.

        Raises
        ------
        KeyError
            If ``preset`` is not defined in the file.
        """
        base = normalize_config(self.get_solver_settings())
        if preset is None:
            return base
        presets = self.get_presets()
        if preset not in presets:
            raise KeyError(
                f"Unknown preset '{preset}'. Available: {', '.join(sorted(presets)) or 'none'}"
            )
        return normalize_config(presets[preset], base=base)

    def save_preset(self, name, config: SolverConfig):
        """Persist ``config`` as preset ``name`` using the file's key names."""
        if "presets" not in self.config:
            self.config["presets"] = {}
        self.config["presets"][name] = {
            "N": config.n,
            "maxGenerations": config.max_generations,
            "populationSize": config.population_size,
            "mutationRate": config.mutation_rate,
            "animationSpeed": config.animation_speed,
        }
        self.save_config()
        print(f"Preset '{name}' saved to {self.config_path}")

    def update_setting(self, section, key, value):
        """Update a specific setting and persist the change immediately."""
        if section not in self.config:
            self.config[section] = {}
        self.config[section][key] = value
        self.save_config()
