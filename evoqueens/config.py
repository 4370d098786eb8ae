"""Solver configuration values and boundary normalization.

``SolverConfig`` is an immutable snapshot handed to
``NQueensSolver.initialize``. The solver assumes it is already valid; all
parsing, clamping and fallbacks happen here, at the boundary, through
``normalize_config``.

Accepted keys
-------------
``normalize_config`` accepts both the snake_case field names and the camelCase
names used in ``config.json`` (``N``, ``maxGenerations``,
``populationSize``, ``mutationRate``, ``animationSpeed`` and the legacy
``MAX_ITER`` alias). Values may be numbers or numeric strings.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Mapping, Optional

DEFAULT_N: int = 8
DEFAULT_MAX_GENERATIONS: int = 1000
DEFAULT_POPULATION_SIZE: int = 100
DEFAULT_MUTATION_RATE: float = 0.1
DEFAULT_ANIMATION_SPEED: int = 0  # milliseconds; 0 disables pacing

MIN_POPULATION: int = 10
MAX_POPULATION: int = 500


@dataclass(frozen=True)
class SolverConfig:
    """Fully specified solver parameters.

    Parameters
    ----------
    n : int
        Board dimension N (>= 1).
    max_generations : int
        Generation budget for a continuous run (>= 0).
    population_size : int
        Number of individuals per generation.
    mutation_rate : float
        Probability in [0, 1] of applying swap mutation to each child.
    animation_speed : int
        Delay in milliseconds between generations of a continuous run.
    """

    n: int = DEFAULT_N
    max_generations: int = DEFAULT_MAX_GENERATIONS
    population_size: int = DEFAULT_POPULATION_SIZE
    mutation_rate: float = DEFAULT_MUTATION_RATE
    animation_speed: int = DEFAULT_ANIMATION_SPEED

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def with_changes(self, **changes: Any) -> "SolverConfig":
        """Return a normalized copy with ``changes`` applied."""
        return normalize_config({**self.as_dict(), **changes})

    @property
    def pacing_seconds(self) -> float:
        return self.animation_speed / 1000.0


_ALIASES = {
    "n": ("n", "N", "board_size", "boardSize"),
    "max_generations": ("max_generations", "maxGenerations", "MAX_ITER", "max_gen"),
    "population_size": ("population_size", "populationSize", "pop_size"),
    "mutation_rate": ("mutation_rate", "mutationRate", "pm"),
    "animation_speed": ("animation_speed", "animationSpeed", "speed"),
}


def _lookup(raw: Mapping[str, Any], field: str) -> Any:
    for key in _ALIASES[field]:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _parse_int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def _parse_float(value: Any, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return default
    if parsed != parsed:  # NaN
        return default
    return parsed


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def normalize_config(raw: Optional[Mapping[str, Any]] = None, base: Optional[SolverConfig] = None) -> SolverConfig:
    """Build a valid ``SolverConfig`` from loosely typed input.

    Parameters
    ----------
    raw : Mapping[str, Any] | None
        User-provided values (CLI arguments, JSON sections, form fields).
        Missing keys fall back to ``base``.
    base : SolverConfig | None
        Values used for missing or unparseable entries (defaults when None).

    Returns
    -------
    SolverConfig
        ``n >= 1``, ``max_generations >= 0``, population clamped to
        ``[MIN_POPULATION, MAX_POPULATION]``, mutation rate clamped to
        ``[0, 1]`` and ``animation_speed >= 0``.
    """
    base = base or SolverConfig()
    raw = raw or {}

    n = max(1, _parse_int(_lookup(raw, "n"), base.n))
    max_generations = max(0, _parse_int(_lookup(raw, "max_generations"), base.max_generations))

    population_size = _parse_int(_lookup(raw, "population_size"), base.population_size)
    if population_size == 0:
        # Zero is treated like an unparseable field; negatives are clamped
        population_size = DEFAULT_POPULATION_SIZE
    population_size = int(clamp(population_size, MIN_POPULATION, MAX_POPULATION))

    mutation_rate = clamp(_parse_float(_lookup(raw, "mutation_rate"), base.mutation_rate), 0.0, 1.0)
    animation_speed = max(0, _parse_int(_lookup(raw, "animation_speed"), base.animation_speed))

    return SolverConfig(
        n=n,
        max_generations=max_generations,
        population_size=population_size,
        mutation_rate=mutation_rate,
        animation_speed=animation_speed,
    )
