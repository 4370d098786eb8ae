"""Evolutionary N-Queens solver engine.

``NQueensSolver`` owns the population, its fitness evaluation, the genetic
operators and the run/step/stop state machine. It knows nothing about how it
is displayed: presenters subscribe to its event stream (see
``evoqueens.events``) and drive it through a handful of commands.

State machine
-------------
::

    initialize(config)  any state        -> IDLE  (fresh population, generation 0)
    solve()             IDLE             -> RUNNING_CONTINUOUS -> IDLE
    step()              IDLE / STEPPED   -> RUNNING_STEPPED    -> IDLE
    stop()              running          -> IDLE  (no completion event)
    reset()             any state        -> stop() + initialize(last config)

Commands that do not apply to the current state are silent no-ops.

Concurrency
-----------
The generation loop runs on a single asyncio task. Its only suspension point
is the optional pacing hook awaited between generations of a continuous run
(``animation_speed`` milliseconds, skipped when 0 and in step mode). ``stop``
is cooperative: it takes effect at the top of the next loop iteration and
never interrupts a generation in flight.
"""

from __future__ import annotations

import asyncio
import random
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, TypedDict, Union

from .config import SolverConfig, normalize_config
from .events import CompleteEvent, Listener, LogEvent, SolverEvent, UpdateEvent, callback_listener
from .fitness import NO_SOLUTION, FitnessRecord, PopulationEvaluation, evaluate_population
from .genetic import (
    TOURNAMENT_SIZE,
    generate_population,
    order_crossover,
    swap_mutation,
    tournament_select,
)
from .utils import max_fitness

Pacer = Callable[[float], Awaitable[Any]]

LOG_EVERY = 10


class RunMode(Enum):
    IDLE = "idle"
    RUNNING_CONTINUOUS = "running-continuous"
    RUNNING_STEPPED = "running-stepped"


class PerformanceStats(TypedDict):
    conflicts: Union[int, float]
    generations: int
    iterations: int
    best_fitness: int
    avg_fitness: float
    mutation_rate: float
    efficiency: str
    solution_found: bool
    board: List[int]


class NQueensSolver:
    """Generational, elitist genetic search over permutation boards.

    Parameters
    ----------
    config : SolverConfig | None
        Initial configuration (defaults when None). No population exists until
        ``initialize`` is called.
    rng : random.Random | None
        Source of randomness for every stochastic choice.
    seed : int | None
        Seed for a private ``random.Random`` when ``rng`` is not given.
    pacer : Callable[[float], Awaitable] | None
        Coroutine function awaited with the inter-generation delay in seconds.
        Defaults to ``asyncio.sleep``.
    """

    def __init__(
        self,
        config: Optional[SolverConfig] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        pacer: Optional[Pacer] = None,
    ) -> None:
        self._config = config or SolverConfig()
        self._rng = rng if rng is not None else random.Random(seed)
        self._pacer: Pacer = pacer or asyncio.sleep

        self._population: List[List[int]] = []
        self._evaluation: PopulationEvaluation = NO_SOLUTION
        self._generation = 0
        self._max_fitness = max_fitness(self._config.n)
        self._mode = RunMode.IDLE
        self._run_id = 0
        self.evaluations = 0

        self._listeners: List[Listener] = []
        self._callbacks: Dict[str, Optional[Callable[..., None]]] = {
            "on_update": None,
            "on_complete": None,
            "on_log": None,
        }
        self._callback_listener: Optional[Listener] = None

    # ------------------------------------------------------------------ events

    def subscribe(self, listener: Listener) -> Listener:
        """Register ``listener`` for every future event and return it."""
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def set_callbacks(
        self,
        on_update: Optional[Callable[[UpdateEvent], None]] = None,
        on_complete: Optional[Callable[[bool, int], None]] = None,
        on_log: Optional[Callable[[str], None]] = None,
    ) -> None:
        """Install per-type callbacks; arguments left as None keep the previous ones."""
        for name, callback in (("on_update", on_update), ("on_complete", on_complete), ("on_log", on_log)):
            if callback is not None:
                self._callbacks[name] = callback
        self._callback_listener = callback_listener(**self._callbacks)

    def _emit(self, event: SolverEvent) -> None:
        for listener in list(self._listeners):
            listener(event)
        if self._callback_listener is not None:
            self._callback_listener(event)

    def _log(self, message: str) -> None:
        self._emit(LogEvent(message))

    def _dispatch_update(self) -> None:
        evaluation = self._evaluation
        self._emit(
            UpdateEvent(
                board=tuple(evaluation.best_board),
                conflicts=evaluation.best_conflicts,
                generation=self._generation,
                fitness=evaluation.best_fitness,
                avg_fitness=evaluation.avg_fitness,
                mutation_rate=self._config.mutation_rate,
            )
        )

    # ---------------------------------------------------------- population model

    def initialize(self, config: Union[SolverConfig, Mapping[str, Any], None] = None) -> None:
        """Reconfigure and start over with a fresh random population.

        ``config`` may be a ``SolverConfig``, a loose mapping (normalized on
        top of the current configuration) or None to reuse the last one.
        """
        if isinstance(config, SolverConfig):
            self._config = config
        elif config is not None:
            self._config = normalize_config(config, base=self._config)

        cfg = self._config
        self._max_fitness = max_fitness(cfg.n)
        self._generation = 0
        self._mode = RunMode.IDLE
        # Any suspended continuous loop belongs to an older run from now on
        self._run_id += 1
        self.evaluations = 0

        self._population = generate_population(cfg.population_size, cfg.n, self._rng)
        self.evaluate_population()
        self._dispatch_update()

        self._log(
            f"Initialization complete -> N={cfg.n}, population={cfg.population_size}, "
            f"mutation={cfg.mutation_rate * 100:.1f}%"
        )
        self._log(f"Maximum possible fitness: {self._max_fitness}")
        self._log(
            f"Initial best individual: [{', '.join(str(r) for r in self._evaluation.best_board)}] "
            f"(conflicts: {self._evaluation.best_conflicts})"
        )

    def evaluate_population(self) -> PopulationEvaluation:
        """Score the current population and cache its best individual."""
        self._evaluation = evaluate_population(self._population)
        self.evaluations += len(self._population)
        return self._evaluation

    def select_parent(self) -> List[int]:
        """Return a copy of a tournament winner from the current population."""
        return tournament_select(self._population, self._evaluation.records, self._rng, TOURNAMENT_SIZE)

    # ------------------------------------------------------------ generation loop

    async def run_generation(self) -> bool:
        """Breed one full generation and return True if it holds a solution.

        An empty population makes no progress: nothing is emitted and False
        is returned.
        """
        if not self._population:
            return False

        cfg = self._config
        # Elitism: the best individual so far survives unchanged
        new_population: List[List[int]] = [list(self._evaluation.best_board)]

        while len(new_population) < cfg.population_size:
            parent1 = self.select_parent()
            parent2 = self.select_parent()
            child = order_crossover(parent1, parent2, self._rng)
            if self._rng.random() < cfg.mutation_rate:
                swap_mutation(child, self._rng)
            new_population.append(child)

        self._population = new_population
        self._generation += 1
        self.evaluate_population()

        solved = self._evaluation.best_conflicts == 0
        self._dispatch_update()

        if self._generation % LOG_EVERY == 0 or solved:
            self._log(
                f"Generation {self._generation}: fitness={self._evaluation.best_fitness:.2f} "
                f"(avg={self._evaluation.avg_fitness:.2f}), conflicts={self._evaluation.best_conflicts}"
            )

        if cfg.animation_speed > 0 and self._mode is not RunMode.RUNNING_STEPPED:
            await self._pacer(cfg.pacing_seconds)

        return solved

    def _is_current_run(self, run_id: int) -> bool:
        return self._mode is RunMode.RUNNING_CONTINUOUS and self._run_id == run_id

    async def solve(self) -> None:
        """Evolve continuously until solved, out of generations, or stopped."""
        if self._mode is not RunMode.IDLE:
            return
        if not self._population:
            self._log("Population is empty; initialize the solver before running")
            return

        cfg = self._config
        self._mode = RunMode.RUNNING_CONTINUOUS
        self._run_id += 1
        run_id = self._run_id
        self._generation = 0

        self.evaluate_population()
        self._dispatch_update()
        self._log("Evolutionary run started")
        self._log(f"Population: {cfg.population_size}, mutation: {cfg.mutation_rate * 100:.1f}%")

        # Only a bred generation can report success; a solved initial
        # population completes after generation 1
        while self._is_current_run(run_id) and self._generation < cfg.max_generations:
            solved = await self.run_generation()
            if solved:
                if self._is_current_run(run_id):
                    self._finish(True)
                return

        if not self._is_current_run(run_id):
            return

        self._log(f"Maximum generations reached ({cfg.max_generations}).")
        self._finish(False)

    async def step(self) -> bool:
        """Run exactly one generation unless a continuous run owns the loop."""
        if self._mode is RunMode.RUNNING_CONTINUOUS:
            return False

        self._mode = RunMode.RUNNING_STEPPED
        solved = await self.run_generation()
        if self._mode is not RunMode.RUNNING_STEPPED:
            # Stopped or reset by a listener while the generation ran
            return solved
        self._mode = RunMode.IDLE

        if solved:
            self._finish(True)
        return solved

    def stop(self) -> None:
        """Cancel the current run without emitting a completion event."""
        if self._mode is RunMode.IDLE:
            return
        self._mode = RunMode.IDLE
        self._log("Execution stopped by user")

    def reset(self) -> None:
        """Stop and reinitialize with the last configuration."""
        self.stop()
        self.initialize(self._config)
        self._log("Population reset")

    def _finish(self, success: bool) -> None:
        self._mode = RunMode.IDLE
        self._emit(CompleteEvent(success, self._generation))

    def solve_blocking(self) -> None:
        """Run ``solve`` to completion on a private event loop."""
        asyncio.run(self.solve())

    def step_blocking(self) -> bool:
        """Run ``step`` on a private event loop and return whether it solved."""
        return asyncio.run(self.step())

    # ----------------------------------------------------------------- accessors

    @property
    def config(self) -> SolverConfig:
        return self._config

    @property
    def mode(self) -> RunMode:
        return self._mode

    @property
    def max_fitness(self) -> int:
        return self._max_fitness

    @property
    def population(self) -> List[List[int]]:
        return [list(individual) for individual in self._population]

    @property
    def fitness_records(self) -> List[FitnessRecord]:
        return list(self._evaluation.records)

    @property
    def avg_fitness(self) -> float:
        return self._evaluation.avg_fitness

    def get_board(self) -> List[int]:
        return list(self._evaluation.best_board)

    def get_conflicts(self) -> Union[int, float]:
        return self._evaluation.best_conflicts

    def get_current_fitness(self) -> int:
        return self._evaluation.best_fitness

    def get_iterations(self) -> int:
        return self._generation

    def is_executing(self) -> bool:
        return self._mode is not RunMode.IDLE

    def get_efficiency(self) -> str:
        """Share of the generation budget left, e.g. ``"87.5%"``; ``"-"`` without a budget."""
        max_generations = self._config.max_generations
        if not max_generations:
            return "-"
        remaining = max(0, max_generations - self._generation)
        return f"{remaining / max_generations * 100:.1f}%"

    def get_performance_stats(self) -> PerformanceStats:
        return {
            "conflicts": self._evaluation.best_conflicts,
            "generations": self._generation,
            "iterations": self._generation,
            "best_fitness": self._evaluation.best_fitness,
            "avg_fitness": self._evaluation.avg_fitness,
            "mutation_rate": self._config.mutation_rate,
            "efficiency": self.get_efficiency(),
            "solution_found": self._evaluation.best_conflicts == 0,
            "board": list(self._evaluation.best_board),
        }
