"""Genetic operators and a headless GA runner for the N-Queens problem.

Individuals are permutations ``board[col] = row``, so every operator here is
permutation preserving:

- tournament selection (fittest of ``min(3, pop_size)`` random draws),
- Order Crossover (OX) with a cyclic fill aligned after the copied segment,
- swap mutation of two distinct columns.

Contract (public API)
---------------------
``ga_nqueens`` runs the full solver headlessly and returns a 6-tuple
``GAResult`` summarizing the run:
    (success, generations, elapsed_seconds, best_conflicts, evaluations, timeout)

Determinism
-----------
Every operator takes an ``rng`` exposing ``random()`` and ``randrange()``
(the ``random`` module by default). Pass a seeded ``random.Random`` for
reproducible runs.
"""

from __future__ import annotations

import math
import random
from time import perf_counter
from typing import List, Optional, Sequence, Tuple

from .fitness import FitnessRecord
from .utils import random_permutation

GAResult = Tuple[bool, int, float, int, int, bool]

TOURNAMENT_SIZE = 3


def generate_population(population_size: int, n: int, rng=random) -> List[List[int]]:
    """Return ``population_size`` independent random permutations of ``0..n-1``."""
    return [random_permutation(n, rng) for _ in range(population_size)]


def tournament_select(
    population: Sequence[Sequence[int]],
    records: Sequence[FitnessRecord],
    rng=random,
    tournament_size: int = TOURNAMENT_SIZE,
) -> List[int]:
    """Return a copy of the winner of a tournament selection.

    ``min(tournament_size, len(population))`` candidates are drawn uniformly
    with replacement; the first candidate with the highest fitness wins.
    """
    size = len(population)
    rounds = min(tournament_size, size)
    winner = rng.randrange(size)
    for _ in range(1, rounds):
        challenger = rng.randrange(size)
        if records[challenger].fitness > records[winner].fitness:
            winner = challenger
    return list(population[winner])


def order_crossover(parent1: Sequence[int], parent2: Sequence[int], rng=random) -> List[int]:
    """Recombine two permutations with Order Crossover (OX).

    The segment ``parent1[start..end]`` (inclusive) is copied verbatim. The
    remaining positions are filled cyclically from ``end + 1`` with the values
    of ``parent2``, also read cyclically from ``end + 1``, skipping values
    already placed. The child is a permutation of the parents' value set.
    """
    length = len(parent1)
    if length == 0:
        return []
    if length == 1:
        return list(parent1)

    start = rng.randrange(length)
    end = rng.randrange(length)
    if start == end:
        end = (start + 1) % length
    if start > end:
        start, end = end, start

    child: List[Optional[int]] = [None] * length
    placed = set()
    for i in range(start, end + 1):
        child[i] = parent1[i]
        placed.add(parent1[i])

    child_index = (end + 1) % length
    for i in range(length):
        candidate = parent2[(end + 1 + i) % length]
        if candidate not in placed:
            child[child_index] = candidate
            placed.add(candidate)
            child_index = (child_index + 1) % length

    return [value for value in child if value is not None]


def swap_mutation(individual: List[int], rng=random) -> None:
    """Swap the rows of two distinct random columns in place (no-op below 2)."""
    length = len(individual)
    if length < 2:
        return
    first = rng.randrange(length)
    second = rng.randrange(length)
    while second == first:
        second = rng.randrange(length)
    individual[first], individual[second] = individual[second], individual[first]


def ga_nqueens(
    size: int,
    pop_size: int = 100,
    max_gen: int = 1000,
    pm: float = 0.1,
    seed: Optional[int] = None,
    time_limit: Optional[float] = None,
) -> GAResult:
    """Run the evolutionary solver to completion without pacing.

    Parameters
    ----------
    size : int
        Board dimension N.
    pop_size : int, default 100
        Number of individuals in the population (used as given, not clamped).
    max_gen : int, default 1000
        Maximum number of generations.
    pm : float, default 0.1
        Probability of swap mutation per child.
    seed : int | None
        Seed for a private ``random.Random``; None draws from system entropy.
    time_limit : float | None
        Optional wall-clock limit in seconds, enforced through a cooperative
        stop between generations.

    Returns
    -------
    GAResult
        Tuple (success, generations, elapsed, best_conflicts, evaluations, timeout).

    Notes
    -----
    - Evaluations count every individual scored since initialization,
      including the re-scoring of the population when the run starts.
    - ``best_conflicts`` is the conflict count of the final best individual;
      elitism makes it the best ever observed.
    """
    from .config import SolverConfig
    from .events import UpdateEvent
    from .solver import NQueensSolver

    solver = NQueensSolver(seed=seed)
    start = perf_counter()
    timed_out = False

    def watchdog(event) -> None:
        nonlocal timed_out
        if not isinstance(event, UpdateEvent) or time_limit is None:
            return
        if (perf_counter() - start) > time_limit and solver.is_executing():
            timed_out = True
            solver.stop()

    solver.initialize(
        SolverConfig(
            n=size,
            max_generations=max_gen,
            population_size=pop_size,
            mutation_rate=pm,
            animation_speed=0,
        )
    )
    solver.subscribe(watchdog)
    solver.solve_blocking()

    generations = solver.get_iterations()
    best_conflicts = solver.get_conflicts()
    success = best_conflicts == 0
    return (
        success,
        generations,
        perf_counter() - start,
        best_conflicts if math.isinf(best_conflicts) else int(best_conflicts),
        solver.evaluations,
        timed_out and not success,
    )
