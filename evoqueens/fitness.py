"""Population-level fitness evaluation for the evolutionary solver.

Every individual is scored with the non-attacking-pairs fitness
``max_fitness(N) - conflicts(board)``. A whole population is reduced in a
single pass into a ``PopulationEvaluation`` carrying the per-individual
records together with the best individual (first one wins ties) and the mean
fitness.

Note: the evaluation is recomputed from scratch every generation; records are
never updated in place.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, NamedTuple, Sequence, Tuple, Union

from .utils import conflicts, max_fitness


class FitnessRecord(NamedTuple):
    fitness: int
    conflicts: int


@dataclass(frozen=True)
class PopulationEvaluation:
    """Result of scoring one population.

    Attributes
    ----------
    records : tuple of FitnessRecord
        One record per individual, in population order.
    best_index : int
        Index of the fittest individual, or ``-1`` for an empty population.
    best_board : tuple of int
        Copy of the fittest individual.
    best_fitness : int
        Fitness of the fittest individual.
    best_conflicts : int | float
        Conflicts of the fittest individual; ``math.inf`` when there is none.
    avg_fitness : float
        Mean fitness across the population (0 when empty).
    """

    records: Tuple[FitnessRecord, ...]
    best_index: int
    best_board: Tuple[int, ...]
    best_fitness: int
    best_conflicts: Union[int, float]
    avg_fitness: float


NO_SOLUTION = PopulationEvaluation(
    records=(),
    best_index=-1,
    best_board=(),
    best_fitness=0,
    best_conflicts=math.inf,
    avg_fitness=0.0,
)


def evaluate_individual(board: Sequence[int]) -> FitnessRecord:
    """Return the ``(fitness, conflicts)`` pair of a single board."""
    conflicts_count = conflicts(board)
    return FitnessRecord(max_fitness(len(board)) - conflicts_count, conflicts_count)


def evaluate_population(population: Sequence[Sequence[int]]) -> PopulationEvaluation:
    """Score every individual and reduce the population to its best member.

    Parameters
    ----------
    population : Sequence[Sequence[int]]
        Individuals encoded as ``board[col] = row`` permutations.

    Returns
    -------
    PopulationEvaluation
        Records plus best individual and mean fitness. An empty population
        yields ``NO_SOLUTION`` instead of raising.
    """
    if not population:
        return NO_SOLUTION

    records: List[FitnessRecord] = []
    best_index = 0
    best_fitness = -math.inf
    best_conflicts: Union[int, float] = math.inf
    total_fitness = 0

    for index, individual in enumerate(population):
        record = evaluate_individual(individual)
        records.append(record)
        total_fitness += record.fitness
        # Strictly greater keeps the first individual on ties
        if record.fitness > best_fitness:
            best_fitness = record.fitness
            best_conflicts = record.conflicts
            best_index = index

    return PopulationEvaluation(
        records=tuple(records),
        best_index=best_index,
        best_board=tuple(population[best_index]),
        best_fitness=int(best_fitness),
        best_conflicts=best_conflicts,
        avg_fitness=total_fitness / len(records),
    )
