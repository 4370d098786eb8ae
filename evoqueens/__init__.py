"""Evolutionary (genetic) N-Queens solver."""

from .config import SolverConfig, normalize_config
from .events import CompleteEvent, EventRecorder, LogEvent, UpdateEvent, callback_listener
from .fitness import NO_SOLUTION, FitnessRecord, PopulationEvaluation, evaluate_population
from .genetic import ga_nqueens, order_crossover, swap_mutation, tournament_select
from .solver import NQueensSolver, RunMode
from .utils import conflicts, fitness, is_permutation, is_valid_solution, max_fitness

__all__ = [
    "NQueensSolver",
    "RunMode",
    "SolverConfig",
    "normalize_config",
    "UpdateEvent",
    "CompleteEvent",
    "LogEvent",
    "EventRecorder",
    "callback_listener",
    "FitnessRecord",
    "PopulationEvaluation",
    "NO_SOLUTION",
    "evaluate_population",
    "ga_nqueens",
    "order_crossover",
    "swap_mutation",
    "tournament_select",
    "conflicts",
    "fitness",
    "max_fitness",
    "is_permutation",
    "is_valid_solution",
]
