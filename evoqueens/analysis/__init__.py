"""
Analysis and presentation package for the evolutionary N-Queens solver.

This package contains:
- settings: global knobs, time limits and output naming
- stats: typed summaries, generation history and aggregation helpers
- experiments: batch runners (sequential and parallel) with result shaping
- reporting: CSV exports for aggregates, raw runs and histories
- plots: chart generation
- console: text presenter subscribed to the solver event stream
- cli: argument parser and entry point
"""

from . import settings as settings  # re-export for convenience
from .stats import (
    StatsSummary,
    GARecord,
    GAResultEntry,
    ExperimentResults,
    GenerationHistory,
    compute_detailed_statistics,
    compute_grouped_statistics,
    ProgressPrinter,
)

__all__ = [
    # types
    "StatsSummary",
    "GARecord",
    "GAResultEntry",
    "ExperimentResults",
    # utils
    "GenerationHistory",
    "compute_detailed_statistics",
    "compute_grouped_statistics",
    "ProgressPrinter",
    # settings module
    "settings",
]
