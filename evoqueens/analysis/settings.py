"""Global settings for batch experiments and the command-line front-end.

This module centralizes tunable constants used across the orchestration code.
Values can be overridden at runtime via the configuration loader in
`evoqueens.analysis.cli.apply_configuration`.
"""
from __future__ import annotations

import multiprocessing
from typing import List, Optional
from datetime import datetime

# Board sizes to evaluate (in ascending order) for scalability analysis
N_VALUES: List[int] = [8, 12, 16, 20]

# Number of independent runs per N in batch experiments
RUNS_GA_FINAL: int = 20

# GA parameters used when a board size has no explicit entry
DEFAULT_POP_SIZE: int = 100
DEFAULT_MAX_GEN: int = 1000
DEFAULT_PM: float = 0.1

# GA time limit in seconds per run (None = no limit)
GA_TIME_LIMIT: Optional[float] = 60.0

# Output directory for CSV and charts
OUT_DIR: str = "results_evoqueens"

# Number of worker processes to use (leave one core for the OS)
NUM_PROCESSES: int = max(1, multiprocessing.cpu_count() - 1)

# Maximum number of log lines kept by the console presenter
LOG_HISTORY: int = 100

# Output naming policy --------------------------------------------------------

# When True, results and plots will include a datestamp suffix (e.g., _20251113-142530)
# applied consistently across all artifacts produced within the same run.
DATE_IN_FILENAMES: bool = True

# Unique run identifier used for filename stamping; set once at import time.
RUN_ID: str = datetime.now().strftime("%Y%m%d-%H%M%S")

# Optional run labeling to avoid overwriting outputs
RUN_TAG: Optional[str] = None


def set_timeouts(ga_timeout: Optional[float] = 60.0) -> None:
    """Configure the per-run GA time limit (None disables the limit).

    Side effects
    - Updates the module-level global and prints the active limit.
    """
    global GA_TIME_LIMIT
    GA_TIME_LIMIT = ga_timeout

    print("Timeout settings configured:")
    print(f"   - GA: {GA_TIME_LIMIT}s" if GA_TIME_LIMIT else "   - GA: unlimited")


def date_suffix() -> str:
    """Return a ``_<tag>_<run id>`` filename suffix according to settings (or empty)."""
    parts: List[str] = []
    if RUN_TAG:
        parts.append(str(RUN_TAG))
    if DATE_IN_FILENAMES and RUN_ID:
        parts.append(str(RUN_ID))
    return ("_" + "_".join(parts)) if parts else ""
