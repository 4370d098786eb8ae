"""Console presenter for the evolutionary solver.

``ConsoleAdapter`` subscribes to a solver's event stream and prints the board
with attacked queens marked, a statistics panel and a timestamped activity
log (bounded to the most recent entries).
It only ever reads snapshots; all control goes through the solver commands.
"""
from __future__ import annotations

import sys
from collections import deque
from datetime import datetime
from time import perf_counter
from typing import Deque, Optional, TextIO

from . import settings
from evoqueens.events import CompleteEvent, LogEvent, SolverEvent, UpdateEvent
from evoqueens.solver import NQueensSolver
from evoqueens.utils import render_board


def format_rate(rate: float) -> str:
    """Format a probability as a percentage, dropping a trailing ``.0``."""
    text = f"{rate * 100:.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return f"{text}%"


class ConsoleAdapter:
    """Render solver events to a text stream.

    Parameters
    ----------
    solver : NQueensSolver
        Solver to observe; the adapter subscribes itself on construction.
    show_board : bool, default True
        Print the board on updates.
    board_every : int, default 1
        Print the board every ``board_every`` generations (and always when
        solved or at generation 0).
    max_log : int
        Number of log entries kept in ``log_entries``.
    stream : TextIO | None
        Destination of the output (``sys.stdout`` when None).
    """

    def __init__(
        self,
        solver: NQueensSolver,
        show_board: bool = True,
        board_every: int = 1,
        max_log: int = settings.LOG_HISTORY,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.solver = solver
        self.show_board = show_board
        self.board_every = max(1, board_every)
        self.stream = stream
        self.log_entries: Deque[str] = deque(maxlen=max_log)
        self.start_time = 0.0
        self.last_update: Optional[UpdateEvent] = None
        self.last_completion: Optional[CompleteEvent] = None
        solver.subscribe(self)

    def _print(self, text: str = "") -> None:
        print(text, file=self.stream or sys.stdout)

    def __call__(self, event: SolverEvent) -> None:
        if isinstance(event, UpdateEvent):
            self.on_update(event)
        elif isinstance(event, CompleteEvent):
            self.on_complete(event.success, event.generations)
        elif isinstance(event, LogEvent):
            self.add_log_entry(event.message)

    def detach(self) -> None:
        self.solver.unsubscribe(self)

    def start_timer(self) -> None:
        self.start_time = perf_counter()

    def elapsed_ms(self) -> float:
        return (perf_counter() - self.start_time) * 1000 if self.start_time > 0 else 0.0

    def status(self) -> str:
        if self.solver.get_conflicts() == 0:
            return "Solution found"
        if self.solver.is_executing():
            return "Evolving population..."
        return "Ready"

    def on_update(self, event: UpdateEvent) -> None:
        self.last_update = event
        if not self.show_board:
            return
        if event.generation % self.board_every and not event.solved and event.generation != 0:
            return
        self._print(render_board(event.board))
        self._print(
            f"Generation {event.generation} | conflicts={event.conflicts} | "
            f"fitness={event.fitness:.2f} | avg={event.avg_fitness:.2f} | "
            f"mutation={format_rate(event.mutation_rate)} | {self.status()}"
        )
        self._print()

    def on_complete(self, success: bool, generations: int) -> None:
        self.last_completion = CompleteEvent(success, generations)
        if success:
            self.add_log_entry(f"Solution found in {generations} generations")
            self.add_log_entry(f"Total time: {self.elapsed_ms():.2f}ms")
        else:
            self.add_log_entry(f"No solution found in {generations} generations")
        self._print(self.stats_panel())

    def add_log_entry(self, message: str) -> None:
        timestamp = datetime.now().strftime("%H:%M:%S")
        entry = f"[{timestamp}] {message}"
        self.log_entries.append(entry)
        self._print(entry)

    def clear_log(self) -> None:
        self.log_entries.clear()

    def stats_panel(self) -> str:
        """Return the statistics panel as a multi-line string."""
        stats = self.solver.get_performance_stats()
        generations = stats["generations"]
        total_ms = self.elapsed_ms()
        per_generation = f"{total_ms / generations:.1f}ms" if generations > 0 else "0ms"
        lines = [
            "---------------- statistics ----------------",
            f"Status:              {self.status()}",
            f"Conflicts:           {stats['conflicts']}",
            f"Generations:         {generations}",
            f"Best fitness:        {stats['best_fitness']:.2f} / {self.solver.max_fitness}",
            f"Mean fitness:        {stats['avg_fitness']:.2f}",
            f"Mutation rate:       {format_rate(stats['mutation_rate'])}",
            f"Budget left:         {stats['efficiency']}",
            f"Solution found:      {'Yes' if stats['solution_found'] else 'No'}",
            f"Total time:          {total_ms:.0f}ms",
            f"Time per generation: {per_generation}",
            "--------------------------------------------",
        ]
        return "\n".join(lines)
