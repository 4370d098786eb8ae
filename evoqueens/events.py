"""Events emitted by the solver to its presenters.

The solver publishes a single stream of tagged values instead of three
separate callbacks:

- ``UpdateEvent`` once per generation (and once at initialization),
- ``CompleteEvent`` when a run or step ends by solving or by exhausting the
  generation budget (never on an explicit stop),
- ``LogEvent`` for human-readable progress narration.

Listeners are plain callables taking one event. ``callback_listener`` adapts
the classic ``on_update``/``on_complete``/``on_log`` trio, and
``EventRecorder`` captures events for tests and batch analysis.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple, Union


@dataclass(frozen=True)
class UpdateEvent:
    """Snapshot of the best individual after a generation."""

    board: Tuple[int, ...]
    conflicts: Union[int, float]
    generation: int
    fitness: int
    avg_fitness: float
    mutation_rate: float

    @property
    def best_fitness(self) -> int:
        return self.fitness

    @property
    def solved(self) -> bool:
        return self.conflicts == 0


@dataclass(frozen=True)
class CompleteEvent:
    success: bool
    generations: int


@dataclass(frozen=True)
class LogEvent:
    message: str


SolverEvent = Union[UpdateEvent, CompleteEvent, LogEvent]
Listener = Callable[[SolverEvent], None]


def callback_listener(
    on_update: Optional[Callable[[UpdateEvent], None]] = None,
    on_complete: Optional[Callable[[bool, int], None]] = None,
    on_log: Optional[Callable[[str], None]] = None,
) -> Listener:
    """Return a listener dispatching each event type to its own callback.

    Missing callbacks simply ignore the corresponding events.
    """

    def listener(event: SolverEvent) -> None:
        if isinstance(event, UpdateEvent):
            if on_update is not None:
                on_update(event)
        elif isinstance(event, CompleteEvent):
            if on_complete is not None:
                on_complete(event.success, event.generations)
        elif isinstance(event, LogEvent):
            if on_log is not None:
                on_log(event.message)

    return listener


@dataclass
class EventRecorder:
    """Listener that keeps every received event in arrival order."""

    events: List[SolverEvent] = field(default_factory=list)

    def __call__(self, event: SolverEvent) -> None:
        self.events.append(event)

    @property
    def updates(self) -> List[UpdateEvent]:
        return [e for e in self.events if isinstance(e, UpdateEvent)]

    @property
    def completions(self) -> List[CompleteEvent]:
        return [e for e in self.events if isinstance(e, CompleteEvent)]

    @property
    def messages(self) -> List[str]:
        return [e.message for e in self.events if isinstance(e, LogEvent)]

    def clear(self) -> None:
        self.events.clear()
