"""Board primitives for the evolutionary N-Queens solver.

This module provides the low-level helpers the solver and its presenters
depend upon: conflict counting, fitness arithmetic, permutation checks and a
plain-text board renderer.

Representation
--------------
Boards are encoded as a 1D list where ``board[col] = row`` and every row in
``0..N-1`` appears exactly once (a permutation). Rows and columns therefore
never clash; only diagonal alignment produces conflicts.
"""

from __future__ import annotations

import random
from numbers import Integral
from typing import List, Sequence, Set


def conflicts(board: Sequence[int]) -> int:
    """Count the pairs of queens sharing a diagonal in O(N^2).

    Two columns ``i < j`` conflict when ``|board[i] - board[j]| == |i - j|``.
    Boards are small (tens of columns) so the pairwise scan is used as is.
    """
    n = len(board)
    conflicts_count = 0
    for i in range(n):
        for j in range(i + 1, n):
            if abs(board[i] - board[j]) == j - i:
                conflicts_count += 1
    return conflicts_count


def max_fitness(n: int) -> int:
    """Return ``N*(N-1)/2``, the number of queen pairs on an N board."""
    return n * (n - 1) // 2


def fitness(board: Sequence[int]) -> int:
    """Return the number of non-attacking pairs of queens.

    The maximum value is ``max_fitness(N)`` and is reached only when the board
    has zero conflicts.
    """
    return max_fitness(len(board)) - conflicts(board)


def is_permutation(board: Sequence[int]) -> bool:
    """Return True if ``board`` holds every value of ``0..N-1`` exactly once."""
    n = len(board)
    seen = set()
    for row in board:
        if not isinstance(row, Integral) or row < 0 or row >= n or row in seen:
            return False
        seen.add(row)
    return True


def is_valid_solution(board: Sequence[int]) -> bool:
    """Return True if the board represents a valid N-Queens solution.

    Contract
    - Input: sequence of length N where board[col] = row (0-based indices)
    - Valid if: non-empty permutation of ``0..N-1`` without diagonal attacks
    """
    if len(board) == 0:
        return False
    return is_permutation(board) and conflicts(board) == 0


def random_permutation(n: int, rng=random) -> List[int]:
    """Return a uniformly random permutation of ``0..n-1`` (Fisher-Yates)."""
    permutation = list(range(n))
    for i in range(n - 1, 0, -1):
        j = rng.randrange(i + 1)
        permutation[i], permutation[j] = permutation[j], permutation[i]
    return permutation


def conflicting_columns(board: Sequence[int]) -> Set[int]:
    """Return the columns whose queen is attacked by at least one other queen."""
    n = len(board)
    attacked: Set[int] = set()
    for i in range(n):
        for j in range(i + 1, n):
            if abs(board[i] - board[j]) == j - i:
                attacked.add(i)
                attacked.add(j)
    return attacked


def render_board(board: Sequence[int], highlight_conflicts: bool = True) -> str:
    """Render ``board`` as a text grid, one line per row.

    Queens are drawn as ``Q`` (``X`` when attacked and ``highlight_conflicts``
    is set) and empty squares as ``.``. An empty board renders as ``""``.
    """
    n = len(board)
    attacked = conflicting_columns(board) if highlight_conflicts else set()
    lines = []
    for row in range(n):
        cells = []
        for column in range(n):
            if board[column] == row:
                cells.append("X" if column in attacked else "Q")
            else:
                cells.append(".")
        lines.append(" ".join(cells))
    return "\n".join(lines)
