"""
Constraint history: the turns played so far in one session.

A Turn pairs a submitted guess with the feedback it received against the
true secret. The history is a stack: turns are pushed after every non-winning
guess and the most recent one can be popped (undo). Iteration runs
most-recent-first; consistency is a conjunction over every turn, so the
order never changes which codes are consistent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional

from .codes import Code
from .errors import EmptyHistoryError
from .scoring import Feedback, feedback


@dataclass(frozen=True)
class Turn:
    guess: Code
    feedback: Feedback

    def admits(self, code: Code) -> bool:
        """True if `code`, as the secret, would have produced this turn's feedback."""
        return feedback(code, self.guess) == self.feedback


class History:
    """Ordered stack of Turns, owned by a single session."""

    def __init__(self, turns: Optional[Iterable[Turn]] = None):
        self._turns: List[Turn] = list(turns) if turns is not None else []

    def __repr__(self) -> str:
        return f"History({self._turns!r})"

    def __len__(self) -> int:
        return len(self._turns)

    def __bool__(self) -> bool:
        return bool(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        """Most recent turn first."""
        return reversed(self._turns)

    def __eq__(self, other) -> bool:
        if not isinstance(other, History):
            return NotImplemented
        return self._turns == other._turns

    def turns(self) -> List[Turn]:
        """Copy of the turns in push order (oldest first)."""
        return list(self._turns)

    def latest(self) -> Turn:
        if not self._turns:
            raise EmptyHistoryError("no turns recorded")
        return self._turns[-1]

    def push(self, turn: Turn) -> None:
        self._turns.append(turn)

    def pop(self) -> Turn:
        if not self._turns:
            raise EmptyHistoryError("nothing to undo")
        return self._turns.pop()

    def clear(self) -> None:
        self._turns.clear()

    def extended(self, turn: Turn) -> "History":
        """A new history with `turn` pushed on top; self is left untouched."""
        return History(self._turns + [turn])

    def is_consistent(self, code: Code) -> bool:
        """True if `code` reproduces the recorded feedback for every turn."""
        for turn in self:
            if not turn.admits(code):
                return False
        return True
