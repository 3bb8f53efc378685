"""
Candidate filtering given the game history.

Given:
  - the full code space
  - a history of (guess, feedback) turns

Return:
  - which codes are consistent with ALL feedback seen so far.

The dense form is the candidate mask: one bool per code, indexed by ordinal.
It is a pure function of the history and is rebuilt from scratch by
compute_mask; refine_mask applies one extra turn to an existing mask and
gives the same bits a full recomputation would.

Cost of compute_mask is O(population * len(history) * L). With the default
8^4 = 4096 codes this is negligible; it grows with A ** L, which is why the
code space refuses populations above MAX_POPULATION.
"""

from __future__ import annotations

from typing import Iterator

import numpy as np

from .codes import Code, CodeSpace
from .errors import CandidateMaskAllocationError
from .history import History, Turn
from .scoring import feedback_arrays


def full_mask(space: CodeSpace) -> np.ndarray:
    """Mask with every code marked as a candidate (the empty-history mask)."""
    try:
        return np.ones(space.population, dtype=bool)
    except MemoryError as e:
        raise CandidateMaskAllocationError(
            f"cannot allocate candidate mask of {space.population} entries") from e


def turn_mask(space: CodeSpace, turn: Turn) -> np.ndarray:
    """Bools over the full space: which codes reproduce `turn.feedback`."""
    guess_row = np.asarray(turn.guess, dtype=space.matrix.dtype)[None, :]
    fit, misplaced = feedback_arrays(guess_row, space.tally(turn.guess)[None, :],
                                     space.matrix, space.counts)
    return (fit[0] == turn.feedback.fit) & (misplaced[0] == turn.feedback.misplaced)


def compute_mask(space: CodeSpace, history: History) -> np.ndarray:
    """
    Candidate mask for `history`, recomputed from scratch.

    Returns:
      bool array of length space.population; True exactly for the codes
      consistent with every turn.
    """
    mask = full_mask(space)
    for turn in history:
        mask &= turn_mask(space, turn)
    return mask


def refine_mask(space: CodeSpace, mask: np.ndarray, turn: Turn) -> np.ndarray:
    """
    Incremental update: `mask` restricted by one more turn.

    Returns a new array; `mask` itself is not modified, so a caller can keep
    the previous mask around to undo the turn.
    """
    return mask & turn_mask(space, turn)


def count_candidates(mask: np.ndarray) -> int:
    return int(np.count_nonzero(mask))


def filter_candidates(space: CodeSpace, history: History) -> Iterator[Code]:
    """
    Lazily yield the codes consistent with `history`, in enumeration order.

    A fresh generator starts from the zero code each time, so the sequence
    can be restarted by calling again.
    """
    for code in space:
        if history.is_consistent(code):
            yield code
