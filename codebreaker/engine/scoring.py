"""
Feedback for a single (guess, hidden) pair, and its vectorized form.

Conventions:
  - fit       : positions where guess and hidden hold the same symbol
  - misplaced : further symbol matches when position is ignored, not
                counting the ones already in `fit`

Repeated symbols make a per-position colour lookup over- or under-count, so
the computation goes through multisets instead:

  fit + misplaced == |guess ∩ hidden|   (multiset intersection)

  1) fit is the plain position-match count.
  2) the intersection cardinality is sum over symbols of
     min(count_guess[s], count_hidden[s]).
  3) misplaced = intersection - fit.

Both terms are symmetric in (guess, hidden), so feedback(a, b) == feedback(b, a).
"""

from __future__ import annotations

from collections import Counter
from typing import NamedTuple, Tuple

import numpy as np

from .codes import Code


class Feedback(NamedTuple):
    fit: int
    misplaced: int

    def __str__(self) -> str:
        return f"{self.fit}, {self.misplaced}"


def feedback(guess: Code, hidden: Code) -> Feedback:
    """
    Compute the (fit, misplaced) feedback for `guess` against `hidden`.

    Preconditions:
      - len(guess) == len(hidden)

    Examples (letters stand for symbols 0, 1, 2, ...):
      feedback("dcba", "abcd") -> (0, 4)
      feedback("aabb", "abab") -> (2, 2)
    """
    assert len(guess) == len(hidden), "guess and hidden must be the same length"

    fit = sum(1 for g, h in zip(guess, hidden) if g == h)

    # Counter & Counter keeps min(count) per symbol: the multiset intersection
    common = sum((Counter(guess) & Counter(hidden)).values())

    return Feedback(fit, common - fit)


def is_win(fb: Feedback, code_length: int) -> bool:
    return fb.fit == code_length


def feedback_arrays(
        guess_matrix: np.ndarray,
        guess_counts: np.ndarray,
        code_matrix: np.ndarray,
        code_counts: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Broadcast `feedback` over tables of codes.

    Args:
      guess_matrix : (G, L) symbols of the guesses
      guess_counts : (G, A) per-symbol tallies of the guesses
      code_matrix  : (C, L) symbols of the codes to score against
      code_counts  : (C, A) per-symbol tallies of those codes

    Returns:
      (fit, misplaced), each an int32 array of shape (G, C).

    Memory is O(G * C * max(L, A)); callers block G accordingly.
    """
    fit = (guess_matrix[:, None, :] == code_matrix[None, :, :]).sum(axis=2, dtype=np.int32)
    common = np.minimum(guess_counts[:, None, :], code_counts[None, :, :]).sum(
        axis=2, dtype=np.int32)
    return fit, common - fit


def response_ids(fit: np.ndarray, misplaced: np.ndarray, code_length: int) -> np.ndarray:
    """
    Pack feedback into one dense int per entry: fit * (L + 1) + misplaced.

    Distinct feedbacks get distinct ids in [0, (L + 1) ** 2), which lets
    callers bucket candidates with np.bincount.
    """
    return fit * (code_length + 1) + misplaced
