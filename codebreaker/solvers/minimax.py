"""
Worst-case (minimax) guess evaluation and the brute-force best-guess search.

Evaluation:
  Treat every remaining candidate h as the hypothetical secret. Playing
  guess g against h yields resp = feedback(g, h); the candidates that would
  survive are those consistent with history + Turn(g, resp). Every masked
  code already satisfies `history`, so the survivors are exactly the
  candidates sharing resp with h, i.e. h's bucket when candidates are
  partitioned by feedback against g. The score of g is the largest bucket.

Search:
  Every code of the FULL space is a potential guess, not only the
  candidates. Each guess gets the key

      key = 2 * worst_case - (1 if the guess is itself a candidate else 0)

  i.e. half a point off for a guess that could win outright, kept on a
  doubled integer scale. The lowest key wins; among equal keys the lowest
  ordinal wins.

Cost:
  O(population * candidates) feedback computations, O(population ** 2) at the
  start of a game. This is the dominant cost of the whole system. Guesses are
  scored in vectorized blocks; blocks are independent, so they can also be
  spread over worker processes and merged with the same argmin.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from codebreaker.engine import (
    Code,
    CandidateMaskAllocationError,
    CodeSpace,
    History,
    NoConsistentCandidatesError,
    compute_mask,
    count_candidates,
)
from codebreaker.engine.scoring import feedback_arrays, response_ids
from .base import BaseSolver, register

logger = logging.getLogger(__name__)

# Upper bound on the broadcast temporaries of one block (guesses x candidates x width)
BLOCK_CELLS = 1 << 22

ProgressFn = Callable[[int, int], None]


@dataclass(frozen=True)
class GuessChoice:
    """Outcome of a best-guess search."""
    code: Code
    worst_case: int      # largest candidate set left after playing `code`
    is_candidate: bool   # `code` could still be the secret
    candidates: int      # candidate count before playing `code`
    key: int             # 2 * worst_case - is_candidate


def _worst_cases(guess_matrix: np.ndarray, guess_counts: np.ndarray,
                 cand_matrix: np.ndarray, cand_counts: np.ndarray,
                 code_length: int) -> np.ndarray:
    """Largest feedback bucket over the candidates, for each guess row."""
    rows = guess_matrix.shape[0]
    if cand_matrix.shape[0] == 0:
        return np.zeros(rows, dtype=np.int64)

    width = (code_length + 1) ** 2
    try:
        fit, misplaced = feedback_arrays(guess_matrix, guess_counts, cand_matrix, cand_counts)
        ids = response_ids(fit, misplaced, code_length)

        # One bincount for the whole block: shift each row into its own id range
        shifted = ids + (np.arange(rows, dtype=np.int64)[:, None] * width)
        buckets = np.bincount(shifted.ravel(), minlength=rows * width).reshape(rows, width)
    except MemoryError as e:
        raise CandidateMaskAllocationError(
            f"cannot allocate feedback table for {rows} guesses x {cand_matrix.shape[0]} "
            f"candidates") from e
    return buckets.max(axis=1)


def _score_range(start: int, guess_matrix: np.ndarray, guess_counts: np.ndarray,
                 bonus: np.ndarray, cand_matrix: np.ndarray, cand_counts: np.ndarray,
                 code_length: int) -> Tuple[int, np.ndarray]:
    # Module-level so worker processes can unpickle it
    worst = _worst_cases(guess_matrix, guess_counts, cand_matrix, cand_counts, code_length)
    return start, 2 * worst - bonus


def _block_size(space: CodeSpace, candidates: int, workers: int) -> int:
    width = max(space.code_length, space.alphabet_size)
    block = max(1, BLOCK_CELLS // (max(1, candidates) * width))
    if workers > 1:
        # Enough blocks to keep every worker busy
        block = min(block, max(1, -(-space.population // (workers * 4))))
    return min(block, space.population)


def evaluate_guess(space: CodeSpace, guess: Code, history: History,
                   mask: Optional[np.ndarray] = None) -> int:
    """
    Worst-case number of candidates left if `guess` is played next.

    Args:
      space   : the code space
      guess   : any code of `space` (candidate or not)
      history : turns so far; never modified
      mask    : candidate mask of `history`; computed when omitted

    Returns:
      max over candidate secrets h of |{c in mask : feedback(guess, c) == feedback(guess, h)}|,
      or 0 when no candidate is left.
    """
    if mask is None:
        mask = compute_mask(space, history)
    cand = np.flatnonzero(mask)
    row = np.asarray(guess, dtype=space.matrix.dtype)[None, :]
    worst = _worst_cases(row, space.tally(guess)[None, :],
                         space.matrix[cand], space.counts[cand], space.code_length)
    return int(worst[0])


def rank_guesses(space: CodeSpace, mask: np.ndarray, *,
                 progress: Optional[ProgressFn] = None, workers: int = 1) -> np.ndarray:
    """
    Tie-break key for every code of the space, indexed by ordinal.

    progress(done, total) is called after each finished block.
    """
    population = space.population
    try:
        cand = np.flatnonzero(mask)
        cand_matrix = space.matrix[cand]
        cand_counts = space.counts[cand]
        bonus = mask.astype(np.int64)
        keys = np.empty(population, dtype=np.int64)
    except MemoryError as e:
        raise CandidateMaskAllocationError(
            f"cannot allocate search tables for {population} guesses") from e

    block = _block_size(space, len(cand), workers)
    starts = list(range(0, population, block))
    done = 0

    def _args(start: int):
        stop = min(start + block, population)
        return (start, space.matrix[start:stop], space.counts[start:stop], bonus[start:stop],
                cand_matrix, cand_counts, space.code_length)

    if workers > 1 and len(starts) > 1:
        with ProcessPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(_score_range, *_args(s)) for s in starts]
            for fut in as_completed(futures):
                start, part = fut.result()
                keys[start:start + len(part)] = part
                done += len(part)
                if progress is not None:
                    progress(done, population)
    else:
        for s in starts:
            start, part = _score_range(*_args(s))
            keys[start:start + len(part)] = part
            done += len(part)
            if progress is not None:
                progress(done, population)

    return keys


def choose_guess(space: CodeSpace, history: History, *, mask: Optional[np.ndarray] = None,
                 progress: Optional[ProgressFn] = None, workers: int = 1) -> GuessChoice:
    """
    Brute-force the guess with the lowest tie-break key over the whole space.

    Raises:
      NoConsistentCandidatesError if no code fits the history.
    """
    t0 = time.perf_counter()
    if mask is None:
        mask = compute_mask(space, history)
    n = count_candidates(mask)
    if n == 0:
        raise NoConsistentCandidatesError(
            f"no code is consistent with the {len(history)} recorded turn(s)")

    keys = rank_guesses(space, mask, progress=progress, workers=workers)
    # argmin returns the first minimum: the lowest ordinal on exact ties
    best = int(np.argmin(keys))
    key = int(keys[best])
    is_candidate = bool(mask[best])
    choice = GuessChoice(
        code=space.from_ordinal(best),
        worst_case=(key + (1 if is_candidate else 0)) // 2,
        is_candidate=is_candidate,
        candidates=n,
        key=key,
    )
    logger.debug(f"best guess {choice.code} worst={choice.worst_case} "
                 f"candidates={n} in {(time.perf_counter() - t0) * 1000.0:.1f} ms")
    return choice


def best_guess(space: CodeSpace, history: History, **kwargs) -> Code:
    """The code chosen by choose_guess; same keyword arguments."""
    return choose_guess(space, history, **kwargs).code


@register
class MinimaxSolver(BaseSolver):
    id = "minimax"
    name = "Minimax (worst-case remaining)"
    version = "1.0.0"

    # Worker processes for the search; 1 keeps it in-process
    workers = 1

    def next_guess(self, state: dict) -> Code:
        return choose_guess(self.space, state["history"], mask=state.get("mask"),
                            workers=self.workers).code
