"""
Random Consistent solver.

Strategy:
  - Choose uniformly at random among the CURRENT candidates (codes still
    consistent with all feedback so far).

Notes:
  - Deterministic across runs with the same seed (via BaseSolver.rng).
  - This is a baseline for the self-play harness; it does not look at how a
    guess would split the candidates.
"""

from __future__ import annotations

import numpy as np

from codebreaker.engine import Code, NoConsistentCandidatesError, compute_mask
from .base import BaseSolver, register


@register
class RandomConsistentSolver(BaseSolver):
    id = "random_consistent"
    name = "Random Consistent"
    version = "1.0.0"

    def next_guess(self, state: dict) -> Code:
        mask = state.get("mask")
        if mask is None:
            mask = compute_mask(self.space, state["history"])
        pool = np.flatnonzero(mask)
        if len(pool) == 0:
            raise NoConsistentCandidatesError("no code is consistent with the history")
        i = self.rng.randrange(len(pool))
        return self.space.from_ordinal(int(pool[i]))
