"""
Self-play harness primitives.

- run_case:  play one game (one hidden secret) with a given solver.
- run_batch: play many games in sequence (optionally a sample prefix).

The solver only ever sees the history and its candidate mask; the harness
owns the secret and scores every guess. There is no turn limit by default:
the minimax solver always finishes, since the guess it picks always leaves
fewer candidates than there were before it.

These functions are UI-agnostic so they can be reused by the CLI, a notebook
or the tests without changes.
"""

from __future__ import annotations
import time
from typing import Dict, Iterable, List, Optional

from codebreaker.engine import (
    Code,
    CodeSpace,
    History,
    Turn,
    count_candidates,
    feedback,
    is_win,
    refine_mask,
)
from codebreaker.engine.constraints import full_mask


def run_case(
        solver,
        secret: Code,
        *,
        space: CodeSpace,
        max_turns: Optional[int] = None,
        seed: int | None = None,
) -> Dict:
    """
    Execute one game until the solver wins or the turn budget is exhausted.

    Args:
        solver:     an object implementing BaseSolver with next_guess(state)
        secret:     the hidden code for this case
        space:      code space the game is played in
        max_turns:  optional turn budget (None = play until solved)
        seed:       RNG seed to make solver choices reproducible

    Returns:
        dict with keys:
            success (bool), guesses (int), time_ms (float),
            history (list[(guess, feedback)]), secret (Code)
    """
    if max_turns is not None and max_turns < 1:
        raise ValueError(f"max_turns must be >= 1; got {max_turns}")

    solver.reset(space=space, seed=seed)

    # Recorded turns exclude the final winning guess; `played` has them all
    history = History()
    played = []
    mask = full_mask(space)

    t0 = time.perf_counter()
    turn = 0
    while max_turns is None or turn < max_turns:
        turn += 1
        state = {
            "turn": turn,
            "history": history,
            "mask": mask,
            "candidates": count_candidates(mask),
        }
        guess = tuple(solver.next_guess(state))

        fb = feedback(guess, secret)
        played.append((guess, fb))

        if is_win(fb, space.code_length):
            dt = (time.perf_counter() - t0) * 1000.0
            return {
                "success": True, "guesses": turn, "time_ms": dt,
                "history": played, "secret": secret,
            }

        # Narrow the candidate set with the new feedback before the next turn
        t = Turn(guess, fb)
        history.push(t)
        mask = refine_mask(space, mask, t)

    dt = (time.perf_counter() - t0) * 1000.0
    return {
        "success": False, "guesses": turn, "time_ms": dt,
        "history": played, "secret": secret,
    }


def run_batch(
        solver,
        secrets: Iterable[Code],
        *,
        space: CodeSpace,
        max_turns: Optional[int] = None,
        seed: int | None = None,
        sample: int | None = None,
) -> List[Dict]:
    """
    Run many cases back-to-back. If `sample` is provided, only the first K
    secrets are played.

    Each case's seed is derived from the base seed (seed + index) so runs are
    reproducible but not identical across cases.
    """
    pool = list(secrets)
    if sample is not None:
        pool = pool[:sample]

    out: List[Dict] = []
    for idx, secret in enumerate(pool, start=1):
        case_seed = None if seed is None else (seed + idx)
        out.append(run_case(solver, secret, space=space, max_turns=max_turns, seed=case_seed))
    return out
