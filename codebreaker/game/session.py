"""
One solving session: a secret, its code space and the turns played so far.

This is the call surface the interactive CLI drives:

    s = new_session(alphabet_size=8, code_length=4, seed=7)
    fb = s.submit_guess(parse_code("abcd", s.space))
    s.best_guess()
    s.undo_last_turn()

The session keeps the candidate mask of its history cached. Pushing a turn
refines the top mask with that turn only; undo drops the top mask, so the
mask seen after push + undo is exactly the one seen before.
"""

from __future__ import annotations

import logging
import random
from typing import Iterator, List, Optional

import numpy as np

from codebreaker.engine import (
    Code,
    CodeSpace,
    Feedback,
    History,
    Turn,
    feedback,
    filter_candidates,
    is_win,
    refine_mask,
)
from codebreaker.engine.codes import DEFAULT_ALPHABET_SIZE, DEFAULT_CODE_LENGTH
from codebreaker.engine.constraints import full_mask
from codebreaker.solvers.minimax import GuessChoice, ProgressFn, choose_guess

logger = logging.getLogger(__name__)


class Session:
    def __init__(self, space: CodeSpace, secret: Code, *, rng: Optional[random.Random] = None):
        if not space.contains(secret):
            raise ValueError(f"secret {secret!r} is not a code of {space!r}")
        self.space = space
        self.rng = rng or random.Random()
        self._secret: Code = tuple(secret)
        self._history = History()
        # masks[i] is the candidate mask after the first i turns; built lazily
        self._masks: List[np.ndarray] = []

    def __repr__(self) -> str:
        return f"Session({self.space!r}, turns={len(self._history)})"

    # ---- secret ----

    def random_code(self) -> Code:
        return self.space.from_ordinal(self.rng.randrange(self.space.population))

    def new_secret(self, secret: Optional[Code] = None) -> None:
        """Pick a fresh secret (random unless given) and forget every turn."""
        if secret is not None and not self.space.contains(secret):
            raise ValueError(f"secret {secret!r} is not a code of {self.space!r}")
        self._secret = tuple(secret) if secret is not None else self.random_code()
        self._history.clear()
        self._masks = []
        logger.debug("new secret chosen; history cleared")

    def reveal_secret(self) -> Code:
        return self._secret

    @property
    def history(self) -> History:
        """Snapshot of the recorded turns; pushing onto it leaves the session untouched."""
        return History(self._history.turns())

    # ---- turns ----

    def submit_guess(self, guess: Code) -> Feedback:
        """
        Score `guess` against the secret.

        Non-winning guesses are recorded as a Turn; a win (fit == code_length)
        is not.
        """
        if not self.space.contains(guess):
            raise ValueError(f"guess {guess!r} is not a code of {self.space!r}")
        guess = tuple(int(s) for s in guess)
        fb = feedback(guess, self._secret)
        if is_win(fb, self.space.code_length):
            logger.debug(f"winning guess {guess} after {len(self._history)} turn(s)")
            return fb

        turn = Turn(guess, fb)
        self._history.push(turn)
        if self._masks:
            self._masks.append(refine_mask(self.space, self._masks[-1], turn))
        return fb

    def undo_last_turn(self) -> Turn:
        """Pop the most recent turn; raises EmptyHistoryError when there is none."""
        turn = self._history.pop()
        if self._masks:
            self._masks.pop()
        return turn

    # ---- candidates ----

    @property
    def candidate_mask(self) -> np.ndarray:
        """Candidate mask of the current history (read-only view)."""
        # One mask per turn plus the empty-history mask
        if len(self._masks) != len(self._history) + 1:
            mask = full_mask(self.space)
            masks = [mask]
            for turn in self._history.turns():
                mask = refine_mask(self.space, mask, turn)
                masks.append(mask)
            self._masks = masks
        view = self._masks[-1].view()
        view.flags.writeable = False
        return view

    def candidate_count(self) -> int:
        return int(np.count_nonzero(self.candidate_mask))

    def consistent_codes(self) -> Iterator[Code]:
        """Lazy, restartable sequence of the codes consistent with the history."""
        return filter_candidates(self.space, self._history)

    # ---- search ----

    def choose_guess(self, *, progress: Optional[ProgressFn] = None,
                     workers: int = 1) -> GuessChoice:
        return choose_guess(self.space, self._history, mask=self.candidate_mask,
                            progress=progress, workers=workers)

    def best_guess(self, *, progress: Optional[ProgressFn] = None, workers: int = 1) -> Code:
        return self.choose_guess(progress=progress, workers=workers).code


def new_session(alphabet_size: int = DEFAULT_ALPHABET_SIZE,
                code_length: int = DEFAULT_CODE_LENGTH,
                seed: Optional[int] = None) -> Session:
    """Session with a random secret (seeded when `seed` is given) and an empty history."""
    space = CodeSpace(alphabet_size, code_length)
    rng = random.Random(seed)
    secret = space.from_ordinal(rng.randrange(space.population))
    return Session(space, secret, rng=rng)
