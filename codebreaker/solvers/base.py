from __future__ import annotations
import random
from typing import Dict, Type

from codebreaker.engine import Code, CodeSpace

# ---- Global solver registry ----
REGISTRY: Dict[str, Type["BaseSolver"]] = {}


def register(cls: Type["BaseSolver"]) -> Type["BaseSolver"]:
    """
    Decorator: @register on a solver class adds it to REGISTRY by its `id`.
    """
    sid = getattr(cls, "id", None)
    if not sid:
        raise ValueError(f"{cls.__name__} must define a non-empty `id`")
    if sid in REGISTRY:
        raise ValueError(f"Duplicate solver id: {sid}")
    REGISTRY[sid] = cls
    return cls


# ---- Base class that solvers inherit ----
class BaseSolver:
    id = "base"
    name = "Base"
    version = "0.0.0"

    def __init__(self):
        self.space: CodeSpace = CodeSpace()
        self.rng = random.Random()

    def reset(self, *, space: CodeSpace, seed: int | None = None) -> None:
        self.space = space
        if seed is not None:
            self.rng.seed(seed)

    def next_guess(self, state: dict) -> Code:
        """
        Args:
            state: dict with keys:
                - "turn":       1-based turn number
                - "history":    History of the turns so far
                - "mask":       candidate mask for that history (np.ndarray[bool])
                - "candidates": number of True entries in "mask"
        """
        raise NotImplementedError("Override in subclass")
