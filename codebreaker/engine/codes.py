"""
Code space: the alphabet, the code length and the enumerable population.

A code is a tuple of `code_length` symbols, each an int in [0, alphabet_size).
The whole space has alphabet_size ** code_length members and is enumerated
like a little-endian counter: position 0 changes fastest, so

    ordinal(code) = sum(code[i] * alphabet_size ** i)

"aaaa" is ordinal 0, "baaa" is ordinal 1, "abaa" is ordinal alphabet_size.
This order matters beyond bookkeeping: the best-guess search breaks exact
ties by the lowest ordinal.

The space also owns two dense numpy tables indexed by ordinal, built lazily
and shared by every hot loop:
  - matrix: (population, code_length) symbols
  - counts: (population, alphabet_size) per-symbol tallies
"""

from __future__ import annotations

from functools import cached_property
from typing import Iterator, Tuple

import numpy as np

from .errors import CandidateMaskAllocationError, UnsupportedConfigurationError

# A code is a plain tuple of symbol indices; equality is element-wise.
Code = Tuple[int, ...]

DEFAULT_ALPHABET_SIZE = 8
DEFAULT_CODE_LENGTH = 4

# Practical enumeration limits. The best-guess search is O(population ** 2),
# so anything near these bounds is already far too slow to search.
MAX_POPULATION = 1 << 20
MAX_CODE_LENGTH = 32
MAX_TABLE_CELLS = 1 << 26  # population * alphabet_size for the tally table


class CodeSpace:
    """All codes of a given alphabet size and length, in enumeration order."""

    def __init__(self, alphabet_size: int = DEFAULT_ALPHABET_SIZE,
                 code_length: int = DEFAULT_CODE_LENGTH):
        alphabet_size = int(alphabet_size)
        code_length = int(code_length)
        if alphabet_size < 1:
            raise UnsupportedConfigurationError(
                f"alphabet_size must be >= 1; got {alphabet_size}")
        if not 1 <= code_length <= MAX_CODE_LENGTH:
            raise UnsupportedConfigurationError(
                f"code_length must be in [1, {MAX_CODE_LENGTH}]; got {code_length}")

        # Python ints do not overflow, so the check below is exact.
        population = alphabet_size ** code_length
        if population > MAX_POPULATION:
            raise UnsupportedConfigurationError(
                f"{alphabet_size}^{code_length} = {population} codes exceeds the "
                f"enumeration limit of {MAX_POPULATION}")
        if population * alphabet_size > MAX_TABLE_CELLS:
            raise UnsupportedConfigurationError(
                f"symbol tally table for {population} codes x {alphabet_size} symbols "
                f"exceeds {MAX_TABLE_CELLS} cells")

        self.alphabet_size = alphabet_size
        self.code_length = code_length
        self._population = population

    def __repr__(self) -> str:
        return f"CodeSpace(alphabet_size={self.alphabet_size}, code_length={self.code_length})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, CodeSpace):
            return NotImplemented
        return (self.alphabet_size, self.code_length) == (other.alphabet_size, other.code_length)

    def __hash__(self) -> int:
        return hash((self.alphabet_size, self.code_length))

    # ---- enumeration ----

    @property
    def population(self) -> int:
        return self._population

    def __len__(self) -> int:
        return self._population

    def zero(self) -> Code:
        return (0,) * self.code_length

    def next_code(self, code: Code) -> Tuple[Code, bool]:
        """
        Advance `code` by one step in enumeration order.

        Returns (next, advanced). `advanced` is False when every position
        rolled over, i.e. `code` was the last one; `next` is then the zero
        code again.
        """
        digits = list(code)
        top = self.alphabet_size - 1
        i = 0
        # Carry cascades up to the first position that can still be incremented
        while i < self.code_length and digits[i] >= top:
            digits[i] = 0
            i += 1
        if i >= self.code_length:
            return tuple(digits), False
        digits[i] += 1
        return tuple(digits), True

    def __iter__(self) -> Iterator[Code]:
        code = self.zero()
        advanced = True
        while advanced:
            yield code
            code, advanced = self.next_code(code)

    def contains(self, code) -> bool:
        """True if `code` has the right length and every symbol is in range."""
        if len(code) != self.code_length:
            return False
        return all(isinstance(s, (int, np.integer)) and 0 <= s < self.alphabet_size
                   for s in code)

    def ordinal(self, code: Code) -> int:
        if not self.contains(code):
            raise ValueError(f"{code!r} is not a code of {self!r}")
        index = 0
        for symbol in reversed(code):
            index = index * self.alphabet_size + int(symbol)
        return index

    def from_ordinal(self, index: int) -> Code:
        index = int(index)
        if not 0 <= index < self._population:
            raise IndexError(f"ordinal {index} out of range [0, {self._population})")
        out = []
        for _ in range(self.code_length):
            index, symbol = divmod(index, self.alphabet_size)
            out.append(symbol)
        return tuple(out)

    # ---- dense tables ----

    @cached_property
    def matrix(self) -> np.ndarray:
        """(population, code_length) array; row i is from_ordinal(i)."""
        dtype = np.uint8 if self.alphabet_size <= 256 else np.uint32
        try:
            idx = np.arange(self._population, dtype=np.int64)
            powers = np.int64(self.alphabet_size) ** np.arange(self.code_length, dtype=np.int64)
            table = ((idx[:, None] // powers[None, :]) % self.alphabet_size).astype(dtype)
        except MemoryError as e:
            raise CandidateMaskAllocationError(
                f"cannot allocate code table for {self!r}") from e
        table.flags.writeable = False
        return table

    @cached_property
    def counts(self) -> np.ndarray:
        """(population, alphabet_size) array of per-symbol occurrence counts."""
        matrix = self.matrix
        try:
            table = np.zeros((self._population, self.alphabet_size), dtype=np.uint8)
        except MemoryError as e:
            raise CandidateMaskAllocationError(
                f"cannot allocate symbol tally table for {self!r}") from e
        rows = np.arange(self._population)
        # Each assignment touches one cell per row, so fancy-index += is safe
        for pos in range(self.code_length):
            table[rows, matrix[:, pos]] += 1
        table.flags.writeable = False
        return table

    def tally(self, code: Code) -> np.ndarray:
        """Per-symbol counts for a single code, shaped like one row of `counts`."""
        out = np.zeros(self.alphabet_size, dtype=np.uint8)
        for symbol in code:
            out[symbol] += 1
        return out
