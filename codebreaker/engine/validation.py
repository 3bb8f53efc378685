"""
Text form of a code at the CLI boundary.

A code of length L is written as exactly L lowercase letters, symbol s being
chr(ord('a') + s). With alphabet size A only 'a' .. chr(ord('a') + A - 1) are
accepted, and alphabets beyond 26 symbols have no text form at all.

This module answers two questions:
  - parse_code:          "what code is this text?"  (raises on bad input)
  - is_valid_code_text:  "is this text a code?"     (plain bool)

No case folding or trimming happens here; the CLI strips the line ending
before calling in.
"""

from __future__ import annotations

from .codes import Code, CodeSpace
from .errors import InvalidFormatError

LETTERS = 26
_BASE = ord("a")


def _check_alphabet(space: CodeSpace) -> None:
    if space.alphabet_size > LETTERS:
        raise InvalidFormatError(
            f"alphabet of {space.alphabet_size} symbols cannot be written with "
            f"{LETTERS} letters")


def parse_code(text: str, space: CodeSpace) -> Code:
    """
    Decode `text` into a code of `space`.

    Raises:
      InvalidFormatError if the length differs from space.code_length, a
      character falls outside ['a', 'a' + alphabet_size), or the alphabet is
      too large to encode as letters.
    """
    _check_alphabet(space)
    if not isinstance(text, str) or len(text) != space.code_length:
        raise InvalidFormatError(
            f"expected {space.code_length} letters, got {text!r}")

    last = chr(_BASE + space.alphabet_size - 1)
    out = []
    for ch in text:
        symbol = ord(ch) - _BASE
        if not 0 <= symbol < space.alphabet_size:
            raise InvalidFormatError(
                f"invalid symbol {ch!r} in {text!r}; use 'a'..'{last}'")
        out.append(symbol)
    return tuple(out)


def format_code(code: Code, space: CodeSpace | None = None) -> str:
    """Encode a code as letters. Passing `space` also checks the alphabet fits."""
    if space is not None:
        _check_alphabet(space)
    if any(not 0 <= s < LETTERS for s in code):
        raise InvalidFormatError(f"{code!r} has symbols beyond 'z'")
    return "".join(chr(_BASE + s) for s in code)


def is_valid_code_text(text: str, space: CodeSpace) -> bool:
    """Return True if `text` parses as a code of `space`."""
    try:
        parse_code(text, space)
    except InvalidFormatError:
        return False
    return True
