"""
Error kinds raised by the engine.

All of them are local, recoverable conditions reported to the caller (the CLI
prints the message and keeps going). Each one also derives from the closest
builtin exception so callers that only know the builtin still catch it.
"""

from __future__ import annotations


class CodebreakerError(Exception):
    """Base class for every error the engine raises on purpose."""


class InvalidFormatError(CodebreakerError, ValueError):
    """Malformed code text: wrong length, bad character, or alphabet too large for letters."""


class EmptyHistoryError(CodebreakerError, IndexError):
    """Undo requested with nothing to undo."""


class UnsupportedConfigurationError(CodebreakerError, ValueError):
    """Alphabet/length combination that cannot be enumerated in memory."""


class NoConsistentCandidatesError(CodebreakerError, RuntimeError):
    """No code matches the recorded feedback (some earlier feedback was contradictory)."""


class CandidateMaskAllocationError(CodebreakerError, MemoryError):
    """The dense code tables or the candidate mask could not be allocated."""
