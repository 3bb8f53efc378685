from .codes import Code, CodeSpace
from .scoring import Feedback, feedback, is_win
from .history import History, Turn
from .constraints import compute_mask, refine_mask, count_candidates, filter_candidates
from .validation import parse_code, format_code, is_valid_code_text
from .errors import (
    CodebreakerError,
    InvalidFormatError,
    EmptyHistoryError,
    UnsupportedConfigurationError,
    NoConsistentCandidatesError,
    CandidateMaskAllocationError,
)

__all__ = [
    "Code", "CodeSpace", "Feedback", "feedback", "is_win", "History", "Turn",
    "compute_mask", "refine_mask", "count_candidates", "filter_candidates",
    "parse_code", "format_code", "is_valid_code_text",
    "CodebreakerError", "InvalidFormatError", "EmptyHistoryError",
    "UnsupportedConfigurationError", "NoConsistentCandidatesError",
    "CandidateMaskAllocationError",
]
