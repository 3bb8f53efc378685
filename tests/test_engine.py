import itertools

import numpy as np
import pytest
from codebreaker.engine import (
    CodeSpace,
    EmptyHistoryError,
    Feedback,
    History,
    InvalidFormatError,
    Turn,
    UnsupportedConfigurationError,
    compute_mask,
    count_candidates,
    feedback,
    filter_candidates,
    format_code,
    is_valid_code_text,
    parse_code,
    refine_mask,
)
from codebreaker.engine.scoring import feedback_arrays

SPACE = CodeSpace(8, 4)


def code(text, space=SPACE):
    return parse_code(text, space)


# --- feedback golden tests (duplicates + placements) ---
@pytest.mark.parametrize("guess,hidden,expected", [
    ("abcd", "abcd", (4, 0)),
    ("dcba", "abcd", (0, 4)),
    ("aabb", "abab", (2, 2)),
    ("abcd", "efgh", (0, 0)),
    ("aabc", "abbb", (2, 0)),
    ("abcc", "ccab", (0, 4)),
    ("aabc", "aadb", (2, 1)),
    ("aaaa", "abcd", (1, 0)),
    ("hhhh", "hhha", (3, 0)),
    ("abca", "aabc", (1, 3)),
])
def test_feedback_golden(guess, hidden, expected):
    assert feedback(code(guess), code(hidden)) == expected
    assert feedback(code(hidden), code(guess)) == expected


def test_feedback_properties_small_space():
    space = CodeSpace(3, 3)
    for a, b in itertools.product(space, repeat=2):
        fb = feedback(a, b)
        assert 0 <= fb.fit <= 3 and 0 <= fb.misplaced <= 3
        assert fb.fit + fb.misplaced <= 3
        assert fb == feedback(b, a)
    for a in space:
        assert feedback(a, a) == Feedback(3, 0)


def test_feedback_arrays_match_scalar():
    space = CodeSpace(3, 3)
    fit, misplaced = feedback_arrays(space.matrix, space.counts, space.matrix, space.counts)
    for i, a in enumerate(space):
        for j, b in enumerate(space):
            assert (fit[i, j], misplaced[i, j]) == feedback(a, b)


# --- code space ---
def test_enumeration_visits_every_code_once():
    space = CodeSpace(3, 2)
    codes = list(space)
    assert len(codes) == space.population == 9
    assert len(set(codes)) == 9
    assert codes[0] == space.zero() == (0, 0)
    assert codes[1] == (1, 0)  # position 0 changes fastest
    assert codes[-1] == (2, 2)
    assert space.next_code((2, 2)) == ((0, 0), False)
    assert space.next_code((2, 1)) == ((0, 2), True)


def test_enumeration_default_space_is_complete():
    codes = list(SPACE)
    assert len(codes) == 8 ** 4
    assert len(set(codes)) == 8 ** 4


def test_ordinal_bijection():
    space = CodeSpace(3, 3)
    for i, c in enumerate(space):
        assert space.ordinal(c) == i
        assert space.from_ordinal(i) == c
    assert SPACE.ordinal(code("baaa")) == 1
    assert SPACE.ordinal(code("abaa")) == 8
    assert SPACE.from_ordinal(8 ** 4 - 1) == code("hhhh")
    with pytest.raises(IndexError):
        SPACE.from_ordinal(8 ** 4)
    with pytest.raises(ValueError):
        SPACE.ordinal((0, 0, 0, 8))


def test_tables_match_enumeration():
    space = CodeSpace(4, 3)
    for i, c in enumerate(space):
        assert tuple(space.matrix[i]) == c
        assert list(space.counts[i]) == [c.count(s) for s in range(4)]
        assert np.array_equal(space.tally(c), space.counts[i])


@pytest.mark.parametrize("alphabet,length", [
    (0, 4), (8, 0), (2, 21), (1024, 2), (2, 33),
])
def test_unsupported_configuration(alphabet, length):
    with pytest.raises(UnsupportedConfigurationError):
        CodeSpace(alphabet, length)


def test_single_symbol_space():
    space = CodeSpace(1, 3)
    assert list(space) == [(0, 0, 0)]


# --- text codec ---
@pytest.mark.parametrize("text", ["abcd", "hhhh", "aaaa", "hgfe", "abab"])
def test_text_round_trip(text):
    assert format_code(parse_code(text, SPACE), SPACE) == text


@pytest.mark.parametrize("text", ["abc", "abcde", "abci", "ABCD", "ab d", ""])
def test_parse_rejects_malformed(text):
    with pytest.raises(InvalidFormatError):
        parse_code(text, SPACE)
    assert is_valid_code_text(text, SPACE) is False


def test_parse_rejects_alphabet_beyond_letters():
    space = CodeSpace(27, 2)
    with pytest.raises(InvalidFormatError):
        parse_code("ab", space)
    with pytest.raises(InvalidFormatError):
        format_code((0, 1), space)


def test_is_valid_code_text():
    assert is_valid_code_text("abcd", SPACE) is True
    assert is_valid_code_text("abcd", CodeSpace(3, 4)) is False


# --- history ---
def test_history_stack():
    h = History()
    t1 = Turn(code("abcd"), Feedback(1, 0))
    t2 = Turn(code("efgh"), Feedback(0, 2))
    h.push(t1)
    h.push(t2)
    assert len(h) == 2 and h
    assert list(h) == [t2, t1]          # most recent first
    assert h.turns() == [t1, t2]        # push order
    assert h.latest() == t2

    longer = h.extended(Turn(code("aaaa"), Feedback(0, 0)))
    assert len(longer) == 3 and len(h) == 2

    assert h.pop() == t2
    h.clear()
    assert not h
    with pytest.raises(EmptyHistoryError):
        h.pop()


def test_history_consistency():
    secret = code("abcd")
    h = History()
    for g in ["aabb", "efgh", "dcba"]:
        h.push(Turn(code(g), feedback(code(g), secret)))
    assert h.is_consistent(secret)
    assert not h.is_consistent(code("hhhh"))


# --- candidate filter ---
def _history_for(secret, guesses, space):
    h = History()
    for g in guesses:
        g = parse_code(g, space)
        h.push(Turn(g, feedback(g, secret)))
    return h


def test_compute_mask_matches_naive_scan():
    space = CodeSpace(4, 3)
    secret = parse_code("bdc", space)
    h = _history_for(secret, ["aab", "cdd", "bca"], space)
    mask = compute_mask(space, h)
    naive = np.array([h.is_consistent(c) for c in space])
    assert np.array_equal(mask, naive)
    assert mask[space.ordinal(secret)]
    assert list(filter_candidates(space, h)) == [c for c in space if h.is_consistent(c)]


def test_mask_only_shrinks_and_refine_is_identical():
    space = CodeSpace(4, 3)
    secret = parse_code("dab", space)
    h = History()
    mask = compute_mask(space, h)
    assert count_candidates(mask) == space.population
    for g in ["abc", "bbd", "dca", "dbb"]:
        g = parse_code(g, space)
        turn = Turn(g, feedback(g, secret))
        refined = refine_mask(space, mask, turn)
        h.push(turn)
        assert np.array_equal(refined, compute_mask(space, h))
        assert count_candidates(refined) <= count_candidates(mask)
        mask = refined


def test_filter_candidates_is_restartable():
    space = CodeSpace(3, 3)
    h = _history_for((0, 1, 2), ["aab"], space)
    first = list(filter_candidates(space, h))
    second = list(filter_candidates(space, h))
    assert first == second and (0, 1, 2) in first


def _out_of_memory(*args, **kwargs):
    raise MemoryError


def test_mask_allocation_failure_is_reported(monkeypatch):
    from codebreaker.engine import CandidateMaskAllocationError, constraints

    space = CodeSpace(3, 2)
    monkeypatch.setattr(constraints.np, "ones", _out_of_memory)
    with pytest.raises(CandidateMaskAllocationError):
        compute_mask(space, History())


def test_table_allocation_failure_is_reported(monkeypatch):
    from codebreaker.engine import CandidateMaskAllocationError, codes

    space = CodeSpace(3, 2)
    space.matrix  # built before allocation starts failing
    monkeypatch.setattr(codes.np, "zeros", _out_of_memory)
    with pytest.raises(CandidateMaskAllocationError):
        space.counts
