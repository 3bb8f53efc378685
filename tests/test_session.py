import numpy as np
import pytest
from codebreaker.engine import (
    CodeSpace,
    EmptyHistoryError,
    Feedback,
    Turn,
    compute_mask,
    parse_code,
)
from codebreaker.game import Session, new_session
from codebreaker.solvers import choose_guess


def _session(secret_text="abcd", alphabet=8, length=4):
    space = CodeSpace(alphabet, length)
    return Session(space, parse_code(secret_text, space))


def test_new_session_is_seeded():
    a = new_session(8, 4, seed=11)
    b = new_session(8, 4, seed=11)
    assert a.reveal_secret() == b.reveal_secret()
    assert a.space.contains(a.reveal_secret())
    assert len(a.history) == 0


def test_submit_guess_records_only_non_wins():
    s = _session("abcd")
    sp = s.space
    assert s.submit_guess(parse_code("dcba", sp)) == Feedback(0, 4)
    assert len(s.history) == 1
    assert s.submit_guess(parse_code("abcd", sp)) == Feedback(4, 0)
    assert len(s.history) == 1


def test_repeated_symbols_feedback():
    s = _session("abab")
    assert s.submit_guess(parse_code("aabb", s.space)) == Feedback(2, 2)


def test_submit_rejects_foreign_code():
    s = _session("abcd")
    with pytest.raises(ValueError):
        s.submit_guess((0, 1, 2))


def test_undo_restores_mask_exactly():
    s = _session("cafe")
    sp = s.space
    before = s.candidate_mask.copy()
    s.submit_guess(parse_code("abcd", sp))
    assert s.candidate_count() < sp.population
    s.undo_last_turn()
    assert np.array_equal(s.candidate_mask, before)
    with pytest.raises(EmptyHistoryError):
        s.undo_last_turn()


def test_incremental_mask_matches_recompute():
    s = _session("hbgb")
    sp = s.space
    for g in ["aabb", "ccdd", "bhgh", "ebfb"]:
        s.submit_guess(parse_code(g, sp))
        assert np.array_equal(s.candidate_mask, compute_mask(sp, s.history))
    s.undo_last_turn()
    assert np.array_equal(s.candidate_mask, compute_mask(sp, s.history))


def test_mask_built_lazily_after_turns():
    s = _session("hbgb")
    for g in ["aabb", "ccdd"]:
        s.submit_guess(parse_code(g, s.space))
    assert np.array_equal(s.candidate_mask, compute_mask(s.space, s.history))


def test_candidate_mask_is_read_only():
    s = _session()
    with pytest.raises(ValueError):
        s.candidate_mask[0] = False


def test_consistent_codes():
    s = _session("bca", alphabet=3, length=3)
    s.submit_guess(parse_code("abc", s.space))
    codes = list(s.consistent_codes())
    assert codes == list(s.consistent_codes())
    assert s.reveal_secret() in codes
    assert len(codes) == s.candidate_count()


def test_new_secret_clears_history():
    s = _session("abcd")
    s.submit_guess(parse_code("efgh", s.space))
    s.new_secret(parse_code("hhhh", s.space))
    assert len(s.history) == 0
    assert s.reveal_secret() == (7, 7, 7, 7)
    assert s.candidate_count() == s.space.population
    s.new_secret()
    assert s.space.contains(s.reveal_secret())


def test_best_guess_solves_the_game():
    s = _session("dbca", alphabet=4, length=4)
    for _ in range(10):
        g = s.best_guess()
        if s.submit_guess(g).fit == 4:
            break
    else:
        pytest.fail("minimax search did not find the secret")
    assert s.best_guess() == s.best_guess()


def test_history_snapshot_cannot_desync_the_mask():
    space = CodeSpace(3, 3)
    s = Session(space, (0, 1, 2))
    assert s.candidate_count() == 27
    s.history.push(Turn((0, 0, 0), Feedback(1, 0)))
    assert len(s.history) == 0
    assert s.candidate_count() == 27

    s.submit_guess((0, 0, 0))
    assert s.candidate_count() == int(np.count_nonzero(compute_mask(space, s.history)))
    assert s.choose_guess() == choose_guess(space, s.history)
