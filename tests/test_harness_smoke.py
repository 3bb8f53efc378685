import csv
import json
from pathlib import Path

from codebreaker.engine import CodeSpace
from codebreaker.harness import run_batch, run_case, write_csv, write_manifest
from codebreaker.solvers import create_solver


def test_run_case_minimax_solves_every_secret():
    space = CodeSpace(3, 3)
    solver = create_solver("minimax")
    results = run_batch(solver, list(space), space=space, seed=1)
    assert len(results) == space.population
    assert all(r["success"] for r in results)
    # The winning guess is the last entry of the played history
    assert all(r["history"][-1][0] == r["secret"] for r in results)


def test_run_case_random_consistent_smoke():
    space = CodeSpace(4, 3)
    solver = create_solver("random_consistent")
    r = run_case(solver, (3, 0, 2), space=space, seed=42)
    assert r["success"] is True
    again = run_case(solver, (3, 0, 2), space=space, seed=42)
    assert again["history"] == r["history"]


def test_run_case_turn_budget():
    space = CodeSpace(4, 3)
    solver = create_solver("minimax")
    r = run_case(solver, (3, 3, 3), space=space, max_turns=1)
    assert r["success"] is False and r["guesses"] == 1


def test_write_outputs(tmp_path: Path):
    space = CodeSpace(3, 2)
    solver = create_solver("minimax")
    results = run_batch(solver, list(space), space=space, sample=3)
    for r in results:
        r["solver_id"] = solver.id
    longest = max(len(r["history"]) for r in results)

    csv_path = write_csv(results, str(tmp_path / "out" / "run.csv"), max_turns=longest,
                         code_length=2)
    with open(csv_path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [row["secret"] for row in rows] == ["aa", "ba", "ca"]
    assert rows[0]["solver"] == "minimax"
    assert "misplaced_1" in rows[0]

    manifest_path = write_manifest({"num_cases": 3}, str(tmp_path / "m.json"))
    assert json.loads(Path(manifest_path).read_text(encoding="utf-8")) == {"num_cases": 3}
