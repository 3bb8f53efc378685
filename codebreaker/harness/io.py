"""
I/O utilities for self-play runs.

Responsibilities:
- write_csv:      flatten per-game results into a tidy CSV (one row per game).
- write_manifest: dump a JSON manifest with config and metadata.
- timestamp_id:   stable UTC run ID string.
- git_commit_or_unknown: best-effort short commit hash for reproducibility.

Codes are written in their letter form ("abcd") and feedback as two integer
columns, so the CSV opens cleanly in spreadsheet apps.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List
import csv
import json
import subprocess
import datetime as dt

from codebreaker.engine import format_code


def write_csv(results: List[Dict], path: str, max_turns: int, code_length: int) -> str:
    """
    Serialize a batch of game results to CSV.

    Schema (columns):
      solver, L, secret, success, guesses, time_ms,
      guess_1, fit_1, misplaced_1, ..., guess_max_turns, fit_..., misplaced_...

    Args:
      results     : list of dicts returned by the harness per game.
      path        : output CSV path.
      max_turns   : number of turn column groups to emit.
      code_length : code length L of the games.

    Returns:
      The path written (string).
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    fields = ["solver", "L", "secret", "success", "guesses", "time_ms"]
    for i in range(1, max_turns + 1):
        fields += [f"guess_{i}", f"fit_{i}", f"misplaced_{i}"]

    with p.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()

        for r in results:
            row = {
                "solver": r.get("solver_id", "?"),
                "L": code_length,
                "secret": format_code(r["secret"]),
                "success": r["success"],
                "guesses": r["guesses"],
                "time_ms": round(float(r["time_ms"]), 3),
            }

            # Expand history into fixed columns
            hist = r.get("history", [])
            for i in range(1, max_turns + 1):
                if i <= len(hist):
                    g, fb = hist[i - 1]
                    row[f"guess_{i}"] = format_code(g)
                    row[f"fit_{i}"] = fb.fit
                    row[f"misplaced_{i}"] = fb.misplaced
                else:
                    row[f"guess_{i}"] = ""
                    row[f"fit_{i}"] = ""
                    row[f"misplaced_{i}"] = ""

            w.writerow(row)

    return str(p)


def write_manifest(manifest: Dict, path: str) -> str:
    """
    Write a self-play run manifest as JSON.

    Keys written by apps/cli/run.py:
      - run_id, git_commit
      - config: CLI args (solver, alphabet, length, sample, max_turns, seed,
        outdir, progress, verbose)
      - population: size of the code space
      - num_cases, solver_id
      - summary: games, wins, mean_guesses, max_guesses, total_ms
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2)
    return str(p)


def timestamp_id() -> str:
    """
    Return a compact UTC timestamp suitable for filenames, e.g. 20250820T024121Z.
    """
    return dt.datetime.now(dt.timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def git_commit_or_unknown() -> str:
    """
    Best-effort short git hash of the current repo state.
    Returns 'unknown' if git is not available or the call fails.
    """
    try:
        return (
            subprocess.check_output(
                ["git", "rev-parse", "--short", "HEAD"],
                stderr=subprocess.DEVNULL,
            )
            .decode()
            .strip()
        )
    except (OSError, subprocess.CalledProcessError):
        return "unknown"
