# apps/cli/run.py
"""
CLI entry point for self-play experiments.

This script:
  1) Builds the code space and instantiates the requested solver.
  2) Picks the secrets: the whole space, or a seeded sample of it.
  3) Plays every game with a live progress indicator and writes:
       - CSV:  per-game results + guess/feedback history columns
       - JSON: manifest with config, summary, git commit, etc.
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path
from typing import Dict, List

from tqdm import tqdm

from codebreaker.engine import CodebreakerError, CodeSpace
from codebreaker.engine.codes import DEFAULT_ALPHABET_SIZE, DEFAULT_CODE_LENGTH
from codebreaker.engine.validation import LETTERS
from codebreaker.harness import run_case
from codebreaker.harness.io import write_csv, write_manifest, timestamp_id, git_commit_or_unknown
from codebreaker.solvers import create_solver, get_solver_ids

from apps.cli.progress import MODES, BatchStatus, resolve_mode


def summarize(results: List[Dict]) -> Dict:
    """Win count, mean and worst number of guesses over a batch."""
    wins = [r["guesses"] for r in results if r["success"]]
    return {
        "games": len(results),
        "wins": len(wins),
        "mean_guesses": round(sum(wins) / len(wins), 4) if wins else None,
        "max_guesses": max(wins) if wins else None,
        "total_ms": round(sum(float(r["time_ms"]) for r in results), 3),
    }


def main(argv=None):
    """
    Parse CLI args, run the batch with progress, and write outputs.
    """
    solver_choices = ", ".join(get_solver_ids())

    ap = argparse.ArgumentParser(description="codebreaker — run solver self-play experiments")
    ap.add_argument("--solver", default="minimax",
                    help=f"solver id (one of: {solver_choices})")
    ap.add_argument("--alphabet", type=int, default=DEFAULT_ALPHABET_SIZE,
                    help="number of symbols")
    ap.add_argument("--length", type=int, default=DEFAULT_CODE_LENGTH, help="code length")
    ap.add_argument("--sample", type=int,
                    help="play only a subset of secrets (deterministic by seed)")
    ap.add_argument("--max-turns", type=int, help="turn budget per game (default: unlimited)")
    ap.add_argument("--seed", type=int, default=123, help="base RNG seed (for reproducibility)")
    ap.add_argument("--outdir", default="reports", help="directory for output files")
    ap.add_argument(
        "--progress",
        choices=MODES,
        default="auto",
        help="Show run progress (auto=bar on a terminal, else plain text)."
    )
    ap.add_argument("--verbose", action="store_true", help="debug logging on stderr")
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # 1) Code space + solver
    try:
        space = CodeSpace(args.alphabet, args.length)
    except CodebreakerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    if space.alphabet_size > LETTERS:
        print(f"Error: results are written as letters; alphabet must be <= {LETTERS}",
              file=sys.stderr)
        return 2
    solver = create_solver(args.solver)

    # 2) Choose cases (deterministic sample by seed)
    rng = random.Random(args.seed)
    if args.sample and args.sample < space.population:
        cases = [space.from_ordinal(i) for i in rng.sample(range(space.population), args.sample)]
    else:
        cases = list(space)

    total = len(cases)

    # 3) Progress mode
    mode = resolve_mode(args.progress)

    results = []
    status = BatchStatus(total) if mode == "plain" else None

    iterator = tqdm(cases, ncols=80, desc="Running", unit="game") if mode == "bar" else cases

    # 4) Run batch with live progress
    for idx, secret in enumerate(iterator, 1):
        per_seed = args.seed + idx * 1013904223  # LCG-ish stride to avoid collisions
        r = run_case(solver, secret, space=space, max_turns=args.max_turns, seed=per_seed)
        r["solver_id"] = solver.id  # stamp id for downstream tools
        results.append(r)

        if status is not None:
            status.update(idx)

    if status is not None:
        status.close()

    # 5) Write outputs (CSV + manifest)
    run_id = timestamp_id()
    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    csv_path = outdir / f"run_{run_id}.csv"
    manifest_path = outdir / f"run_{run_id}_manifest.json"

    longest = max((len(r["history"]) for r in results), default=0)
    write_csv(results, str(csv_path), max_turns=longest, code_length=space.code_length)
    summary = summarize(results)
    manifest = {
        "run_id": run_id,
        "git_commit": git_commit_or_unknown(),
        "config": vars(args),
        "population": space.population,
        "num_cases": len(results),
        "solver_id": solver.id,
        "summary": summary,
    }
    write_manifest(manifest, str(manifest_path))

    print(f"{solver.id}: {summary['wins']}/{summary['games']} solved, "
          f"mean {summary['mean_guesses']} guesses, worst {summary['max_guesses']}")
    print(f"Wrote: {csv_path}")
    print(f"Wrote: {manifest_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
