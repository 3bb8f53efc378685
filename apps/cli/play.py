# apps/cli/play.py
"""
Interactive code-breaking session.

Type a code (e.g. "abcd") to guess it against the hidden secret, or a command:

  :best    brute-force the guess with the smallest worst case
  :pos     list every code still consistent with the feedback so far
  :turns   show the recorded turns, most recent first
  :pop     undo the most recent turn
  :new     choose a new secret and forget all turns
  :rev     reveal the secret
  :help    this text
  :q       quit (also :exit)
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable

from codebreaker.engine import (
    CodebreakerError,
    EmptyHistoryError,
    format_code,
    is_win,
    parse_code,
)
from codebreaker.engine.codes import DEFAULT_ALPHABET_SIZE, DEFAULT_CODE_LENGTH
from codebreaker.engine.validation import LETTERS
from codebreaker.game import Session, new_session

from apps.cli.progress import MODES, SearchProgress

HELP = __doc__.split("\n", 3)[3].strip("\n")

Printer = Callable[[str], None]


def _cmd_best(session: Session, out: Printer, *, workers: int, progress: str) -> None:
    with SearchProgress(progress) as prog:
        choice = session.choose_guess(progress=prog, workers=workers)
    out(f"{format_code(choice.code, session.space)} "
        f"(worst case {choice.worst_case} of {choice.candidates} left)")


def _cmd_pos(session: Session, out: Printer) -> None:
    c = 0
    for code in session.consistent_codes():
        c += 1
        out(f"Code #{c}: {format_code(code, session.space)}")
    if c == 0:
        out("No consistent codes; some feedback was contradictory.")


def _cmd_turns(session: Session, out: Printer) -> None:
    for turn in session.history:
        out(f"{format_code(turn.guess, session.space)} {turn.feedback}")


def _cmd_pop(session: Session, out: Printer) -> None:
    try:
        session.undo_last_turn()
    except EmptyHistoryError:
        out("Nothing to undo.")


def _guess(session: Session, text: str, out: Printer) -> None:
    code = parse_code(text, session.space)
    fb = session.submit_guess(code)
    out(f"Fit {fb.fit}, Misplaced {fb.misplaced}")
    if is_win(fb, session.space.code_length):
        out("You've won!")


def handle_command(session: Session, line: str, *, out: Printer = print,
                   workers: int = 1, progress: str = "off") -> bool:
    """
    Execute one input line against `session`.

    Returns False when the user asked to quit, True otherwise. Engine errors
    are printed and the session stays usable.
    """
    cmd = line.strip()
    if not cmd:
        return True

    try:
        if cmd.startswith(":q") or cmd == ":exit":
            return False
        elif cmd.startswith(":rev"):
            out(format_code(session.reveal_secret(), session.space))
        elif cmd.startswith(":pos"):
            _cmd_pos(session, out)
        elif cmd == ":best":
            _cmd_best(session, out, workers=workers, progress=progress)
        elif cmd == ":new":
            session.new_secret()
        elif cmd == ":turns":
            _cmd_turns(session, out)
        elif cmd == ":pop":
            _cmd_pop(session, out)
        elif cmd == ":help":
            out(HELP)
        elif cmd.startswith(":"):
            out(f"Unknown command {cmd!r}; :help lists the commands.")
        else:
            _guess(session, cmd, out)
    except CodebreakerError as e:
        out(f"Error: {e}")
    return True


def main(argv=None):
    """
    Parse CLI args, start a session, and run the read-eval loop until :q or EOF.
    """
    ap = argparse.ArgumentParser(description="codebreaker — interactive solver session")
    ap.add_argument("--alphabet", type=int, default=DEFAULT_ALPHABET_SIZE,
                    help="number of symbols (letters a..), at most 26 for text input")
    ap.add_argument("--length", type=int, default=DEFAULT_CODE_LENGTH, help="code length")
    ap.add_argument("--seed", type=int, help="RNG seed for the secrets (default: random)")
    ap.add_argument("--workers", type=int, default=1,
                    help="worker processes for :best (1 = in-process)")
    ap.add_argument("--progress", choices=MODES, default="auto",
                    help="progress display during :best (auto=bar on a terminal)")
    ap.add_argument("--verbose", action="store_true", help="debug logging on stderr")
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        session = new_session(args.alphabet, args.length, args.seed)
    except CodebreakerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    if session.space.alphabet_size > LETTERS:
        print(f"Error: codes are typed as letters; alphabet must be <= {LETTERS}",
              file=sys.stderr)
        return 2

    print("codebreaker:")
    print(f"{session.space.population} codes of length {args.length} over "
          f"{args.alphabet} symbols; :help for commands.")

    while True:
        try:
            line = input("\n> ")
        except EOFError:
            break
        if not handle_command(session, line, workers=args.workers, progress=args.progress):
            break
    return 0


if __name__ == "__main__":
    sys.exit(main())
