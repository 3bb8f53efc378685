"""
Progress display shared by the CLI scripts.

Modes:
  bar   : tqdm progress bar on stderr
  plain : one status line rewritten in place with '\\r'
  off   : nothing
  auto  : bar when stderr is a terminal, plain otherwise
"""

from __future__ import annotations

import sys
import time

from tqdm import tqdm

MODES = ["auto", "bar", "plain", "off"]


def resolve_mode(mode: str) -> str:
    if mode == "auto":
        return "bar" if sys.stderr.isatty() else "plain"
    return mode


class SearchProgress:
    """
    Callable progress(done, total) for the best-guess search.

    Use as a context manager so the bar or status line is cleared afterwards.
    """

    def __init__(self, mode: str, desc: str = "Checking"):
        self.mode = resolve_mode(mode)
        self.desc = desc
        self._bar = None
        self._seen = 0
        self._last_print = 0.0

    def __enter__(self) -> "SearchProgress":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __call__(self, done: int, total: int) -> None:
        if self.mode == "bar":
            if self._bar is None:
                self._bar = tqdm(total=total, ncols=80, desc=self.desc, unit="guess",
                                 leave=False)
            self._bar.update(done - self._seen)
        elif self.mode == "plain":
            now = time.time()
            if now - self._last_print >= 0.2 or done == total:
                sys.stderr.write(f"\r{self.desc} {done}/{total}...")
                sys.stderr.flush()
                self._last_print = now
        self._seen = done

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None
        elif self.mode == "plain" and self._seen:
            # Blank out the status line
            sys.stderr.write("\r" + " " * 40 + "\r")
            sys.stderr.flush()


class BatchStatus:
    """Plain status line for a batch of games: count, elapsed time and ETA."""

    def __init__(self, total: int, interval: float = 1.0, stream=None):
        self.total = total
        self.interval = interval
        self.stream = stream or sys.stderr
        self._start = time.time()
        self._last_print = 0.0

    def update(self, done: int) -> None:
        now = time.time()
        if now - self._last_print < self.interval and done != self.total:
            return
        elapsed = now - self._start
        eta = (self.total - done) * elapsed / done if done else 0.0
        self.stream.write(f"\rGames {done}/{self.total} | {elapsed:.1f}s | ETA {eta:.1f}s")
        self.stream.flush()
        self._last_print = now

    def close(self) -> None:
        self.stream.write("\n")
        self.stream.flush()
