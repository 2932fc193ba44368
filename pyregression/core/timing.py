"""
Execution timing for backends.

The breakdown a backend records ends up in Result.timing.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Wall-clock timer whose with-block is the total, plus named sections.

    Usage:
        with Timer() as timer:
            with timer.section('solve'):
                results = sm.OLS(y, X).fit()
        timer.result()
        # {'total_seconds': 0.05, 'solve': 0.04}

    A section entered more than once accumulates.
    """

    def __init__(self):
        self._sections: dict[str, float] = {}
        self._entered: float | None = None
        self._total: float | None = None

    def __enter__(self) -> Timer:
        self._entered = time.perf_counter()
        return self

    def __exit__(self, *exc_info) -> None:
        self._total = time.perf_counter() - self._entered

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self._sections[name] = (
                self._sections.get(name, 0.0) + time.perf_counter() - start
            )

    def result(self) -> dict[str, float]:
        """
        Total and per-section seconds.

        Raises:
            RuntimeError: If the timer's with-block has not finished
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before the timed block finished")
        return {'total_seconds': self._total, **self._sections}
