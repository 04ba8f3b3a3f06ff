"""
Run-once guard used to build each type descriptor exactly once.

Once.run(fn) checks a plain done flag first, so callers arriving after the build
never touch the lock. The lock is held only while fn runs, and the flag is flipped
only after fn returns. A failing fn leaves the guard un-done so a later call can
retry.

Examples:
    >>> calls = []
    >>> once = Once()
    >>> once.run(lambda: calls.append(1))
    True
    >>> once.run(lambda: calls.append(2))
    False
    >>> calls
    [1]
"""

from __future__ import annotations

import threading
from collections.abc import Callable

__all__ = ["Once"]


class Once:
    """One-time initialization primitive (double-checked flag + lock)."""

    __slots__ = ("_done", "_lock")

    def __init__(self) -> None:
        self._done = False
        self._lock = threading.Lock()

    @property
    def done(self) -> bool:
        return self._done

    def run(self, fn: Callable[[], object]) -> bool:
        """
        Execute fn if no previous call completed it.

        Returns:
            bool: True if this call ran fn, False if it had already run.
        """
        if self._done:
            return False
        with self._lock:
            if self._done:
                return False
            fn()
            self._done = True
            return True
