"""Suffix search strategies for proof-of-work.

The Score model only depends on the SuffixFinder protocol; new search
strategies are added by writing a class with a ``find`` method, no changes
to the model.
"""

from __future__ import annotations

import secrets
import threading
from typing import Protocol, runtime_checkable

from .chain import extend, meets_strength
from .errors import ScoreError, SearchCancelledError


@runtime_checkable
class SuffixFinder(Protocol):
    """Interface for proof-of-work search primitives."""

    def find(
        self, base: str, strength: int, cancel: threading.Event | None = None,
    ) -> str:
        """Return a suffix such that ``extend(base, suffix)`` meets ``strength``.

        Must raise SearchCancelledError once ``cancel`` is set.
        """
        ...


def _check_strength(strength: int) -> None:
    if not isinstance(strength, int) or isinstance(strength, bool) or strength <= 0:
        raise ScoreError(f"Strength must be positive integer, while {strength!r} is provided")


class CounterSuffixFinder:
    """Exhaustive search over lowercase hex counters (1, 2, ..., a, b, ...)."""

    def __init__(self, start: int = 1, check_every: int = 4096):
        if start < 0:
            raise ScoreError(f"Counter start can't be negative: {start}")
        self.start = start
        self.check_every = max(1, check_every)

    def find(
        self, base: str, strength: int, cancel: threading.Event | None = None,
    ) -> str:
        _check_strength(strength)
        counter = self.start
        while True:
            if cancel is not None and (counter - self.start) % self.check_every == 0 and cancel.is_set():
                raise SearchCancelledError(f"Suffix search cancelled at counter {counter:x}")
            suffix = format(counter, "x")
            if meets_strength(extend(base, suffix), strength):
                return suffix
            counter += 1


class RandomSuffixFinder:
    """Randomized search over hex tokens of ``nbytes`` bytes."""

    def __init__(self, nbytes: int = 8, check_every: int = 4096):
        if nbytes <= 0:
            raise ScoreError(f"Token size must be positive: {nbytes}")
        self.nbytes = nbytes
        self.check_every = max(1, check_every)

    def find(
        self, base: str, strength: int, cancel: threading.Event | None = None,
    ) -> str:
        _check_strength(strength)
        attempts = 0
        while True:
            if cancel is not None and attempts % self.check_every == 0 and cancel.is_set():
                raise SearchCancelledError(f"Suffix search cancelled after {attempts} attempts")
            attempts += 1
            suffix = secrets.token_hex(self.nbytes)
            if meets_strength(extend(base, suffix), strength):
                return suffix


FINDERS: dict[str, type] = {
    "counter": CounterSuffixFinder,
    "random": RandomSuffixFinder,
}


def make_finder(name: str) -> SuffixFinder:
    """Build a finder by its registered name."""
    try:
        return FINDERS[name]()
    except KeyError:
        raise ScoreError(f"Unknown suffix finder: {name}") from None


__all__ = [
    "CounterSuffixFinder",
    "FINDERS",
    "RandomSuffixFinder",
    "SuffixFinder",
    "make_finder",
]
