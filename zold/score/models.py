"""Pydantic model for the proof-of-work score.

To get a score you first create a zero-value one and keep asking it for
its successor:

    first = Score(host="example.org", invoice="PREFIX@0000000000000000")
    second = first.next()

Scores are frozen. Every operation that "changes" a score (``next``,
``reduced``) validates and returns a brand-new instance.
"""

from __future__ import annotations

import functools
import threading
from datetime import datetime, timedelta, timezone
from typing import Any

import bittensor as bt
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import chain, codec
from .errors import (
    InvalidScoreError,
    ScoreComparisonError,
    ScoreError,
    ScoreValidationError,
)
from .suffix import CounterSuffixFinder, SuffixFinder


# ---------------------------------------------------------------------------
# System constants
# ---------------------------------------------------------------------------

# Required trailing hex zeros in production. Larger means fewer, harder
# suffixes; smaller means longer chains to ship between nodes.
STRENGTH = 8

# Hours a score stays fresh before its work is thrown away.
BEST_BEFORE = 24

DEFAULT_PORT = 4096

HOST_PATTERN = r"^[0-9a-z.-]+$"
INVOICE_PATTERN = r"^[A-Za-z0-9]{8,32}@[0-9a-f]{16}$"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _field_errors(exc: ValidationError) -> list[tuple[str, str]]:
    errors = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "score"
        errors.append((loc, err.get("msg", "invalid value")))
    return errors


class Score(BaseModel):
    """Immutable proof of work for a (host, port, invoice) identity at a time."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    time: datetime = Field(default_factory=_now, strict=True)
    host: str = Field(strict=True, pattern=HOST_PATTERN)
    port: int = Field(default=DEFAULT_PORT, strict=True, ge=1, le=65535)
    invoice: str = Field(strict=True, pattern=INVOICE_PATTERN)
    suffixes: tuple[str, ...] = ()
    strength: int = Field(default=STRENGTH, strict=True, gt=0)
    created: datetime = Field(default_factory=_now, strict=True)

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ScoreValidationError(_field_errors(e)) from e

    @field_validator("time", "created")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("suffixes")
    @classmethod
    def _tokens(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for suffix in value:
            if not suffix or suffix.split() != [suffix]:
                raise ValueError(f"Suffix {suffix!r} must be a non-empty token without whitespace")
        return value

    # -- Derived values --

    @property
    def value(self) -> int:
        """Amount of chained suffixes, from zero and up."""
        return len(self.suffixes)

    @property
    def is_zero(self) -> bool:
        return not self.suffixes

    @property
    def prefix(self) -> str:
        return chain.prefix(self.time, self.host, self.port, self.invoice)

    @property
    def hash(self) -> str:
        """Final digest of the chain; raises ZeroScoreError for a zero score."""
        return chain.chain_hash(self.prefix, self.suffixes)

    @property
    def age(self) -> timedelta:
        return _now() - self.time

    def is_expired(self, hours: float | None = BEST_BEFORE) -> bool:
        """True if the score is older than ``hours``."""
        if hours is None:
            raise ScoreError("Hours can't be None")
        return self.age > timedelta(hours=hours)

    def is_valid(self) -> bool:
        """All suffixes constitute a hash of the required strength and time is in the past."""
        if self.suffixes and not chain.meets_strength(self.hash, self.strength):
            return False
        return self.time < _now()

    # -- Transformations --

    def next(
        self,
        finder: SuffixFinder | None = None,
        cancel: threading.Event | None = None,
        best_before: float = BEST_BEFORE,
    ) -> Score:
        """Calculate the successor of this score.

        May take from milliseconds to hours depending on ``strength``. When
        ``cancel`` is set during the search, SearchCancelledError propagates
        and no new score is produced. A score older than ``best_before``
        hours restarts from zero.
        """
        if not self.is_valid():
            raise InvalidScoreError(f"This score is not valid: {self}")
        if self.is_expired(best_before):
            bt.logging.debug({"score_next": {"event": "expired_restart", "host": self.host, "value": self.value}})
            return Score(
                time=_now(), host=self.host, port=self.port, invoice=self.invoice,
                suffixes=(), strength=self.strength,
            )
        finder = finder or CounterSuffixFinder()
        base = self.prefix if self.is_zero else self.hash
        suffix = finder.find(base, self.strength, cancel)
        bt.logging.debug({"score_next": {"event": "suffix_found", "host": self.host, "value": self.value + 1}})
        return Score(
            time=self.time, host=self.host, port=self.port, invoice=self.invoice,
            suffixes=self.suffixes + (suffix,), strength=self.strength,
        )

    def reduced(self, max: int | None = 4) -> Score:
        """Copy of the score keeping only the first ``max`` suffixes."""
        if max is None:
            raise ScoreError("Max can't be None")
        if max < 0:
            raise ScoreError(f"Max can't be negative: {max}")
        return Score(
            time=self.time, host=self.host, port=self.port, invoice=self.invoice,
            suffixes=self.suffixes[:min(max, self.value)], strength=self.strength,
        )

    # -- Codec --

    def to_text(self) -> str:
        return codec.to_text(self)

    def to_dict(self) -> dict[str, Any]:
        return codec.to_dict(self)

    def to_mnemo(self) -> str:
        """Short summary, e.g. ``3:2232``."""
        return f"{self.value}:{self.time.strftime('%H%M')}"

    @classmethod
    def parse(cls, text: str | None) -> Score:
        return codec.parse_text(text)

    @classmethod
    def parse_json(cls, data: Any) -> Score:
        return codec.parse_json(data)

    def __str__(self) -> str:
        return self.to_text()

    # -- Equality by text, ordering by value --

    def __eq__(self, other: object) -> bool:
        if other is None:
            raise ScoreComparisonError("Can't compare with None")
        if not isinstance(other, Score):
            return NotImplemented
        return self.to_text() == other.to_text()

    def __hash__(self) -> int:
        return hash(self.to_text())

    def _value_of(self, other: object) -> int:
        if other is None:
            raise ScoreComparisonError("Can't compare with None")
        if not isinstance(other, Score):
            raise ScoreComparisonError(f"Can't compare with {type(other).__name__}")
        return other.value

    def __lt__(self, other: object) -> bool:
        return self.value < self._value_of(other)

    def __gt__(self, other: object) -> bool:
        return self.value > self._value_of(other)

    def __le__(self, other: object) -> bool:
        return self.value <= self._value_of(other)

    def __ge__(self, other: object) -> bool:
        return self.value >= self._value_of(other)

    def compare(self, other: Score | None) -> int:
        """Three-way comparison by value: -1, 0 or 1."""
        theirs = self._value_of(other)
        return (self.value > theirs) - (self.value < theirs)


@functools.lru_cache(maxsize=None)
def zero_score() -> Score:
    """The default no-value score, built on first use."""
    return Score(host="localhost", invoice="NOPREFIX@ffffffffffffffff")


__all__ = [
    "BEST_BEFORE",
    "DEFAULT_PORT",
    "STRENGTH",
    "Score",
    "zero_score",
]
