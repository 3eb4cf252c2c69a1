"""Error taxonomy for proof-of-work scores.

All errors derive from ScoreError so a network layer receiving untrusted
text can reject a peer message with a single except clause.
"""

from __future__ import annotations


class ScoreError(ValueError):
    """Base class for every score failure."""


class ScoreValidationError(ScoreError):
    """A score field violated its constraint at construction time.

    ``errors`` lists every violated constraint as ``(field, message)``;
    the exception message names the first one.
    """

    def __init__(self, errors: list[tuple[str, str]]):
        self.errors = list(errors)
        if self.errors:
            field, message = self.errors[0]
            text = f"Invalid score field '{field}': {message}"
        else:
            text = "Invalid score"
        super().__init__(text)

    @property
    def field(self) -> str | None:
        return self.errors[0][0] if self.errors else None


class ScoreParseError(ScoreError):
    """Malformed canonical text or missing structured input."""


class InvalidScoreError(ScoreError):
    """Proof-of-work requested on a score that is not valid."""


class ZeroScoreError(ScoreError):
    """A zero-value score has no hash."""


class ScoreComparisonError(ScoreError, TypeError):
    """Comparison against a missing operand."""


class SearchCancelledError(ScoreError):
    """The suffix search was abandoned through its cancel event."""


__all__ = [
    "InvalidScoreError",
    "ScoreComparisonError",
    "ScoreError",
    "ScoreParseError",
    "ScoreValidationError",
    "SearchCancelledError",
    "ZeroScoreError",
]
