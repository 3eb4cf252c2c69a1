"""Proof-of-work scores for zold nodes.

A score certifies that a node identity (host, port, invoice) invested a
measurable amount of computation at a point in time. Peers exchange the
canonical text form; receivers verify it cheaply, while producing a
higher score stays expensive.
"""

from .errors import (
    InvalidScoreError,
    ScoreComparisonError,
    ScoreError,
    ScoreParseError,
    ScoreValidationError,
    SearchCancelledError,
    ZeroScoreError,
)
from .models import BEST_BEFORE, DEFAULT_PORT, STRENGTH, Score, zero_score
from .suffix import CounterSuffixFinder, RandomSuffixFinder, SuffixFinder, make_finder
from .verifier import ScoreVerifier, VerificationResult

__all__ = [
    "BEST_BEFORE",
    "CounterSuffixFinder",
    "DEFAULT_PORT",
    "InvalidScoreError",
    "RandomSuffixFinder",
    "STRENGTH",
    "Score",
    "ScoreComparisonError",
    "ScoreError",
    "ScoreParseError",
    "ScoreValidationError",
    "ScoreVerifier",
    "SearchCancelledError",
    "SuffixFinder",
    "VerificationResult",
    "ZeroScoreError",
    "make_finder",
    "zero_score",
]
