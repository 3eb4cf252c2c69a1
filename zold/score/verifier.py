"""Verification of scores received from untrusted peers.

Checks parseability, strength, hash chain, freshness and minimum value
before a node trusts a remote score.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import bittensor as bt

from .errors import ScoreError
from .models import BEST_BEFORE, STRENGTH, Score


@dataclass
class VerificationResult:
    """Outcome of score verification."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    score: Score | None = None

    def __bool__(self) -> bool:
        return self.valid


class ScoreVerifier:
    """Rejects peer scores that are malformed, weak, forged or stale."""

    def __init__(
        self,
        min_strength: int = STRENGTH,
        best_before: float = BEST_BEFORE,
        min_value: int = 0,
    ):
        self.min_strength = min_strength
        self.best_before = best_before
        self.min_value = min_value

    def verify_text(self, text: str | None) -> VerificationResult:
        """Parse canonical text from a peer and verify the result."""
        try:
            score = Score.parse(text)
        except ScoreError as e:
            return self._reject([f"unparseable: {e}"], None)
        return self.verify(score)

    def verify(self, score: Score) -> VerificationResult:
        errors: list[str] = []

        if score.strength < self.min_strength:
            errors.append(
                f"strength too low: got {score.strength}, expected at least {self.min_strength}"
            )

        if not score.is_valid():
            errors.append("hash chain or time is not valid")

        if score.is_expired(self.best_before):
            errors.append(f"expired: older than {self.best_before} hours")

        if score.value < self.min_value:
            errors.append(f"value too low: got {score.value}, expected at least {self.min_value}")

        if errors:
            return self._reject(errors, score)
        return VerificationResult(valid=True, errors=[], score=score)

    def _reject(self, errors: list[str], score: Score | None) -> VerificationResult:
        bt.logging.warning({
            "score_verifier": {
                "event": "rejected",
                "host": score.host if score is not None else "none",
                "errors": errors,
            }
        })
        return VerificationResult(valid=False, errors=errors, score=score)


__all__ = ["ScoreVerifier", "VerificationResult"]
