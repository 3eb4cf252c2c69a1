"""Tests for peer score verification."""

from datetime import datetime, timedelta, timezone

import pytest

from zold.score.chain import extend, meets_strength
from zold.score.models import Score
from zold.score.verifier import ScoreVerifier, VerificationResult


def _fresh(strength: int = 2, rounds: int = 1, **overrides) -> Score:
    defaults = dict(
        time=(datetime.now(timezone.utc) - timedelta(minutes=5)).replace(microsecond=0),
        host="b2.zold.io",
        port=4096,
        invoice="THdonv1E@abcdabcdabcdabcd",
        strength=strength,
    )
    defaults.update(overrides)
    score = Score(**defaults)
    for _ in range(rounds):
        score = score.next()
    return score


class TestScoreVerifier:

    def test_accepts_good_score(self):
        score = _fresh()
        result = ScoreVerifier(min_strength=2).verify(score)
        assert result
        assert result.errors == []
        assert result.score is score

    def test_accepts_good_text(self):
        score = _fresh(rounds=2)
        result = ScoreVerifier(min_strength=2, min_value=2).verify_text(score.to_text())
        assert result.valid
        assert result.score == score

    def test_rejects_garbage(self):
        result = ScoreVerifier().verify_text("some garbage")
        assert not result
        assert result.score is None
        assert "unparseable" in result.errors[0]

    def test_rejects_none(self):
        assert not ScoreVerifier().verify_text(None)

    def test_rejects_weak_score(self):
        result = ScoreVerifier(min_strength=3).verify(_fresh(strength=2))
        assert not result
        assert any("strength too low" in e for e in result.errors)

    def test_rejects_forged_suffixes(self):
        seed = _fresh(rounds=0)
        bogus = next(
            s for s in (f"x{i}" for i in range(100))
            if not meets_strength(extend(seed.prefix, s), seed.strength)
        )
        forged = Score(
            time=seed.time, host=seed.host, port=seed.port,
            invoice=seed.invoice, strength=seed.strength, suffixes=(bogus,),
        )
        result = ScoreVerifier(min_strength=2).verify(forged)
        assert not result
        assert any("not valid" in e for e in result.errors)

    def test_rejects_future_score(self):
        future = Score(
            time=datetime.now(timezone.utc) + timedelta(hours=1), host="b2.zold.io",
            invoice="THdonv1E@abcdabcdabcdabcd", strength=2,
        )
        assert not ScoreVerifier(min_strength=2).verify(future)

    def test_rejects_expired_score(self):
        golden = Score(
            time=datetime(2018, 6, 27, 6, 22, 41, tzinfo=timezone.utc),
            host="b2.zold.io", port=4096, invoice="THdonv1E@abcdabcdabcdabcd",
            suffixes=("3a934b", "1421217"), strength=6,
        )
        result = ScoreVerifier(min_strength=6).verify(golden)
        assert not result
        assert result.errors == ["expired: older than 24 hours"]

    def test_custom_freshness_window(self):
        score = _fresh()
        assert not ScoreVerifier(min_strength=2, best_before=0.01).verify(score)

    def test_rejects_low_value(self):
        result = ScoreVerifier(min_strength=2, min_value=3).verify(_fresh(rounds=1))
        assert not result
        assert any("value too low" in e for e in result.errors)


class TestVerificationResult:

    @pytest.mark.parametrize("valid", [True, False])
    def test_truthiness(self, valid):
        assert bool(VerificationResult(valid=valid)) is valid
