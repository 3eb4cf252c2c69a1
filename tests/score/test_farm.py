"""Tests for the background score farm."""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import bittensor as bt
import pytest

from zold.score.errors import SearchCancelledError
from zold.score.farm import ScoreFarm, submit
from zold.score.models import Score
from zold.score.suffix import CounterSuffixFinder


def _seed(strength: int) -> Score:
    return Score(
        time=datetime.now(timezone.utc) - timedelta(minutes=1),
        host="localhost", port=443,
        invoice="NOPREFIX@ffffffffffffffff", strength=strength,
    )


def _farm(strength: int, **kwargs) -> ScoreFarm:
    return ScoreFarm(
        host="localhost", invoice="NOPREFIX@ffffffffffffffff",
        score=_seed(strength), finder=CounterSuffixFinder(check_every=256), **kwargs,
    )


class TestScoreFarm:

    @pytest.mark.asyncio
    async def test_step_extends_best(self):
        farm = _farm(2)
        score = await farm.step()
        assert score.value == 1
        assert farm.best is score
        assert score.is_valid()

    @pytest.mark.asyncio
    async def test_run_rounds(self):
        seen = []
        farm = _farm(2, on_step=seen.append)
        best = await farm.run(rounds=3)
        assert best.value == 3
        assert [s.value for s in seen] == [1, 2, 3]
        assert not farm.running

    @pytest.mark.asyncio
    async def test_run_stops_at_max_value(self):
        farm = _farm(1, max_value=2)
        best = await farm.run()
        assert best.value == 2

    @pytest.mark.asyncio
    async def test_cancelling_step_keeps_best(self):
        farm = _farm(30)
        task = asyncio.create_task(farm.step())
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert farm.best.value == 0

    @pytest.mark.asyncio
    async def test_stop_aborts_search(self):
        farm = _farm(30)
        task = asyncio.create_task(farm.run())
        await asyncio.sleep(0.05)
        farm.stop()
        best = await asyncio.wait_for(task, timeout=10)
        assert best.value == 0
        assert not farm.running

    @pytest.mark.asyncio
    async def test_stop_before_run_is_kept(self):
        farm = _farm(1)
        farm.stop()
        best = await farm.run(rounds=3)
        assert best.value == 0
        assert farm.stopped
        with pytest.raises(SearchCancelledError):
            await farm.step()

    @pytest.mark.asyncio
    async def test_run_logs_and_raises_worker_failure(self, monkeypatch):
        class Broken:
            def find(self, base, strength, cancel=None):
                raise RuntimeError("finder exploded")

        logged = []
        monkeypatch.setattr(bt.logging, "error", lambda msg, *a, **kw: logged.append(msg))
        farm = ScoreFarm(
            host="localhost", invoice="NOPREFIX@ffffffffffffffff",
            score=_seed(1), finder=Broken(),
        )
        with pytest.raises(RuntimeError, match="finder exploded"):
            await farm.run(rounds=1)
        assert logged == [{"score_farm_error": "finder exploded", "value": 0}]
        assert not farm.running

    @pytest.mark.asyncio
    async def test_step_uses_freshness_window(self):
        old = Score(
            time=datetime.now(timezone.utc) - timedelta(hours=2),
            host="localhost", invoice="NOPREFIX@ffffffffffffffff", strength=50,
        )
        farm = ScoreFarm(host="localhost", invoice="NOPREFIX@ffffffffffffffff", score=old, best_before=1)
        restarted = await farm.step()
        assert restarted.value == 0
        assert restarted.time > old.time

    def test_default_identity(self):
        farm = ScoreFarm(host="example.org", invoice="PREFIXXX@0000000000000000", strength=3)
        assert farm.best.host == "example.org"
        assert farm.best.strength == 3
        assert farm.best.is_zero


class TestSubmit:

    def test_submit_computes_next(self):
        with ThreadPoolExecutor(max_workers=1) as executor:
            future, _ = submit(_seed(1), executor)
            assert future.result(timeout=10).value == 1

    def test_submit_cancel(self):
        with ThreadPoolExecutor(max_workers=1) as executor:
            future, cancel = submit(_seed(30), executor, CounterSuffixFinder(check_every=256))
            cancel.set()
            with pytest.raises(SearchCancelledError):
                future.result(timeout=10)
