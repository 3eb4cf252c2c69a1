"""Background proof-of-work for one score chain.

Lightweight loop: take the best score -> compute its successor in a worker
thread -> keep it. Successive ``next`` calls for the chain are serialized
here; abandoning a search never leaves a half-built score behind.
"""

from __future__ import annotations

import asyncio
import threading
from concurrent.futures import Executor, Future
from typing import Callable

import bittensor as bt

from .errors import SearchCancelledError
from .models import BEST_BEFORE, DEFAULT_PORT, STRENGTH, Score
from .suffix import CounterSuffixFinder, SuffixFinder


def submit(
    score: Score,
    executor: Executor,
    finder: SuffixFinder | None = None,
    best_before: float = BEST_BEFORE,
) -> tuple[Future, threading.Event]:
    """Schedule ``score.next()`` on an executor.

    Returns the future and the event that aborts the search when set; an
    aborted future fails with SearchCancelledError.
    """
    cancel = threading.Event()
    future = executor.submit(score.next, finder, cancel, best_before)
    return future, cancel


class ScoreFarm:
    """Keeps extending the score of a single identity."""

    def __init__(
        self,
        host: str,
        invoice: str,
        port: int = DEFAULT_PORT,
        strength: int = STRENGTH,
        finder: SuffixFinder | None = None,
        max_value: int | None = None,
        score: Score | None = None,
        on_step: Callable[[Score], None] | None = None,
        best_before: float = BEST_BEFORE,
    ):
        self.finder = finder or CounterSuffixFinder()
        self.max_value = max_value
        self.best_before = best_before
        self.on_step = on_step
        if score is None:
            score = Score(host=host, port=port, invoice=invoice, strength=strength)
        self.best = score
        self._cancel: threading.Event | None = None
        self._stopped = threading.Event()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    async def step(self) -> Score:
        """Compute one successor of the best score and keep it.

        Cancelling the awaiting task aborts the search thread; the best
        score stays as it was. After ``stop()`` every step fails with
        SearchCancelledError.
        """
        cancel = threading.Event()
        self._cancel = cancel
        if self._stopped.is_set():
            self._cancel = None
            raise SearchCancelledError("Score farm is stopped")
        current = self.best
        try:
            successor = await asyncio.to_thread(
                current.next, self.finder, cancel, self.best_before,
            )
        except asyncio.CancelledError:
            cancel.set()
            raise
        finally:
            self._cancel = None
        self.best = successor
        bt.logging.debug({
            "score_farm": {
                "event": "step",
                "host": successor.host,
                "value": successor.value,
                "mnemo": successor.to_mnemo(),
            }
        })
        if self.on_step is not None:
            self.on_step(successor)
        return successor

    async def run(self, rounds: int | None = None) -> Score:
        """Loop ``step`` until stopped, ``rounds`` done or ``max_value`` reached."""
        self._running = True
        bt.logging.info({
            "score_farm": {
                "status": "starting",
                "host": self.best.host,
                "strength": self.best.strength,
                "rounds": rounds,
                "max_value": self.max_value,
            }
        })
        done = 0
        try:
            while not self._stopped.is_set():
                if rounds is not None and done >= rounds:
                    break
                if self.max_value is not None and self.best.value >= self.max_value:
                    break
                try:
                    await self.step()
                except SearchCancelledError:
                    break
                except Exception as e:
                    bt.logging.error({"score_farm_error": str(e), "value": self.best.value})
                    raise
                done += 1
        finally:
            self._running = False
            bt.logging.info({"score_farm": {"status": "stopped", "value": self.best.value}})
        return self.best

    def stop(self) -> None:
        """Stop the loop for good and abort the in-flight search."""
        self._stopped.set()
        cancel = self._cancel
        if cancel is not None:
            cancel.set()


__all__ = ["ScoreFarm", "submit"]
