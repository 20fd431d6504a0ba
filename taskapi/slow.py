"""
Slow Responder — Simulated Latency and Stress Failure
======================================================
Backs ``GET /tasks/slow``. Each call draws a delay uniformly between
``min_ms`` and ``max_ms``, suspends for it, then either fails with
ServiceUnavailable (only when the delay exceeded ``failure_threshold_ms``,
with probability ``failure_rate``) or returns the first two tasks.

The random source and the sleep coroutine are injectable so tests can
drive both branches without waiting on a real clock.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional

from taskapi.errors import ServiceUnavailable
from taskapi.models import Task
from taskapi.store import TaskStore

logger = logging.getLogger(__name__)

SLOW_PREVIEW_COUNT = 2


class SlowResponder:
    """Stateless between calls; owns only its configuration."""

    def __init__(self, store: TaskStore,
                 rng: Optional[random.Random] = None,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
                 min_ms: float = 1500, max_ms: float = 3500,
                 failure_threshold_ms: float = 3000, failure_rate: float = 0.2):
        if min_ms > max_ms:
            raise ValueError(f"min_ms ({min_ms}) must not exceed max_ms ({max_ms})")
        self.store = store
        self.rng = rng or random.Random()
        self.sleep = sleep
        self.min_ms = min_ms
        self.max_ms = max_ms
        self.failure_threshold_ms = failure_threshold_ms
        self.failure_rate = failure_rate

    def draw_delay_ms(self) -> float:
        return self.rng.uniform(self.min_ms, self.max_ms)

    async def respond(self) -> list[Task]:
        """Wait out a random delay, then return up to two tasks or fail."""
        delay = self.draw_delay_ms()
        await self.sleep(delay / 1000.0)

        if delay > self.failure_threshold_ms and self.rng.random() < self.failure_rate:
            logger.error("/tasks/slow - Simulated server error due to prolonged processing (stress)!")
            raise ServiceUnavailable(
                "Service temporarily unavailable due to high load (simulated)."
            )

        logger.info("/tasks/slow responding after %.0fms delay.", delay)
        return self.store.list()[:SLOW_PREVIEW_COUNT]
