"""A pool of bot clients used in turn, and a rate limiter for their requests."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any

log = logging.getLogger(__name__)

DEFAULT_START_TIMEOUT = 30.0

StartWorker = Callable[[str, int], "tuple[Any, Any]"]


@dataclass
class Worker:
    """A started bot client and the user it is logged in as."""

    id: int
    client: Any
    user: Any

    def __str__(self) -> str:
        return f"{{Worker ({self.id}|@{getattr(self.user, 'username', '')})}}"


class WorkerPool:
    """Started bots, handed out round robin."""

    def __init__(self) -> None:
        self.bots: list[Worker] = []
        self._starting = 0
        self._index = 0
        self._lock = threading.Lock()

    def _next_id(self) -> int:
        with self._lock:
            self._starting += 1
            return self._starting

    def add_default(self, client: Any, user: Any) -> Worker:
        """Add the main bot to the pool."""
        worker = Worker(self._next_id(), client, user)
        with self._lock:
            self.bots.append(worker)
        log.info("Default bot loaded")
        return worker

    def add(self, token: str, start_worker: StartWorker) -> Worker:
        """Start a bot with ``start_worker(token, worker_id)`` and add it to the pool.

        ``start_worker`` returns the client and the user it is logged in as.
        """
        worker_id = self._next_id()
        log.info("Starting worker with index - %d", worker_id)
        client, user = start_worker(token, worker_id)
        worker = Worker(worker_id, client, user)
        with self._lock:
            self.bots.append(worker)
        log.info("Bot @%s loaded with ID %d", getattr(user, "username", ""), worker_id)
        return worker

    def next_worker(self) -> Worker:
        """Return the next worker in turn."""
        with self._lock:
            if not self.bots:
                raise LookupError("no workers available")
            self._index = (self._index + 1) % len(self.bots)
            worker = self.bots[self._index]
        log.debug("Using worker %d", worker.id)
        return worker

    def start_all(
        self, tokens: Iterable[str], start_worker: StartWorker, timeout: float = DEFAULT_START_TIMEOUT
    ) -> int:
        """Start a bot for every token concurrently; return how many started in time."""
        tokens = list(tokens)
        if not tokens:
            log.info("No worker bot tokens provided, skipping worker initialization")
            return 0
        log.info("Starting")
        executor = ThreadPoolExecutor(max_workers=len(tokens))
        futures = {executor.submit(self.add, token, start_worker): index for index, token in enumerate(tokens)}
        done, pending = wait(futures, timeout=timeout)
        executor.shutdown(wait=False)
        successes = 0
        for future in done:
            error = future.exception()
            if error is not None:
                log.error("Failed to start worker %d: %s", futures[future], error)
            else:
                successes += 1
        for future in pending:
            log.error("Timed out starting worker %d", futures[future])
        log.info("Successfully started %d/%d bots", successes, len(tokens))
        return successes


class RateLimiter:
    """A token bucket allowing ``burst`` calls at once and one more every ``interval`` seconds."""

    def __init__(self, interval: float = 0.1, burst: int = 5) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        if burst < 1:
            raise ValueError("burst must be at least 1")
        self._interval = interval
        self._burst = burst
        self._tokens = float(burst)
        self._last = time.monotonic()
        self._lock = threading.Lock()

    def acquire(self) -> float:
        """Block until a call is allowed; return the seconds waited."""
        with self._lock:
            now = time.monotonic()
            self._tokens = min(self._burst, self._tokens + (now - self._last) / self._interval)
            self._last = now
            self._tokens -= 1
            delay = -self._tokens * self._interval if self._tokens < 0 else 0.0
        if delay > 0:
            time.sleep(delay)
        return delay