"""Single-threaded "run this in the next tick" executor.

Callbacks are queued from any thread and run on the tick thread, one after
another, each to completion, exactly once.  A callback receives the tick's
delta time.  Failures are logged and delivered through the callback's
Future; they never stop the executor.
"""

from __future__ import annotations

import itertools
import logging
import queue
import threading
import time
from concurrent.futures import Future
from typing import Any, Callable

from config import TICK_INTERVAL_SECS

log = logging.getLogger(__name__)


class TickExecutor:
    """Queue of one-shot callbacks drained once per tick."""

    def __init__(self, interval: float = TICK_INTERVAL_SECS):
        self.interval = interval
        self._queue: "queue.SimpleQueue[tuple[str, Callable[[float], Any], Future]]" = queue.SimpleQueue()
        self._counter = itertools.count(1)
        self._tick_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._last_tick = time.monotonic()
        self.tick_count = 0

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, fn: Callable[[float], Any]) -> Future:
        """Queue *fn* for the next tick and return a Future for its result."""
        future: Future = Future()
        consumer_id = f"update-once-{next(self._counter)}"
        self._queue.put((consumer_id, fn, future))
        log.debug("Queued %s", consumer_id)
        return future

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def run_tick(self, ds: float | None = None) -> int:
        """Run every callback queued before this tick started.

        Callbacks submitted while the tick is running wait for the next one.
        Returns the number of callbacks run.
        """
        with self._tick_lock:
            now = time.monotonic()
            if ds is None:
                ds = now - self._last_tick
            self._last_tick = now

            batch = []
            for _ in range(self._queue.qsize()):
                try:
                    batch.append(self._queue.get_nowait())
                except queue.Empty:
                    break

            for consumer_id, fn, future in batch:
                if not future.set_running_or_notify_cancel():
                    continue
                try:
                    result = fn(ds)
                except Exception as e:
                    log.exception("Error in %s", consumer_id)
                    future.set_exception(e)
                else:
                    future.set_result(result)

            self.tick_count += 1
            return len(batch)

    def run_until_idle(self, max_ticks: int = 100) -> int:
        """Tick until the queue is empty (or *max_ticks*).  Returns callbacks run."""
        total = 0
        for _ in range(max_ticks):
            if not self.pending:
                break
            total += self.run_tick()
        return total

    # ------------------------------------------------------------------
    # Background thread
    # ------------------------------------------------------------------

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            # A stop() that timed out leaves the loop alive; keep using it.
            self._stop_event.clear()
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="tick-executor", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 2.0):
        self._stop_event.set()
        if self._thread is None:
            return
        self._thread.join(timeout)
        if self._thread.is_alive():
            log.warning("Tick thread still busy after %.2fs; it stops after the current tick", timeout)
        else:
            self._thread = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _loop(self):
        while not self._stop_event.is_set():
            self.run_tick()
            self._stop_event.wait(self.interval)
