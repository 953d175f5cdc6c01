# sensordrone/protocol/executor.py
from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import Future
from typing import Any, Callable, Optional

from sensordrone.core.errors import RejectedByExecutorError

from ._internal.work_item import WorkItem
from ._internal.worker import CommandWorker


class CommandExecutor:
    """
    Single-worker FIFO executor that owns the drone byte stream.

    - submit() enqueues and returns a Future immediately.
    - submit_and_wait() blocks the caller until the task has run.
    - shutdown() refuses new work and lets queued work drain.
    - shutdown_now() refuses new work, cancels queued work and waits a
      bounded time for the running task.

    Work may be submitted before start(); it runs once the worker starts.
    """

    def __init__(self, *, name: str = "sensordrone-worker", logger: Optional[logging.Logger] = None):
        self._log = logger or logging.getLogger(__name__)
        self._queue: "queue.Queue[Optional[WorkItem]]" = queue.Queue()
        self._lock = threading.Lock()
        self._shutdown = False
        self._started = False
        self._worker = CommandWorker(self, name=name)

    # ---------------- State ----------------
    @property
    def is_shutdown(self) -> bool:
        with self._lock:
            return self._shutdown

    def on_worker_thread(self) -> bool:
        return threading.current_thread() is self._worker

    # ---------------- Lifecycle ----------------
    def start(self) -> None:
        with self._lock:
            if self._started:
                return
            self._started = True
        self._worker.start()
        self._log.info("WORKER_STARTED name=%s", self._worker.name)

    def shutdown(self, wait: bool = False) -> None:
        with self._lock:
            if not self._shutdown:
                self._shutdown = True
                self._queue.put(None)
                self._log.info("EXECUTOR_SHUTDOWN pending=%d", self._queue.qsize() - 1)

        if wait:
            self.join()

    def shutdown_now(self, grace_s: float = 5.0) -> bool:
        """
        Cancel queued work and wait up to grace_s for the running task.

        Returns True when the worker has terminated (or never started).
        Called from the worker itself it cannot wait and returns False.
        """
        with self._lock:
            self._shutdown = True
            cancelled = self._drain()
            self._queue.put(None)
        self._log.info("EXECUTOR_SHUTDOWN_NOW cancelled=%d grace_s=%.3f", cancelled, grace_s)

        if not self._started:
            return True
        if self.on_worker_thread():
            return False

        self._worker.join(grace_s)
        terminated = not self._worker.is_alive()
        if not terminated:
            self._log.warning("EXECUTOR_GRACE_EXPIRED grace_s=%.3f", grace_s)
        return terminated

    def join(self, timeout: Optional[float] = None) -> bool:
        if not self._started or self.on_worker_thread():
            return not self._started
        self._worker.join(timeout)
        return not self._worker.is_alive()

    def _drain(self) -> int:
        cancelled = 0
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return cancelled
            if item is not None and item.cancel():
                cancelled += 1

    # ---------------- Submission ----------------
    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        with self._lock:
            if self._shutdown:
                raise RejectedByExecutorError(
                    "command executor is shut down",
                    hint="Reconnect the drone before issuing new commands.",
                )
            item = WorkItem(fn, args, kwargs)
            self._queue.put(item)
        self._log.debug("TASK_SUBMITTED task=%s", item.name)
        return item.future

    def submit_and_wait(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """
        Submit and block until the task finishes; return its value.

        Raises the task's exception, CancelledError if shutdown_now() dropped
        it, and RuntimeError when called on the worker thread.
        """
        if self.on_worker_thread():
            raise RuntimeError("submit_and_wait() called on the worker thread would deadlock")
        return self.submit(fn, *args, **kwargs).result()
