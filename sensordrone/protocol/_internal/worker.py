# sensordrone/protocol/_internal/worker.py
from __future__ import annotations

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sensordrone.protocol.executor import CommandExecutor


class CommandWorker(threading.Thread):
    """Thread that runs queued work items one at a time, in FIFO order."""

    def __init__(self, executor: "CommandExecutor", name: str = "sensordrone-worker"):
        super().__init__(name=name, daemon=True)
        self.executor = executor

    def run(self) -> None:
        q = self.executor._queue
        while True:
            item = q.get()
            if item is None:
                # shutdown sentinel: everything queued before it has run
                break
            item.run()
            exc = item.future.exception() if not item.future.cancelled() else None
            if exc is not None:
                self.executor._log.error(
                    "TASK_FAILED task=%s err=%r", item.name, exc, exc_info=exc
                )
        self.executor._log.info("WORKER_STOPPED")
