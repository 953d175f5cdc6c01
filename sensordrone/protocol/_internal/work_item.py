# sensordrone/protocol/_internal/work_item.py
from __future__ import annotations

from concurrent.futures import Future
from typing import Any, Callable, Dict, Tuple


class WorkItem:
    """A queued task plus the Future its submitter holds."""

    def __init__(self, fn: Callable[..., Any], args: Tuple[Any, ...], kwargs: Dict[str, Any]):
        self.fn = fn
        self.args = args
        self.kwargs = kwargs
        self.future: Future = Future()

    @property
    def name(self) -> str:
        return getattr(self.fn, "__qualname__", repr(self.fn))

    def run(self) -> None:
        """Run the task unless it was cancelled while queued."""
        if not self.future.set_running_or_notify_cancel():
            return
        try:
            result = self.fn(*self.args, **self.kwargs)
        except BaseException as e:
            self.future.set_exception(e)
        else:
            self.future.set_result(result)

    def cancel(self) -> bool:
        return self.future.cancel()
