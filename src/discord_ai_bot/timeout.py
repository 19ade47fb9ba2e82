"""
Deadline wrapper for blocking upstream calls.

Each call runs on its own daemon thread; when the deadline fires first the
caller gets ``UpstreamTimeout`` and the thread is left to finish on its own.
Nothing is cancelled: whatever the call eventually returns is dropped. An
abandoned call never delays a later one, and callers pass the same deadline
to the client they wrap so the thread does not linger.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Callable, TypeVar

from .errors import UpstreamTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _discard_late(name: str, fut: Future) -> None:
    err = fut.exception()
    if err is not None:
        logger.debug("abandoned call %s failed late: %s", name, err)
    else:
        logger.debug("abandoned call %s finished late; result dropped", name)


def with_timeout(fn: Callable[..., T], timeout_ms: int, *args: Any, **kwargs: Any) -> T:
    name = getattr(fn, "__name__", repr(fn))
    fut: Future = Future()

    def run() -> None:
        fut.set_running_or_notify_cancel()
        try:
            fut.set_result(fn(*args, **kwargs))
        except Exception as e:
            fut.set_exception(e)

    threading.Thread(target=run, name=f"upstream-{name}", daemon=True).start()
    try:
        return fut.result(timeout=timeout_ms / 1000.0)
    except FutureTimeout:
        fut.add_done_callback(lambda f: _discard_late(name, f))
        raise UpstreamTimeout() from None
