"""
Cancellation context shared by the consensus and its sources.

A Context is a thread-safe signal that finishes exactly once, either because
its owner cancelled it or because its deadline passed. Once finished it
reports the reason through err(). Child contexts finish when their parent
does, and may add a tighter deadline of their own.

Usage:
    from external_ip.context import Context

    with Context.with_timeout(5.0) as ctx:
        ip = consensus.resolve_external_ip(ctx)
"""

import logging
import threading
import time
from collections.abc import Callable

from external_ip.exceptions import CancelledError, ContextError, DeadlineExceededError

logger = logging.getLogger(__name__)

DoneCallback = Callable[["Context"], None]


class Context:
    """
    Cancellation and deadline signal.

    Args:
        parent: Optional parent context; this context finishes when it does
        deadline: Optional absolute deadline on the time.monotonic() clock
    """

    def __init__(self, parent: "Context | None" = None, deadline: float | None = None):
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._err: ContextError | None = None
        self._callbacks: list[DoneCallback] = []
        self._timer: threading.Timer | None = None
        self._parent = parent

        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self._deadline = deadline

        if parent is not None:
            parent.add_done_callback(self._on_parent_done)
            if self.done():
                return

        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                self._finish(DeadlineExceededError())
            else:
                self._timer = threading.Timer(remaining, self._finish, args=(DeadlineExceededError(),))
                self._timer.daemon = True
                self._timer.start()

    @classmethod
    def background(cls) -> "Context":
        """Return a context that never finishes unless cancelled."""
        return cls()

    @classmethod
    def with_cancel(cls, parent: "Context | None" = None) -> "Context":
        """Return a cancellable child of parent."""
        return cls(parent=parent)

    @classmethod
    def with_deadline(cls, deadline: float, parent: "Context | None" = None) -> "Context":
        """Return a context finishing at the given time.monotonic() deadline."""
        return cls(parent=parent, deadline=deadline)

    @classmethod
    def with_timeout(cls, timeout: float, parent: "Context | None" = None) -> "Context":
        """Return a context finishing timeout seconds from now."""
        return cls(parent=parent, deadline=time.monotonic() + timeout)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def cancel(self) -> None:
        """Finish the context with CancelledError. Has no effect once finished."""
        self._finish(CancelledError())

    def done(self) -> bool:
        return self._event.is_set()

    def err(self) -> ContextError | None:
        """Return the reason this context finished, or None while it is live."""
        with self._lock:
            return self._err

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the context finishes or timeout elapses. Returns done()."""
        return self._event.wait(timeout)

    def remaining(self) -> float | None:
        """Seconds left until the deadline (never negative), or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def add_done_callback(self, fn: DoneCallback) -> None:
        """
        Register fn to be called with this context once it finishes.

        If the context already finished, fn is called immediately in the
        calling thread. Otherwise it runs in whichever thread finishes it.
        """
        with self._lock:
            if self._err is None:
                self._callbacks.append(fn)
                return
        fn(self)

    def remove_done_callback(self, fn: DoneCallback) -> None:
        with self._lock:
            try:
                self._callbacks.remove(fn)
            except ValueError:
                pass

    def _on_parent_done(self, parent: "Context") -> None:
        self._finish(parent.err())

    def _finish(self, err: ContextError) -> None:
        with self._lock:
            if self._err is not None:
                return
            self._err = err
            callbacks, self._callbacks = self._callbacks, []
            self._event.set()

        if self._timer is not None:
            self._timer.cancel()
        if self._parent is not None:
            self._parent.remove_done_callback(self._on_parent_done)

        for fn in callbacks:
            try:
                fn(self)
            except Exception:
                logger.exception("Context done callback failed")

    def __enter__(self) -> "Context":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cancel()
        return False

    def __repr__(self) -> str:
        state = type(self._err).__name__ if self._err is not None else "active"
        return f"Context({state}, remaining={self.remaining()})"
