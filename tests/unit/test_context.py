"""
Unit tests for external_ip.context module.
"""

import threading
import time

from external_ip.context import Context
from external_ip.exceptions import CancelledError, ContextError, DeadlineExceededError


class TestContext:
    """Test Context cancellation and deadlines."""

    def test_background_is_live(self):
        """A background context never finishes on its own."""
        ctx = Context.background()

        assert not ctx.done()
        assert ctx.err() is None
        assert ctx.remaining() is None
        assert ctx.wait(0.01) is False

    def test_cancel(self):
        """cancel() finishes the context with CancelledError."""
        ctx = Context.with_cancel()
        ctx.cancel()

        assert ctx.done()
        assert isinstance(ctx.err(), CancelledError)
        assert isinstance(ctx.err(), ContextError)

    def test_cancel_is_idempotent(self):
        """The first reason sticks."""
        ctx = Context.with_cancel()
        ctx.cancel()
        first = ctx.err()
        ctx.cancel()

        assert ctx.err() is first

    def test_timeout(self):
        """A timeout finishes the context with DeadlineExceededError."""
        ctx = Context.with_timeout(0.05)

        assert ctx.wait(2.0)
        assert isinstance(ctx.err(), DeadlineExceededError)
        assert ctx.remaining() == 0.0

    def test_expired_deadline(self):
        """A deadline in the past finishes the context at once."""
        ctx = Context.with_deadline(time.monotonic() - 1)

        assert ctx.done()
        assert isinstance(ctx.err(), DeadlineExceededError)

    def test_cancel_before_deadline(self):
        """Cancelling first wins over a later deadline."""
        ctx = Context.with_timeout(10.0)
        ctx.cancel()

        assert isinstance(ctx.err(), CancelledError)
        assert 0 < ctx.remaining() <= 10.0

    def test_child_follows_parent(self):
        """Children finish with their parent's error."""
        parent = Context.with_cancel()
        child = Context.with_cancel(parent)

        parent.cancel()

        assert child.done()
        assert child.err() is parent.err()

    def test_child_cancel_leaves_parent(self):
        """Cancelling a child does not touch the parent."""
        parent = Context.with_cancel()
        child = Context.with_cancel(parent)

        child.cancel()

        assert child.done()
        assert not parent.done()

    def test_child_of_finished_parent(self):
        """A child of a finished parent starts finished."""
        parent = Context.with_cancel()
        parent.cancel()

        child = Context.with_timeout(10.0, parent=parent)

        assert child.done()
        assert isinstance(child.err(), CancelledError)

    def test_child_inherits_tighter_deadline(self):
        """A child never outlives its parent's deadline."""
        parent = Context.with_timeout(0.05)
        child = Context.with_timeout(10.0, parent=parent)

        assert child.deadline == parent.deadline
        assert child.wait(2.0)
        assert isinstance(child.err(), DeadlineExceededError)

    def test_done_callback(self):
        """Callbacks run once when the context finishes."""
        ctx = Context.with_cancel()
        calls = []

        ctx.add_done_callback(calls.append)
        ctx.cancel()
        ctx.cancel()

        assert calls == [ctx]

    def test_done_callback_after_finish(self):
        """Callbacks added after finishing run immediately."""
        ctx = Context.with_cancel()
        ctx.cancel()
        calls = []

        ctx.add_done_callback(calls.append)

        assert calls == [ctx]

    def test_removed_callback_not_called(self):
        """remove_done_callback unregisters a callback."""
        ctx = Context.with_cancel()
        calls = []

        ctx.add_done_callback(calls.append)
        ctx.remove_done_callback(calls.append)
        ctx.cancel()

        assert calls == []

    def test_failing_callback_does_not_block_others(self):
        """One failing callback does not prevent the rest from running."""
        ctx = Context.with_cancel()
        calls = []

        def broken(_ctx):
            raise RuntimeError("boom")

        ctx.add_done_callback(broken)
        ctx.add_done_callback(calls.append)
        ctx.cancel()

        assert calls == [ctx]

    def test_context_manager_cancels(self):
        """Leaving a with block cancels the context."""
        with Context.with_cancel() as ctx:
            assert not ctx.done()

        assert isinstance(ctx.err(), CancelledError)

    def test_wait_wakes_other_threads(self):
        """Threads blocked in wait() wake up on cancel."""
        ctx = Context.with_cancel()
        woke = threading.Event()

        def waiter():
            if ctx.wait(5.0):
                woke.set()

        thread = threading.Thread(target=waiter)
        thread.start()
        ctx.cancel()
        thread.join(timeout=2.0)

        assert woke.is_set()
