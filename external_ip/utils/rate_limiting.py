"""
Thread-safe rate limiting for IP lookup providers.

Public "what is my IP" services throttle or ban clients that poll them too
often. A RateLimiter spaces calls to one provider, and can be shared by every
source that talks to it.

Usage:
    from external_ip.utils.rate_limiting import RateLimiter

    limiter = RateLimiter(requests_per_second=1.0, source_name="icanhazip")

    # Use as a callable, optionally bounded by a context
    limiter(ctx)
    make_request()

    # Or use as a context manager
    with limiter:
        make_request()
"""

import time
from threading import Lock

from external_ip.context import Context


class RateLimiter:
    """
    Thread-safe rate limiter.

    Enforces a minimum interval between calls. Each caller reserves the next
    free slot under the lock and then waits outside it, so a caller whose
    context finishes gives up without blocking the others.

    Args:
        requests_per_second: Maximum requests per second allowed
        source_name: Name of the source (for logging/debugging)

    Example:
        >>> limiter = RateLimiter(requests_per_second=10.0, source_name="api")
        >>> limiter()  # First call - no wait
        >>> limiter()  # Second call - waits if needed to maintain 10 req/sec
    """

    def __init__(self, requests_per_second: float, source_name: str = "default"):
        """
        Initialize rate limiter.

        Args:
            requests_per_second: Maximum requests per second (must be > 0)
            source_name: Name of the source (for debugging)

        Raises:
            ValueError: If requests_per_second <= 0
        """
        if requests_per_second <= 0:
            raise ValueError(f"requests_per_second must be > 0, got {requests_per_second}")

        self.requests_per_second = requests_per_second
        self.source_name = source_name
        self.min_interval = 1.0 / requests_per_second
        self._lock = Lock()
        self._next_slot = 0.0

    def __call__(self, ctx: Context | None = None) -> None:
        """
        Wait until this caller's slot comes up.

        Args:
            ctx: Optional context; if it finishes first, its error is raised
                and the slot is forfeited
        """
        with self._lock:
            now = time.monotonic()
            slot = max(now, self._next_slot)
            self._next_slot = slot + self.min_interval
            delay = slot - now

        if ctx is not None:
            if ctx.done() or (delay > 0 and ctx.wait(delay)):
                raise ctx.err()
        elif delay > 0:
            time.sleep(delay)

    def __enter__(self):
        """Context manager entry - enforces rate limiting."""
        self()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - no cleanup needed."""
        return False

    def reset(self) -> None:
        """
        Reset the rate limiter so the next call goes through immediately.

        Useful for testing.
        """
        with self._lock:
            self._next_slot = 0.0


# Shared rate limiters keyed by provider name
_rate_limiters: dict[str, RateLimiter] = {}
_rate_limiters_lock = Lock()


def get_rate_limiter(
    source_name: str,
    requests_per_second: float,
    create_if_missing: bool = True,
) -> RateLimiter | None:
    """
    Get or create a shared rate limiter for a provider.

    The first call for a name fixes its rate; later calls return the same
    instance regardless of the rate they pass.

    Args:
        source_name: Name of the provider (e.g., "icanhazip")
        requests_per_second: Maximum requests per second
        create_if_missing: If True, create a new limiter if one doesn't exist

    Returns:
        RateLimiter instance, or None if create_if_missing is False and limiter doesn't exist
    """
    with _rate_limiters_lock:
        if source_name in _rate_limiters:
            return _rate_limiters[source_name]

        if not create_if_missing:
            return None

        limiter = RateLimiter(requests_per_second=requests_per_second, source_name=source_name)
        _rate_limiters[source_name] = limiter
        return limiter
