"""
Rate-limited source wrapper.

Spaces the calls made to a wrapped source, so a consensus that is resolved
often does not hammer a provider. Any Source can be wrapped.
"""

from external_ip.context import Context
from external_ip.domain.models import Address, Protocol
from external_ip.sources.base import Source
from external_ip.utils.rate_limiting import RateLimiter, get_rate_limiter


class RateLimitedSource(Source):
    """
    Source that waits on a RateLimiter before delegating.

    Args:
        source: Source to delegate to
        requests_per_second: Rate for a private limiter (ignored if limiter is given)
        limiter: Limiter to share with other sources, or the name of a shared
            limiter from get_rate_limiter()
    """

    def __init__(
        self,
        source: Source,
        requests_per_second: float = 1.0,
        limiter: RateLimiter | str | None = None,
    ):
        if isinstance(limiter, str):
            limiter = get_rate_limiter(limiter, requests_per_second)
        self.source = source
        self.limiter = limiter or RateLimiter(requests_per_second, source_name=repr(source))

    def ip(self, ctx: Context, protocol: Protocol) -> Address:
        # raises ctx.err() if the context finishes while waiting
        self.limiter(ctx)
        return self.source.ip(ctx, protocol)

    def __repr__(self) -> str:
        return f"RateLimitedSource({self.source!r}, {self.limiter.requests_per_second}/s)"
