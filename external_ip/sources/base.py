"""
Source capability shared by every IP provider.

A Source is the only thing the consensus knows about a provider: given a
context and an address family filter, it returns one address or raises.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from external_ip.context import Context
from external_ip.domain.models import Address, Protocol

# Turns the raw text returned by a provider into text holding just the IP.
# Surrounding whitespace is trimmed afterwards, so parsers need not bother.
ContentParser = Callable[[str], str]


class Source(ABC):
    """
    Provider of a single external IP vote.

    Implementations must:
    - return a valid, non-None address, or raise
    - only attempt connections in the requested family when protocol is not ANY
    - honor ctx, returning (by raising ctx.err()) promptly once it finishes
    """

    @abstractmethod
    def ip(self, ctx: Context, protocol: Protocol) -> Address:
        """Return this source's view of the external IP address."""
