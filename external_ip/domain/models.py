"""
Data models for external IP resolution.

These dataclasses represent the registered voters of a consensus and the
outcome of a single resolution.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from ipaddress import IPv4Address, IPv6Address
from typing import TYPE_CHECKING

from external_ip.exceptions import ConfigurationError

if TYPE_CHECKING:
    from external_ip.sources.base import Source

Address = IPv4Address | IPv6Address


class Protocol(IntEnum):
    """Address family filter applied to every voter of a resolution."""

    ANY = 0
    IPV4 = 4
    IPV6 = 6

    @classmethod
    def coerce(cls, value: "Protocol | int") -> "Protocol":
        """
        Convert 0, 4 or 6 to a Protocol.

        Raises:
            ConfigurationError: For any other value
        """
        if isinstance(value, bool):
            raise ConfigurationError("only ipv4 and ipv6 protocol is supported")
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError("only ipv4 and ipv6 protocol is supported") from None


@dataclass(frozen=True)
class Voter:
    """A source together with the weight of its vote (acts as a multiplier)."""

    source: "Source"
    weight: int  # at least 1


@dataclass(frozen=True)
class ResolutionResult:
    """Final result of one resolution."""

    ip: Address
    weight: int  # accumulated weight of the winning address
    votes: int  # number of voters that backed the winning address
    tally: dict[str, int] = field(default_factory=dict)  # address -> weight
    tie: bool = False  # another address reached the same weight
