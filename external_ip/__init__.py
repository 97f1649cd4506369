"""
external_ip: resolve the host's external IP address by weighted consensus.

Usage:
    from external_ip import default_consensus

    consensus = default_consensus()
    ip = consensus.resolve_external_ip()
"""

from external_ip.consensus import Consensus, default_consensus
from external_ip.context import Context
from external_ip.domain.models import Address, Protocol, ResolutionResult, Voter
from external_ip.exceptions import (
    CancelledError,
    ConfigurationError,
    ContextError,
    DeadlineExceededError,
    ExternalIPError,
    InvalidAddressError,
    NoConsensusError,
    SourceError,
)
from external_ip.sources import (
    ContentParser,
    HTTPSource,
    RateLimitedSource,
    Source,
    StaticSource,
)

__version__ = "0.1.0"

__all__ = [
    # Consensus
    "Consensus",
    "default_consensus",
    "Context",
    # Models
    "Address",
    "Protocol",
    "ResolutionResult",
    "Voter",
    # Sources
    "ContentParser",
    "HTTPSource",
    "RateLimitedSource",
    "Source",
    "StaticSource",
    # Errors
    "CancelledError",
    "ConfigurationError",
    "ContextError",
    "DeadlineExceededError",
    "ExternalIPError",
    "InvalidAddressError",
    "NoConsensusError",
    "SourceError",
]
