"""
Address models and validation utilities.
"""

from external_ip.domain.models import Address, Protocol, ResolutionResult, Voter
from external_ip.domain.validation import matches_protocol, normalize_ip, parse_ip

__all__ = [
    "Address",
    "Protocol",
    "ResolutionResult",
    "Voter",
    "matches_protocol",
    "normalize_ip",
    "parse_ip",
]
