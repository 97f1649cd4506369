"""
External IP sources.

This package contains the Source capability and its implementations:
- http: asks a web service which address the request came from (default)
- static: always answers with a fixed address
- rate_limited: spaces the calls made to any other source
"""

from external_ip.sources.base import ContentParser, Source
from external_ip.sources.http import FamilyAdapter, HTTPSource
from external_ip.sources.rate_limited import RateLimitedSource
from external_ip.sources.static import StaticSource

__all__ = [
    "ContentParser",
    "FamilyAdapter",
    "HTTPSource",
    "RateLimitedSource",
    "Source",
    "StaticSource",
]
