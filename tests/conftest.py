"""
Pytest configuration and shared fixtures for external_ip tests.
"""

import threading
from ipaddress import ip_address

import pytest

from external_ip.config import get_settings
from external_ip.context import Context
from external_ip.domain.models import Protocol
from external_ip.sources.base import Source


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make every test load settings from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeSource(Source):
    """
    Scriptable source for consensus tests.

    Returns address (or None), or raises error, after an optional delay
    that is cut short when the context finishes.
    """

    def __init__(self, address: str | None = None, error: Exception | None = None, delay=0.0):
        self.address = address
        self.error = error
        self.delay = delay
        self.calls: list[Protocol] = []

    def ip(self, ctx: Context, protocol: Protocol):
        self.calls.append(protocol)
        if self.delay and ctx.wait(self.delay):
            raise ctx.err()
        if self.error is not None:
            raise self.error
        if self.address is None:
            return None
        return ip_address(self.address)


class StubbornSource(Source):
    """Source that ignores its context and answers only once released."""

    def __init__(self, address: str):
        self.address = address
        self.started = threading.Event()
        self.release = threading.Event()
        self.returned = threading.Event()

    def ip(self, ctx: Context, protocol: Protocol):
        self.started.set()
        self.release.wait(5.0)
        self.returned.set()
        return ip_address(self.address)


@pytest.fixture
def fake_source():
    """Factory for FakeSource instances."""
    return FakeSource


@pytest.fixture
def stubborn_source():
    """Factory for StubbornSource instances."""
    return StubbornSource
