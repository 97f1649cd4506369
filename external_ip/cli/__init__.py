"""
CLI utilities for external_ip.

This package provides the external-ip command and its logging setup.
"""

from external_ip.cli.commands import main
from external_ip.cli.logging import setup_logging

__all__ = [
    "main",
    "setup_logging",
]
