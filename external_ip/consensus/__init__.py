"""
External IP consensus logic.

This package contains the weighted-voting consensus that determines the
external IP from multiple sources.
"""

from external_ip.consensus.consensus import Consensus, default_consensus

__all__ = ["Consensus", "default_consensus"]
