"""
Shared utilities for external_ip.
"""
