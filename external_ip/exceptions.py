"""
Exception hierarchy for external_ip.

Configuration problems are raised immediately by the operation that detects
them. Resolution raises NoConsensusError or the context's own error. Source
errors are raised by Source implementations and swallowed by the consensus.
"""


class ExternalIPError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(ExternalIPError, ValueError):
    """Invalid voter, protocol filter, or settings value."""


class NoConsensusError(ExternalIPError):
    """Every voter failed or returned nothing usable."""

    def __init__(self, message: str = "no IP could be found"):
        super().__init__(message)


class ContextError(ExternalIPError):
    """Base class for errors reported by a finished Context."""


class CancelledError(ContextError):
    """The context was cancelled by its owner."""

    def __init__(self, message: str = "context canceled"):
        super().__init__(message)


class DeadlineExceededError(ContextError):
    """The context's deadline passed."""

    def __init__(self, message: str = "context deadline exceeded"):
        super().__init__(message)


class SourceError(ExternalIPError):
    """A source could not produce an address."""


class InvalidAddressError(SourceError):
    """A source produced text that is not an IP address."""
