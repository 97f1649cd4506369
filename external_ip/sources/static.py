"""
Static IP source.

Always answers with the same address. Useful to pin a known address into a
consensus (e.g. from configuration) and as a deterministic voter in tests.
"""

from external_ip.context import Context
from external_ip.domain.models import Address, Protocol
from external_ip.domain.validation import matches_protocol, parse_ip
from external_ip.exceptions import ConfigurationError, InvalidAddressError, SourceError
from external_ip.sources.base import Source


class StaticSource(Source):
    """
    Source returning a fixed address.

    Args:
        address: IP address as text or an ipaddress object

    Raises:
        ConfigurationError: If address is not a valid IP address
    """

    def __init__(self, address: "str | Address"):
        try:
            self._address = parse_ip(address)
        except InvalidAddressError as e:
            raise ConfigurationError(str(e)) from e

    @property
    def address(self) -> Address:
        return self._address

    def ip(self, ctx: Context, protocol: Protocol) -> Address:
        if ctx.done():
            raise ctx.err()
        if not matches_protocol(self._address, protocol):
            raise SourceError(f"{self._address} is not an IPv{int(protocol)} address")
        return self._address

    def __repr__(self) -> str:
        return f"StaticSource({str(self._address)!r})"
