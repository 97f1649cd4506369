"""
IP address parsing and normalization.

Every address entering the tally goes through normalize_ip so that one host
always maps to one canonical textual form.
"""

from ipaddress import IPv4Address, IPv6Address, ip_address

from external_ip.domain.models import Address, Protocol
from external_ip.exceptions import InvalidAddressError


def normalize_ip(address: Address) -> Address:
    """
    Return the canonical form of an address.

    IPv4-mapped IPv6 addresses (::ffff:a.b.c.d) collapse to their IPv4 form.
    """
    if isinstance(address, IPv6Address) and address.ipv4_mapped is not None:
        return address.ipv4_mapped
    return address


def parse_ip(value: "str | bytes | Address") -> Address:
    """
    Parse text (or an address object) into a normalized address.

    Surrounding whitespace is ignored.

    Raises:
        InvalidAddressError: If the value is not an IPv4 or IPv6 address
    """
    if isinstance(value, (IPv4Address, IPv6Address)):
        return normalize_ip(value)
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if not isinstance(value, str):
        raise InvalidAddressError(f"returned an invalid IP: {value!r}")

    text = value.strip()
    try:
        return normalize_ip(ip_address(text))
    except ValueError:
        raise InvalidAddressError(f"returned an invalid IP: {text}") from None


def matches_protocol(address: Address, protocol: Protocol) -> bool:
    """Check whether an address belongs to the family a filter asks for."""
    if protocol == Protocol.ANY:
        return True
    return address.version == int(protocol)
