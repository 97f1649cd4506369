"""
Unit tests for address parsing and normalization.
"""

from ipaddress import IPv4Address, IPv6Address

import pytest

from external_ip.domain.models import Protocol
from external_ip.domain.validation import matches_protocol, normalize_ip, parse_ip
from external_ip.exceptions import ConfigurationError, InvalidAddressError


class TestParseIP:
    """Tests for parse_ip."""

    def test_ipv4_with_whitespace(self):
        """Surrounding whitespace and newlines are trimmed."""
        assert parse_ip("  203.0.113.7\n") == IPv4Address("203.0.113.7")

    def test_ipv6(self):
        """IPv6 text parses to an IPv6Address."""
        assert parse_ip("2001:db8::1") == IPv6Address("2001:db8::1")

    def test_bytes(self):
        """Raw bytes are decoded first."""
        assert parse_ip(b"198.51.100.1\r\n") == IPv4Address("198.51.100.1")

    def test_address_object(self):
        """Address objects pass through normalization."""
        assert parse_ip(IPv6Address("::ffff:192.0.2.1")) == IPv4Address("192.0.2.1")

    @pytest.mark.parametrize("text", ["", "not an ip", "256.1.1.1", "<html>1.2.3.4</html>"])
    def test_invalid(self, text):
        """Anything that is not a bare address is rejected."""
        with pytest.raises(InvalidAddressError, match="returned an invalid IP"):
            parse_ip(text)

    def test_invalid_type(self):
        """Non-text values are rejected."""
        with pytest.raises(InvalidAddressError):
            parse_ip(1234)


class TestNormalizeIP:
    """Tests for normalize_ip."""

    def test_mapped_ipv6_collapses(self):
        """IPv4-mapped IPv6 addresses become IPv4."""
        assert normalize_ip(IPv6Address("::ffff:1.1.1.1")) == IPv4Address("1.1.1.1")

    def test_plain_addresses_unchanged(self):
        """Other addresses are returned as-is."""
        assert normalize_ip(IPv4Address("1.1.1.1")) == IPv4Address("1.1.1.1")
        assert normalize_ip(IPv6Address("2001:db8::1")) == IPv6Address("2001:db8::1")


class TestProtocol:
    """Tests for the Protocol filter."""

    def test_matches(self):
        """Filters match only their own family, ANY matches both."""
        v4, v6 = IPv4Address("1.1.1.1"), IPv6Address("2001:db8::1")

        assert matches_protocol(v4, Protocol.ANY)
        assert matches_protocol(v6, Protocol.ANY)
        assert matches_protocol(v4, Protocol.IPV4)
        assert not matches_protocol(v6, Protocol.IPV4)
        assert matches_protocol(v6, Protocol.IPV6)
        assert not matches_protocol(v4, Protocol.IPV6)

    def test_coerce(self):
        """Plain integers convert to Protocol members."""
        assert Protocol.coerce(0) is Protocol.ANY
        assert Protocol.coerce(4) is Protocol.IPV4
        assert Protocol.coerce(6) is Protocol.IPV6

    @pytest.mark.parametrize("value", [1, 2, 10, False, "4", None])
    def test_coerce_rejects(self, value):
        """Everything else is a configuration error."""
        with pytest.raises(ConfigurationError):
            Protocol.coerce(value)
