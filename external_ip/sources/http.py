"""
HTTP IP source.

The default source: asks a "what is my IP" web service for the address it
sees the request coming from, via a single HTTP GET.
"""

import logging
from collections.abc import Callable

import requests
from requests.adapters import HTTPAdapter

from external_ip.config import get_http_timeout, get_user_agent
from external_ip.constants import MAX_RESPONSE_BYTES, RESPONSE_CHUNK_SIZE
from external_ip.context import Context
from external_ip.domain.models import Address, Protocol
from external_ip.domain.validation import parse_ip
from external_ip.exceptions import SourceError
from external_ip.sources.base import ContentParser, Source

logger = logging.getLogger(__name__)

# Binding the local end of a socket to the wildcard address of one family
# makes connection attempts in the other family fail at bind time, so only
# addresses of the requested family are ever dialed.
_SOURCE_ADDRESSES = {
    Protocol.IPV4: ("0.0.0.0", 0),
    Protocol.IPV6: ("::", 0),
}


class FamilyAdapter(HTTPAdapter):
    """
    Transport adapter restricting connections to one address family.

    Args:
        protocol: Address family filter; ANY leaves the transport untouched
    """

    def __init__(self, protocol: Protocol = Protocol.ANY, **kwargs):
        # init_poolmanager runs inside HTTPAdapter.__init__
        self.protocol = Protocol(protocol)
        super().__init__(**kwargs)

    def init_poolmanager(self, connections, maxsize, block=False, **pool_kwargs):
        source_address = _SOURCE_ADDRESSES.get(self.protocol)
        if source_address is not None:
            pool_kwargs["source_address"] = source_address
        super().init_poolmanager(connections, maxsize, block=block, **pool_kwargs)


class HTTPSource(Source):
    """
    Source requesting the external IP from a URL.

    Every call uses a fresh session with a single-connection pool and
    "Connection: close", so no idle connections outlive the call.

    Args:
        url: Endpoint answering with the caller's IP (optionally wrapped in
            other content, see parser)
        parser: Optional function extracting the IP text from the raw body
        session_factory: Callable creating the requests.Session to use
        user_agent: User-Agent header (defaults to settings)
        timeout: Per-request ceiling in seconds (defaults to settings)
    """

    def __init__(
        self,
        url: str,
        parser: ContentParser | None = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
        user_agent: str | None = None,
        timeout: float | None = None,
    ):
        self.url = url
        self.parser = parser
        self.session_factory = session_factory
        self.user_agent = user_agent
        self.timeout = timeout

    def with_parser(self, parser: ContentParser) -> "HTTPSource":
        """Set the content parser and return this source, to allow for chaining."""
        self.parser = parser
        return self

    def ip(self, ctx: Context, protocol: Protocol) -> Address:
        """
        Request the external IP from this source's URL.

        Args:
            ctx: Context bounding the request
            protocol: Address family to connect over

        Returns:
            Parsed and normalized IP address

        Raises:
            ContextError: If ctx finished before or during the request
            SourceError: On transport errors, non-2xx responses, or oversized bodies
            InvalidAddressError: If the (parsed) body is not an IP address
        """
        if ctx.done():
            raise ctx.err()

        session = self._build_session(Protocol(protocol))
        try:
            raw = self._fetch(session, ctx)
        except requests.RequestException as e:
            if ctx.done():
                raise ctx.err() from e
            raise SourceError(f"request to {self.url} failed: {e}") from e
        finally:
            session.close()

        if self.parser is not None:
            raw = self.parser(raw)

        return parse_ip(raw)

    def _build_session(self, protocol: Protocol) -> requests.Session:
        session = self.session_factory()
        adapter = FamilyAdapter(protocol, pool_connections=1, pool_maxsize=1)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def _request_timeout(self, ctx: Context) -> float:
        timeout = self.timeout if self.timeout is not None else get_http_timeout()
        remaining = ctx.remaining()
        if remaining is not None:
            timeout = min(timeout, remaining)
        return timeout

    def _fetch(self, session: requests.Session, ctx: Context) -> str:
        headers = {
            "User-Agent": self.user_agent or get_user_agent(),
            "Connection": "close",
        }
        response = session.get(
            self.url, headers=headers, timeout=self._request_timeout(ctx), stream=True
        )
        try:
            if not 200 <= response.status_code < 300:
                raise SourceError(f"{self.url} returned HTTP {response.status_code}")

            body = bytearray()
            for chunk in response.iter_content(chunk_size=RESPONSE_CHUNK_SIZE):
                if ctx.done():
                    raise ctx.err()
                body.extend(chunk)
                if len(body) > MAX_RESPONSE_BYTES:
                    raise SourceError(f"{self.url} returned more than {MAX_RESPONSE_BYTES} bytes")

            return bytes(body).decode(response.encoding or "utf-8", errors="replace")
        finally:
            response.close()

    def __repr__(self) -> str:
        return f"HTTPSource({self.url!r})"
