"""
External IP consensus with weighted voting.

This module implements the consensus algorithm for determining the external
IP address from multiple sources. Every registered voter is queried
concurrently; each successful answer adds the voter's weight to the address
it returned, and the address with the highest accumulated weight wins.

Registration (add_voter, use_ip_protocol) must not run while a resolution of
the same Consensus is in flight. Each resolution works on a snapshot of the
voters and protocol taken when it starts, but the consensus does not lock
against concurrent registration.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from threading import Event, Lock

from external_ip.config import get_protocol, get_timeout
from external_ip.constants import DEFAULT_PROVIDERS
from external_ip.context import Context
from external_ip.domain.models import Address, Protocol, ResolutionResult, Voter
from external_ip.domain.validation import parse_ip
from external_ip.exceptions import ConfigurationError, NoConsensusError
from external_ip.sources.base import Source
from external_ip.sources.http import HTTPSource

logger = logging.getLogger(__name__)


class Consensus:
    """
    Weighted vote over a set of IP sources.

    Args:
        timeout: Seconds a resolution may take when the caller passes no
            context (defaults to settings)
        protocol: Address family filter, 0/4/6 (defaults to settings)

    Raises:
        ConfigurationError: If timeout is not positive or protocol is invalid
    """

    def __init__(self, timeout: float | None = None, protocol: Protocol | int | None = None):
        if timeout is None:
            timeout = get_timeout()
        if timeout <= 0:
            raise ConfigurationError(f"timeout must be > 0, got {timeout}")

        self._timeout = float(timeout)
        self._protocol = Protocol.coerce(get_protocol() if protocol is None else protocol)
        self._voters: list[Voter] = []

    @property
    def voters(self) -> tuple[Voter, ...]:
        return tuple(self._voters)

    @property
    def protocol(self) -> Protocol:
        return self._protocol

    @property
    def timeout(self) -> float:
        return self._timeout

    def add_voter(self, source: Source, weight: int) -> None:
        """
        Add a voter to this consensus.

        Args:
            source: Source providing the vote (cannot be None)
            weight: Multiplier of the vote, at least 1

        Raises:
            ConfigurationError: If source is None or weight is below 1
        """
        if source is None:
            raise ConfigurationError("no sources provided")
        if isinstance(weight, bool) or not isinstance(weight, int):
            raise ConfigurationError(f"weight must be an integer, got {weight!r}")
        if weight == 0:
            raise ConfigurationError("weight cannot be 0")
        if weight < 0:
            raise ConfigurationError(f"weight must be positive, got {weight}")

        self._voters.append(Voter(source=source, weight=weight))

    def use_ip_protocol(self, protocol: Protocol | int) -> None:
        """
        Set the address family used by all subsequent resolutions.

        0 does not discriminate; 4 and 6 make every source connect over
        IPv4 or IPv6 only. On error the current filter is kept.

        Raises:
            ConfigurationError: If protocol is not 0, 4 or 6
        """
        self._protocol = Protocol.coerce(protocol)

    set_protocol_filter = use_ip_protocol

    def resolve_external_ip(self, ctx: Context | None = None) -> Address:
        """
        Resolve the external IP, returning the address with the most votes.

        The returned address is always valid when no exception is raised.

        Args:
            ctx: Context bounding the resolution. Without one, the resolution
                is bounded by this consensus' timeout.

        Raises:
            NoConsensusError: If no voter produced an address
            ContextError: If ctx finished before all voters answered
        """
        return self.resolve(ctx).ip

    def resolve(self, ctx: Context | None = None) -> ResolutionResult:
        """Like resolve_external_ip, but also report the tally behind the winner."""
        if ctx is None:
            # cancelled on exit, which tells abandoned voters to stop
            with Context.with_timeout(self._timeout) as own_ctx:
                return self._resolve(own_ctx)
        return self._resolve(ctx)

    def _resolve(self, ctx: Context) -> ResolutionResult:
        voters = tuple(self._voters)
        protocol = self._protocol

        if ctx.done():
            raise ctx.err()
        if not voters:
            raise NoConsensusError()

        # Shared by the voter threads of this call only. The closures below
        # keep it alive for voters still running after we return.
        tally: dict[str, int] = defaultdict(int)
        backers: dict[str, int] = defaultdict(int)
        first_voter: dict[str, int] = {}
        lock = Lock()
        pending = [len(voters)]
        # set when the context had already finished as the last voter returned
        finished_late = [False]
        wake = Event()

        def cast(index: int, voter: Voter) -> None:
            address = None
            try:
                answer = voter.source.ip(ctx, protocol)
                if answer is None:
                    logger.debug(f"Voter {index} ({voter.source!r}) returned no address")
                else:
                    address = parse_ip(answer)
            except Exception as e:
                logger.debug(f"Voter {index} ({voter.source!r}) failed: {e}")

            with lock:
                if address is not None:
                    key = str(address)
                    tally[key] += voter.weight
                    backers[key] += 1
                    # registration order, not arrival order
                    first_voter[key] = min(first_voter.get(key, index), index)
                pending[0] -= 1
                if pending[0] == 0:
                    finished_late[0] = ctx.done()
                    wake.set()

        def on_ctx_done(_ctx: Context) -> None:
            wake.set()

        ctx.add_done_callback(on_ctx_done)
        executor = ThreadPoolExecutor(
            max_workers=len(voters), thread_name_prefix="external-ip-voter"
        )
        try:
            for index, voter in enumerate(voters):
                executor.submit(cast, index, voter)
            wake.wait()
        finally:
            # never blocks; voters still running finish on their own
            executor.shutdown(wait=False)
            ctx.remove_done_callback(on_ctx_done)

        with lock:
            finished = pending[0] == 0 and not finished_late[0]
            scores = dict(tally)
            votes = dict(backers)
            order = dict(first_voter)

        if not finished:
            raise ctx.err()

        if not scores:
            raise NoConsensusError()

        # Highest weight wins; among equal weights, the address first voted
        # for by the earliest registered voter.
        winner = max(scores, key=lambda ip: (scores[ip], -order[ip]))
        top = scores[winner]
        tie = sum(1 for weight in scores.values() if weight == top) > 1

        logger.debug(f"Resolved external IP {winner} with weight {top}, tally={scores}")
        if tie:
            logger.debug(f"Tie at weight {top}, picked {winner} by voter order")

        return ResolutionResult(
            ip=parse_ip(winner),
            weight=top,
            votes=votes[winner],
            tally=scores,
            tie=tie,
        )

    def __len__(self) -> int:
        return len(self._voters)

    def __repr__(self) -> str:
        return (
            f"Consensus(voters={len(self._voters)}, protocol={self._protocol.name}, "
            f"timeout={self._timeout})"
        )


def default_consensus(
    providers: Iterable[tuple[str, int]] = DEFAULT_PROVIDERS,
    timeout: float | None = None,
    protocol: Protocol | int | None = None,
) -> Consensus:
    """
    Create a consensus filled with the recommended HTTP sources.

    TLS-protected providers get more weight than plain-text ones
    (see constants.DEFAULT_PROVIDERS).

    Args:
        providers: (url, weight) pairs to register as HTTPSources
        timeout: Default resolution timeout (defaults to settings)
        protocol: Address family filter (defaults to settings)

    Raises:
        ConfigurationError: If any provider has an invalid weight
    """
    consensus = Consensus(timeout=timeout, protocol=protocol)
    for url, weight in providers:
        consensus.add_voter(HTTPSource(url), weight)
    return consensus
