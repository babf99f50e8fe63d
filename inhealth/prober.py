"""ICMP echo prober for inhealth, built on icmplib."""

import itertools
import logging
import threading
from typing import Protocol

from icmplib import (
    ICMPError,
    ICMPLibError,
    ICMPRequest,
    ICMPv4Socket,
    NameLookupError,
    TimeoutExceeded,
)
from icmplib.utils import resolve, unique_identifier

logger = logging.getLogger(__name__)


class ProbeError(Exception):
    """A single probe attempt did not produce a round-trip time."""


class ProbeTimeout(ProbeError):
    """No matching echo reply arrived within the timeout."""


class ProbeTransportError(ProbeError):
    """The echo could not be sent or the network answered with an ICMP error."""


class ProberUnavailable(Exception):
    """The ICMP transport cannot be opened at all."""


class ResolutionError(Exception):
    """A host name could not be resolved to an IPv4 address."""


class Prober(Protocol):
    """Protocol defining the interface for echo probers."""

    def probe(self, address: str, timeout: float) -> float:
        """Send one echo request to address and return the RTT in seconds."""
        ...


def resolve_ipv4(host: str) -> str:
    """Resolve host to a single IPv4 address.

    Raises:
        ResolutionError: if the name does not resolve to any IPv4 address
    """
    if not host or not host.strip():
        raise ResolutionError("host cannot be empty")

    try:
        addresses = resolve(host.strip(), family=4)
    except (NameLookupError, OSError) as e:
        raise ResolutionError(f"failed to resolve {host}: {e}") from e

    if not addresses:
        raise ResolutionError(f"no IPv4 address for {host}")
    return addresses[0]


class IcmpProber:
    """Prober that sends real ICMP echo requests.

    One prober is shared by every host monitor and every in-flight probe.
    Each call opens its own socket, so concurrent calls (including calls to
    the same destination) never consume each other's replies; the only shared
    state is the sequence counter, which is lock-protected.

    Privileged mode uses raw sockets and needs root or CAP_NET_RAW.
    Unprivileged mode uses datagram ICMP sockets, which on Linux requires the
    caller's group to be inside ``net.ipv4.ping_group_range``.
    """

    def __init__(self, privileged: bool = True, source: str | None = None):
        """Initialize the prober and verify the ICMP transport can be opened.

        Args:
            privileged: Use raw sockets (True) or datagram ICMP sockets (False)
            source: Optional local IPv4 address to send from

        Raises:
            ProberUnavailable: if no ICMP socket can be opened
        """
        self.privileged = privileged
        self.source = source
        self._identifier = unique_identifier()
        self._sequence = itertools.count()
        self._sequence_lock = threading.Lock()

        try:
            self._open_socket().close()
        except ICMPLibError as e:
            raise ProberUnavailable(f"cannot open ICMP socket: {e}") from e

        logger.debug(
            "IcmpProber initialized: privileged=%s, source=%s, id=%d",
            privileged,
            source,
            self._identifier,
        )

    def probe(self, address: str, timeout: float) -> float:
        """Send one echo request and wait for its reply.

        Args:
            address: Destination IPv4 address (already resolved)
            timeout: Seconds to wait for the reply

        Returns:
            Round-trip time in seconds

        Raises:
            ProbeTimeout: no reply within timeout
            ProbeTransportError: socket failure or ICMP error reply
        """
        if timeout <= 0:
            raise ValueError("timeout must be positive")

        request = ICMPRequest(
            destination=address,
            id=self._identifier,
            sequence=self._next_sequence(),
        )

        try:
            with self._open_socket() as sock:
                sock.send(request)
                reply = sock.receive(request, timeout)
            reply.raise_for_status()
        except TimeoutExceeded as e:
            raise ProbeTimeout(f"no reply from {address} within {timeout:g}s") from e
        except ICMPError as e:
            raise ProbeTransportError(f"error reply for {address}: {e}") from e
        except ICMPLibError as e:
            raise ProbeTransportError(f"transport error for {address}: {e}") from e

        return reply.time - request.time

    def _next_sequence(self) -> int:
        with self._sequence_lock:
            return next(self._sequence) % 65536

    def _open_socket(self) -> ICMPv4Socket:
        return ICMPv4Socket(address=self.source, privileged=self.privileged)
