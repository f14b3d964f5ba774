"""
Network perimeter check for inbound connections.

Coarse allow-listing on the transport address. It is not authentication:
the deployment must keep the sidecar on a network only trusted callers reach.
"""

import ipaddress
from enum import Enum
from typing import Iterable, Optional, Tuple, Union

IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]
IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

DEFAULT_ALLOWED_NETWORKS = (
    "127.0.0.0/8",
    "::1/128",
    "10.0.0.0/8",
    "172.16.0.0/12",
    "192.168.0.0/16",
)


class PerimeterDecision(str, Enum):
    """Terminal classification of a connection."""
    ALLOWED = "allowed"
    REJECTED = "rejected"


def parse_address(raw: Optional[str]) -> Optional[IPAddress]:
    """Parse a transport address, unwrapping IPv4-mapped IPv6."""
    if not raw:
        return None
    candidate = raw.strip()
    # Strip a zone index such as fe80::1%eth0
    if "%" in candidate:
        candidate = candidate.split("%", 1)[0]
    try:
        address = ipaddress.ip_address(candidate)
    except ValueError:
        return None
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        return address.ipv4_mapped
    return address


class NetworkPerimeter:
    """Allow-list predicate over caller addresses."""

    def __init__(self, networks: Iterable[str] = DEFAULT_ALLOWED_NETWORKS):
        self.networks: Tuple[IPNetwork, ...] = tuple(
            ipaddress.ip_network(network, strict=False) for network in networks
        )
        if not self.networks:
            raise ValueError("Network perimeter needs at least one allowed network")

    def is_allowed(self, raw_address: Optional[str]) -> bool:
        address = parse_address(raw_address)
        if address is None:
            return False
        return any(
            address.version == network.version and address in network
            for network in self.networks
        )

    def classify(self, raw_address: Optional[str]) -> PerimeterDecision:
        """Classify a connection once; the result is final."""
        if self.is_allowed(raw_address):
            return PerimeterDecision.ALLOWED
        return PerimeterDecision.REJECTED
