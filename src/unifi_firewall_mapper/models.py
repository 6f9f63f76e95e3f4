"""Local configuration models held by the state layer.

Every optional field is three-valued: ``None`` means unset, a falsy value
(empty string, ``False``, empty set) is known-empty, anything else is a known
value.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ProtocolFilterType(str, Enum):
    """Protocol specifier discriminators understood by the controller."""

    PRESET = "PRESET"
    NAMED_PROTOCOL = "NAMED_PROTOCOL"
    PROTOCOL_NUMBER = "PROTOCOL_NUMBER"


class IPItemType(str, Enum):
    """Per-item type derived for IP address filter entries."""

    IP_ADDRESS = "IP_ADDRESS"
    SUBNET = "SUBNET"


@dataclass(frozen=True)
class PortItemModel:
    """A single port or port range inside a port filter."""

    type: Optional[str] = None
    value: Optional[int] = None
    start: Optional[int] = None
    stop: Optional[int] = None


@dataclass(frozen=True)
class PortFilterModel:
    """Port filter with ordered items."""

    type: Optional[str] = None
    match_opposite: Optional[bool] = None
    items: tuple[PortItemModel, ...] = ()


@dataclass(frozen=True)
class IPAddressFilterModel:
    """IP address and subnet set."""

    type: Optional[str] = None
    match_opposite: Optional[bool] = None
    items: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class MACAddressFilterModel:
    """Structured MAC address set."""

    type: Optional[str] = None
    match_opposite: Optional[bool] = None
    items: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class NetworkFilterModel:
    """Set of controller network IDs."""

    type: Optional[str] = None
    match_opposite: Optional[bool] = None
    items: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class DomainFilterModel:
    """Set of domain names."""

    items: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class TrafficFilterModel:
    """Represents a traffic filter attached to a policy endpoint."""

    type: str
    mac_address: Optional[str] = None
    port_filter: Optional[PortFilterModel] = None
    ip_address_filter: Optional[IPAddressFilterModel] = None
    mac_address_filter: Optional[MACAddressFilterModel] = None
    network_filter: Optional[NetworkFilterModel] = None
    domain_filter: Optional[DomainFilterModel] = None


@dataclass(frozen=True)
class EndpointModel:
    """Source or destination side of a firewall policy."""

    zone_id: Optional[str] = None
    traffic_filter: Optional[TrafficFilterModel] = None


@dataclass(frozen=True)
class FirewallPolicyModel:
    """Represents a firewall policy as configured locally."""

    name: str
    id: Optional[str] = None
    site_id: Optional[str] = None
    enabled: Optional[bool] = None
    action: Optional[str] = None
    ip_version: Optional[str] = None
    protocol_filter_type: Optional[str] = None
    protocol: Optional[str] = None
    protocol_match_opposite: Optional[bool] = None
    source: Optional[EndpointModel] = None
    destination: Optional[EndpointModel] = None


@dataclass(frozen=True)
class DNSPolicyModel:
    """Represents a DNS policy (record or forwarding rule).

    ``priority`` is shared by MX and SRV records; the record ``type`` decides
    which wire field it belongs to.
    """

    type: str
    domain: str
    id: Optional[str] = None
    site_id: Optional[str] = None
    enabled: Optional[bool] = None
    target: Optional[str] = None
    ip_address: Optional[str] = None
    cname: Optional[str] = None
    priority: Optional[int] = None
    weight: Optional[int] = None
    port: Optional[int] = None
    text: Optional[str] = None
    ttl: Optional[int] = None
