"""Mapping for whole firewall policies.

A policy carries a protocol filter and a traffic filter on each endpoint; the
protocol and traffic mappers do the real work here.
"""
from __future__ import annotations

from typing import Optional

from ..models import EndpointModel, FirewallPolicyModel, ProtocolFilterType
from ..wire import WireEndpoint, WireFirewallPolicy, WireProtocolFilter
from .protocol import protocol_from_wire, protocol_to_wire
from .traffic import traffic_filter_from_wire, traffic_filter_to_wire


# The filter type sent is the one matching the specifier shape actually built.
_SHAPE_FILTER_TYPES = {
    "preset": ProtocolFilterType.PRESET.value,
    "name": ProtocolFilterType.NAMED_PROTOCOL.value,
    "number": ProtocolFilterType.PROTOCOL_NUMBER.value,
}


def resolve_site_id(site_id: Optional[str], default_site_id: str) -> str:
    """Return the site a request for this entity must target."""
    return site_id or default_site_id


def _endpoint_to_wire(endpoint: Optional[EndpointModel]) -> Optional[WireEndpoint]:
    if endpoint is None:
        return None
    return WireEndpoint(
        zone_id=endpoint.zone_id or "",
        traffic_filter=traffic_filter_to_wire(endpoint.traffic_filter),
    )


def _endpoint_from_wire(endpoint: Optional[WireEndpoint]) -> Optional[EndpointModel]:
    if endpoint is None:
        return None
    return EndpointModel(
        zone_id=endpoint.zone_id or None,
        traffic_filter=traffic_filter_from_wire(endpoint.traffic_filter),
    )


def firewall_policy_to_wire(policy: Optional[FirewallPolicyModel]) -> Optional[WireFirewallPolicy]:
    if policy is None:
        return None

    wire = WireFirewallPolicy(
        name=policy.name,
        id=policy.id or "",
        enabled=True if policy.enabled is None else policy.enabled,
        action=policy.action or "",
        ip_version=policy.ip_version or "",
        source=_endpoint_to_wire(policy.source),
        destination=_endpoint_to_wire(policy.destination),
    )
    protocol = protocol_to_wire(policy.protocol_filter_type or "", policy.protocol or "")
    if protocol is not None:
        wire.protocol_filter = WireProtocolFilter(
            type=_SHAPE_FILTER_TYPES[next(iter(protocol))],
            protocol=protocol,
            match_opposite=bool(policy.protocol_match_opposite),
        )
    return wire


def firewall_policy_from_wire(
    wire: Optional[WireFirewallPolicy],
    site_id: Optional[str] = None,
) -> Optional[FirewallPolicyModel]:
    """Build the local policy; ``site_id`` is the site the policy was read from."""
    if wire is None:
        return None

    protocol_filter = wire.protocol_filter
    protocol = ""
    protocol_filter_type = None
    protocol_match_opposite = None
    if protocol_filter is not None:
        protocol = protocol_from_wire(protocol_filter.protocol)
        protocol_filter_type = protocol_filter.type or None
        protocol_match_opposite = protocol_filter.match_opposite
    return FirewallPolicyModel(
        name=wire.name,
        id=wire.id or None,
        site_id=site_id,
        enabled=wire.enabled,
        action=wire.action or None,
        ip_version=wire.ip_version or None,
        protocol_filter_type=protocol_filter_type,
        protocol=protocol or None,
        protocol_match_opposite=protocol_match_opposite,
        source=_endpoint_from_wire(wire.source),
        destination=_endpoint_from_wire(wire.destination),
    )
