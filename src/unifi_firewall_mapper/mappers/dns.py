"""Mapping between local DNS policies and the controller's wire form."""
from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..models import DNSPolicyModel
from ..wire import WireDNSPolicy


MX_RECORD = "MX_RECORD"
SRV_RECORD = "SRV_RECORD"


def dns_policy_to_wire(policy: Optional[DNSPolicyModel]) -> Optional[WireDNSPolicy]:
    """Build the wire DNS policy, copying only fields that are set.

    ``priority`` lands in the MX or SRV slot depending on the record type and
    is dropped for every other type.
    """
    if policy is None:
        return None

    wire = WireDNSPolicy(
        id=policy.id or "",
        type=policy.type,
        domain=policy.domain,
        enabled=True if policy.enabled is None else policy.enabled,
    )
    if policy.target is not None:
        wire.target = policy.target
    if policy.ip_address is not None:
        wire.ipv4_address = policy.ip_address
    if policy.cname is not None:
        wire.cname = policy.cname
    if policy.priority is not None:
        if policy.type == MX_RECORD:
            wire.mx_priority = policy.priority
        elif policy.type == SRV_RECORD:
            wire.srv_priority = policy.priority
    if policy.weight is not None:
        wire.srv_weight = policy.weight
    if policy.port is not None:
        wire.srv_port = policy.port
    if policy.text is not None:
        wire.txt_text = policy.text
    if policy.ttl is not None:
        wire.ttl = policy.ttl
    return wire


def _priority_from_wire(wire: WireDNSPolicy) -> Optional[int]:
    if wire.type == MX_RECORD and wire.mx_priority:
        return wire.mx_priority
    if wire.type == SRV_RECORD and wire.srv_priority:
        return wire.srv_priority
    return None


def dns_policy_from_wire(
    wire: Optional[WireDNSPolicy],
    prior: Optional[DNSPolicyModel] = None,
) -> Optional[DNSPolicyModel]:
    """Build the local DNS policy from a controller response.

    Optional fields the controller leaves empty keep their value from
    ``prior`` (the previously persisted state), so fields the API does not echo
    back do not show up as removed.
    """
    if wire is None:
        return None

    base = prior if prior is not None else DNSPolicyModel(type=wire.type, domain=wire.domain)
    updates: dict[str, object] = {
        "type": wire.type,
        "domain": wire.domain,
        "enabled": wire.enabled,
    }
    if wire.id:
        updates["id"] = wire.id
    if wire.target:
        updates["target"] = wire.target
    if wire.ipv4_address:
        updates["ip_address"] = wire.ipv4_address
    if wire.cname:
        updates["cname"] = wire.cname
    priority = _priority_from_wire(wire)
    if priority is not None:
        updates["priority"] = priority
    if wire.srv_weight:
        updates["weight"] = wire.srv_weight
    if wire.srv_port:
        updates["port"] = wire.srv_port
    if wire.txt_text:
        updates["text"] = wire.txt_text
    if wire.ttl:
        updates["ttl"] = wire.ttl
    return replace(base, **updates)
