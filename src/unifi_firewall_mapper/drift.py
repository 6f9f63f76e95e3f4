"""Drift detection between local configuration and controller state."""
from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
import logging
from typing import Any, Callable, Iterable

from .mappers.dns import dns_policy_from_wire, dns_policy_to_wire
from .mappers.policy import firewall_policy_from_wire, firewall_policy_to_wire
from .mappers.traffic import traffic_filter_from_wire, traffic_filter_to_wire
from .models import DNSPolicyModel, FirewallPolicyModel, TrafficFilterModel
from .wire import WireDNSPolicy, WireFirewallPolicy


class DriftStatus(str, Enum):
    """Reconciliation outcome for a single entity."""

    IN_SYNC = "IN_SYNC"
    DRIFTED = "DRIFTED"
    MISSING_REMOTE = "MISSING_REMOTE"
    MISSING_LOCAL = "MISSING_LOCAL"


@dataclass(frozen=True)
class DriftDetail:
    """Detailed information about how an entity compares to the controller."""

    kind: str
    key: str
    status: DriftStatus
    fields: tuple[str, ...] = ()


# Identity fields are assigned by the controller and never count as drift.
_IDENTITY_FIELDS = frozenset({"id", "site_id"})

_MAPPERS: dict[type, tuple[Callable[[Any], Any], Callable[[Any], Any]]] = {
    TrafficFilterModel: (traffic_filter_to_wire, traffic_filter_from_wire),
    FirewallPolicyModel: (firewall_policy_to_wire, firewall_policy_from_wire),
    DNSPolicyModel: (dns_policy_to_wire, dns_policy_from_wire),
}


def diff_fields(expected: Any, actual: Any, prefix: str = "") -> list[str]:
    """Return dotted paths of fields that differ between two models."""
    if is_dataclass(expected) and is_dataclass(actual) and type(expected) is type(actual):
        paths: list[str] = []
        for model_field in fields(expected):
            if not prefix and model_field.name in _IDENTITY_FIELDS:
                continue
            path = f"{prefix}.{model_field.name}" if prefix else model_field.name
            paths.extend(diff_fields(getattr(expected, model_field.name), getattr(actual, model_field.name), path))
        return paths
    if expected != actual:
        return [prefix or "<root>"]
    return []


def check_drift(local: Any, wire: Any, kind: str = "", key: str = "") -> DriftDetail:
    """Compare a local model with the controller's copy of it.

    The local model is pushed through a write and read-back first, so the
    comparison is between what state would hold after an apply and what it
    holds now.
    """
    try:
        to_wire, from_wire = _MAPPERS[type(local)]
    except KeyError as exc:
        raise TypeError(f"No mapper registered for {type(local).__name__}") from exc
    expected = from_wire(to_wire(local))
    actual = from_wire(wire)
    changed = tuple(diff_fields(expected, actual))
    status = DriftStatus.DRIFTED if changed else DriftStatus.IN_SYNC
    logging.getLogger(__name__).debug("Drift check %s %s: %s %s", kind, key, status.value, changed)
    return DriftDetail(kind=kind or type(local).__name__, key=key, status=status, fields=changed)


def dns_policy_key(policy_type: str, domain: str) -> str:
    return f"{policy_type}:{domain}"


def _reconcile(
    kind: str,
    local_items: dict[str, Any],
    remote_items: dict[str, Any],
) -> list[DriftDetail]:
    details: list[DriftDetail] = []
    for key, local in local_items.items():
        remote = remote_items.get(key)
        if remote is None:
            details.append(DriftDetail(kind=kind, key=key, status=DriftStatus.MISSING_REMOTE))
            continue
        details.append(check_drift(local, remote, kind=kind, key=key))
    for key in sorted(set(remote_items) - set(local_items)):
        details.append(DriftDetail(kind=kind, key=key, status=DriftStatus.MISSING_LOCAL))
    return details


def _index(items: Iterable[Any], key: Callable[[Any], str], kind: str, side: str) -> dict[str, Any]:
    indexed: dict[str, Any] = {}
    for item in items:
        item_key = key(item)
        if item_key in indexed:
            logging.getLogger(__name__).warning("Duplicate %s %s in %s input, keeping the last one", kind, item_key, side)
        indexed[item_key] = item
    return indexed


def reconcile_policies(
    local: Iterable[FirewallPolicyModel],
    remote: Iterable[WireFirewallPolicy],
) -> list[DriftDetail]:
    """Pair firewall policies by name and report drift for each."""
    return _reconcile(
        "firewall_policy",
        _index(local, lambda policy: policy.name, "firewall policy", "local"),
        _index(remote, lambda policy: policy.name, "firewall policy", "remote"),
    )


def reconcile_dns_policies(
    local: Iterable[DNSPolicyModel],
    remote: Iterable[WireDNSPolicy],
) -> list[DriftDetail]:
    """Pair DNS policies by (type, domain) and report drift for each."""
    return _reconcile(
        "dns_policy",
        _index(local, lambda policy: dns_policy_key(policy.type, policy.domain), "DNS policy", "local"),
        _index(remote, lambda policy: dns_policy_key(policy.type, policy.domain), "DNS policy", "remote"),
    )


def summarize(details: Iterable[DriftDetail]) -> dict[DriftStatus, int]:
    counts: dict[DriftStatus, int] = {status: 0 for status in DriftStatus}
    for detail in details:
        counts[detail.status] += 1
    return counts
