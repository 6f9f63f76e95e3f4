"""Parser for controller responses saved as JSON."""
from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any, Mapping

from ..utils import ParseError
from ..wire import WireDNSPolicy, WireFirewallPolicy
from .config import read_json


@dataclass
class RemoteData:
    """Decoded controller payload."""

    firewall_policies: list[WireFirewallPolicy]
    dns_policies: list[WireDNSPolicy]


def _entries(document: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    raw = document.get(key)
    if raw is None:
        return []
    # List endpoints wrap results as {"data": [...]}.
    if isinstance(raw, Mapping):
        raw = raw.get("data")
    if not isinstance(raw, list):
        raise ParseError(f"Expected an array for {key}, got: {type(raw).__name__}")
    entries = [entry for entry in raw if isinstance(entry, Mapping)]
    if len(entries) != len(raw):
        logging.getLogger(__name__).warning("Skipped %s non-object entries in %s", len(raw) - len(entries), key)
    return entries


def load_remote_document(data: Any) -> RemoteData:
    """Decode a ``{"firewallPolicies": [...], "dnsPolicies": [...]}`` document."""
    if not isinstance(data, Mapping):
        raise ParseError(f"Expected an object for remote document, got: {type(data).__name__}")
    return RemoteData(
        firewall_policies=[WireFirewallPolicy.model_validate(entry) for entry in _entries(data, "firewallPolicies")],
        dns_policies=[WireDNSPolicy.model_validate(entry) for entry in _entries(data, "dnsPolicies")],
    )


def parse_remote_file(path: str) -> RemoteData:
    return load_remote_document(read_json(Path(path)))


def dump_remote_document(data: RemoteData) -> dict[str, Any]:
    return {
        "firewallPolicies": [policy.to_dict() for policy in data.firewall_policies],
        "dnsPolicies": [policy.to_dict() for policy in data.dns_policies],
    }
