"""Parser for JSON local configuration documents.

The document layout mirrors the local models with snake_case keys::

    {
      "firewall_policies": [{"name": ..., "source": {"traffic_filter": {...}}}],
      "dns_policies": [{"type": "A_RECORD", "domain": ..., "ip_address": ...}]
    }

A key that is missing or ``null`` is unset; any other value is known.
"""
from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
import json
from pathlib import Path
from typing import Any, Mapping, Optional

from ..mappers.traffic import port_item_sort_key
from ..models import (
    DNSPolicyModel,
    DomainFilterModel,
    EndpointModel,
    FirewallPolicyModel,
    IPAddressFilterModel,
    MACAddressFilterModel,
    NetworkFilterModel,
    PortFilterModel,
    PortItemModel,
    TrafficFilterModel,
)
from ..utils import ParseError, parse_optional_int


@dataclass
class ConfigData:
    """Parsed local configuration payload."""

    firewall_policies: list[FirewallPolicyModel]
    dns_policies: list[DNSPolicyModel]


def _mapping(value: Any, label: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ParseError(f"Expected an object for {label}, got: {type(value).__name__}")
    return value


def _optional_mapping(data: Mapping[str, Any], key: str, label: str) -> Optional[Mapping[str, Any]]:
    value = data.get(key)
    if value is None:
        return None
    return _mapping(value, f"{label}.{key}")


def _list(value: Any, label: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ParseError(f"Expected an array for {label}, got: {type(value).__name__}")
    return value


def _optional_str(data: Mapping[str, Any], key: str, label: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ParseError(f"Expected a string for {label}.{key}, got: {type(value).__name__}")
    return value


def _required_str(data: Mapping[str, Any], key: str, label: str) -> str:
    value = _optional_str(data, key, label)
    if value is None:
        raise ParseError(f"Missing required field {label}.{key}")
    return value


def _optional_bool(data: Mapping[str, Any], key: str, label: str) -> Optional[bool]:
    value = data.get(key)
    if value is not None and not isinstance(value, bool):
        raise ParseError(f"Expected a boolean for {label}.{key}, got: {type(value).__name__}")
    return value


def _string_set(data: Mapping[str, Any], label: str) -> frozenset[str]:
    items = _list(data.get("items"), f"{label}.items")
    for item in items:
        if not isinstance(item, str):
            raise ParseError(f"Expected string items in {label}.items, got: {type(item).__name__}")
    return frozenset(items)


def _parse_port_filter(data: Mapping[str, Any], label: str) -> PortFilterModel:
    items = []
    for index, raw_item in enumerate(_list(data.get("items"), f"{label}.items")):
        item_label = f"{label}.items[{index}]"
        item = _mapping(raw_item, item_label)
        items.append(
            PortItemModel(
                type=_optional_str(item, "type", item_label),
                value=parse_optional_int(item.get("value"), f"{item_label}.value"),
                start=parse_optional_int(item.get("start"), f"{item_label}.start"),
                stop=parse_optional_int(item.get("stop"), f"{item_label}.stop"),
            )
        )
    # Stored in the same order a read-back produces.
    items.sort(key=port_item_sort_key)
    return PortFilterModel(
        type=_optional_str(data, "type", label),
        match_opposite=_optional_bool(data, "match_opposite", label),
        items=tuple(items),
    )


def parse_traffic_filter(data: Mapping[str, Any], label: str = "traffic_filter") -> TrafficFilterModel:
    """Build a TrafficFilterModel from its JSON object."""
    port_filter = _optional_mapping(data, "port_filter", label)
    set_filters: dict[str, Any] = {}
    for key, model in (
        ("ip_address_filter", IPAddressFilterModel),
        ("mac_address_filter", MACAddressFilterModel),
        ("network_filter", NetworkFilterModel),
    ):
        raw = _optional_mapping(data, key, label)
        if raw is None:
            set_filters[key] = None
            continue
        sub_label = f"{label}.{key}"
        set_filters[key] = model(
            type=_optional_str(raw, "type", sub_label),
            match_opposite=_optional_bool(raw, "match_opposite", sub_label),
            items=_string_set(raw, sub_label),
        )
    domain_filter = _optional_mapping(data, "domain_filter", label)
    return TrafficFilterModel(
        type=_required_str(data, "type", label),
        mac_address=_optional_str(data, "mac_address", label),
        port_filter=_parse_port_filter(port_filter, f"{label}.port_filter") if port_filter is not None else None,
        domain_filter=(
            DomainFilterModel(items=_string_set(domain_filter, f"{label}.domain_filter"))
            if domain_filter is not None
            else None
        ),
        **set_filters,
    )


def _parse_endpoint(data: Mapping[str, Any], key: str, label: str) -> Optional[EndpointModel]:
    raw = _optional_mapping(data, key, label)
    if raw is None:
        return None
    sub_label = f"{label}.{key}"
    traffic_filter = _optional_mapping(raw, "traffic_filter", sub_label)
    return EndpointModel(
        zone_id=_optional_str(raw, "zone_id", sub_label),
        traffic_filter=(
            parse_traffic_filter(traffic_filter, f"{sub_label}.traffic_filter") if traffic_filter is not None else None
        ),
    )


def parse_firewall_policy(data: Mapping[str, Any], label: str = "firewall_policy") -> FirewallPolicyModel:
    return FirewallPolicyModel(
        name=_required_str(data, "name", label),
        id=_optional_str(data, "id", label),
        site_id=_optional_str(data, "site_id", label),
        enabled=_optional_bool(data, "enabled", label),
        action=_optional_str(data, "action", label),
        ip_version=_optional_str(data, "ip_version", label),
        protocol_filter_type=_optional_str(data, "protocol_filter_type", label),
        protocol=_optional_str(data, "protocol", label),
        protocol_match_opposite=_optional_bool(data, "protocol_match_opposite", label),
        source=_parse_endpoint(data, "source", label),
        destination=_parse_endpoint(data, "destination", label),
    )


def parse_dns_policy(data: Mapping[str, Any], label: str = "dns_policy") -> DNSPolicyModel:
    enabled = _optional_bool(data, "enabled", label)
    return DNSPolicyModel(
        type=_required_str(data, "type", label),
        domain=_required_str(data, "domain", label),
        id=_optional_str(data, "id", label),
        site_id=_optional_str(data, "site_id", label),
        enabled=True if enabled is None else enabled,
        target=_optional_str(data, "target", label),
        ip_address=_optional_str(data, "ip_address", label),
        cname=_optional_str(data, "cname", label),
        priority=parse_optional_int(data.get("priority"), f"{label}.priority"),
        weight=parse_optional_int(data.get("weight"), f"{label}.weight"),
        port=parse_optional_int(data.get("port"), f"{label}.port"),
        text=_optional_str(data, "text", label),
        ttl=parse_optional_int(data.get("ttl"), f"{label}.ttl"),
    )


def load_config_document(data: Any) -> ConfigData:
    """Parse a decoded JSON document into local models."""
    document = _mapping(data, "document")
    return ConfigData(
        firewall_policies=[
            parse_firewall_policy(_mapping(item, f"firewall_policies[{index}]"), f"firewall_policies[{index}]")
            for index, item in enumerate(_list(document.get("firewall_policies"), "firewall_policies"))
        ],
        dns_policies=[
            parse_dns_policy(_mapping(item, f"dns_policies[{index}]"), f"dns_policies[{index}]")
            for index, item in enumerate(_list(document.get("dns_policies"), "dns_policies"))
        ],
    )


def read_json(path: Path) -> Any:
    """Read and decode a JSON file, raising ParseError on invalid content."""
    try:
        with path.open(encoding="utf-8") as handle:
            return json.load(handle)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON in {path}: {exc}") from exc


def parse_config_file(path: str) -> ConfigData:
    return load_config_document(read_json(Path(path)))


def _dump_value(value: Any) -> Any:
    if isinstance(value, frozenset):
        return sorted(value)
    if isinstance(value, tuple):
        return [_dump_value(item) for item in value]
    if is_dataclass(value):
        return _dump_model(value)
    return value


def _dump_model(model: Any) -> dict[str, Any]:
    """Serialize a model, leaving out unset fields."""
    return {
        model_field.name: _dump_value(getattr(model, model_field.name))
        for model_field in fields(model)
        if getattr(model, model_field.name) is not None
    }


def dump_config_document(data: ConfigData) -> dict[str, Any]:
    """Inverse of load_config_document."""
    return {
        "firewall_policies": [_dump_model(policy) for policy in data.firewall_policies],
        "dns_policies": [_dump_model(policy) for policy in data.dns_policies],
    }
