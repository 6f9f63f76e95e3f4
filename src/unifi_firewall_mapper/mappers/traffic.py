"""Mapping between local traffic filters and the controller's wire form."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from ..models import (
    DomainFilterModel,
    IPAddressFilterModel,
    IPItemType,
    MACAddressFilterModel,
    NetworkFilterModel,
    PortFilterModel,
    PortItemModel,
    TrafficFilterModel,
)
from ..wire import (
    WireDomainFilter,
    WireIPAddressFilter,
    WireIPAddressItem,
    WireMACAddressFilter,
    WireNetworkFilter,
    WirePortFilter,
    WirePortItem,
    WireTrafficFilter,
)


DOMAIN_FILTER_TYPE = "DOMAINS"
MAC_FILTER_TYPE = "MAC_ADDRESSES"
NETWORK_FILTER_TYPE = "NETWORK"


def ip_item_type(value: str) -> str:
    """Derive the wire item type for an IP filter entry."""
    if "/" in value:
        return IPItemType.SUBNET.value
    return IPItemType.IP_ADDRESS.value


def port_item_sort_key(item: PortItemModel) -> tuple[int, int, int, str]:
    """Total order for port items; unset numbers sort lowest."""
    return (item.value or 0, item.start or 0, item.stop or 0, item.type or "")


def _port_filter_to_wire(port_filter: PortFilterModel) -> WirePortFilter:
    wire = WirePortFilter(
        type=port_filter.type or "",
        match_opposite=bool(port_filter.match_opposite),
    )
    for item in port_filter.items:
        wire_item = WirePortItem(type=item.type or "")
        if item.value is not None:
            wire_item.value = item.value
        if item.start is not None:
            wire_item.start = item.start
        if item.stop is not None:
            wire_item.stop = item.stop
        wire.items.append(wire_item)
    return wire


def traffic_filter_to_wire(traffic_filter: Optional[TrafficFilterModel]) -> Optional[WireTrafficFilter]:
    """Build the wire traffic filter, populating only explicitly set fields."""
    if traffic_filter is None:
        return None

    wire = WireTrafficFilter(type=traffic_filter.type)

    if traffic_filter.mac_address is not None:
        wire.mac_address_filter = traffic_filter.mac_address

    if traffic_filter.port_filter is not None:
        wire.port_filter = _port_filter_to_wire(traffic_filter.port_filter)

    ip_filter = traffic_filter.ip_address_filter
    if ip_filter is not None:
        wire.ip_address_filter = WireIPAddressFilter(
            type=ip_filter.type or "",
            match_opposite=bool(ip_filter.match_opposite),
            items=[WireIPAddressItem(type=ip_item_type(value), value=value) for value in sorted(ip_filter.items)],
        )

    # The structured set replaces the scalar MAC when both are configured.
    if traffic_filter.mac_address_filter is not None:
        wire.mac_address_filter = WireMACAddressFilter(macAddresses=sorted(traffic_filter.mac_address_filter.items))

    if traffic_filter.network_filter is not None:
        wire.network_filter = WireNetworkFilter(
            match_opposite=bool(traffic_filter.network_filter.match_opposite),
            network_ids=sorted(traffic_filter.network_filter.items),
        )

    if traffic_filter.domain_filter is not None:
        # TODO: send the configured domain filter type once the controller documents other subtypes.
        wire.domain_filter = WireDomainFilter(
            type=DOMAIN_FILTER_TYPE,
            domains=sorted(traffic_filter.domain_filter.items),
        )

    return wire


def _structured_mac_filter(mac_addresses: list[str]) -> MACAddressFilterModel:
    return MACAddressFilterModel(
        type=MAC_FILTER_TYPE,
        match_opposite=False,
        items=frozenset(mac_addresses),
    )


def _mac_filter_from_wire(value: Any) -> tuple[Optional[str], Optional[MACAddressFilterModel]]:
    """Resolve the polymorphic MAC field into (scalar, structured)."""
    if isinstance(value, str):
        return value, None
    if isinstance(value, WireMACAddressFilter):
        return None, _structured_mac_filter(value.mac_addresses)
    if isinstance(value, Mapping):
        macs = value.get("macAddresses")
        if isinstance(macs, list):
            return None, _structured_mac_filter([mac for mac in macs if isinstance(mac, str)])
        logging.getLogger(__name__).debug("Ignoring MAC address filter without macAddresses: %r", value)
    return None, None


def _port_filter_from_wire(port_filter: WirePortFilter) -> PortFilterModel:
    items = [
        PortItemModel(
            type=item.type,
            value=item.value or None,
            start=item.start or None,
            stop=item.stop or None,
        )
        for item in port_filter.items
    ]
    # The controller does not keep item order stable between reads.
    items.sort(key=port_item_sort_key)
    return PortFilterModel(
        type=port_filter.type,
        match_opposite=port_filter.match_opposite,
        items=tuple(items),
    )


def traffic_filter_from_wire(wire: Optional[WireTrafficFilter]) -> Optional[TrafficFilterModel]:
    """Build the local traffic filter from a controller response."""
    if wire is None:
        return None

    mac_address, mac_address_filter = _mac_filter_from_wire(wire.mac_address_filter)

    port_filter = None
    if wire.port_filter is not None:
        port_filter = _port_filter_from_wire(wire.port_filter)

    ip_address_filter = None
    if wire.ip_address_filter is not None:
        ip_address_filter = IPAddressFilterModel(
            type=wire.ip_address_filter.type,
            match_opposite=wire.ip_address_filter.match_opposite,
            items=frozenset(item.value for item in wire.ip_address_filter.items),
        )

    network_filter = None
    if wire.network_filter is not None:
        network_filter = NetworkFilterModel(
            type=NETWORK_FILTER_TYPE,
            match_opposite=wire.network_filter.match_opposite,
            items=frozenset(wire.network_filter.network_ids),
        )

    domain_filter = None
    if wire.domain_filter is not None:
        domain_filter = DomainFilterModel(items=frozenset(wire.domain_filter.domains))

    return TrafficFilterModel(
        type=wire.type,
        mac_address=mac_address,
        port_filter=port_filter,
        ip_address_filter=ip_address_filter,
        mac_address_filter=mac_address_filter,
        network_filter=network_filter,
        domain_filter=domain_filter,
    )
