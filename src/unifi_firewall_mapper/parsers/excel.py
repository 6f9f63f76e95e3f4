"""Parser for Excel-based firewall and DNS policy workbooks."""
from __future__ import annotations

from typing import Any, Optional

from openpyxl import load_workbook

from ..mappers.traffic import MAC_FILTER_TYPE, NETWORK_FILTER_TYPE, port_item_sort_key
from ..models import (
    DNSPolicyModel,
    DomainFilterModel,
    EndpointModel,
    FirewallPolicyModel,
    IPAddressFilterModel,
    MACAddressFilterModel,
    NetworkFilterModel,
    PortFilterModel,
    TrafficFilterModel,
)
from ..utils import ParseError, parse_bool, parse_optional_int, parse_port_item, split_members
from .config import ConfigData


PORT_FILTER_TYPE = "PORTS"
IP_FILTER_TYPE = "IP_ADDRESSES"

FIREWALL_SHEET = "Firewall Policy"
DNS_SHEET = "DNS Policy"


def _header_map(sheet) -> dict[str, int]:
    headers = [cell.value for cell in next(sheet.iter_rows(min_row=1, max_row=1), ())]
    return {str(header).strip(): idx for idx, header in enumerate(headers) if header is not None}


def _cell(row, header_map: dict[str, int], name: str) -> Any:
    """Return the cell value under a header, or None when the column is missing."""
    index = header_map.get(name)
    if index is None or index >= len(row):
        return None
    return row[index].value


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_traffic_filter(row, header_map: dict[str, int], side: str) -> Optional[TrafficFilterModel]:
    filter_type = _text(_cell(row, header_map, f"{side} Filter"))
    if filter_type is None:
        return None
    negate = parse_bool(_cell(row, header_map, f"{side} Negate"))

    ports = split_members(_cell(row, header_map, f"{side} Ports"))
    ips = split_members(_cell(row, header_map, f"{side} IPs"))
    macs = split_members(_cell(row, header_map, f"{side} MACs"))
    networks = split_members(_cell(row, header_map, f"{side} Networks"))
    domains = split_members(_cell(row, header_map, f"{side} Domains"))

    port_filter = None
    if ports:
        items = sorted((parse_port_item(port) for port in ports), key=port_item_sort_key)
        port_filter = PortFilterModel(type=PORT_FILTER_TYPE, match_opposite=bool(negate), items=tuple(items))

    return TrafficFilterModel(
        type=filter_type.upper(),
        mac_address=_text(_cell(row, header_map, f"{side} MAC")),
        port_filter=port_filter,
        ip_address_filter=(
            IPAddressFilterModel(type=IP_FILTER_TYPE, match_opposite=bool(negate), items=frozenset(ips))
            if ips
            else None
        ),
        mac_address_filter=(
            MACAddressFilterModel(type=MAC_FILTER_TYPE, match_opposite=False, items=frozenset(macs)) if macs else None
        ),
        network_filter=(
            NetworkFilterModel(type=NETWORK_FILTER_TYPE, match_opposite=bool(negate), items=frozenset(networks))
            if networks
            else None
        ),
        domain_filter=DomainFilterModel(items=frozenset(domains)) if domains else None,
    )


def _parse_endpoint(row, header_map: dict[str, int], side: str) -> Optional[EndpointModel]:
    zone_id = _text(_cell(row, header_map, f"{side} Zone"))
    traffic_filter = _parse_traffic_filter(row, header_map, side)
    if zone_id is None and traffic_filter is None:
        return None
    return EndpointModel(zone_id=zone_id, traffic_filter=traffic_filter)


def _parse_firewall_sheet(sheet) -> list[FirewallPolicyModel]:
    header_map = _header_map(sheet)
    policies: list[FirewallPolicyModel] = []
    for row_number, row in enumerate(sheet.iter_rows(min_row=2), start=2):
        name = _text(_cell(row, header_map, "Name"))
        if name is None:
            continue
        try:
            policies.append(
                FirewallPolicyModel(
                    name=name,
                    enabled=parse_bool(_cell(row, header_map, "Enable")),
                    action=_text(_cell(row, header_map, "Action")),
                    ip_version=_text(_cell(row, header_map, "IP Version")),
                    protocol_filter_type=_text(_cell(row, header_map, "Protocol Type")),
                    protocol=_text(_cell(row, header_map, "Protocol")),
                    protocol_match_opposite=parse_bool(_cell(row, header_map, "Protocol Negate")),
                    source=_parse_endpoint(row, header_map, "Source"),
                    destination=_parse_endpoint(row, header_map, "Destination"),
                )
            )
        except ParseError as exc:
            raise ParseError(f"{FIREWALL_SHEET} row {row_number}: {exc}") from exc
    return policies


def _parse_dns_sheet(sheet) -> list[DNSPolicyModel]:
    header_map = _header_map(sheet)
    policies: list[DNSPolicyModel] = []
    for row_number, row in enumerate(sheet.iter_rows(min_row=2), start=2):
        policy_type = _text(_cell(row, header_map, "Type"))
        domain = _text(_cell(row, header_map, "Domain"))
        if policy_type is None or domain is None:
            continue
        try:
            enabled = parse_bool(_cell(row, header_map, "Enable"))
            policies.append(
                DNSPolicyModel(
                    type=policy_type.upper(),
                    domain=domain,
                    enabled=True if enabled is None else enabled,
                    target=_text(_cell(row, header_map, "Target")),
                    ip_address=_text(_cell(row, header_map, "IP Address")),
                    cname=_text(_cell(row, header_map, "CNAME")),
                    priority=parse_optional_int(_cell(row, header_map, "Priority"), "Priority"),
                    weight=parse_optional_int(_cell(row, header_map, "Weight"), "Weight"),
                    port=parse_optional_int(_cell(row, header_map, "Port"), "Port"),
                    text=_text(_cell(row, header_map, "Text")),
                    ttl=parse_optional_int(_cell(row, header_map, "TTL"), "TTL"),
                )
            )
        except ParseError as exc:
            raise ParseError(f"{DNS_SHEET} row {row_number}: {exc}") from exc
    return policies


def parse_excel(path: str) -> ConfigData:
    """Parse a policy workbook into local models."""
    workbook = load_workbook(path, data_only=True)

    for sheet_name in (FIREWALL_SHEET, DNS_SHEET):
        if sheet_name not in workbook.sheetnames:
            raise ParseError(f"Missing '{sheet_name}' sheet in Excel file")

    return ConfigData(
        firewall_policies=_parse_firewall_sheet(workbook[FIREWALL_SHEET]),
        dns_policies=_parse_dns_sheet(workbook[DNS_SHEET]),
    )
