"""Tests for Excel parser edge cases."""
from __future__ import annotations

from pathlib import Path

import pytest
from openpyxl import Workbook

from unifi_firewall_mapper.models import (
    DNSPolicyModel,
    DomainFilterModel,
    EndpointModel,
    IPAddressFilterModel,
    MACAddressFilterModel,
    PortItemModel,
)
from unifi_firewall_mapper.parsers.excel import ParseError, parse_excel


FIREWALL_HEADERS = [
    "Name",
    "Enable",
    "Action",
    "IP Version",
    "Protocol Type",
    "Protocol",
    "Protocol Negate",
    "Source Zone",
    "Source Filter",
    "Source Negate",
    "Source IPs",
    "Source MACs",
    "Destination Zone",
    "Destination Filter",
    "Destination Negate",
    "Destination Ports",
    "Destination Domains",
]

DNS_HEADERS = ["Type", "Domain", "Enable", "Target", "IP Address", "Priority", "Weight", "Port", "TTL"]


def _save(workbook: Workbook, tmp_path: Path) -> Path:
    path = tmp_path / "policies.xlsx"
    workbook.save(path)
    return path


@pytest.fixture
def base_workbook(tmp_path: Path) -> Path:
    """Creates a valid base workbook structure for testing."""
    workbook = Workbook()
    workbook.remove(workbook.active)  # Remove default sheet

    firewall_sheet = workbook.create_sheet("Firewall Policy")
    firewall_sheet.append(FIREWALL_HEADERS)
    firewall_sheet.append(
        [
            "Allow web",
            "TRUE",
            "ALLOW",
            "IPV4",
            "protocol",
            "tcp",
            "no",
            "zone-lan",
            "ip_address",
            "FALSE",
            "10.0.0.0/24\n10.0.1.5",
            None,
            "zone-wan",
            "port",
            "yes",
            "8443, 80\n1000-2000",
            None,
        ]
    )
    firewall_sheet.append(
        ["Zone only", None, "BLOCK", None, None, None, None, "zone-iot", None, None, None, None]
        + [None, "domain", None, None, "example.com,example.org"]
    )
    firewall_sheet.append([None, "TRUE", "ALLOW"])  # No name, skipped
    firewall_sheet.append(
        ["MACs", True, "ALLOW", None, None, None, None, None, "mac", None, None, "aa:bb:cc:dd:ee:ff, 11:22:33:44:55:66"]
    )

    dns_sheet = workbook.create_sheet("DNS Policy")
    dns_sheet.append(DNS_HEADERS)
    dns_sheet.append(["a_record", "nas.lan", None, None, "10.0.0.5", None, None, None, 300])
    dns_sheet.append(["SRV_RECORD", "_sip._tcp.lan", "disabled", "pbx.lan", None, 5, 20, "5060", None])
    dns_sheet.append(["A_RECORD", None])  # No domain, skipped

    return _save(workbook, tmp_path)


def test_parse_excel_firewall_policies(base_workbook: Path):
    data = parse_excel(str(base_workbook))
    assert [policy.name for policy in data.firewall_policies] == ["Allow web", "Zone only", "MACs"]
    web, zone_only, macs = data.firewall_policies

    assert web.enabled is True
    assert web.protocol_filter_type == "protocol"
    assert web.protocol == "tcp"
    assert web.protocol_match_opposite is False
    assert web.site_id is None

    source_filter = web.source.traffic_filter
    assert web.source.zone_id == "zone-lan"
    assert source_filter.type == "IP_ADDRESS"
    assert source_filter.ip_address_filter == IPAddressFilterModel(
        type="IP_ADDRESSES",
        match_opposite=False,
        items=frozenset({"10.0.0.0/24", "10.0.1.5"}),
    )
    assert source_filter.port_filter is None

    port_filter = web.destination.traffic_filter.port_filter
    assert port_filter.match_opposite is True
    assert port_filter.items == (
        PortItemModel(type="PORT_NUMBER_RANGE", start=1000, stop=2000),
        PortItemModel(type="PORT_NUMBER", value=80),
        PortItemModel(type="PORT_NUMBER", value=8443),
    )

    assert zone_only.enabled is None
    assert zone_only.source == EndpointModel(zone_id="zone-iot")
    assert zone_only.destination.zone_id is None
    assert zone_only.destination.traffic_filter.domain_filter == DomainFilterModel(
        items=frozenset({"example.com", "example.org"})
    )

    assert macs.destination is None
    assert macs.source.traffic_filter.mac_address_filter == MACAddressFilterModel(
        type="MAC_ADDRESSES",
        match_opposite=False,
        items=frozenset({"aa:bb:cc:dd:ee:ff", "11:22:33:44:55:66"}),
    )


def test_parse_excel_dns_policies(base_workbook: Path):
    data = parse_excel(str(base_workbook))
    assert data.dns_policies == [
        DNSPolicyModel(type="A_RECORD", domain="nas.lan", enabled=True, ip_address="10.0.0.5", ttl=300),
        DNSPolicyModel(
            type="SRV_RECORD",
            domain="_sip._tcp.lan",
            enabled=False,
            target="pbx.lan",
            priority=5,
            weight=20,
            port=5060,
        ),
    ]


@pytest.mark.parametrize("missing_sheet", ["Firewall Policy", "DNS Policy"])
def test_excel_missing_sheet(tmp_path: Path, missing_sheet: str):
    """Test that a ParseError is raised if a required sheet is missing."""
    workbook = Workbook()
    for sheet_name in ["Firewall Policy", "DNS Policy"]:
        if sheet_name != missing_sheet:
            workbook.create_sheet(sheet_name)

    with pytest.raises(ParseError, match=f"Missing '{missing_sheet}' sheet"):
        parse_excel(str(_save(workbook, tmp_path)))


@pytest.mark.parametrize("ports", ["0", "70000", "2000-1000", "http"])
def test_excel_invalid_port_reports_row(tmp_path: Path, ports: str):
    workbook = Workbook()
    workbook.remove(workbook.active)
    firewall_sheet = workbook.create_sheet("Firewall Policy")
    firewall_sheet.append(["Name", "Destination Filter", "Destination Ports"])
    firewall_sheet.append(["ok", "port", "22"])
    firewall_sheet.append(["bad", "port", ports])
    workbook.create_sheet("DNS Policy")

    with pytest.raises(ParseError, match="Firewall Policy row 3"):
        parse_excel(str(_save(workbook, tmp_path)))


def test_excel_invalid_boolean_reports_row(tmp_path: Path):
    workbook = Workbook()
    workbook.remove(workbook.active)
    workbook.create_sheet("Firewall Policy")
    dns_sheet = workbook.create_sheet("DNS Policy")
    dns_sheet.append(["Type", "Domain", "Enable"])
    dns_sheet.append(["A_RECORD", "lan", "maybe"])

    with pytest.raises(ParseError, match="DNS Policy row 2: Invalid boolean value: maybe"):
        parse_excel(str(_save(workbook, tmp_path)))


def test_excel_missing_headers(tmp_path: Path):
    """Columns that are not present are treated as unset."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    firewall_sheet = workbook.create_sheet("Firewall Policy")
    firewall_sheet.append(["Name"])
    firewall_sheet.append(["bare"])
    workbook.create_sheet("DNS Policy")

    data = parse_excel(str(_save(workbook, tmp_path)))
    (policy,) = data.firewall_policies
    assert policy.name == "bare"
    assert policy.action is None
    assert policy.source is None
    assert policy.destination is None
    assert data.dns_policies == []
