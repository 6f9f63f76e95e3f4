"""Tests for wire payload decoding and encoding."""
from __future__ import annotations

import json

import pytest

from unifi_firewall_mapper.mappers.traffic import traffic_filter_from_wire
from unifi_firewall_mapper.models import PortItemModel
from unifi_firewall_mapper.parsers.remote import load_remote_document
from unifi_firewall_mapper.wire import (
    WireDNSPolicy,
    WireFirewallPolicy,
    WireMACAddressFilter,
    WirePortItem,
    WireTrafficFilter,
    decode_mac_address_filter,
)


def test_decode_mac_address_filter_variants():
    assert decode_mac_address_filter("aa:bb:cc:dd:ee:ff") == "aa:bb:cc:dd:ee:ff"
    assert decode_mac_address_filter({"macAddresses": ["aa:bb"]}) == WireMACAddressFilter(macAddresses=["aa:bb"])
    assert decode_mac_address_filter(None) is None
    assert decode_mac_address_filter(12) is None


@pytest.mark.parametrize(
    "value",
    [
        {"macAddresses": ["aa:bb"], "matchOpposite": False},
        {"macAddresses": ["aa:bb", None]},
        {"something": "else"},
    ],
)
def test_decode_mac_address_filter_keeps_unexpected_mappings(value):
    decoded = decode_mac_address_filter(value)
    assert isinstance(decoded, dict)
    assert decoded == value


def test_traffic_filter_from_json_payload():
    payload = {
        "type": "CUSTOM",
        "macAddressFilter": {"macAddresses": ["aa:bb:cc:dd:ee:ff"]},
        "portFilter": {
            "type": "PORTS",
            "matchOpposite": True,
            "items": [
                {"type": "PORT_NUMBER", "value": 443.0},
                {"type": "PORT_NUMBER_RANGE", "start": 1000, "stop": 2000},
                "garbage",
            ],
        },
        "ipAddressFilter": {
            "type": "IP_ADDRESSES",
            "matchOpposite": False,
            "items": [{"type": "SUBNET", "value": "10.0.0.0/8"}],
        },
        "networkFilter": {"matchOpposite": False, "networkIds": ["net-1", 3]},
        "domainFilter": {"type": "DOMAINS", "domains": ["example.com"]},
    }
    wire = WireTrafficFilter.model_validate(payload)
    assert wire.mac_address_filter == WireMACAddressFilter(macAddresses=["aa:bb:cc:dd:ee:ff"])
    assert wire.port_filter.match_opposite is True
    assert wire.port_filter.items == [
        WirePortItem(type="PORT_NUMBER", value=443),
        WirePortItem(type="PORT_NUMBER_RANGE", start=1000, stop=2000),
    ]
    assert wire.network_filter.network_ids == ["net-1"]

    local = traffic_filter_from_wire(wire)
    assert local.ip_address_filter.items == frozenset({"10.0.0.0/8"})
    assert local.mac_address_filter.items == frozenset({"aa:bb:cc:dd:ee:ff"})


def test_traffic_filter_from_json_ignores_non_object_sub_filters():
    wire = WireTrafficFilter.model_validate({"type": "PORT", "portFilter": "oops", "domainFilter": None})
    assert wire.port_filter is None
    assert wire.domain_filter is None


def test_traffic_filter_to_dict_omits_absent_fields():
    wire = WireTrafficFilter(type="PORT", mac_address_filter="aa:bb:cc:dd:ee:ff")
    assert wire.to_dict() == {"type": "PORT", "macAddressFilter": "aa:bb:cc:dd:ee:ff"}


def test_traffic_filter_dict_round_trip():
    payload = {
        "type": "CUSTOM",
        "macAddressFilter": {"macAddresses": ["aa:bb:cc:dd:ee:ff"]},
        "portFilter": {"type": "PORTS", "matchOpposite": False, "items": [{"type": "PORT_NUMBER", "value": 22}]},
        "domainFilter": {"type": "DOMAINS", "domains": ["example.com"]},
    }
    assert WireTrafficFilter.model_validate(payload).to_dict() == payload


def test_port_item_zero_fields_are_omitted():
    assert WirePortItem(type="PORT_NUMBER", value=0).to_dict() == {"type": "PORT_NUMBER"}


def test_firewall_policy_decode():
    payload = {
        "id": "abc",
        "name": "Allow web",
        "enabled": True,
        "action": {"type": "ALLOW"},
        "ipProtocolScope": {
            "ipVersion": "IPV4_AND_IPV6",
            "protocolFilter": {"type": "NAMED_PROTOCOL", "protocol": {"name": "TCP"}, "matchOpposite": False},
        },
        "source": {"zoneId": "zone-lan", "trafficFilter": {"type": "NETWORK"}},
        "destination": {"zoneId": "zone-wan"},
    }
    wire = WireFirewallPolicy.model_validate(payload)
    assert wire.action == "ALLOW"
    assert wire.protocol_filter.protocol == {"name": "TCP"}
    assert wire.source.traffic_filter == WireTrafficFilter(type="NETWORK")
    assert wire.destination.traffic_filter is None
    assert wire.to_dict() == payload


def test_dns_policy_to_dict_omits_empty_fields():
    wire = WireDNSPolicy(type="A_RECORD", domain="nas.lan", enabled=True, ipv4_address="10.0.0.5")
    assert wire.to_dict() == {"type": "A_RECORD", "domain": "nas.lan", "enabled": True, "ipv4Address": "10.0.0.5"}


def test_dns_policy_decoding_is_lenient():
    wire = WireDNSPolicy.model_validate({"type": "MX_RECORD", "domain": "lan", "mxPriority": "10", "ttl": "soon"})
    assert wire.mx_priority == 10
    assert wire.ttl == 0
    assert wire.enabled is False


@pytest.mark.parametrize("number", ["1e999", "-1e999", "NaN", '"\\u00b2"'])
def test_unusable_port_numbers_decode_as_unset(number):
    payload = json.loads(
        '{"type": "PORT", "portFilter": {"type": "PORTS", "items": [{"type": "PORT_NUMBER", "value": %s}]}}' % number
    )
    wire = WireTrafficFilter.model_validate(payload)
    assert wire.port_filter.items == [WirePortItem(type="PORT_NUMBER")]
    assert traffic_filter_from_wire(wire).port_filter.items == (PortItemModel(type="PORT_NUMBER"),)


def test_remote_document_with_unusable_numbers():
    document = json.loads(
        '{"dnsPolicies": [{"type": "SRV_RECORD", "domain": "lan", "ttl": 1e999, "srvPort": NaN, "srvWeight": "\\u00b2"}]}'
    )
    (policy,) = load_remote_document(document).dns_policies
    assert (policy.ttl, policy.srv_port, policy.srv_weight) == (0, 0, 0)


def test_structured_mac_filter_requires_wire_key():
    """Snake-case keys are not the controller's structured form."""
    assert decode_mac_address_filter({"mac_addresses": ["aa:bb"]}) == {"mac_addresses": ["aa:bb"]}
    assert decode_mac_address_filter({}) == {}


def test_firewall_policy_ignores_malformed_nested_objects():
    wire = WireFirewallPolicy.model_validate(
        {"name": "p", "action": ["ALLOW"], "ipProtocolScope": "all", "source": 5, "enabled": "yes"}
    )
    assert wire == WireFirewallPolicy(name="p")
    assert wire.to_dict() == {"name": "p", "enabled": False}
