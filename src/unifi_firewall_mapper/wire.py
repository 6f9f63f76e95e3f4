"""Wire-format structures exchanged with the controller API.

These mirror the JSON payloads closely. Numeric fields use ``0`` and string
fields use ``""`` to mean "absent", and ``to_dict`` omits them the same way the
controller's encoder does. Decoding never raises on a JSON object: unexpected
shapes decode to defaults or to ``None``.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, ClassVar, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    TypeAdapter,
    field_validator,
    model_serializer,
    model_validator,
)

from .utils import as_bool, as_int, as_str, as_str_list


WireStr = Annotated[str, BeforeValidator(as_str)]
WireInt = Annotated[int, BeforeValidator(as_int)]
WireBool = Annotated[bool, BeforeValidator(as_bool)]
WireStrList = Annotated[list[str], BeforeValidator(as_str_list)]


def _object_or_none(value: Any) -> Any:
    if isinstance(value, (Mapping, BaseModel)):
        return value
    return None


def _objects(value: Any) -> list[Any]:
    """Keep the object members of a JSON array."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, (Mapping, BaseModel))]


class WireModel(BaseModel):
    """Base for controller payloads."""

    model_config = ConfigDict(populate_by_name=True)

    # Wire keys the controller leaves out when their value is zero or empty.
    omit_empty: ClassVar[frozenset[str]] = frozenset()

    @model_serializer(mode="wrap")
    def _serialize(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        payload = handler(self)
        payload = {key: value for key, value in payload.items() if value or key not in self.omit_empty}
        return self._layout(payload)

    def _layout(self, payload: dict[str, Any]) -> dict[str, Any]:
        return payload

    def to_dict(self) -> dict[str, Any]:
        """Encode as the JSON payload the controller expects."""
        return self.model_dump(by_alias=True, exclude_none=True)


class WirePortItem(WireModel):
    """Port item; zero means the field was not sent."""

    omit_empty: ClassVar[frozenset[str]] = frozenset({"value", "start", "stop"})

    type: WireStr = ""
    value: WireInt = 0
    start: WireInt = 0
    stop: WireInt = 0


class WirePortFilter(WireModel):
    type: WireStr = ""
    match_opposite: WireBool = Field(default=False, alias="matchOpposite")
    items: Annotated[list[WirePortItem], BeforeValidator(_objects)] = Field(default_factory=list)


class WireIPAddressItem(WireModel):
    type: WireStr = ""
    value: WireStr = ""


class WireIPAddressFilter(WireModel):
    type: WireStr = ""
    match_opposite: WireBool = Field(default=False, alias="matchOpposite")
    items: Annotated[list[WireIPAddressItem], BeforeValidator(_objects)] = Field(default_factory=list)


class WireMACAddressFilter(WireModel):
    """Structured MAC filter; the wire form has no match-opposite flag.

    Only an object whose sole key is ``macAddresses`` holding strings decodes
    to this model, so it is built by alias: ``WireMACAddressFilter(macAddresses=[...])``.
    """

    model_config = ConfigDict(populate_by_name=False, extra="forbid")

    mac_addresses: list[str] = Field(alias="macAddresses")


class WireNetworkFilter(WireModel):
    match_opposite: WireBool = Field(default=False, alias="matchOpposite")
    network_ids: WireStrList = Field(default_factory=list, alias="networkIds")


class WireDomainFilter(WireModel):
    type: WireStr = ""
    domains: WireStrList = Field(default_factory=list)


# A bare MAC string, the structured form, or an undecoded mapping, tried in
# that order.
MACAddressFilterValue = Annotated[
    Union[str, WireMACAddressFilter, dict[str, Any], None],
    Field(union_mode="left_to_right"),
]


def _mac_filter_shape(value: Any) -> Any:
    if isinstance(value, (str, WireMACAddressFilter)):
        return value
    if isinstance(value, Mapping):
        return dict(value)
    return None


_MAC_ADDRESS_FILTER = TypeAdapter(MACAddressFilterValue)


def decode_mac_address_filter(value: Any) -> Union[str, WireMACAddressFilter, dict[str, Any], None]:
    """Surface the polymorphic ``macAddressFilter`` field as a Python type.

    Any mapping that is not exactly the structured form is kept as a plain
    dict so the mapper can apply its fallback.
    """
    return _MAC_ADDRESS_FILTER.validate_python(_mac_filter_shape(value))


class WireTrafficFilter(WireModel):
    """Traffic filter as sent to and received from the controller."""

    type: WireStr = ""
    mac_address_filter: MACAddressFilterValue = Field(default=None, alias="macAddressFilter")
    port_filter: Optional[WirePortFilter] = Field(default=None, alias="portFilter")
    ip_address_filter: Optional[WireIPAddressFilter] = Field(default=None, alias="ipAddressFilter")
    network_filter: Optional[WireNetworkFilter] = Field(default=None, alias="networkFilter")
    domain_filter: Optional[WireDomainFilter] = Field(default=None, alias="domainFilter")

    @field_validator("mac_address_filter", mode="before")
    @classmethod
    def _mac_address_filter(cls, value: Any) -> Any:
        return _mac_filter_shape(value)

    @field_validator("port_filter", "ip_address_filter", "network_filter", "domain_filter", mode="before")
    @classmethod
    def _sub_filter(cls, value: Any) -> Any:
        return _object_or_none(value)


class WireEndpoint(WireModel):
    omit_empty: ClassVar[frozenset[str]] = frozenset({"zoneId"})

    zone_id: WireStr = Field(default="", alias="zoneId")
    traffic_filter: Optional[WireTrafficFilter] = Field(default=None, alias="trafficFilter")

    @field_validator("traffic_filter", mode="before")
    @classmethod
    def _traffic_filter(cls, value: Any) -> Any:
        return _object_or_none(value)


class WireProtocolFilter(WireModel):
    """Protocol filter; ``protocol`` is the polymorphic specifier mapping."""

    type: WireStr = ""
    protocol: Optional[dict[str, Any]] = None
    match_opposite: WireBool = Field(default=False, alias="matchOpposite")

    @field_validator("protocol", mode="before")
    @classmethod
    def _protocol(cls, value: Any) -> Optional[dict[str, Any]]:
        return dict(value) if isinstance(value, Mapping) else None


class WireFirewallPolicy(WireModel):
    """Firewall policy payload.

    ``action`` and the ``ipProtocolScope`` members are flattened onto the
    model; the nested wire layout is restored on encode.
    """

    omit_empty: ClassVar[frozenset[str]] = frozenset({"id", "action", "ipVersion"})

    name: WireStr = ""
    id: WireStr = ""
    enabled: WireBool = False
    action: WireStr = ""
    ip_version: WireStr = Field(default="", alias="ipVersion")
    protocol_filter: Optional[WireProtocolFilter] = Field(default=None, alias="protocolFilter")
    source: Optional[WireEndpoint] = None
    destination: Optional[WireEndpoint] = None

    @model_validator(mode="before")
    @classmethod
    def _flatten(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        payload = dict(data)
        action = payload.get("action")
        if isinstance(action, Mapping):
            payload["action"] = action.get("type")
        scope = payload.pop("ipProtocolScope", None)
        if isinstance(scope, Mapping):
            payload["ipVersion"] = scope.get("ipVersion")
            payload["protocolFilter"] = scope.get("protocolFilter")
        return payload

    @field_validator("protocol_filter", "source", "destination", mode="before")
    @classmethod
    def _sub_object(cls, value: Any) -> Any:
        return _object_or_none(value)

    def _layout(self, payload: dict[str, Any]) -> dict[str, Any]:
        if "action" in payload:
            payload["action"] = {"type": payload["action"]}
        scope = {key: payload.pop(key) for key in ("ipVersion", "protocolFilter") if key in payload}
        if scope:
            payload["ipProtocolScope"] = scope
        return payload


class WireDNSPolicy(WireModel):
    """DNS policy payload; zero and empty values are omitted on encode."""

    omit_empty: ClassVar[frozenset[str]] = frozenset(
        {"id", "target", "ipv4Address", "cname", "mxPriority", "srvPriority", "srvWeight", "srvPort", "txtText", "ttl"}
    )

    type: WireStr = ""
    domain: WireStr = ""
    id: WireStr = ""
    enabled: WireBool = False
    target: WireStr = ""
    ipv4_address: WireStr = Field(default="", alias="ipv4Address")
    cname: WireStr = ""
    mx_priority: WireInt = Field(default=0, alias="mxPriority")
    srv_priority: WireInt = Field(default=0, alias="srvPriority")
    srv_weight: WireInt = Field(default=0, alias="srvWeight")
    srv_port: WireInt = Field(default=0, alias="srvPort")
    txt_text: WireStr = Field(default="", alias="txtText")
    ttl: WireInt = 0
