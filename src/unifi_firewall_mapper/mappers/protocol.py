"""Mapping between local protocol strings and the controller's protocol specifier.

The controller accepts one of three shapes::

    {"preset": "WEB"}       preset bundles
    {"name": "TCP"}         named protocols
    {"number": "47"}        raw IP protocol numbers

Names and presets are sent upper-case and read back lower-case, so a local
value of ``"Tcp"`` reads back as ``"tcp"``. That folding is part of the stored
state format and must not change.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..models import ProtocolFilterType


# First non-empty string wins; persisted state depends on this order.
_READ_KEYS = ("name", "preset", "number", "value")


def normalize_protocol_filter_type(filter_type: str) -> str:
    """Upper-case the filter type, treating ``protocol`` as ``NAMED_PROTOCOL``."""
    if (filter_type or "").casefold() == "protocol":
        return ProtocolFilterType.NAMED_PROTOCOL.value
    return (filter_type or "").upper()


def protocol_to_wire(filter_type: str, protocol: str) -> Optional[dict[str, Any]]:
    """Build the wire specifier, or None when no protocol is set.

    Unrecognized filter types fall through to the named-protocol shape.
    """
    if not protocol:
        return None

    normalized = normalize_protocol_filter_type(filter_type)
    if normalized == ProtocolFilterType.PRESET.value:
        return {"preset": protocol.upper()}
    if normalized == ProtocolFilterType.PROTOCOL_NUMBER.value:
        return {"number": protocol}
    if normalized != ProtocolFilterType.NAMED_PROTOCOL.value:
        logging.getLogger(__name__).debug(
            "Unknown protocol filter type %r, sending %r as a named protocol", filter_type, protocol
        )
    return {"name": protocol.upper()}


def protocol_from_wire(protocol: Optional[Mapping[str, Any]]) -> str:
    """Return the local protocol string for a wire specifier ("" when absent)."""
    if protocol is None:
        return ""

    for key in _READ_KEYS:
        value = protocol.get(key)
        if isinstance(value, str) and value:
            return value.lower()

    number = protocol.get("number")
    if isinstance(number, (int, float)) and not isinstance(number, bool):
        return f"{number:.0f}"

    return ""
