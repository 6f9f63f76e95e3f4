"""Utility helpers for decoding loosely typed input."""
from __future__ import annotations

import math
import re
from typing import Any, Optional

from .models import PortItemModel


PORT_PATTERN = re.compile(r"^(?P<start>\d+)(?:\s*-\s*(?P<end>\d+))?$")

PORT_NUMBER = "PORT_NUMBER"
PORT_NUMBER_RANGE = "PORT_NUMBER_RANGE"


class ParseError(ValueError):
    """Raised when parsing input data fails."""


def as_str(value: Any) -> str:
    """Return value if it is a string, otherwise the empty string."""
    return value if isinstance(value, str) else ""


def as_int(value: Any) -> int:
    """Coerce a JSON number (or digit string) to int, zero when not numeric."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    return 0


def as_bool(value: Any) -> bool:
    return value if isinstance(value, bool) else False


def as_str_list(value: Any) -> list[str]:
    """Keep the string members of a JSON array."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def parse_bool(value: Any) -> Optional[bool]:
    """Parse a spreadsheet/JSON boolean, returning None for blank cells."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if not normalized:
        return None
    if normalized in ("true", "yes", "1", "enable", "enabled"):
        return True
    if normalized in ("false", "no", "0", "disable", "disabled"):
        return False
    raise ParseError(f"Invalid boolean value: {value}")


def parse_optional_int(value: Any, label: str) -> Optional[int]:
    """Parse an optional integer, raising ParseError on garbage."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise ParseError(f"Invalid integer for {label}: {value}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    text = str(value).strip()
    if not text.isdecimal():
        raise ParseError(f"Invalid integer for {label}: {value}")
    return int(text)


def split_members(raw_value: Any) -> list[str]:
    """Split member lists on newlines and commas."""
    if raw_value is None:
        return []
    members = []
    for line in str(raw_value).splitlines():
        for part in line.split(","):
            member = part.strip()
            if member:
                members.append(member)
    return members


def parse_port_item(value: str) -> PortItemModel:
    """Parse ``80`` or ``8000-8080`` into a port item."""
    match = PORT_PATTERN.match(value.strip())
    if not match:
        raise ParseError(f"Invalid port entry: {value}")
    start = int(match.group("start"))
    end = match.group("end")
    if end is None:
        if not 1 <= start <= 65535:
            raise ParseError(f"Port out of range: {value}")
        return PortItemModel(type=PORT_NUMBER, value=start)
    stop = int(end)
    if not (1 <= start <= 65535 and 1 <= stop <= 65535):
        raise ParseError(f"Port out of range: {value}")
    if start > stop:
        raise ParseError(f"Invalid port range: {value}")
    return PortItemModel(type=PORT_NUMBER_RANGE, start=start, stop=stop)
