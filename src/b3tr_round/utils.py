from __future__ import annotations

import re
from decimal import Decimal
from typing import Iterable

from eth_utils import from_wei

_APP_ID_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def parse_app_id(value: str) -> bytes:
    """Parse a 0x-prefixed 32-byte app id into raw bytes."""
    if not _APP_ID_RE.match(value):
        raise ValueError(f"App id must be 0x followed by 64 hex digits, got {value!r}")
    return bytes.fromhex(value[2:])


def format_app_id(value: bytes) -> str:
    return "0x" + bytes(value).hex()


def format_bytes32_array(values: Iterable[bytes]) -> str:
    items = [format_app_id(v) for v in values]
    if not items:
        return "[]"
    return "[\n  " + ",\n  ".join(items) + "\n]"


def format_ether(amount: int) -> str:
    """Render an 18-decimal token amount, always with a fractional part."""
    # from_wei returns a plain int for zero
    value = Decimal(from_wei(amount, "ether"))
    text = format(value.normalize(), "f")
    if "." not in text:
        text += ".0"
    return text
