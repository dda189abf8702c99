"""Kubernetes quantity parsing (e.g. "1Gi", "40Gi", "500M")"""

from __future__ import annotations

import re

from kubernetes.utils import parse_quantity

from vs_tool.errors import InvalidQuantity

BINARY_SUFFIXES: dict[str, int] = {
    "Ki": 1024,
    "Mi": 1024**2,
    "Gi": 1024**3,
    "Ti": 1024**4,
    "Pi": 1024**5,
    "Ei": 1024**6,
}

DECIMAL_SUFFIXES: dict[str, int] = {
    "k": 10**3,
    "M": 10**6,
    "G": 10**9,
    "T": 10**12,
    "P": 10**15,
    "E": 10**18,
}

MULTIPLIERS: dict[str, int] = {"": 1, **BINARY_SUFFIXES, **DECIMAL_SUFFIXES}

# Unsigned decimal with an optional byte suffix. parse_quantity also takes
# signs, exponents and milli units, none of which are sizes.
_QUANTITY_RE = re.compile(
    r"^(?P<number>[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?P<suffix>[KMGTPE]i|[kMGTPE])?$"
)


def parse(value: str) -> int:
    """Parse a quantity string into a byte count.

    A bare number is a byte count. Fractional byte results are rounded
    to the nearest byte.

    Raises:
        InvalidQuantity: if the string does not follow the quantity grammar.
    """
    if not isinstance(value, str):
        raise InvalidQuantity(str(value))

    value = value.strip()
    if not _QUANTITY_RE.match(value):
        raise InvalidQuantity(value)

    try:
        return int(parse_quantity(value).to_integral_value())
    except ValueError as e:
        raise InvalidQuantity(value) from e


def validate_quantity(value: str) -> bool:
    """True if the string parses as a quantity"""
    try:
        parse(value)
    except InvalidQuantity:
        return False
    return True


def convert(num_bytes: int, unit: str) -> float:
    """Express a byte count in the given unit ("Gi", "G", "" for bytes, ...)"""
    if unit not in MULTIPLIERS:
        raise ValueError(f"Unknown unit: {unit!r}")
    return num_bytes / MULTIPLIERS[unit]


def to_unit(value: str, unit: str) -> float:
    """Parse a quantity string and convert it in one step"""
    return convert(parse(value), unit)
