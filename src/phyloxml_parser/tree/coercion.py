"""Conversion of attribute values and character data to typed scalars.

Only the lexical forms of the XML Schema ``integer``, ``double`` and
``boolean`` types are accepted. Anything else raises MalformedScalarError;
no default is ever substituted.
"""

import re
from typing import Mapping, Optional

from phyloxml_parser.shared import MalformedScalarError

_INT_PATTERN = re.compile(r"^[+-]?[0-9]+$")
_FLOAT_PATTERN = re.compile(r"^[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?$")
_FLOAT_SPECIALS = {
    "INF": float("inf"),
    "+INF": float("inf"),
    "-INF": float("-inf"),
    "NaN": float("nan"),
}
_BOOLEANS = {"true": True, "false": False}


def parse_int(text: str, field: str) -> int:
    """Parse an optionally signed decimal integer."""
    value = text.strip()
    if not _INT_PATTERN.match(value):
        raise MalformedScalarError(text, field, "int")
    return int(value)


def parse_float(text: str, field: str) -> float:
    """Parse a decimal or scientific float, including INF and NaN."""
    value = text.strip()
    if value in _FLOAT_SPECIALS:
        return _FLOAT_SPECIALS[value]
    if not _FLOAT_PATTERN.match(value):
        raise MalformedScalarError(text, field, "float")
    return float(value)


def parse_bool(text: str, field: str) -> bool:
    """Parse exactly ``true`` or ``false``, without surrounding whitespace."""
    if text not in _BOOLEANS:
        raise MalformedScalarError(text, field, "bool")
    return _BOOLEANS[text]


def attribute(attributes: Mapping[str, str], name: str) -> Optional[str]:
    return attributes.get(name)


def attribute_as_int(attributes: Mapping[str, str], name: str) -> Optional[int]:
    """Integer attribute value, or None when the attribute is absent."""
    if name not in attributes:
        return None
    return parse_int(attributes[name], name)


def attribute_as_float(attributes: Mapping[str, str], name: str) -> Optional[float]:
    """Float attribute value, or None when the attribute is absent."""
    if name not in attributes:
        return None
    return parse_float(attributes[name], name)


def attribute_as_bool(attributes: Mapping[str, str], name: str) -> Optional[bool]:
    """Boolean attribute value, or None when the attribute is absent."""
    if name not in attributes:
        return None
    return parse_bool(attributes[name], name)
