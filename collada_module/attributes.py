"""
Attribute Parsing

Helpers used by the builders to read element attributes. Absent optional
attributes yield the supplied default; absent required attributes and values
that do not decode raise the matching parse error straight away.
"""

import re
from enum import Enum
from typing import Mapping, Optional, Type, TypeVar
from urllib.parse import urlsplit

from .chunk_reader import FLOAT_PATTERN, INT_PATTERN
from .errors import (
    InvalidReferenceSyntaxError,
    MalformedValueError,
    MissingRequiredAttributeError,
)


E = TypeVar('E', bound=Enum)

Attributes = Mapping[str, str]

# RFC 3986 unreserved, reserved and percent-encoded characters
URI_CHARACTERS = re.compile(r"(?:[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=]|%[0-9A-Fa-f]{2})*")
URI_SCHEME = re.compile(r'[A-Za-z][A-Za-z0-9+.\-]*')

BOOLEAN_VALUES = {
    'true': True,
    '1': True,
    'false': False,
    '0': False,
}


def require(attributes: Attributes, element: str, name: str) -> str:
    """Get an attribute that must be present"""
    value = attributes.get(name)
    if value is None:
        raise MissingRequiredAttributeError(element, name)
    return value


def parse_int(value: str, what: str) -> int:
    """Parse a base-10 integer"""
    text = value.strip()
    if not INT_PATTERN.fullmatch(text):
        raise MalformedValueError(f"{what}: {value!r} is not a valid integer", value)
    return int(text)


def parse_float(value: str, what: str) -> float:
    """Parse a locale independent decimal float"""
    text = value.strip()
    if not FLOAT_PATTERN.fullmatch(text):
        raise MalformedValueError(f"{what}: {value!r} is not a valid float", value)
    return float(text)


def parse_bool(value: str, what: str) -> bool:
    """Parse an xs:boolean"""
    try:
        return BOOLEAN_VALUES[value.strip()]
    except KeyError:
        raise MalformedValueError(f"{what}: {value!r} is not a valid boolean", value) from None


def parse_enum(enum_class: Type[E], value: str, what: str) -> E:
    """Parse an enum member from its lexical value"""
    try:
        return enum_class(value.strip())
    except ValueError:
        raise MalformedValueError(f"{what}: {value!r} is not a valid {enum_class.__name__}", value) from None


def parse_uri(value: str) -> str:
    """
    Check that a string is a syntactically valid URI reference.

    The URI is returned verbatim; it is never resolved.

    Raises:
        InvalidReferenceSyntaxError: On illegal characters, bad percent
            escapes, an illegal scheme or a malformed authority
    """
    if not URI_CHARACTERS.fullmatch(value):
        raise InvalidReferenceSyntaxError(value, "illegal character")
    if value.count('#') > 1:
        raise InvalidReferenceSyntaxError(value, "more than one fragment separator")
    head = re.split(r'[/?#]', value, maxsplit=1)[0]
    if ':' in head:
        scheme = head.split(':', 1)[0]
        if not URI_SCHEME.fullmatch(scheme):
            raise InvalidReferenceSyntaxError(value, f"illegal scheme {scheme!r}")
    try:
        urlsplit(value)
    except ValueError as e:
        raise InvalidReferenceSyntaxError(value, str(e)) from e
    return value


def required_int(attributes: Attributes, element: str, name: str) -> int:
    return parse_int(require(attributes, element, name), f"<{element} {name}>")


def optional_int(attributes: Attributes, element: str, name: str,
                 default: Optional[int] = None) -> Optional[int]:
    value = attributes.get(name)
    if value is None:
        return default
    return parse_int(value, f"<{element} {name}>")


def required_uri(attributes: Attributes, element: str, name: str) -> str:
    return parse_uri(require(attributes, element, name))
