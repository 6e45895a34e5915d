"""
Value codec: native Python values <-> RDF literal lexical forms.

Decoding is keyed by datatype URI.  Unknown datatypes never fail, they
decode to the lexical form itself.  Literals produced here are built with
``normalize=False`` so the lexical form that goes over the wire is exactly
what :func:`encode` returned.

Usage:
    >>> from rdflib.namespace import XSD
    >>> encode(True)
    ('1', rdflib.term.URIRef('http://www.w3.org/2001/XMLSchema#boolean'))
    >>> decode("24", XSD.integer)
    24
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Tuple

from rdflib import BNode, Literal, URIRef
from rdflib.namespace import RDF, XSD
from rdflib.term import Node

from .errors import ArgumentError, DecodeError

__all__ = [
    "decode",
    "encode",
    "from_term",
    "infer_datatype",
    "to_literal",
]

INTEGER_TYPES = frozenset(
    {
        XSD.integer,
        XSD.int,
        XSD.long,
        XSD.short,
        XSD.byte,
        XSD.nonNegativeInteger,
        XSD.positiveInteger,
        XSD.nonPositiveInteger,
        XSD.negativeInteger,
        XSD.unsignedLong,
        XSD.unsignedInt,
        XSD.unsignedShort,
        XSD.unsignedByte,
    }
)
FLOATING_TYPES = frozenset({XSD.double, XSD.float})
STRING_TYPES = frozenset({XSD.string, RDF.langString})

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_DECIMAL_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")
_DOUBLE_RE = re.compile(r"^([+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?|[+-]?INF|NaN)$")
_DATETIME_RE = re.compile(r"^-?\d{4,}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})?$")
_DATE_RE = re.compile(r"^-?\d{4,}-\d{2}-\d{2}$")


def _decode_boolean(lexical: str, datatype: URIRef) -> bool:
    # Only the numeric forms emitted by encode() are accepted
    if lexical == "1":
        return True
    if lexical == "0":
        return False
    raise DecodeError(lexical, datatype, 'expected "0" or "1"')


def _decode_integer(lexical: str, datatype: URIRef) -> int:
    if not _INTEGER_RE.match(lexical):
        raise DecodeError(lexical, datatype, "not an integer")
    return int(lexical)


def _decode_decimal(lexical: str, datatype: URIRef) -> Decimal:
    if not _DECIMAL_RE.match(lexical):
        raise DecodeError(lexical, datatype, "not a decimal number")
    return Decimal(lexical)


def _decode_floating(lexical: str, datatype: URIRef) -> float:
    if not _DOUBLE_RE.match(lexical):
        raise DecodeError(lexical, datatype, "not a number")
    if lexical.endswith("INF"):
        return -math.inf if lexical.startswith("-") else math.inf
    if lexical == "NaN":
        return math.nan
    return float(lexical)


def _decode_datetime(lexical: str, datatype: URIRef) -> datetime:
    match = _DATETIME_RE.match(lexical)
    if not match:
        raise DecodeError(lexical, datatype, "not an ISO-8601 date-time")
    text = lexical.replace("Z", "+00:00")
    fraction = match.group(1)
    if fraction:
        # fromisoformat before 3.11 only takes 3 or 6 fractional digits
        text = text.replace(fraction, "." + fraction[1:7].ljust(6, "0"), 1)
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise DecodeError(lexical, datatype, str(e)) from e


def _decode_date(lexical: str, datatype: URIRef) -> date:
    if not _DATE_RE.match(lexical):
        raise DecodeError(lexical, datatype, "not an ISO-8601 date")
    try:
        return date.fromisoformat(lexical)
    except ValueError as e:
        raise DecodeError(lexical, datatype, str(e)) from e


def decode(lexical: str, datatype: Optional[str] = None) -> Any:
    """
    Decode a literal's lexical form into a native value.

    Args:
        lexical: The literal's lexical form
        datatype: Datatype URI, or None for a plain literal

    Returns:
        The native value (bool, int, Decimal, float, datetime, date or str)

    Raises:
        DecodeError: If the lexical form is malformed for a recognized datatype
    """
    lexical = str(lexical)
    if datatype is None:
        return lexical
    datatype = URIRef(datatype)
    if datatype == XSD.boolean:
        return _decode_boolean(lexical, datatype)
    if datatype in INTEGER_TYPES:
        return _decode_integer(lexical, datatype)
    if datatype == XSD.decimal:
        return _decode_decimal(lexical, datatype)
    if datatype in FLOATING_TYPES:
        return _decode_floating(lexical, datatype)
    if datatype == XSD.dateTime:
        return _decode_datetime(lexical, datatype)
    if datatype == XSD.date:
        return _decode_date(lexical, datatype)
    return lexical


def infer_datatype(value: Any) -> Optional[URIRef]:
    """Pick the datatype a native value is encoded with when none is given."""
    # bool before int, datetime before date: both are subclasses
    if isinstance(value, bool):
        return XSD.boolean
    if isinstance(value, int):
        return XSD.integer
    if isinstance(value, Decimal):
        return XSD.decimal
    if isinstance(value, float):
        return XSD.double
    if isinstance(value, datetime):
        return XSD.dateTime
    if isinstance(value, date):
        return XSD.date
    return None


def _format_decimal(value: Any) -> str:
    number = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
    if not number.is_finite():
        raise ArgumentError(f"xsd:decimal cannot represent {value!r}")
    text = format(number, "f")
    return text if "." in text else f"{text}.0"


def _format_double(value: Any) -> str:
    number = float(value)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "INF" if number > 0 else "-INF"
    return repr(number)


def _format_datetime(value: datetime) -> str:
    text = value.isoformat()
    return text[:-6] + "Z" if text.endswith("+00:00") else text


def encode(value: Any, datatype: Optional[str] = None) -> Tuple[str, Optional[URIRef]]:
    """
    Encode a native value as a literal lexical form.

    Args:
        value: The native value
        datatype: Target datatype URI; inferred from the value when omitted

    Returns:
        Tuple of (lexical form, datatype URI or None for a plain literal)

    Raises:
        ArgumentError: If the value cannot be represented in the datatype
    """
    if datatype is None:
        datatype = infer_datatype(value)
    if datatype is None:
        return str(value), None
    datatype = URIRef(datatype)

    if datatype == XSD.boolean:
        if not isinstance(value, bool):
            raise ArgumentError(f"xsd:boolean requires a bool, got {value!r}")
        return ("1" if value else "0"), datatype
    if datatype in INTEGER_TYPES:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ArgumentError(f"<{datatype}> requires an int, got {value!r}")
        return str(value), datatype
    if datatype == XSD.decimal:
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            raise ArgumentError(f"xsd:decimal requires a number, got {value!r}")
        return _format_decimal(value), datatype
    if datatype in FLOATING_TYPES:
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            raise ArgumentError(f"<{datatype}> requires a number, got {value!r}")
        return _format_double(value), datatype
    if datatype == XSD.dateTime:
        if not isinstance(value, datetime):
            raise ArgumentError(f"xsd:dateTime requires a datetime, got {value!r}")
        return _format_datetime(value), datatype
    if datatype == XSD.date:
        if isinstance(value, datetime) or not isinstance(value, date):
            raise ArgumentError(f"xsd:date requires a date, got {value!r}")
        return value.isoformat(), datatype
    return str(value), datatype


def to_literal(
    value: Any,
    datatype: Optional[str] = None,
    lang: Optional[str] = None,
) -> Literal:
    """Build an rdflib Literal for a native value without lexical normalization."""
    if lang:
        return Literal(str(value), lang=lang)
    lexical, datatype = encode(value, datatype)
    return Literal(lexical, datatype=datatype, normalize=False)


def from_term(term: Node) -> Any:
    """Extract the native value carried by an RDF object term.

    Literals are decoded by datatype; named and blank nodes yield their
    string form.
    """
    if isinstance(term, Literal):
        return decode(str(term), term.datatype)
    if isinstance(term, (URIRef, BNode)):
        return str(term)
    raise ArgumentError(f"Unsupported object term: {term!r}")
