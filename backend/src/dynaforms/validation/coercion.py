"""Value coercion for submitted form values.

Submitted values arrive in whatever shape the transport produced: native
Python scalars, lists and dicts from ``json.loads``, but also ``Mapping``
implementations, tuples, ``Decimal`` numbers, ``bytes`` or ``date`` objects
(PyYAML decodes ``2024-01-01`` to a ``date``). Every rule reads values through
this module only, so the engine never branches on raw Python types elsewhere.

A value is classified into one of six kinds (:class:`ValueKind`). Coercion
helpers (``as_string``, ``as_number``, ...) return ``None`` when a value
cannot be read as the requested kind; rules treat that as "cannot judge" and
pass.

String and number rendering follows what a JSON/JavaScript client sees, so
both evaluators agree on lengths and comparisons: ``True`` is ``"true"``,
``3.0`` is ``"3"``, and lengths count UTF-16 code units (``text_length``).
"""

import math
import re
from collections.abc import Mapping, Set
from datetime import date, datetime, time
from enum import Enum
from numbers import Number
from typing import Any

# Decimal notation accepted when reading numbers from strings. Narrower than
# float(): no "inf"/"nan", no digit-group underscores.
_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_INT_RE = re.compile(r"^[+-]?\d+$")


class ValueKind(Enum):
    """Semantic shape of a submitted value."""

    ABSENT = "absent"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    LIST = "list"
    MAP = "map"


def kind_of(value: Any) -> ValueKind:
    """Classify a raw submitted value."""
    if value is None:
        return ValueKind.ABSENT
    # bool before Number: bool is an int subclass
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (str, bytes, bytearray, date, time)):
        return ValueKind.STRING
    if isinstance(value, Number):
        return ValueKind.NUMBER
    if isinstance(value, Mapping):
        return ValueKind.MAP
    if isinstance(value, (list, tuple, Set)):
        return ValueKind.LIST
    return ValueKind.STRING


def normalize(value: Any) -> Any:
    """Recursively convert a value to canonical Python shapes.

    Maps become ``dict``, sequences and sets become ``list``, bytes become
    ``str``, numbers stay ``int``/``float``, dates become ISO strings.
    """
    kind = kind_of(value)
    if kind is ValueKind.MAP:
        return {str(k): normalize(v) for k, v in value.items()}
    if kind is ValueKind.LIST:
        return [normalize(v) for v in value]
    if kind is ValueKind.NUMBER and not isinstance(value, (int, float)):
        return _to_float(value)
    if kind is ValueKind.STRING and not isinstance(value, str):
        return as_string(value)
    return value


def is_empty(value: Any) -> bool:
    """Emptiness predicate behind ``required`` and the skip-if-empty policy.

    Absent is empty; a string is empty iff it is blank; a list is empty iff it
    has no items. Maps, numbers and booleans are never empty.
    """
    kind = kind_of(value)
    if kind is ValueKind.ABSENT:
        return True
    if kind is ValueKind.STRING:
        text = as_string(value)
        return text is None or text.strip() == ""
    if kind is ValueKind.LIST:
        return len(value) == 0
    return False


def _to_float(value: Any) -> float | None:
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def _format_number(value: Any) -> str | None:
    if isinstance(value, int):
        return str(value)
    number = _to_float(value)
    if number is None:
        return None
    if number.is_integer():
        return str(int(number))
    return repr(number)


def as_string(value: Any) -> str | None:
    """Read a value as text, or None if it has no textual form."""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            return None
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()

    kind = kind_of(value)
    if kind is ValueKind.BOOLEAN:
        return "true" if value else "false"
    if kind is ValueKind.NUMBER:
        return _format_number(value)
    if kind is ValueKind.STRING:
        return str(value)
    return None


def text_length(text: str) -> int:
    """Length in UTF-16 code units, as a browser or .NET string reports it.

    Characters outside the Basic Multilingual Plane (most emoji) count as two.
    """
    return len(text.encode("utf-16-le")) // 2


def as_number(value: Any) -> float | None:
    """Read a value as a finite number. Numeric strings are accepted."""
    kind = kind_of(value)
    if kind is ValueKind.NUMBER:
        return _to_float(value)
    if kind is ValueKind.STRING:
        text = as_string(value)
        if text is None:
            return None
        text = text.strip()
        if not _NUMBER_RE.match(text):
            return None
        return _to_float(text)
    return None


def as_int(value: Any) -> int | None:
    """Read a value as an integer bound (floats truncate, strings must be integral)."""
    kind = kind_of(value)
    if kind is ValueKind.NUMBER:
        number = _to_float(value)
        return int(number) if number is not None else None
    if kind is ValueKind.STRING:
        text = as_string(value)
        if text is None or not _INT_RE.match(text.strip()):
            return None
        return int(text.strip())
    return None


def as_list(value: Any) -> list[Any] | None:
    """Read a value as an ordered list of raw values."""
    if kind_of(value) is ValueKind.LIST:
        return list(value)
    return None


def as_mapping(value: Any) -> dict[str, Any] | None:
    """Read a value as a string-keyed map of raw values."""
    if kind_of(value) is ValueKind.MAP:
        return {str(k): v for k, v in value.items()}
    return None


def loose_equals(left: Any, right: Any) -> bool:
    """Loose equality used by condition operators.

    - Two empty values are equal (absent, blank string, empty list).
    - If either side is a number, both sides are compared numerically when
      both can be read as numbers ("5" equals 5).
    - Other scalars compare by their string form (True equals "true").
    - Lists and maps compare structurally after normalization.
    """
    left_empty, right_empty = is_empty(left), is_empty(right)
    if left_empty or right_empty:
        return left_empty and right_empty

    left_kind, right_kind = kind_of(left), kind_of(right)
    if ValueKind.NUMBER in (left_kind, right_kind):
        left_num, right_num = as_number(left), as_number(right)
        if left_num is not None and right_num is not None:
            return left_num == right_num

    structured = (ValueKind.LIST, ValueKind.MAP)
    if left_kind in structured or right_kind in structured:
        return normalize(left) == normalize(right)

    return as_string(left) == as_string(right)


def lookup(container: Any, key: str) -> Any:
    """Get ``container[key]`` from a map-like value, or None."""
    mapping = container if isinstance(container, Mapping) else None
    if mapping is None:
        return None
    return mapping.get(key)
