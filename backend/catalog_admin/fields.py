"""
Typed dynamic fields and value coercion.

A dynamic field value passes through three representations:

- raw input: a string from a text control, or a bool from a toggle
- display value: ``str`` for string and array (comma list), ``int`` for
  integer, ``bool`` for boolean
- storage value: the JSON-safe form sent to the catalog service

Coercion never raises. Malformed input always resolves to a
type-appropriate value.
"""
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional


class FieldType(str, Enum):
    """Primitive type of a dynamic field."""

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"


class Section(str, Enum):
    """Bucket a dynamic field belongs to."""

    CORE_IDENTITY = "core_identity"
    TECHNICAL_SPECS = "technical_specs"


ARRAY_DELIMITER = ","
ARRAY_JOINER = ", "

_LEADING_INT = re.compile(r"^\s*([+-]?)([0-9]+)")
_WHITESPACE = re.compile(r"\s+")

# Below the interpreter's int/str conversion limit, so parsed values stay
# JSON-serializable
MAX_INTEGER_DIGITS = 4000


@dataclass
class TypedField:
    """A user-defined attribute with an explicit primitive type."""

    key: str
    type: FieldType = FieldType.STRING
    value: Any = ""
    section: Optional[Section] = None

    @property
    def label(self) -> str:
        return field_label(self.key)

    def storage_value(self) -> Any:
        """Value in its canonical JSON-safe form."""
        return to_storage(self.type, self.value)


def normalize_key(name: str) -> str:
    """Lowercase a field name and replace whitespace runs with underscores."""
    return _WHITESPACE.sub("_", name.strip().lower())


def field_label(key: str) -> str:
    """Human label for a key: ``max_fan_size`` -> ``Max Fan Size``."""
    return " ".join(word[:1].upper() + word[1:] for word in key.split("_"))


def default_value(field_type: FieldType) -> Any:
    """Display value a freshly added field starts with."""
    if field_type == FieldType.INTEGER:
        return 0
    if field_type == FieldType.BOOLEAN:
        return False
    return ""


def coerce_integer(value: Any) -> int:
    """
    parseInt-style integer coercion.

    ``"42"`` -> 42, ``"3.7"`` -> 3, ``"12abc"`` -> 12, ``""``/``"abc"`` -> 0.
    Only ASCII digits count. Digit runs longer than MAX_INTEGER_DIGITS
    saturate to the largest value of that many digits.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if not match:
            return 0
        sign, digits = match.groups()
        digits = digits.lstrip("0") or "0"
        if len(digits) > MAX_INTEGER_DIGITS:
            magnitude = 10 ** MAX_INTEGER_DIGITS - 1
        else:
            magnitude = int(digits)
        return -magnitude if sign == "-" else magnitude
    return 0


def coerce_boolean(value: Any) -> bool:
    """Native bools pass through; strings compare case-insensitively to "true"."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() == "true"
    return False


def split_array(value: Any) -> List[str]:
    """
    Split a comma list into trimmed, non-empty elements.

    Elements containing a literal comma cannot survive this; that loss is
    accepted to stay compatible with data already stored this way.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = [str(item) for item in value if item is not None]
    else:
        items = str(value).split(ARRAY_DELIMITER)
    return [item.strip() for item in items if item.strip()]


def join_array(value: Any) -> str:
    """Render a stored list as the comma list shown while editing."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ARRAY_JOINER.join(str(item) for item in value if item is not None)
    return str(value)


def to_storage(field_type: FieldType, value: Any) -> Any:
    """Coerce a display or raw value into its storage form."""
    if field_type == FieldType.INTEGER:
        return coerce_integer(value)
    if field_type == FieldType.BOOLEAN:
        return coerce_boolean(value)
    if field_type == FieldType.ARRAY:
        return split_array(value)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def to_display(field_type: FieldType, value: Any) -> Any:
    """Coerce a stored value into its display form."""
    if field_type == FieldType.ARRAY:
        return join_array(value)
    if field_type == FieldType.INTEGER:
        return coerce_integer(value)
    if field_type == FieldType.BOOLEAN:
        return coerce_boolean(value)
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value if isinstance(value, str) else str(value)


def infer_type(value: Any) -> FieldType:
    """Infer the field type of a raw stored JSON value."""
    if isinstance(value, (list, tuple)):
        return FieldType.ARRAY
    if isinstance(value, bool) or value in ("true", "false"):
        return FieldType.BOOLEAN
    if isinstance(value, (int, float)):
        return FieldType.INTEGER
    return FieldType.STRING


def field_from_stored(key: str, value: Any, section: Optional[Section] = None) -> TypedField:
    """Build a display-ready field from a stored key/value pair."""
    field_type = infer_type(value)
    return TypedField(
        key=key,
        type=field_type,
        value=to_display(field_type, value),
        section=section,
    )
