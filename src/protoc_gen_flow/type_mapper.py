"""Protobuf field type -> Flow type expression.

Every input has an answer: types Flow cannot express come back as
Unsupported, still carrying a placeholder string, and the generator decides
what to do with them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Union

from protoc_gen_flow.models import Field, Label, WireType

TIMESTAMP_TYPE_NAME = ".google.protobuf.Timestamp"

# Unset or unmappable types.
ANY_TYPE = "any"
# Enum values are not mapped yet.
ENUM_PLACEHOLDER = "UNKNOWN TYPE"


@dataclass(frozen=True)
class Mapped:
    type: str


@dataclass(frozen=True)
class Unsupported:
    type: str
    reason: str


MappedType = Union[Mapped, Unsupported]


# None marks wire types that need the field's type name (or have no Flow type).
BASE_TYPE_MAP: Dict[WireType, Optional[str]] = {
    WireType.DOUBLE: "number",
    WireType.FLOAT: "number",
    WireType.INT32: "number",
    WireType.FIXED32: "number",
    WireType.UINT32: "number",
    WireType.SFIXED32: "number",
    WireType.SINT32: "number",
    # JavaScript numbers cannot hold 64-bit integers, protobuf JSON uses strings
    WireType.INT64: "string",
    WireType.UINT64: "string",
    WireType.FIXED64: "string",
    WireType.SFIXED64: "string",
    WireType.SINT64: "string",
    WireType.BOOL: "boolean",
    WireType.STRING: "string",
    WireType.MESSAGE: None,
    WireType.BYTES: None,
    WireType.GROUP: None,
    WireType.ENUM: None,
}

_missing = set(WireType) - set(BASE_TYPE_MAP)
assert not _missing, f"BASE_TYPE_MAP lacks wire types: {sorted(t.name for t in _missing)}"


def local_type_name(type_name: str, package: str) -> str:
    """Strip the '.<package>.' prefix from a fully-qualified type name.

    Names outside the package are returned unchanged.
    """
    prefix = f".{package}."
    if type_name.startswith(prefix):
        return type_name[len(prefix):]
    return type_name


def _base_type(wire_type: Optional[WireType], type_name: str, package: str) -> MappedType:
    if wire_type is None:
        return Unsupported(ANY_TYPE, "unrecognized field type")

    base = BASE_TYPE_MAP[wire_type]
    if base is not None:
        return Mapped(base)

    if wire_type == WireType.MESSAGE:
        # Timestamps travel as RFC 3339 strings in JSON
        if type_name == TIMESTAMP_TYPE_NAME:
            return Mapped("string")
        return Mapped(local_type_name(type_name, package))
    if wire_type == WireType.ENUM:
        return Unsupported(ENUM_PLACEHOLDER, f"enum type {type_name} is not mapped")
    if wire_type == WireType.BYTES:
        return Unsupported(ANY_TYPE, "bytes fields are not mapped")
    return Unsupported(ANY_TYPE, "group fields are not supported")


def map_field_type(
    wire_type: Optional[WireType],
    label: Label,
    type_name: str,
    package: str,
) -> MappedType:
    """Map a field's type tag and label to a Flow type.

    Repeated fields get a '[]' suffix whatever the base type is.
    """
    result = _base_type(wire_type, type_name, package)
    if label != Label.REPEATED:
        return result
    if isinstance(result, Unsupported):
        return Unsupported(result.type + "[]", result.reason)
    return Mapped(result.type + "[]")


def map_field(field: Field, package: str) -> MappedType:
    return map_field_type(field.wire_type, field.label, field.type_name, package)
