from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional


class WireType(IntEnum):
    """Field type tags, numbered as in FieldDescriptorProto.Type."""

    DOUBLE = 1
    FLOAT = 2
    INT64 = 3
    UINT64 = 4
    INT32 = 5
    FIXED64 = 6
    FIXED32 = 7
    BOOL = 8
    STRING = 9
    GROUP = 10
    MESSAGE = 11
    BYTES = 12
    UINT32 = 13
    ENUM = 14
    SFIXED32 = 15
    SFIXED64 = 16
    SINT32 = 17
    SINT64 = 18


class Label(IntEnum):
    OPTIONAL = 1
    REQUIRED = 2
    REPEATED = 3


@dataclass
class Field:
    name: str
    wire_type: Optional[WireType]
    label: Label = Label.OPTIONAL
    type_name: str = ""

    @property
    def is_repeated(self) -> bool:
        return self.label == Label.REPEATED


@dataclass
class Message:
    name: str
    fields: List[Field] = field(default_factory=list)


@dataclass
class SchemaFile:
    name: str
    package: str = ""
    messages: List[Message] = field(default_factory=list)


@dataclass
class GeneratedOutput:
    name: str
    content: str
