"""Decode the CodeGeneratorRequest protoc writes to the plugin's stdin."""

from __future__ import annotations

from typing import List, Optional

from google.protobuf import descriptor_pb2 as d2
from google.protobuf.compiler import plugin_pb2 as plugin
from google.protobuf.message import DecodeError

from protoc_gen_flow.errors import RequestDecodeError
from protoc_gen_flow.models import Field, Label, Message, SchemaFile, WireType
from protoc_gen_flow.options import (
    SKIP_PREFIX,
    SKIP_REQUESTED,
    SKIP_WELL_KNOWN,
    PluginOptions,
)

WELL_KNOWN_PATH_PREFIX = "google/protobuf/"


def decode_request(data: bytes) -> plugin.CodeGeneratorRequest:
    """Parse raw request bytes. Raises RequestDecodeError on malformed input."""
    request = plugin.CodeGeneratorRequest()
    try:
        request.ParseFromString(data)
    except DecodeError as e:
        raise RequestDecodeError(f"unable to parse protobuf: {e}") from e
    return request


def _wire_type(value: int) -> Optional[WireType]:
    try:
        return WireType(value)
    except ValueError:
        return None


def _label(value: int) -> Label:
    try:
        return Label(value)
    except ValueError:
        return Label.OPTIONAL


def field_from_descriptor(fd: d2.FieldDescriptorProto) -> Field:
    return Field(
        name=fd.name,
        wire_type=_wire_type(fd.type),
        label=_label(fd.label),
        type_name=fd.type_name,
    )


def schema_file_from_descriptor(fd: d2.FileDescriptorProto) -> SchemaFile:
    """Build the descriptor tree for one file: top-level messages and their fields."""
    messages: List[Message] = []
    for m in fd.message_type:
        fields = [field_from_descriptor(f) for f in m.field]
        messages.append(Message(name=m.name, fields=fields))
    return SchemaFile(name=fd.name, package=fd.package, messages=messages)


def is_well_known(file_name: str) -> bool:
    return file_name.startswith(WELL_KNOWN_PATH_PREFIX)


def select_files(
    request: plugin.CodeGeneratorRequest,
    options: PluginOptions,
) -> List[d2.FileDescriptorProto]:
    """Pick the files to generate, dropping dependencies assumed present already.

    With skip=prefix a request shorter than the prefix selects nothing.
    """
    files = list(request.proto_file)
    if options.skip == SKIP_PREFIX:
        return files[options.skip_prefix:]
    if options.skip == SKIP_WELL_KNOWN:
        return [f for f in files if not is_well_known(f.name)]
    if options.skip == SKIP_REQUESTED:
        by_name = {f.name: f for f in files}
        return [by_name[name] for name in request.file_to_generate if name in by_name]
    raise ValueError(f"Unknown skip mode: {options.skip}")
