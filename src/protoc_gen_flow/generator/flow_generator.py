from __future__ import annotations

import os
import sys
from typing import List

from protoc_gen_flow.errors import UnsupportedFieldError
from protoc_gen_flow.models import GeneratedOutput, Message, SchemaFile
from protoc_gen_flow.options import (
    UNSUPPORTED_FAIL,
    UNSUPPORTED_PLACEHOLDER,
    UNSUPPORTED_WARN,
    PluginOptions,
)
from protoc_gen_flow.type_mapper import MappedType, Unsupported, map_field

OUTPUT_SUFFIX = ".flow.js"

PREAMBLE = """
/* @flow */
// Code generated by protoc-gen-flow. DO NOT EDIT.
"""

INDENT = "  "


def output_name(proto_name: str) -> str:
    """order.proto -> order.flow.js; names without an extension keep their base."""
    base, _ = os.path.splitext(proto_name)
    return base + OUTPUT_SUFFIX


def render_field(name: str, mapped: MappedType) -> str:
    return f"{INDENT}{name}: {mapped.type},"


def _resolve(
    mapped: MappedType,
    location: str,
    policy: str,
) -> MappedType:
    """Apply the unsupported-type policy to one mapped field."""
    if not isinstance(mapped, Unsupported) or policy == UNSUPPORTED_PLACEHOLDER:
        return mapped
    if policy == UNSUPPORTED_FAIL:
        raise UnsupportedFieldError(f"{location}: {mapped.reason}")
    if policy == UNSUPPORTED_WARN:
        print(
            f"Warning: {location}: {mapped.reason}, emitting '{mapped.type}'",
            file=sys.stderr,
        )
    return mapped


def render_message(
    message: Message,
    package: str,
    policy: str = UNSUPPORTED_PLACEHOLDER,
    file_name: str = "",
) -> str:
    """Render one `export type` block, fields in declaration order."""
    lines: List[str] = [f"export type {message.name} = {{"]
    for field in message.fields:
        location = f"{file_name}:{message.name}.{field.name}" if file_name else f"{message.name}.{field.name}"
        mapped = _resolve(map_field(field, package), location, policy)
        lines.append(render_field(field.name, mapped))
    lines.append("};")
    return "\n".join(lines) + "\n"


def render_file(schema_file: SchemaFile, policy: str = UNSUPPORTED_PLACEHOLDER) -> str:
    parts: List[str] = [PREAMBLE]
    for message in schema_file.messages:
        parts.append("\n")
        parts.append(render_message(message, schema_file.package, policy, schema_file.name))
    return "".join(parts).lstrip("\n")


def generate_file(schema_file: SchemaFile, options: PluginOptions) -> GeneratedOutput:
    return GeneratedOutput(
        name=output_name(schema_file.name),
        content=render_file(schema_file, options.unsupported),
    )


def generate_files(
    schema_files: List[SchemaFile],
    options: PluginOptions,
) -> List[GeneratedOutput]:
    """Generate one output per schema file.

    Raises UnsupportedFieldError under unsupported=fail.
    """
    return [generate_file(f, options) for f in schema_files]
