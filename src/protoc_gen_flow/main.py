"""protoc plugin entry point: CodeGeneratorRequest on stdin, response on stdout."""

from __future__ import annotations

import sys
from typing import BinaryIO, List, Optional

from google.protobuf.compiler import plugin_pb2 as plugin

from protoc_gen_flow.decoder import decode_request, schema_file_from_descriptor, select_files
from protoc_gen_flow.errors import OptionsError, RequestDecodeError, UnsupportedFieldError
from protoc_gen_flow.generator.flow_generator import generate_files
from protoc_gen_flow.models import GeneratedOutput
from protoc_gen_flow.options import parse_options


def files_response(outputs: List[GeneratedOutput]) -> plugin.CodeGeneratorResponse:
    response = plugin.CodeGeneratorResponse(
        supported_features=plugin.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL,
    )
    for out in outputs:
        response.file.add(name=out.name, content=out.content)
    return response


def error_response(message: str) -> plugin.CodeGeneratorResponse:
    return plugin.CodeGeneratorResponse(error=message)


def run(data: bytes) -> plugin.CodeGeneratorResponse:
    """Decode a request, generate Flow files and build the response.

    Raises RequestDecodeError for malformed input. Option problems and
    unsupported fields under unsupported=fail become an error response.
    """
    request = decode_request(data)
    try:
        options = parse_options(request.parameter)
        schema_files = [schema_file_from_descriptor(f) for f in select_files(request, options)]
        outputs = generate_files(schema_files, options)
    except (OptionsError, UnsupportedFieldError) as e:
        return error_response(str(e))
    return files_response(outputs)


def emit_response(response: plugin.CodeGeneratorResponse, out: Optional[BinaryIO] = None) -> None:
    if out is None:
        out = sys.stdout.buffer
    out.write(response.SerializeToString(deterministic=True))
    out.flush()


def main() -> None:
    try:
        data = sys.stdin.buffer.read()
        response = run(data)
        emit_response(response)
    except (RequestDecodeError, OSError) as e:
        print(f"FATAL: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
