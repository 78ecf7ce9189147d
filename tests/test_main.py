import io
import os
import subprocess
import sys
from pathlib import Path

from google.protobuf import descriptor_pb2 as d2
from google.protobuf.compiler import plugin_pb2 as plugin

from protoc_gen_flow.main import emit_response, error_response, files_response, run
from protoc_gen_flow.models import GeneratedOutput

REPO_ROOT = Path(__file__).resolve().parents[1]

FDP = d2.FieldDescriptorProto

WELL_KNOWN = [
    "google/protobuf/timestamp.proto",
    "google/protobuf/duration.proto",
    "google/protobuf/any.proto",
]

STORE_ITEM_BLOCK = (
    "export type Item = {\n"
    "  id: string,\n"
    "  name: string,\n"
    "  tags: string[],\n"
    "  total: number,\n"
    "  ref: Category,\n"
    "};\n"
)


def _make_store_file() -> d2.FileDescriptorProto:
    fd = d2.FileDescriptorProto(name="store.proto", package="store")
    item = fd.message_type.add(name="Item")
    item.field.add(name="id", number=1, type=FDP.TYPE_INT64, label=FDP.LABEL_OPTIONAL)
    item.field.add(name="name", number=2, type=FDP.TYPE_STRING, label=FDP.LABEL_OPTIONAL)
    item.field.add(name="tags", number=3, type=FDP.TYPE_STRING, label=FDP.LABEL_REPEATED)
    item.field.add(name="total", number=4, type=FDP.TYPE_DOUBLE, label=FDP.LABEL_OPTIONAL)
    item.field.add(name="ref", number=5, type=FDP.TYPE_MESSAGE, label=FDP.LABEL_OPTIONAL,
                   type_name=".store.Category")
    category = fd.message_type.add(name="Category")
    category.field.add(name="created", number=1, type=FDP.TYPE_MESSAGE, label=FDP.LABEL_OPTIONAL,
                       type_name=".google.protobuf.Timestamp")
    category.field.add(name="kind", number=2, type=FDP.TYPE_ENUM, label=FDP.LABEL_OPTIONAL,
                       type_name=".store.Kind")
    return fd


def _make_request(parameter: str = "", with_well_known: bool = True) -> bytes:
    request = plugin.CodeGeneratorRequest(parameter=parameter)
    if with_well_known:
        for name in WELL_KNOWN:
            request.proto_file.add(name=name, package="google.protobuf")
    request.proto_file.append(_make_store_file())
    request.file_to_generate.append("store.proto")
    return request.SerializeToString()


def _parse_response(data: bytes) -> plugin.CodeGeneratorResponse:
    return plugin.CodeGeneratorResponse.FromString(data)


class TestRun:
    def test_store_file_end_to_end(self):
        response = run(_make_request())

        assert not response.HasField("error")
        assert [f.name for f in response.file] == ["store.flow.js"]
        content = response.file[0].content
        assert content.startswith("/* @flow */\n")
        assert STORE_ITEM_BLOCK in content
        assert "  created: string,\n" in content
        assert "  kind: UNKNOWN TYPE,\n" in content

    def test_supports_proto3_optional(self):
        response = run(_make_request())
        assert response.supported_features & plugin.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL

    def test_run_twice_is_byte_identical(self):
        first = run(_make_request()).SerializeToString(deterministic=True)
        second = run(_make_request()).SerializeToString(deterministic=True)
        assert first == second

    def test_fewer_files_than_prefix_gives_empty_response(self):
        response = run(_make_request(with_well_known=False))
        assert not response.HasField("error")
        assert len(response.file) == 0

    def test_well_known_skip_mode(self):
        response = run(_make_request("skip=well_known", with_well_known=False))
        assert [f.name for f in response.file] == ["store.flow.js"]

    def test_requested_skip_mode(self):
        response = run(_make_request("skip=requested"))
        assert [f.name for f in response.file] == ["store.flow.js"]

    def test_bad_option_is_error_response(self):
        response = run(_make_request("skip=everything"))
        assert "Unknown skip mode" in response.error
        assert len(response.file) == 0

    def test_unsupported_fail_is_error_response(self):
        response = run(_make_request("unsupported=fail"))
        assert "store.proto:Category.kind" in response.error
        assert len(response.file) == 0


class TestEmitResponse:
    def test_files_response(self):
        out = io.BytesIO()
        emit_response(files_response([GeneratedOutput("a.flow.js", "x")]), out)
        response = _parse_response(out.getvalue())
        assert response.file[0].name == "a.flow.js"
        assert response.file[0].content == "x"
        assert not response.HasField("error")

    def test_error_response(self):
        out = io.BytesIO()
        emit_response(error_response("boom"), out)
        response = _parse_response(out.getvalue())
        assert response.error == "boom"
        assert len(response.file) == 0


def _run_plugin(data: bytes) -> subprocess.CompletedProcess:
    env = dict(os.environ)
    src = str(REPO_ROOT / "src")
    env["PYTHONPATH"] = src + os.pathsep + env.get("PYTHONPATH", "")
    cmd = [sys.executable, "-m", "protoc_gen_flow.main"]
    return subprocess.run(cmd, input=data, cwd=str(REPO_ROOT), env=env,
                          stdout=subprocess.PIPE, stderr=subprocess.PIPE)


class TestCli:
    def test_plugin_process(self):
        res = _run_plugin(_make_request())
        assert res.returncode == 0, res.stderr.decode("utf-8", errors="ignore")

        response = _parse_response(res.stdout)
        assert [f.name for f in response.file] == ["store.flow.js"]
        assert STORE_ITEM_BLOCK in response.file[0].content

    def test_malformed_input_exits_without_output(self):
        data = _make_request()
        res = _run_plugin(data[:-5])

        assert res.returncode == 1
        assert res.stdout == b""
        assert b"FATAL: unable to parse protobuf" in res.stderr
