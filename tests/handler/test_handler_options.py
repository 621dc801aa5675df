from __future__ import annotations

import asyncio
import functools
from datetime import timedelta

import pytest
from pydantic import BaseModel, Field

import mcpio.handler as handler_module
from mcpio import (
    DEFAULTS,
    EmptyNameError,
    EmptyToolNameError,
    EmptyVersionError,
    Implementation,
    MCPServer,
    NilEvaluatorError,
    NilFunctionError,
    NilSchemaError,
    NilServerError,
    SchemaGenerationError,
    ToolContext,
    create_object_schema,
    new_tool_handler,
    with_name,
    with_raw_tool,
    with_script_tool,
    with_server,
    with_tool,
    with_version,
)


class EchoInput(BaseModel):
    text: str = Field(description="Text to echo")


class EchoOutput(BaseModel):
    message: str = Field(description="Echoed message")


async def echo(ctx: ToolContext, args: EchoInput) -> EchoOutput:
    return EchoOutput(message=args.text)


def count_chars(ctx: ToolContext, args: EchoInput) -> int:
    return len(args.text)


def scalar_input(ctx: ToolContext, value: int) -> EchoOutput:
    return EchoOutput(message=str(value))


def unannotated(ctx, args):
    return args


def tag(prefix: str, ctx: ToolContext, args: EchoInput) -> EchoOutput:
    return EchoOutput(message=prefix + args.text)


class Shouter:
    def __call__(self, ctx, args):
        return EchoOutput(message=args.text.upper())


def raw_process(ctx: ToolContext, data: bytes) -> bytes:
    return b'{"result": "processed"}'


class DoublingEvaluator:
    def __init__(self, timeout_s: float | timedelta | None = 5.0) -> None:
        self.timeout_s = timeout_s

    def execute(self, ctx: ToolContext, input: bytes) -> bytes:
        return input

    def get_timeout(self) -> float | timedelta | None:
        return self.timeout_s


class RecordingRuntime:
    """Runtime double recording registrations in arrival order."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, float | None]] = []

    async def app(self, scope, receive, send):
        raise AssertionError("not served in these tests")

    def add_tool(self, tool, handler, *, timeout_s=None) -> None:
        self.calls.append(("raw", tool.name, timeout_s))

    def add_typed_tool(self, tool, handler, *, input_type, output_type=None, timeout_s=None) -> None:
        self.calls.append(("typed", tool.name, timeout_s))

    async def run(self, reader, writer) -> None:
        return None


def run_async(coro):
    return asyncio.run(coro)


RAW_SCHEMA = create_object_schema("Raw tool input", {"data": "Input data"}, ["data"])


def test_default_construction_uses_placeholder_identity():
    handler = new_tool_handler()

    server = handler.get_server()
    assert isinstance(server, MCPServer)
    assert server.implementation.name == DEFAULTS.name == "mcp-server"
    assert server.implementation.version == DEFAULTS.version == "1.0.0"


@pytest.mark.parametrize("name,version", [("test-server", "1.2.3"), ("  spaced  ", "v 2")])
def test_name_and_version_are_stored_verbatim(name, version):
    handler = new_tool_handler(with_name(name), with_version(version))

    assert handler.server.implementation == Implementation(name=name, version=version)


def test_last_name_option_wins():
    handler = new_tool_handler(with_name("first"), with_name("second"))

    assert handler.server.implementation.name == "second"


@pytest.mark.parametrize(
    ("option", "expected"),
    [
        (with_name(""), EmptyNameError),
        (with_version(""), EmptyVersionError),
        (with_tool("", "desc", echo), EmptyToolNameError),
        (with_raw_tool("", "desc", RAW_SCHEMA, raw_process), EmptyToolNameError),
        (with_raw_tool("process", "desc", None, raw_process), NilSchemaError),
        (with_raw_tool("process", "desc", RAW_SCHEMA, None), NilFunctionError),
        (with_tool("echo", "desc", None), NilFunctionError),
        (with_script_tool("", "desc", DoublingEvaluator()), EmptyToolNameError),
        (with_script_tool("script", "desc", None), NilEvaluatorError),
        (with_server(None), NilServerError),
    ],
)
def test_invalid_option_aborts_construction(option, expected):
    with pytest.raises(expected):
        new_tool_handler(option)


def test_failed_option_never_builds_a_runtime(monkeypatch):
    built: list[Implementation] = []
    real_server = handler_module.MCPServer

    def counting_server(implementation, **kwargs):
        built.append(implementation)
        return real_server(implementation, **kwargs)

    monkeypatch.setattr(handler_module, "MCPServer", counting_server)

    with pytest.raises(EmptyVersionError):
        new_tool_handler(
            with_name("ok"),
            with_tool("echo", "Echo", echo),
            with_version(""),
            with_tool("later", "Never applied", echo),
        )
    assert built == []

    new_tool_handler(with_name("ok"))
    assert built == [Implementation(name="ok", version="1.0.0")]


def test_registrations_replay_in_insertion_order():
    runtime = RecordingRuntime()

    handler = new_tool_handler(
        with_tool("a", "first", echo),
        with_raw_tool("b", "second", RAW_SCHEMA, raw_process),
        with_server(runtime),
        with_script_tool("c", "third", DoublingEvaluator(timeout_s=timedelta(seconds=2))),
        with_tool("d", "fourth", count_chars),
    )

    assert handler.server is runtime
    assert runtime.calls == [
        ("typed", "a", None),
        ("raw", "b", None),
        ("raw", "c", 2.0),
        ("typed", "d", None),
    ]


def test_injected_runtime_skips_building_from_name_and_version(monkeypatch):
    injected = MCPServer(Implementation(name="test-server", version="1.0.0"))

    def fail(*args, **kwargs):
        raise AssertionError("runtime should not be constructed")

    monkeypatch.setattr(handler_module, "MCPServer", fail)

    handler = new_tool_handler(
        with_name("multi-tool-server"),
        with_version("1.2.3"),
        with_server(injected),
        with_tool("echo", "Echo input", echo),
    )

    assert handler.get_server() is injected
    assert handler.server.implementation.name == "test-server"
    assert injected.names() == ["echo"]


def test_real_runtime_registers_one_tool_per_step_in_order():
    handler = new_tool_handler(
        with_tool("echo", "Echo text", echo),
        with_raw_tool("process", "Process raw data", RAW_SCHEMA, raw_process),
        with_script_tool("script", "Run script", DoublingEvaluator()),
        with_tool("count", "Count characters", count_chars),
    )

    assert handler.server.names() == ["echo", "process", "script", "count"]


def test_later_tool_with_same_name_replaces_earlier_one():
    handler = new_tool_handler(
        with_tool("echo", "Echo", echo),
        with_raw_tool("process", "Process", RAW_SCHEMA, raw_process),
        with_tool("echo", "Echo again", echo),
    )

    assert handler.server.names() == ["echo", "process"]
    assert handler.server.get_tool("echo").description == "Echo again"


def test_typed_tool_schemas_come_from_annotations():
    handler = new_tool_handler(with_tool("echo", "Echo text", echo))

    tool = handler.server.get_tool("echo")
    assert tool.description == "Echo text"
    assert tool.input_schema["type"] == "object"
    assert tool.input_schema["properties"]["text"]["description"] == "Text to echo"
    assert tool.input_schema["required"] == ["text"]
    assert tool.output_schema["properties"]["message"]["type"] == "string"


def test_non_object_output_is_not_advertised():
    handler = new_tool_handler(with_tool("count", "Count", count_chars))

    assert handler.server.get_tool("count").output_schema is None


def test_explicit_types_override_annotations():
    handler = new_tool_handler(
        with_tool("echo", "Echo", unannotated, input_type=EchoInput, output_type=EchoOutput)
    )

    assert handler.server.get_tool("echo").input_schema["title"] == "EchoInput"


@pytest.mark.parametrize("fn", [unannotated, scalar_input])
def test_typed_tool_needs_an_object_input_type(fn):
    with pytest.raises(SchemaGenerationError):
        new_tool_handler(with_tool("bad", "Bad", fn))


def test_explicit_input_type_skips_annotation_lookup_for_partials():
    tagged = functools.partial(tag, "re: ")

    handler = new_tool_handler(with_tool("tag", "Tag text", tagged, input_type=EchoInput))

    tool = handler.server.get_tool("tag")
    assert tool.input_schema["required"] == ["text"]
    assert tool.output_schema is None
    result = run_async(handler.server.call_tool("tag", {"text": "hi"}))
    assert result.structured_content == {"message": "re: hi"}


def test_explicit_input_type_works_for_callable_objects():
    handler = new_tool_handler(
        with_tool("shout", "Shout", Shouter(), input_type=EchoInput, output_type=EchoOutput)
    )

    result = run_async(handler.server.call_tool("shout", {"text": "hi"}))
    assert result.structured_content == {"message": "HI"}
    assert handler.server.get_tool("shout").output_schema["required"] == ["message"]


def test_unannotated_partial_without_input_type_is_rejected():
    with pytest.raises(SchemaGenerationError):
        new_tool_handler(with_tool("tag", "Tag", functools.partial(tag, "re: ")))


def test_raw_tool_accepts_plain_mapping_schema():
    handler = new_tool_handler(
        with_raw_tool("process", "Process", {"type": "object"}, raw_process, timeout_s=1.5)
    )

    assert handler.server.get_tool("process").input_schema == {"type": "object"}


def test_script_tool_uses_unconstrained_object_schema():
    handler = new_tool_handler(with_script_tool("lua_double", "Double input", DoublingEvaluator()))

    assert handler.server.get_tool("lua_double").input_schema == {"type": "object"}
