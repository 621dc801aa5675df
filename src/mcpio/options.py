"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Configuration options for ``new_tool_handler``.

Each option validates its arguments when applied and either mutates the
``HandlerConfig`` or raises a ``ConfigurationError``.
"""

from __future__ import annotations

import inspect
import typing
from collections.abc import Mapping
from datetime import timedelta
from typing import Any

from .errors import (
    EmptyNameError,
    EmptyToolNameError,
    EmptyVersionError,
    NilEvaluatorError,
    NilFunctionError,
    NilSchemaError,
    NilServerError,
    SchemaGenerationError,
)
from .runtime.types import Tool
from .schema import Schema, as_json_schema, generate_schema, script_input_schema
from .tools import create_raw_handler, create_typed_handler
from .types import (
    HandlerConfig,
    Option,
    RawToolFunc,
    ScriptEvaluator,
    ToolFunc,
    ToolRegistration,
    ToolRuntime,
)


def with_name(name: str) -> Option:
    """Set the server name."""

    def apply(cfg: HandlerConfig) -> None:
        if not name:
            raise EmptyNameError()
        cfg.name = name

    return apply


def with_version(version: str) -> Option:
    """Set the server version."""

    def apply(cfg: HandlerConfig) -> None:
        if not version:
            raise EmptyVersionError()
        cfg.version = version

    return apply


def with_tool(
    name: str,
    description: str,
    fn: ToolFunc,
    *,
    input_type: Any = None,
    output_type: Any = None,
) -> Option:
    """
    Add a typed tool with schemas reflected from its declared types.

    ``fn`` is called as ``fn(ctx, input)``. Unless given explicitly, the input
    type is the annotation of its second parameter and the output type is its
    return annotation.
    """

    def apply(cfg: HandlerConfig) -> None:
        if not name:
            raise EmptyToolNameError()
        if fn is None:
            raise NilFunctionError()

        in_type, out_type = _resolve_types(name, fn, input_type, output_type)
        input_schema = generate_schema(in_type)
        if input_schema.type != "object":
            raise SchemaGenerationError(
                f"tool '{name}' input type must describe an object"
            )
        tool = Tool(
            name=name,
            description=description,
            input_schema=input_schema.to_dict(),
        )
        cfg.tools.append(
            ToolRegistration(
                kind="typed",
                tool=tool,
                handler=create_typed_handler(fn),
                input_type=in_type,
                output_type=out_type,
            )
        )

    return apply


def with_raw_tool(
    name: str,
    description: str,
    input_schema: Schema | Mapping[str, Any] | None,
    fn: RawToolFunc,
    *,
    timeout_s: float | timedelta | None = None,
) -> Option:
    """Add a tool with manual JSON handling and an explicit input schema."""

    def apply(cfg: HandlerConfig) -> None:
        if not name:
            raise EmptyToolNameError()
        if input_schema is None:
            raise NilSchemaError()
        if fn is None:
            raise NilFunctionError()

        tool = Tool(
            name=name,
            description=description,
            input_schema=as_json_schema(input_schema),
        )
        cfg.tools.append(
            ToolRegistration(
                kind="raw",
                tool=tool,
                handler=create_raw_handler(fn),
                timeout_s=_timeout_seconds(timeout_s),
            )
        )

    return apply


def with_script_tool(name: str, description: str, evaluator: ScriptEvaluator) -> Option:
    """
    Add a tool backed by a script evaluator.

    The evaluator's ``execute`` becomes a raw tool function with an
    unconstrained object schema. Its declared timeout is handed to the
    runtime, which enforces it.
    """

    def apply(cfg: HandlerConfig) -> None:
        if not name:
            raise EmptyToolNameError()
        if evaluator is None:
            raise NilEvaluatorError()
        with_raw_tool(
            name,
            description,
            script_input_schema(),
            evaluator.execute,
            timeout_s=evaluator.get_timeout(),
        )(cfg)

    return apply


def with_server(server: ToolRuntime) -> Option:
    """Inject a runtime instance instead of building one from name/version."""

    def apply(cfg: HandlerConfig) -> None:
        if server is None:
            raise NilServerError()
        cfg.server = server

    return apply


def _resolve_types(
    name: str,
    fn: ToolFunc,
    input_type: Any,
    output_type: Any,
) -> tuple[Any, Any]:
    # Annotations are read only for the types not given explicitly.
    if input_type is None:
        input_type = _annotated_input(name, fn)
    if output_type is None:
        output_type = _annotated_output(fn)
    return input_type, output_type


def _annotated_input(name: str, fn: ToolFunc) -> Any:
    try:
        hints = typing.get_type_hints(fn)
        params = list(inspect.signature(fn).parameters.values())
    except (NameError, TypeError, ValueError) as e:
        raise SchemaGenerationError(
            f"cannot read type annotations of tool '{name}': {e}"
        ) from e

    if len(params) < 2:
        raise SchemaGenerationError(f"tool '{name}' function must accept (ctx, input)")
    input_type = hints.get(params[1].name)
    if input_type is None:
        raise SchemaGenerationError(
            f"tool '{name}' input parameter has no type annotation"
        )
    return input_type


def _annotated_output(fn: ToolFunc) -> Any:
    """Return annotation of ``fn``, or ``None`` when it cannot be read."""
    try:
        output_type = typing.get_type_hints(fn).get("return")
    except (NameError, TypeError, ValueError):
        return None
    if output_type is type(None):
        return None
    return output_type


def _timeout_seconds(value: float | timedelta | None) -> float | None:
    if isinstance(value, timedelta):
        value = value.total_seconds()
    if not value or value <= 0:
        return None
    return float(value)
