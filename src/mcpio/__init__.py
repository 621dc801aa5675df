"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

mcpio: build MCP tool servers from composable options.

Quick start::

    from pydantic import BaseModel

    from mcpio import new_tool_error, new_tool_handler, with_name, with_tool

    class DivideInput(BaseModel):
        a: float
        b: float

    class DivideOutput(BaseModel):
        result: float

    async def divide(ctx, args: DivideInput) -> DivideOutput:
        if args.b == 0:
            raise new_tool_error("division by zero")
        return DivideOutput(result=args.a / args.b)

    handler = new_tool_handler(
        with_name("calculator"),
        with_tool("divide", "Divide two numbers", divide),
    )
    handler.serve_stdio()  # or handler.run_http()
"""

from .errors import (
    PROCESSING_ERROR,
    VALIDATION_ERROR,
    ConfigurationError,
    DuplicateToolError,
    EmptyNameError,
    EmptyToolNameError,
    EmptyVersionError,
    InvalidJSONError,
    InvalidOperationError,
    InvalidParamsError,
    MCPIOError,
    NilEvaluatorError,
    NilFunctionError,
    NilSchemaError,
    NilServerError,
    ProtocolError,
    SchemaGenerationError,
    ToolError,
    ToolTimeoutError,
    new_tool_error,
    new_tool_error_with_code,
    processing_error,
    validation_error,
)
from .schema import (
    FieldDef,
    Schema,
    create_dynamic_schema,
    create_object_schema,
    create_string_schema,
    generate_schema,
)
from .runtime import (
    CallToolResult,
    Implementation,
    MCPServer,
    ServerSettings,
    Tool,
    ToolContext,
)
from .types import (
    DEFAULTS,
    HandlerConfig,
    HandlerDefaults,
    Option,
    RawToolFunc,
    ScriptEvaluator,
    ToolFunc,
    ToolRegistration,
    ToolRuntime,
)
from .tools import create_raw_handler, create_typed_handler
from .options import with_name, with_raw_tool, with_script_tool, with_server, with_tool, with_version
from .handler import Handler, new_tool_handler

__all__ = [
    "Handler",
    "new_tool_handler",
    "with_name",
    "with_version",
    "with_tool",
    "with_raw_tool",
    "with_script_tool",
    "with_server",
    "Option",
    "HandlerConfig",
    "HandlerDefaults",
    "DEFAULTS",
    "ToolRegistration",
    "ToolRuntime",
    "ToolFunc",
    "RawToolFunc",
    "ScriptEvaluator",
    "create_typed_handler",
    "create_raw_handler",
    "FieldDef",
    "Schema",
    "generate_schema",
    "create_dynamic_schema",
    "create_string_schema",
    "create_object_schema",
    "MCPServer",
    "ServerSettings",
    "Implementation",
    "Tool",
    "ToolContext",
    "CallToolResult",
    "ToolError",
    "new_tool_error",
    "new_tool_error_with_code",
    "validation_error",
    "processing_error",
    "VALIDATION_ERROR",
    "PROCESSING_ERROR",
    "MCPIOError",
    "ConfigurationError",
    "EmptyNameError",
    "EmptyVersionError",
    "EmptyToolNameError",
    "NilSchemaError",
    "NilFunctionError",
    "NilServerError",
    "NilEvaluatorError",
    "SchemaGenerationError",
    "DuplicateToolError",
    "ProtocolError",
    "InvalidOperationError",
    "InvalidParamsError",
    "InvalidJSONError",
    "ToolTimeoutError",
]
