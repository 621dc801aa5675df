"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

MCP (Model Context Protocol) runtime built on FastAPI.

Owns registered tools and serves them over JSON-RPC 2.0:

- HTTP: ``POST /mcp`` answering with JSON, or with server-sent events when
  the client only accepts ``text/event-stream``
- stdio: newline-delimited JSON-RPC over any pair of byte or text streams

Tools are registered through two paths. ``add_tool`` takes an explicit input
schema and a handler that builds its own ``CallToolResult``. ``add_typed_tool``
validates arguments into a declared type, serializes the typed output and
renders a raised ``ToolError`` as an ``isError`` result.
"""

from __future__ import annotations

import asyncio
import io
import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import TypeAdapter, ValidationError

from mcpio.errors import (
    ConfigurationError,
    InvalidOperationError,
    InvalidParamsError,
    NilSchemaError,
    ToolError,
    ToolTimeoutError,
)
from mcpio.runtime.protocol import PARSE_ERROR, MCPProtocolHandler, jsonrpc_error
from mcpio.runtime.settings import ServerSettings
from mcpio.runtime.types import (
    CallToolRequest,
    CallToolResult,
    Implementation,
    Tool,
    ToolContext,
    ToolHandler,
    TypedToolHandler,
)
from mcpio.schema import generate_schema

logger = logging.getLogger("mcpio.runtime")


@dataclass(frozen=True, slots=True)
class _RegisteredTool:
    tool: Tool
    handler: ToolHandler
    timeout_s: float | None = None


class MCPServer:
    """
    MCP runtime instance.

    Usage::

        server = MCPServer(Implementation(name="calc", version="1.0.0"))
        server.add_tool(tool, handler)

        # HTTP (ASGI)
        app = server.app

        # stdio
        asyncio.run(server.run(sys.stdin.buffer, sys.stdout.buffer))

    Args:
        implementation: Name and version advertised during ``initialize``.
        settings: HTTP settings, loaded from the environment when omitted.
        instructions: Optional instructions describing the server's purpose.
    """

    def __init__(
        self,
        implementation: Implementation,
        *,
        settings: ServerSettings | None = None,
        instructions: str | None = None,
    ) -> None:
        self._implementation = implementation
        self._settings = settings or ServerSettings.from_env()
        self._tools: dict[str, _RegisteredTool] = {}
        self._protocol = MCPProtocolHandler(self, instructions=instructions)
        self._app = self._create_app()

    @property
    def implementation(self) -> Implementation:
        return self._implementation

    @property
    def settings(self) -> ServerSettings:
        return self._settings

    @property
    def app(self) -> FastAPI:
        """
        The FastAPI application serving the JSON-RPC endpoint.

        Use this to mount the runtime into an existing app or for testing::

            from fastapi.testclient import TestClient
            client = TestClient(server.app)
        """
        return self._app

    @property
    def protocol(self) -> MCPProtocolHandler:
        return self._protocol

    # ''''''''''''
    # Registration
    # ''''''''''''

    def add_tool(
        self,
        tool: Tool,
        handler: ToolHandler,
        *,
        timeout_s: float | None = None,
    ) -> None:
        """Register a tool with an explicit input schema."""
        if tool.input_schema is None:
            raise NilSchemaError(f"tool '{tool.name}' has no input schema")
        if tool.input_schema.get("type") != "object":
            raise ConfigurationError(
                f"tool '{tool.name}' input schema must have type 'object'"
            )
        self._register(_RegisteredTool(tool=tool, handler=handler, timeout_s=timeout_s))

    def add_typed_tool(
        self,
        tool: Tool,
        handler: TypedToolHandler,
        *,
        input_type: Any,
        output_type: Any = None,
        timeout_s: float | None = None,
    ) -> None:
        """
        Register a tool whose arguments and result are typed.

        Schemas missing from ``tool`` are inferred: the input schema from
        ``input_type``, the output schema from ``output_type`` when that
        describes an object (MCP only advertises object output schemas).
        """
        input_adapter: TypeAdapter[Any] = TypeAdapter(input_type)
        output_adapter: TypeAdapter[Any] = TypeAdapter(
            output_type if output_type is not None else Any
        )
        if tool.input_schema is None:
            tool = tool.model_copy(update={"input_schema": input_adapter.json_schema()})
        if tool.output_schema is None and output_type is not None:
            reflected = generate_schema(output_type)
            if reflected.type == "object":
                tool = tool.model_copy(update={"output_schema": reflected.to_dict()})

        name = tool.name

        async def dispatch(ctx: ToolContext, request: CallToolRequest) -> CallToolResult:
            try:
                args = input_adapter.validate_python(request.arguments)
            except ValidationError as e:
                raise InvalidParamsError(
                    f"invalid arguments for tool '{name}': {e}"
                ) from e

            try:
                output = await handler(ctx, args)
            except ToolError as e:
                return CallToolResult.from_tool_error(e)

            structured = output_adapter.dump_python(output, mode="json")
            result = CallToolResult.text(json.dumps(structured))
            if isinstance(structured, dict):
                result.structured_content = structured
            return result

        self._register(_RegisteredTool(tool=tool, handler=dispatch, timeout_s=timeout_s))

    def _register(self, entry: _RegisteredTool) -> None:
        # A tool registered again under the same name replaces the earlier one
        # and keeps its place in the listing.
        name = entry.tool.name
        if name in self._tools:
            logger.debug("Replacing tool %s on %s", name, self._implementation.name)
        else:
            logger.debug("Registered tool %s on %s", name, self._implementation.name)
        self._tools[name] = entry

    def tools(self) -> list[Tool]:
        """Registered tools in registration order."""
        return [entry.tool for entry in self._tools.values()]

    def names(self) -> list[str]:
        return list(self._tools.keys())

    def get_tool(self, name: str) -> Tool | None:
        entry = self._tools.get(name)
        return entry.tool if entry is not None else None

    # '''''''''
    # Execution
    # '''''''''

    async def call_tool(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
        *,
        metadata: dict[str, Any] | None = None,
    ) -> CallToolResult:
        """
        Invoke a registered tool.

        Raises:
            InvalidOperationError: unknown tool name.
            ToolTimeoutError: the registered timeout elapsed.
            Exception: any protocol-level failure raised by the handler.
        """
        entry = self._tools.get(name)
        if entry is None:
            raise InvalidOperationError(f"unknown tool: {name}")

        ctx = ToolContext(
            tool_name=name,
            timeout_s=entry.timeout_s,
            metadata=dict(metadata or {}),
        )
        request = CallToolRequest(name=name, arguments=arguments or {})

        if entry.timeout_s is None:
            return await entry.handler(ctx, request)
        try:
            return await asyncio.wait_for(entry.handler(ctx, request), timeout=entry.timeout_s)
        except asyncio.TimeoutError as e:
            raise ToolTimeoutError(
                f"tool '{name}' timed out after {entry.timeout_s} seconds"
            ) from e

    async def handle_message(self, message: Any) -> dict[str, Any] | None:
        """Handle one decoded JSON-RPC message."""
        return await self._protocol.handle_message(message)

    # ''''''''''
    # Transports
    # ''''''''''

    async def run(self, reader: Any, writer: Any) -> None:
        """
        Serve newline-delimited JSON-RPC from ``reader`` to ``writer``.

        Both may be binary or text streams. Returns when ``reader`` reaches
        EOF; I/O errors propagate to the caller.
        """
        logger.info("stdio session started for %s", self._implementation.name)
        try:
            while True:
                line = await asyncio.to_thread(reader.readline)
                if not line:
                    break
                try:
                    if isinstance(line, bytes):
                        line = line.decode("utf-8")
                    line = line.strip()
                    if not line:
                        continue
                    body = json.loads(line)
                except ValueError:
                    reply: Any = jsonrpc_error(None, PARSE_ERROR, "Parse error")
                else:
                    reply = await self._protocol.handle_payload(body)
                if reply is not None:
                    await asyncio.to_thread(_write_line, writer, reply)
        finally:
            logger.info("stdio session ended for %s", self._implementation.name)

    def _create_router(self) -> APIRouter:
        """Build an APIRouter containing MCP routes."""
        router = APIRouter()
        settings = self._settings

        if settings.enable_health:

            @router.get(settings.health_path)
            async def health():
                return {
                    "status": "ok",
                    "server": self._implementation.name,
                    "version": self._implementation.version,
                    "tools_count": len(self._tools),
                }

        @router.post(settings.mcp_path)
        async def mcp_endpoint(request: Request):
            """Main JSON-RPC 2.0 endpoint for MCP."""
            try:
                body = await request.json()
            except ValueError:
                payload: Any = jsonrpc_error(None, PARSE_ERROR, "Parse error")
            else:
                payload = await self._protocol.handle_payload(body)

            if payload is None:
                return Response(status_code=202)
            if _wants_event_stream(request):
                return StreamingResponse(
                    _sse_events(payload),
                    media_type="text/event-stream",
                    headers={
                        "Cache-Control": "no-cache",
                        "X-Accel-Buffering": "no",
                    },
                )
            return JSONResponse(payload, status_code=200)

        return router

    def _create_app(self) -> FastAPI:
        """Build the FastAPI application with MCP routes."""
        app = FastAPI(
            title=self._implementation.name,
            version=self._implementation.version,
            description="mcpio MCP server",
        )
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(self._settings.cors_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        app.include_router(self._create_router())
        return app

    def run_http(self, **kwargs: Any) -> None:
        """
        Serve the HTTP app using uvicorn.

        Args:
            **kwargs: Additional arguments passed to ``uvicorn.run()``.
        """
        import uvicorn

        uvicorn.run(
            self._app,
            host=kwargs.pop("host", self._settings.host),
            port=kwargs.pop("port", self._settings.port),
            **kwargs,
        )


def _wants_event_stream(request: Request) -> bool:
    accept = request.headers.get("accept", "").lower()
    return "text/event-stream" in accept and "application/json" not in accept


async def _sse_events(payload: Any) -> AsyncIterator[str]:
    messages = payload if isinstance(payload, list) else [payload]
    for message in messages:
        yield f"event: message\ndata: {json.dumps(message)}\n\n"


def _write_line(writer: Any, payload: Any) -> None:
    data = json.dumps(payload, separators=(",", ":")) + "\n"
    if isinstance(writer, io.TextIOBase):
        writer.write(data)
    else:
        writer.write(data.encode("utf-8"))
    flush = getattr(writer, "flush", None)
    if flush is not None:
        flush()
