"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Function signatures, capability protocols and configuration records used by
handler construction.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol, runtime_checkable

from .runtime.types import Tool, ToolContext

ToolFunc = Callable[[ToolContext, Any], "Any | Awaitable[Any]"]
"""Typed tool: ``(ctx, input) -> output``. Schemas come from the annotations."""

RawToolFunc = Callable[[ToolContext, bytes], "bytes | Awaitable[bytes]"]
"""Raw tool: ``(ctx, json_bytes) -> json_bytes``. The schema is explicit."""


@runtime_checkable
class ScriptEvaluator(Protocol):
    """Script engine backing a dynamic tool."""

    def execute(self, ctx: ToolContext, input: bytes) -> bytes | Awaitable[bytes]: ...

    def get_timeout(self) -> float | None:
        """Declared timeout in seconds, or ``None`` for no limit."""
        ...


@runtime_checkable
class ToolRuntime(Protocol):
    """Capability set a handler needs from its runtime instance."""

    def add_tool(self, tool: Tool, handler: Any, *, timeout_s: float | None = None) -> None: ...

    def add_typed_tool(
        self,
        tool: Tool,
        handler: Any,
        *,
        input_type: Any,
        output_type: Any = None,
        timeout_s: float | None = None,
    ) -> None: ...

    async def run(self, reader: Any, writer: Any) -> None: ...

    @property
    def app(self) -> Any: ...


@dataclass(frozen=True, slots=True)
class HandlerDefaults:
    """Values used when no option overrides them."""

    name: str = "mcp-server"
    version: str = "1.0.0"


DEFAULTS = HandlerDefaults()


@dataclass(frozen=True, slots=True)
class ToolRegistration:
    """
    Deferred "attach this tool to the runtime" step.

    Attributes:
        kind: ``typed`` registers through the structural path, ``raw`` through
            the manual path with an explicit schema.
        tool: Name, description and schemas.
        handler: Adapted handler for the chosen path.
        input_type: Declared input type (typed only).
        output_type: Declared output type (typed only).
        timeout_s: Timeout the runtime enforces around each call.
    """

    kind: Literal["typed", "raw"]
    tool: Tool
    handler: Callable[..., Awaitable[Any]]
    input_type: Any = None
    output_type: Any = None
    timeout_s: float | None = None

    def apply(self, server: ToolRuntime) -> None:
        if self.kind == "typed":
            server.add_typed_tool(
                self.tool,
                self.handler,
                input_type=self.input_type,
                output_type=self.output_type,
                timeout_s=self.timeout_s,
            )
        else:
            server.add_tool(self.tool, self.handler, timeout_s=self.timeout_s)


@dataclass(slots=True)
class HandlerConfig:
    """Mutable record filled in by options during one construction call."""

    name: str = DEFAULTS.name
    version: str = DEFAULTS.version
    tools: list[ToolRegistration] = field(default_factory=list)
    server: ToolRuntime | None = None


Option = Callable[[HandlerConfig], None]
"""Configuration step. Raises ``ConfigurationError`` to abort construction."""
