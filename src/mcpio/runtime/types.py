"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Wire models and call context for the MCP runtime.
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from mcpio.errors import ToolError


class Implementation(BaseModel):
    """Server identity advertised during ``initialize``."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str


class Tool(BaseModel):
    """MCP tool descriptor as listed by ``tools/list``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str = ""
    input_schema: dict[str, Any] | None = Field(default=None, alias="inputSchema")
    output_schema: dict[str, Any] | None = Field(default=None, alias="outputSchema")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class CallToolRequest(BaseModel):
    """Parameters of one ``tools/call`` request."""

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class CallToolResult(BaseModel):
    """Result of one tool call, successful or not."""

    model_config = ConfigDict(populate_by_name=True)

    content: list[TextContent] = Field(default_factory=list)
    structured_content: Any = Field(default=None, alias="structuredContent")
    is_error: bool = Field(default=False, alias="isError")
    meta: dict[str, Any] | None = Field(default=None, alias="_meta")

    @classmethod
    def text(cls, text: str) -> "CallToolResult":
        return cls(content=[TextContent(text=text)])

    @classmethod
    def error_text(cls, text: str) -> "CallToolResult":
        return cls(content=[TextContent(text=text)], is_error=True)

    @classmethod
    def from_tool_error(cls, err: ToolError) -> "CallToolResult":
        """Render a tool error as a non-fatal result; the text is ``err.message``."""
        result = cls.error_text(err.message)
        if err.code:
            result.meta = {"code": err.code}
        return result

    def to_wire(self) -> dict[str, Any]:
        out = self.model_dump(by_alias=True, exclude_none=True)
        out["isError"] = self.is_error
        return out


@dataclass(frozen=True, slots=True)
class ToolContext:
    """
    Per-call context passed to every tool handler.

    Attributes:
        tool_name: Name of the tool being invoked.
        request_id: Unique id for this invocation.
        timeout_s: Timeout the runtime enforces around the call, if any.
        metadata: Free-form metadata (transport, JSON-RPC id ...).
    """

    tool_name: str
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timeout_s: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


ToolHandler = Callable[[ToolContext, CallToolRequest], Awaitable[CallToolResult]]
"""Manual-path handler: receives the raw request, returns a finished result."""

TypedToolHandler = Callable[[ToolContext, Any], Awaitable[Any]]
"""Structural-path handler: receives validated input, returns typed output."""
