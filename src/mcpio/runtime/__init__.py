"""
MCP runtime package.

Contains the FastAPI/JSON-RPC server that owns registered tools and serves
them over HTTP and stdio.
"""

from .protocol import MCP_PROTOCOL_VERSION, MCPProtocolHandler
from .server import MCPServer
from .settings import ServerSettings
from .types import (
    CallToolRequest,
    CallToolResult,
    Implementation,
    TextContent,
    Tool,
    ToolContext,
    ToolHandler,
    TypedToolHandler,
)

__all__ = [
    "MCP_PROTOCOL_VERSION",
    "MCPProtocolHandler",
    "MCPServer",
    "ServerSettings",
    "CallToolRequest",
    "CallToolResult",
    "Implementation",
    "TextContent",
    "Tool",
    "ToolContext",
    "ToolHandler",
    "TypedToolHandler",
]
