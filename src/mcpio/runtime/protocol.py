"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

JSON-RPC 2.0 envelope handling and MCP method routing.

Shared by the HTTP and stdio transports; neither knows about MCP methods.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from mcpio.errors import InvalidOperationError, InvalidParamsError

if TYPE_CHECKING:
    from mcpio.runtime.server import MCPServer

logger = logging.getLogger("mcpio.runtime")

MCP_PROTOCOL_VERSION = "2025-06-18"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

MethodHandler = Callable[[dict[str, Any], Any], Awaitable[dict[str, Any]]]


def jsonrpc_response(id: Any, result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": id, "result": result}


def jsonrpc_error(id: Any, code: int, message: str, data: Any = None) -> dict[str, Any]:
    """Error reply; ``data`` is included only when given."""
    body: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        body["data"] = data
    return {"jsonrpc": "2.0", "id": id, "error": body}


class MCPProtocolHandler:
    """
    Validates JSON-RPC envelopes and routes MCP methods to the runtime.

    Failures are classified here: bad tool names or arguments answer
    ``INVALID_PARAMS``, any other exception raised while handling a method
    answers ``INTERNAL_ERROR`` and is logged. Tool errors never reach this
    layer; the runtime has already turned them into ``isError`` results.
    """

    def __init__(self, server: "MCPServer", *, instructions: str | None = None) -> None:
        self._server = server
        self._instructions = instructions
        self._methods: dict[str, MethodHandler] = {
            "initialize": self._initialize,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
            "ping": self._empty,
            "notifications/initialized": self._empty,
        }

    async def handle_payload(self, payload: Any) -> Any:
        """
        Handle a decoded request body.

        Returns a reply, a list of replies for a batch, or ``None`` when
        nothing needs to be sent back.
        """
        if not isinstance(payload, list):
            return await self.handle_message(payload)
        if not self._server.settings.allow_batch_requests:
            return jsonrpc_error(None, INVALID_REQUEST, "Batch requests disabled")
        if len(payload) == 0:
            return jsonrpc_error(None, INVALID_REQUEST, "Empty batch")

        replies = [await self.handle_message(item) for item in payload]
        replies = [reply for reply in replies if reply is not None]
        return replies or None

    async def handle_message(self, message: Any) -> dict[str, Any] | None:
        """
        Handle one message and return its reply.

        Notifications (messages without an ``id``) never get a reply, not even
        an error one; unknown notifications are ignored.
        """
        if not isinstance(message, dict):
            return jsonrpc_error(None, INVALID_REQUEST, "Invalid Request")

        reply = await self._dispatch(message)
        if "id" not in message:
            if "error" in reply:
                logger.debug(
                    "Dropped error reply to notification %s: %s",
                    message.get("method"),
                    reply["error"]["message"],
                )
            return None
        return reply

    async def _dispatch(self, message: dict[str, Any]) -> dict[str, Any]:
        msg_id = message.get("id")
        if message.get("jsonrpc") != "2.0":
            return jsonrpc_error(msg_id, INVALID_REQUEST, "Invalid JSON-RPC version")

        method = message.get("method")
        if not isinstance(method, str) or not method:
            return jsonrpc_error(msg_id, INVALID_REQUEST, "Missing method")

        params = message.get("params")
        if params is None:
            params = {}
        elif not isinstance(params, dict):
            return jsonrpc_error(msg_id, INVALID_PARAMS, "'params' must be an object")

        route = self._methods.get(method)
        if route is None:
            return jsonrpc_error(msg_id, METHOD_NOT_FOUND, f"Method not found: {method}")

        try:
            result = await route(params, msg_id)
        except (InvalidOperationError, InvalidParamsError) as e:
            return jsonrpc_error(msg_id, INVALID_PARAMS, str(e))
        except Exception as e:
            logger.exception("MCP method %s failed", method)
            return jsonrpc_error(msg_id, INTERNAL_ERROR, str(e))
        return jsonrpc_response(msg_id, result)

    async def _initialize(self, params: dict[str, Any], msg_id: Any) -> dict[str, Any]:
        info = self._server.implementation
        result: dict[str, Any] = {
            "protocolVersion": MCP_PROTOCOL_VERSION,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": info.name, "version": info.version},
        }
        if self._instructions:
            result["instructions"] = self._instructions
        return result

    async def _tools_list(self, params: dict[str, Any], msg_id: Any) -> dict[str, Any]:
        return {"tools": [tool.to_wire() for tool in self._server.tools()]}

    async def _tools_call(self, params: dict[str, Any], msg_id: Any) -> dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidParamsError("Missing 'name' in tools/call params")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        elif not isinstance(arguments, dict):
            raise InvalidParamsError("'arguments' must be an object")

        result = await self._server.call_tool(
            name, arguments, metadata={"jsonrpc_id": msg_id}
        )
        return result.to_wire()

    async def _empty(self, params: dict[str, Any], msg_id: Any) -> dict[str, Any]:
        return {}
