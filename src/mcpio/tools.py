"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Adapters turning user functions into runtime tool handlers.

Every adapter applies the same classification after calling the user
function: a ``ToolError`` becomes a non-fatal ``isError`` result, anything
else propagates and aborts the call at the protocol level.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from typing import Any

from .errors import InvalidJSONError, ToolError
from .runtime.types import CallToolRequest, CallToolResult, ToolContext
from .types import RawToolFunc, ToolFunc

logger = logging.getLogger("mcpio")


async def call_user_function(fn: Any, *args: Any) -> Any:
    """Call ``fn`` and await the result; sync functions run in a worker thread."""
    if inspect.iscoroutinefunction(fn):
        return await fn(*args)
    result = await asyncio.to_thread(fn, *args)
    if inspect.isawaitable(result):
        return await result
    return result


def create_typed_handler(fn: ToolFunc):
    """
    Convert a typed function into a structural-path handler.

    The runtime has already validated the arguments into the declared input
    type. Errors are re-raised unchanged: the runtime renders a ``ToolError``
    as an ``isError`` result and treats anything else as a protocol failure.
    """

    async def handler(ctx: ToolContext, args: Any) -> Any:
        return await call_user_function(fn, ctx, args)

    return handler


def create_raw_handler(fn: RawToolFunc):
    """Wrap a raw JSON function to match the manual-path handler signature."""

    async def handler(ctx: ToolContext, request: CallToolRequest) -> CallToolResult:
        try:
            input_json = json.dumps(request.arguments).encode("utf-8")
        except (TypeError, ValueError) as e:
            return CallToolResult.error_text(f"Failed to marshal input: {e}")

        try:
            output_json = await call_user_function(fn, ctx, input_json)
        except ToolError as e:
            return CallToolResult.from_tool_error(e)

        # Raw tools must return valid JSON; the text is forwarded as returned.
        try:
            if isinstance(output_json, (bytes, bytearray)):
                output_text = bytes(output_json).decode("utf-8")
            else:
                output_text = output_json
            json.loads(output_text)
        except (TypeError, ValueError) as e:
            logger.debug("Tool %s returned invalid JSON", ctx.tool_name)
            raise InvalidJSONError(f"tool returned invalid JSON: {e}") from e

        return CallToolResult.text(output_text)

    return handler

