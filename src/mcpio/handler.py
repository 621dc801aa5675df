"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Handler construction and the transport facade exposed to host applications.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any

from .runtime.server import MCPServer
from .runtime.types import Implementation
from .types import HandlerConfig, Option, ToolRuntime

logger = logging.getLogger("mcpio")


class Handler:
    """
    Assembled MCP handler.

    Holds the runtime instance and dispatches the three transports to it. A
    handler has no mutable state of its own and can be shared across
    concurrent requests.

    ``Handler`` is itself an ASGI application, so it can be mounted directly::

        handler = new_tool_handler(with_tool("echo", "Echo text", echo))
        uvicorn.run(handler)
    """

    __slots__ = ("_server", "_http_app")

    def __init__(self, server: ToolRuntime) -> None:
        self._server = server
        self._http_app = server.app

    @property
    def server(self) -> ToolRuntime:
        """The underlying runtime instance."""
        return self._server

    def get_server(self) -> ToolRuntime:
        """Return the underlying runtime instance for advanced usage."""
        return self._server

    async def serve_http(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        """ASGI entry point for request/response HTTP."""
        await self._http_app(scope, receive, send)

    async def serve_sse(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        """
        ASGI entry point for server-push streams.

        Delegates to ``serve_http``; the runtime picks SSE framing from the
        request's ``Accept`` header.
        """
        await self.serve_http(scope, receive, send)

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        await self.serve_http(scope, receive, send)

    def serve_stdio(self, stdin: Any = None, stdout: Any = None) -> None:
        """
        Serve newline-delimited JSON-RPC over a pair of streams.

        Blocks until ``stdin`` reaches EOF and re-raises the error that ended
        the exchange, if any. Defaults to the process's binary stdin/stdout.
        There is no cancellation; close the input stream to stop serving.
        """
        reader = stdin if stdin is not None else sys.stdin.buffer
        writer = stdout if stdout is not None else sys.stdout.buffer
        asyncio.run(self._server.run(reader, writer))

    def run_http(self, **kwargs: Any) -> None:
        """
        Serve this handler over HTTP using uvicorn.

        Host and port default to the runtime's settings when it has them.
        """
        import uvicorn

        settings = getattr(self._server, "settings", None)
        if settings is not None:
            kwargs.setdefault("host", settings.host)
            kwargs.setdefault("port", settings.port)
        uvicorn.run(self, **kwargs)


def new_tool_handler(*opts: Option) -> Handler:
    """
    Build a handler from configuration options.

    Options apply in order and the first failure aborts construction. Unless a
    runtime was injected with ``with_server``, one is created from the
    configured name and version. Tool registrations are then replayed on it
    in the order they were added.

    Raises:
        ConfigurationError: an option was invalid or the runtime rejected a
            registration.
    """
    cfg = HandlerConfig()
    for opt in opts:
        opt(cfg)

    if cfg.server is not None:
        server = cfg.server
    else:
        server = MCPServer(Implementation(name=cfg.name, version=cfg.version))

    for registration in cfg.tools:
        registration.apply(server)

    logger.debug(
        "Built MCP handler %s %s with %d tools",
        cfg.name,
        cfg.version,
        len(cfg.tools),
    )
    return Handler(server)
