"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

HTTP and transport settings for the MCP runtime.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class ServerSettings:
    """
    Settings for the runtime's HTTP app.

    Attributes:
        host: Bind host used by ``run_http``.
        port: Bind port used by ``run_http``.
        mcp_path: JSON-RPC endpoint path.
        health_path: Health endpoint path.
        cors_origins: Allowed CORS origins.
        enable_health: Whether to expose the health endpoint.
        allow_batch_requests: Whether JSON-RPC batch requests are accepted.
    """

    host: str = "127.0.0.1"
    port: int = 8000
    mcp_path: str = "/mcp"
    health_path: str = "/health"
    cors_origins: tuple[str, ...] = field(default_factory=lambda: ("*",))
    enable_health: bool = True
    allow_batch_requests: bool = True

    @staticmethod
    def from_env() -> "ServerSettings":
        """Load settings from environment variables."""
        origins = os.getenv("MCPIO_CORS_ORIGINS", "*")
        return ServerSettings(
            host=os.getenv("MCPIO_HOST", "127.0.0.1"),
            port=int(os.getenv("MCPIO_PORT", "8000")),
            mcp_path=os.getenv("MCPIO_MCP_PATH", "/mcp"),
            health_path=os.getenv("MCPIO_HEALTH_PATH", "/health"),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            enable_health=_env_bool("MCPIO_ENABLE_HEALTH", True),
            allow_batch_requests=_env_bool("MCPIO_ALLOW_BATCH", True),
        )
