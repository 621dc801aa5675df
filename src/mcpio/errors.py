"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Error taxonomy for mcpio.

Two disjoint kinds exist:

- ``ToolError``: a failure the calling agent should see. Adapters render it
  into a non-fatal ``isError`` tool result.
- ``MCPIOError`` and its subclasses: configuration failures raised while
  building a handler, and protocol failures that abort one exchange.
"""

from __future__ import annotations

VALIDATION_ERROR = "VALIDATION_ERROR"
PROCESSING_ERROR = "PROCESSING_ERROR"


class ToolError(Exception):
    """
    Tool execution error returned to the client as an ``isError`` result.

    Attributes:
        message: Human-readable failure message shown to the agent.
        code: Optional categorization code, empty when unset.
    """

    def __init__(self, message: str, code: str = "") -> None:
        super().__init__(message)
        self._message = message
        self._code = code

    @property
    def message(self) -> str:
        return self._message

    @property
    def code(self) -> str:
        return self._code

    def __str__(self) -> str:
        if self._code:
            return f"[{self._code}] {self._message}"
        return self._message

    def __repr__(self) -> str:
        return f"ToolError(message={self._message!r}, code={self._code!r})"


def new_tool_error(message: str) -> ToolError:
    """Create a tool error without a code."""
    return ToolError(message)


def new_tool_error_with_code(message: str, code: str) -> ToolError:
    """Create a tool error with an explicit code."""
    return ToolError(message, code)


def validation_error(message: str) -> ToolError:
    """Tool error tagged ``VALIDATION_ERROR``."""
    return ToolError(message, VALIDATION_ERROR)


def processing_error(message: str) -> ToolError:
    """Tool error tagged ``PROCESSING_ERROR``."""
    return ToolError(message, PROCESSING_ERROR)


class MCPIOError(RuntimeError):
    """Base error for configuration and protocol failures."""

    default_message = "mcpio error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


# ---------------------------------------------------------------------------
# Configuration errors (fatal to handler construction)
# ---------------------------------------------------------------------------


class ConfigurationError(MCPIOError):
    """Raised when a configuration option is invalid."""

    default_message = "invalid configuration"


class EmptyNameError(ConfigurationError):
    default_message = "name cannot be empty"


class EmptyVersionError(ConfigurationError):
    default_message = "version cannot be empty"


class EmptyToolNameError(ConfigurationError):
    default_message = "tool name cannot be empty"


class NilSchemaError(ConfigurationError):
    default_message = "schema cannot be nil"


class NilFunctionError(ConfigurationError):
    default_message = "function cannot be nil"


class NilServerError(ConfigurationError):
    default_message = "server cannot be nil"


class NilEvaluatorError(ConfigurationError):
    default_message = "evaluator cannot be nil"


class SchemaGenerationError(ConfigurationError):
    """Raised when a schema cannot be reflected from a declared type."""

    default_message = "schema cannot be generated"


class DuplicateToolError(ConfigurationError):
    default_message = "tool already registered"


# ---------------------------------------------------------------------------
# Protocol errors (abort the current exchange)
# ---------------------------------------------------------------------------


class ProtocolError(MCPIOError):
    """Raised when a tool call fails at the protocol level."""

    default_message = "protocol error"


class InvalidOperationError(ProtocolError):
    default_message = "invalid operation"


class InvalidParamsError(ProtocolError):
    default_message = "invalid params"


class InvalidJSONError(ProtocolError):
    default_message = "tool returned invalid JSON"


class ToolTimeoutError(ProtocolError):
    default_message = "tool timed out"
