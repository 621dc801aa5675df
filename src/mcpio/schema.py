"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Structural JSON schema construction.

Schemas come from three places:

- ``generate_schema``: reflected from a declared type (pydantic model,
  dataclass, TypedDict) through pydantic's ``TypeAdapter``.
- ``create_dynamic_schema``: assembled from a runtime list of ``FieldDef``.
- ``create_object_schema``: a flat object of string properties.

Nothing here validates values against a schema.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, PydanticUserError, TypeAdapter

from .errors import NilSchemaError, SchemaGenerationError

FieldType = Literal["string", "number", "integer", "boolean", "object", "array"]


class Schema(BaseModel):
    """
    Immutable JSON schema descriptor.

    Only the keywords this package builds are typed fields. Anything else a
    reflected schema carries (``title``, ``$defs``, ``default`` ...) is kept as
    an extra field and survives ``to_dict``.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    type: str | list[str] | None = None
    description: str | None = None
    properties: dict[str, Schema] | None = None
    required: list[str] | None = None
    enum: list[Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form, omitting keywords that were never set."""
        return self.model_dump(mode="json", exclude_unset=True)


@dataclass(frozen=True, slots=True)
class FieldDef:
    """
    One field for dynamic schema construction.

    Attributes:
        name: Property name.
        type: JSON type tag (``string``, ``number``, ``boolean``, ``object``, ``array``).
        description: Human-readable description.
        required: Whether the property is listed in ``required``.
        enum: Optional allowed values.
    """

    name: str
    type: FieldType | str
    description: str = ""
    required: bool = False
    enum: Sequence[str] | None = None


def _leaf(type_: str, description: str, enum: Sequence[str] | None) -> Schema:
    values: dict[str, Any] = {"type": type_}
    if description:
        values["description"] = description
    if enum:
        values["enum"] = list(enum)
    return Schema(**values)


def generate_schema(tp: Any) -> Schema:
    """
    Reflect a schema from a declared type.

    Raises:
        SchemaGenerationError: when pydantic cannot describe ``tp``.
    """
    try:
        raw = TypeAdapter(tp).json_schema()
    except (PydanticUserError, TypeError) as e:
        raise SchemaGenerationError(
            f"cannot generate schema for {getattr(tp, '__name__', tp)!s}: {e}"
        ) from e
    return Schema.model_validate(raw)


def create_dynamic_schema(fields: Iterable[FieldDef]) -> Schema:
    """
    Build an object schema from field definitions.

    A repeated name keeps its first position; the last definition wins.
    ``required`` follows the same order and is omitted when empty.
    """
    by_name: dict[str, FieldDef] = {}
    for field_def in fields:
        by_name[field_def.name] = field_def

    properties = {
        name: _leaf(f.type, f.description, f.enum) for name, f in by_name.items()
    }
    required = [name for name, f in by_name.items() if f.required]

    values: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        values["required"] = required
    return Schema(**values)


def create_string_schema(description: str, enum: Sequence[str] | None = None) -> Schema:
    """Create a string schema with optional allowed values."""
    return _leaf("string", description, enum)


def create_object_schema(
    description: str,
    properties: Mapping[str, str],
    required: Sequence[str] | None = None,
) -> Schema:
    """
    Create an object schema whose properties are all strings.

    Required names missing from ``properties`` are dropped.
    """
    props = {
        name: _leaf("string", desc, None) for name, desc in properties.items()
    }
    required_names: list[str] = []
    for name in required or ():
        if name in props and name not in required_names:
            required_names.append(name)

    values: dict[str, Any] = {"type": "object", "properties": props}
    if description:
        values["description"] = description
    if required_names:
        values["required"] = required_names
    return Schema(**values)


def script_input_schema() -> Schema:
    """Unconstrained object schema used for script-backed tools."""
    return Schema(type="object")


def as_json_schema(schema: Schema | Mapping[str, Any] | None) -> dict[str, Any]:
    """Normalize a ``Schema`` or plain mapping into a JSON schema dict."""
    if schema is None:
        raise NilSchemaError()
    if isinstance(schema, Schema):
        return schema.to_dict()
    return dict(schema)
