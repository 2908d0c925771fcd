"""Flatten a tool schema into the field-by-field shape MCP tool registration expects."""

from typing import Dict, List, NamedTuple

from .errors import SchemaShapeError
from .schema import ObjectSchema, OptionalSchema, Schema


class McpShape(NamedTuple):
    fields: Dict[str, Schema]
    keys: List[str]


def to_mcp_shape(schema: Schema) -> McpShape:
    """
    Unwraps optional fields one level deep and returns them with their names in
    declaration order. MCP parameters carry no required flag, so callers must
    treat every returned field as optional.
    """
    if not isinstance(schema, ObjectSchema):
        raise SchemaShapeError("top-level schema must be an object")

    fields: Dict[str, Schema] = {}
    for name, field in schema.shape.items():
        fields[name] = field.unwrap() if isinstance(field, OptionalSchema) else field

    return McpShape(fields=fields, keys=list(fields))
