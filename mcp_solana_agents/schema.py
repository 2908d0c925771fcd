"""
Structural validators for tool parameters.

A schema is a small tree of nodes: ``ObjectSchema`` at the top, whose fields are
leaf validators (strings, public keys, numbers, enums, ...), ``OptionalSchema``
wrappers, unions or nested objects. Every node can

- validate a value and return the cleaned result (``validate``),
- report the Python type a function parameter should carry (``python_type``),
  which is what FastMCP reads when a tool is exposed over MCP.

Validation failures raise ``ValidationError`` with the dotted path of every
offending field.
"""

import math
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Union

from solders.pubkey import Pubkey

from .errors import ValidationError


def _label(path: str) -> str:
    return path or "value"


class Schema:
    """Base node. Subclasses implement `_check`."""

    kind = "any"

    def __init__(self, description: Optional[str] = None):
        self.description = description

    def validate(self, value: Any, path: str = "") -> Any:
        return self._check(value, path)

    def _check(self, value: Any, path: str) -> Any:
        return value

    def python_type(self) -> Any:
        return Any

    def optional(self) -> "OptionalSchema":
        return OptionalSchema(self)

    def _fail(self, path: str, message: str):
        raise ValidationError(f"{_label(path)}: {message}", [_label(path)])

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.description!r})"


class StringSchema(Schema):
    kind = "string"

    def __init__(self, description: Optional[str] = None, min_length: Optional[int] = None):
        super().__init__(description)
        self.min_length = min_length

    def _check(self, value: Any, path: str) -> str:
        if not isinstance(value, str):
            self._fail(path, f"expected string, received {type(value).__name__}")
        if self.min_length is not None and len(value) < self.min_length:
            self._fail(path, f"must contain at least {self.min_length} character(s)")
        return value

    def python_type(self) -> Any:
        return str


class PublicKeySchema(StringSchema):
    """A base58 Solana address."""

    kind = "pubkey"

    def _check(self, value: Any, path: str) -> str:
        value = super()._check(value, path)
        try:
            Pubkey.from_string(value)
        except ValueError:
            self._fail(path, f"invalid public key {value!r}")
        return value


class NumberSchema(Schema):
    kind = "number"

    def __init__(self, description: Optional[str] = None, positive: bool = False,
                 minimum: Optional[float] = None):
        super().__init__(description)
        self.positive = positive
        self.minimum = minimum

    def _accepts(self, value: Any) -> bool:
        return isinstance(value, (int, float)) and not isinstance(value, bool)

    def _check(self, value: Any, path: str) -> Any:
        if not self._accepts(value):
            self._fail(path, f"expected {self.kind}, received {type(value).__name__}")
        if isinstance(value, float) and not math.isfinite(value):
            self._fail(path, "must be a finite number")
        if self.positive and value <= 0:
            self._fail(path, "must be greater than 0")
        if self.minimum is not None and value < self.minimum:
            self._fail(path, f"must be greater than or equal to {self.minimum}")
        return value

    def python_type(self) -> Any:
        return float


class IntegerSchema(NumberSchema):
    kind = "integer"

    def _accepts(self, value: Any) -> bool:
        return isinstance(value, int) and not isinstance(value, bool)

    def python_type(self) -> Any:
        return int


class BooleanSchema(Schema):
    kind = "boolean"

    def _check(self, value: Any, path: str) -> bool:
        if not isinstance(value, bool):
            self._fail(path, f"expected boolean, received {type(value).__name__}")
        return value

    def python_type(self) -> Any:
        return bool


class EnumSchema(Schema):
    kind = "enum"

    def __init__(self, values: Sequence[str], description: Optional[str] = None):
        super().__init__(description)
        if not values:
            raise ValueError("EnumSchema needs at least one value")
        self.values = tuple(values)

    def _check(self, value: Any, path: str) -> Any:
        if value not in self.values:
            expected = " | ".join(repr(v) for v in self.values)
            self._fail(path, f"expected one of {expected}, received {value!r}")
        return value

    def python_type(self) -> Any:
        return Literal[self.values]


class ArraySchema(Schema):
    kind = "array"

    def __init__(self, items: Schema, description: Optional[str] = None):
        super().__init__(description)
        self.items = items

    def _check(self, value: Any, path: str) -> List[Any]:
        if not isinstance(value, (list, tuple)):
            self._fail(path, f"expected array, received {type(value).__name__}")
        return [self.items.validate(item, f"{_label(path)}[{i}]") for i, item in enumerate(value)]

    def python_type(self) -> Any:
        return List[self.items.python_type()]


class UnionSchema(Schema):
    """Accepts the first option that validates."""

    kind = "union"

    def __init__(self, options: Sequence[Schema], description: Optional[str] = None):
        super().__init__(description)
        if not options:
            raise ValueError("UnionSchema needs at least one option")
        self.options = tuple(options)

    def _check(self, value: Any, path: str) -> Any:
        for option in self.options:
            try:
                return option.validate(value, path)
            except ValidationError:
                continue
        self._fail(path, f"did not match any of {len(self.options)} allowed shapes")

    def python_type(self) -> Any:
        return Union[tuple(option.python_type() for option in self.options)]


class OptionalSchema(Schema):
    """Wrapper marking a field as not required. `None` passes through."""

    kind = "optional"

    def __init__(self, inner: Schema, description: Optional[str] = None):
        super().__init__(description or inner.description)
        self.inner = inner

    def unwrap(self) -> Schema:
        return self.inner

    def _check(self, value: Any, path: str) -> Any:
        if value is None:
            return None
        return self.inner.validate(value, path)

    def python_type(self) -> Any:
        return Optional[self.inner.python_type()]


class ObjectSchema(Schema):
    """
    A mapping of field name to validator, in declaration order.

    Keys not declared are dropped from the validated result. A missing (or
    ``None``) value is only allowed for ``OptionalSchema`` fields, and such
    fields are left out of the result rather than set to ``None``.
    """

    kind = "object"

    def __init__(self, fields: Mapping[str, Schema], description: Optional[str] = None):
        super().__init__(description)
        self.fields: Dict[str, Schema] = dict(fields)

    @property
    def shape(self) -> Dict[str, Schema]:
        return self.fields

    def _check(self, value: Any, path: str) -> Dict[str, Any]:
        if not isinstance(value, Mapping):
            self._fail(path, f"expected object, received {type(value).__name__}")

        cleaned: Dict[str, Any] = {}
        problems: List[str] = []
        bad_fields: List[str] = []
        for name, field in self.fields.items():
            field_path = f"{path}.{name}" if path else name
            raw = value.get(name)
            if raw is None:
                if isinstance(field, OptionalSchema):
                    continue
                problems.append(f"{field_path}: Required")
                bad_fields.append(field_path)
                continue
            try:
                cleaned[name] = field.validate(raw, field_path)
            except ValidationError as e:
                problems.append(str(e))
                bad_fields.extend(e.fields)

        if problems:
            raise ValidationError("; ".join(problems), bad_fields)
        return cleaned

    def python_type(self) -> Any:
        return Dict[str, Any]
