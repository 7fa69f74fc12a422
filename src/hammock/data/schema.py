"""Schema declarations and attribute coercion.

Each model declares its columns statically::

    class Post(Model):
        table = "posts"
        fields = (
            Field("title", "string"),
            Field("published", "bool"),
            Field("views", "int"),
        )

The registry turns that declaration into an ordered ``{name: Field}``
mapping once per model class. Rows read back from storage are coerced
through it, because SQLite happily hands back ``"1"`` for a column the
model thinks of as ``bool``.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, TypeAlias

from hammock.data.errors import DomainError

if TYPE_CHECKING:
    from hammock.data.model import Model


@dataclass(frozen=True, slots=True)
class Field:
    """A single declared column: name plus coercion type."""

    name: str
    type: str


Schema: TypeAlias = Mapping[str, Field]

# Every model has an integer primary key named ``id``.
ID_FIELD = Field("id", "int")

_TRUTHY = ("true", "1", "yes", "on")


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() in _TRUTHY
    return bool(value)


# Leading numeric prefix of a string: sign, digits, optional fraction and exponent.
_NUMERIC_PREFIX = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _to_int(value: Any) -> int:
    """Total integer cast. Never raises.

    Strings contribute their leading numeric prefix (``"12 apples"`` -> 12,
    ``"4.7"`` -> 4, ``"1e3"`` -> 1000); anything unparseable becomes 0.
    """
    if isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value)
        if match is None:
            return 0
        text = match.group()
        value = float(text) if any(c in text for c in ".eE") else int(text)
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


# Declared type name -> converter.
COERCIONS: dict[str, Callable[[Any], Any]] = {
    "bool": _to_bool,
    "int": _to_int,
    "string": str,
}


def coerce_type(name: str, value: Any, schema: Schema) -> Any:
    """Coerce a single column value to its declared type.

    ``None`` passes through untouched, as do columns the schema does not
    declare. Raises ``DomainError`` for a declared type with no
    converter. The casts themselves never fail.
    """
    field = schema.get(name)
    if field is None or value is None:
        return value
    try:
        convert = COERCIONS[field.type]
    except KeyError:
        msg = f"Unsupported type {field.type!r} declared for field {name!r}"
        raise DomainError(msg) from None
    return convert(value)


def coerce_attributes(attributes: Mapping[str, Any], schema: Schema) -> dict[str, Any]:
    """Coerce every value in *attributes* per *schema*."""
    return {name: coerce_type(name, value, schema) for name, value in attributes.items()}


def build_schema(declared: tuple[Field, ...]) -> Schema:
    """Build an ordered, read-only schema from a field declaration."""
    schema: dict[str, Field] = {ID_FIELD.name: ID_FIELD}
    for field in declared:
        schema[field.name] = field
    return MappingProxyType(schema)


class SchemaRegistry:
    """Per-database cache of model schemas.

    ``parse()`` computes a model's schema once and keeps it for the
    registry's lifetime. Later changes to the model's ``fields`` are not
    observed.
    """

    __slots__ = ("_by_model", "_by_table")

    def __init__(self) -> None:
        self._by_model: dict[type, Schema] = {}
        self._by_table: dict[str, Schema] = {}

    def parse(self, model_cls: type[Model]) -> Schema:
        """Return the cached schema for *model_cls*, computing it on first use."""
        schema = self._by_model.get(model_cls)
        if schema is None:
            schema = build_schema(tuple(model_cls.fields))
            self._by_model[model_cls] = schema
        return schema

    def register(self, model_cls: type[Model]) -> Schema:
        """Parse *model_cls* and index its schema under its table name."""
        schema = self.parse(model_cls)
        self._by_table[model_cls.table] = schema
        return schema

    def get(self, table: str) -> Schema | None:
        """Return the schema registered for *table*, or ``None``."""
        return self._by_table.get(table)

    def __contains__(self, table: object) -> bool:
        return table in self._by_table

    def __len__(self) -> int:
        return len(self._by_model)
