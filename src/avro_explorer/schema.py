"""
Typed model of an Avro schema and a recursive-descent parser for it.

A parsed schema is a ``SchemaTree``: the root node plus an arena of every
named type (record, enum, fixed) keyed by its full name. Any later mention of
a named type inside the tree is a ``NamedRef`` that is resolved through the
arena, which is how recursive schemas are represented without cycles.
"""

from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union

import orjson

from avro_explorer.errors import SchemaError

PRIMITIVE_TYPES = (
    "null",
    "boolean",
    "int",
    "long",
    "float",
    "double",
    "bytes",
    "string",
)

# logical type -> underlying types it may annotate
LOGICAL_TYPES = {
    "decimal": ("bytes", "fixed"),
    "uuid": ("string", "fixed"),
    "date": ("int",),
    "time-millis": ("int",),
    "time-micros": ("long",),
    "timestamp-millis": ("long",),
    "timestamp-micros": ("long",),
    "timestamp-nanos": ("long",),
    "local-timestamp-millis": ("long",),
    "local-timestamp-micros": ("long",),
    "local-timestamp-nanos": ("long",),
    "duration": ("fixed",),
}


@dataclass(frozen=True)
class LogicalType:
    name: str
    precision: Optional[int] = None
    scale: int = 0


@dataclass(frozen=True)
class PrimitiveSchema:
    type: str
    logical: Optional[LogicalType] = None


@dataclass(frozen=True)
class Field:
    name: str
    schema: "Schema"


@dataclass(frozen=True)
class RecordSchema:
    name: str
    fields: Tuple[Field, ...]
    type: ClassVar[str] = "record"

    @cached_property
    def _index(self) -> Dict[str, int]:
        return {f.name: i for i, f in enumerate(self.fields)}

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def field(self, name: str) -> Optional[Field]:
        """Look up a field by name, or ``None`` if the record has no such field."""
        i = self._index.get(name)
        return None if i is None else self.fields[i]

    def has_field(self, name: str) -> bool:
        return name in self._index


@dataclass(frozen=True)
class EnumSchema:
    name: str
    symbols: Tuple[str, ...]
    type: ClassVar[str] = "enum"


@dataclass(frozen=True)
class ArraySchema:
    items: "Schema"
    type: ClassVar[str] = "array"


@dataclass(frozen=True)
class MapSchema:
    values: "Schema"
    type: ClassVar[str] = "map"


@dataclass(frozen=True)
class UnionSchema:
    branches: Tuple["Schema", ...]
    type: ClassVar[str] = "union"


@dataclass(frozen=True)
class FixedSchema:
    name: str
    size: int
    logical: Optional[LogicalType] = None
    type: ClassVar[str] = "fixed"


@dataclass(frozen=True)
class NamedRef:
    """Reference to a named type defined elsewhere in the same tree."""

    name: str
    type: ClassVar[str] = "ref"


Schema = Union[
    PrimitiveSchema,
    RecordSchema,
    EnumSchema,
    ArraySchema,
    MapSchema,
    UnionSchema,
    FixedSchema,
    NamedRef,
]

NamedSchema = Union[RecordSchema, EnumSchema, FixedSchema]


@dataclass(frozen=True)
class SchemaTree:
    """A parsed schema: the root node and the arena of named types."""

    root: Schema
    named: Dict[str, NamedSchema] = field(default_factory=dict, hash=False)

    def resolve(self, node: Schema) -> Schema:
        """Follow a ``NamedRef`` to its definition; other nodes pass through."""
        if isinstance(node, NamedRef):
            try:
                return self.named[node.name]
            except KeyError:
                raise SchemaError(f"Unknown named type {node.name!r}") from None
        return node

    @property
    def record(self) -> Optional[RecordSchema]:
        """The root record schema, or ``None`` if the root is not a record."""
        root = self.resolve(self.root)
        return root if isinstance(root, RecordSchema) else None


class _Parser:
    def __init__(self):
        self.named: Dict[str, NamedSchema] = {}

    def _fullname(self, name: Any, namespace: Optional[str]) -> str:
        if not isinstance(name, str) or not name:
            raise SchemaError(f"Named type has invalid name {name!r}")
        if "." in name or not namespace:
            return name
        return f"{namespace}.{name}"

    def _lookup(self, name: str, namespace: Optional[str]) -> Optional[str]:
        if namespace and "." not in name:
            candidate = f"{namespace}.{name}"
            if candidate in self.named:
                return candidate
        if name in self.named:
            return name
        return None

    def _register(self, fullname: str, node: NamedSchema) -> None:
        if fullname in self.named:
            raise SchemaError(f"Named type {fullname!r} defined more than once")
        self.named[fullname] = node

    def parse(self, obj: Any, namespace: Optional[str] = None) -> Schema:
        if isinstance(obj, str):
            return self._parse_name(obj, namespace)
        if isinstance(obj, list):
            return self._parse_union(obj, namespace)
        if isinstance(obj, dict):
            return self._parse_object(obj, namespace)
        raise SchemaError(f"Cannot interpret {obj!r} as a schema")

    def _parse_name(self, name: str, namespace: Optional[str]) -> Schema:
        if name in PRIMITIVE_TYPES:
            return PrimitiveSchema(name)
        fullname = self._lookup(name, namespace)
        if fullname is None:
            raise SchemaError(f"Reference to undefined type {name!r}")
        return NamedRef(fullname)

    def _parse_union(self, branches: list, namespace: Optional[str]) -> UnionSchema:
        parsed = []
        for branch in branches:
            node = self.parse(branch, namespace)
            if isinstance(node, UnionSchema):
                raise SchemaError("Unions may not immediately contain other unions")
            parsed.append(node)
        return UnionSchema(tuple(parsed))

    def _parse_object(self, obj: dict, namespace: Optional[str]) -> Schema:
        if "type" not in obj:
            raise SchemaError(f"Schema object without a 'type': {obj!r}")
        kind = obj["type"]

        if kind in PRIMITIVE_TYPES:
            return PrimitiveSchema(kind, self._logical(obj, kind))
        if kind == "record" or kind == "error":
            return self._parse_record(obj, namespace)
        if kind == "enum":
            return self._parse_enum(obj, namespace)
        if kind == "array":
            if "items" not in obj:
                raise SchemaError("Array schema without 'items'")
            return ArraySchema(self.parse(obj["items"], namespace))
        if kind == "map":
            if "values" not in obj:
                raise SchemaError("Map schema without 'values'")
            return MapSchema(self.parse(obj["values"], namespace))
        if kind == "fixed":
            return self._parse_fixed(obj, namespace)
        if isinstance(kind, (dict, list)):
            return self.parse(kind, namespace)
        if isinstance(kind, str):
            return self._parse_name(kind, namespace)
        raise SchemaError(f"Unknown schema type {kind!r}")

    def _namespace_of(self, obj: dict, namespace: Optional[str]) -> Optional[str]:
        name = obj.get("name")
        if isinstance(name, str) and "." in name:
            return name.rsplit(".", 1)[0]
        return obj.get("namespace", namespace) or None

    def _parse_record(self, obj: dict, namespace: Optional[str]) -> NamedRef:
        fullname = self._fullname(obj.get("name"), obj.get("namespace", namespace))
        inner_ns = self._namespace_of(obj, namespace)
        raw_fields = obj.get("fields")
        if not isinstance(raw_fields, list):
            raise SchemaError(f"Record {fullname!r} has no 'fields' list")

        # Placeholder so fields can refer back to this record
        self._register(fullname, RecordSchema(fullname, ()))
        fields = []
        seen = set()
        for raw in raw_fields:
            if not isinstance(raw, dict) or "name" not in raw or "type" not in raw:
                raise SchemaError(f"Malformed field in record {fullname!r}: {raw!r}")
            if raw["name"] in seen:
                raise SchemaError(f"Duplicate field {raw['name']!r} in record {fullname!r}")
            seen.add(raw["name"])
            fields.append(Field(raw["name"], self.parse(raw["type"], inner_ns)))
        self.named[fullname] = RecordSchema(fullname, tuple(fields))
        return NamedRef(fullname)

    def _parse_enum(self, obj: dict, namespace: Optional[str]) -> NamedRef:
        fullname = self._fullname(obj.get("name"), obj.get("namespace", namespace))
        symbols = obj.get("symbols")
        if not isinstance(symbols, list) or not all(isinstance(s, str) for s in symbols):
            raise SchemaError(f"Enum {fullname!r} needs a list of string symbols")
        if len(set(symbols)) != len(symbols):
            raise SchemaError(f"Enum {fullname!r} has duplicate symbols")
        self._register(fullname, EnumSchema(fullname, tuple(symbols)))
        return NamedRef(fullname)

    def _parse_fixed(self, obj: dict, namespace: Optional[str]) -> NamedRef:
        fullname = self._fullname(obj.get("name"), obj.get("namespace", namespace))
        size = obj.get("size")
        if not isinstance(size, int) or isinstance(size, bool) or size < 0:
            raise SchemaError(f"Fixed {fullname!r} needs a non-negative integer size")
        self._register(fullname, FixedSchema(fullname, size, self._logical(obj, "fixed")))
        return NamedRef(fullname)

    def _logical(self, obj: dict, kind: str) -> Optional[LogicalType]:
        name = obj.get("logicalType")
        if not isinstance(name, str) or kind not in LOGICAL_TYPES.get(name, ()):
            # Unknown or misplaced logical types fall back to the base type
            return None
        if name == "decimal":
            precision = obj.get("precision")
            scale = obj.get("scale", 0)
            if not isinstance(precision, int) or precision <= 0:
                return None
            if not isinstance(scale, int) or scale < 0 or scale > precision:
                return None
            return LogicalType(name, precision, scale)
        if name == "uuid" and kind == "fixed" and obj.get("size") != 16:
            return None
        if name == "duration" and obj.get("size") != 12:
            return None
        return LogicalType(name)


def parse_schema(source: Union[str, bytes, dict, list]) -> SchemaTree:
    """Parse a schema from JSON text (or an already-decoded JSON value).

    Raises:
        SchemaError: if the JSON is malformed or does not describe a valid schema
    """
    if isinstance(source, (str, bytes)):
        try:
            source = orjson.loads(source)
        except orjson.JSONDecodeError as e:
            raise SchemaError(f"Schema is not valid JSON: {e}") from e
    parser = _Parser()
    root = parser.parse(source)
    return SchemaTree(root, parser.named)
