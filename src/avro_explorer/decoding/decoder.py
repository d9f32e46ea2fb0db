"""Schema-driven decoding of Avro binary values."""

import struct
import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from avro_explorer.decoding.binary import BinaryCursor
from avro_explorer.errors import EncodingError, SchemaError
from avro_explorer.schema import (
    ArraySchema,
    EnumSchema,
    FixedSchema,
    LogicalType,
    MapSchema,
    PrimitiveSchema,
    RecordSchema,
    Schema,
    SchemaTree,
    UnionSchema,
)
from avro_explorer.values import (
    Duration,
    EnumValue,
    FixedValue,
    RecordValue,
    UnionValue,
)

EPOCH_DATE = date(1970, 1, 1)
EPOCH_UTC = datetime(1970, 1, 1, tzinfo=timezone.utc)
EPOCH_NAIVE = datetime(1970, 1, 1)
MILLIS_PER_DAY = 86_400_000

_DURATION = struct.Struct("<3I")
_STRING = PrimitiveSchema("string")


class ValueDecoder:
    """Decodes values of one schema tree from a ``BinaryCursor``.

    Every ``decode`` call consumes exactly the bytes of one value. Errors are
    raised with the cursor offset; the container reader adds the file name.
    """

    def __init__(self, tree: SchemaTree):
        self.tree = tree
        self._readers: Dict[str, Callable[[Any, BinaryCursor], Any]] = {
            "null": lambda s, c: None,
            "boolean": lambda s, c: c.read_boolean(),
            "int": self._read_integer,
            "long": self._read_integer,
            "float": lambda s, c: c.read_float(),
            "double": lambda s, c: c.read_double(),
            "bytes": self._read_bytes,
            "string": self._read_string,
            "record": self._read_record,
            "enum": self._read_enum,
            "array": self._read_array,
            "map": self._read_map,
            "union": self._read_union,
            "fixed": self._read_fixed,
        }

    def decode(self, cursor: BinaryCursor, schema: Optional[Schema] = None) -> Any:
        node = self.tree.resolve(self.tree.root if schema is None else schema)
        return self._readers[node.type](node, cursor)

    # -- primitives ---------------------------------------------------------

    def _read_integer(self, schema: PrimitiveSchema, cursor: BinaryCursor) -> Any:
        n = cursor.read_long()
        if schema.logical is None:
            return n
        return _integer_logical(schema.logical, n)

    def _read_bytes(self, schema: PrimitiveSchema, cursor: BinaryCursor) -> Any:
        data = cursor.read_bytes()
        if schema.logical is not None and schema.logical.name == "decimal":
            return _to_decimal(data, schema.logical.scale)
        return data

    def _read_string(self, schema: PrimitiveSchema, cursor: BinaryCursor) -> Any:
        start = cursor.offset
        raw = cursor.read_bytes()
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(f"String is not valid UTF-8: {e.reason}", offset=start) from e
        if schema.logical is not None and schema.logical.name == "uuid":
            try:
                return uuid.UUID(text)
            except ValueError:
                return text
        return text

    # -- complex types ------------------------------------------------------

    def _read_record(self, schema: RecordSchema, cursor: BinaryCursor) -> RecordValue:
        fields = {}
        for f in schema.fields:
            fields[f.name] = self.decode(cursor, f.schema)
        return RecordValue(schema.name, fields)

    def _read_enum(self, schema: EnumSchema, cursor: BinaryCursor) -> EnumValue:
        start = cursor.offset
        index = cursor.read_long()
        if not 0 <= index < len(schema.symbols):
            raise SchemaError(
                f"Enum index {index} out of range for {schema.name!r} "
                f"({len(schema.symbols)} symbols)",
                offset=start,
            )
        return EnumValue(index, schema.symbols[index])

    def _blocks(self, cursor: BinaryCursor):
        """Yield once per item of an array/map block sequence."""
        while True:
            count = cursor.read_long()
            if count == 0:
                return
            if count < 0:
                count = -count
                cursor.read_long()  # block size in bytes
            for _ in range(count):
                yield

    def _read_array(self, schema: ArraySchema, cursor: BinaryCursor) -> list:
        return [self.decode(cursor, schema.items) for _ in self._blocks(cursor)]

    def _read_map(self, schema: MapSchema, cursor: BinaryCursor) -> dict:
        result = {}
        for _ in self._blocks(cursor):
            key = self._read_string(_STRING, cursor)
            result[key] = self.decode(cursor, schema.values)
        return result

    def _read_union(self, schema: UnionSchema, cursor: BinaryCursor) -> UnionValue:
        start = cursor.offset
        branch = cursor.read_long()
        if not 0 <= branch < len(schema.branches):
            raise SchemaError(
                f"Union branch {branch} out of range ({len(schema.branches)} branches)",
                offset=start,
            )
        return UnionValue(branch, self.decode(cursor, schema.branches[branch]))

    def _read_fixed(self, schema: FixedSchema, cursor: BinaryCursor) -> Any:
        data = cursor.read(schema.size)
        logical = schema.logical
        if logical is None:
            return FixedValue(data)
        if logical.name == "decimal":
            return _to_decimal(data, logical.scale)
        if logical.name == "uuid":
            return uuid.UUID(bytes=data)
        if logical.name == "duration":
            return Duration(*_DURATION.unpack(data))
        return FixedValue(data)


def _to_decimal(data: bytes, scale: int) -> Decimal:
    unscaled = int.from_bytes(data, "big", signed=True)
    digits = tuple(int(d) for d in str(abs(unscaled)))
    return Decimal((1 if unscaled < 0 else 0, digits, -scale))


def _integer_logical(logical: LogicalType, n: int) -> Any:
    name = logical.name
    try:
        if name == "date":
            return EPOCH_DATE + timedelta(days=n)
        if name == "time-millis":
            if not 0 <= n < MILLIS_PER_DAY:
                return n
            return (EPOCH_NAIVE + timedelta(milliseconds=n)).time()
        if name == "time-micros":
            if not 0 <= n < MILLIS_PER_DAY * 1000:
                return n
            return (EPOCH_NAIVE + timedelta(microseconds=n)).time()
        if name == "timestamp-millis":
            return EPOCH_UTC + timedelta(milliseconds=n)
        if name == "timestamp-micros":
            return EPOCH_UTC + timedelta(microseconds=n)
        if name == "timestamp-nanos":
            return EPOCH_UTC + timedelta(microseconds=n // 1000)
        if name == "local-timestamp-millis":
            return EPOCH_NAIVE + timedelta(milliseconds=n)
        if name == "local-timestamp-micros":
            return EPOCH_NAIVE + timedelta(microseconds=n)
        if name == "local-timestamp-nanos":
            return EPOCH_NAIVE + timedelta(microseconds=n // 1000)
    except OverflowError:
        # Outside the range datetime can represent; keep the raw count
        return n
    return n
