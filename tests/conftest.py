# conftest.py  (shared fixtures for the whole test tree)
import io
import sys
from pathlib import Path

import fastavro
import orjson
import pytest
from loguru import logger

ROOT = Path(__file__).parent.parent.resolve()
SRC = ROOT / "src"

# Add src directory to Python path for proper imports
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from avro_explorer.container import MAGIC  # noqa: E402
from avro_explorer.decoding.binary import encode_long  # noqa: E402
from avro_explorer.values import EnumValue, FixedValue, RecordValue, UnionValue  # noqa: E402

BTTF_SCHEMA = {
    "type": "record",
    "name": "Character",
    "namespace": "bttf",
    "fields": [
        {"name": "firstName", "type": "string"},
        {"name": "lastName", "type": "string"},
        {"name": "age", "type": "int"},
    ],
}

BTTF_RECORDS = [
    {"firstName": "Marty", "lastName": "McFly", "age": 24},
    {"firstName": "Biff", "lastName": "Tannen", "age": 72},
]

SYNC = bytes(range(16))


def write_avro(path, schema, records, codec="null", sync_interval=16000, metadata=None):
    """Write ``records`` to ``path`` with fastavro, the reference encoder."""
    with open(path, "wb") as fh:
        fastavro.writer(
            fh,
            fastavro.parse_schema(schema),
            records,
            codec=codec,
            sync_interval=sync_interval,
            metadata=metadata,
        )
    return Path(path)


def to_python(value):
    """Strip the value wrappers, giving the plain shape fastavro reads back."""
    if isinstance(value, RecordValue):
        return {k: to_python(v) for k, v in value.fields.items()}
    if isinstance(value, UnionValue):
        return to_python(value.value)
    if isinstance(value, EnumValue):
        return value.symbol
    if isinstance(value, FixedValue):
        return value.data
    if isinstance(value, list):
        return [to_python(v) for v in value]
    if isinstance(value, dict):
        return {k: to_python(v) for k, v in value.items()}
    return value


def encode_string(s) -> bytes:
    raw = s.encode("utf-8") if isinstance(s, str) else s
    return encode_long(len(raw)) + raw


def encode_datum(schema, record) -> bytes:
    buf = io.BytesIO()
    fastavro.schemaless_writer(buf, fastavro.parse_schema(schema), record)
    return buf.getvalue()


def build_container(schema, blocks, codec=None, sync=SYNC, trailing_sync=None) -> bytes:
    """Assemble a container file by hand.

    ``blocks`` is a list of ``(count, payload)`` pairs, written as-is with
    no compression, each followed by ``trailing_sync`` (default: ``sync``).
    """
    meta = {"avro.schema": orjson.dumps(schema)}
    if codec is not None:
        meta["avro.codec"] = codec.encode("utf-8")
    out = bytearray(MAGIC)
    out += encode_long(len(meta))
    for key, value in meta.items():
        out += encode_string(key) + encode_string(value)
    out += encode_long(0)
    out += sync
    for count, payload in blocks:
        out += encode_long(count) + encode_long(len(payload)) + payload
        out += trailing_sync if trailing_sync is not None else sync
    return bytes(out)


@pytest.fixture(autouse=True)
def _reset_logging():
    """CLI tests point loguru at captured streams; restore a plain sink."""
    yield
    logger.remove()
    logger.add(sys.stderr, level="WARNING")


@pytest.fixture
def bttf_file(tmp_path):
    return write_avro(tmp_path / "bttf.avro", BTTF_SCHEMA, BTTF_RECORDS)
