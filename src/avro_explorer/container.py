"""
Reader for the Avro object container file format.

Layout of a container file::

    magic "Obj\\x01" | metadata map | 16-byte sync marker
    ( object count | byte length | payload | sync marker )*

Values are decoded lazily, one block at a time, so a consumer that stops
iterating never causes later blocks to be read.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, Optional, Union

import orjson
from loguru import logger

from avro_explorer.decoding.binary import MAX_VARINT_BYTES, BinaryCursor
from avro_explorer.decoding.codecs import decompress, get_codec
from avro_explorer.decoding.decoder import ValueDecoder
from avro_explorer.errors import AvroExplorerError, FormatError, TruncatedDataError
from avro_explorer.schema import SchemaTree, parse_schema

MAGIC = b"Obj\x01"
SYNC_SIZE = 16
READ_CHUNK = 1 << 20
SCHEMA_KEY = "avro.schema"
CODEC_KEY = "avro.codec"


@dataclass
class Block:
    count: int
    offset: int
    payload_offset: int
    payload: bytes


class ContainerReader:
    """Iterates the values stored in one Avro container file.

    The header is parsed on construction, so a bad magic, unreadable schema or
    unknown codec fails immediately. Iterating the reader yields decoded
    values; any error raised mid-iteration carries the source name and offset
    and leaves already-yielded values valid.
    """

    def __init__(self, stream: BinaryIO, source: str = "<stream>"):
        self._stream = stream
        self.source = source
        self._offset = 0
        self.metadata: Dict[str, bytes] = {}
        try:
            self._read_header()
        except AvroExplorerError as e:
            raise e.with_context(source=source)
        self._decoder = ValueDecoder(self.schema)

    # -- stream primitives --------------------------------------------------

    def _check_length(self, size: int) -> None:
        """Reject a length read from the file that cannot fit in what is left of it."""
        if size < 0:
            raise FormatError(f"Negative length {size}", offset=self._offset)
        if not self._stream.seekable():
            return
        here = self._stream.tell()
        end = self._stream.seek(0, 2)
        self._stream.seek(here)
        if size > end - here:
            raise TruncatedDataError(
                f"Needed {size} bytes, only {end - here} left in the file",
                offset=self._offset,
            )

    def _read_exact(self, size: int) -> bytes:
        self._check_length(size)
        # Unseekable streams are read in chunks so a corrupt length cannot
        # force one huge allocation
        chunks = []
        wanted = size
        while wanted > 0:
            chunk = self._stream.read(min(wanted, READ_CHUNK))
            if not chunk:
                break
            chunks.append(chunk)
            wanted -= len(chunk)
        data = b"".join(chunks)
        if len(data) != size:
            raise TruncatedDataError(
                f"Needed {size} bytes, only {len(data)} left", offset=self._offset
            )
        self._offset += size
        return data

    def _read_long(self, first: Optional[bytes] = None) -> int:
        start = self._offset
        result = 0
        shift = 0
        while True:
            if first is not None:
                b, first = first, None
            else:
                b = self._stream.read(1)
            if not b:
                raise TruncatedDataError(
                    "Input ended inside a variable-length integer", offset=start
                )
            self._offset += 1
            byte = b[0]
            result |= (byte & 0x7F) << shift
            if not (byte & 0x80):
                break
            shift += 7
            if shift >= 7 * MAX_VARINT_BYTES:
                raise FormatError("Variable-length integer runs past 10 bytes", offset=start)
        if result >> 64:
            raise FormatError("Variable-length integer exceeds 64 bits", offset=start)
        return (result >> 1) ^ -(result & 1)

    def _skip(self, size: int) -> None:
        if self._stream.seekable():
            self._check_length(size)
            self._stream.seek(size, 1)
            self._offset += size
        else:
            self._read_exact(size)

    # -- header -------------------------------------------------------------

    def _read_header(self) -> None:
        magic = self._stream.read(len(MAGIC))
        if magic != MAGIC:
            raise FormatError(f"Not an Avro container file (magic {magic!r})", offset=0)
        self._offset = len(MAGIC)

        while True:
            count = self._read_long()
            if count == 0:
                break
            if count < 0:
                count = -count
                self._read_long()
            for _ in range(count):
                key = self._read_exact(self._read_long())
                value = self._read_exact(self._read_long())
                self.metadata[key.decode("utf-8", errors="replace")] = value

        if SCHEMA_KEY not in self.metadata:
            raise FormatError(f"Header has no {SCHEMA_KEY!r} entry", offset=self._offset)
        self.schema: SchemaTree = parse_schema(self.metadata[SCHEMA_KEY])
        self.codec = self.metadata.get(CODEC_KEY, b"null").decode("utf-8", errors="replace")
        get_codec(self.codec)
        self.sync_marker = self._read_exact(SYNC_SIZE)
        logger.debug(
            f"{self.source}: codec={self.codec}, header ends at offset {self._offset}"
        )

    @property
    def schema_json(self) -> Any:
        """The embedded writer schema as decoded JSON."""
        return orjson.loads(self.metadata[SCHEMA_KEY])

    # -- blocks -------------------------------------------------------------

    def _next_block_header(self) -> Optional[tuple]:
        offset = self._offset
        first = self._stream.read(1)
        if not first:
            return None
        count = self._read_long(first)
        size = self._read_long()
        if count < 0 or size < 0:
            raise FormatError(
                f"Block header has negative count {count} or size {size}", offset=offset
            )
        return offset, count, size

    def _check_sync(self) -> None:
        offset = self._offset
        marker = self._read_exact(SYNC_SIZE)
        if marker != self.sync_marker:
            raise FormatError("Sync marker does not match header", offset=offset)

    def blocks(self) -> Iterator[Block]:
        """Yield raw blocks, verifying the sync marker after each one."""
        try:
            while True:
                header = self._next_block_header()
                if header is None:
                    return
                offset, count, size = header
                payload_offset = self._offset
                payload = self._read_exact(size)
                self._check_sync()
                logger.debug(f"{self.source}: block at {offset}, {count} objects, {size} bytes")
                yield Block(count, offset, payload_offset, payload)
        except AvroExplorerError as e:
            raise e.with_context(source=self.source)

    def __iter__(self) -> Iterator[Any]:
        for block in self.blocks():
            try:
                data = decompress(self.codec, block.payload)
            except AvroExplorerError as e:
                raise e.with_context(source=self.source, offset=block.payload_offset)
            # Offsets only map back into the file for uncompressed payloads
            base = block.payload_offset if self.codec == "null" else 0
            cursor = BinaryCursor(data, base_offset=base)
            for _ in range(block.count):
                try:
                    value = self._decoder.decode(cursor)
                except AvroExplorerError as e:
                    if self.codec != "null":
                        e.offset = block.payload_offset
                    raise e.with_context(source=self.source)
                yield value
            if not cursor.at_end():
                logger.warning(
                    f"{self.source}: {cursor.remaining} unread bytes after block at {block.offset}"
                )

    def count(self) -> int:
        """Count records from block headers alone, without decoding values."""
        total = 0
        try:
            while True:
                header = self._next_block_header()
                if header is None:
                    return total
                _, count, size = header
                self._skip(size)
                self._check_sync()
                total += count
        except AvroExplorerError as e:
            raise e.with_context(source=self.source)


@contextmanager
def open_container(path: Union[str, Path]) -> Iterator[ContainerReader]:
    """Open ``path`` and yield a ``ContainerReader`` over it."""
    path = Path(path)
    with path.open("rb") as fh:
        yield ContainerReader(fh, source=str(path))


def count_records(path: Union[str, Path]) -> int:
    with open_container(path) as reader:
        return reader.count()
