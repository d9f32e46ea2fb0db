"""Block compression codecs named by the ``avro.codec`` header entry."""

import bz2
import lzma
import zlib
from typing import Callable, Dict

import cramjam
import zstandard as zstd

from avro_explorer.errors import FormatError, UnsupportedCodecError


def _null(data: bytes) -> bytes:
    return data


def _deflate(data: bytes) -> bytes:
    # Avro deflate blocks are raw RFC 1951 streams with no zlib header
    return zlib.decompress(data, -15)


def _snappy(data: bytes) -> bytes:
    if len(data) < 4:
        raise FormatError("Snappy block is too short to hold its checksum")
    payload, checksum = data[:-4], data[-4:]
    out = bytes(cramjam.snappy.decompress_raw(payload))
    if zlib.crc32(out) & 0xFFFFFFFF != int.from_bytes(checksum, "big"):
        raise FormatError("Snappy block checksum mismatch")
    return out


def _zstandard(data: bytes) -> bytes:
    # decompressobj copes with frames that omit the content size
    return zstd.ZstdDecompressor().decompressobj().decompress(data)


CODECS: Dict[str, Callable[[bytes], bytes]] = {
    "null": _null,
    "deflate": _deflate,
    "snappy": _snappy,
    "zstandard": _zstandard,
    "bzip2": bz2.decompress,
    "xz": lzma.decompress,
}


def get_codec(name: str) -> Callable[[bytes], bytes]:
    """Return the decompressor for ``name``.

    Raises:
        UnsupportedCodecError: if no decompressor is registered for ``name``
    """
    try:
        return CODECS[name]
    except KeyError:
        raise UnsupportedCodecError(name) from None


def decompress(name: str, data: bytes) -> bytes:
    """Decompress one block payload with the named codec."""
    codec = get_codec(name)
    try:
        return codec(data)
    except (
        zlib.error,
        zstd.ZstdError,
        cramjam.DecompressionError,
        lzma.LZMAError,
        OSError,
        ValueError,
    ) as e:
        raise FormatError(f"Could not decompress {name} block: {e}") from e
