"""Error taxonomy for the Avro exploration pipeline.

Every error raised while reading a container file derives from
``AvroExplorerError`` and carries, when known, the file it came from and the
byte offset where the fault was detected.
"""

from typing import Optional


class AvroExplorerError(Exception):
    """Base class for all errors raised by the exploration engine."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        offset: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.source = source
        self.offset = offset

    def with_context(
        self, source: Optional[str] = None, offset: Optional[int] = None
    ) -> "AvroExplorerError":
        """Fill in missing file/offset context and return ``self``."""
        if self.source is None:
            self.source = source
        if self.offset is None:
            self.offset = offset
        return self

    def __str__(self) -> str:
        context = []
        if self.source is not None:
            context.append(f"file: {self.source}")
        if self.offset is not None:
            context.append(f"offset: {self.offset}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class FormatError(AvroExplorerError):
    """Bad magic bytes or a sync marker mismatch."""


class SchemaError(AvroExplorerError):
    """Malformed schema, or an enum/union index outside the schema."""


class UnsupportedCodecError(AvroExplorerError):
    """The file header names a compression codec we cannot decode."""

    def __init__(self, codec: str, source: Optional[str] = None):
        super().__init__(f"Unsupported codec: {codec!r}", source=source)
        self.codec = codec


class EncodingError(AvroExplorerError):
    """A string value is not valid UTF-8."""


class TruncatedDataError(AvroExplorerError):
    """The input ran out of bytes in the middle of a value or block."""


class PatternError(AvroExplorerError):
    """The search pattern could not be compiled."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid search pattern {pattern!r}: {reason}")
        self.pattern = pattern
