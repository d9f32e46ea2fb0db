"""Configuration management for the Avro explorer.

Two layers:

- ``ExplorerSettings``: process-wide defaults loaded from environment
  variables (prefix ``AVRO_EXPLORER_``) or a ``.env`` file.
- ``QueryOptions``: the validated parameter bundle for a single run
  (fields, search, take, format).
"""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OutputFormat(str, Enum):
    TABLE = "table"
    CSV = "csv"
    JSON = "json"
    JSON_PRETTY = "json-pretty"

    @classmethod
    def parse(cls, value: Optional[str]) -> "OutputFormat":
        """Map a user-supplied format name to a format; ``None`` means table.

        Raises:
            ValueError: for names that are not a known format
        """
        if value is None:
            return cls.TABLE
        try:
            return cls(value.strip().lower())
        except ValueError:
            known = ", ".join(f.value for f in cls)
            raise ValueError(f"Output format {value!r} not recognized (expected one of: {known})") from None


class SearchMode(str, Enum):
    REGEX = "regex"
    LITERAL = "literal"


class ExplorerSettings(BaseSettings):
    """Defaults that apply when a run does not override them."""

    model_config = SettingsConfigDict(
        env_prefix="AVRO_EXPLORER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="WARNING", description="Level for the stderr log sink")
    log_file: Optional[Path] = Field(default=None, description="Optional rotating log file")

    # Output
    default_format: OutputFormat = Field(default=OutputFormat.TABLE)
    absent_placeholder: str = Field(
        default="N/A", description="Table text for columns a record does not have"
    )
    color: Optional[bool] = Field(
        default=None, description="Force table styling on/off (default: auto-detect)"
    )

    # Search
    search_mode: SearchMode = Field(default=SearchMode.REGEX)
    ignore_case: bool = False

    # Failure handling
    fail_fast: bool = Field(
        default=False, description="Stop at the first file that fails to read"
    )


class QueryOptions(BaseModel):
    """Validated options for one exploration run."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    fields: List[str] = Field(default_factory=list)
    search: Optional[str] = None
    take: Optional[int] = Field(default=None, ge=0)
    format: OutputFormat = OutputFormat.TABLE
    search_mode: SearchMode = SearchMode.REGEX
    ignore_case: bool = False

    @field_validator("fields", mode="before")
    @classmethod
    def split_fields(cls, v):
        """Accept repeated and comma-separated field names alike."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        names = []
        for entry in v:
            names.extend(part.strip() for part in str(entry).split(","))
        return [n for n in names if n]

    @field_validator("format", mode="before")
    @classmethod
    def parse_format(cls, v):
        if v is None or isinstance(v, str):
            return OutputFormat.parse(v)
        return v


def load_settings() -> ExplorerSettings:
    """Load settings with proper fallbacks.

    Priority:
    1. Environment variables
    2. .env file
    3. Default values
    """
    try:
        return ExplorerSettings()
    except Exception as e:
        logger.error(f"Error loading configuration: {e}")
        raise
