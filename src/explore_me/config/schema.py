"""
Pydantic models for explore-me configuration.

Defines all configuration schemas using Pydantic v2 for validation,
defaults, and serialization.
"""

import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class TagPatternError(ValueError):
    """The tag pattern does not compile or has no capture group.

    This is a fatal configuration error: indexing cannot continue.
    """


def compile_tag_pattern(pattern: str) -> re.Pattern[str]:
    """Compile the tag extraction pattern.

    Raises:
        TagPatternError: if the pattern is invalid or has no capture group.
    """
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise TagPatternError(f"Invalid tag pattern {pattern!r}: {e}") from e
    if compiled.groups < 1:
        raise TagPatternError(f"Tag pattern {pattern!r} has no capture group")
    return compiled


DEFAULT_IGNORE_NAMES: list[str] = [
    ".git",
    ".svn",
    ".hg",
    "node_modules",
    "__pycache__",
    ".DS_Store",
    "Thumbs.db",
    ".explore-me",
]


class ScanConfig(BaseModel):
    """Indexer configuration: what to skip, how to tag, where to write."""

    ignore_names: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_NAMES),
        description="Base names (files or directories) excluded entirely",
    )
    ignore_exts: list[str] = Field(
        default_factory=list,
        description="Extensions excluded from the index (e.g.: ['tmp', 'log'])",
    )
    tag_pattern: str = Field(
        default=r"\[(\w+)\]",
        description="Regex; the first capture group of each match becomes a tag",
    )
    index_file: str = "index.jsonl"
    ext_list_file: str = "ext.json"
    tag_list_file: str = "tag.json"
    meta_file: str = "meta.json"

    model_config = {"extra": "forbid"}

    @field_validator("ignore_exts")
    @classmethod
    def normalize_exts(cls, v: list[str]) -> list[str]:
        """Accept '.TXT' or 'txt' and store 'txt'."""
        return [ext.lstrip(".").lower() for ext in v]

    @field_validator("tag_pattern")
    @classmethod
    def validate_tag_pattern(cls, v: str) -> str:
        compile_tag_pattern(v)
        return v


class SearchConfig(BaseModel):
    """Search defaults."""

    default_limit: int = Field(
        default=50,
        ge=-1,
        description="Maximum results per search (-1 = unbounded)",
    )

    model_config = {"extra": "forbid"}


class LoggingConfig(BaseModel):
    """Logging system configuration."""

    level: Literal["debug", "info", "human", "warn", "error"] = "human"
    file: Path | None = None
    verbose: int = 0

    model_config = {"extra": "forbid"}


class AppConfig(BaseModel):
    """Complete application configuration.

    This is the root of the configuration tree. It combines all sections
    and is the entry point for validation.
    """

    src_root: Path = Path(".")
    data_root: Path = Path(".explore-me")
    scan: ScanConfig = Field(default_factory=ScanConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"extra": "forbid"}

    @field_validator("src_root", "data_root")
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        return v.expanduser()

    @property
    def index_path(self) -> Path:
        """Location of the record file under data_root."""
        return self.data_root / self.scan.index_file
