"""
Search module — filtered linear scan over the record file.
"""

from .catalog import load_extensions, load_tags
from .engine import (
    UNLIMITED,
    RecordNotFoundError,
    SearchFilter,
    SearchResult,
    get_record,
    search,
)

__all__ = [
    "UNLIMITED",
    "RecordNotFoundError",
    "SearchFilter",
    "SearchResult",
    "get_record",
    "load_extensions",
    "load_tags",
    "search",
]
