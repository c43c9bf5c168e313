"""
Search engine — linear filtered scan over the record file.

Every search reads the index from the start, tests each record against
a conjunctive filter and collects matches in file order, together with
the byte offset of the record as its id. Scanning stops as soon as the
limit is reached.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

from ..indexer.record import FileRecord
from ..indexer.stream import RecordStream

logger = structlog.get_logger()

# Limit value meaning "scan to the end of the file"
UNLIMITED = -1


class RecordNotFoundError(LookupError):
    """No record starts at the requested id."""


@dataclass
class SearchFilter:
    """Conjunctive filter. An empty criterion always matches.

    ``name`` and ``path`` are case-sensitive substring tests; ``ext`` and
    ``tag`` are exact matches (``tag`` against any of the record's tags).
    """

    name: str = ""
    path: str = ""
    ext: str = ""
    tag: str = ""

    def matches(self, record: FileRecord) -> bool:
        if self.path and self.path not in record.path:
            return False
        if self.name and self.name not in record.name:
            return False
        if self.ext and record.ext != self.ext:
            return False
        if self.tag and self.tag not in record.tags:
            return False
        return True


@dataclass
class SearchResult:
    """A matched record and its byte offset in the index file."""

    id: int
    record: FileRecord

    def to_dict(self) -> dict[str, Any]:
        """Flat ``{id, name, path, tags, ext}`` form."""
        return {"id": self.id, **self.record.to_dict()}


def search(
    index_path: Path | str,
    search_filter: SearchFilter,
    limit: int = UNLIMITED,
) -> list[SearchResult]:
    """Scan the index file and return matching records in file order.

    Args:
        index_path: Path to the record file
        search_filter: Criteria every result must satisfy
        limit: Maximum number of results, or UNLIMITED

    Returns:
        Matches in ascending offset order, at most ``limit`` of them

    Raises:
        ValueError: if ``limit`` is negative and not UNLIMITED.
        OSError: if the index file cannot be opened or read.
        RecordDecodeError: if a record in the file is malformed.
    """
    if limit < 0 and limit != UNLIMITED:
        raise ValueError(f"invalid limit: {limit}")

    results: list[SearchResult] = []
    scanned = 0

    with open(index_path, "rb") as f:
        if limit != 0:
            for offset, record in RecordStream(f):
                scanned += 1
                if not search_filter.matches(record):
                    continue

                results.append(SearchResult(id=offset, record=record))
                if limit != UNLIMITED and len(results) >= limit:
                    break

    logger.debug(
        "search.complete",
        index=str(index_path),
        results=len(results),
        scanned=scanned,
    )
    return results


def get_record(index_path: Path | str, record_id: int) -> SearchResult:
    """Read the single record starting at byte offset ``record_id``.

    Ids are only valid for the index file that produced them; after a
    rebuild the same offset may hold another record or fall mid-line.

    Raises:
        ValueError: if ``record_id`` is negative.
        RecordNotFoundError: if the offset is at or past the end of the file.
        RecordDecodeError: if the offset does not start a valid record.
        OSError: if the index file cannot be opened or read.
    """
    with open(index_path, "rb") as f:
        stream = RecordStream(f)
        stream.seek_to(record_id)
        try:
            offset, record = stream.next()
        except StopIteration:
            raise RecordNotFoundError(f"no record at id {record_id}") from None
    return SearchResult(id=offset, record=record)
