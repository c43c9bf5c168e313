"""
Positional record stream over the index file.

Reads records one line at a time and reports the byte offset at which
each one started, so that offset can later be used to find the record
again with ``seek_to``.

Typical usage:
    with open(index_path, "rb") as f:
        for offset, record in RecordStream(f):
            ...
"""

import io
from typing import BinaryIO, Iterator

from .record import FileRecord, decode_record


class RecordStream:
    """Iterator of ``(offset, FileRecord)`` pairs over a seekable binary source.

    Iteration ends with ``StopIteration`` when the source is exhausted.
    A malformed line raises ``RecordDecodeError`` instead, so callers can
    tell a clean end from a corrupt file.
    """

    def __init__(self, source: BinaryIO) -> None:
        self._source = source

    def seek_to(self, offset: int) -> None:
        """Move the read cursor to an absolute byte offset.

        Raises:
            ValueError: if the offset is negative.
            OSError: if the underlying source cannot seek.
        """
        if offset < 0:
            raise ValueError(f"invalid offset: {offset}")
        self._source.seek(offset, io.SEEK_SET)

    def tell(self) -> int:
        return self._source.tell()

    def next(self) -> tuple[int, FileRecord]:
        """Decode the record at the cursor and advance past it.

        Returns:
            Tuple (offset before the read, decoded record)

        Raises:
            StopIteration: at the end of the source.
            RecordDecodeError: if the line is malformed.
        """
        offset = self._source.tell()
        line = self._source.readline()
        if not line:
            raise StopIteration
        return offset, decode_record(line, offset)

    def __iter__(self) -> Iterator[tuple[int, FileRecord]]:
        return self

    def __next__(self) -> tuple[int, FileRecord]:
        return self.next()
