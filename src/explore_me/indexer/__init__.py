"""
Indexer module — builds the line-oriented record file.

Walks a source tree, writes one JSON record per file and the
extension/tag dictionaries, and exposes the positional stream used to
read the records back.
"""

from .builder import BuildResult, IndexBuilder, build_index
from .meta import RebuildMetadata, load_metadata, save_metadata
from .record import FileRecord, RecordDecodeError, decode_record, encode_record
from .stream import RecordStream

__all__ = [
    "BuildResult",
    "FileRecord",
    "IndexBuilder",
    "RebuildMetadata",
    "RecordDecodeError",
    "RecordStream",
    "build_index",
    "decode_record",
    "encode_record",
    "load_metadata",
    "save_metadata",
]
