"""
Rebuild metadata — the only state carried between index builds.

Stores the source root's modification time observed at the last
successful build plus the wall clock time of that build. When the
source root's mtime still matches, the build is skipped.
"""

from datetime import datetime, timezone
from pathlib import Path

import structlog
from pydantic import BaseModel, Field, ValidationError

logger = structlog.get_logger()

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


class RebuildMetadata(BaseModel):
    """Timestamps gating whether a rebuild is necessary."""

    last_update: datetime = Field(default=ZERO_TIME)
    create_time: datetime = Field(default=ZERO_TIME)


def mtime_of(path: Path) -> datetime:
    """Modification time of ``path`` as an aware UTC datetime.

    Truncated to microseconds so the value survives a JSON round trip
    unchanged.

    Raises:
        OSError: if the path cannot be stat'ed.
    """
    mtime_ns = path.stat().st_mtime_ns
    seconds, nanos = divmod(mtime_ns, 1_000_000_000)
    stamp = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return stamp.replace(microsecond=nanos // 1000)


def load_metadata(meta_path: Path) -> RebuildMetadata:
    """Load the metadata file.

    A missing or corrupt file yields zero-valued metadata, never an error.
    """
    try:
        raw = meta_path.read_text(encoding="utf-8")
    except OSError:
        return RebuildMetadata()

    try:
        return RebuildMetadata.model_validate_json(raw)
    except ValidationError as e:
        logger.debug("index.meta.corrupt", path=str(meta_path), error=str(e))
        return RebuildMetadata()


def save_metadata(meta_path: Path, meta: RebuildMetadata) -> None:
    """Write the metadata file, replacing any previous content.

    Raises:
        OSError: if the file cannot be written.
    """
    meta_path.write_text(meta.model_dump_json(), encoding="utf-8")
