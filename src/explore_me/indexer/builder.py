"""
Index builder — walks a source tree and writes the record file.

For every regular file that survives the ignore rules the builder writes
one JSON line (name, relative path, lower-cased extension, tags parsed
from the filename) to the index file, then dumps the extensions and tags
seen during the walk as two small dictionaries.

A build is skipped entirely when the source root's modification time
matches the one stored in the rebuild metadata. The metadata is written
last, so an interrupted build is redone on the next run.
"""

import json
import os
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

import structlog

from ..config.schema import AppConfig, ScanConfig, compile_tag_pattern
from .meta import RebuildMetadata, load_metadata, mtime_of, save_metadata
from .record import FileRecord, encode_record

logger = structlog.get_logger()


@dataclass
class BuildResult:
    """Outcome of one ``IndexBuilder.create`` call."""

    rebuilt: bool
    files: int = 0
    extensions: int = 0
    tags: int = 0
    build_time_ms: float = 0.0


def file_extension(name: str) -> str:
    """Lower-cased suffix after the last dot, without the dot.

    Empty when there is no dot, the name ends with a dot, or the only
    dot is the leading one (".bashrc").
    """
    _, ext = os.path.splitext(name)
    return ext[1:].lower()


def extract_tags(name: str, pattern: re.Pattern[str]) -> list[str]:
    """First capture group of every non-overlapping match, in match order."""
    return [m.group(1) or "" for m in pattern.finditer(name)]


def normalize_path(rel_path: str) -> str:
    """Forward slashes only, always rooted at "/"."""
    rel_path = rel_path.replace("\\", "/")
    if not rel_path.startswith("/"):
        rel_path = "/" + rel_path
    return rel_path


def utf8_safe(name: str) -> str:
    """Replace bytes that are not valid UTF-8 with U+FFFD.

    os.scandir hands such bytes back as lone surrogates, which cannot be
    encoded into a record line.
    """
    return name.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


class IndexBuilder:
    """Builds the record file and the extension/tag dictionaries.

    Classification state (ignore sets, seen extensions, seen tags) lives
    on the instance; the seen sets are reset at the start of every build.
    """

    def __init__(self, config: ScanConfig) -> None:
        """Initialize the builder.

        Args:
            config: Scan configuration (ignore rules, tag pattern, file names)
        """
        self.config = config
        self.ignore_names = frozenset(config.ignore_names)
        self.ignore_exts = frozenset(config.ignore_exts)
        self.seen_exts: set[str] = set()
        self.seen_tags: set[str] = set()
        self.log = logger.bind(component="indexer")

    def create(self, source_root: Path | str, data_root: Path | str) -> BuildResult:
        """Rebuild the index of ``source_root`` into ``data_root`` if needed.

        Args:
            source_root: Directory tree to index
            data_root: Directory receiving the index, dictionaries and metadata

        Returns:
            BuildResult; ``rebuilt`` is False when the build was skipped.

        Raises:
            TagPatternError: if the tag pattern is invalid (fatal).
            OSError: if the source root cannot be read or an output file
                cannot be written.
        """
        root = Path(source_root)
        data = Path(data_root)
        meta_path = data / self.config.meta_file

        meta = load_metadata(meta_path)
        observed = mtime_of(root)
        if observed == meta.last_update:
            self.log.info("index.build.skipped", src=str(root), last_update=observed.isoformat())
            return BuildResult(rebuilt=False)

        meta = RebuildMetadata(
            last_update=observed,
            create_time=datetime.now(timezone.utc),
        )

        start_ms = time.monotonic() * 1000
        pattern = compile_tag_pattern(self.config.tag_pattern)
        self.seen_exts.clear()
        self.seen_tags.clear()

        self.log.info("index.build.start", src=str(root), data=str(data))
        data.mkdir(parents=True, exist_ok=True)

        files = self._write_index(root, data / self.config.index_file, pattern)
        self._write_json(
            data / self.config.ext_list_file,
            {ext: False for ext in sorted(self.seen_exts)},
        )
        self._write_json(data / self.config.tag_list_file, sorted(self.seen_tags))
        save_metadata(meta_path, meta)

        result = BuildResult(
            rebuilt=True,
            files=files,
            extensions=len(self.seen_exts),
            tags=len(self.seen_tags),
            build_time_ms=round(time.monotonic() * 1000 - start_ms, 1),
        )
        self.log.info(
            "index.build.complete",
            files=result.files,
            extensions=result.extensions,
            tags=result.tags,
            build_time_ms=result.build_time_ms,
        )
        return result

    def _write_index(self, root: Path, index_path: Path, pattern: re.Pattern[str]) -> int:
        """Walk the tree and write one record per file. Returns the record count."""
        count = 0
        with open(index_path, "wb") as idx:
            for entry in self._walk(root):
                record = self._make_record(root, entry, pattern)
                if record is None:
                    continue
                idx.write(encode_record(record))
                count += 1
        return count

    def _make_record(
        self,
        root: Path,
        entry: os.DirEntry,
        pattern: re.Pattern[str],
    ) -> FileRecord | None:
        """Classify one file; None when its extension is ignored."""
        name = utf8_safe(entry.name)
        ext = file_extension(name)
        if ext in self.ignore_exts:
            return None

        self.seen_exts.add(ext)
        tags = extract_tags(name, pattern)
        self.seen_tags.update(tags)

        return FileRecord(
            name=name,
            path=normalize_path(utf8_safe(os.path.relpath(entry.path, root))),
            ext=ext,
            tags=tags,
        )

    def _walk(self, root: Path) -> Iterator[os.DirEntry]:
        """Depth-first walk in lexical order, yielding regular files.

        An ignored name prunes a directory with its whole subtree, or skips
        a single file. Entries that cannot be stat'ed are skipped.
        """
        stack = [iter(self._list_dir(root, is_root=True))]
        while stack:
            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue

            if entry.name in self.ignore_names:
                continue

            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = entry.is_file(follow_symlinks=False)
            except OSError as e:
                self.log.debug("index.entry.stat_failed", path=entry.path, error=str(e))
                continue

            if is_dir:
                stack.append(iter(self._list_dir(Path(entry.path))))
            elif is_file:
                yield entry

    def _list_dir(self, directory: Path, is_root: bool = False) -> list[os.DirEntry]:
        """Sorted entries of a directory.

        Unreadable subdirectories are skipped like any other failing
        entry; an unreadable source root is an error.
        """
        try:
            with os.scandir(directory) as it:
                return sorted(it, key=lambda e: e.name)
        except OSError as e:
            if is_root:
                raise
            self.log.debug("index.entry.stat_failed", path=str(directory), error=str(e))
            return []

    def _write_json(self, path: Path, value: Any) -> None:
        path.write_text(json.dumps(value, ensure_ascii=False), encoding="utf-8")


def build_index(config: AppConfig) -> BuildResult:
    """Run the builder with the roots and scan settings from ``config``."""
    return IndexBuilder(config.scan).create(config.src_root, config.data_root)
