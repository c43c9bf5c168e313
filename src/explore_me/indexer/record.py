"""
Record codec — one indexed file per JSON line.

Each record is serialized as a compact JSON object with the fields
``name``, ``path``, ``tags`` and ``ext``, followed by a newline. The
line-oriented shape lets the scanner use the byte offset of a line as
the record id without parsing the whole file.
"""

import json
from dataclasses import dataclass, field
from typing import Any


RECORD_TERMINATOR = b"\n"


class RecordDecodeError(ValueError):
    """A line of the index file could not be decoded into a FileRecord."""

    def __init__(self, message: str, offset: int | None = None) -> None:
        self.offset = offset
        if offset is not None:
            message = f"{message} (offset {offset})"
        super().__init__(message)


@dataclass
class FileRecord:
    """One indexed file."""

    name: str
    path: str           # Relative to the source root, always "/"-separated
    ext: str = ""       # Lower case, without the dot
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk field layout."""
        return {
            "name": self.name,
            "path": self.path,
            "tags": list(self.tags),
            "ext": self.ext,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "FileRecord":
        """Build a record from a decoded JSON object.

        Missing fields fall back to their zero value; fields with the
        wrong type are rejected.

        Raises:
            RecordDecodeError: if ``data`` is not a valid record object.
        """
        if not isinstance(data, dict):
            raise RecordDecodeError(
                f"record must be a JSON object, got {type(data).__name__}"
            )

        name = data.get("name", "")
        path = data.get("path", "")
        ext = data.get("ext", "")
        tags = data.get("tags") or []

        for key, value in (("name", name), ("path", path), ("ext", ext)):
            if not isinstance(value, str):
                raise RecordDecodeError(f"field '{key}' must be a string")
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise RecordDecodeError("field 'tags' must be a list of strings")

        return cls(name=name, path=path, ext=ext, tags=list(tags))


def encode_record(record: FileRecord) -> bytes:
    """Serialize a record to its line form, terminator included."""
    text = json.dumps(record.to_dict(), ensure_ascii=False, separators=(",", ":"))
    return text.encode("utf-8") + RECORD_TERMINATOR


def decode_record(line: bytes, offset: int | None = None) -> FileRecord:
    """Parse one line (with or without its terminator) into a record.

    Args:
        line: Raw bytes of the line
        offset: Byte offset of the line, only used in error messages

    Raises:
        RecordDecodeError: if the line is not valid UTF-8 JSON or not a record.
    """
    try:
        data = json.loads(line.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise RecordDecodeError(f"malformed record: {e}", offset) from e

    try:
        return FileRecord.from_dict(data)
    except RecordDecodeError as e:
        raise RecordDecodeError(str(e), offset) from e
