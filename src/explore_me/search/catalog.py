"""
Readers for the dictionaries written next to the index.

The extension dictionary is a JSON object whose keys are the extensions
seen in the last build; the tag dictionary is a JSON array.
"""

import json
from pathlib import Path

from ..config.schema import ScanConfig


def load_extensions(data_root: Path | str, config: ScanConfig) -> list[str]:
    """Extensions seen in the last build, sorted.

    Raises:
        FileNotFoundError: if the index has never been built.
        json.JSONDecodeError: if the file is corrupt.
    """
    path = Path(data_root) / config.ext_list_file
    data = json.loads(path.read_text(encoding="utf-8"))
    return sorted(data)


def load_tags(data_root: Path | str, config: ScanConfig) -> list[str]:
    """Distinct tags seen in the last build, sorted."""
    path = Path(data_root) / config.tag_list_file
    data = json.loads(path.read_text(encoding="utf-8"))
    return sorted(data)
