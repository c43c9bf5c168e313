"""
Configuration module for explore-me.

Exports the main components for convenient imports.
"""

from .loader import load_config
from .schema import (
    AppConfig,
    LoggingConfig,
    ScanConfig,
    SearchConfig,
    TagPatternError,
    compile_tag_pattern,
)

__all__ = [
    "load_config",
    "AppConfig",
    "LoggingConfig",
    "ScanConfig",
    "SearchConfig",
    "TagPatternError",
    "compile_tag_pattern",
]
