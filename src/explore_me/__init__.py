"""
explore-me — filename indexer with tag extraction and positional search.
"""

__version__ = "0.3.0"
