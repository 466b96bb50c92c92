"""
Loader Module - Black Box Interface

Purpose: Turn capability source into registered definitions at runtime
Interface: DynamicLoader.register_source(), DynamicLoader.load_file(), LoadResult
Hidden: Scratch files, module isolation, export discovery

Loaded source is not sandboxed.
"""

from .loader import DynamicLoader, LoadResult, find_capability

__all__ = ["DynamicLoader", "LoadResult", "find_capability"]
