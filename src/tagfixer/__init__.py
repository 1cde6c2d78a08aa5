"""tagfixer: repair Shift-JIS mojibake in MP3 tags for car stereos.

Entry points:
- tagfixer.id3   (read / rewrite ID3v2 tags)
- tagfixer.batch (process many files, collect per-file results)
- tagfixer.oracle, tagfixer.codec (optional LLM and ffmpeg collaborators)
"""

from .batch import BatchItem, BatchItemResult, TagFixer, collect_items
from .id3 import ResolvedMetadata, TagReader, TagWriter, parse_metadata, write_tags

__version__ = "0.1.0"

__all__ = [
    "BatchItem",
    "BatchItemResult",
    "ResolvedMetadata",
    "TagFixer",
    "TagReader",
    "TagWriter",
    "collect_items",
    "parse_metadata",
    "write_tags",
]
