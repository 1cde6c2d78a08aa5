"""ID3v2 tag reading and rewriting.

Public API:
- TagReader / parse_metadata
- TagWriter / write_tags / audio_payload
- ResolvedMetadata
"""

from .errors import MalformedTagError, TagError, TagWriteError, TruncatedDataError
from .models import ResolvedMetadata, TagHeader
from .reader import TagReader, parse_metadata
from .writer import TagWriter, audio_payload, build_tag, write_tags

__all__ = [
    "TagReader",
    "TagWriter",
    "ResolvedMetadata",
    "TagHeader",
    "parse_metadata",
    "write_tags",
    "audio_payload",
    "build_tag",
    "TagError",
    "MalformedTagError",
    "TruncatedDataError",
    "TagWriteError",
]
