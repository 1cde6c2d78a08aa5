from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Literal, Tuple

OriginalEncoding = Literal["UTF-8", "Shift-JIS", "Unknown"]

TITLE = "TIT2"
ARTIST = "TPE1"
ALBUM = "TALB"


@dataclass(frozen=True)
class TagHeader:
    version: int
    revision: int
    flags: int
    size: int

    @property
    def end(self) -> int:
        """Offset of the first byte after the tag container."""
        return 10 + self.size


@dataclass(frozen=True)
class Frame:
    frame_id: str
    size: int
    encoding: int
    content: bytes
    offset: int


@dataclass(frozen=True)
class ResolvedMetadata:
    title: str
    artist: str
    album: str
    original_encoding: OriginalEncoding = "Unknown"
    # fields that came from embedded frames rather than defaults
    from_tag: Tuple[str, ...] = ()

    def as_dict(self) -> Dict[str, str]:
        return {"title": self.title, "artist": self.artist, "album": self.album}

    def replace(self, **changes) -> "ResolvedMetadata":
        return replace(self, **changes)
