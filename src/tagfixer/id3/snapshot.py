from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

import music_tag

from tagfixer import logger as logger_mod

from .models import ResolvedMetadata

log = logger_mod.get_logger()

# music-tag key -> ResolvedMetadata field
_FIELDS = (("tracktitle", "title"), ("artist", "artist"), ("album", "album"))


def _as_text(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(str(x) for x in value if x is not None)
    return "" if value is None else str(value)


@dataclass(frozen=True)
class TagSnapshot:
    """Title/artist/album as a generic tag library sees them."""

    title: str = ""
    artist: str = ""
    album: str = ""
    has_artwork: bool = False

    def mismatches(self, metadata: ResolvedMetadata) -> List[str]:
        """Names of the fields whose text differs from ``metadata``."""
        return [
            name
            for _, name in _FIELDS
            if getattr(self, name) != getattr(metadata, name)
        ]


class MusicTagSnapshotReader:
    """Read a fixed file back through music-tag. Never writes."""

    def read(self, path: str) -> TagSnapshot:
        f = music_tag.load_file(path)
        values = {}
        for key, name in _FIELDS:
            try:
                values[name] = _as_text(f[key]) if key in f else ""
            except Exception as e:  # noqa: BLE001
                log.warning(f"[TAG-SNAPSHOT] {path}: could not read {key}: {e!r}")
                values[name] = ""

        try:
            has_artwork = "artwork" in f and bool(f["artwork"])
        except Exception as e:  # noqa: BLE001
            log.debug(f"[TAG-SNAPSHOT] {path}: artwork unreadable: {e!r}")
            has_artwork = False

        return TagSnapshot(has_artwork=has_artwork, **values)
