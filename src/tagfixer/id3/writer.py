from __future__ import annotations

import io
from typing import Optional

from mutagen.id3 import ID3, TALB, TIT2, TPE1, Encoding

from tagfixer import logger as logger_mod

from .cursor import parse_tag_header
from .errors import TagWriteError
from .models import ResolvedMetadata

log = logger_mod.get_logger()


def _no_padding(info) -> int:
    return 0


def audio_payload(data: bytes) -> bytes:
    """Everything after the existing tag container (all of it without one)."""
    header = parse_tag_header(data)
    if header is None:
        return data
    return data[min(len(data), header.end) :]


def build_tag(metadata: ResolvedMetadata) -> bytes:
    """Render an ID3v2.3 tag holding the non-empty text fields as UTF-16."""
    tags = ID3()
    if metadata.title:
        tags.add(TIT2(encoding=Encoding.UTF16, text=metadata.title))
    if metadata.artist:
        tags.add(TPE1(encoding=Encoding.UTF16, text=[metadata.artist]))
    if metadata.album:
        tags.add(TALB(encoding=Encoding.UTF16, text=metadata.album))

    buf = io.BytesIO()
    tags.save(buf, v1=0, v2_version=3, padding=_no_padding)
    return buf.getvalue()


class TagWriter:
    """Replace the tag container of an MP3 buffer.

    The audio payload is copied byte for byte; the returned buffer is only
    handed out once the new tag rendered completely.
    """

    def write(
        self, data: bytes, metadata: ResolvedMetadata, *, name: Optional[str] = None
    ) -> bytes:
        label = name or "<buffer>"
        payload = audio_payload(data)
        try:
            tag = build_tag(metadata)
        except Exception as e:  # noqa: BLE001
            log.error(f"[TAG-WRITE] {label}: failed building tag: {e!r}")
            raise TagWriteError(f"cannot write tag for {label}: {e}") from e

        log.debug(
            f"[TAG-WRITE] {label}: tag={len(tag)} bytes payload={len(payload)} bytes"
        )
        return tag + payload


_default_writer = TagWriter()


def write_tags(data: bytes, metadata: ResolvedMetadata) -> bytes:
    return _default_writer.write(data, metadata)
