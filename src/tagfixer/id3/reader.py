from __future__ import annotations

import re
from typing import Dict, Iterator, List, Optional, Tuple

from tagfixer import config
from tagfixer import helpers
from tagfixer import logger as logger_mod

from .cursor import (
    HEADER_SIZE,
    ByteCursor,
    parse_tag_header,
    read_synchsafe,
    read_uint32_be,
)
from .encoding import DecodedText, clean_text, decode_frame_text, is_junk
from .errors import MalformedTagError
from .models import ALBUM, ARTIST, TITLE, Frame, OriginalEncoding, ResolvedMetadata

log = logger_mod.get_logger()

WANTED = (TITLE, ARTIST, ALBUM)
_WANTED_BYTES = tuple(w.encode("ascii") for w in WANTED)

_FRAME_ID = re.compile(rb"[A-Z0-9]{4}")
_PADDING = b"\x00\x00\x00\x00"

# id + size (+ two flag bytes in the standard layout)
_STANDARD_HEADER = 10
_COMPACT_HEADER = 8

# format flag bits (second flag byte) each version defines
_FORMAT_FLAGS = {3: 0xE0, 4: 0x4F}


def _declared_sizes(data: bytes, offset: int, version: int) -> List[int]:
    """Size readings to try, most likely first.

    ID3v2.4 sizes are synchsafe, but some writers store plain integers there,
    so the plain reading stays as a second choice.
    """
    plain = read_uint32_be(data, offset + 4)
    raw = data[offset + 4 : offset + 8]
    if version == 4 and not any(b & 0x80 for b in raw):
        synchsafe = read_synchsafe(data, offset + 4)
        if synchsafe != plain:
            return [synchsafe, plain]
    return [plain]


def _ends_cleanly(data: bytes, pos: int, end: int) -> bool:
    """True when ``pos`` is the tag end, padding or another frame id."""
    if pos > end:
        return False
    following = data[pos : min(pos + 4, end)]
    return not following.strip(b"\x00") or bool(_FRAME_ID.fullmatch(following))


def _plausible(
    data: bytes, offset: int, end: int, version: int, header: int, size: int
) -> bool:
    if not _ends_cleanly(data, offset + header + size, end):
        return False
    if header == _STANDARD_HEADER:
        defined = _FORMAT_FLAGS.get(version, _FORMAT_FLAGS[3] | _FORMAT_FLAGS[4])
        if data[offset + 9] & ~defined & 0xFF:
            return False
    wanted = data[offset : offset + 4] in _WANTED_BYTES
    return not (wanted and size >= 1 and data[offset + header] > 3)


def _usable_text(indicator: int, content: bytes) -> Optional[DecodedText]:
    if not content:
        return None
    decoded = decode_frame_text(indicator, content)
    if decoded is None:
        return None
    text = clean_text(decoded.text)
    if is_junk(text):
        return None
    return DecodedText(text, decoded.encoding)


def _frame_geometry(
    data: bytes, offset: int, end: int, version: int
) -> Tuple[int, int]:
    """``(header_length, size)`` of the frame at ``offset``.

    Frames come in the standard layout (two flag bytes before the indicator)
    or a compact legacy one (indicator right after the size). A reading is
    plausible when it ends on the tag end, padding or the next frame id and
    its flags and indicator are valid. When several are, a wanted frame takes
    the first whose text decodes; otherwise the standard reading wins.
    """
    sizes = _declared_sizes(data, offset, version)
    candidates = [(_STANDARD_HEADER, s) for s in sizes]
    candidates.append((_COMPACT_HEADER, sizes[-1]))

    plausible = [c for c in candidates if _plausible(data, offset, end, version, *c)]
    if not plausible:
        return candidates[0]
    if len(plausible) > 1 and data[offset : offset + 4] in _WANTED_BYTES:
        for header, size in plausible:
            if size < 2:
                continue
            start = offset + header
            if _usable_text(data[start], data[start + 1 : start + size]) is not None:
                return header, size
    return plausible[0]


def _frame_offsets(
    data: bytes, start: int, end: int, version: int
) -> Iterator[Tuple[str, int]]:
    """Yield ``(frame_id, offset)`` for every frame between start and end.

    Walks the frames by their declared sizes. When the walk stops early (on
    padding, an id that is not a frame id, or a size running past the tag)
    the tag is scanned byte by byte for the wanted ids, starting right after
    the last frame header the walk trusted.
    """
    offset = resume = start
    while offset + _COMPACT_HEADER <= end:
        frame_id = data[offset : offset + 4]
        if frame_id == _PADDING or not _FRAME_ID.fullmatch(frame_id):
            break
        header, size = _frame_geometry(data, offset, end, version)
        if offset + header + size > end:
            break
        yield frame_id.decode("ascii"), offset
        resume = offset + header
        offset = resume + size
    else:
        return

    log.debug(f"[TAG-READ] frame walk stopped at {offset}; scanning from {resume}")
    for pos in range(resume, end - 3):
        candidate = data[pos : pos + 4]
        if candidate in _WANTED_BYTES:
            yield candidate.decode("ascii"), pos


def read_frame(
    data: bytes, offset: int, *, end: Optional[int] = None, version: int = 3
) -> Frame:
    """Read the frame at ``offset``; raises MalformedTagError when truncated."""
    end = len(data) if end is None else end
    header, size = _frame_geometry(data, offset, end, version)
    cur = ByteCursor(data, offset)
    frame_id = cur.read(4).decode("ascii")
    cur.skip(header - 4)
    if size < 1:
        raise MalformedTagError(f"{frame_id} at {offset} declares size {size}")
    encoding = cur.read_u8()
    content = cur.read(size - 1)
    return Frame(
        frame_id=frame_id, size=size, encoding=encoding, content=content, offset=offset
    )


def _summarize_encoding(found: Dict[str, DecodedText]) -> OriginalEncoding:
    seen = {d.encoding for d in found.values()}
    if "Shift-JIS" in seen:
        return "Shift-JIS"
    if "UTF-8" in seen:
        return "UTF-8"
    return "Unknown"


class TagReader:
    """Resolve title/artist/album from a raw MP3 buffer.

    Contract:
    - parse() never raises on malformed input; anything unreadable falls back
      to filename/folder derived defaults
    - a non-empty folder_hint always becomes the album
    """

    def __init__(
        self,
        *,
        unknown_artist: Optional[str] = None,
        unknown_album: Optional[str] = None,
    ):
        self.unknown_artist = unknown_artist or config.UNKNOWN_ARTIST
        self.unknown_album = unknown_album or config.UNKNOWN_ALBUM

    def defaults(
        self, filename: str, folder_hint: Optional[str] = None
    ) -> ResolvedMetadata:
        return ResolvedMetadata(
            title=helpers.strip_extension(filename),
            artist=self.unknown_artist,
            album=folder_hint or self.unknown_album,
        )

    def read_frames(self, data: bytes) -> Dict[str, DecodedText]:
        """Decoded text of the wanted frames that survived junk rejection."""
        header = parse_tag_header(data)
        if header is None:
            return {}

        end = min(len(data), header.end)
        found: Dict[str, DecodedText] = {}
        seen = set()
        for frame_id, offset in _frame_offsets(data, HEADER_SIZE, end, header.version):
            if frame_id not in WANTED or frame_id in seen:
                continue
            # first occurrence wins, even when it turns out unusable
            seen.add(frame_id)
            try:
                frame = read_frame(data, offset, end=end, version=header.version)
            except MalformedTagError as e:
                log.debug(f"[TAG-READ] {frame_id} at {offset}: {e}")
                continue
            decoded = _usable_text(frame.encoding, frame.content)
            if decoded is not None:
                found[frame_id] = decoded
            else:
                log.debug(
                    f"[TAG-READ] {frame_id}: no usable text (indicator {frame.encoding})"
                )
            if len(seen) == len(WANTED):
                break
        return found

    def parse(
        self, data: bytes, filename: str, folder_hint: Optional[str] = None
    ) -> ResolvedMetadata:
        metadata = self.defaults(filename, folder_hint)
        try:
            found = self.read_frames(data)
        except MalformedTagError as e:
            log.warning(f"[TAG-READ] {filename}: unreadable tag, using defaults: {e}")
            return metadata

        changes: Dict[str, str] = {}
        if TITLE in found:
            changes["title"] = found[TITLE].text
        if ARTIST in found:
            changes["artist"] = found[ARTIST].text
        if not folder_hint and ALBUM in found:
            changes["album"] = found[ALBUM].text

        resolved = metadata.replace(
            original_encoding=_summarize_encoding(found),
            from_tag=tuple(changes),
            **changes,
        )
        log.info(
            f"[TAG-READ] {filename}: title={resolved.title!r} artist={resolved.artist!r} "
            f"album={resolved.album!r} encoding={resolved.original_encoding}"
        )
        return resolved


_default_reader = TagReader()


def parse_metadata(
    data: bytes, filename: str, folder_hint: Optional[str] = None
) -> ResolvedMetadata:
    return _default_reader.parse(data, filename, folder_hint)
