"""Text decoding for ID3 text frames.

Frames declared as Latin-1 (indicator 0) are frequently something else: old
Windows tools in a Japanese locale wrote Shift-JIS there, newer tools often
wrote UTF-8 without touching the indicator. The decision table is:

    indicator 0 -> UTF-8 if the bytes are valid UTF-8,
                   else Shift-JIS (cp932) if they are valid Shift-JIS,
                   else Latin-1
    indicator 1 -> UTF-16, byte order from the BOM (little-endian without one)
    indicator 2 -> UTF-16 big-endian
    indicator 3 -> UTF-8
    anything else -> not decodable

Only indicator 0 has fallbacks; a failure on 1-3 means the frame is absent.
"""

from __future__ import annotations

import codecs
import re
from dataclasses import dataclass
from typing import Optional

from .models import OriginalEncoding

LATIN1 = 0
UTF16 = 1
UTF16BE = 2
UTF8 = 3

# cp932 is what Windows actually writes when it says "Shift-JIS"
SJIS_CODEC = "cp932"

_JUNK = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f]")


@dataclass(frozen=True)
class DecodedText:
    text: str
    encoding: OriginalEncoding


def _try_decode(raw: bytes, codec: str) -> Optional[str]:
    try:
        return raw.decode(codec)
    except UnicodeDecodeError:
        return None


def try_decode_utf8(raw: bytes) -> Optional[str]:
    return _try_decode(raw, "utf-8")


def try_decode_sjis(raw: bytes) -> Optional[str]:
    return _try_decode(raw, SJIS_CODEC)


def try_decode_utf16(raw: bytes, default_big_endian: bool = False) -> Optional[str]:
    if raw.startswith(codecs.BOM_UTF16_LE):
        return _try_decode(raw[2:], "utf-16-le")
    if raw.startswith(codecs.BOM_UTF16_BE):
        return _try_decode(raw[2:], "utf-16-be")
    return _try_decode(raw, "utf-16-be" if default_big_endian else "utf-16-le")


def decode_latin1_declared(raw: bytes) -> DecodedText:
    text = try_decode_utf8(raw)
    if text is not None:
        return DecodedText(text, "UTF-8")

    text = try_decode_sjis(raw)
    if text is not None:
        return DecodedText(text, "Shift-JIS")

    # latin-1 maps every byte, so this is the end of the line
    return DecodedText(raw.decode("latin-1"), "Unknown")


def decode_frame_text(indicator: int, raw: bytes) -> Optional[DecodedText]:
    if indicator == LATIN1:
        return decode_latin1_declared(raw)

    if indicator in (UTF16, UTF16BE):
        text = try_decode_utf16(raw, default_big_endian=indicator == UTF16BE)
        return None if text is None else DecodedText(text, "Unknown")

    if indicator == UTF8:
        text = try_decode_utf8(raw)
        return None if text is None else DecodedText(text, "UTF-8")

    return None


def clean_text(text: str) -> str:
    return text.replace("\x00", "").strip()


def is_junk(text: str) -> bool:
    """Empty, or carrying control characters a wrong guess leaves behind."""
    return not text or _JUNK.search(text) is not None
