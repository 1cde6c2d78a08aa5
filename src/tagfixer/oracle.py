"""Filename -> metadata inference.

The oracle is a collaborator handed in by the caller; nothing here builds or
caches an LLM client on its own.
"""

from __future__ import annotations

from typing import Dict, Optional, Protocol

from tagfixer import helpers
from tagfixer import logger as logger_mod
from tagfixer.id3.models import ResolvedMetadata
from tagfixer.id3.reader import TagReader
from tagfixer.llm import LLMClient, LLMMessage

log = logger_mod.get_logger()

FIELDS = ("title", "artist", "album")

METADATA_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "artist": {"type": "string"},
        "album": {"type": "string"},
    },
    "required": list(FIELDS),
    "additionalProperties": False,
}

SYSTEM_PROMPT = (
    "You restore music metadata from file names. Given an MP3 file name and "
    "optionally the folder it was stored in, return the most likely song title, "
    "artist and album. Keep Japanese names in Japanese. Use an empty string for "
    "anything you cannot infer with reasonable confidence."
)


class MetadataOracle(Protocol):
    def infer(self, filename: str, folder_name: Optional[str] = None) -> Dict[str, str]:
        """Best-effort {title, artist, album}; missing keys mean "no idea"."""
        ...


class LLMMetadataOracle:
    def __init__(self, llm: LLMClient):
        self._llm = llm

    def _messages(self, filename: str, folder_name: Optional[str]) -> list:
        lines = [f"File name: {filename}"]
        if folder_name:
            lines.append(f"Folder name: {folder_name}")
        return [
            LLMMessage(role="system", content=SYSTEM_PROMPT),
            LLMMessage(role="user", content="\n".join(lines)),
        ]

    def infer(self, filename: str, folder_name: Optional[str] = None) -> Dict[str, str]:
        try:
            result = self._llm.generate_json(
                messages=self._messages(filename, folder_name),
                json_schema=METADATA_SCHEMA,
                schema_name="track_metadata",
            )
        except Exception as e:  # noqa: BLE001
            log.warning(f"[ORACLE] {filename}: inference failed: {e!r}")
            return {}

        out: Dict[str, str] = {}
        for key in FIELDS:
            value = result.text_field(key)
            if value:
                out[key] = value
        log.info(f"[ORACLE] {filename}: {out}")
        return out


def apply_oracle_result(
    metadata: ResolvedMetadata,
    result: Dict[str, str],
    *,
    folder_hint: Optional[str] = None,
) -> ResolvedMetadata:
    """Override the fields the oracle filled in; a folder hint keeps the album."""
    changes = {
        k: helpers.safe_str(result.get(k)).strip()
        for k in FIELDS
        if helpers.safe_str(result.get(k)).strip()
    }
    if folder_hint:
        changes.pop("album", None)
    if not changes:
        return metadata
    return metadata.replace(**changes)


def reset_metadata(
    filename: str,
    folder_hint: Optional[str] = None,
    *,
    reader: Optional[TagReader] = None,
) -> ResolvedMetadata:
    """Manual reset: throw the tag away and start from the filename defaults."""
    return (reader or TagReader()).defaults(filename, folder_hint)
