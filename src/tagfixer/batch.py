from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, List, Literal, Optional

from tagfixer import config
from tagfixer import helpers
from tagfixer import logger as logger_mod
from tagfixer.id3.models import ResolvedMetadata
from tagfixer.id3.reader import TagReader
from tagfixer.id3.writer import TagWriter
from tagfixer.oracle import MetadataOracle, apply_oracle_result

log = logger_mod.get_logger()

OracleMode = Literal["off", "fallback", "always"]
ORACLE_MODES = ("off", "fallback", "always")

MP3_EXTENSIONS = (".mp3",)


@dataclass(frozen=True)
class BatchItem:
    name: str
    data: bytes
    folder_name: Optional[str] = None


@dataclass(frozen=True)
class BatchItemResult:
    name: str
    status: Literal["completed", "error"]
    metadata: Optional[ResolvedMetadata] = None
    output: Optional[bytes] = None
    error: Optional[str] = None
    folder_name: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "completed"


def _is_mp3(path: str) -> bool:
    return path.lower().endswith(MP3_EXTENSIONS)


def collect_items(paths: Iterable[str]) -> List[BatchItem]:
    """Load MP3 files; files inside a given directory use their folder as album hint."""
    items: List[BatchItem] = []
    for path in paths:
        if os.path.isdir(path):
            for dirpath, dirnames, filenames in os.walk(path):
                dirnames.sort()
                for fn in sorted(filenames):
                    if not _is_mp3(fn):
                        continue
                    full = os.path.join(dirpath, fn)
                    with open(full, "rb") as fh:
                        data = fh.read()
                    items.append(
                        BatchItem(
                            name=fn,
                            data=data,
                            folder_name=helpers.parent_folder_name(full, root=path),
                        )
                    )
        elif _is_mp3(path):
            with open(path, "rb") as fh:
                items.append(BatchItem(name=os.path.basename(path), data=fh.read()))
        else:
            log.warning(f"[BATCH] skipping non-MP3 input {path}")
    return items


class TagFixer:
    """Read, optionally re-infer, and rewrite the tags of a batch of MP3 buffers.

    Files are independent: a failure is recorded on that file's result and the
    rest of the batch carries on.
    """

    def __init__(
        self,
        *,
        reader: Optional[TagReader] = None,
        writer: Optional[TagWriter] = None,
        oracle: Optional[MetadataOracle] = None,
        oracle_mode: OracleMode = "off",
        max_workers: Optional[int] = None,
    ):
        if oracle_mode not in ORACLE_MODES:
            raise ValueError(f"oracle_mode must be one of {ORACLE_MODES}, got {oracle_mode!r}")
        if oracle_mode != "off" and oracle is None:
            raise ValueError(f"oracle_mode={oracle_mode!r} needs an oracle")
        self._reader = reader or TagReader()
        self._writer = writer or TagWriter()
        self._oracle = oracle
        self._oracle_mode = oracle_mode
        self._max_workers = max(1, max_workers or config.MAX_WORKERS)

    def _wants_oracle(self, metadata: ResolvedMetadata) -> bool:
        if self._oracle_mode == "always":
            return True
        if self._oracle_mode == "fallback":
            return not {"title", "artist"} <= set(metadata.from_tag)
        return False

    def resolve(self, item: BatchItem) -> ResolvedMetadata:
        metadata = self._reader.parse(item.data, item.name, item.folder_name)
        if self._oracle is not None and self._wants_oracle(metadata):
            result = self._oracle.infer(item.name, item.folder_name)
            metadata = apply_oracle_result(
                metadata, result, folder_hint=item.folder_name
            )
        return metadata

    def process_one(
        self, item: BatchItem, metadata: Optional[ResolvedMetadata] = None
    ) -> BatchItemResult:
        """Fix one file; ``metadata`` skips resolution (e.g. after a manual edit)."""
        try:
            if metadata is None:
                metadata = self.resolve(item)
            output = self._writer.write(item.data, metadata, name=item.name)
        except Exception as e:  # noqa: BLE001
            log.error(f"[BATCH] {item.name}: {e!r}")
            return BatchItemResult(
                name=item.name,
                status="error",
                metadata=metadata,
                error=f"{type(e).__name__}: {e}",
                folder_name=item.folder_name,
            )
        return BatchItemResult(
            name=item.name,
            status="completed",
            metadata=metadata,
            output=output,
            folder_name=item.folder_name,
        )

    def process(self, items: Iterable[BatchItem]) -> List[BatchItemResult]:
        items = list(items)
        if self._max_workers == 1 or len(items) < 2:
            results = [self.process_one(item) for item in items]
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                results = list(pool.map(self.process_one, items))

        failed = sum(1 for r in results if not r.ok)
        log.info(f"[BATCH] processed {len(results)} files, {failed} failed")
        return results
