from __future__ import annotations

import io
import zipfile
from typing import Iterable, List

from tagfixer import config
from tagfixer import helpers
from tagfixer import logger as logger_mod
from tagfixer.batch import BatchItemResult

log = logger_mod.get_logger()


class ArchiveError(RuntimeError):
    pass


def _completed(results: Iterable[BatchItemResult]) -> List[BatchItemResult]:
    return [r for r in results if r.ok and r.output is not None]


def archive_name(results: Iterable[BatchItemResult]) -> str:
    done = _completed(results)
    if len(done) == 1:
        return f"{helpers.strip_extension(done[0].name)}.zip"
    return config.ARCHIVE_NAME


def build_archive(results: Iterable[BatchItemResult]) -> bytes:
    """Zip the fixed files under their original names."""
    done = _completed(results)
    if not done:
        raise ArchiveError("no completed files to archive")

    used = set()
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_STORED) as zf:
        for r in done:
            arcname = r.name
            if arcname in used and r.folder_name:
                arcname = f"{r.folder_name}/{r.name}"
            if arcname in used:
                log.warning(f"[ARCHIVE] duplicate entry {arcname}; skipping")
                continue
            used.add(arcname)
            zf.writestr(arcname, r.output)
    log.info(f"[ARCHIVE] packed {len(used)} files")
    return buf.getvalue()
