from __future__ import annotations

import os
import re
import subprocess
import tempfile
from typing import Iterable, List, Optional, Sequence, Union

from tagfixer import config
from tagfixer import logger as logger_mod

from .errors import CodecError

log = logger_mod.get_logger()

SplitMode = Union[float, int, str]

_SILENCE_START = re.compile(r"silence_start: (-?[\d.]+)")
_SILENCE_END = re.compile(r"silence_end: (-?[\d.]+)")
_SEGMENT_PATTERN = "out%03d.mp3"


def parse_silence_log(lines: Iterable[str]) -> List[float]:
    """Split points from ``silencedetect`` output.

    Each point sits halfway between a silence_start and the silence_end that
    follows it; a start without an end (silence running to the end of the
    file) is kept as is.
    """
    points: List[float] = []
    open_start = False
    for line in lines:
        m = _SILENCE_START.search(line)
        if m:
            points.append(float(m.group(1)))
            open_start = True
        m = _SILENCE_END.search(line)
        if m and open_start:
            points[-1] = (points[-1] + float(m.group(1))) / 2
            open_start = False
    return points


class FfmpegCodec:
    """Thin wrapper around the ffmpeg binary.

    Each call works in its own temporary directory, so calls for different files
    do not interfere. Any failure raises CodecError for that input only.
    """

    def __init__(
        self,
        ffmpeg_bin: Optional[str] = None,
        timeout_s: Optional[float] = None,
    ):
        self.ffmpeg_bin = ffmpeg_bin or config.FFMPEG_BIN
        self.timeout_s = config.CODEC_TIMEOUT_S if timeout_s is None else timeout_s

    def _run(self, args: Sequence[str], cwd: str) -> subprocess.CompletedProcess:
        cmd = [self.ffmpeg_bin, "-hide_banner", "-nostdin", "-y", *args]
        log.debug(f"[CODEC] running {' '.join(cmd)}")
        try:
            p = subprocess.run(
                cmd,
                cwd=cwd,
                check=False,
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
            )
        except FileNotFoundError as e:
            raise CodecError(f"ffmpeg not found: {self.ffmpeg_bin}") from e
        except subprocess.TimeoutExpired as e:
            raise CodecError(f"ffmpeg timed out after {self.timeout_s}s") from e

        if p.returncode != 0:
            tail = (p.stderr or "").strip().splitlines()[-3:]
            raise CodecError(f"ffmpeg exited with {p.returncode}: {' | '.join(tail)}")
        return p

    def convert_wma_to_mp3(
        self, data: bytes, bitrate: Optional[str] = None
    ) -> bytes:
        with tempfile.TemporaryDirectory(prefix="tagfixer-") as work:
            with open(os.path.join(work, "input.wma"), "wb") as fh:
                fh.write(data)
            self._run(
                ["-i", "input.wma", "-b:a", bitrate or config.MP3_BITRATE, "output.mp3"],
                cwd=work,
            )
            with open(os.path.join(work, "output.mp3"), "rb") as fh:
                out = fh.read()
        log.info(f"[CODEC] converted {len(data)} bytes of WMA to {len(out)} bytes of MP3")
        return out

    def detect_silence_points(self, path: str) -> List[float]:
        silence = (
            f"silencedetect=noise={config.SILENCE_NOISE_DB}"
            f":d={config.SILENCE_MIN_DURATION_S}"
        )
        p = self._run(
            ["-i", os.path.abspath(path), "-af", silence, "-f", "null", "-"],
            cwd=os.path.dirname(os.path.abspath(path)),
        )
        # silencedetect reports on stderr
        return parse_silence_log((p.stderr or "").splitlines())

    def split(self, data: bytes, mode: SplitMode) -> List[bytes]:
        """Cut an MP3 into pieces, every ``mode`` seconds or on silence."""
        with tempfile.TemporaryDirectory(prefix="tagfixer-") as work:
            src = os.path.join(work, "input_split.mp3")
            with open(src, "wb") as fh:
                fh.write(data)

            if mode == "silence":
                points = self.detect_silence_points(src)
                if not points:
                    log.info("[CODEC] no silence found; keeping the file whole")
                    return [data]
                segment = ["-segment_times", ",".join(f"{p:g}" for p in points)]
            else:
                try:
                    seconds = float(mode)
                except (TypeError, ValueError) as e:
                    raise CodecError(f"unknown split mode {mode!r}") from e
                if seconds <= 0:
                    raise CodecError(f"segment length must be positive, got {mode!r}")
                segment = ["-segment_time", f"{seconds:g}"]

            self._run(
                ["-i", "input_split.mp3", "-f", "segment", *segment, "-c", "copy", _SEGMENT_PATTERN],
                cwd=work,
            )

            names = sorted(
                n for n in os.listdir(work) if n.startswith("out") and n.endswith(".mp3")
            )
            pieces = []
            for n in names:
                with open(os.path.join(work, n), "rb") as fh:
                    pieces.append(fh.read())

        log.info(f"[CODEC] split into {len(pieces)} pieces")
        return pieces
