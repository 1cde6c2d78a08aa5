"""Audio conversion and splitting through ffmpeg.

Public API:
- FfmpegCodec
- CodecError
- parse_silence_log
"""

from .errors import CodecError
from .ffmpeg import FfmpegCodec, parse_silence_log

__all__ = ["FfmpegCodec", "CodecError", "parse_silence_log"]
