import struct
import sys
from pathlib import Path

import pytest


def pytest_configure():
    # This repo uses a src/ layout, so when running tests without an editable
    # install we add <repo>/src to sys.path.
    repo_root = Path(__file__).resolve().parents[2]
    src_path = str(repo_root / "src")
    if src_path not in sys.path:
        sys.path.insert(0, src_path)


def synchsafe(n: int) -> bytes:
    return bytes([(n >> 21) & 0x7F, (n >> 14) & 0x7F, (n >> 7) & 0x7F, n & 0x7F])


def frame(frame_id: str, encoding: int, content: bytes) -> bytes:
    """Standard ID3v2.3 frame: id, size, two flag bytes, indicator, content."""
    return (
        frame_id.encode("ascii")
        + struct.pack(">I", len(content) + 1)
        + b"\x00\x00"
        + bytes([encoding])
        + content
    )


def tag(*frames: bytes, padding: int = 0, version: int = 3) -> bytes:
    body = b"".join(frames) + b"\x00" * padding
    return b"ID3" + bytes([version, 0, 0]) + synchsafe(len(body)) + body


# Fake MPEG audio: a frame sync followed by filler, never looks like a tag.
AUDIO = b"\xff\xfb\x90\x64" + bytes(range(256)) * 4


@pytest.fixture
def audio() -> bytes:
    return AUDIO


@pytest.fixture
def build_frame():
    return frame


@pytest.fixture
def build_tag():
    return tag
