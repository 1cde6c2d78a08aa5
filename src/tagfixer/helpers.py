import os
import re
from typing import Any, Optional

from tagfixer import logger as log

log = log.get_logger()

_EXTENSION = re.compile(r"\.[^/.]+$")


def safe_str(v: Any) -> str:
    """Best-effort stringify without turning missing values into the literal 'None'."""
    if v is None:
        return ""
    try:
        s = str(v)
    except Exception:
        return ""
    # Some tag wrappers stringify missing values as "None"
    if s.strip().lower() == "none":
        return ""
    return s


def strip_extension(filename: str) -> str:
    """Drop the final ``.ext`` suffix; dotfiles like ``.mp3`` collapse to ''."""
    return _EXTENSION.sub("", os.path.basename(filename))


def parent_folder_name(path: str, root: Optional[str] = None) -> Optional[str]:
    """Immediate parent directory name of ``path``.

    With ``root`` given, paths outside of ``root`` get no folder name.
    """
    path = os.path.abspath(path)
    if root is not None:
        rel = os.path.relpath(path, os.path.abspath(root))
        if rel.startswith(os.pardir):
            return None
    name = os.path.basename(os.path.dirname(path))
    log.debug(f"parent_folder_name: {path} -> {name!r}")
    return name or None
