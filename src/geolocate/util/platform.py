from __future__ import annotations

from pathlib import Path
import sys

FILE_ATTRIBUTE_HIDDEN = 0x02

def hide_file(path: Path) -> bool:
    """Set the hidden attribute on Windows; dot-files are already hidden elsewhere.

    Returns True when the attribute was set.
    """
    if not sys.platform.startswith("win"):
        return False
    try:
        import ctypes

        attrs = ctypes.windll.kernel32.GetFileAttributesW(str(path))
        if attrs == -1:
            return False
        return bool(ctypes.windll.kernel32.SetFileAttributesW(str(path), attrs | FILE_ATTRIBUTE_HIDDEN))
    except (AttributeError, OSError):
        return False
