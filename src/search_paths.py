"""
Default scan roots for react2shell-check
"""

import os
import sys
from pathlib import Path
from typing import List

WINDOWS_SYSTEM_PATHS = [
    "C:\\Users",
    "C:\\Program Files",
    "C:\\Program Files (x86)",
    "C:\\ProgramData",
]

POSIX_SYSTEM_PATHS = [
    "/root",
    "/home",
    "/var/lib/docker",  # Docker containers
    "/opt",
    "/srv",
    "/usr/local",
]


def system_search_paths() -> List[str]:
    if sys.platform == "win32":
        return list(WINDOWS_SYSTEM_PATHS)
    return list(POSIX_SYSTEM_PATHS)


def is_elevated() -> bool:
    """Check if running as root (or as Administrator on Windows)"""
    if sys.platform == "win32":
        try:
            import ctypes
            return ctypes.windll.shell32.IsUserAnAdmin() != 0
        except (AttributeError, OSError):
            return False
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def default_search_paths(elevated: bool) -> List[Path]:
    """
    Roots to scan when none are given

    The home directory always comes first; well-known system locations
    are added when running with elevated privileges.
    """
    candidates = [Path.home()]
    if elevated:
        candidates.extend(Path(p) for p in system_search_paths())

    roots = []
    seen = set()
    for path in candidates:
        key = os.path.normcase(os.path.abspath(path))
        if key in seen:
            continue
        seen.add(key)
        roots.append(path)
    return roots
