"""Per-platform rules: system and hidden file detection and file identity."""

from __future__ import annotations

import enum
import logging
import ntpath
import os
import posixpath
import stat
import sys
from datetime import datetime

from .info import FSInfo

_log = logging.getLogger(__name__)


class Platform(enum.Enum):
    """The operating-system family whose conventions apply."""

    LINUX = "linux"
    DARWIN = "darwin"
    WINDOWS = "windows"


def current_platform() -> Platform:
    """Return the platform the interpreter runs on.

    Unix-like systems other than macOS follow the Linux conventions.
    """
    if sys.platform == "darwin":
        return Platform.DARWIN
    if sys.platform.startswith("win"):
        return Platform.WINDOWS
    return Platform.LINUX


def _base_name(path: str, platform: Platform) -> str:
    """Return the last element of ``path``, ignoring trailing separators."""
    module = ntpath if platform is Platform.WINDOWS else posixpath
    separators = "\\/" if platform is Platform.WINDOWS else "/"
    if not path:
        return "."
    stripped = path.rstrip(separators)
    if not stripped:
        return module.sep
    return module.basename(stripped)


_EDITOR_SUFFIXES = (".swp", ".swo")

_LINUX_SYSTEM_NAMES = frozenset({
    ".bash_history", ".bash_logout", ".bash_profile", ".bashrc", ".profile",
    ".login", ".sudo_as_admin_successful", ".xauthority", ".xsession-errors",
    ".viminfo", ".cache", ".config", ".local", ".dbus", ".gvfs",
    ".recently-used", ".fontconfig", ".iceauthority",
})

_DARWIN_SYSTEM_NAMES = frozenset({
    ".ds_store", ".appledouble", ".spotlight-v100",
    ".bash_history", ".bash_logout", ".bash_profile", ".bashrc", ".profile",
    ".zshrc", ".zhistory",
    ".cache", ".config",
    ".viminfo",
    ".temporaryitems", ".trashes", ".fseventsd", ".volumeicon.icns",
    "icon\r", ".documentrevisions-v100", ".pkinstallsandboxmanager", ".apdisk",
})

_WINDOWS_SYSTEM_NAMES = frozenset({
    "desktop.ini", "thumbs.db", "$recycle.bin", "system volume information",
})


def _is_editor_or_bytecode(base: str) -> bool:
    if base.endswith("~"):
        return True
    if base.startswith("#") and base.endswith("#"):
        return True
    if base.startswith(".") and base.endswith(_EDITOR_SUFFIXES):
        return True
    return base.endswith(".pyc")


def is_system_file(name: str, platform: Platform) -> bool:
    """Return True when ``name`` is a common system, cache or editor file."""
    base = _base_name(name, platform).lower()
    if platform is Platform.WINDOWS:
        return base in _WINDOWS_SYSTEM_NAMES
    if platform is Platform.DARWIN:
        if base in _DARWIN_SYSTEM_NAMES or _is_editor_or_bytecode(base):
            return True
        return base.startswith("._") or base == ".com.apple.timemachine.donotpresent"
    if base in _LINUX_SYSTEM_NAMES or _is_editor_or_bytecode(base):
        return True
    return base.startswith((".goutputstream-", ".trash-"))


def is_hidden_file(path: str, platform: Platform) -> bool:
    """Return True when ``path`` is hidden.

    On Unix-like systems a leading dot hides a file. On Windows the hidden
    attribute decides; a path that does not exist is not hidden, while any
    other failure to read the attributes raises OSError.
    """
    if platform is not Platform.WINDOWS:
        base = _base_name(path, platform)
        return base.startswith(".") and base not in (".", "..")

    try:
        result = os.stat(os.path.abspath(path))
    except (FileNotFoundError, NotADirectoryError):
        _log.debug("Ignoring benign 'file/path not found' during hidden check: %s", path)
        return False
    attributes = getattr(result, "st_file_attributes", 0)
    return bool(attributes & stat.FILE_ATTRIBUTE_HIDDEN)


def info_from_stat(path: str, stat_result: os.stat_result, platform: Platform) -> FSInfo:
    """Build an FSInfo from a stat result.

    Linux records only identity and mode; macOS and Windows also record
    size and modification time, which are reliable there.
    """
    if platform is Platform.LINUX:
        return FSInfo(id=stat_result.st_ino, path=path, mode=stat_result.st_mode)
    return FSInfo(
        id=stat_result.st_ino,
        path=path,
        size=stat_result.st_size,
        mod_time=datetime.fromtimestamp(stat_result.st_mtime),
        mode=stat_result.st_mode,
    )


def stat_info(path: str, platform: Platform) -> FSInfo | None:
    """Stat ``path`` and return its FSInfo, or None when it cannot be stat'ed."""
    try:
        result = os.stat(path)
    except FileNotFoundError:
        _log.debug("File not found: %s", path)
        return None
    except OSError:
        _log.debug("Failed to stat file: %s", path)
        return None
    return info_from_stat(path, result, platform)