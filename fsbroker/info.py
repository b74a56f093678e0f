"""Information about a watched file or directory."""

from __future__ import annotations

import dataclasses
import stat
from dataclasses import dataclass
from datetime import datetime


@dataclass
class FSInfo:
    """A snapshot of a file's identity, location and metadata.

    ``id`` is the file identity (inode or file index) and ``mode`` holds
    ``st_mode`` bits as reported by :func:`os.stat`.
    """

    id: int
    path: str
    size: int = 0
    mod_time: datetime | None = None
    mode: int = 0

    def is_dir(self) -> bool:
        """Return True when the mode describes a directory."""
        return stat.S_ISDIR(self.mode)

    def clone(self) -> FSInfo:
        """Return an independent copy of this record."""
        return dataclasses.replace(self)

    def __str__(self) -> str:
        return f"Id: {self.id}, Path: {self.path}, Mode: {self.mode:o}"