"""A thread-safe index of watched files, keyed both by identity and by path."""

from __future__ import annotations

import threading
from collections.abc import Iterator

from .info import FSInfo


class FSMap:
    """Keeps FSInfo records reachable by file id and by path."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._ids: dict[int, FSInfo] = {}
        self._paths: dict[str, FSInfo] = {}

    def set(self, info: FSInfo) -> None:
        """Store ``info``, dropping the old path entry of the same file id."""
        with self._lock:
            old = self._ids.get(info.id)
            if old is not None:
                self._paths.pop(old.path, None)
            self._ids[info.id] = info
            self._paths[info.path] = info

    def get_by_id(self, file_id: int) -> FSInfo | None:
        with self._lock:
            return self._ids.get(file_id)

    def get_by_path(self, path: str) -> FSInfo | None:
        with self._lock:
            return self._paths.get(path)

    def delete_by_id(self, file_id: int) -> None:
        """Remove the entry for ``file_id``; raise KeyError if there is none."""
        with self._lock:
            info = self._ids.pop(file_id, None)
            if info is None:
                raise KeyError("id not found")
            self._paths.pop(info.path, None)

    def delete_by_path(self, path: str) -> None:
        """Remove the entry for ``path``; raise KeyError if there is none."""
        with self._lock:
            info = self._paths.pop(path, None)
            if info is None:
                raise KeyError("path not found")
            self._ids.pop(info.id, None)

    def iter_ids(self) -> Iterator[tuple[int, FSInfo]]:
        """Iterate over a snapshot of (id, info) pairs."""
        with self._lock:
            items = list(self._ids.items())
        return iter(items)

    def iter_paths(self) -> Iterator[tuple[str, FSInfo]]:
        """Iterate over a snapshot of (path, info) pairs."""
        with self._lock:
            items = list(self._paths.items())
        return iter(items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._paths