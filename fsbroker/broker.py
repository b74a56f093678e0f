"""Collects filesystem notifications, groups them each tick and emits actions."""

from __future__ import annotations

import logging
import os
import queue
import stat
import sys
import threading
import time
from collections.abc import Callable, Iterator

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .config import DEFAULT_TIMEOUT, FSConfig, default_config
from .darwin_resolver import resolve_events as _resolve_darwin
from .events import FSAction, FSEvent, Op, RawEvent
from .eventstack import EventStack
from .fsmap import FSMap
from .info import FSInfo
from .linux_resolver import resolve_events as _resolve_linux
from .osrules import (
    Platform,
    current_platform,
    info_from_stat,
    is_hidden_file,
    is_system_file,
    stat_info,
)
from .windows_resolver import resolve_events as _resolve_windows

_log = logging.getLogger(__name__)

_RESOLVERS = {
    Platform.LINUX: _resolve_linux,
    Platform.DARWIN: _resolve_darwin,
    Platform.WINDOWS: _resolve_windows,
}

_debug_handler = logging.StreamHandler(sys.stdout)


def enable_debug_logging() -> logging.Logger:
    """Send the package's debug messages to standard output."""
    logger = logging.getLogger("fsbroker")
    logger.setLevel(logging.DEBUG)
    if _debug_handler not in logger.handlers:
        logger.addHandler(_debug_handler)
        logger.info("[FSBroker] Debug logging ENABLED")
    return logger


def _raw_events(event: FSEvent | FileSystemEvent, platform: Platform) -> list[RawEvent]:
    """Translate a watcher notification into the raw events the resolvers expect."""
    kind = event.event_type
    src = os.fsdecode(event.src_path)
    if kind == EVENT_TYPE_CREATED:
        return [RawEvent(src, Op.CREATE)]
    if kind == EVENT_TYPE_DELETED:
        return [RawEvent(src, Op.REMOVE)]
    if kind == EVENT_TYPE_MODIFIED:
        # Directory modifications merely echo changes to their entries.
        return [] if event.is_directory else [RawEvent(src, Op.WRITE)]
    if kind == EVENT_TYPE_MOVED:
        dest = os.fsdecode(event.dest_path)
        old, new = RawEvent(src, Op.RENAME), RawEvent(dest, Op.CREATE)
        # Events are resolved newest first; macOS needs the old name seen first.
        return [new, old] if platform is Platform.DARWIN else [old, new]
    return []


def _walk(root: str) -> Iterator[tuple[str, os.stat_result]]:
    """Yield (path, lstat) for ``root`` and everything below it, in lexical order."""
    result = os.lstat(root)
    yield root, result
    if stat.S_ISDIR(result.st_mode):
        for name in sorted(os.listdir(root)):
            yield from _walk(os.path.join(root, name))


class _Forwarder(FileSystemEventHandler):
    def __init__(self, broker: FSBroker) -> None:
        super().__init__()
        self._broker = broker

    def on_any_event(self, event: FileSystemEvent) -> None:
        for raw in _raw_events(event, self._broker.platform):
            _log.debug("Received watcher event: %s %s", raw.op, raw.name)
            self._broker.handle_event(raw)


class FSBroker:
    """Groups, dedupes and interprets filesystem notifications as single actions.

    Actions are read with :meth:`next` and errors with :meth:`error`. Set
    ``filter`` to a callable returning False for actions that should be dropped.
    """

    def __init__(
        self,
        config: FSConfig | None = None,
        *,
        platform: Platform | None = None,
        action_filter: Callable[[FSAction], bool] | None = None,
    ) -> None:
        self.config = config if config is not None else default_config()
        self.platform = platform if platform is not None else current_platform()
        self.filter = action_filter
        self._resolver = _RESOLVERS[self.platform]
        self._watchmap = FSMap()
        self._watch_recursive = False
        self._observer = Observer()
        self._handler = _Forwarder(self)
        self._watches: dict[str, object] = {}
        self._watch_lock = threading.Lock()
        self._events: queue.Queue[FSEvent | None] = queue.Queue()
        self._emit: queue.Queue[FSAction] = queue.Queue()
        self._errors: queue.Queue[BaseException] = queue.Queue()
        self._quit = threading.Event()
        self._resolve_lock = threading.Lock()
        self._loop: threading.Thread | None = None

    def start(self) -> None:
        """Start watching and processing events in background threads."""
        if self._loop is not None:
            raise RuntimeError("broker already started")
        self._loop = threading.Thread(
            target=self._event_loop, name="fsbroker-events", daemon=True
        )
        self._loop.start()
        self._observer.start()

    def stop(self) -> None:
        """Stop watching and processing; further calls do nothing."""
        if self._quit.is_set():
            return
        self._quit.set()
        self._events.put(None)
        if self._observer.is_alive():
            self._observer.stop()
            self._observer.join()
        if self._loop is not None and self._loop is not threading.current_thread():
            self._loop.join()

    def next(self, timeout: float | None = None) -> FSAction | None:
        """Return the next action, or None if none arrives within ``timeout`` seconds."""
        try:
            return self._emit.get(timeout=timeout)
        except queue.Empty:
            return None

    def error(self, timeout: float | None = None) -> BaseException | None:
        """Return the next error, or None if none arrives within ``timeout`` seconds."""
        try:
            return self._errors.get(timeout=timeout)
        except queue.Empty:
            return None

    def add_recursive_watch(self, path: str) -> None:
        """Watch ``path`` and every directory below it.

        Once called, directories created later are watched automatically,
        including those under paths added with :meth:`add_watch`.
        """
        self._watch_recursive = True
        for entry, result in _walk(path):
            if stat.S_ISDIR(result.st_mode) and self._watchmap.get_by_path(entry) is None:
                self._schedule(entry)
            self._watchmap.set(info_from_stat(entry, result, self.platform))

    def add_watch(self, path: str) -> None:
        """Watch the directory ``path`` and record its entries."""
        if self._watchmap.get_by_path(path) is not None:
            return
        names = os.listdir(path)
        self._schedule(path)
        for name in names:
            info = stat_info(os.path.join(path, name), self.platform)
            if info is not None:
                self._watchmap.set(info)

    def remove_watch(self, path: str) -> None:
        """Stop watching ``path`` and forget every entry whose path starts with it."""
        with self._watch_lock:
            watch = self._watches.pop(path, None)
        if watch is not None:
            try:
                self._observer.unschedule(watch)
            except (KeyError, OSError):
                pass
        for key, _ in self._watchmap.iter_paths():
            if key.startswith(path):
                try:
                    self._watchmap.delete_by_path(key)
                except KeyError:
                    pass

    def handle_event(self, raw: RawEvent) -> bool:
        """Queue ``raw`` for grouping; return False when it is filtered out."""
        event = FSEvent.from_raw(raw)
        if self.config.ignore_hidden_files:
            try:
                hidden = is_hidden_file(raw.name, self.platform)
            except OSError as exc:
                failure = OSError(f"error checking if file {raw.name} is hidden: {exc}")
                failure.__cause__ = exc
                self._emit_error(failure)
                hidden = False
            if hidden:
                _log.debug("Ignoring event: hidden file %s", raw.name)
                return False
        if self.config.ignore_sys_files and is_system_file(raw.name, self.platform):
            _log.debug("Ignoring event: system file %s", raw.name)
            return False
        _log.debug("Queuing event: %s", event.type)
        self._events.put(event)
        return True

    def resolve(self, stack: EventStack) -> list[FSAction]:
        """Drain ``stack``, emit the resulting actions and return those emitted.

        Returns an empty list when another resolution is already running.
        """
        if not self._resolve_lock.acquire(blocking=False):
            return []
        try:
            actions = self._resolver(
                stack, self._watchmap, self.config, self.add_watch, self._watch_recursive
            )
            return [action for action in actions if self._emit_action(action)]
        finally:
            self._resolve_lock.release()

    def iter_paths(self) -> Iterator[tuple[str, FSInfo]]:
        """Iterate over the (path, info) pairs currently tracked."""
        return self._watchmap.iter_paths()

    def _schedule(self, path: str) -> None:
        with self._watch_lock:
            if path in self._watches:
                return
            self._watches[path] = self._observer.schedule(
                self._handler, path, recursive=False
            )

    def _event_loop(self) -> None:
        timeout = self.config.timeout if self.config.timeout > 0 else DEFAULT_TIMEOUT
        stack = EventStack()
        deadline = time.monotonic() + timeout
        while not self._quit.is_set():
            remaining = deadline - time.monotonic()
            if remaining > 0:
                try:
                    event = self._events.get(timeout=remaining)
                except queue.Empty:
                    continue
                if event is not None:
                    stack.push(event)
                continue
            deadline = time.monotonic() + timeout
            # Drain pending events so a burst is less likely to be split across ticks.
            while True:
                try:
                    event = self._events.get_nowait()
                except queue.Empty:
                    break
                if event is not None:
                    stack.push(event)
            _log.debug("Event loop tick, stack size %d", len(stack))
            self.resolve(stack)

    def _emit_action(self, action: FSAction) -> bool:
        if self.filter is not None and not self.filter(action):
            return False
        self._emit.put(action)
        return True

    def _emit_error(self, err: BaseException | None) -> None:
        if err is None:
            return
        _log.debug("Emitting error: %s", err)
        self._errors.put(err)