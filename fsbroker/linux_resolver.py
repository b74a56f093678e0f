"""Turns a tick's worth of events into actions using Linux event semantics."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from .config import FSConfig
from .events import FSAction, FSEvent, OpType, append_event
from .eventstack import EventStack
from .fsmap import FSMap
from .info import FSInfo
from .osrules import Platform, stat_info

_log = logging.getLogger(__name__)

_GONE = "Event irrelevant. File no longer exists"


@dataclass
class _Tick:
    """State shared by the handlers while one batch of events is resolved."""

    watchmap: FSMap
    add_watch: Callable[[str], object] | None
    watch_recursive: bool
    platform: Platform
    statmap: dict[str, FSInfo] = field(default_factory=dict)
    actions: dict[int, FSAction] = field(default_factory=dict)
    noop: list[FSAction] = field(default_factory=list)

    def stat(self, path: str) -> None:
        """Stat ``path`` unless it has been stated already this tick."""
        if path in self.statmap:
            return
        info = stat_info(path, self.platform)
        if info is not None:
            self.statmap[path] = info

    def ignore(self, event: FSEvent, message: str | None = None) -> None:
        action = FSAction.from_event(event)
        action.type = OpType.NOOP
        if message is not None:
            action.properties["Message"] = message
        self.noop.append(action)

    def on_disk(self, event: FSEvent, message: str | None = _GONE) -> FSInfo | None:
        """Return the stat of the event's path, or record a no-op if it is gone."""
        info = self.statmap.get(event.path)
        if info is None:
            self.ignore(event, message)
        return info

    def group(
        self,
        event: FSEvent,
        file_id: int,
        subject: FSInfo | None = None,
        op: OpType | None = None,
    ) -> FSAction:
        action = append_event(self.actions, event, file_id)
        if subject is not None:
            action.subject = subject
        if op is not None:
            action.type = op
        return action

    def created(self, event: FSEvent, info: FSInfo, op: OpType | None = None) -> None:
        """Record a newly seen path, watching it if it is a directory."""
        self.group(event, info.id, info, op)
        if self.watch_recursive and self.add_watch is not None and info.is_dir():
            try:
                self.add_watch(info.path)
            except OSError as exc:
                _log.debug("Could not watch new directory %s: %s", info.path, exc)
        self.watchmap.set(info)

    def write(self, event: FSEvent) -> None:
        info = self.on_disk(event)
        if info is None:
            return
        if self.watchmap.get_by_id(info.id) is None:
            self.created(event, info, OpType.CREATE)
        else:
            self.group(event, info.id, info)
            self.watchmap.set(info)

    def remove(self, event: FSEvent, op: OpType | None = None) -> FSInfo | None:
        """Record the loss of a known path; return its last known info."""
        known = self.watchmap.get_by_path(event.path)
        if known is None:
            self.ignore(event)
            return None
        self.group(event, known.id, known, op)
        try:
            self.watchmap.delete_by_path(event.path)
        except KeyError:
            pass
        return known

    def results(self) -> list[FSAction]:
        return [*self.actions.values(), *self.noop]


def resolve_events(
    stack: EventStack,
    watchmap: FSMap,
    config: FSConfig,
    add_watch: Callable[[str], object] | None,
    watch_recursive: bool,
) -> list[FSAction]:
    """Drain ``stack`` and return the resulting actions, grouped actions first.

    ``watchmap`` is updated to reflect the changes. When ``watch_recursive``
    is set, ``add_watch`` is called for each newly seen directory.
    """
    if len(stack) == 0:
        return []

    tick = _Tick(watchmap, add_watch, watch_recursive, Platform.LINUX)

    # Stat each path once; duplicate renames of a path are reported apart.
    renames_seen: set[str] = set()
    for event in stack.list():
        if event.type is OpType.RENAME:
            if event.path not in renames_seen:
                renames_seen.add(event.path)
                continue
            _log.debug("Deduping rename event: %s", event.path)
            action = FSAction.from_event(event)
            action.properties["Message"] = "Duplicate rename event"
            tick.noop.append(action)
            stack.delete(event)
        tick.stat(event.path)

    to_rename: list[FSInfo] = []

    while (event := stack.pop()) is not None:
        kind = event.type

        if kind is OpType.CREATE:
            info = tick.on_disk(event)
            if info is None:
                continue
            known = watchmap.get_by_id(info.id)
            if known is None:
                tick.created(event, info)
                continue
            existing = tick.actions.get(info.id)
            if existing is not None and existing.type is OpType.CREATE:
                tick.group(event, info.id)
                watchmap.set(info)
                continue
            to_rename.append(known.clone())
            tick.group(event, info.id, info, OpType.RENAME)
            watchmap.set(info)

        elif kind is OpType.WRITE:
            tick.write(event)

        elif kind is OpType.REMOVE:
            tick.remove(event)

        elif kind is OpType.RENAME:
            rename_info = None
            for candidate in to_rename:
                if candidate.path == event.path:
                    rename_info = candidate
            if rename_info is not None:
                action = tick.group(event, rename_info.id, op=OpType.RENAME)
                action.properties["OldPath"] = event.path
                continue
            tick.remove(event, OpType.REMOVE)

        elif kind is OpType.CHMOD:
            info = tick.on_disk(event, None)
            if info is not None and config.emit_chmod:
                tick.group(event, info.id, info)

    return tick.results()