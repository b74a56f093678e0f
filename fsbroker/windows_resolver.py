"""Turns a tick's worth of events into actions using Windows event semantics."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .config import FSConfig
from .events import FSAction, FSEvent, OpType, append_event
from .eventstack import EventStack
from .fsmap import FSMap
from .info import FSInfo
from .osrules import Platform, stat_info

_log = logging.getLogger(__name__)

_GONE = "Event irrelevant. File no longer exists"
_ON_DIRECTORY = "Event irrelevant. Event is on a directory"


def _noop(event: FSEvent, message: str | None = None) -> FSAction:
    action = FSAction.from_event(event)
    action.type = OpType.NOOP
    if message is not None:
        action.properties["Message"] = message
    return action


def _watch_new_dir(
    info: FSInfo,
    add_watch: Callable[[str], object] | None,
    watch_recursive: bool,
) -> None:
    if watch_recursive and add_watch is not None and info.is_dir():
        try:
            add_watch(info.path)
        except OSError as exc:
            _log.debug("Could not watch new directory %s: %s", info.path, exc)


def _drop_path(watchmap: FSMap, path: str) -> None:
    try:
        watchmap.delete_by_path(path)
    except KeyError:
        pass


def resolve_events(
    stack: EventStack,
    watchmap: FSMap,
    config: FSConfig,
    add_watch: Callable[[str], object] | None,
    watch_recursive: bool,
) -> list[FSAction]:
    """Drain ``stack`` and return the resulting actions, grouped actions first.

    ``watchmap`` is updated to reflect the changes. When ``watch_recursive``
    is set, ``add_watch`` is called for each newly seen directory. A rename
    shows up on Windows as a create of the new path followed by a rename or
    remove of the old one; both are folded into a single rename action.
    """
    if len(stack) == 0:
        return []

    # Stat each path once, since many events may concern the same file.
    statmap: dict[str, FSInfo] = {}
    for event in stack.list():
        if event.path in statmap:
            continue
        info = stat_info(event.path, Platform.WINDOWS)
        if info is not None:
            statmap[event.path] = info

    actions: dict[int, FSAction] = {}
    noop: list[FSAction] = []
    to_rename: dict[str, FSInfo] = {}

    while (event := stack.pop()) is not None:
        kind = event.type

        if kind is OpType.CREATE:
            info = statmap.get(event.path)
            if info is None:
                noop.append(_noop(event, _GONE))
                continue
            known = watchmap.get_by_id(info.id)
            if known is None:
                action = append_event(actions, event, info.id)
                action.subject = info
                _watch_new_dir(info, add_watch, watch_recursive)
                watchmap.set(info)
                continue
            old_path = known.path
            if old_path == info.path:
                append_event(actions, event, info.id)
            else:
                to_rename[old_path] = known.clone()
                action = append_event(actions, event, info.id)
                action.subject = info
                action.type = OpType.RENAME
                action.properties["OldPath"] = old_path
                watchmap.set(info)

        elif kind is OpType.WRITE:
            info = statmap.get(event.path)
            if info is None:
                noop.append(_noop(event, _GONE))
                continue
            if info.is_dir():
                noop.append(_noop(event, _ON_DIRECTORY))
                continue
            known = watchmap.get_by_id(info.id)
            action = append_event(actions, event, info.id)
            action.subject = info
            if known is None:
                action.type = OpType.CREATE
                _watch_new_dir(info, add_watch, watch_recursive)
            watchmap.set(info)

        elif kind is OpType.REMOVE:
            known = watchmap.get_by_path(event.path)
            if known is None:
                rename_info = to_rename.get(event.path)
                if rename_info is not None:
                    append_event(actions, event, rename_info.id)
                    continue
                noop.append(_noop(event))
                continue
            action = append_event(actions, event, known.id)
            action.subject = known
            _drop_path(watchmap, event.path)

        elif kind is OpType.RENAME:
            known = watchmap.get_by_path(event.path)
            if known is None:
                rename_info = to_rename.get(event.path)
                if rename_info is not None:
                    append_event(actions, event, rename_info.id)
                    continue
                noop.append(_noop(event))
                continue
            action = append_event(actions, event, known.id)
            action.type = OpType.REMOVE
            action.subject = known

        elif kind is OpType.CHMOD:
            info = statmap.get(event.path)
            if info is None:
                noop.append(_noop(event))
                continue
            if config.emit_chmod:
                action = append_event(actions, event, info.id)
                action.subject = info

    return [*actions.values(), *noop]