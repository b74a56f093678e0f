"""Turns a tick's worth of events into actions using macOS event semantics."""

from __future__ import annotations

from collections.abc import Callable

from .config import FSConfig
from .events import FSAction, OpType
from .eventstack import EventStack
from .fsmap import FSMap
from .info import FSInfo
from .linux_resolver import _Tick
from .osrules import Platform


def resolve_events(
    stack: EventStack,
    watchmap: FSMap,
    config: FSConfig,
    add_watch: Callable[[str], object] | None,
    watch_recursive: bool,
) -> list[FSAction]:
    """Drain ``stack`` and return the resulting actions, grouped actions first.

    ``watchmap`` is updated to reflect the changes. When ``watch_recursive``
    is set, ``add_watch`` is called for each newly seen directory. Truncating
    a file to zero bytes shows up on macOS only as a chmod; such a chmod is
    reported as a write.
    """
    if len(stack) == 0:
        return []

    tick = _Tick(watchmap, add_watch, watch_recursive, Platform.DARWIN)
    for event in stack.list():
        tick.stat(event.path)

    to_rename: list[FSInfo] = []

    while (event := stack.pop()) is not None:
        kind = event.type

        if kind is OpType.CREATE:
            info = tick.on_disk(event)
            if info is None:
                continue
            rename_info = None
            for candidate in to_rename:
                if candidate.id == info.id:
                    rename_info = candidate
            if rename_info is None:
                tick.created(event, info)
                continue
            if rename_info.path == info.path:
                tick.group(event, info.id)
            else:
                action = tick.group(event, info.id, info, OpType.RENAME)
                action.properties["OldPath"] = rename_info.path
                watchmap.set(info)

        elif kind is OpType.WRITE:
            tick.write(event)

        elif kind is OpType.REMOVE:
            tick.remove(event)

        elif kind is OpType.RENAME:
            known = tick.remove(event, OpType.REMOVE)
            if known is not None:
                to_rename.append(known.clone())

        elif kind is OpType.CHMOD:
            info = tick.on_disk(event, None)
            if info is None:
                continue
            known = watchmap.get_by_id(info.id)
            if known is not None and info.size == 0 and known.size > 0:
                tick.group(event, info.id, info, OpType.WRITE)
                watchmap.set(info)
            if config.emit_chmod:
                tick.group(event, info.id, info)

    return tick.results()