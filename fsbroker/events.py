"""Raw notifications, normalised events and the grouped actions built from them."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .info import FSInfo


class Op(enum.IntFlag):
    """Operation bits reported by the filesystem notifier."""

    CREATE = 1
    WRITE = 2
    REMOVE = 4
    RENAME = 8
    CHMOD = 16


class OpType(enum.Enum):
    """The kind of change an event or action describes."""

    CREATE = 0
    WRITE = 1
    RENAME = 2
    REMOVE = 3
    CHMOD = 4
    NOOP = 5

    def __str__(self) -> str:
        return _LABELS[self]

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


_LABELS = {
    OpType.CREATE: "Create",
    OpType.WRITE: "Write",
    OpType.RENAME: "Rename",
    OpType.REMOVE: "Remove",
    OpType.CHMOD: "Chmod",
    OpType.NOOP: "NoOp",
}

# Checked in this order, so the first matching bit decides the type.
_PRIORITY = (
    (Op.CREATE, OpType.CREATE),
    (Op.WRITE, OpType.WRITE),
    (Op.RENAME, OpType.RENAME),
    (Op.REMOVE, OpType.REMOVE),
    (Op.CHMOD, OpType.CHMOD),
)


def map_op_to_op_type(op: int) -> OpType | None:
    """Map notifier operation bits to an OpType, or None when none is known."""
    bits = int(op)
    for flag, op_type in _PRIORITY:
        if bits & flag:
            return op_type
    return None


@dataclass(frozen=True)
class RawEvent:
    """A notification as delivered by the filesystem watcher."""

    name: str
    op: Op


@dataclass(eq=False)
class FSEvent:
    """A single filesystem event, timestamped when it was received."""

    type: OpType | None
    path: str
    timestamp: datetime
    event: RawEvent | None = None

    @classmethod
    def from_raw(cls, raw: RawEvent) -> FSEvent:
        return cls(
            type=map_op_to_op_type(raw.op),
            path=raw.name,
            timestamp=datetime.now(),
            event=raw,
        )

    def signature(self) -> str:
        return f"{self.type}-{self.path}"


@dataclass(eq=False)
class FSAction:
    """A user-facing change, built from one or more grouped events."""

    type: OpType
    timestamp: datetime
    subject: FSInfo | None = None
    events: list[FSEvent] = field(default_factory=list)
    properties: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def new(cls, op: OpType, path: str, timestamp: datetime) -> FSAction:
        """Create an empty action; the path is not recorded until a subject is set."""
        return cls(type=op, timestamp=timestamp)

    @classmethod
    def from_event(cls, event: FSEvent) -> FSAction:
        return cls(type=event.type, timestamp=event.timestamp, events=[event])

    def signature(self) -> str:
        if self.subject is None:
            raise ValueError("action has no subject")
        return f"{self.type}-{self.subject.path}"


def append_event(actions: dict[int, FSAction], event: FSEvent, file_id: int) -> FSAction:
    """Add ``event`` to the action for ``file_id``, creating the action if needed."""
    action = actions.get(file_id)
    if action is not None:
        action.events.append(event)
        return action
    action = FSAction.from_event(event)
    actions[file_id] = action
    return action