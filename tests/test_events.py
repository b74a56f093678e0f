from datetime import datetime, timedelta

import pytest

from fsbroker.events import (
    FSAction,
    FSEvent,
    Op,
    OpType,
    RawEvent,
    append_event,
    map_op_to_op_type,
)
from fsbroker.info import FSInfo


def test_new_action():
    now = datetime.now()
    action = FSAction.new(OpType.CREATE, "/test/path/new", now)
    assert action.type is OpType.CREATE
    assert action.timestamp == now
    assert action.subject is None
    assert action.events == []
    assert action.properties == {}


def test_from_event():
    now = datetime.now()
    raw = RawEvent(name="/test/path/from_event", op=Op.WRITE)
    event = FSEvent(type=OpType.WRITE, path="/test/path/from_event", timestamp=now, event=raw)
    action = FSAction.from_event(event)
    assert action.type is OpType.WRITE
    assert action.timestamp == now
    assert action.subject is None
    assert len(action.events) == 1
    assert action.events[0] is event
    assert action.properties == {}


@pytest.mark.parametrize(
    "op, expected",
    [
        (Op.CREATE, OpType.CREATE),
        (Op.WRITE, OpType.WRITE),
        (Op.REMOVE, OpType.REMOVE),
        (Op.RENAME, OpType.RENAME),
        (Op.CHMOD, OpType.CHMOD),
        (Op.WRITE | Op.CHMOD, OpType.WRITE),
        (Op.CREATE | Op.WRITE, OpType.CREATE),
        (Op.REMOVE | Op.RENAME, OpType.RENAME),
        (0, None),
        (1 << 30, None),
    ],
)
def test_map_op_to_op_type(op, expected):
    assert map_op_to_op_type(op) is expected


@pytest.mark.parametrize(
    "op, expected, path",
    [
        (Op.CREATE, OpType.CREATE, "/tmp/create.txt"),
        (Op.WRITE, OpType.WRITE, "/var/log/app.log"),
        (Op.REMOVE, OpType.REMOVE, "/home/user/file_to_remove"),
        (Op.RENAME, OpType.RENAME, "/docs/old_name.doc"),
        (Op.CHMOD, OpType.CHMOD, "/config/settings.conf"),
        (Op.WRITE | Op.CHMOD, OpType.WRITE, "/data/combined.dat"),
    ],
)
def test_event_from_raw(op, expected, path):
    now = datetime.now()
    raw = RawEvent(name=path, op=op)
    event = FSEvent.from_raw(raw)
    assert event.event is raw
    assert event.type is expected
    assert event.path == path
    buffer = timedelta(milliseconds=50)
    assert now - buffer <= event.timestamp <= now + buffer


@pytest.mark.parametrize(
    "op_type, label",
    [
        (OpType.CREATE, "Create"),
        (OpType.WRITE, "Write"),
        (OpType.RENAME, "Rename"),
        (OpType.REMOVE, "Remove"),
        (OpType.CHMOD, "Chmod"),
        (OpType.NOOP, "NoOp"),
    ],
)
def test_op_type_labels(op_type, label):
    event = FSEvent(type=op_type, path="/p", timestamp=datetime.now())
    assert event.signature() == f"{label}-/p"


def test_event_signature():
    event = FSEvent(type=OpType.REMOVE, path="/a/b.txt", timestamp=datetime.now())
    assert event.signature() == "Remove-/a/b.txt"


def test_action_signature_uses_subject_path():
    event = FSEvent(type=OpType.CREATE, path="/a/old.txt", timestamp=datetime.now())
    action = FSAction.from_event(event)
    action.type = OpType.RENAME
    action.subject = FSInfo(id=3, path="/a/new.txt")
    assert action.signature() == "Rename-/a/new.txt"


def test_action_signature_without_subject_raises():
    action = FSAction.new(OpType.WRITE, "/x", datetime.now())
    with pytest.raises(ValueError):
        action.signature()


def test_append_event_groups_by_id():
    actions = {}
    first = FSEvent(type=OpType.CREATE, path="/f", timestamp=datetime.now())
    second = FSEvent(type=OpType.WRITE, path="/f", timestamp=datetime.now())
    other = FSEvent(type=OpType.WRITE, path="/g", timestamp=datetime.now())

    a1 = append_event(actions, first, 10)
    a2 = append_event(actions, second, 10)
    a3 = append_event(actions, other, 11)

    assert a1 is a2
    assert a1.type is OpType.CREATE
    assert a1.events == [first, second]
    assert a3 is not a1
    assert a3.events == [other]
    assert set(actions) == {10, 11}