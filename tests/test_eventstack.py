import threading
from datetime import datetime

import pytest

from fsbroker.events import FSEvent, Op, OpType, RawEvent
from fsbroker.eventstack import EventStack


def make_event(path):
    return FSEvent(
        type=OpType.WRITE,
        path=path,
        timestamp=datetime.now(),
        event=RawEvent(name=path, op=Op.WRITE),
    )


@pytest.fixture
def trio():
    return [make_event(name) for name in ("file1.txt", "file2.txt", "file3.txt")]


@pytest.fixture
def filled(trio):
    es = EventStack()
    for event in trio:
        es.push(event)
    return es


def test_new_stack_is_empty():
    es = EventStack()
    assert len(es) == 0
    assert es.list() == []
    assert es.pop() is None


def test_push_appends_at_end(trio):
    es = EventStack()
    for count, event in enumerate(trio, start=1):
        es.push(event)
        assert len(es) == count
        assert es.list()[-1] is event


def test_pop_is_lifo(filled, trio):
    for remaining, expected in zip((2, 1, 0), reversed(trio)):
        assert filled.pop() is expected
        assert len(filled) == remaining
    assert filled.pop() is None


def test_list_returns_copy(filled, trio):
    snapshot = filled.list()
    assert snapshot == trio
    snapshot[0] = None
    assert filled.list()[0] is trio[0]
    assert len(filled) == 3


def test_delete(filled, trio):
    first, second, third = trio
    assert filled.delete(make_event("other.txt")) is False
    assert len(filled) == 3

    for victim, rest in ((second, [first, third]), (first, [third]), (third, [])):
        assert filled.delete(victim) is True
        assert filled.list() == rest

    assert filled.delete(first) is False
    assert len(filled) == 0


def test_delete_uses_identity(filled, trio):
    assert filled.delete(make_event(trio[0].path)) is False
    assert filled.list() == trio


def test_clear(filled):
    filled.clear()
    assert len(filled) == 0
    assert filled.list() == []
    filled.clear()
    assert len(filled) == 0


def test_by_signature():
    es = EventStack()
    first_a, only_b, last_a = make_event("a.txt"), make_event("b.txt"), make_event("a.txt")
    for event in (first_a, only_b, last_a):
        es.push(event)
    mapping = es.by_signature()
    assert set(mapping) == {"Write-a.txt", "Write-b.txt"}
    assert mapping["Write-a.txt"] is last_a
    assert mapping["Write-b.txt"] is only_b


def _run_threads(target, count, with_index=False):
    threads = [
        threading.Thread(target=target, args=(g,) if with_index else ())
        for g in range(count)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()


def test_concurrency():
    es = EventStack()
    num_threads = 20
    ops = 50

    def pusher(g):
        for j in range(ops):
            es.push(make_event(f"file_{g}_{j}"))

    _run_threads(pusher, num_threads, with_index=True)
    total = num_threads * ops
    assert len(es) == total

    removed = []
    lock = threading.Lock()

    def mixer():
        for j in range(ops):
            if j % 2 == 0:
                done = es.pop() is not None
            else:
                snapshot = es.list()
                done = bool(snapshot) and es.delete(snapshot[0])
            if done:
                with lock:
                    removed.append(1)

    _run_threads(mixer, num_threads)

    assert len(es) == total - len(removed)
    assert len(es) < total

    es.clear()
    assert len(es) == 0