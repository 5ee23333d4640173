from __future__ import annotations

import threading
import time

import pytest

from roster.adapters.rwlock import ReadWriteLock


def test_readers_share_the_lock() -> None:
    lock = ReadWriteLock()
    inside = threading.Barrier(3, timeout=2)

    def reader() -> None:
        with lock.read_locked():
            # All three readers must be inside at once to pass the barrier.
            inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert not inside.broken


def test_writer_waits_for_readers() -> None:
    lock = ReadWriteLock()
    lock.acquire_read()
    acquired = threading.Event()

    def writer() -> None:
        with lock.write_locked():
            acquired.set()

    thread = threading.Thread(target=writer)
    thread.start()
    assert not acquired.wait(0.2)

    lock.release_read()
    assert acquired.wait(2)
    thread.join(timeout=2)


def test_waiting_writer_blocks_new_readers() -> None:
    lock = ReadWriteLock()
    lock.acquire_read()
    order: list[str] = []

    def writer() -> None:
        with lock.write_locked():
            order.append("writer")

    def late_reader() -> None:
        with lock.read_locked():
            order.append("reader")

    w = threading.Thread(target=writer)
    w.start()
    # Give the writer time to register as waiting.
    for _ in range(200):
        if lock._waiting_writers:
            break
        time.sleep(0.01)
    r = threading.Thread(target=late_reader)
    r.start()
    assert order == []

    lock.release_read()
    w.join(timeout=2)
    r.join(timeout=2)
    assert order == ["writer", "reader"]


def test_unbalanced_release_raises() -> None:
    lock = ReadWriteLock()
    with pytest.raises(RuntimeError):
        lock.release_read()
    with pytest.raises(RuntimeError):
        lock.release_write()
