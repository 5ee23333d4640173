from __future__ import annotations

import threading

from roster.adapters.memory_repo import (
    SEED_KEY,
    SEED_STUDENT,
    InMemoryStudentRepository,
    build_repository,
)
from roster.domain.models import Student


def test_put_stores_under_decimal_id() -> None:
    repo = InMemoryStudentRepository()
    repo.put(Student(42, "alice", 30))
    assert repo.get("42") == Student(42, "alice", 30)
    assert repo.get("042") is None


def test_put_overwrites_equal_ids() -> None:
    repo = InMemoryStudentRepository()
    repo.put(Student(7, "a", 1))
    repo.put(Student(7, "b", 2))
    assert repo.get("7") == Student(7, "b", 2)
    assert len(repo) == 1


def test_seeded_entry_is_listed_but_not_fetchable_by_id() -> None:
    repo = build_repository()
    assert repo.get("1") is None
    assert repo.get(SEED_KEY) == SEED_STUDENT
    assert repo.list() == [Student(1, "bob", 21)]


def test_unseeded_repository_starts_empty() -> None:
    repo = build_repository(seed=False)
    assert repo.list() == []


def test_list_returns_a_snapshot() -> None:
    repo = InMemoryStudentRepository()
    repo.put(Student(1, "a", 1))
    snapshot = repo.list()
    repo.put(Student(2, "b", 2))
    assert snapshot == [Student(1, "a", 1)]
    assert len(repo.list()) == 2


def test_initial_mapping_is_copied() -> None:
    initial = {"x": Student(1, "a", 1)}
    repo = InMemoryStudentRepository(initial)
    repo.put(Student(2, "b", 2))
    assert list(initial) == ["x"]


def test_concurrent_writers_and_readers_never_see_torn_records() -> None:
    repo = InMemoryStudentRepository()
    repo.put(Student(5, "v0", 0))
    errors: list[Student] = []
    stop = threading.Event()

    def writer(worker: int) -> None:
        for i in range(1, 300):
            repo.put(Student(5, f"v{i}", i))
        repo.put(Student(100 + worker, "done", worker))

    def reader() -> None:
        while not stop.is_set():
            student = repo.get("5")
            if student is None or student.name != f"v{student.age}":
                errors.append(student)

    readers = [threading.Thread(target=reader) for _ in range(4)]
    writers = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    for t in readers + writers:
        t.start()
    for t in writers:
        t.join(timeout=10)
    stop.set()
    for t in readers:
        t.join(timeout=10)

    assert errors == []
    assert {repo.get(str(100 + n)).age for n in range(4)} == {0, 1, 2, 3}
