from __future__ import annotations

from typing import Dict, List, Mapping, Optional

from ..domain.models import Student
from ..ports.repositories import StudentRepository
from .rwlock import ReadWriteLock


SEED_KEY = "Data"
SEED_STUDENT = Student(id=1, name="bob", age=21)


class InMemoryStudentRepository(StudentRepository):
    """Process-local student store keyed by the decimal form of ``id``."""

    def __init__(self, initial: Optional[Mapping[str, Student]] = None) -> None:
        self._students: Dict[str, Student] = dict(initial or {})
        self._lock = ReadWriteLock()

    def get(self, key: str) -> Optional[Student]:
        with self._lock.read_locked():
            return self._students.get(key)

    def put(self, student: Student) -> None:
        with self._lock.write_locked():
            self._students[student.key] = student

    def list(self) -> List[Student]:
        with self._lock.read_locked():
            return list(self._students.values())

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._students)


def build_repository(seed: bool = True) -> InMemoryStudentRepository:
    """Create the store used at startup, optionally with the seeded entry.

    The seeded record is stored under ``SEED_KEY`` rather than its id, so it
    is listed but cannot be fetched by id.
    """
    initial = {SEED_KEY: SEED_STUDENT} if seed else None
    return InMemoryStudentRepository(initial)
