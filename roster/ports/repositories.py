from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from ..domain.models import Student


class StudentRepository(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[Student]:
        ...

    @abstractmethod
    def put(self, student: Student) -> None:
        ...

    @abstractmethod
    def list(self) -> List[Student]:
        ...
