from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping

from .errors import DecodeError, EncodeError


JsonDict = Dict[str, Any]

_FIELDS = ("id", "name", "age")

INT_MIN = -(2**63)
INT_MAX = 2**63 - 1

_SURROGATES = re.compile("[\ud800-\udfff]")
_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}
_HTML_UNSAFE = re.compile("[<>&\u2028\u2029]")


class _Pairs(list):
    """Key/value pairs of a JSON object in document order."""


@dataclass(frozen=True, slots=True)
class Student:
    id: int = 0
    name: str = ""
    age: int = 0

    @property
    def key(self) -> str:
        """Store key for this record: the decimal form of ``id``."""
        return str(self.id)

    def to_dict(self) -> JsonDict:
        return {"id": self.id, "name": self.name, "age": self.age}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Student":
        return cls.from_pairs(list(data.items()))

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, Any]]) -> "Student":
        """
        Build a student from the members of a decoded JSON object.

        Keys match field names case-insensitively and a later member
        overwrites an earlier one. Unknown keys are ignored; missing or null
        fields keep their zero value.
        """
        values: JsonDict = {}
        for key, raw in pairs:
            name = str(key).lower()
            if name not in _FIELDS or raw is None:
                continue
            values[name] = _coerce(name, raw)
        return cls(**values)


def _coerce(name: str, raw: Any) -> Any:
    if name == "name":
        if not isinstance(raw, str):
            raise DecodeError(f"field {name!r} must be a string")
        return _SURROGATES.sub("\ufffd", raw)
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise DecodeError(f"field {name!r} must be an integer")
    if not INT_MIN <= raw <= INT_MAX:
        raise DecodeError(f"field {name!r} is out of range")
    return raw


def decode_student(body: bytes) -> Student:
    """Decode the first JSON value in ``body`` into a :class:`Student`.

    Invalid UTF-8 becomes U+FFFD, so it only fails where JSON syntax does.
    Anything after the first complete value is ignored. ``null`` yields the
    zero record.
    """
    text = body.decode("utf-8", "replace").lstrip(" \t\r\n")
    decoder = json.JSONDecoder(object_pairs_hook=_Pairs)
    try:
        value, _ = decoder.raw_decode(text)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"invalid JSON body: {exc.msg}") from exc
    if value is None:
        return Student()
    if not isinstance(value, _Pairs):
        raise DecodeError("student must be a JSON object")
    return Student.from_pairs(value)


def encode(payload: Any) -> bytes:
    try:
        text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        # Escaped characters only ever appear inside string literals of this output.
        return _HTML_UNSAFE.sub(lambda m: _HTML_ESCAPES[m.group()], text).encode()
    except (TypeError, ValueError) as exc:
        raise EncodeError(str(exc)) from exc


def encode_student(student: Student) -> bytes:
    return encode(student.to_dict())


def encode_students(students: Iterable[Student]) -> bytes:
    return encode([s.to_dict() for s in students])
