from .errors import DecodeError, EncodeError, NotFoundError, RosterError
from .models import Student, decode_student, encode_student, encode_students

__all__ = [
    "DecodeError",
    "EncodeError",
    "NotFoundError",
    "RosterError",
    "Student",
    "decode_student",
    "encode_student",
    "encode_students",
]
