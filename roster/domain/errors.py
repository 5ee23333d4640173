from __future__ import annotations


class RosterError(Exception):
    """Base class for errors raised by the roster domain."""


class NotFoundError(RosterError):
    pass


class DecodeError(RosterError):
    """The request body is not a valid student record."""


class EncodeError(RosterError):
    """A record could not be serialized for the response."""
