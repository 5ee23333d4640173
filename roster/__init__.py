"""In-memory student registry served over HTTP."""

__version__ = "0.1.0"
