# sensordrone/transport/errors.py
from __future__ import annotations


class TransportError(Exception):
    """Base class for byte-stream transport failures."""


class TransportOpenError(TransportError):
    """The stream could not be opened."""


class TransportIOError(TransportError):
    """A read, write or flush on an open stream failed."""
