"""Exception hierarchy shared across the scanner."""

from __future__ import annotations


class LssError(Exception):
    """Base class for all lss errors."""


class IoError(LssError, OSError):
    """A path the user asked for explicitly is missing or unreadable.

    Fatal to the invocation: raised before any scanning starts.
    """
