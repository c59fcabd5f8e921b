from __future__ import annotations


class JournalError(Exception):
    """Base class for errors raised by the journal core."""


class ValidationError(JournalError):
    """A save was refused because a required field is missing or invalid."""


class EntryNotFoundError(JournalError):
    pass


class InvalidTransitionError(JournalError):
    """The entry is not in a status that allows the requested reconciliation."""


class ImportFormatError(JournalError):
    pass


class KeyDecodeError(JournalError):
    pass
