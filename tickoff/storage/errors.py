"""Errors raised by task stores."""


class StorageError(Exception):
    """A task store could not read or write, or the row is not owned by the caller."""


class TaskValidationError(ValueError):
    """Malformed task input, e.g. a blank title."""
