"""Storage-level error types.

These are distinct from domain errors: they signal that the store itself
refused or failed an operation.
"""


class StorageError(Exception):
    """Base class for storage failures."""


class ConstraintViolationError(StorageError):
    """A write violated a uniqueness or referential constraint."""


class StorageUnavailableError(StorageError):
    """The store could not be reached or the statement could not run."""
