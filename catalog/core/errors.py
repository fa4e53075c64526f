"""
Error taxonomy for the data-access layer.

Query builders and repositories raise these and let them propagate;
services are the only layer that catches them and converts them into a
ServiceResponse.
"""


class DataAccessError(Exception):
    """Base class for every error raised by the data-access layer."""


class ConfigurationMissingError(DataAccessError):
    """No connection string was available when a factory was initialized."""


class ContextUnavailableError(DataAccessError):
    """A query was issued against a storage context that is disposed or missing."""


class ContextDisposedError(DataAccessError):
    """A service factory was accessed after it was disposed."""


class InvalidArgumentError(DataAccessError, ValueError):
    """A caller supplied an argument that is rejected before touching the store."""


class StorageFailureError(DataAccessError):
    """
    A round-trip to the store failed.

    The driver error is chained as ``__cause__``. The message itself is kept
    free of driver details so it can be shown to API clients.
    """

    def __init__(self, message: str = "Storage round-trip failed", operation: str | None = None):
        super().__init__(message)
        self.operation = operation
