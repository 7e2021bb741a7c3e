"""Exceptions raised by the ledger services."""


class ValidationFailure(ValueError):
    """Input that the ledger refuses to accept (bad range, period, slot width, record)."""


class StorageError(Exception):
    """Local persistence could not be read or written."""


class RemoteStoreError(Exception):
    """The remote store rejected a request or could not be reached."""
