"""Exceptions raised by collaborator adapters."""


class StoreError(Exception):
    """The document store rejected or failed an operation.

    Adapters wrap driver-specific errors (SQLAlchemy, network) in this type so
    services never depend on a particular backend.
    """
    pass


class ImageStoreError(Exception):
    """The image host failed an upload or delete."""
    pass
