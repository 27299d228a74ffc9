class StoreError(Exception):
    """A read or write against the document store failed."""


class StorePermissionDenied(StoreError):
    """The store rejected the request under its access policy."""


class DocumentNotFound(StoreError):
    pass
