"""
Error taxonomy for the wiki.

Every error a handler can raise derives from WikiError and carries the HTTP
status and the generic message shown to the client. Details for the server
log stay in the exception itself.
"""


class WikiError(Exception):
    status_code = 500
    public_message = "Internal Server Error"


class InvalidName(WikiError):
    status_code = 400
    public_message = "Invalid document name"


class NotFound(WikiError):
    status_code = 404
    public_message = "Document not found"


class DocumentExists(WikiError):
    status_code = 409
    public_message = "Document already exists"


class StoreError(WikiError):
    """A document could not be read, written or removed."""


class StoreUnavailable(StoreError):
    """The backing directory could not be enumerated."""


class RenderFailure(WikiError):
    pass


class IndexBusy(WikiError):
    status_code = 503
    public_message = "Page index is busy, try again"


class StartupFailure(Exception):
    """Fatal configuration or bind problem; the process must not serve."""
