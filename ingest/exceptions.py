class IngestError(Exception):
    """
    Base class for failures raised while ingesting a category, chapter or page.

    Callers should include a concise human-readable reason in the exception
    message; the orchestrator logs it verbatim.
    """

    pass


class DiscoveryError(IngestError):
    """
    Raised when listing the catalog, a category's chapters or a chapter's
    pages fails.
    """

    pass


class SiteUnavailable(IngestError):
    """
    Raised when the source answers with its generic "404 Not Found" page
    instead of the requested document.
    """

    pass


class NotFound(IngestError):
    """
    Raised when a fetched document lacks the element the pipeline needs.
    """

    pass


class DownloadError(IngestError):
    """
    Raised when an image cannot be downloaded or has an unsupported type.
    """

    pass


class DecodeError(IngestError):
    """
    Raised when downloaded bytes cannot be decoded or re-encoded as an image.
    """

    pass


class PersistenceError(IngestError):
    """
    Raised when writing a chapter, its pages or a category to the database
    fails.
    """

    pass


class InvalidChapterNumber(IngestError):
    """
    Raised when a chapter name does not end in a number once the category
    name has been removed from it.
    """

    pass
