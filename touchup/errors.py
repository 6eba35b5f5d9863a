"""Errors raised while loading, rendering, or editing a document.

Every error carries one human-readable message that the caller can show as-is.
None of them is fatal: the user retries by repeating the triggering action.
"""


class TouchupError(Exception):
    """Base class for all editor errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class LoadError(TouchupError):
    """The document bytes could not be opened as a PDF."""


class SourceError(TouchupError):
    """The handle to the document is unusable (missing or empty)."""


class NoPendingEditError(TouchupError):
    """Apply was requested without an anchor on the displayed page."""


class ApplyError(TouchupError):
    """Drawing the edit or serialising the result failed."""


class PageIndexOutOfRange(ApplyError):
    def __init__(self, page_index: int, page_count: int):
        super().__init__(
            f"Page {page_index + 1} does not exist (document has {page_count} page(s))."
        )
        self.page_index = page_index
        self.page_count = page_count
