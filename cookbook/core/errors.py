"""
Error Types
Every failure the cookbook core can surface to a caller
"""

from typing import Optional


class CookbookError(Exception):
    """Base exception for cookbook errors"""
    pass


class EmptyInputError(CookbookError):
    """Raised when required input is blank, before any external call"""
    pass


class NotAuthenticatedError(CookbookError):
    """Raised when no owner identity is available, before any storage call"""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class UpstreamError(CookbookError):
    """Raised when the text-generation or OCR service fails"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class OverloadedError(UpstreamError):
    """Raised when the text-generation service reports a transient overload"""
    pass


class MalformedResponseError(CookbookError):
    """
    Raised when the generator answered but its output could not be read.

    `raw_payload` keeps the untouched generator output. `stage` tells which
    extraction step rejected it: "fenced" (a fenced block was found but did
    not parse), "raw" (no fence, whole payload did not parse) or "shape"
    (valid JSON of the wrong shape).
    """

    def __init__(self, message: str, raw_payload: str = "", stage: str = "raw"):
        super().__init__(message)
        self.raw_payload = raw_payload
        self.stage = stage


class PersistenceError(CookbookError):
    """Raised when the storage backend rejects a read or write"""
    pass
