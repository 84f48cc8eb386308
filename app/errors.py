"""Error taxonomy for the manifest pipeline.

Each error maps to one user-visible notification.  The HTTP layer turns them
into a structured ``{"error": ..., "message": ...}`` detail via
:meth:`SiteAnalyzerError.to_detail`.
"""

from typing import Optional

import httpx


class SiteAnalyzerError(Exception):
    """Base class for every failure surfaced by the analyzer."""

    kind = "SiteAnalyzerError"
    status_code = 500

    def __init__(self, message: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def to_detail(self) -> dict:
        return {"error": self.kind, "message": self.message}


class InvalidUrl(SiteAnalyzerError):
    """User input could not be turned into a canonical manifest URL."""

    kind = "InvalidUrl"
    status_code = 400


class FetchError(SiteAnalyzerError):
    """Transport failure, non-success status, or an undecodable body."""

    kind = "FetchError"

    @property
    def status_code(self) -> int:  # type: ignore[override]
        if isinstance(self.cause, httpx.TimeoutException):
            return 504
        return 502


class SchemaError(SiteAnalyzerError):
    """Decoded JSON lacks the ``metadata`` or ``items`` key."""

    kind = "SchemaError"
    status_code = 502
