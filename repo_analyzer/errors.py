"""
Error taxonomy for repository analysis.

Skip-pattern exclusions, oversized files, and depth truncation are not errors
and have no exception type here.
"""

from typing import Optional


class AnalysisError(Exception):
    """Base class for analysis errors."""


class InvalidAddress(ValueError, AnalysisError):
    """Source address has no owner/repository path."""

    def __init__(self, address: str):
        super().__init__(f"Invalid GitHub URL: {address!r}")
        self.address = address


class FetchError(AnalysisError):
    """Upstream listing or content fetch failed."""

    def __init__(self, message: str, path: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.path = path
        self.status_code = status_code


class RepositoryNotFound(FetchError):
    """Upstream reported 404 for the requested path."""


class RateLimitExceeded(FetchError):
    """Upstream refused the request because of rate limiting."""


class AnalysisCancelled(AnalysisError):
    """Crawl stopped because the caller requested cancellation."""

    def __init__(self, message: str = "Analysis cancelled by user"):
        super().__init__(message)


class SummaryError(AnalysisError):
    """File summarization could not be produced."""
