"""
Error Types
Exception hierarchy for the issue sync pipeline.
"""

from typing import List, Optional


class SyncError(Exception):
    """Base exception for all issue sync errors."""
    pass


class ConfigurationError(SyncError):
    """Raised before any network call when settings are missing or malformed."""

    def __init__(self, missing: List[str], message: Optional[str] = None):
        if message is None:
            message = (
                "Please provide values for the following environment variables: "
                + ", ".join(missing)
            )
        super().__init__(message)
        self.missing = missing


class RateLimitExceededError(SyncError):
    """Raised when a request is still rate limited after all retries."""

    def __init__(self, endpoint: str, retries: int):
        super().__init__(
            f"Rate limit persisted on {endpoint} after {retries} retries, giving up"
        )
        self.endpoint = endpoint
        self.retries = retries


class FetchError(SyncError):
    """Raised (or returned) when a page request fails without a retry."""

    def __init__(self, start_at: int, cause: Exception):
        super().__init__(f"Error fetching Jira issues at offset {start_at}: {cause}")
        self.start_at = start_at
        self.cause = cause


class DeliveryError(SyncError):
    """Raised when one document could not be upserted."""

    def __init__(self, document_id: str, cause: Optional[Exception] = None):
        message = f"Error upserting {document_id} to Dust datasource"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.document_id = document_id
        self.cause = cause
