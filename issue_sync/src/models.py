"""
Pipeline Data Models
Records fetched from Jira, search pages, rendered documents and delivery outcomes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DOCUMENT_ID_PREFIX = "issue-"


def document_id_for(issue_key: str) -> str:
    """Derive the Dust document identifier from a Jira issue key."""
    return f"{DOCUMENT_ID_PREFIX}{issue_key}"


@dataclass(frozen=True)
class JiraIssue:
    """One Jira issue as returned by the search endpoint."""
    key: str
    id: str = ""
    self_url: str = ""
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "JiraIssue":
        return cls(
            key=payload["key"],
            id=str(payload.get("id", "")),
            self_url=payload.get("self", ""),
            fields=payload.get("fields") or {},
        )

    @property
    def document_id(self) -> str:
        return document_id_for(self.key)


@dataclass
class SearchPage:
    """One window of a Jira search result."""
    start_at: int
    max_results: int
    issues: List[JiraIssue]
    total: int

    @classmethod
    def from_api(cls, payload: Dict[str, Any], start_at: int, max_results: int) -> "SearchPage":
        """
        Build a page from a search response body.

        Args:
            payload: Decoded JSON body of the search response
            start_at: Offset that was requested
            max_results: Page size that was requested

        Returns:
            SearchPage with parsed issues and the server-reported total
        """
        issues = [JiraIssue.from_api(item) for item in payload.get("issues") or []]
        return cls(
            start_at=payload.get("startAt", start_at),
            max_results=payload.get("maxResults", max_results),
            issues=issues,
            total=int(payload.get("total") or 0),
        )


@dataclass(frozen=True)
class Document:
    """Text payload bound for the Dust data source."""
    document_id: str
    text: str
    issue_key: str = ""


@dataclass
class DeliveryOutcome:
    """Result of one delivery task."""
    document_id: str
    success: bool
    error: Optional[Exception] = None


@dataclass
class FetchResult:
    """Issues retrieved by one fetch, plus the error that stopped it, if any."""
    issues: List[JiraIssue]
    error: Optional[Exception] = None
    total: int = 0
    pages_fetched: int = 0

    @property
    def complete(self) -> bool:
        return self.error is None
