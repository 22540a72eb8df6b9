"""
Shared fixtures for the issue sync tests.
"""

from unittest.mock import MagicMock

import aiohttp
import pytest

from issue_sync.src.config import DustConfig, JiraConfig, SyncConfig
from issue_sync.src.models import JiraIssue, SearchPage


class FakeResponse:
    """Minimal stand-in for an aiohttp response used as a context manager."""

    def __init__(self, status=200, payload=None, headers=None):
        self.status = status
        self._payload = payload if payload is not None else {}
        self.headers = headers or {}

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def json(self, content_type="application/json"):
        return self._payload

    def raise_for_status(self):
        if self.status >= 400:
            raise aiohttp.ClientResponseError(
                request_info=MagicMock(real_url="https://example.test"),
                history=(),
                status=self.status,
                message="error",
            )


class FakeSession:
    """Replays queued responses (or raises queued exceptions) in order."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def _next(self, method, url, json=None):
        self.calls.append((method, url, json))
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url, json=None):
        return self._next("POST", url, json)

    def get(self, url):
        return self._next("GET", url)

    async def close(self):
        pass


def adf(*paragraphs):
    """Build a minimal ADF document with one paragraph per string."""
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {"type": "paragraph", "content": [{"type": "text", "text": text}]}
            for text in paragraphs
        ],
    }


def make_issues(start, count, prefix="PROJ"):
    return [JiraIssue(key=f"{prefix}-{i}", id=str(10000 + i)) for i in range(start, start + count)]


def paged_search(total, issues_per_page=None):
    """
    Build an async search_issues side effect serving `total` issues.

    Args:
        total: Server-reported total
        issues_per_page: Override of the number of issues per page
    """
    async def search_issues(jql, start_at=0, max_results=50, fields=None):
        size = issues_per_page or max_results
        count = max(0, min(size, total - start_at))
        return SearchPage(
            start_at=start_at,
            max_results=max_results,
            issues=make_issues(start_at, count),
            total=total,
        )
    return search_issues


@pytest.fixture
def jira_config():
    return JiraConfig(
        subdomain="acme",
        email="bot@acme.test",
        api_token="jira-token",
        page_size=2,
    )


@pytest.fixture
def dust_config():
    return DustConfig(
        api_key="dust-key",
        workspace_id="ws1",
        vault_id="vault1",
        datasource_id="ds1",
        rate_limit=1000,
        period=1.0,
        max_concurrent=10,
    )


@pytest.fixture
def sync_config(jira_config, dust_config):
    return SyncConfig(jira=jira_config, dust=dust_config)


@pytest.fixture
def full_issue_payload():
    """Search entry with every field populated."""
    return {
        "id": "10042",
        "key": "PROJ-42",
        "self": "https://acme.atlassian.net/rest/api/3/issue/10042",
        "fields": {
            "summary": "Login page times out",
            "description": adf("Users cannot log in.", "Happens after 30s."),
            "issuetype": {"name": "Bug"},
            "status": {"name": "In Progress"},
            "priority": {"name": "High"},
            "assignee": {"displayName": "Alice", "emailAddress": "alice@acme.test"},
            "reporter": {"displayName": "Bob", "emailAddress": "bob@acme.test"},
            "project": {"key": "PROJ", "name": "Project"},
            "created": "2024-01-01T09:00:00.000+0000",
            "updated": "2024-01-02T09:00:00.000+0000",
            "resolutiondate": "2024-01-03T09:00:00.000+0000",
            "resolution": {"name": "Fixed"},
            "labels": ["auth", "frontend"],
            "components": [{"name": "Web"}, {"name": "API"}],
            "sprint": {"name": "Sprint 7"},
            "epic": {"name": "Auth revamp"},
            "timeoriginalestimate": 7200,
            "timeestimate": 3600,
            "timespent": 1800,
            "votes": {"votes": 3},
            "watches": {"watchCount": 5},
            "fixVersions": [{"name": "1.2.0"}],
            "versions": [{"name": "1.1.0"}, {"name": "1.1.1"}],
            "subtasks": [
                {"key": "PROJ-43", "fields": {"summary": "Add timeout metric"}},
            ],
            "issuelinks": [
                {
                    "type": {"name": "Blocks", "inward": "is blocked by", "outward": "blocks"},
                    "outwardIssue": {"key": "PROJ-50", "fields": {"summary": "Release 1.2"}},
                },
                {
                    "type": {"name": "Relates", "inward": "relates to", "outward": "relates to"},
                    "inwardIssue": {"key": "OPS-7", "fields": {"summary": "LB config"}},
                },
            ],
            "attachment": [
                {"filename": "trace.har", "content": "https://acme.test/a/1"},
                {"filename": "screen.png", "content": "https://acme.test/a/2"},
            ],
            "comment": {
                "comments": [
                    {
                        "author": {"displayName": "Carol", "emailAddress": "carol@acme.test"},
                        "created": "2024-01-02T10:00:00.000+0000",
                        "body": adf("Reproduced on staging."),
                    },
                    {
                        "author": {"displayName": "Alice", "emailAddress": "alice@acme.test"},
                        "created": "2024-01-02T11:00:00.000+0000",
                        "body": adf("Fix in review.", "ETA tomorrow."),
                    },
                ]
            },
        },
    }


@pytest.fixture
def full_issue(full_issue_payload):
    return JiraIssue.from_api(full_issue_payload)


@pytest.fixture
def sparse_issue():
    """Issue whose optional fields are all null or empty."""
    return JiraIssue.from_api({
        "id": "1",
        "key": "PROJ-1",
        "self": "https://acme.atlassian.net/rest/api/3/issue/1",
        "fields": {
            "summary": "Empty",
            "description": None,
            "issuetype": None,
            "status": None,
            "priority": None,
            "assignee": None,
            "reporter": None,
            "project": None,
            "created": None,
            "updated": None,
            "resolutiondate": None,
            "resolution": None,
            "labels": [],
            "components": [],
            "sprint": None,
            "epic": None,
            "timeoriginalestimate": None,
            "timeestimate": None,
            "timespent": None,
            "votes": None,
            "watches": None,
            "fixVersions": [],
            "versions": [],
            "subtasks": [],
            "issuelinks": [],
            "attachment": [],
            "comment": {"comments": []},
        },
    })


@pytest.fixture
def response_factory():
    return FakeResponse


@pytest.fixture
def session_factory():
    return FakeSession


@pytest.fixture
def search_factory():
    return paged_search


@pytest.fixture
def adf_factory():
    return adf
