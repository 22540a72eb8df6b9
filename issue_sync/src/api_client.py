"""
API Clients for Jira Cloud and Dust
===================================

This module provides the async HTTP clients used by the sync pipeline:

- JiraAPIClient: paginated issue search with rate-limit (429) retry
- DustAPIClient: idempotent document upserts into a Dust data source

Features:
- Async HTTP requests with aiohttp
- Retry-After aware backoff for Jira rate limits
- Request and error statistics
"""

import aiohttp
import asyncio
from typing import Dict, List, Optional, Any
import logging

from .config import DustConfig, JiraConfig
from .errors import RateLimitExceededError
from .models import SearchPage
from .retry_policy import RateLimitRetry, RetryPhase

logger = logging.getLogger(__name__)

SEARCH_FIELDS: List[str] = [
    "summary",
    "description",
    "issuetype",
    "status",
    "priority",
    "assignee",
    "reporter",
    "project",
    "created",
    "updated",
    "resolutiondate",
    "resolution",
    "labels",
    "components",
    "timeoriginalestimate",
    "timeestimate",
    "timespent",
    "votes",
    "watches",
    "fixVersions",
    "versions",
    "subtasks",
    "issuelinks",
    "attachment",
    "comment",
]


class JiraAPIClient:
    """
    Async client for the Jira Cloud REST API (v3).

    Only one search page is requested at a time; 429 responses are retried
    after the server-advised wait, up to config.max_retries times.
    """

    def __init__(self, config: JiraConfig):
        """
        Initialize the API client.

        Args:
            config: Jira connection settings
        """
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None
        self.request_count = 0
        self.error_count = 0
        self.rate_limited_count = 0

    async def __aenter__(self):
        """Async context manager entry"""
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        self.session = aiohttp.ClientSession(
            auth=aiohttp.BasicAuth(self.config.email, self.config.api_token),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        if self.session:
            await self.session.close()

    async def _post_with_retry(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST to a Jira endpoint, retrying while the server answers 429.

        Args:
            endpoint: Path relative to the REST API base URL
            payload: JSON body

        Returns:
            Decoded JSON response

        Raises:
            RateLimitExceededError: If still rate limited after all retries
            aiohttp.ClientResponseError: On any other HTTP error status
            aiohttp.ClientError, asyncio.TimeoutError: On transport failures
        """
        retry = RateLimitRetry(
            max_retries=self.config.max_retries,
            default_wait=self.config.default_retry_after,
        )

        url = f"{self.config.base_url}/{endpoint}"

        while True:
            logger.debug(f"Attempt {retry.attempt} for {endpoint}")
            async with self.session.post(url, json=payload) as response:
                self.request_count += 1

                if response.status == 429:
                    self.rate_limited_count += 1
                    retry.on_rate_limited(response.headers.get("Retry-After"))
                else:
                    if response.status >= 400:
                        self.error_count += 1
                    response.raise_for_status()
                    data = await response.json(content_type=None)
                    retry.on_success()
                    return data

            if retry.phase is RetryPhase.EXHAUSTED:
                self.error_count += 1
                logger.error(
                    f"Rate limit persisted after {retry.max_retries} retries for {endpoint}"
                )
                raise RateLimitExceededError(endpoint, retry.max_retries)

            logger.warning(f"Rate limited. Retrying after {retry.wait_seconds} seconds...")
            await asyncio.sleep(retry.wait_seconds)
            retry.on_wait_complete()

    async def search_issues(
        self,
        jql: str,
        start_at: int = 0,
        max_results: int = 50,
        fields: Optional[List[str]] = None
    ) -> SearchPage:
        """
        Fetch one page of issues matching a JQL query.

        Args:
            jql: JQL query expression
            start_at: Offset of the first issue in the page
            max_results: Page size
            fields: Issue fields to request (defaults to SEARCH_FIELDS)

        Returns:
            SearchPage with the issues and the server-reported total
        """
        payload = {
            "jql": jql,
            "startAt": start_at,
            "maxResults": max_results,
            "fields": fields or SEARCH_FIELDS,
            "expand": ["renderedFields"],
        }
        data = await self._post_with_retry("search", payload)
        return SearchPage.from_api(data, start_at=start_at, max_results=max_results)

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get client statistics.

        Returns:
            Dictionary with request, rate limit and error counts
        """
        return {
            "total_requests": self.request_count,
            "total_errors": self.error_count,
            "rate_limited": self.rate_limited_count,
            "success_rate": (
                (self.request_count - self.error_count - self.rate_limited_count)
                / self.request_count * 100
                if self.request_count > 0 else 0
            )
        }


class DustAPIClient:
    """Async client for a Dust data source."""

    def __init__(self, config: DustConfig):
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None
        self.request_count = 0
        self.error_count = 0

    async def __aenter__(self):
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        # Connection pool sized to the delivery concurrency cap
        connector = aiohttp.TCPConnector(limit=self.config.max_concurrent)
        self.session = aiohttp.ClientSession(
            headers={
                "Authorization": f"Bearer {self.config.api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            connector=connector,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()

    def document_url(self, document_id: str) -> str:
        return f"{self.config.base_url}{self.config.datasource_path}/documents/{document_id}"

    async def upsert_document(self, document_id: str, text: str) -> Dict[str, Any]:
        """
        Create or overwrite a document in the data source.

        Args:
            document_id: Stable document identifier
            text: Document body

        Returns:
            Decoded JSON response from Dust

        Raises:
            aiohttp.ClientError: If the request fails
        """
        async with self.session.post(self.document_url(document_id), json={"text": text}) as response:
            self.request_count += 1
            if response.status >= 400:
                self.error_count += 1
            response.raise_for_status()
            return await response.json(content_type=None)

    async def get_datasource(self) -> Dict[str, Any]:
        """Fetch the data source description (used as a connectivity check)."""
        url = f"{self.config.base_url}{self.config.datasource_path}"
        async with self.session.get(url) as response:
            self.request_count += 1
            response.raise_for_status()
            return await response.json(content_type=None)

    def get_statistics(self) -> Dict[str, int]:
        return {
            "total_requests": self.request_count,
            "total_errors": self.error_count,
        }
