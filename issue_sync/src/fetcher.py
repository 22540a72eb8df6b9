"""
Issue Fetcher Module
Responsible for paging through a Jira search and accumulating the issues.
"""

import asyncio
from typing import List, Optional
import logging

import aiohttp

from .api_client import JiraAPIClient
from .errors import FetchError, RateLimitExceededError
from .models import FetchResult, JiraIssue

logger = logging.getLogger(__name__)


class IssueFetcher:
    """
    Fetches every issue matching a JQL query, one page at a time.

    Pages are requested strictly in increasing offset order. A failure stops
    the loop and the issues gathered so far are returned with the error;
    nothing is raised to the caller.
    """

    def __init__(self, client: JiraAPIClient, page_size: int = 50):
        """
        Initialize the IssueFetcher.

        Args:
            client: Open Jira API client
            page_size: Number of issues requested per page
        """
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.client = client
        self.page_size = page_size

    async def fetch_issues(self, jql: str) -> FetchResult:
        """
        Fetch all issues matching a query.

        Args:
            jql: JQL query expression

        Returns:
            FetchResult with the accumulated issues and, if the fetch stopped
            early, the error that stopped it
        """
        issues: List[JiraIssue] = []
        start_at = 0
        total = 0
        pages = 0
        error: Optional[Exception] = None

        while True:
            try:
                page = await self.client.search_issues(
                    jql, start_at=start_at, max_results=self.page_size
                )
            except RateLimitExceededError as e:
                logger.error(f"Error fetching Jira issues: {e}")
                error = e
                break
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError,
                    KeyError, TypeError, AttributeError) as e:
                # Lookup/type errors come from a malformed page body
                self._log_fetch_error(e)
                error = FetchError(start_at, e)
                break

            pages += 1
            issues.extend(page.issues)
            # The result set can change between pages; trust the latest total
            total = page.total
            # Jira may clamp maxResults below the requested page size
            start_at += len(page.issues)

            logger.info(f"Retrieved {len(issues)} of {total} issues")

            if len(issues) >= total:
                break
            if not page.issues:
                logger.warning(
                    f"Empty page at offset {page.start_at} with {total - len(issues)} "
                    f"issues outstanding, stopping"
                )
                break

        logger.info(f"Final total: {len(issues)} issues retrieved")
        return FetchResult(issues=issues, error=error, total=total, pages_fetched=pages)

    @staticmethod
    def _log_fetch_error(error: Exception) -> None:
        logger.error("Error fetching Jira issues:")
        if isinstance(error, aiohttp.ClientResponseError):
            logger.error(f"Status: {error.status}")
            logger.error(f"Message: {error.message}")
        else:
            logger.error(f"{type(error).__name__}: {error}")
