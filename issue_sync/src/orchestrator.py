"""
Sync Orchestrator Module
Coordinates the pipeline flow from Jira search to Dust upserts.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Any, List, Optional
from enum import Enum

from .api_client import DustAPIClient, JiraAPIClient
from .config import SyncConfig
from .errors import RateLimitExceededError
from .fetcher import IssueFetcher
from .formatter import build_document
from .models import Document, FetchResult
from .scheduler import RateLimitedScheduler
from .sink import DeliveryReport, DocumentSink

logger = logging.getLogger(__name__)


class PipelineStatus(Enum):
    """Pipeline execution status."""
    IDLE = "idle"
    FETCHING = "fetching"
    FORMATTING = "formatting"
    DELIVERING = "delivering"
    COMPLETED = "completed"
    FAILED = "failed"
    PARTIAL = "partial"


class PipelineMetrics:
    """Track pipeline execution metrics."""

    def __init__(self):
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.total_fetched = 0
        self.total_reported = 0
        self.pages_fetched = 0
        self.formatted = 0
        self.attempted = 0
        self.delivered = 0
        self.failed = 0
        self.failed_documents: List[str] = []
        self.fetch_error: Optional[str] = None
        self.error: Optional[str] = None
        self.status: PipelineStatus = PipelineStatus.IDLE

    def start(self):
        """Mark pipeline start."""
        self.start_time = datetime.now()
        self.status = PipelineStatus.FETCHING

    def complete(self, status: PipelineStatus = PipelineStatus.COMPLETED):
        """Mark pipeline completion."""
        self.end_time = datetime.now()
        self.status = status

    @property
    def duration(self) -> Optional[timedelta]:
        """Calculate pipeline duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return None

    def record_fetch(self, result: FetchResult):
        self.total_fetched = len(result.issues)
        self.total_reported = result.total
        self.pages_fetched = result.pages_fetched
        if result.error is not None:
            self.fetch_error = str(result.error)

    def record_delivery(self, report: DeliveryReport):
        self.attempted = report.attempted
        self.delivered = report.delivered
        self.failed = report.failed
        self.failed_documents = [outcome.document_id for outcome in report.failures]

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary."""
        return {
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'duration_seconds': self.duration.total_seconds() if self.duration else None,
            'status': self.status.value,
            'total_fetched': self.total_fetched,
            'total_reported': self.total_reported,
            'pages_fetched': self.pages_fetched,
            'total_formatted': self.formatted,
            'total_attempted': self.attempted,
            'total_delivered': self.delivered,
            'total_errors': self.failed + (1 if self.fetch_error else 0),
            'failed_documents': self.failed_documents,
            'fetch_error': self.fetch_error,
            'error': self.error,
        }


def resolve_status(fetch: FetchResult, report: Optional[DeliveryReport]) -> PipelineStatus:
    """
    Decide the terminal status of a run.

    Retry exhaustion on the Jira side, or a fetch that failed before any
    issue arrived, fails the run. Any other fetch fault or delivery failure
    makes it partial.
    """
    if fetch.error is not None:
        if isinstance(fetch.error, RateLimitExceededError) or not fetch.issues:
            return PipelineStatus.FAILED
        return PipelineStatus.PARTIAL
    if report is not None and report.failed:
        return PipelineStatus.PARTIAL
    return PipelineStatus.COMPLETED


class SyncOrchestrator:
    """
    Main orchestrator for the sync pipeline.
    Coordinates fetching, formatting and delivery of Jira issues.
    """

    def __init__(self, config: SyncConfig):
        """
        Initialize the Sync Orchestrator.

        Args:
            config: Validated Jira and Dust settings
        """
        self.config = config
        self.metrics = PipelineMetrics()

    async def fetch_issues(self, client: JiraAPIClient, jql: str) -> FetchResult:
        """Fetch every issue matching the query."""
        logger.info(f"Starting Jira fetch: {jql}")
        self.metrics.status = PipelineStatus.FETCHING
        fetcher = IssueFetcher(client, page_size=self.config.jira.page_size)
        result = await fetcher.fetch_issues(jql)
        self.metrics.record_fetch(result)
        return result

    def format_documents(self, result: FetchResult) -> List[Document]:
        """Render one document per fetched issue."""
        self.metrics.status = PipelineStatus.FORMATTING
        documents = [build_document(issue) for issue in result.issues]
        self.metrics.formatted = len(documents)
        return documents

    async def deliver_documents(self, client: DustAPIClient, documents: List[Document]) -> DeliveryReport:
        """Upsert documents through a scheduler built for this run."""
        self.metrics.status = PipelineStatus.DELIVERING
        dust = self.config.dust
        scheduler = RateLimitedScheduler(
            rate_limit=dust.rate_limit,
            period=dust.period,
            max_concurrent=dust.max_concurrent,
        )
        sink = DocumentSink(client, scheduler)
        report = await sink.deliver_all(documents)
        self.metrics.record_delivery(report)
        return report

    async def run_pipeline(self, jql: Optional[str] = None, dry_run: bool = False) -> Dict[str, Any]:
        """
        Run the complete sync pipeline.

        Args:
            jql: Query override (defaults to the configured query)
            dry_run: Format documents without delivering them

        Returns:
            Pipeline execution results; failures are reported, never raised
        """
        jql = jql or self.config.jira.query
        self.metrics = PipelineMetrics()
        self.metrics.start()

        try:
            async with JiraAPIClient(self.config.jira) as jira:
                fetch = await self.fetch_issues(jira, jql)
            logger.info(f"Found {len(fetch.issues)} issues matching the query.")

            if fetch.error is not None and not fetch.issues:
                logger.error(f"Fetch failed before any issue was retrieved: {fetch.error}")
                self.metrics.complete(PipelineStatus.FAILED)
                return self.metrics.to_dict()

            documents = self.format_documents(fetch)

            report = None
            if dry_run:
                logger.info(f"Dry run: skipping delivery of {len(documents)} documents")
            elif documents:
                async with DustAPIClient(self.config.dust) as dust:
                    report = await self.deliver_documents(dust, documents)

            self.metrics.complete(resolve_status(fetch, report))
            logger.info(f"Pipeline completed with status: {self.metrics.status.value}")
            logger.info(f"Duration: {self.metrics.duration}")
            return self.metrics.to_dict()

        except Exception as e:
            logger.exception(f"Pipeline failed with error: {e}")
            self.metrics.error = str(e)
            self.metrics.complete(PipelineStatus.FAILED)
            return self.metrics.to_dict()

    async def test_connections(self) -> Dict[str, Any]:
        """
        Check both APIs with one cheap request each.

        Returns:
            Dictionary with the Jira total for the configured query and the
            Dust data source description
        """
        async with JiraAPIClient(self.config.jira) as jira:
            page = await jira.search_issues(self.config.jira.query, max_results=1)
        async with DustAPIClient(self.config.dust) as dust:
            datasource = await dust.get_datasource()
        return {"jira_total": page.total, "dust_datasource": datasource}
