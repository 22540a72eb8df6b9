"""
Document Sink Module
Delivers rendered documents to the Dust data source through the rate-limited
scheduler. Each document is sent once; a failed upsert is logged and reported
without affecting any other delivery.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from .api_client import DustAPIClient
from .errors import DeliveryError
from .models import DeliveryOutcome, Document
from .scheduler import RateLimitedScheduler

logger = logging.getLogger(__name__)


@dataclass
class DeliveryReport:
    """Outcomes of one delivery batch."""
    outcomes: List[DeliveryOutcome] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def delivered(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failed(self) -> int:
        return self.attempted - self.delivered

    @property
    def failures(self) -> List[DeliveryOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]


class DocumentSink:
    """Upserts documents into Dust under the scheduler's limits."""

    def __init__(self, client: DustAPIClient, scheduler: RateLimitedScheduler):
        self.client = client
        self.scheduler = scheduler

    async def deliver(self, document: Document) -> None:
        """
        Upsert one document.

        Raises:
            DeliveryError: If the upsert fails for any reason
        """
        label = document.issue_key or document.document_id
        try:
            await self.client.upsert_document(document.document_id, document.text)
        except Exception as e:
            logger.error(f"Error upserting issue {label} ({document.document_id}) to Dust datasource: {e}")
            raise DeliveryError(document.document_id, e) from e
        logger.info(f"Upserted issue {label} to Dust datasource")

    async def deliver_all(self, documents: Iterable[Document]) -> DeliveryReport:
        """
        Deliver every document and wait until all deliveries have resolved.

        Args:
            documents: Documents to upsert

        Returns:
            DeliveryReport with one outcome per document, in input order
        """
        documents = list(documents)
        tasks = [
            self.scheduler.submit(lambda document=document: self.deliver(document))
            for document in documents
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        report = DeliveryReport()
        for document, result in zip(documents, results):
            if isinstance(result, BaseException):
                report.outcomes.append(
                    DeliveryOutcome(document.document_id, success=False, error=result)
                )
            else:
                report.outcomes.append(DeliveryOutcome(document.document_id, success=True))

        logger.info(
            f"Delivery finished: {report.delivered} delivered, {report.failed} failed "
            f"out of {report.attempted}"
        )
        return report
