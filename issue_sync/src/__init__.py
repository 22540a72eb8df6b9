"""
Issue Sync Pipeline
===================

This module contains the ETL (Extract, Transform, Load) pipeline that copies
recently updated Jira issues into a Dust data source. It searches Jira page by
page, renders each issue as a plain-text document and upserts the documents
into Dust under a requests-per-minute ceiling.

Main components:
- config: Settings loaded from the environment / .env
- api_client: Async Jira and Dust clients with rate-limit retry
- fetcher: Paginated issue retrieval
- formatter: Issue to document rendering
- scheduler: Rate and concurrency limits for deliveries
- sink: Per-document delivery with failure isolation
- orchestrator: Main pipeline orchestration
"""

__version__ = "0.1.0"
__author__ = "Issue Sync Development Team"
