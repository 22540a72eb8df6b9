#!/usr/bin/env python3
"""
Issue Sync CLI
Command-line interface for running the Jira to Dust sync pipeline.
"""

import asyncio
import argparse
import sys
import logging
from typing import Optional

from issue_sync.src.config import load_config
from issue_sync.src.errors import ConfigurationError
from issue_sync.src.orchestrator import SyncOrchestrator


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


async def run_sync(args):
    """Run the sync for the configured (or overridden) query."""
    config = load_config()
    if args.page_size:
        config.jira.page_size = args.page_size

    jql = args.jql or config.jira.query
    print(f"Running sync for query: {jql}")

    orchestrator = SyncOrchestrator(config)
    results = await orchestrator.run_pipeline(jql=jql, dry_run=args.dry_run)

    print_results(results)
    return 0 if results['status'] in ['completed', 'partial'] else 1


async def test_connection(args):
    """Test Jira and Dust connections."""
    print("Testing connections...")
    config = load_config()
    orchestrator = SyncOrchestrator(config)

    try:
        result = await orchestrator.test_connections()
    except Exception as e:
        print(f"✗ Connection test failed: {e}")
        return 1

    print(f"✓ Jira connection successful. Query matches {result['jira_total']} issues.")
    print("✓ Dust connection successful.")
    return 0


def print_results(results):
    """Print pipeline results."""
    print("\n" + "="*50)
    print("Sync Results")
    print("="*50)

    print(f"Status: {results['status']}")

    if results['duration_seconds']:
        duration = results['duration_seconds']
        if duration < 60:
            print(f"Duration: {duration:.2f} seconds")
        else:
            minutes = int(duration // 60)
            seconds = duration % 60
            print(f"Duration: {minutes}m {seconds:.0f}s")

    print(f"\nIssues Fetched: {results['total_fetched']} of {results['total_reported']}")
    print(f"Documents Formatted: {results['total_formatted']}")
    print(f"Deliveries Attempted: {results['total_attempted']}")
    print(f"Deliveries Succeeded: {results['total_delivered']}")

    if results['fetch_error']:
        print(f"\nFetch stopped early: {results['fetch_error']}")
    if results['error']:
        print(f"\nError: {results['error']}")

    if results['failed_documents']:
        print(f"\nFailed deliveries: {len(results['failed_documents'])}")
        for document_id in results['failed_documents']:
            print(f"  - {document_id}")
    elif results['status'] == 'completed' and results['total_attempted']:
        print("\nAll issues processed successfully.")

    print("="*50)


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Jira to Dust sync CLI',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Sync issues updated in the last 24 hours
  issue-sync run

  # Sync a custom query
  issue-sync run --jql "project = ENG AND updated >= -7d"

  # Render documents without writing to Dust
  issue-sync run --dry-run

  # Test connections
  issue-sync test
        """
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--log-file',
        help='Also write logs to this file'
    )

    subparsers = parser.add_subparsers(
        dest='command',
        help='Command to run'
    )

    parser_run = subparsers.add_parser(
        'run',
        help='Fetch, format and upsert issues'
    )
    parser_run.add_argument(
        '--jql',
        help='JQL query (overrides JIRA_QUERY)'
    )
    parser_run.add_argument(
        '--page-size',
        type=int,
        help='Issues requested per Jira search page'
    )
    parser_run.add_argument(
        '--dry-run',
        action='store_true',
        help='Format documents but do not upsert them'
    )
    parser_run.set_defaults(func=run_sync)

    parser_test = subparsers.add_parser(
        'test',
        help='Test Jira and Dust connections'
    )
    parser_test.set_defaults(func=test_connection)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.verbose, args.log_file)

    try:
        return asyncio.run(args.func(args))
    except ConfigurationError as e:
        print(f"\nConfiguration error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n\nSync interrupted by user.")
        return 130
    except Exception as e:
        print(f"\nError: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
