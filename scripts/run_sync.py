#!/usr/bin/env python
"""
Run Sync Script
Command-line script for running one end-to-end Fivetran sync against public database addresses.
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fivetran_runner.api_client import FivetranClient
from fivetran_runner.config_manager import ConfigManager
from fivetran_runner.orchestrator import RunSettings, SyncRunOrchestrator
from fivetran_runner.resources import ResourceManager
from fivetran_runner.sweeper import RetentionSweeper
from fivetran_runner.utils.helpers import parse_service_address
from fivetran_runner.utils.logger import setup_logging, get_logger


def main():
    """Main entry point for the sync script."""
    parser = argparse.ArgumentParser(description='Run a Fivetran end-to-end sync')
    parser.add_argument(
        '--source-address',
        help='Public host:port of the source database (default: endpoints.source)'
    )
    parser.add_argument(
        '--destination-address',
        help='Public host:port of the destination warehouse (default: endpoints.destination)'
    )
    parser.add_argument(
        '--skip-cleanup-old',
        action='store_true',
        help='Do not remove resources left behind by earlier runs'
    )
    parser.add_argument(
        '--keep',
        action='store_true',
        help='Leave the created group, destination and connector in place'
    )
    parser.add_argument(
        '--verbose',
        '-v',
        action='store_true',
        help='Enable verbose output'
    )

    args = parser.parse_args()

    setup_logging('DEBUG' if args.verbose else None)
    logger = get_logger(__name__)

    config = ConfigManager()
    endpoints = config.get_endpoints_config()

    try:
        source_address = parse_service_address(args.source_address or endpoints.get('source') or '')
        destination_address = parse_service_address(
            args.destination_address or endpoints.get('destination') or ''
        )
    except ValueError as e:
        parser.error(str(e))

    client = FivetranClient(config.get_api_config())
    resources = ResourceManager(client)
    orchestrator = SyncRunOrchestrator(resources, RunSettings.from_config(config.get_run_config()))

    result = None
    try:
        if not args.skip_cleanup_old:
            logger.info("cleanup_old")
            RetentionSweeper.from_config(resources, config.get_sweeper_config()).run()

        logger.info("setting up fivetran sync")
        result = orchestrator.setup_sync(destination_address, source_address)

    except Exception as e:
        logger.error(f"Sync run failed: {e}", exc_info=True)
        print(f"\nError: {e}")

    finally:
        if orchestrator.created is not None and not args.keep:
            try:
                orchestrator.teardown(orchestrator.created)
            except Exception as e:
                logger.error(f"Cleanup failed: {e}")
                print(f"\nCleanup error: {e}")
                result = None
        client.close()

    if result is None:
        sys.exit(1)

    print(f"\n{'='*50}")
    print("Sync Run Complete")
    print(f"{'='*50}")
    print(f"Group: {result.objects.group.name} ({result.objects.group.id})")
    print(f"Connector: {result.connector.id}")
    print(f"Outcome: {result.outcome.value}")
    print(f"Duration: {(result.completed_at - result.started_at).total_seconds():.2f}s")

    if not result.succeeded:
        sys.exit(1)


if __name__ == '__main__':
    main()
