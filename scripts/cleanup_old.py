#!/usr/bin/env python
"""
Cleanup Old Resources Script
Removes Fivetran connectors, destinations and groups left behind by earlier runs.
"""

import argparse
import sys
from datetime import timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fivetran_runner.api_client import get_fivetran_client
from fivetran_runner.config_manager import ConfigManager
from fivetran_runner.resources import ResourceManager
from fivetran_runner.sweeper import RetentionSweeper
from fivetran_runner.utils.logger import setup_logging, get_logger


def main():
    """Main entry point for the cleanup script."""
    parser = argparse.ArgumentParser(description='Remove old Fivetran test resources')
    parser.add_argument(
        '--max-age-minutes',
        type=float,
        help='Age from which resources are removed (default: sweeper.max_age_minutes)'
    )
    parser.add_argument(
        '--best-effort',
        action='store_true',
        help='Keep going after a failed deletion and report all failures at the end'
    )

    args = parser.parse_args()

    setup_logging()
    logger = get_logger(__name__)

    sweeper_config = dict(ConfigManager().get_sweeper_config())
    if args.max_age_minutes is not None:
        sweeper_config['max_age_minutes'] = args.max_age_minutes
    if args.best_effort:
        sweeper_config['best_effort'] = True

    client = get_fivetran_client()
    try:
        sweeper = RetentionSweeper.from_config(ResourceManager(client), sweeper_config)
        logger.info(f"Removing resources older than {sweeper.max_age}")
        stats = sweeper.run()

        print(f"Connectors removed: {stats['connectors_deleted']}")
        print(f"Groups removed: {stats['groups_deleted']}")

    except Exception as e:
        logger.error(f"Cleanup failed: {e}")
        print(f"\nError: {e}")
        sys.exit(1)

    finally:
        client.close()


if __name__ == '__main__':
    main()
