#!/usr/bin/env python3
"""
CLI script to verify managed Datadog resources against the API.

Usage:
    # Check every resource in a state file exists
    python scripts/check_resources.py --state terraform.tfstate --check exists

    # After a destroy, poll until all resources are gone
    python scripts/check_resources.py --state terraform.tfstate.backup --check destroyed

    # Only one resource type, with a custom retry budget
    python scripts/check_resources.py --state terraform.tfstate.backup --check destroyed \\
        --type datadog_sensitive_data_scanner_rule --max-attempts 5 --delay-seconds 3
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from datadog_resources.client import DatadogApiError, get_datadog_client
from datadog_resources.config import RESOURCE_TYPES, get_settings
from datadog_resources.resources import (
    ResourceError,
    check_resources_destroyed,
    check_resources_exist,
    load_state_file,
)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Verify Datadog resources recorded in a state file",
    )
    parser.add_argument(
        "--state",
        type=Path,
        required=True,
        help="Path to a Terraform state file (JSON)",
    )
    parser.add_argument(
        "--check",
        choices=["exists", "destroyed"],
        default="exists",
        help="Check that resources exist, or that they were destroyed",
    )
    parser.add_argument(
        "--type",
        dest="resource_type",
        choices=RESOURCE_TYPES,
        help="Only check resources of this type",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        help="Attempt budget for the destroyed check (default from settings)",
    )
    parser.add_argument(
        "--delay-seconds",
        type=float,
        help="Delay between attempts for the destroyed check",
    )
    parser.add_argument(
        "--config",
        help="Path to SOPS-encrypted config file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger = logging.getLogger(__name__)

    settings = get_settings(args.config)
    errors = settings.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return 1

    if not args.state.exists():
        logger.error(f"State file not found: {args.state}")
        return 1

    resources = load_state_file(args.state)
    logger.info(f"Loaded {len(resources)} resource(s) from {args.state}")

    with get_datadog_client(settings) as client:
        try:
            if args.check == "exists":
                check_resources_exist(client, resources, args.resource_type)
            else:
                check_resources_destroyed(
                    client,
                    resources,
                    args.resource_type,
                    max_attempts=args.max_attempts,
                    delay_seconds=args.delay_seconds,
                    settings=settings,
                )
        except (ResourceError, DatadogApiError) as e:
            logger.error(f"Check '{args.check}' failed: {e}")
            return 1

    logger.info(f"Check '{args.check}' passed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
