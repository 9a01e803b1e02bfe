"""
Helper Utilities Module
Common utility functions used across the application.
"""

from datetime import datetime, timedelta
from typing import Optional

from dateutil import parser as date_parser
import pytz

from fivetran_runner.models import ServiceAddress


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(pytz.UTC)


def parse_platform_datetime(dt_string: Optional[str]) -> Optional[datetime]:
    """
    Parse a Fivetran timestamp string to an aware datetime.

    Args:
        dt_string: Timestamp string (ISO 8601 format)

    Returns:
        UTC-aware datetime, or None if parsing fails
    """
    if not dt_string:
        return None

    try:
        parsed = date_parser.isoparse(dt_string)
    except (ValueError, TypeError, OverflowError):
        return None

    if parsed.tzinfo is None:
        return pytz.UTC.localize(parsed)
    return parsed


def is_older_than(created_at: Optional[str], max_age: timedelta, now: datetime = None) -> bool:
    """
    Check whether a resource creation timestamp is at least `max_age` old.

    Timestamps that cannot be parsed count as old.

    Args:
        created_at: Platform creation timestamp
        max_age: Age threshold (inclusive)
        now: Reference time, defaults to the current UTC time

    Returns:
        True if the resource is old
    """
    created = parse_platform_datetime(created_at)
    if created is None:
        return True

    now = now or utc_now()
    return now - created >= max_age


def make_group_name(now: datetime = None) -> str:
    """Build a group name from the creation time, e.g. test_2025_03_01T12_30_05."""
    now = now or utc_now()
    return now.strftime('test_%Y_%m_%dT%H_%M_%S')


def parse_service_address(text: str) -> ServiceAddress:
    """
    Parse a `host:port` string.

    Args:
        text: Address such as "203.0.113.7:41234" or "[::1]:5432"

    Returns:
        ServiceAddress

    Raises:
        ValueError: If the address is malformed
    """
    if not text or ':' not in text:
        raise ValueError(f"Invalid address (expected host:port): {text!r}")

    host, _, port = text.strip().rpartition(':')
    host = host.strip('[]')
    if not host or not port.isdigit() or not 0 < int(port) < 65536:
        raise ValueError(f"Invalid address (expected host:port): {text!r}")

    return ServiceAddress(host=host, port=int(port))
