"""
Connector Wait Module
Polls a connector until its setup completes or until a historical sync finishes.

Both waits re-fetch the whole connector every `poll_interval` seconds. They are
unbounded unless `max_attempts` or `timeout` is given.
"""

import time
from typing import Callable, Optional

from fivetran_runner.models import Connector, SetupState, SyncOutcome
from fivetran_runner.resources import ResourceManager
from fivetran_runner.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL = 10


class WaitTimeoutError(Exception):
    """A wait gave up before the connector reached a terminal state."""

    def __init__(self, message: str, last_record: Connector = None):
        self.message = message
        self.last_record = last_record
        super().__init__(self.message)


class ConnectorSetupError(Exception):
    """Connector setup is broken and the caller asked not to wait it out."""

    def __init__(self, message: str, connector: Connector = None):
        self.message = message
        self.connector = connector
        super().__init__(self.message)


def poll_until(
    fetch: Callable[[], Connector],
    is_done: Callable[[Connector], bool],
    waiting_message: str,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    max_attempts: Optional[int] = None,
    timeout: Optional[float] = None,
    first: Connector = None
) -> Connector:
    """
    Re-fetch a connector until `is_done` accepts it.

    Args:
        fetch: Returns a fresh connector record
        is_done: Terminal-state predicate
        waiting_message: Logged before every sleep
        poll_interval: Seconds between fetches
        max_attempts: Maximum number of records to inspect, None for no limit
        timeout: Maximum seconds to wait, None for no limit
        first: Already fetched record to inspect before the first fetch

    Returns:
        The first record accepted by `is_done`

    Raises:
        WaitTimeoutError: If `max_attempts` or `timeout` is exhausted
    """
    started = time.monotonic()
    attempts = 0
    record = first

    while True:
        if record is None:
            record = fetch()
        attempts += 1
        logger.debug(f"connector.status = {record.status}")

        if is_done(record):
            return record

        if max_attempts is not None and attempts >= max_attempts:
            raise WaitTimeoutError(
                f"gave up after {attempts} attempts: {waiting_message}", record
            )
        if timeout is not None and time.monotonic() - started >= timeout:
            raise WaitTimeoutError(
                f"gave up after {timeout:g}s: {waiting_message}", record
            )

        logger.info(f"waiting for {waiting_message}")
        time.sleep(poll_interval)
        record = None


def wait_for_setup(
    resources: ResourceManager,
    connector_id: str,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    max_attempts: Optional[int] = None,
    timeout: Optional[float] = None,
    fail_on_broken: bool = False
) -> Connector:
    """
    Wait until the connector's setup_state is "connected".

    A "broken" setup keeps being polled (Fivetran may still recover it) unless
    `fail_on_broken` is set.

    Raises:
        ConnectorSetupError: If setup is broken and `fail_on_broken` is set
        WaitTimeoutError: If the wait is bounded and runs out
    """
    def is_connected(connector: Connector) -> bool:
        if connector.status.setup_state == SetupState.BROKEN:
            if fail_on_broken:
                raise ConnectorSetupError(f"connector {connector.id} setup is broken", connector)
            logger.warning(f"connector {connector.id} setup is broken, still waiting")
        return connector.is_connected

    connector = poll_until(
        lambda: resources.get_connector(connector_id),
        is_connected,
        'connector to have `setup_state` == "connected"',
        poll_interval=poll_interval,
        max_attempts=max_attempts,
        timeout=timeout,
    )
    logger.info(f"connector {connector_id} is connected")
    return connector


def wait_for_sync(
    resources: ResourceManager,
    connector_id: str,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    max_attempts: Optional[int] = None,
    timeout: Optional[float] = None
) -> Connector:
    """
    Trigger a historical sync and wait until it succeeds or fails.

    A failed sync is a normal outcome: inspect `sync_outcome` on the returned
    connector.

    Raises:
        WaitTimeoutError: If the wait is bounded and runs out
    """
    started = resources.start_sync(connector_id)

    connector = poll_until(
        lambda: resources.get_connector(connector_id),
        lambda c: c.sync_outcome != SyncOutcome.RUNNING,
        'connector sync to succeed or fail',
        poll_interval=poll_interval,
        max_attempts=max_attempts,
        timeout=timeout,
        first=started,
    )
    logger.debug(f"connector = {connector}")
    return connector
