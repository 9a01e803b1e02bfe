"""
Retention Sweeper Module
Deletes connectors, destinations and groups left behind by earlier runs.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Tuple

from fivetran_runner.api_client import FivetranAPIError
from fivetran_runner.resources import ResourceManager
from fivetran_runner.utils.helpers import is_older_than, utc_now
from fivetran_runner.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_AGE = timedelta(minutes=15)


class SweepError(Exception):
    """One or more deletions failed during a best-effort sweep."""

    def __init__(self, errors: List[Tuple[str, Exception]]):
        self.errors = errors
        details = '; '.join(f"{resource}: {error}" for resource, error in errors)
        super().__init__(f"{len(errors)} deletion(s) failed: {details}")


class RetentionSweeper:
    """
    Removes resources older than `max_age`.

    Connectors are judged by their own creation time; a destination and its
    group are judged by the group's creation time. Resources whose timestamp
    cannot be parsed count as old.

    By default the first failure aborts the sweep. With `best_effort` every
    resource is attempted and the failures are raised together at the end.
    """

    def __init__(
        self,
        resources: ResourceManager,
        max_age: timedelta = DEFAULT_MAX_AGE,
        best_effort: bool = False
    ):
        self.resources = resources
        self.max_age = max_age
        self.best_effort = best_effort

    @classmethod
    def from_config(cls, resources: ResourceManager, sweeper_config: Dict) -> 'RetentionSweeper':
        """Build a sweeper from the `sweeper` configuration section."""
        return cls(
            resources,
            max_age=timedelta(minutes=float(sweeper_config.get('max_age_minutes', 15))),
            best_effort=bool(sweeper_config.get('best_effort', False)),
        )

    def is_old(self, created_at: str, now: datetime = None) -> bool:
        return is_older_than(created_at, self.max_age, now)

    def _attempt(self, errors: List[Tuple[str, Exception]], resource: str, action, *args) -> Tuple[bool, Any]:
        """Run one step, collecting its failure into `errors` in best-effort mode."""
        try:
            return True, action(*args)
        except FivetranAPIError as e:
            if not self.best_effort:
                raise
            logger.error(f"Failed to clean up {resource}: {e}")
            errors.append((resource, e))
            return False, None

    def _sweep_connectors(self, now: datetime, errors: List[Tuple[str, Exception]]) -> int:
        logger.info("removing old connectors")

        deleted = 0
        for connector in self.resources.list_connectors():
            if not self.is_old(connector.created_at, now):
                continue
            ok, _ = self._attempt(
                errors, f"connector {connector.id}", self.resources.delete_connector, connector.id
            )
            if ok:
                deleted += 1

        logger.info(f"Removed {deleted} old connectors")
        return deleted

    def _sweep_destinations(self, now: datetime, errors: List[Tuple[str, Exception]]) -> int:
        logger.info("removing old groups & destinations")

        deleted = 0
        for destination in self.resources.list_destinations():
            group_label = f"group {destination.group_id}"

            ok, group = self._attempt(errors, group_label, self.resources.get_group, destination.group_id)
            if not ok or not self.is_old(group.created_at, now):
                continue

            # The destination has to go before its group
            ok, _ = self._attempt(
                errors, f"destination {destination.id}", self.resources.delete_destination, destination.id
            )
            if not ok:
                continue

            ok, _ = self._attempt(errors, group_label, self.resources.delete_group, destination.group_id)
            if ok:
                deleted += 1

        logger.info(f"Removed {deleted} old groups")
        return deleted

    def sweep_connectors(self, now: datetime = None) -> int:
        """
        Delete old connectors. Returns the number deleted.

        Raises:
            SweepError: Failures of a best-effort sweep
        """
        errors: List[Tuple[str, Exception]] = []
        deleted = self._sweep_connectors(now or utc_now(), errors)
        if errors:
            raise SweepError(errors)
        return deleted

    def sweep_destinations(self, now: datetime = None) -> int:
        """
        Delete old destinations together with their groups. Returns the number of groups deleted.

        Raises:
            SweepError: Failures of a best-effort sweep
        """
        errors: List[Tuple[str, Exception]] = []
        deleted = self._sweep_destinations(now or utc_now(), errors)
        if errors:
            raise SweepError(errors)
        return deleted

    def run(self, now: datetime = None) -> Dict[str, int]:
        """
        Run both sweeps.

        In best-effort mode the destination sweep still runs when the
        connector sweep had failures; all of them are raised together.

        Returns:
            Number of deleted connectors and groups

        Raises:
            FivetranAPIError: First failure, unless in best-effort mode
            SweepError: All failures of a best-effort sweep
        """
        errors: List[Tuple[str, Exception]] = []
        now = now or utc_now()

        stats = {
            'connectors_deleted': self._sweep_connectors(now, errors),
            'groups_deleted': self._sweep_destinations(now, errors),
        }

        if errors:
            raise SweepError(errors)
        return stats
