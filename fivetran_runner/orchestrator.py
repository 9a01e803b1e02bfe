"""
Sync Run Orchestrator Module
Provisions a Fivetran group, destination and connector, runs a historical sync and tears it all down.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from fivetran_runner.models import (
    Connector, ConnectionType, Destination, Group, NewConnectorRequest,
    NewDestinationRequest, SchemaChangeHandling, ServiceAddress, SourceConfig,
    SyncFrequency, SyncOutcome, TimeZoneOffset, UpdateMethod, WarehouseConfig
)
from fivetran_runner.resources import ResourceManager
from fivetran_runner.schema_filter import ColumnRef, build_schema_update, parse_column_refs
from fivetran_runner.utils.helpers import utc_now
from fivetran_runner.utils.logger import get_logger
from fivetran_runner.waiters import DEFAULT_POLL_INTERVAL, wait_for_setup, wait_for_sync

logger = get_logger(__name__)


@dataclass
class RunSettings:
    """Scenario constants of a sync run."""

    destination_service: str = 'postgres_warehouse'
    destination_user: str = 'username'
    destination_password: str = 'pass'
    destination_database: str = 'postgres'
    time_zone_offset: TimeZoneOffset = TimeZoneOffset.UTC

    source_service: str = 'postgres'
    source_user: str = 'edgedb'
    source_password: str = 'edgedb'
    source_database: str = 'main'
    schema_prefix: str = 'gel'
    update_method: UpdateMethod = UpdateMethod.XMIN
    sync_frequency: SyncFrequency = SyncFrequency.MINUTES_15

    schema_change_handling: SchemaChangeHandling = SchemaChangeHandling.BLOCK_ALL
    excluded_columns: List[ColumnRef] = field(default_factory=list)

    poll_interval: float = DEFAULT_POLL_INTERVAL
    setup_timeout: Optional[float] = None
    sync_timeout: Optional[float] = None
    fail_on_broken_setup: bool = False

    @classmethod
    def from_config(cls, run_config: Dict) -> 'RunSettings':
        """Build settings from the `run` configuration section."""
        destination = run_config.get('destination') or {}
        source = run_config.get('source') or {}
        wait = run_config.get('wait') or {}
        defaults = cls()

        def optional_float(value):
            return float(value) if value not in (None, '') else None

        return cls(
            destination_service=destination.get('service', defaults.destination_service),
            destination_user=destination.get('user', defaults.destination_user),
            destination_password=destination.get('password', defaults.destination_password),
            destination_database=destination.get('database', defaults.destination_database),
            time_zone_offset=TimeZoneOffset.from_hours(int(destination.get('time_zone_offset', 0))),
            source_service=source.get('service', defaults.source_service),
            source_user=source.get('user', defaults.source_user),
            source_password=source.get('password', defaults.source_password),
            source_database=source.get('database', defaults.source_database),
            schema_prefix=source.get('schema_prefix', defaults.schema_prefix),
            update_method=UpdateMethod(source.get('update_method', defaults.update_method.value)),
            sync_frequency=SyncFrequency(int(source.get('sync_frequency', defaults.sync_frequency))),
            schema_change_handling=SchemaChangeHandling(
                run_config.get('schema_change_handling', defaults.schema_change_handling.value)
            ),
            excluded_columns=parse_column_refs(run_config.get('excluded_columns')),
            poll_interval=float(wait.get('poll_interval', defaults.poll_interval)),
            setup_timeout=optional_float(wait.get('setup_timeout')),
            sync_timeout=optional_float(wait.get('sync_timeout')),
            fail_on_broken_setup=bool(wait.get('fail_on_broken_setup', False)),
        )


@dataclass
class CreatedObjects:
    """Resources provisioned by one run, in creation order."""

    group: Group
    destination: Optional[Destination] = None
    connector: Optional[Connector] = None


@dataclass
class RunResult:
    objects: CreatedObjects
    connector: Connector
    started_at: datetime
    completed_at: datetime

    @property
    def outcome(self) -> SyncOutcome:
        return self.connector.sync_outcome

    @property
    def succeeded(self) -> bool:
        return self.outcome == SyncOutcome.SUCCEEDED


class SyncRunOrchestrator:
    """
    Runs one end-to-end sync scenario against Fivetran.

    Every resource is recorded in `created` as soon as it exists, so callers can
    call `teardown(orchestrator.created)` even when `setup_sync` fails part way.
    """

    def __init__(self, resources: ResourceManager, settings: RunSettings = None):
        self.resources = resources
        self.settings = settings or RunSettings()
        self.created: Optional[CreatedObjects] = None

    def build_destination_request(self, group_id: str, address: ServiceAddress) -> NewDestinationRequest:
        settings = self.settings
        return NewDestinationRequest(
            group_id=group_id,
            service=settings.destination_service,
            time_zone_offset=settings.time_zone_offset,
            trust_certificates=True,
            trust_fingerprints=True,
            run_setup_tests=True,
            config=WarehouseConfig(
                host=address.host,
                port=address.port,
                user=settings.destination_user,
                password=settings.destination_password,
                database=settings.destination_database,
                always_encrypted=False,
                connection_type=ConnectionType.DIRECTLY,
            ),
        )

    def build_connector_request(self, group_id: str, address: ServiceAddress) -> NewConnectorRequest:
        settings = self.settings
        return NewConnectorRequest(
            group_id=group_id,
            service=settings.source_service,
            trust_certificates=True,
            trust_fingerprints=True,
            run_setup_tests=True,
            paused=True,
            pause_after_trial=True,
            sync_frequency=settings.sync_frequency,
            config=SourceConfig(
                schema_prefix=settings.schema_prefix,
                host=address.host,
                port=address.port,
                user=settings.source_user,
                password=settings.source_password,
                database=settings.source_database,
                update_method=settings.update_method,
                connection_type=ConnectionType.DIRECTLY,
            ),
        )

    def setup_sync(
        self,
        destination_address: ServiceAddress,
        source_address: ServiceAddress,
        group_name: str = None
    ) -> RunResult:
        """
        Provision resources and replicate the source into the destination.

        Args:
            destination_address: Public address of the target warehouse
            source_address: Public address of the source database
            group_name: Optional group name, derived from the current time by default

        Returns:
            RunResult; a failed sync is reported there, not raised
        """
        settings = self.settings
        started_at = utc_now()
        logger.info(f"Starting sync run: source={source_address} destination={destination_address}")

        group = self.resources.create_group(group_name)
        self.created = CreatedObjects(group=group)

        destination = self.resources.create_destination(
            self.build_destination_request(group.id, destination_address)
        )
        self.created.destination = destination
        logger.debug(f"destination = {destination}")

        connector = self.resources.create_connector(
            self.build_connector_request(group.id, source_address)
        )
        self.created.connector = connector
        logger.debug(f"connector = {connector}")

        wait_for_setup(
            self.resources,
            connector.id,
            poll_interval=settings.poll_interval,
            timeout=settings.setup_timeout,
            fail_on_broken=settings.fail_on_broken_setup,
        )

        discovered = self.resources.reload_schema_config(connector.id)
        logger.debug(f"discovered {len(discovered.column_keys())} columns")

        self.resources.update_schema_config(
            connector.id,
            build_schema_update(
                discovered,
                settings.excluded_columns,
                settings.schema_change_handling,
            ),
        )

        connector = wait_for_sync(
            self.resources,
            connector.id,
            poll_interval=settings.poll_interval,
            timeout=settings.sync_timeout,
        )
        self.created.connector = connector

        result = RunResult(
            objects=self.created,
            connector=connector,
            started_at=started_at,
            completed_at=utc_now(),
        )

        if result.succeeded:
            logger.info(f"sync succeeded at {connector.succeeded_at}")
        else:
            logger.error(f"sync failed at {connector.failed_at}")

        return result

    def teardown(self, objects: CreatedObjects) -> None:
        """
        Delete every connector of the group, then the destination, then the group.

        Stops at the first failed deletion.
        """
        logger.info("cleaning up")
        group_id = objects.group.id

        for connector in self.resources.list_connectors_of_group(group_id):
            self.resources.delete_connector(connector.id)

        if objects.destination is not None:
            self.resources.delete_destination(objects.destination.id)

        self.resources.delete_group(group_id)
        logger.info(f"Removed group {group_id}")
