"""
Fivetran Data Models Module
Wire enumerations and typed records for the subset of the Fivetran REST API used by the runner.

Every response record has a `from_dict` decoder and every request record a
`to_dict` encoder. Optional request fields left as None are omitted from the
JSON body.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, NamedTuple, Optional, Union


# ============================================
# ENUMERATIONS
# ============================================

class SyncFrequency(IntEnum):
    """Connector sync frequency in minutes. Sent on the wire as a JSON integer."""

    MINUTES_1 = 1
    MINUTES_5 = 5
    MINUTES_15 = 15
    MINUTES_30 = 30
    MINUTES_60 = 60
    MINUTES_120 = 120
    MINUTES_180 = 180
    MINUTES_360 = 360
    MINUTES_480 = 480
    MINUTES_720 = 720
    MINUTES_1440 = 1440


class SchemaChangeHandling(str, Enum):
    """How objects appearing in the source after setup are treated."""

    # New schemas, tables and columns are included in syncs
    ALLOW_ALL = 'ALLOW_ALL'
    # New schemas and tables are excluded, new columns are included
    ALLOW_COLUMNS = 'ALLOW_COLUMNS'
    # New schemas, tables and columns are excluded
    BLOCK_ALL = 'BLOCK_ALL'


class TimeZoneOffset(str, Enum):
    """Destination time zone offset, encoded as a signed string token."""

    MINUS_11 = '-11'
    MINUS_10 = '-10'
    MINUS_9 = '-9'
    MINUS_8 = '-8'
    MINUS_7 = '-7'
    MINUS_6 = '-6'
    MINUS_5 = '-5'
    MINUS_4 = '-4'
    MINUS_3 = '-3'
    MINUS_2 = '-2'
    MINUS_1 = '-1'
    UTC = '0'
    PLUS_1 = '+1'
    PLUS_2 = '+2'
    PLUS_3 = '+3'
    PLUS_4 = '+4'
    PLUS_5 = '+5'
    PLUS_6 = '+6'
    PLUS_7 = '+7'
    PLUS_8 = '+8'
    PLUS_9 = '+9'
    PLUS_10 = '+10'
    PLUS_11 = '+11'
    PLUS_12 = '+12'

    @classmethod
    def from_hours(cls, hours: int) -> 'TimeZoneOffset':
        """Map an integer offset in -11..+12 to its token."""
        if hours == 0:
            return cls.UTC
        return cls(f'{hours:+d}')


class UpdateMethod(str, Enum):
    """Change data capture method of a PostgreSQL source."""

    TELEPORT = 'TELEPORT'
    WAL = 'WAL'
    WAL_PGOUTPUT = 'WAL_PGOUTPUT'
    XMIN = 'XMIN'


class ConnectionType(str, Enum):
    """How Fivetran reaches a database."""

    DIRECTLY = 'Directly'
    PRIVATE_LINK = 'PrivateLink'
    PROXY_AGENT = 'ProxyAgent'
    SSH_TUNNEL = 'SshTunnel'


class Region(str, Enum):
    """Data processing region of a destination."""

    AWS_AP_NORTHEAST_1 = 'AWS_AP_NORTHEAST_1'
    AWS_AP_SOUTHEAST_1 = 'AWS_AP_SOUTHEAST_1'
    AWS_AP_SOUTHEAST_2 = 'AWS_AP_SOUTHEAST_2'
    AWS_AP_SOUTH_1 = 'AWS_AP_SOUTH_1'
    AWS_CA_CENTRAL_1 = 'AWS_CA_CENTRAL_1'
    AWS_EU_CENTRAL_1 = 'AWS_EU_CENTRAL_1'
    AWS_EU_WEST_1 = 'AWS_EU_WEST_1'
    AWS_EU_WEST_2 = 'AWS_EU_WEST_2'
    AWS_US_EAST_1 = 'AWS_US_EAST_1'
    AWS_US_EAST_2 = 'AWS_US_EAST_2'
    AWS_US_GOV_WEST_1 = 'AWS_US_GOV_WEST_1'
    AWS_US_WEST_2 = 'AWS_US_WEST_2'
    AZURE_AUSTRALIAEAST = 'AZURE_AUSTRALIAEAST'
    AZURE_CANADACENTRAL = 'AZURE_CANADACENTRAL'
    AZURE_CENTRALINDIA = 'AZURE_CENTRALINDIA'
    AZURE_CENTRALUS = 'AZURE_CENTRALUS'
    AZURE_EASTUS = 'AZURE_EASTUS'
    AZURE_EASTUS2 = 'AZURE_EASTUS2'
    AZURE_JAPANEAST = 'AZURE_JAPANEAST'
    AZURE_SOUTHEASTASIA = 'AZURE_SOUTHEASTASIA'
    AZURE_UAENORTH = 'AZURE_UAENORTH'
    AZURE_UKSOUTH = 'AZURE_UKSOUTH'
    AZURE_WESTEUROPE = 'AZURE_WESTEUROPE'
    GCP_ASIA_NORTHEAST1 = 'GCP_ASIA_NORTHEAST1'
    GCP_ASIA_SOUTH1 = 'GCP_ASIA_SOUTH1'
    GCP_ASIA_SOUTHEAST1 = 'GCP_ASIA_SOUTHEAST1'
    GCP_ASIA_SOUTHEAST2 = 'GCP_ASIA_SOUTHEAST2'
    GCP_AUSTRALIA_SOUTHEAST1 = 'GCP_AUSTRALIA_SOUTHEAST1'
    GCP_EUROPE_WEST2 = 'GCP_EUROPE_WEST2'
    GCP_EUROPE_WEST3 = 'GCP_EUROPE_WEST3'
    GCP_NORTHAMERICA_NORTHEAST1 = 'GCP_NORTHAMERICA_NORTHEAST1'
    GCP_US_CENTRAL1 = 'GCP_US_CENTRAL1'
    GCP_US_EAST4 = 'GCP_US_EAST4'
    GCP_US_WEST1 = 'GCP_US_WEST1'


class SetupState(str, Enum):
    """Setup state shared by destinations and connectors."""

    INCOMPLETE = 'incomplete'
    CONNECTED = 'connected'
    BROKEN = 'broken'


class SyncState(str, Enum):
    """Scheduling phase of a connector."""

    SCHEDULED = 'scheduled'
    SYNCING = 'syncing'
    PAUSED = 'paused'
    RESCHEDULED = 'rescheduled'


class SyncOutcome(str, Enum):
    """Progress of a connector sync attempt, derived from succeeded_at / failed_at."""

    RUNNING = 'running'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'


def _optional_enum(enum_cls, value):
    return enum_cls(value) if value is not None else None


def _strict_enum(enum_cls, value):
    return enum_cls(value)


def _loose_enum(enum_cls, value):
    """Enum member for a known value, the raw value otherwise."""
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unset optional fields and unwrap enums for JSON encoding."""
    result = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, Enum):
            value = value.value
        result[key] = value
    return result


class ServiceAddress(NamedTuple):
    """Publicly reachable address of a database, handed in from outside the runner."""

    host: str
    port: int

    def __str__(self) -> str:
        return f'{self.host}:{self.port}'


# ============================================
# GROUP
# ============================================

@dataclass
class Group:
    """Provisioning namespace holding one destination and its connectors."""

    id: str
    name: str
    created_at: str

    @classmethod
    def from_dict(cls, data: Dict) -> 'Group':
        return cls(id=data['id'], name=data['name'], created_at=data['created_at'])


# ============================================
# DESTINATION
# ============================================

@dataclass
class WarehouseConfig:
    """Connection settings of a PostgreSQL warehouse destination. Write-only."""

    host: Optional[str] = None
    port: Optional[int] = None
    user: Optional[str] = None
    password: Optional[str] = None
    database: Optional[str] = None
    connection_type: Optional[ConnectionType] = None
    always_encrypted: Optional[bool] = None
    tunnel_host: Optional[str] = None
    tunnel_port: Optional[int] = None
    tunnel_user: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(self.__dict__)

    def __repr__(self) -> str:
        return f'WarehouseConfig(host={self.host!r}, port={self.port!r}, database={self.database!r})'


@dataclass
class NewDestinationRequest:
    group_id: str
    config: WarehouseConfig
    service: str = 'postgres_warehouse'
    time_zone_offset: TimeZoneOffset = TimeZoneOffset.UTC
    region: Optional[Region] = None
    trust_certificates: Optional[bool] = None
    trust_fingerprints: Optional[bool] = None
    run_setup_tests: Optional[bool] = None
    daylight_saving_time_enabled: Optional[bool] = None
    hybrid_deployment_agent_id: Optional[str] = None
    private_link_id: Optional[str] = None
    proxy_agent_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = _compact({k: v for k, v in self.__dict__.items() if k != 'config'})
        data['config'] = self.config.to_dict()
        return data


@dataclass
class Destination:
    """Target warehouse connection. List responses carry only the core fields."""

    id: str
    group_id: str
    service: str
    setup_status: SetupState
    time_zone_offset: TimeZoneOffset
    region: Optional[Region] = None
    daylight_saving_time_enabled: Optional[bool] = None
    local_processing_agent_id: Optional[str] = None
    private_link_id: Optional[str] = None
    proxy_agent_id: Optional[str] = None
    hybrid_deployment_agent_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict) -> 'Destination':
        return cls(
            id=data['id'],
            group_id=data['group_id'],
            service=data['service'],
            setup_status=SetupState(data['setup_status']),
            time_zone_offset=TimeZoneOffset(data['time_zone_offset']),
            region=_optional_enum(Region, data.get('region')),
            daylight_saving_time_enabled=data.get('daylight_saving_time_enabled'),
            local_processing_agent_id=data.get('local_processing_agent_id'),
            private_link_id=data.get('private_link_id'),
            proxy_agent_id=data.get('proxy_agent_id'),
            hybrid_deployment_agent_id=data.get('hybrid_deployment_agent_id'),
        )


# ============================================
# CONNECTOR
# ============================================

@dataclass
class SourceConfig:
    """Connection settings of a PostgreSQL source connector. Write-only."""

    schema_prefix: str
    host: Optional[str] = None
    port: Optional[int] = None
    user: Optional[str] = None
    password: Optional[str] = None
    database: Optional[str] = None
    update_method: Optional[UpdateMethod] = None
    connection_type: Optional[ConnectionType] = None
    always_encrypted: Optional[bool] = None
    publication_name: Optional[str] = None
    replication_slot: Optional[str] = None
    tunnel_host: Optional[str] = None
    tunnel_port: Optional[int] = None
    tunnel_user: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(self.__dict__)

    def __repr__(self) -> str:
        return (
            f'SourceConfig(host={self.host!r}, port={self.port!r}, '
            f'database={self.database!r}, schema_prefix={self.schema_prefix!r})'
        )


@dataclass
class NewConnectorRequest:
    group_id: str
    config: SourceConfig
    service: str = 'postgres'
    trust_certificates: Optional[bool] = None
    trust_fingerprints: Optional[bool] = None
    run_setup_tests: Optional[bool] = None
    paused: Optional[bool] = None
    pause_after_trial: Optional[bool] = None
    sync_frequency: Optional[SyncFrequency] = None
    daily_sync_time: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = _compact({k: v for k, v in self.__dict__.items() if k != 'config'})
        data['config'] = self.config.to_dict()
        return data


@dataclass
class UpdateConnectorRequest:
    """Partial connector update; only the fields that are set are sent."""

    paused: Optional[bool] = None
    is_historical_sync: Optional[bool] = None
    pause_after_trial: Optional[bool] = None
    sync_frequency: Optional[SyncFrequency] = None
    schedule_type: Optional[str] = None
    daily_sync_time: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(self.__dict__)


@dataclass
class ConnectorStatus:
    update_state: str
    setup_state: Union[SetupState, str]
    sync_state: Union[SyncState, str]
    is_historical_sync: bool
    schema_status: Optional[str] = None
    rescheduled_for: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict, strict: bool = True) -> 'ConnectorStatus':
        decode = _strict_enum if strict else _loose_enum
        return cls(
            update_state=data['update_state'],
            setup_state=decode(SetupState, data['setup_state']),
            sync_state=decode(SyncState, data['sync_state']),
            is_historical_sync=bool(data['is_historical_sync']),
            schema_status=data.get('schema_status'),
            rescheduled_for=data.get('rescheduled_for'),
        )


@dataclass
class Connector:
    """Source-to-destination replication pipeline."""

    id: str
    group_id: str
    service: str
    schema: str
    paused: bool
    sync_frequency: Union[SyncFrequency, int]
    created_at: str
    status: ConnectorStatus
    pause_after_trial: Optional[bool] = None
    schedule_type: Optional[str] = None
    daily_sync_time: Optional[str] = None
    service_version: Optional[int] = None
    connected_by: Optional[str] = None
    succeeded_at: Optional[str] = None
    failed_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict, strict: bool = True) -> 'Connector':
        """
        Decode a connector record.

        With `strict` off, a sync frequency or status token outside the known
        enumerations is kept as its raw value instead of failing the decode.
        """
        decode = _strict_enum if strict else _loose_enum
        return cls(
            id=data['id'],
            group_id=data['group_id'],
            service=data['service'],
            schema=data['schema'],
            paused=bool(data['paused']),
            sync_frequency=decode(SyncFrequency, data['sync_frequency']),
            created_at=data['created_at'],
            status=ConnectorStatus.from_dict(data['status'], strict),
            pause_after_trial=data.get('pause_after_trial'),
            schedule_type=data.get('schedule_type'),
            daily_sync_time=data.get('daily_sync_time'),
            service_version=data.get('service_version'),
            connected_by=data.get('connected_by'),
            succeeded_at=data.get('succeeded_at'),
            failed_at=data.get('failed_at'),
        )

    @classmethod
    def from_list_item(cls, data: Dict) -> 'Connector':
        """Decode one entry of a connector listing, which may belong to any connector in the account."""
        return cls.from_dict(data, strict=False)

    @property
    def is_connected(self) -> bool:
        return self.status.setup_state == SetupState.CONNECTED

    @property
    def sync_outcome(self) -> SyncOutcome:
        if self.failed_at is not None:
            return SyncOutcome.FAILED
        if self.succeeded_at is not None:
            return SyncOutcome.SUCCEEDED
        return SyncOutcome.RUNNING


# ============================================
# SCHEMA CONFIGURATION (read shape)
# ============================================

@dataclass
class ColumnConfig:
    enabled: bool
    hashed: bool
    name_in_destination: Optional[str] = None
    is_primary_key: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Dict) -> 'ColumnConfig':
        return cls(
            enabled=bool(data['enabled']),
            hashed=bool(data.get('hashed', False)),
            name_in_destination=data.get('name_in_destination'),
            is_primary_key=data.get('is_primary_key'),
        )


@dataclass
class TableConfig:
    enabled: bool
    columns: Dict[str, ColumnConfig] = field(default_factory=dict)
    name_in_destination: Optional[str] = None
    supports_columns_config: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Dict) -> 'TableConfig':
        return cls(
            enabled=bool(data['enabled']),
            columns={
                name: ColumnConfig.from_dict(column)
                for name, column in (data.get('columns') or {}).items()
            },
            name_in_destination=data.get('name_in_destination'),
            supports_columns_config=data.get('supports_columns_config'),
        )


@dataclass
class SchemaConfig:
    enabled: bool
    tables: Dict[str, TableConfig] = field(default_factory=dict)
    name_in_destination: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict) -> 'SchemaConfig':
        return cls(
            enabled=bool(data['enabled']),
            tables={
                name: TableConfig.from_dict(table)
                for name, table in (data.get('tables') or {}).items()
            },
            name_in_destination=data.get('name_in_destination'),
        )


@dataclass
class StandardConfig:
    """Schema configuration tree returned by discovery and by schema updates."""

    schemas: Dict[str, SchemaConfig] = field(default_factory=dict)
    schema_change_handling: Optional[SchemaChangeHandling] = None
    enable_new_by_default: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Dict) -> 'StandardConfig':
        return cls(
            schemas={
                name: SchemaConfig.from_dict(schema)
                for name, schema in (data.get('schemas') or {}).items()
            },
            schema_change_handling=_optional_enum(
                SchemaChangeHandling, data.get('schema_change_handling')
            ),
            enable_new_by_default=data.get('enable_new_by_default'),
        )

    def column_keys(self) -> List[tuple]:
        """All (schema, table, column) keys of the tree."""
        return [
            (schema_name, table_name, column_name)
            for schema_name, schema in self.schemas.items()
            for table_name, table in schema.tables.items()
            for column_name in table.columns
        ]


# ============================================
# SCHEMA CONFIGURATION (write shape)
# ============================================

@dataclass
class ColumnUpdate:
    enabled: bool
    hashed: Optional[bool] = None
    is_primary_key: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(self.__dict__)


@dataclass
class TableUpdate:
    enabled: bool
    columns: Dict[str, ColumnUpdate] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'enabled': self.enabled,
            'columns': {name: column.to_dict() for name, column in self.columns.items()},
        }


@dataclass
class SchemaUpdate:
    enabled: bool
    tables: Dict[str, TableUpdate] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'enabled': self.enabled,
            'tables': {name: table.to_dict() for name, table in self.tables.items()},
        }


@dataclass
class SchemaUpdateRequest:
    schema_change_handling: SchemaChangeHandling
    schemas: Dict[str, SchemaUpdate] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'schema_change_handling': self.schema_change_handling.value,
            'schemas': {name: schema.to_dict() for name, schema in self.schemas.items()},
        }
