"""
Fivetran Sync Runner
Provisions Fivetran resources, replicates a source database into a warehouse and cleans up afterwards.
"""

from .api_client import FivetranAPIError, FivetranClient, MissingDataError, TransportError
from .orchestrator import CreatedObjects, RunResult, RunSettings, SyncRunOrchestrator
from .resources import ResourceManager
from .schema_filter import ColumnRef, build_schema_update, pick_schema
from .sweeper import RetentionSweeper, SweepError
from .waiters import ConnectorSetupError, WaitTimeoutError, wait_for_setup, wait_for_sync

__all__ = [
    'FivetranAPIError',
    'FivetranClient',
    'MissingDataError',
    'TransportError',
    'CreatedObjects',
    'RunResult',
    'RunSettings',
    'SyncRunOrchestrator',
    'ResourceManager',
    'ColumnRef',
    'build_schema_update',
    'pick_schema',
    'RetentionSweeper',
    'SweepError',
    'ConnectorSetupError',
    'WaitTimeoutError',
    'wait_for_setup',
    'wait_for_sync'
]
