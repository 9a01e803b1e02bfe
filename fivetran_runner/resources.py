"""
Resource Lifecycle Module
Create, read, list and delete operations for Fivetran groups, destinations and connectors.
"""

from typing import List

from fivetran_runner.api_client import FivetranClient
from fivetran_runner.models import (
    Connector, Destination, Group, NewConnectorRequest, NewDestinationRequest,
    SchemaUpdateRequest, StandardConfig, UpdateConnectorRequest
)
from fivetran_runner.utils.helpers import make_group_name
from fivetran_runner.utils.logger import get_logger

logger = get_logger(__name__)


def _require_id(value: str, name: str) -> str:
    if not value or not isinstance(value, str):
        raise ValueError(f"{name} must be a non-empty string")
    return value


class ResourceManager:
    """
    Typed wrappers over the Fivetran endpoints used by a sync run.

    Deleting a resource that no longer exists is treated as success.
    """

    def __init__(self, client: FivetranClient):
        self.client = client

    # ========================================
    # Group Methods
    # ========================================

    def create_group(self, name: str = None) -> Group:
        """
        Create a group.

        Args:
            name: Group name, defaults to one derived from the current UTC time
        """
        name = name or make_group_name()
        logger.info(f"create_group: {name}")
        return self.client.request('POST', '/v1/groups', Group.from_dict, json_data={'name': name})

    def get_group(self, group_id: str) -> Group:
        _require_id(group_id, 'group_id')
        logger.info(f"get_group: {group_id}")
        return self.client.request('GET', f'/v1/groups/{group_id}', Group.from_dict)

    def delete_group(self, group_id: str) -> None:
        _require_id(group_id, 'group_id')
        logger.info(f"delete_group: {group_id}")
        response = self.client.call('DELETE', f'/v1/groups/{group_id}')
        self.client.receive_empty(response, tolerate_not_found=True)

    # ========================================
    # Destination Methods
    # ========================================

    def create_destination(self, request: NewDestinationRequest) -> Destination:
        _require_id(request.group_id, 'group_id')
        logger.info(f"create_destination: {request.service} in group {request.group_id}")
        return self.client.request(
            'POST', '/v1/destinations', Destination.from_dict, json_data=request.to_dict()
        )

    def list_destinations(self) -> List[Destination]:
        """List all destinations visible to the account."""
        logger.info("list_destinations")
        destinations = list(self.client.paginate('/v1/destinations', Destination.from_dict))
        logger.info(f"Fetched {len(destinations)} destinations")
        return destinations

    def delete_destination(self, destination_id: str) -> None:
        _require_id(destination_id, 'destination_id')
        logger.info(f"delete_destination: {destination_id}")
        response = self.client.call('DELETE', f'/v1/destinations/{destination_id}')
        self.client.receive_empty(response, tolerate_not_found=True)

    # ========================================
    # Connector Methods
    # ========================================

    def create_connector(self, request: NewConnectorRequest) -> Connector:
        _require_id(request.group_id, 'group_id')
        logger.info(f"create_connector: {request.service} in group {request.group_id}")
        return self.client.request(
            'POST', '/v1/connections', Connector.from_dict, json_data=request.to_dict()
        )

    def get_connector(self, connector_id: str) -> Connector:
        _require_id(connector_id, 'connector_id')
        logger.info(f"get_connector: {connector_id}")
        return self.client.request('GET', f'/v1/connections/{connector_id}', Connector.from_dict)

    def update_connector(self, connector_id: str, request: UpdateConnectorRequest) -> Connector:
        """Patch the fields set on `request` and return the updated connector."""
        _require_id(connector_id, 'connector_id')
        body = request.to_dict()
        if not body:
            raise ValueError("update_connector needs at least one field to change")

        logger.info(f"update_connector: {connector_id} {sorted(body)}")
        return self.client.request(
            'PATCH', f'/v1/connections/{connector_id}', Connector.from_dict, json_data=body
        )

    def start_sync(self, connector_id: str) -> Connector:
        """Unpause the connector and request a historical (full) sync."""
        logger.info(f"start_sync: {connector_id}")
        return self.update_connector(
            connector_id,
            UpdateConnectorRequest(is_historical_sync=True, paused=False)
        )

    def delete_connector(self, connector_id: str) -> None:
        _require_id(connector_id, 'connector_id')
        logger.info(f"delete_connector: {connector_id}")
        response = self.client.call('DELETE', f'/v1/connections/{connector_id}')
        self.client.receive_empty(response, tolerate_not_found=True)

    def list_connectors(self) -> List[Connector]:
        """List all connectors visible to the account."""
        logger.info("list_connectors")
        connectors = list(self.client.paginate('/v1/connections', Connector.from_list_item))
        logger.info(f"Fetched {len(connectors)} connectors")
        return connectors

    def list_connectors_of_group(self, group_id: str) -> List[Connector]:
        _require_id(group_id, 'group_id')
        logger.info(f"list_connectors_of_group: {group_id}")
        return list(self.client.paginate(f'/v1/groups/{group_id}/connections', Connector.from_list_item))

    # ========================================
    # Schema Config Methods
    # ========================================

    def reload_schema_config(self, connector_id: str) -> StandardConfig:
        """Make Fivetran rediscover the source schema and return the current config."""
        _require_id(connector_id, 'connector_id')
        logger.info(f"reload_schema_config: {connector_id}")
        return self.client.request(
            'POST',
            f'/v1/connections/{connector_id}/schemas/reload',
            StandardConfig.from_dict,
            json_data={}
        )

    def update_schema_config(self, connector_id: str, request: SchemaUpdateRequest) -> StandardConfig:
        _require_id(connector_id, 'connector_id')
        logger.info(f"update_schema_config: {connector_id}")
        return self.client.request(
            'PATCH',
            f'/v1/connections/{connector_id}/schemas',
            StandardConfig.from_dict,
            json_data=request.to_dict()
        )
