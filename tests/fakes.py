"""
Test doubles for Fivetran API responses.
"""

import json
from typing import Any, Dict, Optional
from unittest.mock import Mock

from fivetran_runner.api_client import FivetranClient
from fivetran_runner.config_manager import ApiConfig


def make_api_config(**overrides) -> ApiConfig:
    values = {
        'authorization': 'Basic dGVzdDp0ZXN0',
        'base_url': 'https://api.fivetran.test',
        'requests_per_second': 0,
        'page_size': 2,
    }
    values.update(overrides)
    return ApiConfig(**values)


def make_client(**overrides) -> FivetranClient:
    """Client whose session is a Mock; queue responses on `client._session.request`."""
    client = FivetranClient(make_api_config(**overrides))
    client._session = Mock()
    return client


def http_response(status_code: int = 200, body: Any = None, text: str = None) -> Mock:
    """Mock requests.Response returning `body` as JSON, or failing to decode `text`."""
    response = Mock(status_code=status_code)
    if text is not None:
        response.text = text
        response.json.side_effect = json.JSONDecodeError('Expecting value', text, 0)
    else:
        response.text = json.dumps(body)
        response.json.return_value = body
    return response


def envelope(data: Any = None, code: str = 'Success', message: Optional[str] = None) -> Dict:
    body = {'code': code}
    if data is not None:
        body['data'] = data
    if message is not None:
        body['message'] = message
    return body


def group_payload(group_id='group_1', name='test_2025_01_01T00_00_00',
                  created_at='2025-01-01T00:00:00.000000Z') -> Dict:
    return {'id': group_id, 'name': name, 'created_at': created_at}


def destination_payload(destination_id='dest_1', group_id='group_1', **overrides) -> Dict:
    payload = {
        'id': destination_id,
        'group_id': group_id,
        'service': 'postgres_warehouse',
        'region': 'GCP_US_EAST4',
        'setup_status': 'connected',
        'time_zone_offset': '0',
    }
    payload.update(overrides)
    return payload


def connector_payload(connector_id='conn_1', group_id='group_1', setup_state='incomplete',
                      sync_state='paused', succeeded_at=None, failed_at=None,
                      created_at='2025-01-01T00:00:00.000000Z', **overrides) -> Dict:
    payload = {
        'id': connector_id,
        'group_id': group_id,
        'service': 'postgres',
        'service_version': 1,
        'schema': 'gel',
        'connected_by': 'user_1',
        'created_at': created_at,
        'succeeded_at': succeeded_at,
        'failed_at': failed_at,
        'paused': True,
        'pause_after_trial': True,
        'sync_frequency': 15,
        'schedule_type': 'auto',
        'status': {
            'setup_state': setup_state,
            'sync_state': sync_state,
            'update_state': 'on_schedule',
            'is_historical_sync': False,
            'tasks': [],
            'warnings': [],
        },
    }
    payload.update(overrides)
    return payload


def schema_payload() -> Dict:
    """Discovered schema config with one excluded-by-policy column and one disabled column."""
    return {
        'enable_new_by_default': True,
        'schema_change_handling': 'ALLOW_ALL',
        'schemas': {
            'public': {
                'name_in_destination': 'gel_public',
                'enabled': False,
                'tables': {
                    'Person': {
                        'name_in_destination': 'person',
                        'enabled': False,
                        'supports_columns_config': True,
                        'columns': {
                            'id': {
                                'name_in_destination': 'id',
                                'enabled': True,
                                'hashed': False,
                                'is_primary_key': True,
                            },
                            'name': {
                                'name_in_destination': 'name',
                                'enabled': True,
                                'hashed': True,
                            },
                            'username': {
                                'name_in_destination': 'username',
                                'enabled': True,
                                'hashed': False,
                            },
                            'legacy': {
                                'name_in_destination': 'legacy',
                                'enabled': False,
                                'hashed': False,
                            },
                        },
                    },
                    'Movie': {
                        'name_in_destination': 'movie',
                        'enabled': True,
                        'columns': {
                            'id': {
                                'name_in_destination': 'id',
                                'enabled': True,
                                'hashed': False,
                                'is_primary_key': True,
                            },
                            'username': {
                                'name_in_destination': 'username',
                                'enabled': True,
                                'hashed': False,
                            },
                        },
                    },
                },
            },
            'audit': {
                'name_in_destination': 'gel_audit',
                'enabled': True,
                'tables': {},
            },
        },
    }
