"""
Unit Tests for the Resource Lifecycle Manager
Tests the verb, path and body of each operation against a mocked session.
"""

import unittest
from datetime import datetime

import pytz

from fivetran_runner.api_client import MissingDataError
from fivetran_runner.models import (
    NewConnectorRequest, SchemaChangeHandling, SchemaUpdate, SchemaUpdateRequest,
    SourceConfig, SyncOutcome, UpdateConnectorRequest
)
from fivetran_runner.resources import ResourceManager
from fivetran_runner.utils.helpers import make_group_name
from tests.fakes import (
    connector_payload, destination_payload, envelope, group_payload,
    http_response, make_client, schema_payload
)


class ResourceTestCase(unittest.TestCase):

    def setUp(self):
        self.client = make_client()
        self.session = self.client._session
        self.resources = ResourceManager(self.client)

    def respond(self, *responses):
        self.session.request.side_effect = list(responses)

    def sent(self, index=-1):
        kwargs = self.session.request.call_args_list[index].kwargs
        return kwargs['method'], kwargs['url'].replace('https://api.fivetran.test', ''), kwargs['json']


class TestGroups(ResourceTestCase):

    def test_create_then_get_by_id_returns_submitted_name(self):
        name = make_group_name(datetime(2025, 1, 2, 3, 4, 5, tzinfo=pytz.UTC))
        self.assertEqual(name, 'test_2025_01_02T03_04_05')

        self.respond(
            http_response(201, envelope(group_payload('group_9', name=name), code='Created')),
            http_response(200, envelope(group_payload('group_9', name=name))),
        )

        created = self.resources.create_group(name)
        fetched = self.resources.get_group(created.id)

        self.assertEqual(self.sent(0), ('POST', '/v1/groups', {'name': name}))
        self.assertEqual(self.sent(1), ('GET', '/v1/groups/group_9', None))
        self.assertEqual(fetched.name, name)

    def test_create_default_name(self):
        self.respond(http_response(201, envelope(group_payload(), code='Created')))

        self.resources.create_group()

        _, _, body = self.sent()
        self.assertRegex(body['name'], r'^test_\d{4}_\d{2}_\d{2}T\d{2}_\d{2}_\d{2}$')

    def test_delete_tolerates_not_found(self):
        self.respond(http_response(404, envelope(code='NotFound_Group', message='Group not found')))

        self.resources.delete_group('group_1')

        self.assertEqual(self.sent(), ('DELETE', '/v1/groups/group_1', None))

    def test_delete_failure_propagates(self):
        self.respond(http_response(400, envelope(code='InvalidState', message='Group has destinations')))

        with self.assertRaises(MissingDataError):
            self.resources.delete_group('group_1')

    def test_empty_id_rejected(self):
        with self.assertRaises(ValueError):
            self.resources.get_group('')
        self.session.request.assert_not_called()


class TestDestinations(ResourceTestCase):

    def test_list(self):
        self.respond(http_response(200, envelope({
            'items': [destination_payload('d1'), destination_payload('d2', 'group_2')],
        })))

        destinations = self.resources.list_destinations()

        self.assertEqual([d.id for d in destinations], ['d1', 'd2'])
        method, path, _ = self.sent()
        self.assertEqual((method, path), ('GET', '/v1/destinations'))

    def test_delete(self):
        self.respond(http_response(200, envelope(message='Destination has been deleted')))

        self.resources.delete_destination('d1')

        self.assertEqual(self.sent(), ('DELETE', '/v1/destinations/d1', None))


class TestConnectors(ResourceTestCase):

    def test_create(self):
        self.respond(http_response(201, envelope(connector_payload(), code='Created')))

        connector = self.resources.create_connector(NewConnectorRequest(
            group_id='group_1',
            paused=True,
            config=SourceConfig(schema_prefix='gel', host='203.0.113.8', port=5656),
        ))

        method, path, body = self.sent()
        self.assertEqual((method, path), ('POST', '/v1/connections'))
        self.assertEqual(body['group_id'], 'group_1')
        self.assertEqual(body['config']['schema_prefix'], 'gel')
        self.assertEqual(connector.id, 'conn_1')

    def test_start_sync_patch(self):
        self.respond(http_response(200, envelope(connector_payload(sync_state='scheduled'))))

        connector = self.resources.start_sync('conn_1')

        self.assertEqual(
            self.sent(),
            ('PATCH', '/v1/connections/conn_1', {'is_historical_sync': True, 'paused': False})
        )
        self.assertIs(connector.sync_outcome, SyncOutcome.RUNNING)

    def test_update_requires_a_field(self):
        with self.assertRaises(ValueError):
            self.resources.update_connector('conn_1', UpdateConnectorRequest())

    def test_list_all_and_of_group(self):
        self.respond(
            http_response(200, envelope({'items': [connector_payload('c1'), connector_payload('c2')],
                                         'next_cursor': 'next'})),
            http_response(200, envelope({'items': [connector_payload('c3')]})),
            http_response(200, envelope({'items': [connector_payload('c4')]})),
        )

        self.assertEqual([c.id for c in self.resources.list_connectors()], ['c1', 'c2', 'c3'])
        self.assertEqual([c.id for c in self.resources.list_connectors_of_group('g1')], ['c4'])

        method, path, _ = self.sent()
        self.assertEqual((method, path), ('GET', '/v1/groups/g1/connections'))

    def test_list_tolerates_foreign_connectors(self):
        self.respond(
            http_response(200, envelope({'items': [
                connector_payload('c1'),
                connector_payload('foreign', sync_frequency=2880, sync_state='queued'),
            ]})),
        )

        connectors = self.resources.list_connectors()

        self.assertEqual([c.id for c in connectors], ['c1', 'foreign'])
        self.assertEqual(connectors[1].sync_frequency, 2880)

    def test_delete(self):
        self.respond(http_response(200, envelope(message='Connection has been deleted')))

        self.resources.delete_connector('conn_1')

        self.assertEqual(self.sent(), ('DELETE', '/v1/connections/conn_1', None))


class TestSchemaConfig(ResourceTestCase):

    def test_reload(self):
        self.respond(http_response(200, envelope(schema_payload())))

        config = self.resources.reload_schema_config('conn_1')

        self.assertEqual(self.sent(), ('POST', '/v1/connections/conn_1/schemas/reload', {}))
        self.assertIn('Person', config.schemas['public'].tables)

    def test_update(self):
        self.respond(http_response(200, envelope(schema_payload())))
        request = SchemaUpdateRequest(
            schema_change_handling=SchemaChangeHandling.BLOCK_ALL,
            schemas={'audit': SchemaUpdate(enabled=True)},
        )

        self.resources.update_schema_config('conn_1', request)

        self.assertEqual(self.sent(), (
            'PATCH',
            '/v1/connections/conn_1/schemas',
            {'schema_change_handling': 'BLOCK_ALL', 'schemas': {'audit': {'enabled': True, 'tables': {}}}},
        ))


if __name__ == '__main__':
    unittest.main()
