"""
Unit Tests for the Schema Filter
Tests which discovered columns are enabled in the schema update.
"""

import copy
import unittest

from fivetran_runner.models import SchemaChangeHandling, StandardConfig
from fivetran_runner.schema_filter import (
    ColumnRef, build_schema_update, parse_column_refs, pick_schema
)
from tests.fakes import schema_payload

EXCLUDED = [ColumnRef('public', 'Person', 'username')]


def column_keys(schemas):
    return sorted(
        (schema_name, table_name, column_name)
        for schema_name, schema in schemas.items()
        for table_name, table in schema.tables.items()
        for column_name in table.columns
    )


class TestPickSchema(unittest.TestCase):
    """Test the inclusion policy applied to a discovered schema."""

    def setUp(self):
        self.discovered = StandardConfig.from_dict(schema_payload())

    def test_key_set_preserved(self):
        picked = pick_schema(self.discovered, EXCLUDED)

        self.assertEqual(set(picked), {'public', 'audit'})
        self.assertEqual(set(picked['public'].tables), {'Person', 'Movie'})
        self.assertEqual(column_keys(picked), sorted(self.discovered.column_keys()))
        self.assertEqual(picked['audit'].tables, {})

    def test_schemas_and_tables_enabled(self):
        picked = pick_schema(self.discovered, EXCLUDED)

        self.assertTrue(picked['public'].enabled)
        self.assertTrue(picked['public'].tables['Person'].enabled)
        self.assertTrue(picked['audit'].enabled)

    def test_excluded_column_disabled(self):
        picked = pick_schema(self.discovered, EXCLUDED)

        self.assertFalse(picked['public'].tables['Person'].columns['username'].enabled)

    def test_exclusion_matches_full_triple_only(self):
        picked = pick_schema(self.discovered, EXCLUDED)

        # Same column name in another table stays enabled
        self.assertTrue(picked['public'].tables['Movie'].columns['username'].enabled)

    def test_other_columns_keep_discovered_flag(self):
        picked = pick_schema(self.discovered, EXCLUDED)
        person = picked['public'].tables['Person'].columns

        self.assertTrue(person['id'].enabled)
        self.assertTrue(person['name'].enabled)
        self.assertFalse(person['legacy'].enabled)

    def test_hashing_disabled_everywhere(self):
        picked = pick_schema(self.discovered, EXCLUDED)

        for schema in picked.values():
            for table in schema.tables.values():
                for column in table.columns.values():
                    self.assertIs(column.hashed, False)

    def test_primary_key_passed_through(self):
        person = pick_schema(self.discovered, EXCLUDED)['public'].tables['Person'].columns

        self.assertTrue(person['id'].is_primary_key)
        self.assertIsNone(person['name'].is_primary_key)
        self.assertNotIn('is_primary_key', person['name'].to_dict())

    def test_pure(self):
        before = copy.deepcopy(self.discovered)

        first = pick_schema(self.discovered, EXCLUDED)
        second = pick_schema(self.discovered, EXCLUDED)

        self.assertEqual(first, second)
        self.assertEqual(self.discovered, before)

    def test_no_exclusions(self):
        picked = pick_schema(self.discovered)
        self.assertTrue(picked['public'].tables['Person'].columns['username'].enabled)


class TestBuildSchemaUpdate(unittest.TestCase):

    def test_request_body(self):
        discovered = StandardConfig.from_dict(schema_payload())

        body = build_schema_update(discovered, EXCLUDED).to_dict()

        self.assertEqual(body['schema_change_handling'], 'BLOCK_ALL')
        self.assertEqual(
            body['schemas']['public']['tables']['Person']['columns']['username'],
            {'enabled': False, 'hashed': False}
        )
        self.assertEqual(
            body['schemas']['public']['tables']['Person']['columns']['id'],
            {'enabled': True, 'hashed': False, 'is_primary_key': True}
        )

    def test_custom_handling(self):
        request = build_schema_update(StandardConfig(), (), SchemaChangeHandling.ALLOW_COLUMNS)
        self.assertEqual(request.to_dict(), {'schema_change_handling': 'ALLOW_COLUMNS', 'schemas': {}})


class TestParseColumnRefs(unittest.TestCase):

    def test_lists_and_dotted_strings(self):
        refs = parse_column_refs([['public', 'Person', 'username'], 'public.Movie.title'])
        self.assertEqual(refs, [
            ColumnRef('public', 'Person', 'username'),
            ColumnRef('public', 'Movie', 'title'),
        ])

    def test_none(self):
        self.assertEqual(parse_column_refs(None), [])

    def test_invalid(self):
        with self.assertRaises(ValueError):
            parse_column_refs(['public.Person'])


if __name__ == '__main__':
    unittest.main()
