"""
Schema Filter Module
Decides which discovered schemas, tables and columns a connector replicates.
"""

from typing import Dict, FrozenSet, Iterable, List, NamedTuple, Sequence

from fivetran_runner.models import (
    ColumnUpdate, SchemaChangeHandling, SchemaUpdate, SchemaUpdateRequest,
    StandardConfig, TableUpdate
)


class ColumnRef(NamedTuple):
    """Fully qualified column name."""

    schema: str
    table: str
    column: str


def parse_column_refs(entries: Iterable) -> List[ColumnRef]:
    """
    Build column references from configuration entries.

    Accepts `[schema, table, column]` lists or dotted `schema.table.column` strings.
    """
    refs = []
    for entry in entries or []:
        parts = entry.split('.') if isinstance(entry, str) else list(entry)
        if len(parts) != 3 or not all(parts):
            raise ValueError(f"Invalid column reference: {entry!r}")
        refs.append(ColumnRef(*parts))
    return refs


def pick_schema(
    discovered: StandardConfig,
    excluded_columns: Sequence = ()
) -> Dict[str, SchemaUpdate]:
    """
    Build the schema update tree for everything that was discovered.

    Every schema and table is enabled. A column stays enabled only if discovery
    enabled it and it is not excluded. Hashing is switched off everywhere and
    primary key markers are kept. The discovered tree is not modified.

    Args:
        discovered: Schema config returned by a schema reload
        excluded_columns: (schema, table, column) triples never to replicate

    Returns:
        Schema name to SchemaUpdate mapping with the same keys as `discovered`
    """
    excluded: FrozenSet[tuple] = frozenset(tuple(ref) for ref in excluded_columns)

    return {
        schema_name: SchemaUpdate(
            enabled=True,
            tables={
                table_name: TableUpdate(
                    enabled=True,
                    columns={
                        column_name: ColumnUpdate(
                            enabled=column.enabled
                            and (schema_name, table_name, column_name) not in excluded,
                            hashed=False,
                            is_primary_key=column.is_primary_key,
                        )
                        for column_name, column in table.columns.items()
                    },
                )
                for table_name, table in schema.tables.items()
            },
        )
        for schema_name, schema in discovered.schemas.items()
    }


def build_schema_update(
    discovered: StandardConfig,
    excluded_columns: Sequence = (),
    schema_change_handling: SchemaChangeHandling = SchemaChangeHandling.BLOCK_ALL
) -> SchemaUpdateRequest:
    """Wrap `pick_schema` into a complete schema update request."""
    return SchemaUpdateRequest(
        schema_change_handling=schema_change_handling,
        schemas=pick_schema(discovered, excluded_columns),
    )
