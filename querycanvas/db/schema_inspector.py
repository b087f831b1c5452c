"""
Schema inspection -- reads table / column / key metadata from
information_schema and turns it into ``TableDescriptor`` objects for the
classifier.

Tables come back ordered by name, columns by ordinal position; the
classifier relies on that order being stable.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping

from sqlalchemy import text
from sqlalchemy.engine import Engine

from querycanvas.db.connection import readonly_connection
from querycanvas.semantic.fields import ColumnDescriptor, ConstraintKind, DataType, TableDescriptor
from querycanvas.core.config import get_settings
from querycanvas.core.logging import get_logger

logger = get_logger(__name__)

_SCHEMA_SQL = text("""
    SELECT
        t.table_name,
        c.column_name,
        c.data_type,
        c.is_nullable,
        c.column_default,
        tc.constraint_type
    FROM information_schema.tables t
    LEFT JOIN information_schema.columns c
        ON t.table_schema = c.table_schema AND t.table_name = c.table_name
    LEFT JOIN information_schema.key_column_usage kcu
        ON c.table_schema = kcu.table_schema
       AND c.table_name = kcu.table_name
       AND c.column_name = kcu.column_name
    LEFT JOIN information_schema.table_constraints tc
        ON kcu.constraint_schema = tc.constraint_schema
       AND kcu.constraint_name = tc.constraint_name
    WHERE t.table_schema = :schema
      AND t.table_type = 'BASE TABLE'
    ORDER BY t.table_name, c.ordinal_position
""")

_NUMBER_MARKERS = ("int", "numeric", "decimal", "real", "double")
_DATE_MARKERS = ("date", "time")

# PK / FK drive classification; they win over UNIQUE / CHECK on the same column
_KEY_CONSTRAINTS = (ConstraintKind.PRIMARY_KEY, ConstraintKind.FOREIGN_KEY)


def map_type_name(type_name: str | None) -> DataType:
    """Collapse a Postgres type name to one of the four semantic data types."""
    lowered = (type_name or "").lower()
    if any(m in lowered for m in _NUMBER_MARKERS):
        return DataType.NUMBER
    if any(m in lowered for m in _DATE_MARKERS):
        return DataType.DATE
    if "bool" in lowered:
        return DataType.BOOLEAN
    return DataType.STRING


def _constraint_kind(raw: str | None) -> ConstraintKind | None:
    if not raw:
        return None
    try:
        return ConstraintKind(raw.upper())
    except ValueError:
        return None


def build_tables(rows: Iterable[Mapping[str, Any]]) -> list[TableDescriptor]:
    """Group flat information_schema rows into ordered table descriptors.

    A column listed under several constraints is kept once; a key
    constraint replaces a non-key one seen earlier.
    """
    tables: dict[str, dict[str, ColumnDescriptor]] = {}
    for row in rows:
        columns = tables.setdefault(row["table_name"], {})
        name = row.get("column_name")
        if not name:
            continue  # table without columns

        column = ColumnDescriptor(
            name=name,
            data_type=map_type_name(row.get("data_type")),
            nullable=row.get("is_nullable") == "YES",
            default_value=row.get("column_default"),
            constraint_kind=_constraint_kind(row.get("constraint_type")),
        )
        existing = columns.get(name)
        if existing is None:
            columns[name] = column
        elif existing.constraint_kind not in _KEY_CONSTRAINTS and column.constraint_kind in _KEY_CONSTRAINTS:
            columns[name] = column

    return [
        TableDescriptor(name=table_name, columns=tuple(columns.values()))
        for table_name, columns in tables.items()
    ]


def fetch_schema(engine: Engine | None = None, schema: str | None = None) -> list[TableDescriptor]:
    """Inspect *schema* (default: ``Settings.db_schema``) and return its tables."""
    schema = schema or get_settings().db_schema
    with readonly_connection(engine) as conn:
        rows = conn.execute(_SCHEMA_SQL, {"schema": schema}).mappings().all()

    tables = build_tables(rows)
    logger.info("Inspected schema %s: %d tables", schema, len(tables))
    return tables
