"""
Unit tests -- schema inspector: type mapping and row grouping (no DB needed).
"""
import pytest

from querycanvas.db.schema_inspector import build_tables, map_type_name
from querycanvas.semantic.fields import ConstraintKind, DataType


def _row(table, column, data_type="text", nullable="YES", default=None, constraint=None):
    return {
        "table_name": table,
        "column_name": column,
        "data_type": data_type,
        "is_nullable": nullable,
        "column_default": default,
        "constraint_type": constraint,
    }


@pytest.mark.parametrize("type_name,expected", [
    ("integer", DataType.NUMBER),
    ("bigint", DataType.NUMBER),
    ("numeric", DataType.NUMBER),
    ("double precision", DataType.NUMBER),
    ("real", DataType.NUMBER),
    ("date", DataType.DATE),
    ("timestamp with time zone", DataType.DATE),
    ("time without time zone", DataType.DATE),
    ("boolean", DataType.BOOLEAN),
    ("character varying", DataType.STRING),
    ("text", DataType.STRING),
    ("uuid", DataType.STRING),
    (None, DataType.STRING),
])
def test_map_type_name(type_name, expected):
    assert map_type_name(type_name) is expected


def test_groups_rows_by_table_in_order():
    rows = [
        _row("orders", "id", "integer", "NO", constraint="PRIMARY KEY"),
        _row("orders", "total", "numeric"),
        _row("users", "id", "integer", "NO", constraint="PRIMARY KEY"),
        _row("users", "email", "character varying"),
    ]
    tables = build_tables(rows)
    assert [t.name for t in tables] == ["orders", "users"]
    assert [c.name for c in tables[0].columns] == ["id", "total"]

    pk = tables[0].column("id")
    assert pk.constraint_kind is ConstraintKind.PRIMARY_KEY
    assert pk.nullable is False
    assert pk.data_type is DataType.NUMBER
    assert tables[1].column("email").nullable is True


def test_table_without_columns_kept():
    tables = build_tables([_row("empty_table", None)])
    assert len(tables) == 1
    assert tables[0].columns == ()


def test_key_constraint_wins_over_unique():
    rows = [
        _row("orders", "user_id", "integer", constraint="UNIQUE"),
        _row("orders", "user_id", "integer", constraint="FOREIGN KEY"),
    ]
    column = build_tables(rows)[0].column("user_id")
    assert column.constraint_kind is ConstraintKind.FOREIGN_KEY


def test_first_key_constraint_kept():
    rows = [
        _row("orders", "id", "integer", constraint="PRIMARY KEY"),
        _row("orders", "id", "integer", constraint="FOREIGN KEY"),
    ]
    assert build_tables(rows)[0].column("id").constraint_kind is ConstraintKind.PRIMARY_KEY


def test_default_value_and_unknown_constraint():
    rows = [_row("orders", "status", default="'pending'::character varying", constraint="EXCLUDE")]
    column = build_tables(rows)[0].column("status")
    assert column.default_value == "'pending'::character varying"
    assert column.constraint_kind is None


def test_to_dict_shape():
    table = build_tables([_row("orders", "id", "integer", "NO", constraint="PRIMARY KEY")])[0]
    assert table.to_dict() == {
        "name": "orders",
        "columns": [{
            "name": "id",
            "type": "number",
            "nullable": False,
            "default": None,
            "constraint": "PRIMARY KEY",
        }],
    }
