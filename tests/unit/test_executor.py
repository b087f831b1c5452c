"""
Unit tests -- executor helpers that don't need a live database.
"""
import datetime
import decimal

import pytest
from sqlalchemy.dialects import postgresql

from querycanvas.db.executor import (
    QueryResult,
    UnknownTableError,
    _serialise_value,
    column_type,
    literal_statement,
    preview_table,
)
from querycanvas.semantic.fields import DataType


@pytest.mark.parametrize("oid,expected", [
    (23, DataType.NUMBER),
    (1700, DataType.NUMBER),
    (1043, DataType.STRING),
    (1184, DataType.DATE),
    (16, DataType.BOOLEAN),
    (114, DataType.STRING),    # json -> fallback
    (None, DataType.STRING),
])
def test_column_type(oid, expected):
    assert column_type(oid) is expected


def test_serialise_values():
    assert _serialise_value(decimal.Decimal("12.50")) == 12.5
    assert _serialise_value(datetime.date(2024, 1, 2)) == "2024-01-02"
    assert _serialise_value(datetime.timedelta(hours=1)) == "1:00:00"
    assert _serialise_value("x") == "x"


def test_result_to_dict():
    result = QueryResult(columns=[{"name": "n", "type": "number"}], rows=[{"n": 1}], row_count=1, execution_time_ms=4)
    assert result.to_dict() == {
        "columns": [{"name": "n", "type": "number"}],
        "rows": [{"n": 1}],
        "rowCount": 1,
        "executionTime": 4,
    }


def test_preview_rejects_unknown_table(orders_table):
    with pytest.raises(UnknownTableError, match="pg_shadow"):
        preview_table("pg_shadow", [orders_table])


# ── Caller-supplied SQL ──────────────────────────────────

def test_colon_inside_literal_is_not_a_bind_parameter():
    compiled = literal_statement("SELECT * FROM users WHERE users.name = 'Re :urgent'").compile(
        dialect=postgresql.dialect()
    )
    assert compiled.params == {}
    assert "'Re :urgent'" in str(compiled)


def test_casts_and_like_patterns_pass_through():
    sql = "SELECT '2024-01-01'::date AS d FROM orders WHERE orders.status LIKE '%ship%'"
    compiled = literal_statement(sql).compile(dialect=postgresql.dialect())
    assert compiled.params == {}
    assert "'2024-01-01'::date" in str(compiled)
