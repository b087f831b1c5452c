"""
Read-only SQL executor.

All canvas-generated and hand-edited queries run through `execute_readonly`, which:
  1. Opens a READ ONLY transaction (Postgres-enforced)
  2. Enforces a query timeout (statement_timeout)
  3. Converts Decimal/date/datetime to JSON-safe Python types
  4. Reports column types and wall-clock execution time
"""
from __future__ import annotations

import decimal
import datetime
import re
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import Engine

from querycanvas.db.connection import readonly_connection
from querycanvas.semantic.fields import DataType, TableDescriptor
from querycanvas.core.config import get_settings
from querycanvas.core.utils import timer
from querycanvas.core.logging import get_logger

logger = get_logger(__name__)

# Postgres type OIDs -> semantic data type
_OID_TYPES: dict[int, DataType] = {
    16: DataType.BOOLEAN,    # boolean
    20: DataType.NUMBER,     # bigint
    21: DataType.NUMBER,     # smallint
    23: DataType.NUMBER,     # integer
    25: DataType.STRING,     # text
    700: DataType.NUMBER,    # real
    701: DataType.NUMBER,    # double precision
    1043: DataType.STRING,   # varchar
    1082: DataType.DATE,     # date
    1114: DataType.DATE,     # timestamp
    1184: DataType.DATE,     # timestamptz
    1700: DataType.NUMBER,   # numeric
}


# ":name" tokens that text() would otherwise read as bind parameters
_BIND_LIKE = re.compile(r"(?<![:\w$\\]):([\w$]+)(?![:\w$])")


class UnknownTableError(ValueError):
    """Raised when previewing a table that is not part of the inspected schema."""


@dataclass
class QueryResult:
    columns: list[dict[str, str]] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0
    execution_time_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "columns": self.columns,
            "rows": self.rows,
            "rowCount": self.row_count,
            "executionTime": self.execution_time_ms,
        }


def column_type(type_code: Any) -> DataType:
    return _OID_TYPES.get(type_code, DataType.STRING) if isinstance(type_code, int) else DataType.STRING


def _serialise_value(val: Any) -> Any:
    """Convert DB types to JSON-serialisable Python types."""
    if isinstance(val, decimal.Decimal):
        return float(val)
    if isinstance(val, (datetime.date, datetime.datetime)):
        return val.isoformat()
    if isinstance(val, datetime.timedelta):
        return str(val)
    return val


def literal_statement(sql: str):
    """Wrap caller-supplied SQL in ``text()`` with no bind parameters.

    Every ``:name`` token is escaped, so a literal such as ``'Re :urgent'``
    reaches the database unchanged.
    """
    return text(_BIND_LIKE.sub(r"\\:\1", sql))


def execute_readonly(
    sql: str,
    params: dict | None = None,
    timeout_ms: int | None = None,
    engine: Engine | None = None,
) -> QueryResult:
    """Execute a read-only SQL query and return typed columns plus serialisable rows.

    Database errors (syntax, permissions, timeout) propagate as SQLAlchemy
    exceptions.
    """
    if timeout_ms is None:
        timeout_ms = get_settings().query_timeout_ms
    logger.info("Executing SQL (%d chars)", len(sql))

    with readonly_connection(engine) as conn, timer() as t:
        conn.execute(text(f"SET LOCAL statement_timeout = {int(timeout_ms)}"))

        stmt = text(sql) if params else literal_statement(sql)
        result = conn.execute(stmt, params or {})
        description = result.cursor.description if result.cursor is not None else None
        names = list(result.keys())
        type_codes = [d[1] for d in description] if description else [None] * len(names)
        rows = [
            {col: _serialise_value(val) for col, val in zip(names, row)}
            for row in result.fetchall()
        ]

    columns = [{"name": n, "type": column_type(tc).value} for n, tc in zip(names, type_codes)]
    logger.info("Returned %d rows in %d ms", len(rows), t["elapsed_ms"])
    return QueryResult(
        columns=columns,
        rows=rows,
        row_count=len(rows),
        execution_time_ms=t["elapsed_ms"],
    )


def preview_table(
    table_name: str,
    tables: list[TableDescriptor],
    limit: int | None = None,
    engine: Engine | None = None,
) -> QueryResult:
    """Return the first *limit* rows of a table known to the inspected schema.

    Raises
    ------
    UnknownTableError
        If *table_name* is not among *tables*; the name is interpolated into
        the statement, so only inspected names are accepted.
    """
    settings = get_settings()
    if table_name not in {t.name for t in tables}:
        raise UnknownTableError(f"Unknown table '{table_name}'")

    if limit is None or limit <= 0:
        limit = settings.preview_default_limit
    limit = min(limit, settings.preview_max_limit)

    sql = f'SELECT * FROM "{settings.db_schema}"."{table_name}" LIMIT :limit'
    result = execute_readonly(sql, {"limit": limit}, engine=engine)
    result.execution_time_ms = 0  # previews don't report timing
    return result
