"""
SQL Generator -- compiles an AdvancedQuery into SQL text.

The generator is a pure function of the query: it never mutates it and never
raises for incomplete input.  When the query cannot be compiled it returns a
single ``--`` comment line describing the problem; callers tell "not ready"
from "ready to run" with ``is_ready``.

Clause order is fixed: SELECT, FROM, WHERE, GROUP BY, ORDER BY, LIMIT.
FROM lists every referenced table once, comma-joined and sorted; no join
predicates are synthesised (see ``validate_query`` for the warning).
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Callable

from querycanvas.query.model import AdvancedQuery, FilterOperator, FilterValue, QueryField, QueryFilter
from querycanvas.semantic.fields import DataType, FieldKind
from querycanvas.core.logging import get_logger

logger = get_logger(__name__)

EMPTY_SELECT = "-- Please add fields to SELECT"
NO_TABLES = "-- Unable to determine tables from selected fields"

_SELECT_SEPARATOR = ",\n       "
_WHERE_SEPARATOR = "\n  AND "


# ── Literal formatting ───────────────────────────────────

def _quote(value: object) -> str:
    return "'" + str(value).replace("'", "''") + "'"


def _number_literal(value: FilterValue) -> str:
    return str(value)


def _date_literal(value: FilterValue) -> str:
    if isinstance(value, datetime):
        return f"'{value.date().isoformat()}'"
    if isinstance(value, date):
        return f"'{value.isoformat()}'"
    return _quote(value)


def _boolean_literal(value: FilterValue) -> str:
    return "TRUE" if str(value).lower() == "true" else "FALSE"


_LITERAL_FORMATTERS: dict[DataType, Callable[[FilterValue], str]] = {
    DataType.STRING: _quote,
    DataType.NUMBER: _number_literal,
    DataType.DATE: _date_literal,
    DataType.BOOLEAN: _boolean_literal,
}


def format_value(value: FilterValue, data_type: DataType) -> str:
    """Render *value* as a SQL literal for a column of *data_type*.

    Empty / None values render as ``NULL``.  Strings are single-quoted with
    embedded quotes doubled; numbers are emitted verbatim.
    """
    if value is None or value == "":
        return "NULL"
    return _LITERAL_FORMATTERS[DataType(data_type)](value)


# ── Filters ──────────────────────────────────────────────

def between_error(f: QueryFilter) -> str | None:
    """Return a message when a BETWEEN filter does not carry exactly two values."""
    if f.operator is not FilterOperator.BETWEEN or not f.has_value():
        return None
    if len(f.split_values()) != 2:
        return f"BETWEEN filter on {f.field.column_ref} requires exactly two comma-separated values"
    return None


def format_filter(f: QueryFilter) -> str:
    """Render one WHERE condition.

    Raises
    ------
    ValueError
        For a BETWEEN filter whose value does not split into two parts.
        ``generate_sql`` checks this beforehand and never lets it escape.
    """
    ref = f.field.column_ref
    dtype = f.field.data_type
    op = f.operator

    if op in (FilterOperator.IS_NULL, FilterOperator.IS_NOT_NULL):
        return f"{ref} {op.value}"

    if op in (FilterOperator.IN, FilterOperator.NOT_IN):
        values = ", ".join(format_value(v, dtype) for v in f.split_values())
        return f"{ref} {op.value} ({values})"

    if op is FilterOperator.BETWEEN:
        error = between_error(f)
        if error:
            raise ValueError(error)
        low, high = f.split_values()
        return f"{ref} BETWEEN {format_value(low, dtype)} AND {format_value(high, dtype)}"

    if op is FilterOperator.LIKE:
        escaped = str(f.value).replace("'", "''")
        return f"{ref} LIKE '%{escaped}%'"

    return f"{ref} {op.value} {format_value(f.value, dtype)}"


# ── Clause builders ──────────────────────────────────────

def _select_item(q: QueryField) -> str:
    sql = q.field.expression
    if q.alias:
        sql += f' AS "{q.alias}"'
    return sql


def _order_item(q: QueryField) -> str:
    return q.alias or q.field.expression


def _group_by_refs(query: AdvancedQuery) -> list[str]:
    if query.group_by:
        return [q.field.column_ref for q in query.group_by]
    if query.has_aggregates():
        # metrics are excluded; no dimensions means no GROUP BY
        return [q.field.column_ref for q in query.select if q.field.kind is FieldKind.DIMENSION]
    return []


# ── Public API ───────────────────────────────────────────

def generate_sql(query: AdvancedQuery) -> str:
    """Compile *query* to SQL, or to a ``--`` comment when it is incomplete."""
    if not query.select:
        return EMPTY_SELECT

    tables = [t for t in query.tables() if t]
    if not tables:
        return NO_TABLES

    conditions = [f for f in query.where if f.has_value()]
    for f in conditions:
        error = between_error(f)
        if error:
            return f"-- {error}"

    parts: list[str] = [
        "SELECT " + _SELECT_SEPARATOR.join(_select_item(q) for q in query.select),
        "FROM " + ", ".join(tables),
    ]

    if conditions:
        parts.append("WHERE " + _WHERE_SEPARATOR.join(format_filter(f) for f in conditions))

    group_refs = _group_by_refs(query)
    if group_refs:
        parts.append("GROUP BY " + ", ".join(group_refs))

    if query.order_by:
        parts.append("ORDER BY " + ", ".join(_order_item(q) for q in query.order_by))

    if query.limit is not None and query.limit > 0:
        parts.append(f"LIMIT {query.limit}")

    sql = "\n".join(parts)
    logger.debug("Generated SQL:\n%s", sql)
    return sql


def is_ready(sql: str) -> bool:
    """False for the ``--`` sentinel comments returned for incomplete queries."""
    stripped = sql.strip()
    return bool(stripped) and not stripped.startswith("--")
