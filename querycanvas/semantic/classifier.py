"""
Field classifier -- derives the semantic layer from raw schema metadata.

Every column is examined independently and may yield:
  - one dimension   (groupable, non-aggregated)
  - zero or more metrics (COUNT / COUNT_DISTINCT for identifiers,
    SUM / AVG / MIN / MAX for price- and quantity-like numbers)
  - one filter      (commonly filtered names, dates, booleans)

The decisions depend only on the column name, declared data type and key
constraint, all of which are looked up in the heuristics table.  Output order
mirrors table and column order, then dimension -> metrics -> filter per column.
"""
from __future__ import annotations

from typing import Iterable

from querycanvas.semantic.fields import (
    ColumnDescriptor,
    DataType,
    FieldKind,
    SemanticField,
    SemanticLayer,
    TableDescriptor,
)
from querycanvas.semantic.heuristics import Heuristics, load_heuristics
from querycanvas.core.utils import capitalize, singularize
from querycanvas.core.logging import get_logger

logger = get_logger(__name__)


# ── Naming helpers ───────────────────────────────────────

def format_display_name(table_name: str, column_name: str) -> str:
    """snake_case column -> Title Case, prefixed with the singular table label when missing.

    >>> format_display_name("orders", "order_date")
    'Order Date'
    >>> format_display_name("orders", "total")
    'Order Total'
    """
    formatted = " ".join(capitalize(word) for word in column_name.split("_"))
    singular = singularize(table_name)
    if singular.lower() not in formatted.lower():
        return f"{capitalize(singular)} {formatted}"
    return formatted


def _plural_label(table_name: str) -> str:
    return f"{capitalize(singularize(table_name))}s"


def _dimension_format(column: ColumnDescriptor, rules: Heuristics) -> str | None:
    formats = rules.dimensions.formats
    if column.data_type is DataType.DATE:
        return formats.get("date")
    price = rules.group("price")
    if price is not None and price.matches(column.name):
        return formats.get("price")
    quantity = rules.group("quantity")
    if column.data_type is DataType.NUMBER and quantity is not None and quantity.matches(column.name):
        return formats.get("quantity")
    return None


# ── Classification predicates ────────────────────────────

def is_dimension(column: ColumnDescriptor, rules: Heuristics) -> bool:
    dims = rules.dimensions
    if column.constraint_kind in dims.forced_constraints:
        return True
    return column.data_type in dims.data_types and column.constraint_kind not in dims.excluded_constraints


def is_metric(column: ColumnDescriptor, rules: Heuristics) -> bool:
    metrics = rules.metrics
    if column.data_type not in metrics.data_types:
        return False
    return metrics.is_identifier(column.name) or metrics.measure_group(column.name) is not None


def is_filter(column: ColumnDescriptor, rules: Heuristics) -> bool:
    filters = rules.filters
    if column.data_type not in filters.data_types:
        return False
    return filters.is_common_filter(column.name) or column.data_type in filters.forced_data_types


# ── Field builders ───────────────────────────────────────

def _dimension_field(column: ColumnDescriptor, table: TableDescriptor, rules: Heuristics) -> SemanticField:
    field_id = f"{table.name}_{column.name}"
    display = format_display_name(table.name, column.name)
    return SemanticField(
        id=field_id,
        name=field_id,
        display_name=display,
        description=f"{display} from {table.name} table",
        kind=FieldKind.DIMENSION,
        data_type=column.data_type,
        source_table=table.name,
        source_column=column.name,
        category=rules.category_for(table.name),
        format=_dimension_format(column, rules),
    )


def _metric_fields(column: ColumnDescriptor, table: TableDescriptor, rules: Heuristics) -> list[SemanticField]:
    metrics: list[SemanticField] = []
    base_id = f"{table.name}_{column.name}"
    base_name = format_display_name(table.name, column.name)
    category = rules.category_for(table.name)

    if rules.metrics.is_identifier(column.name):
        plural = _plural_label(table.name)
        for count in rules.metrics.counts:
            field_id = f"{base_id}_{count.aggregation.value.lower()}"
            metrics.append(SemanticField(
                id=field_id,
                name=field_id,
                display_name=count.label.format(plural=plural, table=table.name),
                description=count.description.format(plural=plural, table=table.name),
                kind=FieldKind.METRIC,
                data_type=DataType.NUMBER,
                source_table=table.name,
                source_column=column.name,
                aggregation=count.aggregation,
                category=category,
            ))

    group = rules.metrics.measure_group(column.name)
    if group is not None:
        for agg in rules.metrics.measure_aggregations:
            field_id = f"{base_id}_{agg.value.lower()}"
            metrics.append(SemanticField(
                id=field_id,
                name=field_id,
                display_name=rules.metrics.measure_label.format(aggregation=agg.value, column=base_name),
                description=rules.metrics.measure_description.format(aggregation=agg.value, column=base_name),
                kind=FieldKind.METRIC,
                data_type=DataType.NUMBER,
                source_table=table.name,
                source_column=column.name,
                aggregation=agg,
                category=category,
                format=group.format,
            ))

    return metrics


def _filter_field(column: ColumnDescriptor, table: TableDescriptor, rules: Heuristics) -> SemanticField:
    field_id = f"{table.name}_{column.name}_filter"
    display = format_display_name(table.name, column.name)
    return SemanticField(
        id=field_id,
        name=field_id,
        display_name=f"{display} Filter",
        description=f"Filter by {display}",
        kind=FieldKind.FILTER,
        data_type=column.data_type,
        source_table=table.name,
        source_column=column.name,
        category=rules.category_for(table.name),
    )


# ── Public API ───────────────────────────────────────────

def classify(tables: Iterable[TableDescriptor], rules: Heuristics | None = None) -> SemanticLayer:
    """Build the semantic layer (dimensions, metrics, filters) for a schema snapshot."""
    if rules is None:
        rules = load_heuristics()

    dimensions: list[SemanticField] = []
    metrics: list[SemanticField] = []
    filters: list[SemanticField] = []

    for table in tables:
        for column in table.columns:
            if is_dimension(column, rules):
                dimensions.append(_dimension_field(column, table, rules))
            if is_metric(column, rules):
                metrics.extend(_metric_fields(column, table, rules))
            if is_filter(column, rules):
                filters.append(_filter_field(column, table, rules))

    logger.debug(
        "Classified schema: %d dimensions, %d metrics, %d filters",
        len(dimensions), len(metrics), len(filters),
    )
    return SemanticLayer(
        dimensions=tuple(dimensions),
        metrics=tuple(metrics),
        filters=tuple(filters),
    )
