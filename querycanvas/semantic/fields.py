"""
Typed domain objects for the semantic layer.

Two families live here:
  - schema descriptors (``TableDescriptor`` / ``ColumnDescriptor``) as handed
    over by the schema inspector, and
  - semantic fields (dimensions, metrics, filters) derived from them by the
    classifier and dragged onto the query canvas by the UI.

Semantic fields are immutable; a schema refresh replaces the whole layer.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class DataType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"


class FieldKind(str, Enum):
    DIMENSION = "dimension"
    METRIC = "metric"
    FILTER = "filter"


class ConstraintKind(str, Enum):
    PRIMARY_KEY = "PRIMARY KEY"
    FOREIGN_KEY = "FOREIGN KEY"
    UNIQUE = "UNIQUE"
    CHECK = "CHECK"


class Aggregation(str, Enum):
    SUM = "SUM"
    COUNT = "COUNT"
    AVG = "AVG"
    MIN = "MIN"
    MAX = "MAX"
    COUNT_DISTINCT = "COUNT_DISTINCT"

    def apply(self, ref: str) -> str:
        """Wrap a column reference in this aggregate (``SUM(orders.total)``)."""
        if self is Aggregation.COUNT_DISTINCT:
            return f"COUNT(DISTINCT {ref})"
        return f"{self.value}({ref})"


# ── Schema descriptors ───────────────────────────────────

@dataclass(frozen=True)
class ColumnDescriptor:
    name: str
    data_type: DataType
    nullable: bool = True
    default_value: str | None = None
    constraint_kind: ConstraintKind | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.data_type.value,
            "nullable": self.nullable,
            "default": self.default_value,
            "constraint": self.constraint_kind.value if self.constraint_kind else None,
        }


@dataclass(frozen=True)
class TableDescriptor:
    name: str
    columns: tuple[ColumnDescriptor, ...] = field(default_factory=tuple)

    def column(self, name: str) -> ColumnDescriptor | None:
        for c in self.columns:
            if c.name == name:
                return c
        return None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "columns": [c.to_dict() for c in self.columns]}


# ── Semantic fields ──────────────────────────────────────

class SemanticField(BaseModel):
    """A classified, query-usable field.

    Serialised with camelCase keys (``displayName``, ``sourceTable`` ...) so
    the UI payloads round-trip without a translation layer.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    display_name: str
    description: str = ""
    kind: FieldKind
    data_type: DataType
    source_table: str
    source_column: str
    aggregation: Aggregation | None = None
    format: str | None = None
    category: str | None = None

    @model_validator(mode="after")
    def _aggregation_matches_kind(self) -> "SemanticField":
        if self.kind is FieldKind.METRIC and self.aggregation is None:
            raise ValueError(f"Metric field '{self.id}' must carry an aggregation")
        if self.kind is not FieldKind.METRIC and self.aggregation is not None:
            raise ValueError(f"{self.kind.value.capitalize()} field '{self.id}' cannot carry an aggregation")
        return self

    @property
    def column_ref(self) -> str:
        return f"{self.source_table}.{self.source_column}"

    @property
    def expression(self) -> str:
        """Column reference, wrapped in the aggregate for metrics."""
        if self.aggregation is not None:
            return self.aggregation.apply(self.column_ref)
        return self.column_ref


class SemanticLayer(BaseModel):
    """Fully classified semantic layer for one schema snapshot."""

    model_config = ConfigDict(frozen=True)

    dimensions: tuple[SemanticField, ...] = ()
    metrics: tuple[SemanticField, ...] = ()
    filters: tuple[SemanticField, ...] = ()

    def all_fields(self) -> list[SemanticField]:
        return [*self.dimensions, *self.metrics, *self.filters]

    def get(self, field_id: str) -> SemanticField | None:
        for f in self.all_fields():
            if f.id == field_id:
                return f
        return None

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        """Return the three field lists with camelCase keys (for API responses)."""
        return {
            "dimensions": [f.model_dump(mode="json", by_alias=True) for f in self.dimensions],
            "metrics": [f.model_dump(mode="json", by_alias=True) for f in self.metrics],
            "filters": [f.model_dump(mode="json", by_alias=True) for f in self.filters],
        }
