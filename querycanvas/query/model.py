"""
AdvancedQuery -- the structured representation of a query being assembled
on the canvas, before it is compiled to SQL.
"""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from querycanvas.semantic.fields import SemanticField

FilterValue = str | bool | int | float | datetime | date | None


class FilterOperator(str, Enum):
    EQ = "="
    NE = "!="
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
    LIKE = "LIKE"
    IN = "IN"
    NOT_IN = "NOT IN"
    BETWEEN = "BETWEEN"
    IS_NULL = "IS NULL"
    IS_NOT_NULL = "IS NOT NULL"


class _CanvasModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class QueryField(_CanvasModel):
    """A semantic field placed into SELECT / GROUP BY / ORDER BY."""

    id: str = Field(..., description="Unique within its zone; the same field may appear twice")
    field: SemanticField
    alias: str | None = None


class QueryFilter(_CanvasModel):
    """A semantic field placed into WHERE."""

    id: str
    field: SemanticField
    operator: FilterOperator = FilterOperator.EQ
    value: FilterValue = Field(
        None,
        description="Literal; IN / NOT IN / BETWEEN take comma-separated values",
    )

    def has_value(self) -> bool:
        return self.value is not None and self.value != ""

    def split_values(self) -> list[str]:
        """Comma-separated value -> trimmed tokens."""
        return [v.strip() for v in str(self.value).split(",")]


class AdvancedQuery(_CanvasModel):
    """Root of the query model.  Owned by the caller; compilers only read it."""

    id: str | None = None
    name: str | None = None
    description: str | None = None
    select: list[QueryField] = Field(default_factory=list)
    where: list[QueryFilter] = Field(default_factory=list)
    group_by: list[QueryField] = Field(default_factory=list)
    order_by: list[QueryField] = Field(default_factory=list)
    limit: int | None = Field(None, description="Emitted only when positive")

    def all_fields(self) -> list[SemanticField]:
        return [
            *(q.field for q in self.select),
            *(f.field for f in self.where),
            *(q.field for q in self.group_by),
            *(q.field for q in self.order_by),
        ]

    def tables(self) -> list[str]:
        """Distinct source tables referenced anywhere in the query, sorted."""
        return sorted({f.source_table for f in self.all_fields()})

    def has_aggregates(self) -> bool:
        return any(q.field.aggregation is not None for q in self.select)
