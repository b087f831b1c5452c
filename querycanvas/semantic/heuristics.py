"""
Loads, parses, and caches the classification heuristics YAML into typed objects.

The heuristics file is the single source of truth for:
  - which data types / constraints make a column a dimension
  - which column names produce metrics, and with which aggregations
  - which column names are offered as filters
  - table-name -> UI category lookup
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from functools import lru_cache
from typing import Any

import yaml

from querycanvas.semantic.fields import Aggregation, ConstraintKind, DataType

_HEURISTICS_PATH = Path(__file__).resolve().parent / "heuristics.yml"


def _matches(keywords: tuple[str, ...], column_name: str) -> bool:
    lowered = column_name.lower()
    return any(k in lowered for k in keywords)


# ── Typed rule objects ───────────────────────────────────

@dataclass(frozen=True)
class CountRule:
    aggregation: Aggregation
    label: str
    description: str


@dataclass(frozen=True)
class MeasureGroup:
    name: str
    keywords: tuple[str, ...]
    format: str

    def matches(self, column_name: str) -> bool:
        return _matches(self.keywords, column_name)


@dataclass(frozen=True)
class DimensionRules:
    data_types: frozenset[DataType]
    excluded_constraints: frozenset[ConstraintKind]
    forced_constraints: frozenset[ConstraintKind]
    formats: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class MetricRules:
    data_types: frozenset[DataType]
    identifier_keywords: tuple[str, ...]
    counts: tuple[CountRule, ...]
    measure_aggregations: tuple[Aggregation, ...]
    measure_label: str
    measure_description: str
    groups: tuple[MeasureGroup, ...]

    def is_identifier(self, column_name: str) -> bool:
        return _matches(self.identifier_keywords, column_name)

    def measure_group(self, column_name: str) -> MeasureGroup | None:
        """Return the first group whose keywords match *column_name*."""
        for g in self.groups:
            if g.matches(column_name):
                return g
        return None


@dataclass(frozen=True)
class FilterRules:
    data_types: frozenset[DataType]
    keywords: tuple[str, ...]
    forced_data_types: frozenset[DataType]

    def is_common_filter(self, column_name: str) -> bool:
        return _matches(self.keywords, column_name)


@dataclass(frozen=True)
class Heuristics:
    version: int
    dimensions: DimensionRules
    metrics: MetricRules
    filters: FilterRules
    categories: dict[str, str]

    def category_for(self, table_name: str) -> str:
        return self.categories.get(table_name.lower(), table_name[:1].upper() + table_name[1:])

    def group(self, name: str) -> MeasureGroup | None:
        for g in self.metrics.groups:
            if g.name == name:
                return g
        return None


# ── Parsing ──────────────────────────────────────────────

def _parse_dimensions(raw: dict[str, Any]) -> DimensionRules:
    return DimensionRules(
        data_types=frozenset(DataType(t) for t in raw.get("data_types", [])),
        excluded_constraints=frozenset(ConstraintKind(c) for c in raw.get("excluded_constraints", [])),
        forced_constraints=frozenset(ConstraintKind(c) for c in raw.get("forced_constraints", [])),
        formats=dict(raw.get("formats") or {}),
    )


def _parse_metrics(raw: dict[str, Any]) -> MetricRules:
    identifier = raw.get("identifier") or {}
    measures = raw.get("measures") or {}
    return MetricRules(
        data_types=frozenset(DataType(t) for t in raw.get("data_types", [])),
        identifier_keywords=tuple(k.lower() for k in identifier.get("keywords", [])),
        counts=tuple(
            CountRule(
                aggregation=Aggregation(c["aggregation"]),
                label=c["label"],
                description=c.get("description", ""),
            )
            for c in identifier.get("counts", [])
        ),
        measure_aggregations=tuple(Aggregation(a) for a in measures.get("aggregations", [])),
        measure_label=measures.get("label", "{aggregation} {column}"),
        measure_description=measures.get("description", "{aggregation} of {column}"),
        groups=tuple(
            MeasureGroup(
                name=g["name"],
                keywords=tuple(k.lower() for k in g.get("keywords", [])),
                format=g.get("format", ""),
            )
            for g in measures.get("groups", [])
        ),
    )


def _parse_filters(raw: dict[str, Any]) -> FilterRules:
    return FilterRules(
        data_types=frozenset(DataType(t) for t in raw.get("data_types", [])),
        keywords=tuple(k.lower() for k in raw.get("keywords", [])),
        forced_data_types=frozenset(DataType(t) for t in raw.get("forced_data_types", [])),
    )


def parse_heuristics(raw_yaml: dict[str, Any]) -> Heuristics:
    return Heuristics(
        version=raw_yaml.get("version", 1),
        dimensions=_parse_dimensions(raw_yaml.get("dimensions") or {}),
        metrics=_parse_metrics(raw_yaml.get("metrics") or {}),
        filters=_parse_filters(raw_yaml.get("filters") or {}),
        categories={k.lower(): v for k, v in (raw_yaml.get("categories") or {}).items()},
    )


# ── Public API ───────────────────────────────────────────

@lru_cache
def load_heuristics() -> Heuristics:
    """Load and cache the classification heuristics from YAML."""
    with open(_HEURISTICS_PATH) as f:
        raw = yaml.safe_load(f)
    return parse_heuristics(raw)
