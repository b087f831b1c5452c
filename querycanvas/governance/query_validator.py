"""
Validates an AdvancedQuery before it is compiled or saved.

Checks performed:
  1. SELECT holds at least one field
  2. Every zone only holds field kinds it accepts
  3. No zone exceeds its capacity (ORDER BY: 3 fields ...)
  4. BETWEEN filters carry exactly two comma-separated values
  5. The query touches a single table (no join predicates are generated,
     so several tables would silently become a cross product)
"""
from __future__ import annotations

from querycanvas.query.canvas import CANVAS_ZONES, zone_items
from querycanvas.query.model import AdvancedQuery
from querycanvas.query.sql_generator import between_error


def validate_query(query: AdvancedQuery) -> list[str]:
    """Return a list of validation error messages (empty list = query is valid)."""
    errors: list[str] = []

    if not query.select:
        errors.append("At least one dimension or metric is required")

    for zone in CANVAS_ZONES.values():
        items = zone_items(query, zone.id)
        for item in items:
            if not zone.accepts(item.field):
                errors.append(
                    f"{zone.name} does not accept {item.field.kind.value} field "
                    f"'{item.field.display_name}'"
                )
        if zone.max_items is not None and len(items) > zone.max_items:
            errors.append(f"Maximum {zone.max_items} fields allowed in {zone.name}")

    for f in query.where:
        error = between_error(f)
        if error:
            errors.append(error)

    tables = [t for t in query.tables() if t]
    if len(tables) > 1:
        errors.append(
            f"Query spans multiple tables ({', '.join(tables)}); "
            "no join predicates are generated"
        )

    return errors
