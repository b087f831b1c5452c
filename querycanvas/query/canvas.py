"""
Canvas drop zones and the pure placement rules behind drag-and-drop.

Each zone declares which field kinds it accepts and how many items it may
hold.  ``place_field`` and ``remove_item`` never mutate the query they are
given; they return a new ``AdvancedQuery`` (or the original one unchanged
when the drop is rejected).
"""
from __future__ import annotations

from dataclasses import dataclass

from querycanvas.query.model import AdvancedQuery, FilterOperator, QueryField, QueryFilter
from querycanvas.semantic.fields import FieldKind, SemanticField
from querycanvas.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CanvasZone:
    id: str
    name: str
    description: str
    accepted_kinds: frozenset[FieldKind]
    max_items: int | None = None
    attribute: str = ""  # AdvancedQuery list backing this zone

    def accepts(self, f: SemanticField) -> bool:
        return f.kind in self.accepted_kinds


CANVAS_ZONES: dict[str, CanvasZone] = {
    z.id: z
    for z in (
        CanvasZone(
            id="select",
            name="SELECT",
            description="Drag dimensions and metrics here",
            accepted_kinds=frozenset({FieldKind.DIMENSION, FieldKind.METRIC}),
            max_items=10,
            attribute="select",
        ),
        CanvasZone(
            id="where",
            name="WHERE",
            description="Drag filters here to add conditions",
            accepted_kinds=frozenset({FieldKind.FILTER}),
            max_items=5,
            attribute="where",
        ),
        CanvasZone(
            id="groupby",
            name="GROUP BY",
            description="Drag dimensions here for grouping",
            accepted_kinds=frozenset({FieldKind.DIMENSION}),
            max_items=5,
            attribute="group_by",
        ),
        CanvasZone(
            id="orderby",
            name="ORDER BY",
            description="Drag fields here for sorting",
            accepted_kinds=frozenset({FieldKind.DIMENSION, FieldKind.METRIC}),
            max_items=3,
            attribute="order_by",
        ),
    )
}


def get_zone(zone_id: str) -> CanvasZone:
    try:
        return CANVAS_ZONES[zone_id]
    except KeyError:
        raise ValueError(f"Unknown canvas zone '{zone_id}'. Allowed: {', '.join(CANVAS_ZONES)}") from None


def zone_items(query: AdvancedQuery, zone_id: str) -> list[QueryField] | list[QueryFilter]:
    return getattr(query, get_zone(zone_id).attribute)


def place_field(query: AdvancedQuery, zone_id: str, f: SemanticField) -> AdvancedQuery:
    """Drop *f* onto a zone.

    The drop is ignored (the same query is returned) when the zone does not
    accept the field's kind, already holds this field, or is full.
    """
    zone = get_zone(zone_id)
    items = zone_items(query, zone_id)

    if not zone.accepts(f):
        logger.debug("Zone %s rejects %s field %s", zone.id, f.kind.value, f.id)
        return query
    if any(item.field.id == f.id for item in items):
        return query
    if zone.max_items is not None and len(items) >= zone.max_items:
        logger.debug("Zone %s is full (%d items)", zone.id, zone.max_items)
        return query

    item_id = f"{zone.id}_{f.id}_{len(items) + 1}"
    new_item: QueryField | QueryFilter
    if zone.id == "where":
        new_item = QueryFilter(id=item_id, field=f, operator=FilterOperator.EQ, value="")
    else:
        new_item = QueryField(id=item_id, field=f)

    return query.model_copy(update={zone.attribute: [*items, new_item]})


def remove_item(query: AdvancedQuery, zone_id: str, item_id: str) -> AdvancedQuery:
    zone = get_zone(zone_id)
    items = zone_items(query, zone_id)
    return query.model_copy(update={zone.attribute: [i for i in items if i.id != item_id]})
