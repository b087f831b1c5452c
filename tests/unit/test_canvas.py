"""
Unit tests -- canvas zones: placement rules for drag-and-drop.
"""
import pytest

from querycanvas.query.canvas import CANVAS_ZONES, get_zone, place_field, remove_item
from querycanvas.query.model import AdvancedQuery, FilterOperator, QueryFilter


def test_zone_catalogue():
    assert list(CANVAS_ZONES) == ["select", "where", "groupby", "orderby"]
    assert get_zone("select").max_items == 10
    assert get_zone("where").max_items == 5
    assert get_zone("groupby").max_items == 5
    assert get_zone("orderby").max_items == 3


def test_unknown_zone():
    with pytest.raises(ValueError, match="Unknown canvas zone"):
        get_zone("having")


def test_place_returns_new_query(layer):
    original = AdvancedQuery()
    updated = place_field(original, "select", layer.get("orders_order_date"))
    assert original.select == []
    assert [q.field.id for q in updated.select] == ["orders_order_date"]
    assert updated.select[0].id == "select_orders_order_date_1"


def test_where_creates_filter_with_defaults(layer):
    updated = place_field(AdvancedQuery(), "where", layer.get("orders_order_date_filter"))
    item = updated.where[0]
    assert isinstance(item, QueryFilter)
    assert item.operator is FilterOperator.EQ
    assert item.value == ""


def test_rejects_wrong_kind(layer):
    query = AdvancedQuery()
    assert place_field(query, "where", layer.get("orders_order_date")) is query
    assert place_field(query, "groupby", layer.get("orders_total_sum")) is query


def test_rejects_duplicate(layer):
    field = layer.get("orders_total_sum")
    once = place_field(AdvancedQuery(), "select", field)
    assert place_field(once, "select", field) is once


def test_rejects_when_full(layer):
    query = AdvancedQuery()
    for m in layer.metrics[:3]:
        query = place_field(query, "orderby", m)
    assert len(query.order_by) == 3
    assert place_field(query, "orderby", layer.metrics[3]) is query


def test_remove_item(layer):
    query = place_field(AdvancedQuery(), "select", layer.get("orders_order_date"))
    query = place_field(query, "select", layer.get("orders_total_sum"))
    trimmed = remove_item(query, "select", "select_orders_order_date_1")
    assert [q.field.id for q in trimmed.select] == ["orders_total_sum"]
    assert len(query.select) == 2
