"""
Unit tests -- query validator: canvas structure checks before generation.
"""
from querycanvas.governance.query_validator import validate_query
from querycanvas.query.model import AdvancedQuery, FilterOperator, QueryField, QueryFilter


def _qf(field, n=1):
    return QueryField(id=f"{field.id}_{n}", field=field)


def test_valid_single_table_query(layer):
    query = AdvancedQuery(select=[_qf(layer.get("orders_order_date")), _qf(layer.get("orders_total_sum"))])
    assert validate_query(query) == []


def test_empty_select(layer):
    errors = validate_query(AdvancedQuery())
    assert "At least one dimension or metric is required" in errors


def test_order_by_capacity(layer):
    date_dim = layer.get("orders_order_date")
    query = AdvancedQuery(
        select=[_qf(date_dim)],
        order_by=[_qf(date_dim, n) for n in range(4)],
    )
    assert "Maximum 3 fields allowed in ORDER BY" in validate_query(query)


def test_wrong_kind_in_zone(layer):
    metric = layer.get("orders_total_sum")
    query = AdvancedQuery(select=[_qf(metric)], group_by=[_qf(metric)])
    errors = validate_query(query)
    assert any("GROUP BY does not accept metric" in e for e in errors)


def test_malformed_between(layer):
    date_filter = layer.get("orders_order_date_filter")
    query = AdvancedQuery(
        select=[_qf(layer.get("orders_order_date"))],
        where=[QueryFilter(id="w1", field=date_filter, operator=FilterOperator.BETWEEN, value="2024-01-01")],
    )
    errors = validate_query(query)
    assert any("requires exactly two" in e for e in errors)


def test_empty_between_is_not_reported(layer):
    date_filter = layer.get("orders_order_date_filter")
    query = AdvancedQuery(
        select=[_qf(layer.get("orders_order_date"))],
        where=[QueryFilter(id="w1", field=date_filter, operator=FilterOperator.BETWEEN, value="")],
    )
    assert validate_query(query) == []


def test_multi_table_warning(layer):
    query = AdvancedQuery(select=[_qf(layer.get("orders_order_date")), _qf(layer.get("users_email"))])
    errors = validate_query(query)
    assert any("multiple tables (orders, users)" in e for e in errors)
