"""
Unit tests -- field classifier: dimensions, metrics, filters from schema metadata.
"""
from querycanvas.semantic.classifier import classify, format_display_name
from querycanvas.semantic.fields import Aggregation, DataType, FieldKind, TableDescriptor
from querycanvas.semantic.heuristics import load_heuristics, parse_heuristics



def _ids(fields):
    return [f.id for f in fields]


# ── Display names & categories ──────────────────────────

def test_display_name_title_cases_snake_case():
    assert format_display_name("orders", "order_date") == "Order Date"


def test_display_name_prefixes_singular_table():
    assert format_display_name("orders", "total") == "Order Total"
    assert format_display_name("users", "email") == "User Email"


def test_display_name_no_prefix_when_table_present():
    assert format_display_name("users", "user_name") == "User Name"


def test_known_categories():
    rules = load_heuristics()
    assert rules.category_for("users") == "Customer"
    assert rules.category_for("customers") == "Customer"
    assert rules.category_for("orders") == "Sales"
    assert rules.category_for("categories") == "Product"
    assert rules.category_for("payments") == "Finance"


def test_unknown_table_category_is_capitalised_name():
    assert load_heuristics().category_for("widgets") == "Widgets"


# ── End-to-end: orders table ────────────────────────────

def test_orders_metrics(orders_table):
    layer = classify([orders_table])
    metrics = {m.id: m for m in layer.metrics}

    count = metrics["orders_id_count"]
    assert count.display_name == "Total Orders"
    assert count.aggregation is Aggregation.COUNT
    assert metrics["orders_id_count_distinct"].display_name == "Unique Orders"

    for agg in ("sum", "avg", "min", "max"):
        m = metrics[f"orders_total_{agg}"]
        assert m.format == "$#,##0.00"
        assert m.source_column == "total"
        assert m.kind is FieldKind.METRIC
    assert metrics["orders_total_sum"].display_name == "SUM Order Total"


def test_orders_dimensions(orders_table):
    layer = classify([orders_table])
    assert _ids(layer.dimensions) == ["orders_user_id", "orders_order_date"]
    order_date = layer.get("orders_order_date")
    assert order_date.format == "YYYY-MM-DD"
    assert order_date.category == "Sales"
    assert order_date.aggregation is None


def test_primary_key_is_not_a_dimension(orders_table):
    layer = classify([orders_table])
    assert "orders_id" not in _ids(layer.dimensions)


def test_foreign_key_number_is_a_dimension(orders_table):
    layer = classify([orders_table])
    fk = layer.get("orders_user_id")
    assert fk.kind is FieldKind.DIMENSION
    assert fk.data_type is DataType.NUMBER
    assert fk.display_name == "Order User Id"


def test_date_columns_become_filters(orders_table):
    layer = classify([orders_table])
    assert _ids(layer.filters) == ["orders_order_date_filter"]
    assert layer.filters[0].display_name == "Order Date Filter"
    assert layer.filters[0].description == "Filter by Order Date"


def test_metric_order_follows_columns(orders_table):
    layer = classify([orders_table])
    assert _ids(layer.metrics) == [
        "orders_id_count",
        "orders_id_count_distinct",
        "orders_user_id_count",
        "orders_user_id_count_distinct",
        "orders_total_sum",
        "orders_total_avg",
        "orders_total_min",
        "orders_total_max",
    ]


# ── Heuristic coverage ──────────────────────────────────

def test_quantity_metrics_use_number_format(layer):
    m = layer.get("products_stock_qty_sum")
    assert m is not None
    assert m.format == "#,##0.##"


def test_identifier_and_price_column_gets_six_metrics(column):
    table = TableDescriptor(name="payments", columns=(column("paid_amount", "number"),))
    layer = classify([table])
    aggs = sorted(m.aggregation.value for m in layer.metrics)
    assert aggs == ["AVG", "COUNT", "COUNT_DISTINCT", "MAX", "MIN", "SUM"]


def test_plain_number_column_yields_nothing(column):
    table = TableDescriptor(name="sensors", columns=(column("reading", "number"),))
    layer = classify([table])
    assert layer.all_fields() == []


def test_common_filter_names(layer):
    filter_ids = _ids(layer.filters)
    assert "users_email_filter" in filter_ids
    assert "users_name_filter" in filter_ids
    assert "users_is_active_filter" in filter_ids  # boolean
    assert "products_price_filter" not in filter_ids


def test_string_column_is_dimension_and_filter(layer):
    assert layer.get("users_email").kind is FieldKind.DIMENSION
    assert layer.get("users_email_filter").kind is FieldKind.FILTER


def test_every_numeric_id_column_has_one_count_and_one_distinct(layer, shop_schema):
    for table in shop_schema:
        for c in table.columns:
            if c.data_type is DataType.NUMBER and "id" in c.name.lower():
                refs = [
                    m.aggregation for m in layer.metrics
                    if m.source_table == table.name and m.source_column == c.name
                ]
                assert refs.count(Aggregation.COUNT) == 1
                assert refs.count(Aggregation.COUNT_DISTINCT) == 1


# ── Invariants ──────────────────────────────────────────

def test_deterministic(shop_schema):
    first = classify(shop_schema)
    second = classify(shop_schema)
    assert first == second


def test_ids_are_unique(layer):
    ids = _ids(layer.all_fields())
    assert len(ids) == len(set(ids))


def test_only_metrics_carry_aggregation(layer):
    for f in layer.all_fields():
        assert (f.aggregation is not None) == (f.kind is FieldKind.METRIC)


def test_custom_heuristics_are_data_driven(orders_table):
    rules = parse_heuristics({
        "dimensions": {"data_types": ["date"]},
        "metrics": {
            "data_types": ["number"],
            "measures": {
                "aggregations": ["SUM"],
                "groups": [{"name": "total", "keywords": ["total"], "format": "0.0"}],
            },
        },
        "filters": {},
        "categories": {"orders": "Revenue"},
    })
    layer = classify([orders_table], rules)
    assert _ids(layer.dimensions) == ["orders_order_date"]
    assert _ids(layer.metrics) == ["orders_total_sum"]
    assert layer.metrics[0].category == "Revenue"
    assert layer.filters == ()
