"""
Shared fixtures -- small schema snapshots shared by the unit tests.
"""
import pytest

from querycanvas.semantic.classifier import classify
from querycanvas.semantic.fields import (
    ColumnDescriptor,
    ConstraintKind,
    DataType,
    TableDescriptor,
)


def col(name, data_type, constraint=None, nullable=True):
    return ColumnDescriptor(
        name=name,
        data_type=DataType(data_type),
        nullable=nullable,
        constraint_kind=ConstraintKind(constraint) if constraint else None,
    )


@pytest.fixture
def orders_table():
    return TableDescriptor(
        name="orders",
        columns=(
            col("id", "number", "PRIMARY KEY", nullable=False),
            col("user_id", "number", "FOREIGN KEY"),
            col("total", "number"),
            col("order_date", "date"),
        ),
    )


@pytest.fixture
def shop_schema(orders_table):
    users = TableDescriptor(
        name="users",
        columns=(
            col("id", "number", "PRIMARY KEY", nullable=False),
            col("name", "string"),
            col("email", "string"),
            col("is_active", "boolean"),
        ),
    )
    products = TableDescriptor(
        name="products",
        columns=(
            col("id", "number", "PRIMARY KEY", nullable=False),
            col("name", "string"),
            col("price", "number"),
            col("stock_qty", "number"),
        ),
    )
    return [orders_table, products, users]


@pytest.fixture
def layer(shop_schema):
    return classify(shop_schema)




@pytest.fixture
def column():
    """Factory for ``ColumnDescriptor`` objects: ``column("price", "number")``."""
    return col
