"""
Seed data generator -- creates a small e-commerce schema for the query canvas.

Generates:
  - ~500 users
  - 12 categories
  - ~120 products
  - ~3 000 orders

Tables carry PRIMARY KEY / FOREIGN KEY constraints so the schema inspector
and classifier have realistic metadata to work with.
Run:  python -m pipelines.seed.seed_data
"""
from __future__ import annotations

import random
from datetime import date, timedelta

from faker import Faker
from sqlalchemy import text

from querycanvas.core.config import get_settings
from querycanvas.db.connection import get_engine

fake = Faker()
Faker.seed(42)
random.seed(42)

# ── Tunables ─────────────────────────────────────────────
NUM_USERS = 500
PRODUCTS_PER_CATEGORY = 10
NUM_ORDERS = 3_000

STATUSES = ["completed", "cancelled", "pending", "shipped"]
STATUS_WEIGHTS = [0.60, 0.10, 0.15, 0.15]

CATEGORIES = [
    "Electronics", "Clothing", "Home & Kitchen", "Books", "Sports", "Beauty",
    "Toys", "Automotive", "Grocery", "Health", "Garden", "Office",
]

DATE_START = date(2024, 1, 1)
DATE_RANGE_DAYS = 730

_DDL = [
    """
    CREATE TABLE IF NOT EXISTS {schema}.users (
        id          INTEGER PRIMARY KEY,
        name        VARCHAR(120) NOT NULL,
        email       VARCHAR(200) NOT NULL,
        country     VARCHAR(60),
        is_active   BOOLEAN NOT NULL DEFAULT TRUE,
        created_at  DATE NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS {schema}.categories (
        id          INTEGER PRIMARY KEY,
        name        VARCHAR(80) NOT NULL,
        description TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS {schema}.products (
        id          INTEGER PRIMARY KEY,
        name        VARCHAR(120) NOT NULL,
        category_id INTEGER REFERENCES {schema}.categories(id),
        price       NUMERIC(10, 2) NOT NULL,
        stock_qty   INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS {schema}.orders (
        id          INTEGER PRIMARY KEY,
        user_id     INTEGER REFERENCES {schema}.users(id),
        product_id  INTEGER REFERENCES {schema}.products(id),
        quantity    INTEGER NOT NULL,
        total       NUMERIC(12, 2) NOT NULL,
        status      VARCHAR(20) NOT NULL,
        order_date  DATE NOT NULL
    )
    """,
]


def _rand_date() -> date:
    return DATE_START + timedelta(days=random.randint(0, DATE_RANGE_DAYS))


# ── Generators ───────────────────────────────────────────

def gen_users() -> list[dict]:
    return [
        {
            "id": uid,
            "name": fake.name(),
            "email": fake.unique.email(),
            "country": fake.country(),
            "is_active": random.random() > 0.1,
            "created_at": _rand_date(),
        }
        for uid in range(1, NUM_USERS + 1)
    ]


def gen_categories() -> list[dict]:
    return [
        {"id": cid, "name": name, "description": fake.sentence(nb_words=8)}
        for cid, name in enumerate(CATEGORIES, start=1)
    ]


def gen_products(categories: list[dict]) -> list[dict]:
    rows = []
    pid = 1
    for c in categories:
        for _ in range(PRODUCTS_PER_CATEGORY):
            rows.append({
                "id": pid,
                "name": f"{fake.color_name()} {fake.word().title()}",
                "category_id": c["id"],
                "price": round(random.uniform(5.0, 500.0), 2),
                "stock_qty": random.randint(0, 1_000),
            })
            pid += 1
    return rows


def gen_orders(users: list[dict], products: list[dict]) -> list[dict]:
    rows = []
    for oid in range(1, NUM_ORDERS + 1):
        product = random.choice(products)
        quantity = random.randint(1, 5)
        rows.append({
            "id": oid,
            "user_id": random.choice(users)["id"],
            "product_id": product["id"],
            "quantity": quantity,
            "total": round(product["price"] * quantity, 2),
            "status": random.choices(STATUSES, weights=STATUS_WEIGHTS, k=1)[0],
            "order_date": _rand_date(),
        })
    return rows


# ── Bulk insert helper ───────────────────────────────────

def _bulk_insert(engine, table: str, rows: list[dict], batch_size: int = 1000):
    """Insert rows into *table* in batches using executemany-style VALUES."""
    if not rows:
        return
    cols = list(rows[0].keys())
    col_list = ", ".join(cols)
    param_list = ", ".join(f":{c}" for c in cols)
    sql = text(f"INSERT INTO {table} ({col_list}) VALUES ({param_list}) ON CONFLICT DO NOTHING")
    with engine.begin() as conn:
        for i in range(0, len(rows), batch_size):
            conn.execute(sql, rows[i : i + batch_size])
    print(f"  ✓ {table}: {len(rows):,} rows")


# ── Main ─────────────────────────────────────────────────

def main():
    print("═══ Seed Data Generator ═══")
    schema = get_settings().db_schema
    engine = get_engine()

    print(f"Creating tables in '{schema}' …")
    with engine.begin() as conn:
        conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {schema}"))
        for ddl in _DDL:
            conn.execute(text(ddl.format(schema=schema)))
        conn.execute(text(f"TRUNCATE TABLE {schema}.orders, {schema}.products, "
                          f"{schema}.categories, {schema}.users CASCADE"))

    print("Generating data …")
    users = gen_users()
    categories = gen_categories()
    products = gen_products(categories)
    orders = gen_orders(users, products)

    print("Inserting …")
    _bulk_insert(engine, f"{schema}.users", users)
    _bulk_insert(engine, f"{schema}.categories", categories)
    _bulk_insert(engine, f"{schema}.products", products)
    _bulk_insert(engine, f"{schema}.orders", orders)

    print(f"\nDone -- seeded {len(users):,} users, {len(categories):,} categories, "
          f"{len(products):,} products, {len(orders):,} orders.")


if __name__ == "__main__":
    main()
