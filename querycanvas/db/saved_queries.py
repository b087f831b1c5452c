"""
Saved-query store -- named AdvancedQuery snapshots with their generated SQL.

The table is created automatically on first use.  Queries are stored as
JSON; the SQL is regenerated whenever the query changes so the two never
drift apart.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy import text
from sqlalchemy.engine import Engine

from querycanvas.db.connection import get_engine
from querycanvas.query.model import AdvancedQuery
from querycanvas.query.sql_generator import generate_sql
from querycanvas.core.config import get_settings
from querycanvas.core.logging import get_logger

logger = get_logger(__name__)

_CREATE_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    id              VARCHAR(36) PRIMARY KEY,
    name            VARCHAR(200) NOT NULL,
    description     TEXT,
    query_json      TEXT NOT NULL,     -- AdvancedQuery as JSON
    generated_sql   TEXT NOT NULL,
    created_at      VARCHAR(40) NOT NULL,  -- ISO-8601 UTC
    updated_at      VARCHAR(40) NOT NULL
)
"""

_COLUMNS = "id, name, description, query_json, generated_sql, created_at, updated_at"

# update() default: leave the stored description as it is
_KEEP = object()


class SavedQueryNotFound(KeyError):
    """Raised when a saved query id does not exist."""


class SavedQuery(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    description: str | None = None
    query: AdvancedQuery
    sql: str
    created_at: datetime
    updated_at: datetime


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _row_to_saved(row) -> SavedQuery:
    return SavedQuery(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        query=AdvancedQuery.model_validate_json(row["query_json"]),
        sql=row["generated_sql"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class SavedQueryStore:
    """CRUD over the saved-query table.

    Parameters
    ----------
    engine : Engine, optional
        Defaults to the shared application engine.
    table : str, optional
        Defaults to ``Settings.saved_queries_table``.
    """

    def __init__(self, engine: Engine | None = None, table: str | None = None):
        self._engine = engine
        self._table = table or get_settings().saved_queries_table
        self._ensured = False

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = get_engine()
        return self._engine

    def ensure_table(self) -> None:
        """Create the saved-query table if it doesn't exist."""
        if self._ensured:
            return
        with self.engine.connect() as conn:
            conn.execute(text(_CREATE_SQL.format(table=self._table)))
            conn.commit()
        self._ensured = True
        logger.info("Saved query table '%s' ensured", self._table)

    # ── Public API ──────────────────────────────────────

    def save(self, name: str, query: AdvancedQuery, description: str | None = None) -> SavedQuery:
        self.ensure_table()
        now = _now()
        params = {
            "id": str(uuid.uuid4()),
            "name": name,
            "description": description,
            "query_json": query.model_dump_json(by_alias=True),
            "generated_sql": generate_sql(query),
            "created_at": now,
            "updated_at": now,
        }
        insert_sql = text(f"""
            INSERT INTO {self._table} ({_COLUMNS})
            VALUES (:id, :name, :description, :query_json, :generated_sql, :created_at, :updated_at)
        """)
        with self.engine.connect() as conn:
            conn.execute(insert_sql, params)
            conn.commit()
        logger.info("Saved query %s (%s)", params["id"], name)
        return self.get(params["id"])

    def get(self, query_id: str) -> SavedQuery:
        self.ensure_table()
        with self.engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {_COLUMNS} FROM {self._table} WHERE id = :id"),
                {"id": query_id},
            ).mappings().first()
        if row is None:
            raise SavedQueryNotFound(query_id)
        return _row_to_saved(row)

    def list_all(self) -> list[SavedQuery]:
        """All saved queries, most recently updated first."""
        self.ensure_table()
        with self.engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT {_COLUMNS} FROM {self._table} ORDER BY updated_at DESC")
            ).mappings().all()
        return [_row_to_saved(r) for r in rows]

    def update(
        self,
        query_id: str,
        name: str | None = None,
        description: str | None | object = _KEEP,
        query: AdvancedQuery | None = None,
    ) -> SavedQuery:
        """Change the given attributes; passing ``description=None`` clears it."""
        current = self.get(query_id)
        new_query = query if query is not None else current.query
        params = {
            "id": query_id,
            "name": name if name is not None else current.name,
            "description": current.description if description is _KEEP else description,
            "query_json": new_query.model_dump_json(by_alias=True),
            "generated_sql": generate_sql(new_query),
            "updated_at": _now(),
        }
        update_sql = text(f"""
            UPDATE {self._table}
            SET name = :name, description = :description, query_json = :query_json,
                generated_sql = :generated_sql, updated_at = :updated_at
            WHERE id = :id
        """)
        with self.engine.connect() as conn:
            conn.execute(update_sql, params)
            conn.commit()
        return self.get(query_id)

    def delete(self, query_id: str) -> bool:
        """Remove a saved query.  Returns False when the id was unknown."""
        self.ensure_table()
        with self.engine.connect() as conn:
            result = conn.execute(text(f"DELETE FROM {self._table} WHERE id = :id"), {"id": query_id})
            conn.commit()
        return result.rowcount > 0


# ── Module-level store ──────────────────────────────────

_store: SavedQueryStore | None = None


def get_saved_query_store() -> SavedQueryStore:
    """Return the process-wide store bound to the application engine."""
    global _store
    if _store is None:
        _store = SavedQueryStore()
    return _store
