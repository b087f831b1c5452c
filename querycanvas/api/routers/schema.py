"""
GET /schema, /semantic-layer, /fields/*, /tables/{name}/preview -- metadata endpoints.
"""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from querycanvas.db.schema_inspector import fetch_schema
from querycanvas.db.executor import preview_table, UnknownTableError
from querycanvas.semantic.classifier import classify
from querycanvas.semantic.field_search import search_fields, suggest_fields
from querycanvas.semantic.fields import FieldKind
from querycanvas.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


class FieldSearchResponse(BaseModel):
    fields: list[dict]
    categories: list[str]
    kinds: list[str]


class SuggestionItem(BaseModel):
    id: str
    displayName: str
    kind: str
    description: str
    score: float


def _load_tables():
    try:
        return fetch_schema()
    except Exception:
        logger.exception("Schema fetch failed")
        raise HTTPException(status_code=500, detail="Failed to fetch schema")


@router.get("/schema")
def get_schema() -> list[dict]:
    """Return tables and columns of the inspected schema."""
    return [t.to_dict() for t in _load_tables()]


@router.get("/semantic-layer")
def get_semantic_layer() -> dict:
    """Classify the live schema into dimensions, metrics and filters."""
    return classify(_load_tables()).to_dict()


@router.get("/fields/search", response_model=FieldSearchResponse)
def search_endpoint(
    q: str = "",
    category: str | None = None,
    kind: FieldKind | None = None,
) -> FieldSearchResponse:
    layer = classify(_load_tables())
    result = search_fields(layer, term=q, category=category, kind=kind)
    return FieldSearchResponse(
        fields=[f.model_dump(mode="json", by_alias=True) for f in result.fields],
        categories=result.categories,
        kinds=result.kinds,
    )


@router.get("/fields/suggest", response_model=list[SuggestionItem])
def suggest_endpoint(q: str = "") -> list[SuggestionItem]:
    """Return ranked field suggestions for a partial user input."""
    if not q.strip():
        return []
    layer = classify(_load_tables())
    return [SuggestionItem(**s.to_dict()) for s in suggest_fields(q, layer)]


@router.get("/tables/{table_name}/preview")
def preview_endpoint(table_name: str, limit: int | None = Query(None, ge=1)) -> dict:
    tables = _load_tables()
    try:
        result = preview_table(table_name, tables, limit=limit)
    except UnknownTableError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except Exception as exc:
        logger.exception("Table preview failed")
        raise HTTPException(status_code=500, detail=str(exc))
    return result.to_dict()
