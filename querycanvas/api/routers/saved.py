"""CRUD for saved queries under /queries."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from querycanvas.db.saved_queries import SavedQuery, SavedQueryNotFound, get_saved_query_store
from querycanvas.query.model import AdvancedQuery

router = APIRouter()


class SaveRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    query: AdvancedQuery


class UpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    query: AdvancedQuery | None = None


def _dump(saved: SavedQuery) -> dict:
    return saved.model_dump(mode="json", by_alias=True)


@router.get("")
def list_queries() -> list[dict]:
    return [_dump(s) for s in get_saved_query_store().list_all()]


@router.post("", status_code=201)
def save_query(req: SaveRequest) -> dict:
    saved = get_saved_query_store().save(req.name, req.query, description=req.description)
    return _dump(saved)


@router.get("/{query_id}")
def get_query(query_id: str) -> dict:
    try:
        return _dump(get_saved_query_store().get(query_id))
    except SavedQueryNotFound:
        raise HTTPException(status_code=404, detail=f"Saved query '{query_id}' not found")


@router.put("/{query_id}")
def update_query(query_id: str, req: UpdateRequest) -> dict:
    changes = {"name": req.name, "query": req.query}
    if "description" in req.model_fields_set:
        changes["description"] = req.description
    try:
        saved = get_saved_query_store().update(query_id, **changes)
    except SavedQueryNotFound:
        raise HTTPException(status_code=404, detail=f"Saved query '{query_id}' not found")
    return _dump(saved)


@router.delete("/{query_id}")
def delete_query(query_id: str) -> dict:
    if not get_saved_query_store().delete(query_id):
        raise HTTPException(status_code=404, detail=f"Saved query '{query_id}' not found")
    return {"deleted": query_id}
