"""POST /query/generate, /query/validate, /execute -- SQL compilation and execution."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from querycanvas.query.model import AdvancedQuery
from querycanvas.query.sql_generator import generate_sql, is_ready
from querycanvas.governance.query_validator import validate_query
from querycanvas.governance.sql_validator import validate_sql
from querycanvas.db.executor import execute_readonly
from querycanvas.core.config import get_settings
from querycanvas.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


class SqlRequest(BaseModel):
    sql: str = Field("", description="SQL text, generated or hand-edited")


class GenerateResponse(BaseModel):
    sql: str
    ready: bool
    warnings: list[str]


@router.post("/query/generate", response_model=GenerateResponse)
def generate_endpoint(query: AdvancedQuery) -> GenerateResponse:
    """Compile the canvas query; structural problems come back as warnings."""
    sql = generate_sql(query)
    return GenerateResponse(sql=sql, ready=is_ready(sql), warnings=validate_query(query))


@router.post("/query/validate")
def validate_endpoint(req: SqlRequest) -> dict:
    return validate_sql(req.sql).to_dict()


@router.post("/execute")
def execute_endpoint(req: SqlRequest) -> dict:
    """Run SQL in a READ ONLY transaction and return typed columns and rows."""
    if not req.sql.strip():
        raise HTTPException(status_code=400, detail="SQL query is required")

    if get_settings().validate_before_execute:
        verdict = validate_sql(req.sql)
        if not verdict.is_valid:
            raise HTTPException(status_code=400, detail=verdict.error)

    try:
        result = execute_readonly(req.sql)
    except Exception as exc:
        logger.exception("Query execution failed")
        raise HTTPException(status_code=500, detail=str(exc))
    return result.to_dict()
