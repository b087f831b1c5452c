"""
FastAPI application entry-point.
"""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from querycanvas.api.routers import query, saved, schema

app = FastAPI(
    title="Query Canvas",
    version="0.1.0",
    description="Visual SQL query builder over a semantic layer derived from the live schema",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(schema.router, prefix="/api", tags=["Schema"])
app.include_router(query.router, prefix="/api", tags=["Query"])
app.include_router(saved.router, prefix="/api/queries", tags=["Saved queries"])


@app.get("/api/health")
def health():
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}
