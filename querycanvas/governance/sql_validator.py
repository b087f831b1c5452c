"""
Lightweight SQL sanity checks for hand-edited queries.

Checks performed (first failure wins):
  1. SQL must not be empty
  2. SQL must start with SELECT
  3. SQL must include a FROM clause
  4. No known-dangerous patterns (stacked DDL / DML after ';',
     UNION SELECT, a trailing ``--`` comment)

This is a heuristic denylist for the editor, not a security boundary;
execution is additionally confined to a READ ONLY transaction.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from querycanvas.core.logging import get_logger

logger = get_logger(__name__)

# ── Compiled patterns ────────────────────────────────────

_DANGEROUS_PATTERNS = (
    re.compile(r";\s*(DROP|DELETE|UPDATE|INSERT|ALTER|CREATE)\b", re.IGNORECASE),
    re.compile(r"UNION\s+SELECT", re.IGNORECASE),
    re.compile(r"--\s*$", re.MULTILINE),
)

EMPTY_QUERY = "SQL query is empty"
NOT_SELECT = "Query must start with SELECT"
MISSING_FROM = "Query must include FROM clause"
DANGEROUS = "Potentially dangerous SQL detected"


@dataclass(frozen=True)
class SqlValidation:
    is_valid: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"isValid": self.is_valid}
        if self.error:
            result["error"] = self.error
        return result


def validate_sql(sql: str) -> SqlValidation:
    """Return the validity verdict for *sql*; never raises."""
    trimmed = (sql or "").strip()
    upper = trimmed.upper()

    if not trimmed:
        return SqlValidation(False, EMPTY_QUERY)

    if not upper.startswith("SELECT"):
        return SqlValidation(False, NOT_SELECT)

    if "FROM" not in upper:
        return SqlValidation(False, MISSING_FROM)

    for pattern in _DANGEROUS_PATTERNS:
        if pattern.search(sql):
            logger.warning("Rejected SQL matching %s", pattern.pattern)
            return SqlValidation(False, DANGEROUS)

    return SqlValidation(True)
