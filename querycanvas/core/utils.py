"""
Small shared utilities.
"""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Generator


@contextmanager
def timer() -> Generator[dict, None, None]:
    """Context manager that records elapsed wall-clock milliseconds."""
    result: dict = {}
    start = time.perf_counter()
    try:
        yield result
    finally:
        result["elapsed_ms"] = int((time.perf_counter() - start) * 1000)


def singularize(table_name: str) -> str:
    """Strip one trailing ``s`` from a pluralised table name (``orders`` -> ``order``)."""
    return table_name[:-1] if table_name.endswith("s") else table_name


def capitalize(word: str) -> str:
    """Upper-case the first character only (``user_id`` -> ``User_id``)."""
    return word[:1].upper() + word[1:]
