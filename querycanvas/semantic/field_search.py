"""
Field catalogue search & suggestions.

Two entry points over a classified ``SemanticLayer``:
  - ``search_fields``: the sidebar filter -- case-insensitive substring match
    across the field's labels and source, narrowed by category and kind.
  - ``suggest_fields``: ranked fuzzy suggestions for a partial term using
      - Exact/prefix matching
      - Token overlap (Jaccard-like)
      - Levenshtein edit-distance similarity
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from querycanvas.semantic.fields import FieldKind, SemanticField, SemanticLayer
from querycanvas.core.logging import get_logger

logger = get_logger(__name__)


# ── Data classes ────────────────────────────────────────


@dataclass
class SearchResult:
    fields: list[SemanticField]
    categories: list[str] = field(default_factory=list)
    kinds: list[str] = field(default_factory=list)


@dataclass
class Suggestion:
    """A single field suggestion."""
    field: SemanticField
    score: float  # 0.0 – 1.0, higher is better match

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.field.id,
            "displayName": self.field.display_name,
            "kind": self.field.kind.value,
            "description": self.field.description,
            "score": round(self.score, 3),
        }


# ── Similarity helpers ──────────────────────────────────


def _levenshtein(a: str, b: str) -> int:
    """Compute Levenshtein edit distance between two strings."""
    if len(a) < len(b):
        return _levenshtein(b, a)
    if not b:
        return len(a)

    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a):
        curr = [i + 1]
        for j, cb in enumerate(b):
            cost = 0 if ca == cb else 1
            curr.append(min(curr[j] + 1, prev[j + 1] + 1, prev[j] + cost))
        prev = curr
    return prev[-1]


def _normalised_edit_sim(a: str, b: str) -> float:
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return 1.0 - _levenshtein(a, b) / max_len


def _tokenize(text: str) -> set[str]:
    return {t for t in text.lower().replace("_", " ").split() if t}


def _jaccard(a: set[str], b: set[str]) -> float:
    if not a and not b:
        return 1.0
    union = a | b
    return len(a & b) / len(union) if union else 0.0


def _score(query: str, f: SemanticField) -> float:
    """Composite similarity score (0–1).

    Scoring breakdown:
      - 0.50 weight: edit-distance similarity on display name
      - 0.25 weight: Jaccard token overlap on display name
      - 0.15 weight: Jaccard token overlap on description
      - 0.10 bonus: prefix match on display name or source column
    """
    q_lower = query.lower().strip()
    label = f.display_name.lower()

    edit_sim = _normalised_edit_sim(q_lower, label)
    name_jaccard = _jaccard(_tokenize(q_lower), _tokenize(label))
    desc_jaccard = _jaccard(_tokenize(q_lower), _tokenize(f.description))
    prefix_bonus = 1.0 if label.startswith(q_lower) or f.source_column.lower().startswith(q_lower) else 0.0

    return 0.50 * edit_sim + 0.25 * name_jaccard + 0.15 * desc_jaccard + 0.10 * prefix_bonus


def _text_matches(term: str, f: SemanticField) -> bool:
    haystacks = (f.display_name, f.description, f.name, f.source_table, f.source_column)
    return any(term in h.lower() for h in haystacks)


# ── Public API ──────────────────────────────────────────


def search_fields(
    fields: Iterable[SemanticField] | SemanticLayer,
    term: str = "",
    category: str | None = None,
    kind: FieldKind | str | None = None,
) -> SearchResult:
    """Filter *fields* by free text, category and kind.

    The facets (``categories``, ``kinds``) are computed over the unfiltered
    input so the UI can keep offering every option.
    """
    if isinstance(fields, SemanticLayer):
        fields = fields.all_fields()
    pool = list(fields)

    matched = pool
    term = term.strip().lower()
    if term:
        matched = [f for f in matched if _text_matches(term, f)]
    if category:
        matched = [f for f in matched if f.category == category]
    if kind:
        kind = FieldKind(kind)
        matched = [f for f in matched if f.kind is kind]

    return SearchResult(
        fields=matched,
        categories=sorted({f.category for f in pool if f.category}),
        kinds=sorted({f.kind.value for f in pool}),
    )


def suggest_fields(
    query: str,
    layer: SemanticLayer,
    top_k: int = 6,
    min_score: float = 0.20,
) -> list[Suggestion]:
    """Return field suggestions ranked by relevance, best first."""
    if not query.strip():
        return []

    suggestions: list[Suggestion] = []
    for f in layer.all_fields():
        s = _score(query, f)
        if s >= min_score:
            suggestions.append(Suggestion(field=f, score=s))

    suggestions.sort(key=lambda x: x.score, reverse=True)
    logger.debug("Suggestions for %r: %d above %.2f", query, len(suggestions), min_score)
    return suggestions[:top_k]
