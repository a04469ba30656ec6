"""Helpers to export scored competency rows in JSON/CSV formats."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional
import csv
import io

from .competencies import Catalog, load_catalog
from .types import AttemptResult

_FIELDS: tuple[str, ...] = (
    "competency_id",
    "label",
    "score",
    "max_score",
    "percentage",
    "tier",
)


def _normalize_row(row: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key in _FIELDS:
        val = row.get(key)
        if key in {"score", "max_score", "percentage"}:
            try:
                out[key] = int(val)
            except (TypeError, ValueError):
                out[key] = 0
        else:
            out[key] = "" if val is None else str(val)
    return out


def rows(result: AttemptResult, lang: str = "en", catalog: Optional[Catalog] = None) -> List[Dict[str, Any]]:
    catalog = catalog or load_catalog()
    return [
        _normalize_row({
            "competency_id": r.competency_id,
            "label": catalog.label(r.competency_id, lang),
            "score": r.score,
            "max_score": r.max_score,
            "percentage": r.percentage,
            "tier": r.tier,
        })
        for r in result.competency_results
    ]


def to_json(result: AttemptResult, lang: str = "en") -> Dict[str, Any]:
    """Return a JSON-safe payload of competency rows plus the total."""

    return {
        "rows": rows(result, lang),
        "total_percentage": int(result.total_percentage),
        "total_tier": result.total_tier,
    }


def to_csv(result_rows: Iterable[Dict[str, Any]]) -> str:
    """Render competency rows as CSV with a fixed header."""

    normalized = [_normalize_row(r or {}) for r in result_rows]
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=_FIELDS)
    writer.writeheader()
    for row in normalized:
        writer.writerow(row)
    return buf.getvalue()


__all__ = ["rows", "to_json", "to_csv"]
