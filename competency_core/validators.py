"""Boundary coercion for loosely shaped answer and result payloads.

Answers and stored result rows have been written by several client versions
with different field spellings. These helpers pin them to the typed
structures in :mod:`competency_core.types` before anything is scored.
"""
from __future__ import annotations

import math
from typing import Any, Iterable, List, Mapping, Optional

from .types import Answer, UNANSWERED

_QUESTION_FIELDS = ("questionId", "question_id", "qid")
_COMPETENCY_FIELDS = ("competencyId", "competency_id", "competency", "id", "key", "name")
_SCORE_FIELDS = ("selectedScore", "selected_score", "score")
_PCT_FIELDS = ("percentage", "pct", "scorePct")
_MAX_FIELDS = ("maxScore", "max_score")


def _first(raw: Mapping[str, Any], names: Iterable[str]) -> Any:
    for name in names:
        if name in raw and raw[name] is not None:
            return raw[name]
    return None


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"score must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"score must be an integer, got {value!r}")
        return int(value)
    if isinstance(value, str) and value.strip():
        return int(value.strip())
    raise ValueError(f"score must be an integer, got {value!r}")


def finite_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        x = float(value)
    except (TypeError, ValueError):
        return None
    return x if math.isfinite(x) else None


def coerce_answer(raw: Any) -> Answer:
    """Build an :class:`Answer` from an ``Answer`` or a dict in any known spelling.

    A missing score counts as unanswered. A score that is present but not an
    integer raises ``ValueError``.
    """

    if isinstance(raw, Answer):
        return raw
    if not isinstance(raw, Mapping):
        raise ValueError(f"answer must be a mapping, got {type(raw).__name__}")
    qid = _first(raw, _QUESTION_FIELDS)
    cid = _first(raw, ("competencyId", "competency_id", "competency"))
    score = _first(raw, _SCORE_FIELDS)
    return Answer(
        question_id="" if qid is None else str(qid),
        competency_id="" if cid is None else str(cid),
        selected_score=UNANSWERED if score is None else _as_int(score),
    )


def coerce_answers(raw: Iterable[Any]) -> List[Answer]:
    return [coerce_answer(a) for a in raw or []]


def stored_competency_id(row: Mapping[str, Any]) -> Optional[str]:
    cid = _first(row, _COMPETENCY_FIELDS)
    if cid is None:
        return None
    cid = str(cid).strip()
    return cid or None


def stored_percentage(row: Mapping[str, Any]) -> Optional[float]:
    """Percentage from a stored row, or ``score / maxScore`` when only raw values were kept."""

    pct = finite_number(_first(row, _PCT_FIELDS))
    if pct is not None:
        return pct
    score = finite_number(row.get("score"))
    mx = finite_number(_first(row, _MAX_FIELDS))
    if score is not None and mx:
        return score * 100.0 / mx
    return None


def stored_int(row: Mapping[str, Any], names: Iterable[str]) -> Optional[int]:
    x = finite_number(_first(row, names))
    return None if x is None else int(x)


__all__ = [
    "coerce_answer",
    "coerce_answers",
    "finite_number",
    "stored_competency_id",
    "stored_percentage",
    "stored_int",
]
