# competency_core/reporting.py
from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import config as cfg_defaults
from .competencies import Catalog, load_catalog
from .recommendations import RecommendationResolver, check_lang, default_resolver
from .tiers import tier_label
from .types import AttemptResult, CompetencyResult, TIERS

_SWOT_KEYS = {
    "Strength": "strengths",
    "Opportunity": "opportunities",
    "Threat": "threats",
    "Weakness": "weaknesses",
}

# -------- utils: make any object JSON-safe ----------
def _to_basic(x: Any) -> Any:
    if x is None or isinstance(x, (bool, int, float, str)):
        return x
    if isinstance(x, dict):
        return {str(k): _to_basic(v) for k, v in x.items()}
    if isinstance(x, (list, tuple)):
        return [_to_basic(v) for v in x]
    return str(x)


def _competency_entry(
    r: CompetencyResult,
    lang: str,
    catalog: Catalog,
    resolver: RecommendationResolver,
    recs_max: int,
) -> Dict[str, Any]:
    recs = resolver.get(r.competency_id, r.tier, lang)
    return {
        "competencyId": r.competency_id,
        "label": catalog.label(r.competency_id, lang),
        "diagnostic": catalog.diagnostic(r.competency_id, lang),
        "score": r.score,
        "maxScore": r.max_score,
        "percentage": r.percentage,
        "tier": r.tier,
        "tierLabel": tier_label(r.tier, lang),
        "recommendations": recs[:recs_max] if recs_max > 0 else recs,
    }


def build_report(
    result: AttemptResult,
    lang: str,
    *,
    catalog: Optional[Catalog] = None,
    resolver: Optional[RecommendationResolver] = None,
    recs_max: Optional[int] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Language-specific report payload for one attempt.

    Carries labels, tier labels, the top recommendations per competency,
    SWOT buckets and the whole-attempt advice. Layout is left to the caller.
    """

    check_lang(lang)
    catalog = catalog or load_catalog()
    resolver = resolver or default_resolver()
    n = cfg_defaults.REPORT_RECS_MAX if recs_max is None else int(recs_max)

    comps = [_competency_entry(r, lang, catalog, resolver, n) for r in result.competency_results]
    buckets = result.by_tier()
    swot: Dict[str, List[Dict[str, Any]]] = {
        _SWOT_KEYS[t]: [
            {"competencyId": r.competency_id, "label": catalog.label(r.competency_id, lang), "percentage": r.percentage}
            for r in buckets[t]
        ]
        for t in TIERS
    }

    return {
        "lang": lang,
        "dir": "rtl" if lang == "ar" else "ltr",
        "meta": dict(meta or {}),
        "competencies": comps,
        "total": {
            "percentage": result.total_percentage,
            "tier": result.total_tier,
            "tierLabel": tier_label(result.total_tier, lang),
            "score": result.total_score,
            "maxScore": result.total_max,
        },
        "swot": swot,
        "overall": {
            "tips": resolver.overall_tips(result.total_tier, lang),
            "advice": resolver.overall_score_advice(result.total_percentage, lang),
        },
    }


def write_report(report: Dict[str, Any], out_path: str) -> str:
    """Write the report payload as UTF-8 JSON and return the path."""

    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as f:
        json.dump(_to_basic(report), f, ensure_ascii=False, indent=2)
    return str(out)
