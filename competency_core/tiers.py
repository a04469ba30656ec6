# competency_core/tiers.py
from __future__ import annotations
import math
from typing import Any, Mapping, Optional

from . import config as cfg_defaults
from .types import TIERS, TierThresholds

_TIER_ORDER = {"Weakness": 0, "Threat": 1, "Opportunity": 2, "Strength": 3}
_TIER_LOOKUP = {t.lower(): t for t in TIERS}
_TIER_LABELS = {
    "Strength": {"en": "Strength", "ar": "نقطة قوة"},
    "Opportunity": {"en": "Opportunity", "ar": "فرصة"},
    "Threat": {"en": "Threat", "ar": "تهديد"},
    "Weakness": {"en": "Weakness", "ar": "نقطة ضعف"},
}

def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))

def clamp_pct(value: Any) -> int:
    try: x = float(value)
    except (TypeError, ValueError): return 0
    if math.isnan(x): return 0
    if x < 0: return 0
    if x > 100: return 100
    return round_half_up(x)

def percentage(score: float, max_score: float) -> int:
    if max_score <= 0: return 0
    return clamp_pct(score * 100.0 / max_score)

def default_thresholds(cfg: Optional[Mapping[str, Any]] = None) -> TierThresholds:
    base = cfg_defaults.TIER_THRESHOLDS
    if not cfg: return base
    return cfg_defaults.tier_thresholds(
        int(cfg.get("TIER_STRENGTH_MIN", base.strength)),
        int(cfg.get("TIER_OPPORTUNITY_MIN", base.opportunity)),
        int(cfg.get("TIER_THREAT_MIN", base.threat)),
    )

def tier(pct: float, thresholds: Optional[TierThresholds] = None) -> str:
    t = thresholds or default_thresholds()
    p = float(pct)
    if p >= t.strength: return "Strength"
    if p >= t.opportunity: return "Opportunity"
    if p >= t.threat: return "Threat"
    return "Weakness"

def tier_rank(value: str) -> int:
    return _TIER_ORDER.get(coerce_tier(value) or "", -1)

def coerce_tier(value: Any) -> Optional[str]:
    return _TIER_LOOKUP.get(str(value or "").strip().lower())

def tier_label(value: str, lang: str) -> str:
    t = coerce_tier(value)
    if t is None: return str(value)
    return _TIER_LABELS[t].get(lang, t)
