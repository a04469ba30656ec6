"""Pre-authored guidance text keyed by (competency, tier, language).

The text itself lives in ``data/recommendations.json``. Lookups go through
the competency normalizer, and any competency without its own block falls
back to the generic advice for the tier, so a valid tier always yields
something to show.
"""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .competencies import load_catalog
from .normalizer import AliasTable
from .tiers import clamp_pct, coerce_tier
from .types import LANGS, TIERS

log = logging.getLogger(__name__)

_DATA_PATH = Path(__file__).parent / "data" / "recommendations.json"


class InvalidLanguage(ValueError):
    """Raised when a language code other than ``en``/``ar`` is requested."""

    def __init__(self, lang: Any):
        super().__init__(f"unsupported language {lang!r}; expected one of {', '.join(LANGS)}")
        self.lang = lang


def check_lang(lang: Any) -> str:
    if lang not in LANGS:
        raise InvalidLanguage(lang)
    return lang


Block = Mapping[str, Tuple[str, ...]]


def _block(raw: Mapping[str, Any]) -> Block:
    return MappingProxyType({
        lang: tuple(str(s) for s in (raw.get(lang) or []) if s)
        for lang in LANGS
    })


def _tiered(raw: Mapping[str, Any]) -> Mapping[str, Block]:
    return MappingProxyType({t: _block(raw[t]) for t in TIERS if t in raw})


class RecommendationResolver:
    """Stateless lookup over read-only recommendation tables."""

    def __init__(
        self,
        table: Mapping[str, Mapping[str, Any]],
        generic: Mapping[str, Any],
        aliases: AliasTable,
        overall_tips: Optional[Mapping[str, Any]] = None,
        score_bands: Optional[Sequence[Mapping[str, Any]]] = None,
    ):
        missing = [t for t in TIERS for lang in LANGS if not (generic.get(t) or {}).get(lang)]
        if missing:
            raise ValueError(f"generic recommendations missing for tiers: {sorted(set(missing))}")
        self._aliases = aliases
        self._table = MappingProxyType({
            aliases.normalize(key): _tiered(tiers) for key, tiers in table.items()
        })
        self._generic = _tiered(generic)
        self._overall = _tiered(overall_tips or {})
        bands = sorted(score_bands or [], key=lambda b: int(b.get("min", 0)), reverse=True)
        self._bands: Tuple[Tuple[int, Block], ...] = tuple((int(b.get("min", 0)), _block(b)) for b in bands)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], aliases: AliasTable) -> "RecommendationResolver":
        return cls(
            table=raw.get("competencies") or {},
            generic=raw.get("generic") or {},
            aliases=aliases,
            overall_tips=raw.get("overall_tips"),
            score_bands=raw.get("overall_score_bands"),
        )

    def competencies(self) -> List[str]:
        return list(self._table.keys())

    def has_specific(self, competency_id: str, tier: str, lang: Optional[str] = None) -> bool:
        """True when the competency has its own text for ``tier`` (in ``lang``, when given)."""
        t = coerce_tier(tier)
        key = self._aliases.normalize(competency_id)
        block = self._table.get(key, {}).get(t) if t else None
        if block is None:
            return False
        if lang is None:
            return True
        return bool(block.get(lang))

    def get(self, competency_id: str, tier: str, lang: str) -> List[str]:
        check_lang(lang)
        t = coerce_tier(tier)
        if t is None:
            log.warning("no recommendations for unknown tier %r", tier)
            return []
        key = self._aliases.normalize(competency_id)
        block = self._table.get(key, {}).get(t)
        if block and block.get(lang):
            return list(block[lang])
        log.debug("generic %s recommendations for %r", t, key)
        return list(self._generic[t][lang])

    def overall_tips(self, tier: str, lang: str) -> List[str]:
        check_lang(lang)
        t = coerce_tier(tier)
        block = self._overall.get(t) if t else None
        if not block:
            return []
        return list(block[lang])

    def overall_score_advice(self, total_percentage: Any, lang: str) -> List[str]:
        check_lang(lang)
        pct = clamp_pct(total_percentage)
        for minimum, block in self._bands:
            if pct >= minimum:
                return list(block[lang])
        return []


def _read_recommendations() -> Dict[str, Any]:
    return json.loads(_DATA_PATH.read_text(encoding="utf-8"))


@lru_cache(maxsize=None)
def default_resolver() -> RecommendationResolver:
    return RecommendationResolver.from_dict(_read_recommendations(), load_catalog().aliases)


def get_recommendations(
    competency_id: str,
    tier: str,
    lang: str,
    resolver: Optional[RecommendationResolver] = None,
) -> List[str]:
    """Ordered guidance for ``(competency_id, tier, lang)``.

    Raises ``InvalidLanguage`` for anything but ``"en"``/``"ar"``. Unknown
    competencies get the generic advice for the tier.
    """

    return (resolver or default_resolver()).get(competency_id, tier, lang)


__all__ = [
    "InvalidLanguage",
    "RecommendationResolver",
    "check_lang",
    "default_resolver",
    "get_recommendations",
]
