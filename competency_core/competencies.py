from __future__ import annotations
import json, logging
from pathlib import Path
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from .config import PER_QUESTION_MAX
from .normalizer import AliasTable
from .types import CompetencySpec, TierThresholds

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assessment:
    id: str
    titles: Mapping[str, str]
    competencies: Tuple[str, ...]
    max_scores: Optional[Mapping[str, CompetencySpec]]
    per_question_max: int
    thresholds: Optional[TierThresholds]

    @property
    def has_fixed_max_scores(self) -> bool:
        return self.max_scores is not None


@dataclass(frozen=True)
class Catalog:
    order: Tuple[str, ...]
    labels: Mapping[str, Mapping[str, str]]
    aliases: AliasTable
    routes: Mapping[str, str]
    assessments: Mapping[str, Assessment]

    def label(self, key: str, lang: str) -> str:
        meta = self.labels.get(key)
        if not meta:
            return key
        return meta.get(lang) or meta.get("en") or key

    def diagnostic(self, key: str, lang: str) -> Optional[str]:
        meta = self.labels.get(key) or {}
        return meta.get(f"diagnostic_{lang}")

    def resolve_assessment(self, slug_or_id: str) -> Optional[Assessment]:
        raw = str(slug_or_id or "").strip()
        aid = self.routes.get(raw, raw)
        return self.assessments.get(aid)


def _read_catalog() -> Dict[str, Any]:
    data = (Path(__file__).parent / "data" / "catalog.json").read_text(encoding="utf-8")
    return json.loads(data)


def _labels_for(labels: Mapping[str, Mapping[str, str]], key: str) -> Mapping[str, str]:
    meta = labels.get(key) or {}
    return MappingProxyType({lang: meta[lang] for lang in ("en", "ar") if meta.get(lang)})


def _build_assessment(aid: str, raw: Mapping[str, Any], order: Tuple[str, ...], labels) -> Assessment:
    max_raw = raw.get("max_scores")
    max_scores = None
    if isinstance(max_raw, Mapping):
        max_scores = MappingProxyType({
            key: CompetencySpec(max_score=int(val), display_names=_labels_for(labels, key))
            for key, val in max_raw.items()
        })
        comps = tuple(max_raw.keys())
    else:
        comps = tuple(raw.get("competencies") or order)
    th_raw = raw.get("tier_thresholds")
    thresholds = None
    if isinstance(th_raw, Mapping):
        thresholds = TierThresholds(
            strength=int(th_raw.get("strength", 75)),
            opportunity=int(th_raw.get("opportunity", 50)),
            threat=int(th_raw.get("threat", 30)),
        )
    titles = MappingProxyType({
        lang: raw[f"title_{lang}"] for lang in ("en", "ar") if raw.get(f"title_{lang}")
    })
    return Assessment(
        id=aid,
        titles=titles,
        competencies=comps,
        max_scores=max_scores,
        per_question_max=int(raw.get("per_question_max", PER_QUESTION_MAX)),
        thresholds=thresholds,
    )


def build_catalog(raw: Mapping[str, Any]) -> Catalog:
    order = tuple(raw.get("order") or ())
    labels = {k: dict(v) for k, v in (raw.get("competencies") or {}).items()}
    aliases = AliasTable(order, raw.get("aliases") or {})
    assessments = {
        aid: _build_assessment(aid, body, order, labels)
        for aid, body in (raw.get("assessments") or {}).items()
    }
    for a in assessments.values():
        stray = [k for k in a.competencies if k not in aliases]
        if stray:
            log.warning("assessment %s budgets non-canonical competencies: %s", a.id, stray)
    return Catalog(
        order=order,
        labels=MappingProxyType({k: MappingProxyType(v) for k, v in labels.items()}),
        aliases=aliases,
        routes=MappingProxyType(dict(raw.get("routes") or {})),
        assessments=MappingProxyType(assessments),
    )


@lru_cache(maxsize=None)
def load_catalog() -> Catalog:
    """Packaged competency catalog, parsed once per process."""

    return build_catalog(_read_catalog())


def config_from_question_counts(
    counts: Mapping[str, int],
    per_question_max: int = PER_QUESTION_MAX,
    labels: Optional[Mapping[str, Mapping[str, str]]] = None,
) -> Dict[str, CompetencySpec]:
    """Budget each competency as ``questions * per_question_max``."""

    out: Dict[str, CompetencySpec] = {}
    for key, n in counts.items():
        out[key] = CompetencySpec(
            max_score=int(n) * int(per_question_max),
            display_names=dict((labels or {}).get(key) or {}),
        )
    return out


__all__ = [
    "Assessment",
    "Catalog",
    "build_catalog",
    "load_catalog",
    "config_from_question_counts",
]
