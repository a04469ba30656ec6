# competency_core/scoring.py
from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .competencies import Assessment, config_from_question_counts, load_catalog
from . import config as cfg_defaults
from .config import TRACE_FIELDS, UNANSWERED_SCORE
from .normalizer import AliasTable
from .tiers import clamp_pct, percentage, tier
from .types import Answer, AttemptResult, CompetencyResult, CompetencySpec, TierThresholds, UNANSWERED
from .validators import coerce_answer, finite_number, stored_competency_id, stored_int, stored_percentage

log = logging.getLogger(__name__)


def _emit_trace(**values: object) -> None:
    if not cfg_defaults.SCORING_TRACE:
        return
    ordered = []
    for key in TRACE_FIELDS:
        if key in values:
            ordered.append(f"{key}={values[key]}")
    if ordered:
        log.info("trace %s", " ".join(str(val) for val in ordered))


def _aliases(aliases: Optional[AliasTable]) -> AliasTable:
    return aliases if aliases is not None else load_catalog().aliases


def _order(keys: Iterable[str], canonical: Sequence[str]) -> List[str]:
    """Canonical keys first in canonical order, then the rest in first-seen order."""

    seen = list(dict.fromkeys(keys))
    present = set(seen)
    head = [k for k in canonical if k in present]
    known = set(canonical)
    return head + [k for k in seen if k not in known]


def credited_score(answer: Answer) -> int:
    # unanswered (incl. time ran out) earns nothing
    if answer.selected_score == UNANSWERED:
        return UNANSWERED_SCORE
    return int(answer.selected_score)


def aggregate(answers: Iterable[Any], aliases: Optional[AliasTable] = None) -> Tuple[Dict[str, int], Dict[str, int]]:
    """Sum credited scores per normalized competency.

    Returns ``(raw_scores, answer_counts)``, both in first-seen order.
    """

    table = _aliases(aliases)
    raw: Dict[str, int] = {}
    counts: Dict[str, int] = {}
    for a in answers or []:
        ans = coerce_answer(a)
        key = table.normalize(ans.competency_id)
        raw[key] = raw.get(key, 0) + credited_score(ans)
        counts[key] = counts.get(key, 0) + 1
    return raw, counts


def score_attempt(
    answers: Iterable[Any],
    config: Mapping[str, CompetencySpec],
    thresholds: Optional[TierThresholds] = None,
    aliases: Optional[AliasTable] = None,
) -> AttemptResult:
    """Score one attempt against a per-competency max-score table.

    Competencies missing from ``config`` (or budgeted at ``max_score <= 0``)
    are left out of the result. The total is weighted by max score:
    ``sum(score) / sum(max_score)``.
    """

    table = _aliases(aliases)
    raw, counts = aggregate(answers, table)
    budget: Dict[str, CompetencySpec] = {}
    for name, spec in (config or {}).items():
        key = table.normalize(name)
        if key in budget:
            log.warning("duplicate max score for %r (from %r); keeping the first", key, name)
            continue
        budget[key] = spec

    results: Dict[str, CompetencyResult] = {}
    for key, score in raw.items():
        spec = budget.get(key)
        if spec is None:
            log.warning("dropping competency %r: no max score configured (%d answers)", key, counts[key])
            continue
        if spec.max_score <= 0:
            log.warning("dropping competency %r: invalid max score %r", key, spec.max_score)
            continue
        pct = percentage(score, spec.max_score)
        t = tier(pct, thresholds)
        results[key] = CompetencyResult(
            competency_id=key,
            score=score,
            max_score=int(spec.max_score),
            percentage=pct,
            tier=t,
        )
        _emit_trace(competency_id=key, answers=counts[key], score=score,
                    max_score=spec.max_score, percentage=pct, tier=t)

    ordered = tuple(results[k] for k in _order(results.keys(), table.canonical))
    total_score = sum(r.score for r in ordered)
    total_max = sum(r.max_score for r in ordered)
    total_pct = percentage(total_score, total_max) if total_max > 0 else 0
    log.debug("scored %d competencies: %d/%d -> %d%%", len(ordered), total_score, total_max, total_pct)
    return AttemptResult(
        competency_results=ordered,
        total_percentage=total_pct,
        total_tier=tier(total_pct, thresholds),
        total_score=total_score,
        total_max=total_max,
    )


def config_for_assessment(
    assessment: Assessment,
    answers: Optional[Iterable[Any]] = None,
    aliases: Optional[AliasTable] = None,
) -> Dict[str, CompetencySpec]:
    """Max-score table for ``assessment``.

    Assessments without a fixed table budget each of their competencies by
    the number of questions answered for it.
    """

    if assessment.max_scores is not None:
        return dict(assessment.max_scores)
    _, counts = aggregate(answers or [], aliases)
    catalog = load_catalog()
    budgeted = {k: n for k, n in counts.items() if k in assessment.competencies}
    return config_from_question_counts(budgeted, assessment.per_question_max, catalog.labels)


def score_for_assessment(
    answers: Iterable[Any],
    assessment: Assessment,
    thresholds: Optional[TierThresholds] = None,
    aliases: Optional[AliasTable] = None,
) -> AttemptResult:
    answers = [coerce_answer(a) for a in answers]
    cfg = config_for_assessment(assessment, answers, aliases)
    return score_attempt(answers, cfg, thresholds or assessment.thresholds, aliases)


def average_percentage(results: Sequence[CompetencyResult]) -> int:
    if not results:
        return 0
    return clamp_pct(sum(r.percentage for r in results) / len(results))


def rebuild_attempt(
    rows: Iterable[Mapping[str, Any]],
    stored_total: Any = None,
    thresholds: Optional[TierThresholds] = None,
    aliases: Optional[AliasTable] = None,
) -> AttemptResult:
    """Re-derive an ``AttemptResult`` from persisted result rows.

    Tiers are recomputed from the percentage. The stored total wins when it is
    a finite number; otherwise the unweighted mean of percentages is used.
    Rows without an id or a percentage are skipped; the first row wins when
    two rows normalize to the same competency.
    """

    table = _aliases(aliases)
    results: Dict[str, CompetencyResult] = {}
    for row in rows or []:
        if not isinstance(row, Mapping):
            log.warning("skipping stored result row of type %s", type(row).__name__)
            continue
        cid = stored_competency_id(row)
        pct_raw = stored_percentage(row)
        if cid is None or pct_raw is None:
            log.warning("skipping stored result row without id/percentage: %r", row)
            continue
        key = table.normalize(cid)
        if key in results:
            log.warning("duplicate stored row for %r (from %r); keeping the first", key, cid)
            continue
        pct = clamp_pct(pct_raw)
        score = stored_int(row, ("score",))
        max_score = stored_int(row, ("maxScore", "max_score"))
        results[key] = CompetencyResult(
            competency_id=key,
            score=score if score is not None else 0,
            max_score=max_score if max_score is not None else 0,
            percentage=pct,
            tier=tier(pct, thresholds),
        )

    ordered = tuple(results[k] for k in _order(results.keys(), table.canonical))
    db_total = finite_number(stored_total)
    total_pct = clamp_pct(db_total) if db_total is not None else average_percentage(ordered)
    return AttemptResult(
        competency_results=ordered,
        total_percentage=total_pct,
        total_tier=tier(total_pct, thresholds),
    )


def result_to_dict(res: AttemptResult) -> Dict[str, Any]:
    return {
        "competency_results": [
            {
                "competencyId": r.competency_id,
                "score": r.score,
                "maxScore": r.max_score,
                "percentage": r.percentage,
                "tier": r.tier,
            }
            for r in res.competency_results
        ],
        "total_percentage": res.total_percentage,
        "total_tier": res.total_tier,
        "total_score": res.total_score,
        "total_max": res.total_max,
    }


__all__ = [
    "aggregate",
    "average_percentage",
    "config_for_assessment",
    "credited_score",
    "rebuild_attempt",
    "result_to_dict",
    "score_attempt",
    "score_for_assessment",
]
