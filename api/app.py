from __future__ import annotations
from fastapi import FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field
import logging, os, uuid, typing as t

# ---- Core imports ----
from competency_core.competencies import Assessment, load_catalog
from competency_core.config import DEFAULT_ASSESSMENT, DEFAULT_LANG, load_config
from competency_core.export import rows as export_rows, to_csv as export_csv
from competency_core.recommendations import InvalidLanguage, default_resolver
from competency_core.reporting import build_report
from competency_core.scoring import rebuild_attempt, result_to_dict, score_for_assessment
from competency_core.tiers import coerce_tier, default_thresholds
from competency_core.types import Answer, LANGS
from .storage import (
    delete_attempt,
    list_attempts_for_user,
    load_attempt,
    save_attempt,
    utcnow_iso,
)

log = logging.getLogger(__name__)

CFG = load_config()
THRESHOLDS = default_thresholds(CFG)
RECS_MAX = int(CFG.get("REPORT_RECS_MAX", 3))

app = FastAPI(title="Sales Competency API")


@app.get("/")
def root():
    return {"status": "ok", "service": "sales-competency-api"}


ALLOWED_ORIGINS = [
    o.strip() for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",") if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

# ---- Schemas ----
class AnswerIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_id: str = Field(alias="questionId")
    competency_id: str = Field(alias="competencyId")
    selected_score: int = Field(-1, alias="selectedScore")  # -1 = unanswered

class SubmitReq(BaseModel):
    user_id: str | None = None
    language: t.Literal["en", "ar"] = "en"
    assessment: str = DEFAULT_ASSESSMENT  # route slug ("scan"|"mri") or assessment id
    answers: list[AnswerIn] = []
    timed_out: bool = False

# ---- Helpers ----
def _assessment_or_404(slug_or_id: str) -> Assessment:
    a = load_catalog().resolve_assessment(slug_or_id)
    if a is None:
        raise HTTPException(404, f"assessment not found: {slug_or_id}")
    return a


def _attempt_or_404(attempt_id: str) -> dict[str, t.Any]:
    record = load_attempt(attempt_id)
    if not record:
        raise HTTPException(404, "attempt not found")
    return record


def _pick_lang(query_lang: str | None, stored_lang: t.Any) -> str:
    if query_lang is not None:
        lang = query_lang.strip().lower()
        if lang not in LANGS:
            raise HTTPException(400, str(InvalidLanguage(query_lang)))
        return lang
    stored = str(stored_lang or "").lower()
    return stored if stored in LANGS else DEFAULT_LANG


def _stored_result(record: dict[str, t.Any]):
    a = load_catalog().resolve_assessment(record.get("assessment_id") or "")
    thresholds = (a.thresholds if a and a.thresholds else THRESHOLDS)
    return rebuild_attempt(
        record.get("competency_results") or [],
        record.get("total_percentage"),
        thresholds,
    )

# ---- Health ----
@app.get("/health")
def health():
    return {
        "assessments": sorted(load_catalog().assessments.keys()),
        "thresholds": {
            "strength": THRESHOLDS.strength,
            "opportunity": THRESHOLDS.opportunity,
            "threat": THRESHOLDS.threat,
        },
    }

# ---- Assessments ----
@app.get("/assessments/{slug}")
def assessment_config(slug: str):
    a = _assessment_or_404(slug)
    catalog = load_catalog()
    return {
        "id": a.id,
        "titles": dict(a.titles),
        "competencies": [
            {
                "id": key,
                "labels": {lang: catalog.label(key, lang) for lang in LANGS},
                "maxScore": a.max_scores[key].max_score if a.max_scores and key in a.max_scores else None,
            }
            for key in a.competencies
        ],
        "perQuestionMax": None if a.has_fixed_max_scores else a.per_question_max,
        "tierThresholds": vars(a.thresholds) if a.thresholds else vars(THRESHOLDS),
    }

# ---- Attempts ----
@app.post("/attempts")
def submit_attempt(req: SubmitReq):
    a = _assessment_or_404(req.assessment)
    answers = [
        Answer(question_id=x.question_id, competency_id=x.competency_id, selected_score=x.selected_score)
        for x in req.answers
    ]
    res = score_for_assessment(answers, a, a.thresholds or THRESHOLDS)
    attempt_id = str(uuid.uuid4())
    created = utcnow_iso()
    payload = result_to_dict(res)
    record = {
        "id": attempt_id,
        "user_id": req.user_id,
        "assessment_id": a.id,
        "language": req.language,
        "timed_out": req.timed_out,
        "answers": [x.model_dump(by_alias=True) for x in req.answers],
        "total_questions": len(answers),
        "created_at": created,
        **payload,
    }
    metadata = {
        "userId": req.user_id,
        "assessmentId": a.id,
        "createdAt": created,
        "totalPercentage": res.total_percentage,
        "totalTier": res.total_tier,
    }
    save_attempt(attempt_id, record, metadata)
    log.info("attempt %s scored %d%% (%s) over %d answers", attempt_id, res.total_percentage, a.id, len(answers))
    return {"attemptId": attempt_id, **payload}


@app.get("/attempts/{attempt_id}")
def get_attempt(attempt_id: str):
    return _attempt_or_404(attempt_id)


@app.get("/attempts/{attempt_id}/report")
def get_report(attempt_id: str, lang: str | None = Query(None, description="en | ar; defaults to the attempt language")):
    record = _attempt_or_404(attempt_id)
    report_lang = _pick_lang(lang, record.get("language"))
    res = _stored_result(record)
    meta = {
        "attemptId": attempt_id,
        "userId": record.get("user_id"),
        "assessmentId": record.get("assessment_id"),
        "createdAt": record.get("created_at"),
    }
    return build_report(res, report_lang, recs_max=RECS_MAX, meta=meta)


@app.get("/attempts/{attempt_id}/results.csv")
def get_results_csv(attempt_id: str, lang: str | None = Query(None)):
    record = _attempt_or_404(attempt_id)
    report_lang = _pick_lang(lang, record.get("language"))
    body = export_csv(export_rows(_stored_result(record), report_lang))
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{attempt_id}_results.csv\""},
    )


@app.delete("/attempts/{attempt_id}")
def delete_attempt_endpoint(attempt_id: str):
    if not delete_attempt(attempt_id):
        raise HTTPException(404, "attempt not found")
    return {"ok": True}


@app.get("/users/{user_id}/attempts")
def list_attempts(user_id: str):
    return {"attempts": list_attempts_for_user(user_id)}

# ---- Recommendations ----
@app.get("/recommendations")
def recommendations(
    competency: str,
    tier: str,
    lang: str = "en",
    limit: int | None = Query(None, ge=1),
):
    if coerce_tier(tier) is None:
        raise HTTPException(400, f"unknown tier: {tier}")
    try:
        recs = default_resolver().get(competency, tier, lang)
    except InvalidLanguage as e:
        raise HTTPException(400, str(e))
    return {
        "competency": load_catalog().aliases.normalize(competency),
        "tier": coerce_tier(tier),
        "lang": lang,
        "recommendations": recs[:limit] if limit else recs,
    }
