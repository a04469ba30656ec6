from __future__ import annotations
import os, json, logging, pathlib

from .types import TierThresholds

log = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


TIER_STRENGTH_MIN: int = 75
TIER_OPPORTUNITY_MIN: int = 50
TIER_THREAT_MIN: int = 30

UNANSWERED_SCORE: int = 0
PER_QUESTION_MAX: int = 5

DEFAULT_ASSESSMENT: str = "outdoor_sales_scan"
DEFAULT_LANG: str = "en"

REPORT_RECS_MAX: int = 3

SCORING_TRACE: bool = False
TRACE_FIELDS: tuple[str, ...] = (
    "competency_id",
    "answers",
    "score",
    "max_score",
    "percentage",
    "tier",
)
# // env overrides for staging/ops; defaults remain the published thresholds.
TIER_STRENGTH_MIN = _env_int("TIER_STRENGTH_MIN", TIER_STRENGTH_MIN)
TIER_OPPORTUNITY_MIN = _env_int("TIER_OPPORTUNITY_MIN", TIER_OPPORTUNITY_MIN)
TIER_THREAT_MIN = _env_int("TIER_THREAT_MIN", TIER_THREAT_MIN)
REPORT_RECS_MAX = _env_int("REPORT_RECS_MAX", REPORT_RECS_MAX)
DEFAULT_ASSESSMENT = _env_str("DEFAULT_ASSESSMENT", DEFAULT_ASSESSMENT)
SCORING_TRACE = _env_bool("SCORING_TRACE", False)


def tier_thresholds(strength: int, opportunity: int, threat: int) -> TierThresholds:
    """Validated thresholds; an inconsistent set falls back to 75/50/30 with a warning."""
    try:
        return TierThresholds(strength=strength, opportunity=opportunity, threat=threat)
    except ValueError as e:
        log.warning("ignoring tier threshold override (%s); using defaults", e)
        return TierThresholds()


TIER_THRESHOLDS: TierThresholds = tier_thresholds(TIER_STRENGTH_MIN, TIER_OPPORTUNITY_MIN, TIER_THREAT_MIN)
TIER_STRENGTH_MIN = TIER_THRESHOLDS.strength
TIER_OPPORTUNITY_MIN = TIER_THRESHOLDS.opportunity
TIER_THREAT_MIN = TIER_THRESHOLDS.threat


def _env_true(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1","true","yes","on")
def load_config(path: str = "config.json") -> dict:
    cfg = {}
    p = pathlib.Path(path)
    if p.exists():
        try: cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError): cfg = {}
    e = os.environ
    for k in ("TIER_STRENGTH_MIN","TIER_OPPORTUNITY_MIN","TIER_THREAT_MIN","REPORT_RECS_MAX"):
        if e.get(k): cfg[k] = _env_int(k, cfg.get(k, 0))
    if e.get("DEFAULT_ASSESSMENT"): cfg["DEFAULT_ASSESSMENT"] = e.get("DEFAULT_ASSESSMENT")
    if e.get("SCORING_TRACE"): cfg["SCORING_TRACE"] = _env_true("SCORING_TRACE")
    return cfg
