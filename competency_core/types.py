from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Mapping, Optional, Tuple
Tier = Literal["Strength","Opportunity","Threat","Weakness"]
Lang = Literal["en","ar"]
TIERS: Tuple[str, ...] = ("Strength", "Opportunity", "Threat", "Weakness")
LANGS: Tuple[str, ...] = ("en", "ar")
UNANSWERED: int = -1
@dataclass(frozen=True)
class Answer:
    question_id: str; competency_id: str; selected_score: int
@dataclass(frozen=True)
class TierThresholds:
    strength: int = 75
    opportunity: int = 50
    threat: int = 30

    def __post_init__(self) -> None:
        if not (self.strength > self.opportunity > self.threat >= 0):
            raise ValueError(
                f"tier thresholds must satisfy strength > opportunity > threat >= 0, got "
                f"{self.strength}/{self.opportunity}/{self.threat}"
            )
@dataclass(frozen=True)
class CompetencySpec:
    max_score: int
    display_names: Mapping[str, str] = field(default_factory=dict)
@dataclass(frozen=True)
class CompetencyResult:
    competency_id: str
    score: int
    max_score: int
    percentage: int
    tier: str
@dataclass(frozen=True)
class AttemptResult:
    competency_results: Tuple[CompetencyResult, ...]
    total_percentage: int
    total_tier: str
    total_score: Optional[int] = None
    total_max: Optional[int] = None

    def by_tier(self) -> Dict[str, List[CompetencyResult]]:
        out: Dict[str, List[CompetencyResult]] = {t: [] for t in TIERS}
        for r in self.competency_results:
            out.setdefault(r.tier, []).append(r)
        return out
