from __future__ import annotations

import pytest

from competency_core.competencies import load_catalog
from competency_core.types import Answer, CompetencySpec


def build_answers(scores: dict[str, list[int]]) -> list[Answer]:
    """Create deterministic answers: one per listed score, grouped by competency."""

    answers: list[Answer] = []
    for competency, values in scores.items():
        for idx, value in enumerate(values):
            answers.append(
                Answer(
                    question_id=f"{competency}_q{idx}",
                    competency_id=competency,
                    selected_score=value,
                )
            )
    return answers


def build_config(max_scores: dict[str, int]) -> dict[str, CompetencySpec]:
    return {key: CompetencySpec(max_score=val) for key, val in max_scores.items()}


def scan_answers(score: int = 5) -> list[Answer]:
    """Every scan competency answered at ``score`` up to its max (five-point items)."""

    scan = load_catalog().resolve_assessment("scan")
    out: dict[str, list[int]] = {}
    for key, spec in scan.max_scores.items():
        out[key] = [score] * (spec.max_score // 5)
    return build_answers(out)


@pytest.fixture
def scan_config() -> dict[str, CompetencySpec]:
    return dict(load_catalog().resolve_assessment("scan").max_scores)
