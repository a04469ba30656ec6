from __future__ import annotations

import csv
import importlib
import io
import sys

from fastapi.testclient import TestClient


def _reload_app(tmp_path, monkeypatch) -> tuple[object, object]:
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    if "api.storage" in sys.modules:
        importlib.reload(sys.modules["api.storage"])
    else:
        import api.storage  # noqa: F401
    storage = sys.modules["api.storage"]
    if "api.app" in sys.modules:
        importlib.reload(sys.modules["api.app"])
    else:
        import api.app  # noqa: F401
    app_module = sys.modules["api.app"]
    return storage, app_module


def _answers(scores: dict[str, list[int]]) -> list[dict]:
    return [
        {"questionId": f"{cid}_q{i}", "competencyId": cid, "selectedScore": s}
        for cid, values in scores.items()
        for i, s in enumerate(values)
    ]


def _submit(client, **overrides) -> dict:
    body = {
        "user_id": "u-1",
        "language": "ar",
        "assessment": "scan",
        "answers": _answers({
            "mental_toughness": [5, 5, 5, 5, 5],
            "Destroying Objections": [2, 2, 2, 2, 2],
            "follow_up_discipline": [-1, -1, -1],
        }),
    }
    body.update(overrides)
    r = client.post("/attempts", json=body)
    assert r.status_code == 200, r.text
    return r.json()


def test_health_and_assessment_config(tmp_path, monkeypatch):
    _, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)

    health = client.get("/health").json()
    assert health["assessments"] == ["outdoor_sales_mri", "outdoor_sales_scan"]
    assert health["thresholds"] == {"strength": 75, "opportunity": 50, "threat": 30}

    scan = client.get("/assessments/scan").json()
    assert scan["id"] == "outdoor_sales_scan"
    assert [c["maxScore"] for c in scan["competencies"]] == [25, 20, 20, 25, 20, 25, 15]
    assert scan["perQuestionMax"] is None

    mri = client.get("/assessments/mri").json()
    assert mri["perQuestionMax"] == 5
    assert len(mri["competencies"]) == 15

    assert client.get("/assessments/nope").status_code == 404


def test_submit_scores_and_persists(tmp_path, monkeypatch):
    storage, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)

    out = _submit(client)
    rows = {r["competencyId"]: r for r in out["competency_results"]}
    assert list(rows) == ["mental_toughness", "handling_objections", "follow_up_discipline"]
    assert rows["mental_toughness"]["tier"] == "Strength"
    assert rows["handling_objections"]["percentage"] == 40
    assert rows["follow_up_discipline"]["score"] == 0
    # (25 + 10 + 0) / (25 + 25 + 15)
    assert out["total_percentage"] == 54
    assert out["total_tier"] == "Opportunity"

    assert (storage.ATTEMPTS_DIR / f"{out['attemptId']}.json").exists()
    stored = client.get(f"/attempts/{out['attemptId']}").json()
    assert stored["language"] == "ar"
    assert stored["total_questions"] == 13
    assert stored["assessment_id"] == "outdoor_sales_scan"


def test_report_uses_stored_language_unless_overridden(tmp_path, monkeypatch):
    _, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)
    attempt_id = _submit(client)["attemptId"]

    ar = client.get(f"/attempts/{attempt_id}/report").json()
    assert ar["lang"] == "ar"
    assert ar["dir"] == "rtl"
    assert ar["competencies"][0]["label"] == "الصلابة الذهنية"
    assert ar["meta"]["attemptId"] == attempt_id
    assert ar["total"]["percentage"] == 54

    en = client.get(f"/attempts/{attempt_id}/report", params={"lang": "en"}).json()
    assert en["lang"] == "en"
    assert en["competencies"][1]["label"] == "Handling Objections"
    assert len(en["competencies"][0]["recommendations"]) == 3

    assert client.get(f"/attempts/{attempt_id}/report", params={"lang": "fr"}).status_code == 400


def test_results_csv(tmp_path, monkeypatch):
    _, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)
    attempt_id = _submit(client)["attemptId"]

    r = client.get(f"/attempts/{attempt_id}/results.csv", params={"lang": "en"})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    parsed = list(csv.DictReader(io.StringIO(r.text)))
    assert parsed[0]["competency_id"] == "mental_toughness"
    assert parsed[0]["percentage"] == "100"


def test_mri_attempt_budgets_by_answer_count(tmp_path, monkeypatch):
    _, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)
    out = _submit(client, assessment="mri", answers=_answers({"negotiation_skills": [5, 3, -1]}))
    (row,) = out["competency_results"]
    assert (row["competencyId"], row["maxScore"], row["percentage"]) == ("negotiation_skills", 15, 53)


def test_submit_validation(tmp_path, monkeypatch):
    _, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)

    assert client.post("/attempts", json={"language": "fr", "answers": []}).status_code == 422
    assert client.post("/attempts", json={"assessment": "nope", "answers": []}).status_code == 404
    bad = {"answers": [{"questionId": "q", "competencyId": "mental_toughness", "selectedScore": "lots"}]}
    assert client.post("/attempts", json=bad).status_code == 422


def test_empty_attempt_is_weakness(tmp_path, monkeypatch):
    _, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)
    out = _submit(client, answers=[])
    assert out["competency_results"] == []
    assert (out["total_percentage"], out["total_tier"]) == (0, "Weakness")


def test_user_listing_and_delete(tmp_path, monkeypatch):
    _, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)
    first = _submit(client)["attemptId"]
    second = _submit(client)["attemptId"]
    _submit(client, user_id="someone-else")

    listed = client.get("/users/u-1/attempts").json()["attempts"]
    assert {a["id"] for a in listed} == {first, second}
    assert all(a["assessmentId"] == "outdoor_sales_scan" for a in listed)

    assert client.delete(f"/attempts/{first}").json() == {"ok": True}
    assert client.get(f"/attempts/{first}").status_code == 404
    assert client.delete(f"/attempts/{first}").status_code == 404
    assert [a["id"] for a in client.get("/users/u-1/attempts").json()["attempts"]] == [second]


def test_missing_attempt_is_404(tmp_path, monkeypatch):
    _, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)
    assert client.get("/attempts/does-not-exist").status_code == 404
    assert client.get("/attempts/does-not-exist/report").status_code == 404
    assert client.get("/attempts/does-not-exist/results.csv").status_code == 404


def test_recommendations_endpoint(tmp_path, monkeypatch):
    _, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)

    r = client.get(
        "/recommendations",
        params={"competency": "Destroying Objections", "tier": "threat", "lang": "ar", "limit": 2},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["competency"] == "handling_objections"
    assert body["tier"] == "Threat"
    assert len(body["recommendations"]) == 2

    generic = client.get("/recommendations", params={"competency": "unknown_thing", "tier": "Strength"}).json()
    assert generic["recommendations"] == ["Leverage this strength daily", "Mentor others", "Set stretch goals"]

    assert client.get("/recommendations", params={"competency": "x", "tier": "Legendary"}).status_code == 400
    assert client.get("/recommendations", params={"competency": "x", "tier": "Strength", "lang": "fr"}).status_code == 400
