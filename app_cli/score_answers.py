from __future__ import annotations
import argparse, json, logging, os, sys
from competency_core.competencies import load_catalog
from competency_core.recommendations import InvalidLanguage
from competency_core.reporting import build_report, write_report
from competency_core.scoring import score_for_assessment
from competency_core.validators import coerce_answers
def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Score an answers JSON file and print the report.")
    ap.add_argument("answers", help="JSON file: a list of {questionId, competencyId, selectedScore}")
    ap.add_argument("--assessment", default=os.getenv("DEFAULT_ASSESSMENT", "scan"), help="route slug or assessment id")
    ap.add_argument("--lang", default="en")
    ap.add_argument("--out", default=None, help="also write the report JSON here")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    a = load_catalog().resolve_assessment(args.assessment)
    if a is None:
        print(f"Unknown assessment: {args.assessment}", file=sys.stderr); return 2
    with open(args.answers, "r", encoding="utf-8") as f:
        raw = json.load(f)
    try:
        answers = coerce_answers(raw.get("answers", []) if isinstance(raw, dict) else raw)
    except ValueError as e:
        print(f"Bad answers file: {e}", file=sys.stderr); return 2
    res = score_for_assessment(answers, a)
    try:
        report = build_report(res, args.lang, meta={"assessmentId": a.id})
    except InvalidLanguage as e:
        print(str(e), file=sys.stderr); return 2
    if args.out:
        print(f"Report saved to: {write_report(report, args.out)}", file=sys.stderr)
    print(json.dumps(report, ensure_ascii=False, indent=2))
    return 0
if __name__ == "__main__": sys.exit(main())
