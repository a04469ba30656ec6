from __future__ import annotations
import sys
from competency_core.competencies import load_catalog
from competency_core.recommendations import default_resolver
from competency_core.types import LANGS, TIERS

def coverage_gaps(keys=None, resolver=None) -> list[tuple[str, str, str]]:
    """(competency, tier, lang) triples served only by the generic fallback."""
    resolver = resolver or default_resolver()
    gaps = []
    for key in keys or load_catalog().order:
        for tier in TIERS:
            for lang in LANGS:
                if not resolver.has_specific(key, tier, lang):
                    gaps.append((key, tier, lang))
    return gaps

def main():
    catalog = load_catalog()
    scan = catalog.resolve_assessment("scan")
    keys = list(scan.competencies) if scan else list(catalog.order)
    print(f"Checking {len(keys)} competencies x {len(TIERS)} tiers x {len(LANGS)} languages.\n")
    gaps = coverage_gaps(keys)
    for key in keys:
        mine = [g for g in gaps if g[0] == key]
        if mine:
            print(f"{key}: generic fallback for " + ", ".join(f"{t}/{l}" for _, t, l in mine))
        else:
            print(f"{key}: ✓ full coverage")
    extra = [k for k in catalog.order if k not in keys]
    if extra:
        print(f"\nServed by generic fallback only: {', '.join(extra)}")
    return 1 if gaps else 0

if __name__ == "__main__":
    sys.exit(main())
