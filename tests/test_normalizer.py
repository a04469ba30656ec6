from __future__ import annotations

import pytest

from competency_core.competencies import load_catalog
from competency_core.normalizer import AliasTable, normalize, normalized_form


RAW_IDS = [
    "mental_toughness",
    "  Mental   Toughness ",
    "Follow-Up Discipline",
    "follow up discipline",
    "destroying_objections",
    "Handling Objections",
    "identifying_needs",
    "Identifying Needs",
    "Time & Territory Management",
    "الصلابة الذهنية",
    "القوة الذهنية",
    "إنشاء عروض لا تُقاوَم",
    "totally_unknown_xyz",
    "Totally Unknown-XYZ",
    "",
    "   ",
    "a - b",
]


def test_objection_aliases_converge():
    assert normalize("destroying_objections") == normalize("handling_objections") == normalize("Handling Objections")
    assert normalize("handling_objections") == "handling_objections"
    assert normalize("التعامل مع الاعتراضات") == "handling_objections"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  Mental   Toughness ", "mental_toughness"),
        ("Follow-Up Discipline", "follow_up_discipline"),
        ("identifying_needs", "identifying_real_needs"),
        ("Identifying Needs", "identifying_real_needs"),
        ("Irresistible Offers", "creating_irresistible_offers"),
        ("Time & Territory Management", "time_territory_management"),
        ("Dealing with Boss", "dealing_with_boss"),
        ("الصلابة الذهنية", "mental_toughness"),
        ("القوة الذهنية", "mental_toughness"),
        ("انضباط المتابعة", "follow_up_discipline"),
        ("مهارات التفاوض", "negotiation_skills"),
    ],
)
def test_known_spellings_resolve_to_canonical(raw, expected):
    assert normalize(raw) == expected


def test_unknown_ids_pass_through_in_normalized_form():
    assert normalize("Totally Unknown-XYZ") == "totally_unknown_xyz"
    assert normalize("totally_unknown_xyz") == "totally_unknown_xyz"
    assert normalize("") == ""


@pytest.mark.parametrize("raw", RAW_IDS)
def test_normalize_is_idempotent(raw):
    once = normalize(raw)
    assert normalize(once) == once


def test_every_canonical_key_is_identity():
    catalog = load_catalog()
    for key in catalog.order:
        assert normalize(key) == key
        assert normalized_form(key) == key


def test_injected_alias_table_is_used():
    table = AliasTable(["alpha_skill"], {"old alpha": "alpha_skill", "ألفا": "alpha_skill"})
    assert normalize("Old Alpha", table) == "alpha_skill"
    assert normalize("ألفا", table) == "alpha_skill"
    # the packaged aliases are not consulted
    assert normalize("destroying_objections", table) == "destroying_objections"


def test_alias_table_rejects_unknown_targets():
    with pytest.raises(ValueError):
        AliasTable(["alpha_skill"], {"beta": "beta_skill"})
