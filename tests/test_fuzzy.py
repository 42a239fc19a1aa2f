# tests/test_fuzzy.py

from perkscan.parsing.fuzzy import (
    apply_ocr_corrections,
    find_fuzzy_alias,
    fuzzy_match,
    positional_similarity,
)
from perkscan.parsing.issuers import CHASE_CONFIG


def test_apply_ocr_corrections():
    assert apply_ocr_corrections("zenni 0ptical", {"0": "o"}) == "zenni optical"
    assert apply_ocr_corrections("tum", {"rn": "m"}) == "tum"
    assert apply_ocr_corrections("turn", {"rn": "m"}) == "tum"


def test_positional_similarity():
    assert positional_similarity("turo", "turo") == 1.0
    assert positional_similarity("dysom", "dyson") == 0.8
    # lengths too far apart
    assert positional_similarity("abcdef", "ab") == 0.0
    assert positional_similarity("", "") == 0.0


def test_fuzzy_match_after_corrections():
    corrections = CHASE_CONFIG.ocr_corrections
    assert fuzzy_match("Tur0", "turo", corrections)
    assert fuzzy_match("Dys0n", "dyson", corrections)
    assert fuzzy_match("Patagomia", "patagonia", {})
    assert not fuzzy_match("Turbo Tax", "turo", corrections)


def test_find_fuzzy_alias_returns_canonical_name():
    found = find_fuzzy_alias("Dys0n", CHASE_CONFIG.merchant_aliases, CHASE_CONFIG.ocr_corrections)
    assert found == "Dyson"
    missing = find_fuzzy_alias("Blue Apron", CHASE_CONFIG.merchant_aliases, CHASE_CONFIG.ocr_corrections)
    assert missing is None
