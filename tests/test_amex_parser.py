# tests/test_amex_parser.py

import pytest
from perkscan.parsing.strategies.amex_parser import (
    AmexParser,
    clean_ocr_text,
    extract_amex_offer_value,
    normalize_expiration,
)


@pytest.fixture
def parser():
    return AmexParser()


@pytest.fixture
def mock_amex_lines():
    """Amex Offers screen as OCR returns it, glyph noise included."""
    return [
        "4:36",
        "8, Al ©",
        "Home Membership Offers Account",
        "NORDSTROM",
        "Nordstrom & Nordstrom Rack",
        "Q",
        "Spend $80 or more, earn $20 back",
        "42",
        "Exp 11/30/25",
        "Shake Shack",
        "Soo [Earn 20% back on purchases",
        "of $30+ total. Exp 02/14/2025",
        "Terms apply",
    ]


def test_amex_parser(parser, mock_amex_lines):
    perks = parser.parse_lines(mock_amex_lines)

    assert [p.merchant for p in perks] == ["Nordstrom & Nordstrom Rack", "Shake Shack"]

    nordstrom, shake_shack = perks
    assert nordstrom.value == "$80"
    assert nordstrom.expiration == "11/30/2025"

    assert shake_shack.value == "20%"
    assert shake_shack.expiration == "02/14/2025"
    assert "20%" in shake_shack.description
    assert all(p.confidence == 0.85 for p in perks)


def test_shake_shack_end_to_end(parser):
    lines = ["Shake Shack", "Soo [Earn 20% back on purchases", "of $30+ total. Exp 02/14/2025"]

    perks = parser.parse_lines(lines)

    assert len(perks) == 1
    assert perks[0].merchant == "Shake Shack"
    assert perks[0].value == "20%"
    assert perks[0].expiration == "02/14/2025"
    assert "20%" in perks[0].description


def test_glued_expiration_is_repaired(parser):
    perks = parser.parse_lines(["Peacock", "Spend $10.99 or more, earn $10 back", "Exp 1112/25"])

    assert perks[0].merchant == "Peacock"
    assert perks[0].expiration == "11/12/2025"
    assert perks[0].value == "$10"


def test_expiration_on_offer_line_is_kept_out_of_description(parser):
    perks = parser.parse_lines(["Shake Shack", "Earn 20% back, up to $15. Exp 03/01/26"])

    assert perks[0].expiration == "03/01/2026"
    assert "Exp" not in perks[0].description
    assert perks[0].value == "20%"


def test_ocr_artifacts_are_cleaned_from_description(parser):
    lines = [
        "Walmart+ Annual Membership",
        "Spend $98 or more on Walmart+2",
        "earn = $40 back AF",
    ]

    perks = parser.parse_lines(lines)

    assert perks[0].merchant == "Walmart+ Annual Membership"
    assert perks[0].description == "Spend $98 or more on earn $40 back"
    assert perks[0].value == "$98"
    assert perks[0].expiration is None


def test_badge_before_merchant_name(parser):
    lines = ["CD Shake Shack", "more +", "CD", "Earn 20% back on purchases"]

    perks = parser.parse_lines(lines)

    assert [p.merchant for p in perks] == ["Shake Shack"]
    assert perks[0].description == "Earn 20% back on purchases"


def test_block_without_offer_in_window_does_not_fire(parser):
    lines = [
        "Nordstrom & Nordstrom Rack",
        "Limited selection",
        "Online only",
        "In stores",
        "Members",
        "Spend $80 or more",
    ]

    assert parser.parse_lines(lines) == []


def test_merchants_outside_block_table_are_ignored(parser):
    assert parser.parse_lines(["Sweetgreen", "Spend $15, earn $5 back", "Exp 05/01/2026"]) == []


def test_empty_input(parser):
    assert parser.parse_lines([]) == []


@pytest.mark.parametrize("text, expected", [
    ("Earn 20% back or 500 points", "20%"),
    ("spend $20, earn 500 points", "500 points"),
    ("Earn 5,000 Membership Rewards points", "5,000 points"),
    ("Get $50 back", "$50"),
    ("Earn 2 miles per dollar", "N/A"),
    ("", "N/A"),
])
def test_extract_amex_offer_value(text, expected):
    assert extract_amex_offer_value(text) == expected


@pytest.mark.parametrize("date_str, expected", [
    ("1112/25", "11/12/2025"),
    ("02/14/25", "02/14/2025"),
    ("02/14/2025", "02/14/2025"),
])
def test_normalize_expiration(date_str, expected):
    assert normalize_expiration(date_str) == expected


@pytest.mark.parametrize("text, expected", [
    ("earn = $10 back", "earn $10 back"),
    ("earn $20 back AF", "earn $20 back"),
    ("Spend $10.9", "Spend"),
    ("Spend $10.99 or more", "Spend $10.99 or more"),
    ("Walmart+2 members", "members"),
    ("spend $", "spend"),
])
def test_clean_ocr_text(text, expected):
    assert clean_ocr_text(text) == expected
