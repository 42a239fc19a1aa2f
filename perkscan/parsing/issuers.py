# perkscan/parsing/issuers.py

"""
Issuer configuration tables.

Tuning an issuer means editing these tables, not the parsers. Every regex is
compiled once here; the IssuerConfig models validate the tables on import.
"""

import re

from perkscan.parsing.issuer_config import IssuerConfig, MerchantBlock, MerchantGroup
from perkscan.schemas import CardType

I = re.IGNORECASE

# Status bar clock and the tab labels every issuer app shows above its offers.
COMMON_SKIP_PATTERNS = (
    re.compile(r"^\d{1,2}:\d{2}"),
    re.compile(r"^new$", I),
    re.compile(r"^all$", I),
)


# =============================================================================
# Chase Offers
# =============================================================================
CHASE_CONFIG = IssuerConfig(
    name="Chase",
    card_type=CardType.CHASE,
    identifiers=("chase offers", "chase", "sapphire", "freedom"),
    merchant_aliases={
        "fuboTV": ("fubo", "fubotv", "fubo tv"),
        "Event Tickets Center": ("event tickets", "event tickets ce", "event tickets center", "event"),
        "Turo": ("turo",),
        "Dyson": ("dyson",),
        "Arlo": ("arlo", "ario", "arlo™"),
        "Lands' End": ("lands end", "lands' end", "lands"),
        "Zenni Optical": ("zenni optical", "zenni 0ptical", "zenni"),
        "Cole Haan": ("cole haan", "cole"),
        "Wild Alaskan Company": ("wild alaskan", "wild"),
    },
    ocr_corrections={
        "0": "o",
        "1": "i",
        "5": "s",
        "rn": "m",
        "cl": "d",
    },
    navigation_elements=(
        "chase offers", "all offers", "shopping", "groceries", "home & pet",
        "gear up for game day",
    ),
    offer_keywords=(
        "cash", "back", "earn", "spend", "get", "offer", "offers", "new",
        "left", "days", "expires", "credit", "points", "miles", "bonus",
    ),
    merchant_line_patterns=(
        re.compile(r"^[a-zA-Z][a-zA-Z\s'-]*[a-zA-Z]$"),
    ),
    offer_line_patterns=(
        re.compile(r"\d+%\s*cash\s*back", I),
        re.compile(r"\$\d+\s*cash\s*back", I),
    ),
    skip_patterns=COMMON_SKIP_PATTERNS + (
        re.compile(r"\d+d\s*left", I),
        re.compile(r"^[<>@$#\\()\[\]]+$"),
        re.compile(r"^chase offers$", I),
    ),
    multi_merchant_indicators=("...", "  ", "\t"),
    merchant_groups=(
        MerchantGroup(
            pattern=re.compile(r"fubo.*event.*tickets.*turo", I),
            merchants=("fuboTV", "Event Tickets Center", "Turo"),
        ),
        MerchantGroup(
            pattern=re.compile(r"dyson.*arlo", I),
            merchants=("Dyson", "Arlo"),
        ),
        MerchantGroup(
            pattern=re.compile(r"lands.*end.*zenni", I),
            merchants=("Lands' End", "Zenni Optical"),
        ),
    ),
    base_confidence=0.9,
    min_confidence=0.8,
)


# =============================================================================
# American Express Offers
# =============================================================================
AMEX_CONFIG = IssuerConfig(
    name="American Express",
    card_type=CardType.AMEX,
    identifiers=("american express", "amex", "membership rewards", "platinum", "gold"),
    navigation_elements=(
        "american express", "terms apply", "enrollment required", "limited time offer",
    ),
    offer_keywords=(
        "points", "earn", "spend", "get", "offer", "expires", "enrollment",
        "membership", "rewards", "terms", "apply",
    ),
    offer_line_patterns=(
        re.compile(r"spend\s*\$\d+", I),
        re.compile(r"earn\s*\$\d+", I),
        re.compile(r"earn\s*\d+%", I),
        re.compile(r"\$\d+\s*back", I),
        re.compile(r"\d+%\s*back", I),
        re.compile(r"up\s*to\s*a\s*total\s*of", I),
    ),
    skip_patterns=COMMON_SKIP_PATTERNS + (
        re.compile(r"^offers$", I),
        re.compile(r"^earn$", I),
        re.compile(r"^spend$", I),
    ),
    noise_patterns=(
        re.compile(r"^[\\/@()]+$"),                          # lone punctuation
        re.compile(r"^[A-Za-z]$"),                           # single letters ("Q")
        re.compile(r"^8,\s*Al\s*©"),                         # header glyphs
        re.compile(r"^Shopping.*Dining.*Entertain"),         # category filter row
        re.compile(r"^CD\s*$"),                              # badge alone
        re.compile(r"^c——>$"),                               # arrow artifact alone
        re.compile(r"^blo\s*a\."),
        re.compile(r"^A\s*©\s*8,\s*2$"),                     # footer glyphs
        re.compile(r"^Home\s*Membership\s*Offers\s*Account$"),
        re.compile(r"^OCR\s*Confidence:"),
        re.compile(r"^NORDSTROM$", I),                       # banner above the real name
        re.compile(r"^more\s*\+$", I),
        re.compile(r"^\d+$"),
    ),
    merchant_blocks=(
        MerchantBlock(
            merchant_pattern=re.compile(r"Nordstrom\s*&\s*Nordstrom\s*Rack", I),
            offer_pattern=re.compile(r"spend\s*\$80", I),
            name="Nordstrom & Nordstrom Rack",
        ),
        MerchantBlock(
            merchant_pattern=re.compile(r"Shake\s*Shack", I),
            offer_pattern=re.compile(r"earn\s*20%|20%\s*back", I),
            name="Shake Shack",
        ),
        MerchantBlock(
            merchant_pattern=re.compile(r"Peacock", I),
            offer_pattern=re.compile(r"spend\s*\$10\.99", I),
            name="Peacock",
        ),
        MerchantBlock(
            merchant_pattern=re.compile(r"Walmart.*Annual.*Membership", I),
            offer_pattern=re.compile(r"spend\s*\$98", I),
            name="Walmart+ Annual Membership",
        ),
    ),
    base_confidence=0.85,
)


# =============================================================================
# Citi Merchant Offers / ThankYou
# =============================================================================
CITI_CONFIG = IssuerConfig(
    name="Citi",
    card_type=CardType.CITI,
    identifiers=("citi", "citibank", "thank you", "thankyou", "prestige", "premier", "double cash"),
    # Citi mostly advertises spending categories rather than brands.
    merchant_aliases={
        "Amazon": ("amazon", "amazon.com"),
        "Target": ("target",),
        "Walmart": ("walmart",),
        "Gas Stations": ("gas", "exxon", "shell", "bp", "chevron"),
        "Grocery Stores": ("grocery", "supermarket", "kroger", "safeway"),
        "Restaurants": ("restaurants", "dining"),
        "Travel": ("travel", "airlines", "hotels"),
    },
    navigation_elements=(
        "citibank", "citi merchant offers", "double cash",
    ),
    offer_keywords=(
        "points", "thank", "you", "earn", "spend", "cash", "back",
        "double", "bonus", "categories",
    ),
    merchant_line_patterns=(
        re.compile(r"^[A-Z][a-zA-Z\s&.'-]{3,50}$"),
    ),
    offer_line_patterns=(
        re.compile(r"\d+\s*points", I),
        re.compile(r"\d+%\s*back", I),
        re.compile(r"\d+%\s*cash\s*back", I),
        re.compile(r"\d+x\s*points", I),
    ),
    skip_patterns=COMMON_SKIP_PATTERNS + (
        re.compile(r"^citi$", I),
        # ThankYou header lines; offer lines mentioning ThankYou points stay
        re.compile(r"^thank\s*you(\s*(points|rewards))?$", I),
        re.compile(r"^offers$", I),
        re.compile(r"^rewards$", I),
        re.compile(r"^points$", I),
        re.compile(r"^cash\s*back$", I),
    ),
    base_confidence=0.9,
)


# =============================================================================
# Generic fallback
# =============================================================================
GENERIC_CONFIG = IssuerConfig(
    name="Generic",
    card_type=CardType.UNKNOWN,
    identifiers=(),
    merchant_aliases={
        "Amazon": ("amazon", "amazon.com"),
        "Target": ("target",),
        "Walmart": ("walmart",),
        "Starbucks": ("starbucks",),
        "Uber": ("uber",),
        "Netflix": ("netflix",),
        "Spotify": ("spotify",),
    },
    ocr_corrections={
        "0": "o",
        "1": "i",
        "5": "s",
    },
    navigation_elements=(
        "view all", "see all", "my offers", "added to card",
    ),
    # "get" and "expires" are left out: the first hides "Target", the second
    # would swallow expiration lines as offer text.
    offer_keywords=(
        "cash", "back", "points", "miles", "earn", "spend", "offer", "bonus", "rewards",
    ),
    merchant_line_patterns=(
        re.compile(r"^[A-Z][a-zA-Z\s&.'-]{3,50}$"),
        re.compile(r"^[a-zA-Z][a-zA-Z\s&.'-]{2,30}$"),
    ),
    offer_line_patterns=(
        re.compile(r"\d+%", I),
        re.compile(r"\$\d+", I),
        re.compile(r"\d+\s*points", I),
        re.compile(r"\d+\s*miles", I),
        re.compile(r"\d+x", I),
    ),
    skip_patterns=COMMON_SKIP_PATTERNS + (
        re.compile(r"^offers$", I),
        re.compile(r"^rewards$", I),
        re.compile(r"^cash\s*back$", I),
        re.compile(r"^points$", I),
        re.compile(r"^miles$", I),
    ),
    base_confidence=0.8,
    min_confidence=0.7,
)
