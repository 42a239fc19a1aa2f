# perkscan/parsing/predicates.py

"""
Line predicates shared by every issuer parser.

All helpers are pure functions over a line (and, where needed, the issuer's
configuration) so each parser composes them instead of inheriting them.
"""

import re
from typing import Optional

from perkscan.parsing.issuer_config import IssuerConfig
from perkscan.schemas import NO_VALUE

# Value tokens. Priority is percent > points > dollar > miles so that
# "spend $30, earn 20% back" reports 20%, not $30.
PERCENT_REGEX = re.compile(r"(\d+%)")
POINTS_REGEX = re.compile(r"(\d+x?\s*points?)", re.IGNORECASE)
DOLLAR_REGEX = re.compile(r"(\$\d+)")
MILES_REGEX = re.compile(r"(\d+\s*miles?)", re.IGNORECASE)

VALUE_PRIORITY = (PERCENT_REGEX, POINTS_REGEX, DOLLAR_REGEX, MILES_REGEX)

EXPIRATION_SIGNAL_REGEX = re.compile(r"expires|valid|until|through", re.IGNORECASE)
# MM/DD/YYYY, MM/DD/YY, MM/YYYY. The full year alternatives come first.
EXPIRATION_DATE_REGEX = re.compile(
    r"(\d{1,2}/\d{1,2}/\d{4}|\d{1,2}/\d{1,2}/\d{2}(?!\d)|\d{1,2}/\d{4})"
)

MERCHANT_NOISE_REGEX = re.compile(r"[^\w\s'&.-]")


def is_navigation_element(line: str, config: IssuerConfig) -> bool:
    lower_line = line.lower()
    return any(element.lower() in lower_line for element in config.navigation_elements)


def contains_offer_keywords(line: str, config: IssuerConfig) -> bool:
    lower_line = line.lower()
    return any(keyword.lower() in lower_line for keyword in config.offer_keywords)


def matches_skip_pattern(line: str, config: IssuerConfig) -> bool:
    stripped = line.strip()
    return any(pattern.search(stripped) for pattern in config.skip_patterns)


def matches_any(line: str, patterns) -> bool:
    return any(pattern.search(line) for pattern in patterns)


def find_alias_merchant(line: str, config: IssuerConfig) -> Optional[str]:
    """Canonical name of the first merchant whose alias occurs in the line."""
    lower_line = line.lower()
    for merchant, aliases in config.merchant_aliases.items():
        if any(alias in lower_line for alias in aliases):
            return merchant
    return None


def extract_offer_value(text: str, priority=VALUE_PRIORITY) -> str:
    """
    Canonical offer value from free text.

    The first pattern in `priority` that matches wins; "N/A" when none do.

    Examples: "Earn 20% back or 500 points" -> "20%",
              "spend $20, earn 500 points" -> "500 points"
    """
    if not text:
        return NO_VALUE
    for pattern in priority:
        match = pattern.search(text)
        if match:
            return match.group(1).strip()
    return NO_VALUE


def is_expiration_line(line: str) -> bool:
    return bool(EXPIRATION_SIGNAL_REGEX.search(line) and EXPIRATION_DATE_REGEX.search(line))


def extract_expiration(line: str) -> Optional[str]:
    """Date-shaped substring of the line, verbatim."""
    match = EXPIRATION_DATE_REGEX.search(line)
    return match.group(1) if match else None


def clean_merchant_name(name: str) -> str:
    """
    Strips characters outside letters, digits, spaces, quotes, '&', '.', '-'.

    Example: "  Shake   Shack!! " -> "Shake Shack"
    """
    cleaned = MERCHANT_NOISE_REGEX.sub("", name.strip())
    cleaned = cleaned.replace("_", "")
    return re.sub(r"\s+", " ", cleaned).strip()
