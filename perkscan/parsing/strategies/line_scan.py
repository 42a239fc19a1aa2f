# perkscan/parsing/strategies/line_scan.py

"""
Single-pass merchant/offer/expiration state machine.

Generic and Citi both run this scan and differ only in the predicates and the
perk builder they hand in.
"""

import logging
from typing import Callable, List, Optional, Sequence

from perkscan.parsing.issuer_config import IssuerConfig
from perkscan.parsing.predicates import (
    clean_merchant_name,
    extract_expiration,
    is_expiration_line,
    is_navigation_element,
    matches_skip_pattern,
)
from perkscan.schemas import ExtractedPerk

logger = logging.getLogger(__name__)

LinePredicate = Callable[[str], bool]
# (raw merchant line, joined offer text, expiration) -> perk
PerkBuilder = Callable[[str, str, Optional[str]], ExtractedPerk]


def scan_lines(
    lines: Sequence[str],
    config: IssuerConfig,
    looks_like_merchant: LinePredicate,
    looks_like_offer: LinePredicate,
    build_perk: PerkBuilder,
) -> List[ExtractedPerk]:
    perks: List[ExtractedPerk] = []
    merchant_line = ""
    offer = ""
    expiration: Optional[str] = None

    def flush() -> None:
        if merchant_line and offer and clean_merchant_name(merchant_line):
            perks.append(build_perk(merchant_line, offer, expiration))

    for index, raw_line in enumerate(lines):
        line = raw_line.strip()

        if not line or is_navigation_element(line, config) or matches_skip_pattern(line, config):
            logger.debug(f"[{config.name}] Skipping navigation line {index}: {line!r}")
            continue

        if looks_like_merchant(line):
            flush()
            merchant_line = line
            offer = ""
            expiration = None
        elif looks_like_offer(line):
            offer = f"{offer} {line}" if offer else line
        elif is_expiration_line(line):
            # first expiration in a block wins
            if expiration is None:
                expiration = extract_expiration(line)
        else:
            logger.debug(f"[{config.name}] Discarding noise line {index}: {line!r}")

    flush()
    return perks
