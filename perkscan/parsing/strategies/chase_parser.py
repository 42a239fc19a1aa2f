# perkscan/parsing/strategies/chase_parser.py

import re
import logging
from typing import List, Optional, Sequence, Set

from perkscan.parsing.fuzzy import find_fuzzy_alias
from perkscan.parsing.issuer_config import IssuerConfig
from perkscan.parsing.issuers import CHASE_CONFIG
from perkscan.parsing.predicates import (
    clean_merchant_name,
    contains_offer_keywords,
    extract_offer_value,
    find_alias_merchant,
    is_navigation_element,
    matches_any,
    matches_skip_pattern,
)
from perkscan.parsing.strategies.base_parser import can_parse
from perkscan.schemas import CardType, ExtractedPerk, NO_VALUE

logger = logging.getLogger(__name__)


class ChaseParser:
    """
    Chase Offers mobile screens.

    Chase lays offers out as tiles, so OCR often reads a whole carousel row as
    one line ("fuboTV Event Tickets Ce... Turo"). Rows matching a known merchant
    group are expanded first; every other line goes through single-merchant
    detection (alias, OCR-corrected fuzzy alias, then a plain name shape).
    Value and countdown are then looked up within a few lines of the merchant.
    """

    SEARCH_RANGE = 3
    MIN_MULTI_MERCHANT_TOKENS = 4
    UNKNOWN_MERCHANT_LENGTH = (3, 30)

    COUNTDOWN_REGEX = re.compile(r"\d+d\s*left", re.IGNORECASE)

    def __init__(self, config: IssuerConfig = CHASE_CONFIG):
        self.config = config
        self._cash_back_regex = re.compile(
            "|".join(f"(?:{pattern.pattern})" for pattern in config.offer_line_patterns),
            re.IGNORECASE,
        )

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def card_type(self) -> CardType:
        return self.config.card_type

    def can_parse(self, text: str) -> bool:
        return can_parse(text, self.config)

    def parse_lines(self, lines: Sequence[str]) -> List[ExtractedPerk]:
        logger.info(f"[Chase] Parsing Chase Offers screen with {len(lines)} lines")

        perks: List[ExtractedPerk] = []
        # scoped to this call only
        processed_merchants: Set[str] = set()

        for index, raw_line in enumerate(lines):
            line = raw_line.strip()

            if self._is_navigation(line):
                logger.debug(f"[Chase] Skipping navigation line {index}: {line!r}")
                continue

            group = self._expand_merchant_group(line)
            if group:
                logger.debug(f"[Chase] Multi-merchant line {index}: {line!r} -> {', '.join(group)}")
                for merchant in group:
                    self._add_perk(perks, processed_merchants, lines, index, merchant)
                continue

            merchant = self._detect_merchant(line)
            if merchant:
                self._add_perk(perks, processed_merchants, lines, index, merchant)

        filtered = [perk for perk in perks if perk.confidence >= self.config.min_confidence]
        logger.info(f"[Chase] Found {len(perks)} perks, {len(filtered)} after filtering")
        return filtered

    def _add_perk(
        self,
        perks: List[ExtractedPerk],
        processed_merchants: Set[str],
        lines: Sequence[str],
        index: int,
        merchant: str,
    ) -> None:
        key = merchant.lower()
        if key in processed_merchants:
            logger.debug(f"[Chase] Skipping duplicate merchant {merchant!r} on line {index}")
            return

        perk = self._extract_offer_for_merchant(lines, index, merchant)
        logger.debug(
            f"[Chase] Found merchant {merchant!r} on line {index}: "
            f"value={perk.value}, expiration={perk.expiration}"
        )
        perks.append(perk)
        processed_merchants.add(key)

    # ========== LINE CLASSIFICATION ==========

    def _is_navigation(self, line: str) -> bool:
        return (
            len(line) < 2
            or is_navigation_element(line, self.config)
            or matches_skip_pattern(line, self.config)
        )

    def _line_has_multiple_merchants(self, line: str) -> bool:
        return (
            any(indicator in line for indicator in self.config.multi_merchant_indicators)
            or len(line.split()) >= self.MIN_MULTI_MERCHANT_TOKENS
        )

    def _expand_merchant_group(self, line: str) -> List[str]:
        if not self._line_has_multiple_merchants(line):
            return []
        for group in self.config.merchant_groups:
            if group.pattern.search(line):
                return list(group.merchants)
        return []

    def _detect_merchant(self, line: str) -> Optional[str]:
        return (
            find_alias_merchant(line, self.config)
            or find_fuzzy_alias(line, self.config.merchant_aliases, self.config.ocr_corrections)
            or self._detect_unknown_merchant(line)
        )

    def _detect_unknown_merchant(self, line: str) -> Optional[str]:
        min_length, max_length = self.UNKNOWN_MERCHANT_LENGTH
        if not min_length <= len(line) <= max_length:
            return None
        if not matches_any(line, self.config.merchant_line_patterns):
            return None
        if contains_offer_keywords(line, self.config):
            return None
        return clean_merchant_name(line) or None

    # ========== PROXIMITY SEARCH ==========

    def _extract_offer_for_merchant(
        self, lines: Sequence[str], merchant_index: int, merchant: str
    ) -> ExtractedPerk:
        start = max(0, merchant_index - self.SEARCH_RANGE)
        end = min(len(lines) - 1, merchant_index + self.SEARCH_RANGE)

        offer: Optional[str] = None
        countdown: Optional[str] = None
        for line in lines[start:end + 1]:
            if offer is None:
                match = self._cash_back_regex.search(line)
                if match:
                    offer = match.group(0)
            if countdown is None:
                match = self.COUNTDOWN_REGEX.search(line)
                if match:
                    countdown = match.group(0)

        return ExtractedPerk(
            merchant=merchant,
            description=offer or NO_VALUE,
            value=extract_offer_value(offer) if offer else NO_VALUE,
            expiration=countdown,
            confidence=self.config.base_confidence,
        )
