# perkscan/parsing/strategies/generic_parser.py

import logging
from typing import List, Optional, Sequence

from perkscan.parsing.issuer_config import IssuerConfig
from perkscan.parsing.issuers import GENERIC_CONFIG
from perkscan.parsing.predicates import (
    clean_merchant_name,
    contains_offer_keywords,
    extract_offer_value,
    find_alias_merchant,
    matches_any,
)
from perkscan.parsing.strategies.base_parser import can_parse
from perkscan.parsing.strategies.line_scan import scan_lines
from perkscan.schemas import CardType, ExtractedPerk

logger = logging.getLogger(__name__)


class GenericParser:
    """
    Fallback parser for screens no issuer claims.

    Runs the shared line scan, scores each perk from a 0.8 base (+0.1 for a
    known merchant, +0.1 for a recognizable offer amount), drops anything
    under the configured floor and keeps the first perk per merchant.
    """

    KNOWN_MERCHANT_BOOST = 0.1
    OFFER_PATTERN_BOOST = 0.1

    def __init__(self, config: IssuerConfig = GENERIC_CONFIG):
        self.config = config

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def card_type(self) -> CardType:
        return self.config.card_type

    def can_parse(self, text: str) -> bool:
        # Generic has no identifiers and accepts anything.
        return not self.config.identifiers or can_parse(text, self.config)

    def parse_lines(self, lines: Sequence[str]) -> List[ExtractedPerk]:
        perks = scan_lines(
            lines,
            self.config,
            looks_like_merchant=self._looks_like_merchant,
            looks_like_offer=self._looks_like_offer,
            build_perk=self._create_perk,
        )
        filtered = self._filter_perks(perks)
        logger.info(
            f"[{self.name}] Parsed {len(lines)} lines: "
            f"{len(perks)} candidates, {len(filtered)} kept"
        )
        return filtered

    def _looks_like_merchant(self, line: str) -> bool:
        if len(line) < 3 or len(line) > 50:
            return False
        if contains_offer_keywords(line, self.config):
            return False
        if find_alias_merchant(line, self.config):
            return True
        return matches_any(line, self.config.merchant_line_patterns)

    def _looks_like_offer(self, line: str) -> bool:
        return (
            matches_any(line, self.config.offer_line_patterns)
            or contains_offer_keywords(line, self.config)
        )

    def _create_perk(self, merchant_line: str, offer: str, expiration: Optional[str]) -> ExtractedPerk:
        return ExtractedPerk(
            merchant=clean_merchant_name(merchant_line),
            description=offer,
            value=extract_offer_value(offer),
            expiration=expiration,
            confidence=self._calculate_confidence(merchant_line, offer),
        )

    def _calculate_confidence(self, merchant_line: str, offer: str) -> float:
        confidence = self.config.base_confidence
        if find_alias_merchant(merchant_line, self.config):
            confidence += self.KNOWN_MERCHANT_BOOST
        if matches_any(offer, self.config.offer_line_patterns):
            confidence += self.OFFER_PATTERN_BOOST
        return round(min(confidence, 1.0), 4)

    def _filter_perks(self, perks: List[ExtractedPerk]) -> List[ExtractedPerk]:
        seen = set()
        filtered = []
        for perk in perks:
            if perk.confidence < self.config.min_confidence:
                logger.debug(f"[{self.name}] Dropping low-confidence perk: {perk.merchant}")
                continue
            key = perk.merchant.lower()
            if key in seen:
                logger.debug(f"[{self.name}] Dropping duplicate merchant: {perk.merchant}")
                continue
            seen.add(key)
            filtered.append(perk)
        return filtered
