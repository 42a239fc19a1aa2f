# perkscan/parsing/strategies/citi_parser.py

import logging
from typing import List, Optional, Sequence

from perkscan.parsing.issuer_config import IssuerConfig
from perkscan.parsing.issuers import CITI_CONFIG
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


class CitiParser:
    """Citi Merchant Offers and ThankYou category promotions."""

    def __init__(self, config: IssuerConfig = CITI_CONFIG):
        self.config = config

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def card_type(self) -> CardType:
        return self.config.card_type

    def can_parse(self, text: str) -> bool:
        return can_parse(text, self.config)

    def parse_lines(self, lines: Sequence[str]) -> List[ExtractedPerk]:
        perks = scan_lines(
            lines,
            self.config,
            looks_like_merchant=self._looks_like_merchant,
            looks_like_offer=self._looks_like_offer,
            build_perk=self._create_perk,
        )
        logger.info(f"[Citi] Parsed {len(lines)} lines into {len(perks)} perks")
        return perks

    def _looks_like_merchant(self, line: str) -> bool:
        # Category names ("Gas Stations") count as merchants here.
        if len(line) < 3 or contains_offer_keywords(line, self.config):
            return False
        return bool(
            find_alias_merchant(line, self.config)
            or matches_any(line, self.config.merchant_line_patterns)
        )

    def _looks_like_offer(self, line: str) -> bool:
        return matches_any(line, self.config.offer_line_patterns)

    def _create_perk(self, merchant_line: str, offer: str, expiration: Optional[str]) -> ExtractedPerk:
        return ExtractedPerk(
            merchant=clean_merchant_name(merchant_line),
            description=offer,
            value=extract_offer_value(offer),
            expiration=expiration,
            confidence=self.config.base_confidence,
        )
