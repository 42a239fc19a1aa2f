# perkscan/parsing/strategies/amex_parser.py

import re
import logging
from typing import List, Optional, Sequence, Tuple

from perkscan.parsing.issuer_config import IssuerConfig, MerchantBlock
from perkscan.parsing.issuers import AMEX_CONFIG
from perkscan.parsing.predicates import is_navigation_element, matches_any, matches_skip_pattern
from perkscan.parsing.strategies.base_parser import can_parse
from perkscan.schemas import CardType, ExtractedPerk, NO_VALUE

logger = logging.getLogger(__name__)


EXPIRATION_REGEX = re.compile(r"exp(?:ires)?[:.]?\s*(\d{1,2}/?\d{1,2}/\d{2,4})", re.IGNORECASE)
GLUED_DATE_REGEX = re.compile(r"^(\d{2})(\d{2})/(\d{2,4})$")
SHORT_YEAR_REGEX = re.compile(r"/(\d{2})$")

# Lines that carry offer terms even when they match no offer pattern.
OFFER_TOKEN_REGEX = re.compile(r"spend|earn|\$\d+|%\s*back", re.IGNORECASE)

# Membership Rewards offers are mostly percent-back, and OCR reads the
# percent far more reliably than long point counts.
AMEX_PERCENT_REGEX = re.compile(r"(\d+)%")
AMEX_POINTS_REGEX = re.compile(
    r"(\d{1,3}(?:,\d{3})+|\d+)\s*(?:membership\s*rewards\s*)?points", re.IGNORECASE
)
AMEX_DOLLAR_REGEX = re.compile(r"\$(\d+)")


def normalize_expiration(date_str: str) -> str:
    """
    Repairs the date forms OCR produces on Amex offer tiles.

    Examples: "1112/25" -> "11/12/2025", "02/14/25" -> "02/14/2025",
              "02/14/2025" -> "02/14/2025"
    """
    date_str = date_str.strip()
    glued = GLUED_DATE_REGEX.match(date_str)
    if glued:
        date_str = f"{glued.group(1)}/{glued.group(2)}/{glued.group(3)}"
    return SHORT_YEAR_REGEX.sub(r"/20\1", date_str)


def clean_ocr_text(text: str) -> str:
    """Removes the artifacts Amex tiles leave in OCR output ("earn = $10", "Walmart+2", ...)."""
    text = text.replace("=", "")
    text = re.sub(r"\s+", " ", text).strip()
    text = re.sub(r"\s*AF$", "", text)
    text = re.sub(r"\$\d+\.\d?$", "", text)  # cut-off cents
    text = re.sub(r"\$$", "", text)
    text = re.sub(r"\w+\+\d+", "", text)
    return re.sub(r"\s+", " ", text).strip()


def extract_amex_offer_value(text: str) -> str:
    """Percent > points > dollar; no miles on Amex."""
    if not text:
        return NO_VALUE

    percent = AMEX_PERCENT_REGEX.search(text)
    if percent:
        return f"{percent.group(1)}%"

    points = AMEX_POINTS_REGEX.search(text)
    if points:
        return f"{points.group(1)} points"

    dollar = AMEX_DOLLAR_REGEX.search(text)
    if dollar:
        return f"${dollar.group(1)}"

    return NO_VALUE


class AmexParser:
    """
    American Express Offers screens, block-anchored.

    Lines are denoised, then each entry of the configured merchant block table
    is looked up: the merchant name anywhere, its expected offer within the
    next few lines, and an expiration just after the offer. A block whose
    offer is missing does not fire.

    Only merchants in the block table are ever detected; anything else on the
    screen is ignored.
    """

    OFFER_SEARCH_RANGE = 4
    EXPIRATION_SEARCH_RANGE = 3
    DESCRIPTION_EXTRA_LINES = 2

    def __init__(self, config: IssuerConfig = AMEX_CONFIG):
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
        clean_lines = self._filter_lines(lines)
        logger.info(f"[Amex] {len(clean_lines)} of {len(lines)} lines left after noise filtering")

        perks = []
        for block in self.config.merchant_blocks:
            perk = self._extract_block(clean_lines, block)
            if perk:
                logger.info(
                    f"[Amex] Extracted {perk.merchant}: {perk.value} "
                    f"(expires: {perk.expiration or 'unknown'})"
                )
                perks.append(perk)
        return perks

    def _filter_lines(self, lines: Sequence[str]) -> List[str]:
        clean_lines = []
        for raw_line in lines:
            line = raw_line.strip()
            if not line or self._is_noise(line):
                continue
            clean_lines.append(line)
        return clean_lines

    def _is_noise(self, line: str) -> bool:
        return (
            matches_any(line, self.config.noise_patterns)
            or matches_skip_pattern(line, self.config)
            or is_navigation_element(line, self.config)
        )

    def _extract_block(self, lines: List[str], block: MerchantBlock) -> Optional[ExtractedPerk]:
        merchant_index = next(
            (i for i, line in enumerate(lines) if block.merchant_pattern.search(line)), None
        )
        if merchant_index is None:
            return None

        offer_end = min(len(lines), merchant_index + 1 + self.OFFER_SEARCH_RANGE)
        offer_index = next(
            (i for i in range(merchant_index + 1, offer_end) if block.offer_pattern.search(lines[i])),
            None,
        )
        if offer_index is None:
            logger.debug(f"[Amex] {block.name} found on line {merchant_index} without its offer")
            return None

        expiration, expiration_index = self._find_expiration(lines, offer_index)
        description = self._build_description(lines, offer_index, expiration_index)

        return ExtractedPerk(
            merchant=block.name,
            description=description,
            value=extract_amex_offer_value(description),
            expiration=expiration,
            confidence=self.config.base_confidence,
        )

    def _find_expiration(self, lines: List[str], offer_index: int) -> Tuple[Optional[str], Optional[int]]:
        end = min(len(lines), offer_index + 1 + self.EXPIRATION_SEARCH_RANGE)
        for i in range(offer_index, end):
            match = EXPIRATION_REGEX.search(lines[i])
            if match:
                return normalize_expiration(match.group(1)), i
        return None, None

    def _build_description(
        self, lines: List[str], offer_index: int, expiration_index: Optional[int]
    ) -> str:
        parts = []
        end = min(len(lines), offer_index + 1 + self.DESCRIPTION_EXTRA_LINES)
        for i in range(offer_index, end):
            line = lines[i]
            if i == expiration_index:
                if i != offer_index:
                    continue
                line = EXPIRATION_REGEX.sub("", line)

            if i == offer_index or self._looks_like_offer_line(line):
                cleaned = clean_ocr_text(line)
                if cleaned:
                    parts.append(cleaned)
        return " ".join(parts).strip()

    def _looks_like_offer_line(self, line: str) -> bool:
        return matches_any(line, self.config.offer_line_patterns) or bool(OFFER_TOKEN_REGEX.search(line))
