# perkscan/parsing/main_parser.py

import time
import uuid
import logging
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Union

from perkscan.config import Settings, settings as default_settings
from perkscan.parsing.strategies.amex_parser import AmexParser
from perkscan.parsing.strategies.base_parser import PerkParser
from perkscan.parsing.strategies.chase_parser import ChaseParser
from perkscan.parsing.strategies.citi_parser import CitiParser
from perkscan.parsing.strategies.generic_parser import GenericParser
from perkscan.schemas import CardType, ExtractedPerk, ParseResponse

logger = logging.getLogger(__name__)


class UnsupportedCardTypeError(ValueError):
    """Raised when a caller asks for a card type that does not exist."""


class InputTooLargeError(ValueError):
    """Raised when a capture has more lines than the service accepts."""


def default_parsers() -> List[PerkParser]:
    """
    Issuer parsers in dispatch order.

    Identifier substrings overlap ("gold", "premier", a stray "chase"), so
    this order is the tie-break: the first parser whose identifiers occur in
    the text wins. Generic is not listed; it is always the last resort.
    """
    return [ChaseParser(), AmexParser(), CitiParser()]


class PerkExtractor:
    """
    Identifies the issuer of an OCR capture and runs the matching parser.

    Holds only parser instances, which are themselves stateless between
    calls, so a single extractor can be shared.
    """

    def __init__(
        self,
        parsers: Optional[Sequence[PerkParser]] = None,
        generic_parser: Optional[PerkParser] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or default_settings
        self.generic_parser = generic_parser or GenericParser()
        self._parsers: Dict[CardType, PerkParser] = {}
        for parser in (default_parsers() if parsers is None else parsers):
            self.register(parser)

    # ========== REGISTRY ==========

    def register(self, parser: PerkParser, card_type: Optional[CardType] = None) -> None:
        """Adds or replaces the parser for a card type. New card types dispatch after existing ones."""
        card_type = CardType(card_type or parser.card_type)
        if card_type == CardType.UNKNOWN:
            raise ValueError("The generic fallback is set through 'generic_parser', not registered")
        self._parsers[card_type] = parser
        logger.debug(f"Registered {parser.name} parser for card type '{card_type.value}'")

    @property
    def parsers(self) -> List[PerkParser]:
        """All parsers in dispatch order, Generic last."""
        return list(self._parsers.values()) + [self.generic_parser]

    def supported_card_types(self) -> List[CardType]:
        return list(self._parsers.keys())

    def get_parser(self, card_type: Union[CardType, str, None]) -> PerkParser:
        return self._parsers.get(self._coerce_card_type(card_type), self.generic_parser)

    # ========== DETECTION ==========

    def detect_card_type(self, text: str) -> CardType:
        for card_type, parser in self._parsers.items():
            if parser.can_parse(text):
                return card_type
        return CardType.UNKNOWN

    def select(self, text: str) -> PerkParser:
        return self.get_parser(self.detect_card_type(text))

    # ========== PARSING ==========

    @staticmethod
    def split_lines(text: str) -> List[str]:
        return [line.strip() for line in (text or "").split("\n") if line.strip()]

    def extract_perks_from_text(
        self,
        text: str,
        card_type: Union[CardType, str, None] = None,
        request_id: Optional[str] = None,
    ) -> ParseResponse:
        """
        Full pipeline for one capture.

        Steps:
        1. Split into trimmed, non-empty lines and bound the input
        2. Detect the issuer (unless the caller names one)
        3. Run the issuer parser and apply the global confidence floor

        Raises:
            UnsupportedCardTypeError: card_type is not a known card type
            InputTooLargeError: more lines than MAX_OCR_LINES
        """
        request_id = request_id or uuid.uuid4().hex[:8]
        start_time = time.time()

        requested = self._coerce_card_type(card_type)
        lines = self._bound_lines(self.split_lines(text), request_id)

        if requested == CardType.UNKNOWN:
            requested = self.detect_card_type(text or "")
            logger.info(f"[Parse {request_id}] Auto-detected card type: {requested.value}")

        parser = self.get_parser(requested)
        logger.info(f"[Parse {request_id}] Using {parser.name} parser on {len(lines)} lines")

        perks = self._apply_confidence_floor(parser.parse_lines(lines))
        processing_time_ms = int((time.time() - start_time) * 1000)

        logger.info(
            f"[Parse {request_id}] Extracted {len(perks)} perks "
            f"in {processing_time_ms}ms"
        )
        return ParseResponse(
            card_type=parser.card_type,
            parser=parser.name,
            perks=perks,
            line_count=len(lines),
            processing_time_ms=processing_time_ms,
        )

    def parse_lines(
        self,
        lines: Sequence[str],
        card_type: Union[CardType, str, None] = None,
        request_id: Optional[str] = None,
    ) -> ParseResponse:
        return self.extract_perks_from_text("\n".join(lines), card_type, request_id)

    # ========== HELPERS ==========

    @staticmethod
    def _coerce_card_type(card_type: Union[CardType, str, None]) -> CardType:
        if card_type is None:
            return CardType.UNKNOWN
        if isinstance(card_type, str) and not isinstance(card_type, CardType):
            card_type = card_type.strip().lower()
        try:
            return CardType(card_type)
        except ValueError:
            supported = ", ".join(c.value for c in CardType)
            raise UnsupportedCardTypeError(
                f"Unsupported card type '{card_type}'. Supported: {supported}."
            )

    def _bound_lines(self, lines: List[str], request_id: str) -> List[str]:
        if len(lines) > self.settings.MAX_OCR_LINES:
            logger.warning(
                f"[Parse {request_id}] Rejecting capture with {len(lines)} lines "
                f"(limit {self.settings.MAX_OCR_LINES})"
            )
            raise InputTooLargeError(
                f"Capture has {len(lines)} lines; at most "
                f"{self.settings.MAX_OCR_LINES} are accepted."
            )
        max_length = self.settings.MAX_LINE_LENGTH
        return [line[:max_length] for line in lines]

    def _apply_confidence_floor(self, perks: List[ExtractedPerk]) -> List[ExtractedPerk]:
        floor = self.settings.MIN_CONFIDENCE_OVERRIDE
        if floor is None:
            return perks
        return [perk for perk in perks if perk.confidence >= floor]


@lru_cache()
def get_extractor() -> PerkExtractor:
    """Return a cached PerkExtractor with the default parsers."""
    return PerkExtractor()
