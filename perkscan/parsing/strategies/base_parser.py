# perkscan/parsing/strategies/base_parser.py

import re
from typing import List, Protocol, Sequence, runtime_checkable

from perkscan.parsing.issuer_config import IssuerConfig
from perkscan.schemas import CardType, ExtractedPerk


def can_parse(text: str, config: IssuerConfig) -> bool:
    """
    True when any of the issuer's identifiers occurs in the text as a whole
    word, case-insensitively ("chase" must not match "purchases").
    """
    return any(
        re.search(rf"\b{re.escape(identifier)}\b", text, re.IGNORECASE)
        for identifier in config.identifiers
    )


@runtime_checkable
class PerkParser(Protocol):
    """
    Contract every issuer parser fulfils.

    Implementations hold nothing but their immutable IssuerConfig; any
    accumulator lives inside a single parse_lines call, so one instance can
    serve concurrent callers.
    """

    config: IssuerConfig

    @property
    def name(self) -> str:
        ...

    @property
    def card_type(self) -> CardType:
        ...

    def can_parse(self, text: str) -> bool:
        ...

    def parse_lines(self, lines: Sequence[str]) -> List[ExtractedPerk]:
        ...
