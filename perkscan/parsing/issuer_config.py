# perkscan/parsing/issuer_config.py

"""
Immutable per-issuer configuration.

Everything an issuer parser tunes lives here as data: alias tables, regex
tables, skip lists, co-occurrence groups and anchored merchant blocks. The
models validate themselves on construction so a broken table fails at import
time instead of silently producing nothing at parse time.
"""

import re
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from perkscan.schemas import CardType


class MerchantGroup(BaseModel):
    """Carousel row that packs several merchants into one OCR line."""
    model_config = ConfigDict(frozen=True)

    pattern: re.Pattern
    merchants: Tuple[str, ...] = Field(..., min_length=2)


class MerchantBlock(BaseModel):
    """Anchored (merchant name, expected offer) pair."""
    model_config = ConfigDict(frozen=True)

    merchant_pattern: re.Pattern
    offer_pattern: re.Pattern
    name: str = Field(..., min_length=1)


class IssuerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    card_type: CardType
    identifiers: Tuple[str, ...] = ()

    # canonical merchant name -> lowercase alias substrings
    merchant_aliases: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)
    # misread substring -> corrected substring
    ocr_corrections: Dict[str, str] = Field(default_factory=dict)
    navigation_elements: Tuple[str, ...] = ()
    offer_keywords: Tuple[str, ...] = ()

    merchant_line_patterns: Tuple[re.Pattern, ...] = ()
    offer_line_patterns: Tuple[re.Pattern, ...] = ()
    skip_patterns: Tuple[re.Pattern, ...] = ()
    multi_merchant_indicators: Tuple[str, ...] = ()

    merchant_groups: Tuple[MerchantGroup, ...] = ()
    merchant_blocks: Tuple[MerchantBlock, ...] = ()
    noise_patterns: Tuple[re.Pattern, ...] = ()

    base_confidence: float = Field(..., ge=0.0, le=1.0)
    min_confidence: float = Field(0.0, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def validate_tables(self):
        for merchant, aliases in self.merchant_aliases.items():
            if not merchant.strip():
                raise ValueError(f"[{self.name}] blank canonical merchant name")
            if not aliases:
                raise ValueError(f"[{self.name}] merchant '{merchant}' has no aliases")
            for alias in aliases:
                if not alias or alias != alias.lower():
                    raise ValueError(
                        f"[{self.name}] alias '{alias}' for '{merchant}' must be non-empty lowercase"
                    )

        for group in self.merchant_groups:
            for merchant in group.merchants:
                if merchant not in self.merchant_aliases:
                    raise ValueError(
                        f"[{self.name}] merchant group {group.pattern.pattern!r} "
                        f"references undefined merchant alias '{merchant}'"
                    )

        for identifier in self.identifiers:
            if not identifier.strip():
                raise ValueError(f"[{self.name}] blank issuer identifier")

        return self
