# perkscan/parsing/fuzzy.py

"""
OCR-tolerant matching.

A coarse heuristic rather than edit distance: apply the issuer's correction
table, then either find the alias inside the corrected line or compare the
two strings character by character.
"""

import re
from typing import Mapping, Optional

SIMILARITY_THRESHOLD = 0.8
MAX_LENGTH_DIFFERENCE = 2


def apply_ocr_corrections(text: str, corrections: Mapping[str, str]) -> str:
    """Substitute every misread fragment, in table order, case-insensitively."""
    corrected = text
    for error, correction in corrections.items():
        corrected = re.sub(re.escape(error), correction, corrected, flags=re.IGNORECASE)
    return corrected


def positional_similarity(first: str, second: str) -> float:
    """
    Share of aligned positions holding the same character.

    Returns 0 when the lengths differ by more than MAX_LENGTH_DIFFERENCE or
    either string is empty.
    """
    if abs(len(first) - len(second)) > MAX_LENGTH_DIFFERENCE:
        return 0.0

    min_length = min(len(first), len(second))
    if min_length == 0:
        return 0.0

    matches = sum(1 for a, b in zip(first, second) if a == b)
    return matches / min_length


def fuzzy_match(line: str, alias: str, corrections: Mapping[str, str]) -> bool:
    corrected = apply_ocr_corrections(line.lower().strip(), corrections)
    if alias in corrected:
        return True
    return positional_similarity(corrected, alias) > SIMILARITY_THRESHOLD


def find_fuzzy_alias(
    line: str,
    merchant_aliases: Mapping[str, tuple],
    corrections: Mapping[str, str],
) -> Optional[str]:
    """Canonical merchant whose alias fuzzily matches the line, first in table order."""
    for merchant, aliases in merchant_aliases.items():
        for alias in aliases:
            if fuzzy_match(line, alias, corrections):
                return merchant
    return None
