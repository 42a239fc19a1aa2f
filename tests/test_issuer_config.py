# tests/test_issuer_config.py

import re

import pytest
from pydantic import ValidationError

from perkscan.parsing.issuer_config import IssuerConfig, MerchantGroup
from perkscan.parsing.issuers import AMEX_CONFIG, CHASE_CONFIG, CITI_CONFIG, GENERIC_CONFIG
from perkscan.schemas import CardType


def _config(**overrides):
    fields = {
        "name": "Test",
        "card_type": CardType.UNKNOWN,
        "merchant_aliases": {"Turo": ("turo",)},
        "base_confidence": 0.9,
    }
    fields.update(overrides)
    return IssuerConfig(**fields)


@pytest.mark.parametrize("config", [CHASE_CONFIG, AMEX_CONFIG, CITI_CONFIG, GENERIC_CONFIG])
def test_shipped_configs_are_valid(config):
    assert 0.0 <= config.min_confidence <= config.base_confidence <= 1.0


def test_generic_has_no_identifiers():
    assert GENERIC_CONFIG.identifiers == ()


def test_amex_block_table_is_closed():
    names = [block.name for block in AMEX_CONFIG.merchant_blocks]
    assert names == [
        "Nordstrom & Nordstrom Rack",
        "Shake Shack",
        "Peacock",
        "Walmart+ Annual Membership",
    ]


def test_group_with_undefined_merchant_is_rejected():
    group = MerchantGroup(pattern=re.compile("turo.*lyft", re.I), merchants=("Turo", "Lyft"))
    with pytest.raises(ValidationError) as e:
        _config(merchant_groups=(group,))
    assert "undefined merchant alias 'Lyft'" in str(e.value)


def test_uppercase_alias_is_rejected():
    with pytest.raises(ValidationError):
        _config(merchant_aliases={"Turo": ("Turo",)})


def test_merchant_without_aliases_is_rejected():
    with pytest.raises(ValidationError):
        _config(merchant_aliases={"Turo": ()})


def test_confidence_out_of_range_is_rejected():
    with pytest.raises(ValidationError):
        _config(base_confidence=1.5)


def test_configs_are_immutable():
    with pytest.raises(ValidationError):
        CHASE_CONFIG.name = "Other"
