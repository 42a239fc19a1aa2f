# tests/test_api.py

import pytest
from httpx import ASGITransport, AsyncClient
from perkscan.config import Settings, settings
from perkscan.main import app
from perkscan.parsing.main_parser import PerkExtractor, get_extractor

# This tells pytest to use asyncio for all test functions
pytestmark = pytest.mark.asyncio

PARSE_URL = f"{settings.API_V1_STR}/perks/parse"


@pytest.fixture
async def async_client():
    """Fixture to create an AsyncClient for testing the app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def small_extractor():
    """Overrides the shared extractor with one that accepts two lines at most."""
    app.dependency_overrides[get_extractor] = lambda: PerkExtractor(settings=Settings(MAX_OCR_LINES=2))
    yield
    app.dependency_overrides.clear()


async def test_health_check(async_client):
    response = await async_client.get("/health")

    assert response.status_code == 200
    json_resp = response.json()
    assert json_resp["status"] == "healthy"
    assert json_resp["version"] == settings.VERSION
    assert json_resp["parsers"] == ["Chase", "American Express", "Citi", "Generic"]
    assert "X-Process-Time" in response.headers


async def test_read_root(async_client):
    response = await async_client.get("/")

    assert response.status_code == 200
    assert settings.PROJECT_NAME in response.json()["message"]


async def test_list_issuers(async_client):
    response = await async_client.get(f"{settings.API_V1_STR}/issuers")

    assert response.status_code == 200
    issuers = response.json()
    assert [i["card_type"] for i in issuers] == ["chase", "amex", "citi", "unknown"]
    assert "chase offers" in issuers[0]["identifiers"]
    assert issuers[-1]["identifiers"] == []


async def test_parse_lines_with_card_type(async_client):
    payload = {
        "lines": ["Shake Shack", "Soo [Earn 20% back on purchases", "of $30+ total. Exp 02/14/2025"],
        "card_type": "amex",
    }

    response = await async_client.post(PARSE_URL, json=payload)

    assert response.status_code == 200
    json_resp = response.json()
    assert json_resp["card_type"] == "amex"
    assert json_resp["line_count"] == 3
    assert json_resp["perks"] == [
        {
            "merchant": "Shake Shack",
            "description": "Soo [Earn 20% back on purchases",
            "value": "20%",
            "expiration": "02/14/2025",
            "confidence": 0.85,
        }
    ]


async def test_parse_text_detects_issuer(async_client):
    payload = {"text": "Chase Offers\nCole Haan\n$15 cash back\n12d left"}

    response = await async_client.post(PARSE_URL, json=payload)

    assert response.status_code == 200
    json_resp = response.json()
    assert json_resp["card_type"] == "chase"
    assert json_resp["parser"] == "Chase"
    assert json_resp["perks"][0]["merchant"] == "Cole Haan"
    assert json_resp["perks"][0]["value"] == "$15"


async def test_parse_empty_text(async_client):
    response = await async_client.post(PARSE_URL, json={"text": ""})

    assert response.status_code == 200
    assert response.json()["perks"] == []
    assert response.json()["card_type"] == "unknown"


async def test_parse_requires_input(async_client):
    response = await async_client.post(PARSE_URL, json={"card_type": "chase"})

    assert response.status_code == 422


async def test_parse_rejects_unsupported_card_type(async_client):
    response = await async_client.post(PARSE_URL, json={"text": "Turo", "card_type": "discover"})

    assert response.status_code == 400
    assert "Unsupported card type 'discover'" in response.json()["detail"]


async def test_parse_input_too_large(async_client, small_extractor):
    response = await async_client.post(PARSE_URL, json={"lines": ["a line", "b line", "c line"]})

    assert response.status_code == 413
    assert "at most 2" in response.json()["detail"]
