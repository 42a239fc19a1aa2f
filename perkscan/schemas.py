# perkscan/schemas.py

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, Literal, List
from datetime import datetime


NO_VALUE = "N/A"


class CardType(str, Enum):
    """Issuers with a dedicated parser, plus the generic fallback."""
    CHASE = "chase"
    AMEX = "amex"
    CITI = "citi"
    UNKNOWN = "unknown"


class ExtractedPerk(BaseModel):
    """
    One promotional offer pulled out of an issuer screen.

    Records are created fresh by every parse call and never touched again
    by the parsers.
    """
    merchant: str = Field(..., min_length=1, description="Canonical merchant name")
    description: str = Field("", description="Free-text offer summary")
    value: str = Field(NO_VALUE, description='Canonical value such as "20%", "500 points", "$10"')
    expiration: Optional[str] = Field(None, description="Expiration as found on screen")
    confidence: float = Field(..., ge=0.0, le=1.0)

    @field_validator("merchant")
    @classmethod
    def validate_merchant(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("merchant must not be blank")
        return v

    @field_validator("value", mode="before")
    @classmethod
    def validate_value(cls, v: Optional[str]) -> str:
        return v or NO_VALUE

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "merchant": "Shake Shack",
                "description": "Earn 20% back on purchases of $30+ total.",
                "value": "20%",
                "expiration": "02/14/2025",
                "confidence": 0.85,
            }
        }
    )


class ParseRequest(BaseModel):
    """Either the raw OCR text of one screen or its lines in reading order."""
    text: Optional[str] = Field(None, description="Full OCR text, newline separated")
    lines: Optional[List[str]] = Field(None, description="OCR lines, top to bottom")
    # Plain string so an unsupported issuer is reported as 400, not a schema error.
    card_type: Optional[str] = Field(
        None,
        description="chase, amex, citi or unknown; omit to auto-detect",
        examples=["amex"],
    )

    @model_validator(mode="after")
    def require_input(self):
        if self.text is None and self.lines is None:
            raise ValueError("Either 'text' or 'lines' must be provided")
        return self

    def as_text(self) -> str:
        if self.lines is not None:
            return "\n".join(self.lines)
        return self.text or ""


class ParseResponse(BaseModel):
    card_type: CardType
    parser: str = Field(..., description="Display name of the parser that ran")
    perks: List[ExtractedPerk] = Field(default_factory=list)
    line_count: int = Field(0, ge=0)
    processing_time_ms: Optional[int] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "card_type": "amex",
                "parser": "American Express",
                "perks": [
                    {
                        "merchant": "Shake Shack",
                        "description": "Soo [Earn 20% back on purchases",
                        "value": "20%",
                        "expiration": "02/14/2025",
                        "confidence": 0.85,
                    }
                ],
                "line_count": 3,
                "processing_time_ms": 2,
            }
        }
    )


class IssuerInfo(BaseModel):
    card_type: CardType
    name: str
    identifiers: List[str] = Field(default_factory=list)


class HealthCheckResponse(BaseModel):
    """Health check response schema."""
    status: Literal["healthy", "unhealthy"]
    version: str
    environment: str
    parsers: List[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.now)
