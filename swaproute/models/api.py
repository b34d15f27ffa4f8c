from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


class Token(BaseModel):
    symbol: str
    decimals: int = Field(default=8, ge=0)
    feed: str | None = None

    model_config = {"frozen": True}

    @field_validator("symbol", mode="before")
    @classmethod
    def validate_symbol(cls, v: object) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Token symbol must be a non-empty string")
        return v.strip().upper()


class CandidateEdge(BaseModel):
    from_token: str
    to_token: str
    fee: float = Field(ge=0.0, lt=1.0)

    model_config = {"frozen": True}

    @field_validator("from_token", "to_token", mode="before")
    @classmethod
    def validate_symbol(cls, v: object) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Token symbol must be a non-empty string")
        return v.strip().upper()

    @model_validator(mode="after")
    def validate_distinct(self) -> CandidateEdge:
        if self.from_token == self.to_token:
            raise ValueError(f"Candidate edge must join two tokens, got {self.from_token} twice")
        return self


class QuoteStatus(str, Enum):
    OK = "ok"
    UNAVAILABLE = "unavailable"
    TRANSIENT_ERROR = "transient_error"


class PriceQuote(BaseModel):
    """A single spot price in the common reference unit.

    ``price`` is only set when ``status`` is OK. UNAVAILABLE means the source
    has no usable answer for the token; TRANSIENT_ERROR means the source could
    not be reached and the next run may succeed.
    """

    symbol: str
    status: QuoteStatus
    price: float | None = None
    error: str | None = None

    @model_validator(mode="after")
    def validate_price(self) -> PriceQuote:
        if self.status is QuoteStatus.OK and (self.price is None or self.price <= 0):
            raise ValueError(f"OK quote for {self.symbol} needs a positive price, got {self.price}")
        return self

    @property
    def ok(self) -> bool:
        return self.status is QuoteStatus.OK

    @classmethod
    def of(cls, symbol: str, price: float) -> PriceQuote:
        return cls(symbol=symbol, status=QuoteStatus.OK, price=price)

    @classmethod
    def unavailable(cls, symbol: str, error: str | None = None) -> PriceQuote:
        return cls(symbol=symbol, status=QuoteStatus.UNAVAILABLE, error=error)

    @classmethod
    def transient(cls, symbol: str, error: str | None = None) -> PriceQuote:
        return cls(symbol=symbol, status=QuoteStatus.TRANSIENT_ERROR, error=error)
