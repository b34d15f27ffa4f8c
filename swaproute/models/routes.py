from __future__ import annotations

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from swaproute.utils.time import parse_iso_to_ms


class RouteEntry(BaseModel):
    """One best path for an ordered token pair, as persisted and served."""

    timestamp: str
    from_token: str = Field(alias="from")
    to_token: str = Field(alias="to")
    path: list[str]
    output: float

    model_config = {"populate_by_name": True, "frozen": True, "extra": "ignore"}

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v: str) -> str:
        parse_iso_to_ms(v)
        return v

    @property
    def timestamp_ms(self) -> int:
        return parse_iso_to_ms(self.timestamp)

    def matches(self, from_token: str, to_token: str) -> bool:
        return self.from_token.upper() == from_token.upper() and self.to_token.upper() == to_token.upper()

    def to_json_dict(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)


RouteEntryList = TypeAdapter(list[RouteEntry])
