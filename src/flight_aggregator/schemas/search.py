"""Search and explore request schemas."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _iata(value: object) -> object:
    if isinstance(value, str):
        return value.strip().upper()
    return value


class SearchRequest(BaseModel):
    """Route search parameters.

    ``date_to`` turns the outbound date into a flexible window; the two
    return dates do the same for the inbound leg.
    """

    model_config = ConfigDict(frozen=True)

    origin: str = Field(min_length=3, max_length=3, description="IATA airport code")
    destination: str = Field(
        min_length=3, max_length=3, description="IATA airport code"
    )
    date_from: date
    date_to: date | None = None
    return_date_from: date | None = None
    return_date_to: date | None = None
    passengers: int = Field(default=1, ge=1, le=9)
    max_stops: int = Field(default=1, ge=0)
    max_price: float | None = Field(default=None, gt=0)

    @field_validator("origin", "destination", mode="before")
    @classmethod
    def _normalize_codes(cls, value: object) -> object:
        return _iata(value)

    @model_validator(mode="after")
    def _validate_dates(self) -> SearchRequest:
        if self.date_to is not None and self.date_to < self.date_from:
            msg = "date_to must not be before date_from"
            raise ValueError(msg)
        if self.return_date_from is not None and self.return_date_from < self.date_from:
            msg = "return_date_from must not be before date_from"
            raise ValueError(msg)
        if self.return_date_to is not None:
            if self.return_date_from is None:
                msg = "return_date_to requires return_date_from"
                raise ValueError(msg)
            if self.return_date_to < self.return_date_from:
                msg = "return_date_to must not be before return_date_from"
                raise ValueError(msg)
        return self


class ExploreRequest(BaseModel):
    """Cheapest-destinations query from a single origin."""

    model_config = ConfigDict(frozen=True)

    origin: str = Field(min_length=3, max_length=3, description="IATA airport code")
    date_from: date
    date_to: date
    max_price: float | None = Field(default=None, gt=0)
    nights_min: int = Field(default=2, ge=0)
    nights_max: int = Field(default=7, ge=0)
    limit: int = Field(default=15, ge=1)

    @field_validator("origin", mode="before")
    @classmethod
    def _normalize_origin(cls, value: object) -> object:
        return _iata(value)

    @model_validator(mode="after")
    def _validate_window(self) -> ExploreRequest:
        if self.date_to < self.date_from:
            msg = "date_to must not be before date_from"
            raise ValueError(msg)
        if self.nights_max < self.nights_min:
            msg = "nights_max must not be less than nights_min"
            raise ValueError(msg)
        return self
