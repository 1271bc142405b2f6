"""Normalized flight and destination offers produced by sources."""

from __future__ import annotations

from datetime import date

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    model_validator,
)

from .enums import CabinClass


class FlightOffer(BaseModel):
    """Unified flight representation across all data sources."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Source-local identifier")
    source: str

    # Flight identification
    airline: str
    airline_code: str
    flight_number: str

    # Route
    origin: str = Field(description="IATA airport code")
    destination: str = Field(description="IATA airport code")

    # Schedule (timezone-aware)
    departure_time: AwareDatetime
    arrival_time: AwareDatetime
    duration_minutes: int = Field(ge=0)
    stops: int = Field(default=0, ge=0)

    # Fare
    price: float = Field(ge=0)
    currency: str
    deep_link: str | None = None
    cabin_class: CabinClass = CabinClass.ECONOMY
    baggage_included: bool = False

    @model_validator(mode="after")
    def _validate_schedule(self) -> FlightOffer:
        if self.departure_time >= self.arrival_time:
            msg = "departure_time must precede arrival_time"
            raise ValueError(msg)
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def dedup_key(self) -> str:
        """Key for deduplicating the same flight reported by several sources."""
        dep_date = self.departure_time.strftime("%Y-%m-%d")
        return (
            f"{self.airline_code}:{self.flight_number}:{dep_date}:"
            f"{self.origin}:{self.destination}"
        )


class DestinationOffer(BaseModel):
    """Cheapest known fare to one destination, from an explore query."""

    model_config = ConfigDict(frozen=True)

    destination: str
    destination_name: str = ""
    price: float = Field(ge=0)
    currency: str
    departure_date: date | None = None
    return_date: date | None = None
    source: str
    deep_link: str | None = None
