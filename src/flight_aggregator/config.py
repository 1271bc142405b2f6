"""Aggregator configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class AggregatorSettings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FLIGHTS_", env_file=".env", extra="ignore"
    )

    # Kiwi Tequila API
    kiwi_api_key: str = ""

    # Amadeus Self-Service API
    amadeus_client_id: str = ""
    amadeus_client_secret: str = ""
    amadeus_hostname: str = "test"  # "test" or "production"

    # SerpAPI (Google Flights engine)
    serpapi_key: str = ""

    # Ryanair: unofficial fares API, no key needed
    ryanair_enabled: bool = True

    # Sky-Scrapper (Skyscanner data) on RapidAPI
    rapidapi_key: str = ""

    # FlightAPI.io
    flightapi_key: str = ""

    # Timeouts (seconds)
    request_timeout: int = 30
    health_check_timeout: float = 10.0

    # Result cache TTL (seconds)
    cache_ttl_seconds: float = 300.0

    # Currency used for every source request
    currency: str = "PLN"

    default_origin: str = "KRK"


settings = AggregatorSettings()
