import json
from datetime import date

import pytest

from errors import FareSourceError, SuggestionSourceError
from LookupCache import LookupCache


PARIS_TOKYO_LIMA = [
    {"city": "Paris, France", "iataCode": "CDG"},
    {"city": "Tokyo, Japan", "iataCode": "HND"},
    {"city": "Lima, Peru", "iataCode": "LIM"},
]


def offer(total):
    return {"type": "flight-offer", "price": {"currency": "USD", "total": str(total)}}


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeSuggestionSource:
    def __init__(self, payload=None, error=None):
        self.payload = payload if payload is not None else "```json\n" + json.dumps(PARIS_TOKYO_LIMA) + "\n```"
        self.error = error
        self.calls = []

    async def suggest(self, trip_length_days, departure_code, count):
        self.calls.append((trip_length_days, departure_code, count))
        if self.error is not None:
            raise self.error
        return self.payload


class FakeFareSource:
    """Offers keyed by destination code. An exception value is raised instead of returned."""

    def __init__(self, offers=None, locations=None):
        self.offers = offers or {}
        self.locations = locations if locations is not None else [{"iataCode": "CDG", "subType": "AIRPORT"}]
        self.offer_calls = []
        self.location_calls = []

    async def search_offers(self, origin, destination, departure_date, adults=1, limit=1):
        self.offer_calls.append((origin, destination, departure_date, adults, limit))
        result = self.offers.get(destination, [])
        if isinstance(result, Exception):
            raise result
        return result

    async def search_locations(self, keyword, subtypes=("AIRPORT", "CITY"), limit=15):
        self.location_calls.append((keyword, tuple(subtypes), limit))
        if isinstance(self.locations, Exception):
            raise self.locations
        return self.locations


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return LookupCache(clock=clock)


@pytest.fixture
def suggestion_source():
    return FakeSuggestionSource()


@pytest.fixture
def fare_source():
    return FakeFareSource(
        offers={
            "CDG": [offer(450.0)],
            "HND": [],
            "LIM": [offer(980.5)],
        }
    )


@pytest.fixture
def today():
    return lambda: date(2026, 1, 15)


@pytest.fixture
def fare_error():
    return FareSourceError("Amadeus request failed", description="No fare found for requested itinerary")


@pytest.fixture
def suggestion_error():
    return SuggestionSourceError("Gemini request failed")
