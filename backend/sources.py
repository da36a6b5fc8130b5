"""Upstream capabilities the services depend on.

GeminiClient and AmadeusClient are the production implementations; tests
use in-memory fakes.
"""

from datetime import date
from typing import Any, Dict, List, Protocol, Sequence


class SuggestionSource(Protocol):
    async def suggest(self, trip_length_days: int, departure_code: str, count: int) -> str:
        """Return the raw text payload listing `count` candidate destinations."""
        ...


class FareSource(Protocol):
    async def search_offers(
        self,
        origin: str,
        destination: str,
        departure_date: date,
        adults: int = 1,
        limit: int = 1,
    ) -> List[Dict[str, Any]]:
        ...

    async def search_locations(
        self,
        keyword: str,
        subtypes: Sequence[str] = ("AIRPORT", "CITY"),
        limit: int = 15,
    ) -> List[Dict[str, Any]]:
        ...
