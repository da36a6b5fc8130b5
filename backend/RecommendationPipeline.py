import asyncio
import calendar
import json
import logging
import re
from datetime import date
from typing import Any, Callable, List, Optional, Union

from pydantic import ValidationError

from data.DestinationCandidate import CandidateList, DestinationCandidate
from data.FlightResult import FlightResult
from errors import InvalidInput, RecommendationFailed, SuggestionParseError
from sources import FareSource, SuggestionSource

logger = logging.getLogger(__name__)

DESTINATION_COUNT = 3
OFFER_LIMIT = 1  # only the top offer is needed for a price estimate
ADULTS = 1
DEPARTURE_OFFSET_MONTHS = 3

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


def strip_fences(text: str) -> str:
    return _FENCE.sub("", text).strip()


def parse_candidates(raw: str) -> List[DestinationCandidate]:
    cleaned = strip_fences(raw)
    try:
        payload = json.loads(cleaned)
    except ValueError as e:
        raise SuggestionParseError("Suggestion payload is not valid JSON", cause=e)
    try:
        return CandidateList.validate_python(payload)
    except ValidationError as e:
        raise SuggestionParseError("Suggestion payload does not match the candidate shape", cause=e)


def add_months(d: date, months: int) -> date:
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    # clamp e.g. Nov 30 + 3 months to Feb 28/29
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def first_offer_price(offers: List[dict]) -> Optional[float]:
    if not offers:
        return None
    return float(offers[0]["price"]["total"])


class RecommendationPipeline:
    """Suggest destinations, then price each one independently.

    A candidate whose fare lookup fails or returns no offers is left out of
    the result; only the suggestion step can fail the whole call.
    """

    def __init__(
        self,
        suggestion_source: SuggestionSource,
        fare_source: FareSource,
        today: Callable[[], date] = date.today,
    ):
        self.suggestion_source = suggestion_source
        self.fare_source = fare_source
        self._today = today

    async def recommend(self, trip_length_days: Any, departure_code: Any) -> List[FlightResult]:
        trip_length_days, departure_code = self._validate(trip_length_days, departure_code)

        candidates = await self._suggest(trip_length_days, departure_code)
        logger.info("Suggested destinations: %s", [c.iata_code for c in candidates])

        departure_date = self.departure_date()

        outcomes = await asyncio.gather(
            *(self._quote(departure_code, c, departure_date) for c in candidates),
            return_exceptions=True,
        )

        results = self._collect(candidates, outcomes)
        logger.info("Final results: %s", [r.model_dump() for r in results])
        return results

    def departure_date(self) -> date:
        # Same date for every candidate, a few months out for better prices
        return add_months(self._today(), DEPARTURE_OFFSET_MONTHS)

    @staticmethod
    def _validate(trip_length_days: Any, departure_code: Any):
        if trip_length_days is None or isinstance(trip_length_days, bool):
            raise InvalidInput("Number of days is required")
        if isinstance(trip_length_days, float) and not trip_length_days.is_integer():
            raise InvalidInput(f"Number of days must be a whole number, got {trip_length_days!r}")
        if not isinstance(trip_length_days, (int, float, str)):
            raise InvalidInput(f"Number of days must be an integer, got {trip_length_days!r}")
        try:
            # int("5.9") raises, so fractional strings are rejected here too
            days = int(trip_length_days)
        except (TypeError, ValueError, OverflowError):
            raise InvalidInput(f"Number of days must be an integer, got {trip_length_days!r}")
        if days <= 0:
            raise InvalidInput("Number of days must be positive")

        if not isinstance(departure_code, str) or not departure_code.strip():
            raise InvalidInput("Departure airport is required")

        return days, departure_code.strip().upper()

    async def _suggest(self, trip_length_days: int, departure_code: str) -> List[DestinationCandidate]:
        logger.info("Asking for destination ideas: %d days from %s", trip_length_days, departure_code)
        try:
            raw = await self.suggestion_source.suggest(trip_length_days, departure_code, DESTINATION_COUNT)
        except Exception as e:
            raise RecommendationFailed("Suggestion source call failed", cause=e)
        return parse_candidates(raw)

    async def _quote(
        self, origin: str, candidate: DestinationCandidate, departure_date: date
    ) -> Optional[FlightResult]:
        offers = await self.fare_source.search_offers(
            origin,
            candidate.iata_code,
            departure_date,
            adults=ADULTS,
            limit=OFFER_LIMIT,
        )
        price = first_offer_price(offers)
        if price is None:
            return None
        return FlightResult(destination=candidate.city, price=price)

    @staticmethod
    def _collect(
        candidates: List[DestinationCandidate],
        outcomes: List[Union[FlightResult, None, BaseException]],
    ) -> List[FlightResult]:
        results = []
        for candidate, outcome in zip(candidates, outcomes):
            if isinstance(outcome, FlightResult):
                results.append(outcome)
            elif outcome is None:
                logger.warning("No offers found for %s", candidate.iata_code)
            else:
                logger.warning("Could not find a flight for %s: %s", candidate.iata_code, outcome)
        return results
