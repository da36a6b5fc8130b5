import asyncio
import json
from datetime import date

import pytest

from conftest import FakeFareSource, FakeSuggestionSource, offer
from data.FlightResult import FlightResult
from errors import InvalidInput, RecommendationFailed, SuggestionParseError
from RecommendationPipeline import (
    DESTINATION_COUNT,
    RecommendationPipeline,
    add_months,
    parse_candidates,
    strip_fences,
)


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def pipeline(suggestion_source, fare_source, today):
    return RecommendationPipeline(suggestion_source, fare_source, today=today)


class TestRecommend:
    def test_end_to_end_drops_candidate_without_offers(self, pipeline):
        results = run(pipeline.recommend(5, "JFK"))
        assert results == [
            FlightResult(destination="Paris, France", price=450.0),
            FlightResult(destination="Lima, Peru", price=980.5),
        ]

    def test_failing_candidate_is_skipped_in_order(self, suggestion_source, fare_error, today):
        fares = FakeFareSource(offers={
            "CDG": [offer(450)],
            "HND": fare_error,
            "LIM": [offer(980.5)],
        })
        results = run(RecommendationPipeline(suggestion_source, fares, today=today).recommend(5, "JFK"))
        assert [r.destination for r in results] == ["Paris, France", "Lima, Peru"]
        assert len(fares.offer_calls) == 3

    def test_all_candidates_failing_gives_empty_list(self, suggestion_source, fare_error, today):
        fares = FakeFareSource(offers={"CDG": fare_error, "HND": [], "LIM": RuntimeError("boom")})
        results = run(RecommendationPipeline(suggestion_source, fares, today=today).recommend(5, "JFK"))
        assert results == []

    def test_malformed_offer_counts_as_failure(self, suggestion_source, today):
        fares = FakeFareSource(offers={"CDG": [{"price": {}}], "LIM": [offer(100)]})
        results = run(RecommendationPipeline(suggestion_source, fares, today=today).recommend(5, "JFK"))
        assert results == [FlightResult(destination="Lima, Peru", price=100.0)]

    def test_uses_first_offer(self, suggestion_source, today):
        fares = FakeFareSource(offers={"CDG": [offer(300), offer(200)]})
        results = run(RecommendationPipeline(suggestion_source, fares, today=today).recommend(5, "JFK"))
        assert results == [FlightResult(destination="Paris, France", price=300.0)]

    def test_fare_calls_share_one_date_and_single_offer(self, pipeline, fare_source):
        run(pipeline.recommend(5, "JFK"))
        assert fare_source.offer_calls == [
            ("JFK", "CDG", date(2026, 4, 15), 1, 1),
            ("JFK", "HND", date(2026, 4, 15), 1, 1),
            ("JFK", "LIM", date(2026, 4, 15), 1, 1),
        ]

    def test_suggestion_request_parameters(self, pipeline, suggestion_source):
        run(pipeline.recommend("7", " jfk "))
        assert suggestion_source.calls == [(7, "JFK", DESTINATION_COUNT)]

    def test_whole_float_trip_length_accepted(self, pipeline, suggestion_source):
        run(pipeline.recommend(6.0, "JFK"))
        assert suggestion_source.calls == [(6, "JFK", DESTINATION_COUNT)]

    def test_fewer_candidates_than_requested(self, fare_source, today):
        source = FakeSuggestionSource(payload=json.dumps([{"city": "Paris, France", "iataCode": "CDG"}]))
        results = run(RecommendationPipeline(source, fare_source, today=today).recommend(3, "JFK"))
        assert results == [FlightResult(destination="Paris, France", price=450.0)]

    def test_order_follows_candidates_not_completion(self, suggestion_source, today):
        class SlowFirstFares(FakeFareSource):
            async def search_offers(self, origin, destination, departure_date, adults=1, limit=1):
                if destination == "CDG":
                    await asyncio.sleep(0.05)
                return [offer({"CDG": 900, "HND": 500, "LIM": 100}[destination])]

        results = run(RecommendationPipeline(suggestion_source, SlowFirstFares(), today=today).recommend(5, "JFK"))
        assert [r.price for r in results] == [900.0, 500.0, 100.0]


class TestFatalFailures:
    def test_malformed_payload_fails_without_fare_calls(self, fare_source, today):
        source = FakeSuggestionSource(payload="Here are some ideas: Paris, Tokyo")
        with pytest.raises(RecommendationFailed):
            run(RecommendationPipeline(source, fare_source, today=today).recommend(5, "JFK"))
        assert fare_source.offer_calls == []

    def test_missing_iata_code_is_parse_error(self, fare_source, today):
        source = FakeSuggestionSource(payload=json.dumps([{"city": "Paris, France"}]))
        with pytest.raises(SuggestionParseError):
            run(RecommendationPipeline(source, fare_source, today=today).recommend(5, "JFK"))
        assert fare_source.offer_calls == []

    def test_suggestion_outage(self, suggestion_error, fare_source, today):
        source = FakeSuggestionSource(error=suggestion_error)
        with pytest.raises(RecommendationFailed) as exc_info:
            run(RecommendationPipeline(source, fare_source, today=today).recommend(5, "JFK"))
        assert exc_info.value.cause is suggestion_error
        assert fare_source.offer_calls == []

    @pytest.mark.parametrize("days, departure", [
        (None, "JFK"),
        (0, "JFK"),
        (-2, "JFK"),
        ("abc", "JFK"),
        (5.9, "JFK"),
        ("5.9", "JFK"),
        ([5], "JFK"),
        (5, None),
        (5, 123),
        (5, ""),
        (5, "   "),
    ])
    def test_invalid_input(self, pipeline, suggestion_source, days, departure):
        with pytest.raises(InvalidInput):
            run(pipeline.recommend(days, departure))
        assert suggestion_source.calls == []


class TestParsing:
    def test_strip_fences(self):
        assert strip_fences('```json\n[1]\n```') == "[1]"
        assert strip_fences('```[1]```') == "[1]"
        assert strip_fences(' [1] ') == "[1]"

    def test_parse_candidates(self):
        candidates = parse_candidates('```json [{"city": "Lima, Peru", "iataCode": "LIM"}] ```')
        assert candidates[0].city == "Lima, Peru"
        assert candidates[0].iata_code == "LIM"

    def test_object_instead_of_list(self):
        with pytest.raises(SuggestionParseError):
            parse_candidates('{"city": "Lima, Peru", "iataCode": "LIM"}')

    def test_empty_iata_code(self):
        with pytest.raises(SuggestionParseError):
            parse_candidates('[{"city": "Lima, Peru", "iataCode": ""}]')


class TestDepartureDate:
    def test_add_months(self):
        assert add_months(date(2026, 1, 15), 3) == date(2026, 4, 15)

    def test_add_months_across_year(self):
        assert add_months(date(2026, 11, 2), 3) == date(2027, 2, 2)

    def test_add_months_clamps_day(self):
        assert add_months(date(2026, 11, 30), 3) == date(2027, 2, 28)
        assert add_months(date(2027, 11, 30), 3) == date(2028, 2, 29)
