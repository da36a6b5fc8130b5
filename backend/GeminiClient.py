import logging

import httpx

from errors import SuggestionSourceError

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """
Suggest {count} diverse and interesting international flight destinations for a trip of {days} days, departing from {departure}.

Provide the response as a valid JSON array of objects. Each object must have a "city" (string) and "iataCode" (string) key. The "iataCode" must be the main airport code for that city.

Do not include any other text or formatting outside of the JSON array.

Make sure the destinations are geographically diverse.

Example format:
[
    {{ "city": "Paris, France", "iataCode": "CDG" }},
    {{ "city": "Tokyo, Japan", "iataCode": "HND" }}
]
"""


def build_prompt(trip_length_days: int, departure_code: str, count: int) -> str:
    return PROMPT_TEMPLATE.format(count=count, days=trip_length_days, departure=departure_code)


class GeminiClient:
    """Destination ideas from the Gemini generateContent REST endpoint."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        model: str = "gemini-2.0-flash",
        base: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 30.0,
    ):
        self._client = client
        self._api_key = api_key
        self._model = model
        self._base = base.rstrip("/")
        self._timeout = timeout

    async def suggest(self, trip_length_days: int, departure_code: str, count: int) -> str:
        payload = {
            "contents": [{"parts": [{"text": build_prompt(trip_length_days, departure_code, count)}]}],
        }
        try:
            r = await self._client.post(
                f"{self._base}/models/{self._model}:generateContent",
                params={"key": self._api_key},
                json=payload,
                timeout=self._timeout,
            )
            r.raise_for_status()
        except httpx.HTTPError as e:
            raise SuggestionSourceError("Gemini request failed", cause=e)

        try:
            parts = r.json()["candidates"][0]["content"]["parts"]
            text = "".join(p.get("text", "") for p in parts)
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            raise SuggestionSourceError("Gemini response has no candidates", cause=e)
        if not text.strip():
            raise SuggestionSourceError("Gemini returned an empty response")

        logger.debug("Gemini raw response: %s", text)
        return text
