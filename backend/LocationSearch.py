import logging
from typing import Any, Dict, List

from errors import FareSourceError, InvalidInput, LookupFailed
from LookupCache import LookupCache
from sources import FareSource

logger = logging.getLogger(__name__)

LOCATION_SUBTYPES = ("AIRPORT", "CITY")
LOCATION_LIMIT = 15


class LocationSearch:
    """Airport/city autocomplete backed by the fare source, cached per keyword."""

    def __init__(self, fare_source: FareSource, cache: LookupCache):
        self.fare_source = fare_source
        self.cache = cache

    async def search_locations(self, keyword: Any) -> List[Dict[str, Any]]:
        if not isinstance(keyword, str) or not keyword.strip():
            raise InvalidInput("Keyword is required")

        cache_key = keyword.upper()
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("Cache HIT for keyword: %s", cache_key)
            return cached
        logger.info("Cache MISS for keyword: %s", cache_key)

        try:
            locations = await self.fare_source.search_locations(
                cache_key, subtypes=LOCATION_SUBTYPES, limit=LOCATION_LIMIT
            )
        except FareSourceError as e:
            raise LookupFailed("Failed to fetch airport data", detail=e.description, cause=e)
        except Exception as e:
            raise LookupFailed("Failed to fetch airport data", detail=str(e), cause=e)

        self.cache.put(cache_key, locations)
        return locations
