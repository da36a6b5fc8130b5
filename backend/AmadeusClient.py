import asyncio
import logging
import time
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import httpx

from errors import FareSourceError

logger = logging.getLogger(__name__)

TOKEN_EXPIRY_MARGIN_SECONDS = 60


def _error_description(response: httpx.Response) -> str:
    try:
        errors = response.json().get("errors") or []
    except ValueError:
        errors = []
    details = [e.get("detail") or e.get("title") for e in errors if isinstance(e, dict)]
    details = [d for d in details if d]
    if details:
        return "; ".join(details)
    return f"HTTP {response.status_code}"


class AmadeusClient:
    """Flight offers and location reference data from the Amadeus Self-Service API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        base: str = "https://test.api.amadeus.com",
        timeout: float = 30.0,
    ):
        self._client = client
        self._client_id = client_id
        self._client_secret = client_secret
        self._base = base.rstrip("/")
        self._timeout = timeout
        self._token: Optional[str] = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()  # stops concurrent requests fetching duplicate tokens

    async def _get_token(self) -> str:
        try:
            r = await self._client.post(
                f"{self._base}/v1/security/oauth2/token",
                data={
                    "grant_type": "client_credentials",
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise FareSourceError("Amadeus token request failed", description=str(e), cause=e)
        if r.status_code >= 400:
            raise FareSourceError(
                "Amadeus token request rejected",
                description=_error_description(r),
                status_code=r.status_code,
            )
        data = r.json()
        self._token_expires_at = time.time() + data.get("expires_in", 1799) - TOKEN_EXPIRY_MARGIN_SECONDS
        logger.info("Amadeus token refreshed")
        return data["access_token"]

    def _token_valid(self) -> bool:
        return self._token is not None and time.time() < self._token_expires_at

    async def ensure_token(self) -> str:
        if self._token_valid():
            return self._token
        async with self._token_lock:
            if not self._token_valid():  # check again once we hold the lock
                self._token = await self._get_token()
        return self._token

    async def _get(self, path: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        token = await self.ensure_token()
        try:
            r = await self._client.get(
                f"{self._base}{path}",
                params=params,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise FareSourceError(f"Amadeus request to {path} failed", description=str(e), cause=e)

        if r.status_code >= 400:
            if r.status_code == 401:
                # token revoked or expired early, fetch a new one next time
                self._token = None
            raise FareSourceError(
                f"Amadeus request to {path} returned {r.status_code}",
                description=_error_description(r),
                status_code=r.status_code,
            )
        return r.json().get("data", [])

    async def search_offers(
        self,
        origin: str,
        destination: str,
        departure_date: date,
        adults: int = 1,
        limit: int = 1,
    ) -> List[Dict[str, Any]]:
        params = {
            "originLocationCode": origin,
            "destinationLocationCode": destination,
            "departureDate": departure_date.isoformat(),
            "adults": adults,
            "max": limit,
        }
        return await self._get("/v2/shopping/flight-offers", params)

    async def search_locations(
        self,
        keyword: str,
        subtypes: Sequence[str] = ("AIRPORT", "CITY"),
        limit: int = 15,
    ) -> List[Dict[str, Any]]:
        params = {
            "keyword": keyword,
            "subType": ",".join(subtypes),
            "page[limit]": limit,
        }
        return await self._get("/v1/reference-data/locations", params)
