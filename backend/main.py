from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn
import httpx
import asyncio
import logging
from typing import Optional

from AmadeusClient import AmadeusClient
from config import settings
from data.FlightSearchQuery import FlightSearchQuery
from errors import InvalidInput, LookupFailed, RecommendationFailed
from GeminiClient import GeminiClient
from LocationSearch import LocationSearch
from LookupCache import LookupCache
from RateLimiter import RateLimiter
from RecommendationPipeline import RecommendationPipeline

logging.basicConfig(level=settings.log_level, format=settings.log_format)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup Logic ---
    http_client = httpx.AsyncClient()
    lookup_cache = LookupCache(ttl_seconds=settings.lookup_cache_ttl_seconds)
    amadeus = AmadeusClient(
        http_client,
        settings.amadeus_client_id,
        settings.amadeus_client_secret,
        base=settings.amadeus_base_url,
        timeout=settings.http_timeout_seconds,
    )
    gemini = GeminiClient(
        http_client,
        settings.gemini_api_key,
        model=settings.gemini_model,
        base=settings.gemini_base_url,
        timeout=settings.http_timeout_seconds,
    )
    app.state.lookup_cache = lookup_cache
    app.state.pipeline = RecommendationPipeline(gemini, amadeus)
    app.state.location_search = LocationSearch(amadeus, lookup_cache)

    # Start the background cleanup task
    cleanup_task = asyncio.create_task(cache_cleaner(lookup_cache))
    logger.info("Background cache cleaner started.")

    yield  # The app runs while this is yielded

    # --- Shutdown Logic ---
    cleanup_task.cancel()
    try:
        await cleanup_task
    except asyncio.CancelledError:
        logger.info("Background cache cleaner stopped.")
    await http_client.aclose()


app = FastAPI(title="Destination Finder", lifespan=lifespan)

rate_limiter = RateLimiter(settings.rate_limit_max_requests, settings.rate_limit_window_seconds)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def limit_api_requests(request: Request, call_next):
    if not request.url.path.startswith("/api/"):
        return await call_next(request)

    client = request.client.host if request.client else "unknown"
    decision = rate_limiter.check(client)
    headers = {
        "RateLimit-Limit": str(decision.limit),
        "RateLimit-Remaining": str(decision.remaining),
        "RateLimit-Reset": str(decision.reset_seconds),
    }
    if not decision.allowed:
        logger.warning("Rate limit exceeded for %s", client)
        return JSONResponse(
            status_code=429,
            content={"error": "Too many requests from this IP, please try again after 15 minutes"},
            headers=headers,
        )

    response = await call_next(request)
    response.headers.update(headers)
    return response


def get_pipeline(request: Request) -> RecommendationPipeline:
    return request.app.state.pipeline


def get_location_search(request: Request) -> LocationSearch:
    return request.app.state.location_search


@app.get("/status")
async def get_status():
    """Validates the backend is running."""
    return {
        "status": "online",
        "service": "destination-finder-backend",
        "version": "1.0.0"
    }


@app.post("/api/search-flights")
async def search_flights(
    query: FlightSearchQuery,
    pipeline: RecommendationPipeline = Depends(get_pipeline),
):
    try:
        flights = await pipeline.recommend(query.numberOfDays, query.departureAirport)
    except InvalidInput:
        return JSONResponse(
            status_code=400,
            content={"error": "Number of days and departure airport are required"},
        )
    except RecommendationFailed:
        logger.exception("Error in /api/search-flights")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch flight recommendations. Please check server logs."},
        )

    return {"flights": [f.model_dump() for f in flights]}


@app.get("/api/search-airports")
async def search_airports(
    keyword: Optional[str] = Query(None),
    location_search: LocationSearch = Depends(get_location_search),
):
    try:
        return await location_search.search_locations(keyword)
    except InvalidInput:
        return JSONResponse(status_code=400, content={"error": "Keyword is required"})
    except LookupFailed as e:
        logger.error("Amadeus API Error: %s", e)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch airport data", "amadeusError": e.detail},
        )


async def cache_cleaner(lookup_cache: LookupCache, interval: Optional[float] = None):
    """Run cleanup every hour."""
    interval = interval or settings.cache_cleanup_interval_seconds
    while True:
        try:
            await asyncio.sleep(interval)
            lookup_cache.cleanup()
            rate_limiter.prune()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Error in cache cleaner")


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
