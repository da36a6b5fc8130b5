from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Amadeus
    amadeus_client_id: str = ""
    amadeus_client_secret: str = ""
    amadeus_base_url: str = "https://test.api.amadeus.com"  # or https://api.amadeus.com for prod

    # Gemini
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    http_timeout_seconds: float = 30.0

    # Autocomplete cache
    lookup_cache_ttl_seconds: int = 24 * 60 * 60
    cache_cleanup_interval_seconds: int = 60 * 60

    # Rate limiting for /api/ routes
    rate_limit_max_requests: int = 100
    rate_limit_window_seconds: int = 15 * 60

    cors_origins: str = "*"

    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    port: int = 3000

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
