import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

COUNTRIES_API = "https://restcountries.com/v2/all?fields=name,capital,region,population,flag,currencies"
EXCHANGE_RATE_API = "https://open.er-api.com/v6/latest/USD"

# fallback to a local sqlite for development if not configured
DEFAULT_DATABASE_URL = "sqlite:///./local.db"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    countries_api_url: str = COUNTRIES_API
    exchange_rate_api_url: str = EXCHANGE_RATE_API
    http_timeout: float = 10.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment, reading `.env` first."""
        load_dotenv()
        return cls(
            database_url=os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL,
            countries_api_url=os.getenv("COUNTRIES_API_URL") or COUNTRIES_API,
            exchange_rate_api_url=os.getenv("EXCHANGE_RATE_API_URL") or EXCHANGE_RATE_API,
            http_timeout=float(os.getenv("HTTP_TIMEOUT") or 10.0),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
