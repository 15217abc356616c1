import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Mapping, Optional, Tuple

from db import Database
from estimator import GdpEstimator, RandomMultiplierEstimator
from repository import CountryRepository, MetaStore
from summary import TOP_N, rank_by_gdp, render_summary_svg

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    last_refreshed_at: datetime
    total_countries: int
    processed: int


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def first_currency_code(country: dict) -> Optional[str]:
    currencies = country.get("currencies") or []
    if not currencies:
        return None
    first = currencies[0] or {}
    return first.get("code") or None


def parse_country(country: dict, rates: Mapping, estimator: GdpEstimator, now: datetime) -> dict:
    """Map one raw country from the source onto repository fields."""
    population = country.get("population") or 0
    currency_code = first_currency_code(country)
    exchange_rate, estimated_gdp = estimator.estimate(population, currency_code, rates)
    return {
        "name": country.get("name"),
        "capital": country.get("capital") or None,
        "region": country.get("region") or None,
        "population": population,
        "currency_code": currency_code,
        "exchange_rate": exchange_rate,
        "estimated_gdp": estimated_gdp,
        "flag_url": country.get("flag") or None,
        "last_refreshed_at": now,
    }


class RefreshOrchestrator:
    """Fetches both sources, recomputes every country and regenerates the summary.

    Everything after the fetch runs in one transaction: a failure anywhere
    leaves countries and meta exactly as they were. Two refreshes running at
    the same time are not serialized; each row ends up with whichever write
    commits last.
    """

    def __init__(
        self,
        database: Database,
        fetcher: Callable[[], Tuple[list, dict]],
        estimator: Optional[GdpEstimator] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.database = database
        self.fetcher = fetcher
        self.estimator = estimator or RandomMultiplierEstimator()
        self.clock = clock

    def refresh(self) -> RefreshResult:
        logger.info("Refresh started")
        # raises SourceUnavailable before anything is written
        countries_data, rates = self.fetcher()
        now = self.clock()

        processed = 0
        with self.database.session_scope() as session:
            countries = CountryRepository(session)
            for raw in countries_data:
                data = parse_country(raw, rates, self.estimator, now)
                if not data["name"]:
                    logger.warning("Skipping country without a name: %r", raw)
                    continue
                countries.upsert(data)
                processed += 1
            session.flush()

            rows = countries.list_all()
            total = len(rows)
            svg = render_summary_svg(rank_by_gdp(rows, TOP_N), total, now)
            MetaStore(session).upsert(total, now, svg)

        logger.info("Refresh finished: %d processed, %d stored", processed, total)
        return RefreshResult(last_refreshed_at=now, total_countries=total, processed=processed)
