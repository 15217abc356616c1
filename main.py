import logging
from datetime import datetime
from functools import partial
from typing import List, Optional

from fastapi import FastAPI, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

import service
from config import Settings, configure_logging
from db import Database
from errors import NotFound, SourceUnavailable
from estimator import GdpEstimator
from refresh import RefreshOrchestrator
from repository import CountryRepository, MetaStore
from summary import format_timestamp

logger = logging.getLogger(__name__)


class CountryOut(BaseModel):
    id: int
    name: str
    capital: Optional[str]
    region: Optional[str]
    population: int
    currency_code: Optional[str]
    exchange_rate: Optional[float]
    estimated_gdp: Optional[float]
    flag_url: Optional[str]
    last_refreshed_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)


def get_db(request: Request):
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Build a simple field -> message map from validation errors
    details = {}
    for err in exc.errors():
        loc = err.get("loc", [])
        # prefer the last location token as the field name
        field = loc[-1] if loc else "body"
        details[str(field)] = err.get("msg")
    return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})


async def source_unavailable_handler(request: Request, exc: SourceUnavailable):
    return JSONResponse(
        status_code=503,
        content={"error": "External data source unavailable", "details": exc.details},
    )


async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"error": exc.error})


async def internal_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def refresh_countries(request: Request):
    result = request.app.state.orchestrator.refresh()
    return {
        "message": "Countries refreshed successfully",
        "last_refreshed_at": format_timestamp(result.last_refreshed_at),
    }


def list_countries(
    region: Optional[str] = Query(None),
    currency: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return CountryRepository(db).list_all(region=region, currency=currency, sort=sort)


def get_image(db: Session = Depends(get_db)):
    meta = MetaStore(db).get()
    if meta is None or not meta.summary_svg:
        raise NotFound("Summary image not found")
    return Response(content=meta.summary_svg, media_type="image/svg+xml")


def get_country(name: str, db: Session = Depends(get_db)):
    c = CountryRepository(db).get_by_name(name)
    if not c:
        raise NotFound()
    return c


def delete_country(name: str, db: Session = Depends(get_db)):
    deleted = CountryRepository(db).delete_by_name(name)
    if not deleted:
        raise NotFound()
    db.commit()
    return {"message": f"Deleted {name} successfully"}


def status(db: Session = Depends(get_db)):
    meta = MetaStore(db).get()
    if meta is None:
        return {"total_countries": CountryRepository(db).count(), "last_refreshed_at": None}
    return {
        "total_countries": meta.total_countries,
        "last_refreshed_at": format_timestamp(meta.last_refreshed_at),
    }


def create_app(
    settings: Optional[Settings] = None,
    fetcher=None,
    estimator: Optional[GdpEstimator] = None,
) -> FastAPI:
    """Build the API around one explicitly owned database.

    ``fetcher`` returns (countries, rates); it defaults to the live sources
    from ``settings``.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    database = Database(settings.database_url)
    # initialize DB (creates tables if missing)
    database.init_db()

    if fetcher is None:
        fetcher = partial(
            service.fetch_sources,
            settings.countries_api_url,
            settings.exchange_rate_api_url,
            settings.http_timeout,
        )

    app = FastAPI(title="Country GDP Cache")
    app.state.settings = settings
    app.state.database = database
    app.state.orchestrator = RefreshOrchestrator(database, fetcher, estimator)

    # CORS open to all origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SourceUnavailable, source_unavailable_handler)
    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(Exception, internal_exception_handler)

    # /countries/image must be registered before /countries/{name}
    app.add_api_route("/countries/refresh", refresh_countries, methods=["POST"])
    app.add_api_route("/countries", list_countries, methods=["GET"], response_model=List[CountryOut])
    app.add_api_route("/countries/image", get_image, methods=["GET"])
    app.add_api_route("/countries/{name}", get_country, methods=["GET"], response_model=CountryOut)
    app.add_api_route("/countries/{name}", delete_country, methods=["DELETE"])
    app.add_api_route("/status", status, methods=["GET"])
    return app
