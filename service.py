import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Tuple

import requests

from config import COUNTRIES_API, EXCHANGE_RATE_API
from errors import SourceUnavailable

logger = logging.getLogger(__name__)


def _get(url: str, timeout: float) -> Tuple[bool, object]:
    """GET ``url``. Returns (success, response) where success is False when the
    request failed, timed out, or answered with a non-2xx status.

    The body is not decoded here: a malformed payload is an internal error,
    not an unavailable source.
    """
    try:
        r = requests.get(url, timeout=timeout)
        r.raise_for_status()
        return True, r
    except requests.RequestException as e:
        logger.warning("Request to %s failed: %s", url, e)
        return False, {"error": str(e)}


def fetch_countries(url: str = COUNTRIES_API, timeout: float = 10) -> Tuple[bool, object]:
    """Fetches countries from the external API.

    Returns (success, response) where success is False when request failed.
    """
    return _get(url, timeout)


def fetch_exchange_rates(url: str = EXCHANGE_RATE_API, timeout: float = 10) -> Tuple[bool, object]:
    return _get(url, timeout)


def fetch_sources(
    countries_url: str = COUNTRIES_API,
    rates_url: str = EXCHANGE_RATE_API,
    timeout: float = 10,
) -> Tuple[list, dict]:
    """Fetch the country list and the rate table concurrently.

    Returns (countries, rates) where rates maps currency code -> rate.
    Raises SourceUnavailable if either source fails; ValueError if a payload
    does not have the expected shape. Bodies are only decoded once both
    sources answered successfully.
    """
    with ThreadPoolExecutor(max_workers=2) as pool:
        countries_future = pool.submit(fetch_countries, countries_url, timeout)
        rates_future = pool.submit(fetch_exchange_rates, rates_url, timeout)
        ok_c, countries_resp = countries_future.result()
        ok_r, rates_resp = rates_future.result()

    if not ok_c:
        raise SourceUnavailable("Could not fetch data from Countries API")
    if not ok_r:
        raise SourceUnavailable("Could not fetch data from Exchange Rates API")

    countries_data = countries_resp.json()
    rates_data = rates_resp.json()
    if not isinstance(countries_data, list):
        raise ValueError("Countries payload invalid")
    rates = rates_data.get("rates") if isinstance(rates_data, dict) else None
    if not isinstance(rates, dict):
        raise ValueError("Exchange rates payload invalid")
    return countries_data, rates
