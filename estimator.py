import random
from collections import namedtuple
from typing import Mapping, Optional

MULTIPLIER_MIN = 1000
MULTIPLIER_MAX = 2000

Estimate = namedtuple("Estimate", ["exchange_rate", "estimated_gdp"])


def lookup_rate(currency_code: Optional[str], rates: Mapping) -> Optional[float]:
    """Return the usable rate for ``currency_code`` or None.

    Zero, negative and non-numeric rates count as unknown.
    """
    if not currency_code or currency_code not in rates:
        return None
    try:
        rate = float(rates[currency_code])
    except (TypeError, ValueError):
        return None
    if rate <= 0:
        return None
    return rate


class GdpEstimator:
    """Strategy turning a population and its currency's rate into an estimated GDP.

    Subclasses choose the multiplier; everything else is shared.
    """

    def multiplier(self) -> float:
        raise NotImplementedError

    def estimate(self, population: int, currency_code: Optional[str], rates: Mapping) -> Estimate:
        rate = lookup_rate(currency_code, rates)
        if rate is None:
            return Estimate(None, 0)
        return Estimate(rate, population * self.multiplier() / rate)


class RandomMultiplierEstimator(GdpEstimator):
    """Draws a fresh integer multiplier in [low, high] for every estimate."""

    def __init__(self, low: int = MULTIPLIER_MIN, high: int = MULTIPLIER_MAX, rng: Optional[random.Random] = None):
        if low > high:
            raise ValueError("low must not exceed high")
        self.low = low
        self.high = high
        self.rng = rng or random.Random()

    def multiplier(self) -> float:
        return self.rng.randint(self.low, self.high)


class FixedMultiplierEstimator(GdpEstimator):
    def __init__(self, multiplier: float):
        self._multiplier = multiplier

    def multiplier(self) -> float:
        return self._multiplier
