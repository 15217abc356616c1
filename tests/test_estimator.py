import random

import pytest

from estimator import FixedMultiplierEstimator, RandomMultiplierEstimator, lookup_rate


def test_unknown_currency_gives_zero():
    est = RandomMultiplierEstimator()
    assert est.estimate(1000, "XXX", {"TST": 2}) == (None, 0)
    assert est.estimate(1000, None, {"TST": 2}) == (None, 0)


def test_random_multiplier_within_bounds():
    est = RandomMultiplierEstimator(rng=random.Random(42))
    for _ in range(200):
        rate, gdp = est.estimate(1000, "TST", {"TST": 2})
        assert rate == 2.0
        assert 500_000 <= gdp <= 1_000_000


def test_random_multiplier_is_integer_inclusive_range():
    est = RandomMultiplierEstimator(low=3, high=4, rng=random.Random(0))
    seen = {est.multiplier() for _ in range(100)}
    assert seen == {3, 4}


def test_random_estimator_rejects_inverted_range():
    with pytest.raises(ValueError):
        RandomMultiplierEstimator(low=2000, high=1000)


def test_fixed_multiplier_is_deterministic():
    est = FixedMultiplierEstimator(1500)
    assert est.estimate(1000, "TST", {"TST": 2}) == (2.0, 750_000)
    assert est.estimate(1000, "TST", {"TST": 2}) == est.estimate(1000, "TST", {"TST": 2})


def test_non_positive_or_garbage_rates_are_unknown():
    assert lookup_rate("A", {"A": 0}) is None
    assert lookup_rate("A", {"A": -1.5}) is None
    assert lookup_rate("A", {"A": "abc"}) is None
    assert lookup_rate("A", {"A": None}) is None
    assert lookup_rate("A", {"A": "1.25"}) == 1.25
