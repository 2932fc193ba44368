"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np
import pandas as pd

from pyregression.core.config import SamplerConfig


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def linear_data(rng):
    """y = 1 + 2*x1 - 0.5*x2 + small noise."""
    n = 80
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    y = 1.0 + 2.0 * x1 - 0.5 * x2 + rng.standard_normal(n) * 0.3
    return pd.DataFrame({'y': y, 'x1': x1, 'x2': x2})


@pytest.fixture
def grouped_linear_data(rng):
    """Linear data with a three-level categorical predictor."""
    n = 90
    group = np.repeat(['a', 'b', 'c'], n // 3)
    x = rng.standard_normal(n)
    shift = pd.Series(group).map({'a': 0.0, 'b': 1.5, 'c': -1.0}).to_numpy()
    y = 0.5 + x + shift + rng.standard_normal(n) * 0.2
    return pd.DataFrame({'y': y, 'x': x, 'group': group})


@pytest.fixture
def binary_data(rng):
    """Bernoulli response with logit-linear probability."""
    n = 300
    age = rng.uniform(-2, 2, n)
    income = rng.standard_normal(n)
    eta = -0.3 + 1.2 * age - 0.8 * income
    vote = (rng.uniform(size=n) < 1.0 / (1.0 + np.exp(-eta))).astype(float)
    return pd.DataFrame({'vote': vote, 'age': age, 'income': income})


@pytest.fixture
def count_data(rng):
    """Poisson counts with log-linear mean."""
    n = 200
    x1 = rng.uniform(-1, 1, n)
    x2 = rng.uniform(-1, 1, n)
    mu = np.exp(0.7 + 0.5 * x1 - 0.4 * x2)
    return pd.DataFrame({'num': rng.poisson(mu).astype(float), 'x1': x1, 'x2': x2})


@pytest.fixture
def overdispersed_count_data(rng):
    """Gamma-Poisson (NB2) counts with dispersion alpha = 0.5."""
    n = 300
    x = rng.uniform(-1, 1, n)
    mu = np.exp(1.0 + 0.6 * x)
    alpha = 0.5
    lam = rng.gamma(shape=1.0 / alpha, scale=mu * alpha)
    return pd.DataFrame({'num': rng.poisson(lam).astype(float), 'x': x})


@pytest.fixture
def fast_sampler():
    """Short warmup so Bayesian tests stay quick."""
    return SamplerConfig(num_warmup=200)
