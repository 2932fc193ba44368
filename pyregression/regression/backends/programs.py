"""
Probabilistic model programs for the Bayesian path.

Every Bayesian regression shares one shape:

    λ ~ InverseGamma(h, h)
    α, β ~ prior(scale = λ)          # β has one entry per design column
    z = α + Xβ
    y ~ family likelihood(linkinv(z))

The prior tag fills in the coefficient distribution and the family fills
in the likelihood, so one builder serves every (model class × prior)
combination.
"""

from __future__ import annotations

from typing import Callable

import numpyro
import numpyro.distributions as dist

from pyregression.regression.families import Family
from pyregression.regression.links import Link
from pyregression.regression.priors import Prior

SCALE_SITE = "lambda"
INTERCEPT_SITE = "alpha"
COEFFICIENT_SITE = "beta"


def regression_program(
    family: Family,
    prior: Prior,
    link: Link,
    h: float,
) -> Callable[..., None]:
    """
    Build the numpyro model for one fit.

    Args:
        family: Supplies the observation likelihood
        prior: Supplies the coefficient distribution
        link: Inverse link applied to the linear predictor
        h: InverseGamma(h, h) hyperparameter

    Returns:
        model(X, y=None) suitable for numpyro.infer.NUTS
    """

    def model(X, y=None):
        p = X.shape[1]
        scale = numpyro.sample(SCALE_SITE, dist.InverseGamma(h, h))
        alpha, beta = prior.sample_coefficients(scale, h, p)
        z = alpha + X @ beta
        family.likelihood(y, z, link, scale)

    return model
