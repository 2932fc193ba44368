"""
Linear and generalized linear regression, frequentist and Bayesian.

Public API:
    fitmodel(formula, data, model_class, *tags, ...) -> FrequentistRegression
                                                      | BayesianRegression

fitmodel() is the only entry point. It handles:
    - Dispatch on (model class, link, prior)
    - Formula expansion
    - Backend selection (statsmodels or numpyro NUTS)
    - Result wrapping

Example:
    >>> from pyregression.regression import fitmodel, LinearRegression, coeftable
    >>> result = fitmodel("MPG ~ HP + WT + Gear", mtcars, LinearRegression())
    >>> print(coeftable(result))
    >>> print(result.summary())
"""

from pyregression.regression.models import (
    ModelClass,
    LinearRegression,
    LogisticRegression,
    PoissonRegression,
    NegBinomRegression,
)
from pyregression.regression.links import (
    Link, Identity, Logit, Probit, Cauchit, Cloglog, Log, resolve_link,
)
from pyregression.regression.priors import (
    Prior, Ridge, Laplace, Cauchy, StudentT, Uniform,
)
from pyregression.regression.design import FormulaDesign, PredictorSchema
from pyregression.regression.solution import (
    FrequentistRegression,
    BayesianRegression,
    PosteriorSamples,
)
from pyregression.regression.solvers import fitmodel
from pyregression.regression.getters import (
    coeftable, r2, adjr2, loglikelihood, aic, bic, sigma,
    residuals, cooksdistance, fitted, predict,
    posterior, posterior_summary,
)

__all__ = [
    "fitmodel",
    # Model classes
    "ModelClass",
    "LinearRegression",
    "LogisticRegression",
    "PoissonRegression",
    "NegBinomRegression",
    # Links
    "Link",
    "Identity",
    "Logit",
    "Probit",
    "Cauchit",
    "Cloglog",
    "Log",
    "resolve_link",
    # Priors
    "Prior",
    "Ridge",
    "Laplace",
    "Cauchy",
    "StudentT",
    "Uniform",
    # Design and results
    "FormulaDesign",
    "PredictorSchema",
    "FrequentistRegression",
    "BayesianRegression",
    "PosteriorSamples",
    # Getters
    "coeftable",
    "r2",
    "adjr2",
    "loglikelihood",
    "aic",
    "bic",
    "sigma",
    "residuals",
    "cooksdistance",
    "fitted",
    "predict",
    "posterior",
    "posterior_summary",
]
