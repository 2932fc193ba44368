"""
PyRegression: formula-driven frequentist and Bayesian regression.

Linear, logistic, Poisson and negative binomial models behind a single
fitmodel() entry point. Without a prior, models are fitted by maximum
likelihood with statsmodels; with a prior tag, by NUTS sampling with
numpyro.

Submodules:
    regression: Model tags, fitmodel(), result containers and getters
    core: Exceptions, Result envelope, configuration, random key streams
"""

import logging

__version__ = "0.1.0"

# Library logging stays silent unless the application configures it
logging.getLogger("pyregression").addHandler(logging.NullHandler())

from pyregression import regression
from pyregression.core import (
    KeyStream,
    SolverConfig,
    SamplerConfig,
    PyRegressionError,
    ValidationError,
    SchemaError,
    DispatchError,
    UnsupportedLinkError,
    NumericalError,
    FitError,
    SamplerError,
)
from pyregression.core.log import setup_logging
from pyregression.regression import (
    fitmodel,
    LinearRegression,
    LogisticRegression,
    PoissonRegression,
    NegBinomRegression,
    Logit,
    Probit,
    Cauchit,
    Cloglog,
    Ridge,
    Laplace,
    Cauchy,
    StudentT,
    Uniform,
    FrequentistRegression,
    BayesianRegression,
    PosteriorSamples,
    coeftable,
    r2,
    adjr2,
    loglikelihood,
    aic,
    bic,
    sigma,
    residuals,
    cooksdistance,
    fitted,
    predict,
    posterior,
    posterior_summary,
)

__all__ = [
    "__version__",
    "regression",
    "setup_logging",
    "fitmodel",
    "KeyStream",
    "SolverConfig",
    "SamplerConfig",
    # Model classes
    "LinearRegression",
    "LogisticRegression",
    "PoissonRegression",
    "NegBinomRegression",
    # Links
    "Logit",
    "Probit",
    "Cauchit",
    "Cloglog",
    # Priors
    "Ridge",
    "Laplace",
    "Cauchy",
    "StudentT",
    "Uniform",
    # Results
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
    # Exceptions
    "PyRegressionError",
    "ValidationError",
    "SchemaError",
    "DispatchError",
    "UnsupportedLinkError",
    "NumericalError",
    "FitError",
    "SamplerError",
]
