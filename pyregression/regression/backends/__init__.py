"""
Regression backends.

Available backends:
    StatsmodelsBackend: frequentist OLS / GLM fits via statsmodels
    NUTSBackend: Bayesian fits via numpyro's No-U-Turn sampler
"""

from pyregression.regression.backends.glm import StatsmodelsBackend, StatsmodelsFit
from pyregression.regression.backends.nuts import NUTSBackend

__all__ = [
    "StatsmodelsBackend",
    "StatsmodelsFit",
    "NUTSBackend",
]
