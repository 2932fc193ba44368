"""
Getters and prediction for fitted regressions.

Every getter is a functools.singledispatch function over the result
container. The frequentist getters forward to the FittedModel handle
and read nothing else; the Bayesian getters read the posterior draws.
Calling a getter on a container it has no implementation for raises
TypeError naming the container.

    >>> model = fitmodel("MPG ~ HP + WT", mtcars, LinearRegression())
    >>> coeftable(model)
    >>> sigma(model)
    >>> predict(model, new_cars)
"""

from functools import singledispatch
from typing import Any

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from pyregression.core.exceptions import UnsupportedLinkError
from pyregression.regression.families import family_for
from pyregression.regression.links import Link
from pyregression.regression.models import ModelClass
from pyregression.regression.solution import (
    BayesianRegression,
    FrequentistRegression,
    PosteriorSamples,
)


def _unsupported(getter: str, result: Any):
    raise TypeError(
        f"{getter}() is not defined for {type(result).__name__}. "
        f"Pass the result of fitmodel()."
    )


# =====================================================================
# Frequentist getters
# =====================================================================

@singledispatch
def coeftable(result: Any) -> pd.DataFrame:
    """Coefficient table: estimate, standard error, t/z statistic, p-value and 95% CI."""
    _unsupported('coeftable', result)


@coeftable.register(FrequentistRegression)
def _(result):
    return result.fitted_model.coef_table()


@singledispatch
def r2(result: Any) -> float:
    """R² for linear models; McFadden's pseudo-R² for GLMs."""
    _unsupported('r2', result)


@r2.register(FrequentistRegression)
def _(result):
    return result.fitted_model.r2


@singledispatch
def adjr2(result: Any) -> float:
    """Adjusted R² for linear models; adjusted McFadden pseudo-R² for GLMs."""
    _unsupported('adjr2', result)


@adjr2.register(FrequentistRegression)
def _(result):
    return result.fitted_model.adjr2


@singledispatch
def loglikelihood(result: Any) -> float:
    _unsupported('loglikelihood', result)


@loglikelihood.register(FrequentistRegression)
def _(result):
    return result.fitted_model.loglikelihood


@singledispatch
def aic(result: Any) -> float:
    _unsupported('aic', result)


@aic.register(FrequentistRegression)
def _(result):
    return result.fitted_model.aic


@singledispatch
def bic(result: Any) -> float:
    _unsupported('bic', result)


@bic.register(FrequentistRegression)
def _(result):
    return result.fitted_model.bic


@singledispatch
def sigma(result: Any) -> float:
    """Residual scale sqrt(deviance / residual df).

    For linear models this is the residual standard error.
    """
    _unsupported('sigma', result)


@sigma.register(FrequentistRegression)
def _(result):
    fit = result.fitted_model
    return float(np.sqrt(fit.deviance / fit.df_residual))


@singledispatch
def residuals(result: Any) -> NDArray[np.floating[Any]]:
    """Response-scale residuals y - μ̂."""
    _unsupported('residuals', result)


@residuals.register(FrequentistRegression)
def _(result):
    return result.fitted_model.residuals


@singledispatch
def cooksdistance(result: Any) -> NDArray[np.floating[Any]]:
    """Cook's distance for each observation."""
    _unsupported('cooksdistance', result)


@cooksdistance.register(FrequentistRegression)
def _(result):
    return result.fitted_model.cooks_distance()


@singledispatch
def fitted(result: Any) -> NDArray[np.floating[Any]]:
    """Fitted mean μ̂ on the response scale."""
    _unsupported('fitted', result)


@fitted.register(FrequentistRegression)
def _(result):
    return result.fitted_model.fitted_values


# =====================================================================
# Bayesian getters
# =====================================================================

@singledispatch
def posterior(result: Any) -> PosteriorSamples:
    """Posterior draws of a Bayesian fit."""
    _unsupported('posterior', result)


@posterior.register(BayesianRegression)
def _(result):
    return result.samples


@singledispatch
def posterior_summary(result: Any, prob: float = 0.9) -> pd.DataFrame:
    """
    Per-parameter posterior summary.

    One row per scalar parameter with mean, std, median, the bounds of
    the central `prob` interval (5% and 95% by default), effective sample
    size and R-hat.
    """
    _unsupported('posterior_summary', result)


@posterior_summary.register(BayesianRegression)
def _(result, prob=0.9):
    return result.samples.summary(result.coefficient_names, prob=prob)


# =====================================================================
# Prediction
# =====================================================================

def _check_link(model_class: ModelClass, link: Link) -> Link:
    family = family_for(model_class)
    if not family.supports_link(link):
        raise UnsupportedLinkError(
            f"{model_class.name} cannot predict with link {link.name!r}",
            model_class=model_class.name,
            link=link.name,
        )
    return link


@singledispatch
def predict(result: Any, new_data: pd.DataFrame | None = None, **kwargs) -> NDArray[np.floating[Any]]:
    """
    Predicted mean response.

    The predictors in new_data are expanded with the same formula
    terms (column order, categorical levels) the model was fitted with,
    then mapped to the response scale through the model's inverse link.

    Args:
        result: A fitted regression
        new_data: DataFrame with the predictor columns. For frequentist
            fits None returns the fitted values on the training data;
            Bayesian fits keep no training data and require it.
        summary: Bayesian only. Posterior point estimate plugged into the
            linear predictor, 'mean' (default) or 'median'.

    Returns:
        Predicted means, one per row of new_data

    Raises:
        SchemaError: If new_data lacks a predictor column
        UnsupportedLinkError: If the result's link is not one its model
            class can invert
    """
    _unsupported('predict', result)


@predict.register(FrequentistRegression)
def _(result, new_data=None):
    link = _check_link(result.model_class, result.link)
    if new_data is None:
        return result.fitted_model.fitted_values

    X = result.schema.matrix(new_data)
    eta = X @ result.coefficients
    return np.asarray(link.linkinv(eta), dtype=np.float64)


@predict.register(BayesianRegression)
def _(result, new_data=None, *, summary='mean'):
    link = _check_link(result.model_class, result.link)
    if new_data is None:
        raise TypeError(
            "predict() on a Bayesian fit requires new_data: the result keeps "
            "no copy of the training data"
        )

    alpha, beta = result.samples.point_estimate(summary)
    X = result.schema.matrix(new_data)
    eta = alpha + X @ beta
    return np.asarray(link.linkinv(eta), dtype=np.float64)
