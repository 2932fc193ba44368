"""
Model-class tags.

A model-class tag names the regression family requested from fitmodel().
Tags carry no data; they are compared by type and used as the first key
of the dispatch registry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class ModelClass(ABC):
    """Base class for regression family tags."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def details(self) -> str:
        """Human-readable description of the regression method."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


@dataclass(frozen=True, repr=False)
class LinearRegression(ModelClass):

    @property
    def name(self) -> str:
        return 'LinearRegression'

    def details(self) -> str:
        return (
            "Linear regression: Gaussian response with identity link.\n"
            "Frequentist fits use ordinary least squares (statsmodels OLS); "
            "Bayesian fits add a noise scale sigma ~ InverseGamma(0.1, 0.1) "
            "and sample with NUTS."
        )


@dataclass(frozen=True, repr=False)
class LogisticRegression(ModelClass):
    """Binary response. Requires one of Logit, Probit, Cauchit, Cloglog."""

    @property
    def name(self) -> str:
        return 'LogisticRegression'

    def details(self) -> str:
        return (
            "Logistic regression: Bernoulli response; the link is chosen by "
            "the caller (Logit, Probit, Cauchit or Cloglog).\n"
            "Frequentist fits use IRLS (statsmodels GLM, Binomial family); "
            "Bayesian fits sample with NUTS."
        )


@dataclass(frozen=True, repr=False)
class PoissonRegression(ModelClass):

    @property
    def name(self) -> str:
        return 'PoissonRegression'

    def details(self) -> str:
        return (
            "Poisson regression: count response with log link.\n"
            "Frequentist fits use IRLS (statsmodels GLM, Poisson family); "
            "Bayesian fits sample with NUTS."
        )


@dataclass(frozen=True, repr=False)
class NegBinomRegression(ModelClass):

    @property
    def name(self) -> str:
        return 'NegBinomRegression'

    def details(self) -> str:
        return (
            "Negative binomial regression: overdispersed count response with "
            "log link.\nFrequentist fits estimate the NB2 dispersion by maximum "
            "likelihood, then refit with statsmodels GLM; Bayesian fits use the "
            "scale hyperparameter as the concentration and sample with NUTS."
        )
