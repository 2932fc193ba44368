"""
Prior specifications for the Bayesian path.

A Prior tag names the distribution family placed on the intercept and on
every regression coefficient. Inside a model program the scale of that
distribution is a random variable λ ~ InverseGamma(h, h); the prior tag
decides only the shape of the coefficient distribution given λ.

Supplying any Prior to fitmodel() selects the Bayesian path.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpyro
import numpyro.distributions as dist

from pyregression.core.validation import check_positive


@dataclass(frozen=True)
class Prior(ABC):
    """Base class for coefficient priors.

    Attributes:
        h: Hyperparameter of the InverseGamma(h, h) scale hyperprior.
            None defers to the per-model default chosen by fitmodel().
    """
    h: float | None = None

    def __post_init__(self) -> None:
        if self.h is not None:
            check_positive(self.h, 'h')

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def distribution(self, scale, h: float) -> dist.Distribution:
        """Coefficient distribution given the scale λ.

        Called inside a model program, so it may declare sample sites of
        its own (e.g. a degrees-of-freedom hyperprior).
        """
        ...

    def sample_coefficients(self, scale, h: float, p: int):
        """Declare intercept and coefficient sites; return (alpha, beta)."""
        d = self.distribution(scale, h)
        alpha = numpyro.sample("alpha", d)
        beta = numpyro.sample("beta", d.expand([p]).to_event(1))
        return alpha, beta


@dataclass(frozen=True)
class Ridge(Prior):
    """Normal(0, λ) prior."""

    @property
    def name(self) -> str:
        return 'ridge'

    def distribution(self, scale, h):
        return dist.Normal(0.0, scale)


@dataclass(frozen=True)
class Laplace(Prior):
    """Laplace(0, λ) prior."""

    @property
    def name(self) -> str:
        return 'laplace'

    def distribution(self, scale, h):
        return dist.Laplace(0.0, scale)


@dataclass(frozen=True)
class Cauchy(Prior):
    """Location-scale Student-t with one degree of freedom, scale λ."""

    @property
    def name(self) -> str:
        return 'cauchy'

    def distribution(self, scale, h):
        return dist.StudentT(1.0, 0.0, scale)


@dataclass(frozen=True)
class StudentT(Prior):
    """Location-scale Student-t(ν) prior with scale λ.

    Attributes:
        df: Fixed degrees of freedom. When None, ν ~ InverseGamma(h, h)
            is sampled alongside the coefficients.
    """
    df: float | None = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.df is not None:
            check_positive(self.df, 'df')

    @property
    def name(self) -> str:
        return 'student_t'

    def distribution(self, scale, h):
        if self.df is None:
            nu = numpyro.sample("nu", dist.InverseGamma(h, h))
        else:
            nu = self.df
        return dist.StudentT(nu, 0.0, scale)


@dataclass(frozen=True)
class Uniform(Prior):
    """Uniform(-λ, λ) prior.

    Sampled as λ·u with u ~ Uniform(-1, 1) so the sampler never sees a
    support that moves with λ; alpha and beta are recorded as
    deterministic sites.
    """

    @property
    def name(self) -> str:
        return 'uniform'

    def distribution(self, scale, h):
        return dist.Uniform(-scale, scale)

    def sample_coefficients(self, scale, h, p):
        unit = self.distribution(1.0, h)
        u_alpha = numpyro.sample("u_alpha", unit)
        u_beta = numpyro.sample("u_beta", unit.expand([p]).to_event(1))
        alpha = numpyro.deterministic("alpha", scale * u_alpha)
        beta = numpyro.deterministic("beta", scale * u_beta)
        return alpha, beta
